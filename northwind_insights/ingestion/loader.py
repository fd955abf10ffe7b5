"""
Dataset Loader

Builds a SalesDataset snapshot from external sources.
Supports:
- A directory with one CSV, Parquet or NDJSON file per table
- A classic Northwind SQL database reached through SQLAlchemy
- Writing a snapshot back out as a table directory
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError

from northwind_insights.config import get_settings
from northwind_insights.errors import DatasetLoadError
from .dataset import SalesDataset, TableName

logger = structlog.get_logger(__name__)
settings = get_settings()


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSONL = "jsonl"
    PARQUET = "parquet"


class LoadStatus(str, Enum):
    """Table load status"""
    COMPLETED = "completed"
    MISSING = "missing"
    FAILED = "failed"


class LoadResult(BaseModel):
    """Result of loading one table"""
    table: str
    source: str
    status: LoadStatus
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0


# Classic Northwind schema: PascalCase columns, shipper referenced as ShipVia
NORTHWIND_QUERIES: Dict[TableName, tuple] = {
    TableName.CUSTOMERS: (
        "Customers",
        'SELECT CustomerID AS customer_id, CompanyName AS company_name, Country AS country '
        'FROM "Customers"',
    ),
    TableName.ORDERS: (
        "Orders",
        'SELECT OrderID AS order_id, CustomerID AS customer_id, EmployeeID AS employee_id, '
        'ShipVia AS shipper_id, OrderDate AS order_date FROM "Orders"',
    ),
    TableName.ORDER_LINES: (
        "Order Details",
        'SELECT OrderID AS order_id, ProductID AS product_id, UnitPrice AS unit_price, '
        'Quantity AS quantity, Discount AS discount FROM "Order Details"',
    ),
    TableName.PRODUCTS: (
        "Products",
        'SELECT ProductID AS product_id, ProductName AS product_name, '
        'CategoryID AS category_id, SupplierID AS supplier_id FROM "Products"',
    ),
    TableName.CATEGORIES: (
        "Categories",
        'SELECT CategoryID AS category_id, CategoryName AS category_name FROM "Categories"',
    ),
    TableName.SUPPLIERS: (
        "Suppliers",
        'SELECT SupplierID AS supplier_id, CompanyName AS company_name FROM "Suppliers"',
    ),
    TableName.EMPLOYEES: (
        "Employees",
        'SELECT EmployeeID AS employee_id, FirstName AS first_name, LastName AS last_name '
        'FROM "Employees"',
    ),
    TableName.SHIPPERS: (
        "Shippers",
        'SELECT ShipperID AS shipper_id, CompanyName AS company_name FROM "Shippers"',
    ),
}


class DatasetLoader:
    """
    Loads the eight sales tables into an immutable snapshot.

    Tables that the source does not provide are left absent; reports
    that depend on them fail with MissingTableError.

    Example:
        loader = DatasetLoader()
        dataset = loader.load_directory("data/northwind")
        dataset = loader.load_database("sqlite:///northwind.db")
    """

    def __init__(self, null_values: Optional[List[str]] = None):
        self.null_values = null_values or ["", "NULL", "null", "None", "NA", "N/A"]
        self.results: List[LoadResult] = []

    def _read_csv(self, path: Path) -> pl.DataFrame:
        """Read CSV file with Polars"""
        return pl.read_csv(
            path,
            null_values=self.null_values,
            try_parse_dates=True,
        )

    def _read_jsonl(self, path: Path) -> pl.DataFrame:
        """Read JSON Lines (NDJSON) file"""
        return pl.read_ndjson(path)

    def _read_parquet(self, path: Path) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(path)

    def _read_file(self, path: Path, file_format: FileFormat) -> pl.DataFrame:
        """Read file based on format"""
        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(file_format)
        if not reader:
            raise ValueError(f"Unsupported file format: {file_format}")
        return reader(path)

    def _record(self, result: LoadResult) -> None:
        self.results.append(result)
        if result.status == LoadStatus.COMPLETED:
            logger.info(f"Loaded table {result.table}", rows=result.rows_loaded, source=result.source)
        elif result.status == LoadStatus.MISSING:
            logger.warning(f"Table {result.table} not found", source=result.source)
        else:
            logger.error(f"Failed to load table {result.table}", error=result.error_message)

    def load_directory(
        self,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[Union[str, FileFormat]] = None,
    ) -> SalesDataset:
        """
        Load one file per table from a directory.

        Args:
            directory: Directory holding `<table>.<ext>` files
            file_format: csv, parquet or jsonl

        Returns:
            SalesDataset snapshot

        Raises:
            DatasetLoadError: if the directory is missing or a file is unreadable
        """
        directory = Path(directory or settings.data_source.source_dir)
        file_format = FileFormat(file_format or settings.data_source.file_format)

        if not directory.is_dir():
            raise DatasetLoadError(str(directory), "directory does not exist")

        logger.info(f"Loading dataset from {directory}", format=file_format.value)
        self.results = []
        frames: Dict[str, pl.DataFrame] = {}

        for table in TableName:
            path = directory / f"{table.value}.{file_format.value}"
            started_at = datetime.utcnow()

            if not path.exists():
                self._record(LoadResult(table=table.value, source=str(path), status=LoadStatus.MISSING))
                continue

            try:
                df = self._read_file(path, file_format)
            except (pl.exceptions.PolarsError, OSError) as e:
                self._record(LoadResult(
                    table=table.value,
                    source=str(path),
                    status=LoadStatus.FAILED,
                    error_message=str(e),
                ))
                raise DatasetLoadError(str(path), str(e)) from e

            frames[table.value] = df
            self._record(LoadResult(
                table=table.value,
                source=str(path),
                status=LoadStatus.COMPLETED,
                rows_loaded=len(df),
                load_duration_seconds=(datetime.utcnow() - started_at).total_seconds(),
            ))

        return SalesDataset.from_frames(frames)

    def load_database(self, url: Optional[str] = None) -> SalesDataset:
        """
        Load the classic Northwind schema through SQLAlchemy.

        Args:
            url: SQLAlchemy database URL, e.g. sqlite:///northwind.db

        Returns:
            SalesDataset snapshot

        Raises:
            DatasetLoadError: if the database cannot be queried
        """
        url = url or settings.data_source.database_url
        if not url:
            raise DatasetLoadError("database", "no database URL configured")

        logger.info("Loading dataset from database", url=url)
        self.results = []
        frames: Dict[str, pl.DataFrame] = {}

        try:
            engine = create_engine(url)
        except (SQLAlchemyError, ImportError) as e:
            raise DatasetLoadError(url, str(e)) from e

        try:
            with engine.connect() as conn:
                present = set(inspect(conn).get_table_names())
                for table, (source_table, query) in NORTHWIND_QUERIES.items():
                    started_at = datetime.utcnow()
                    if source_table not in present:
                        self._record(LoadResult(table=table.value, source=source_table, status=LoadStatus.MISSING))
                        continue

                    df = pl.read_database(query, connection=conn, infer_schema_length=None)
                    frames[table.value] = df
                    self._record(LoadResult(
                        table=table.value,
                        source=source_table,
                        status=LoadStatus.COMPLETED,
                        rows_loaded=len(df),
                        load_duration_seconds=(datetime.utcnow() - started_at).total_seconds(),
                    ))
        except SQLAlchemyError as e:
            raise DatasetLoadError(url, str(e)) from e
        finally:
            engine.dispose()

        return SalesDataset.from_frames(frames)

    def write_directory(
        self,
        dataset: SalesDataset,
        directory: Union[str, Path],
        file_format: Union[str, FileFormat] = FileFormat.CSV,
    ) -> List[Path]:
        """Write every present table of a snapshot as `<table>.<ext>`"""
        directory = Path(directory)
        file_format = FileFormat(file_format)
        directory.mkdir(parents=True, exist_ok=True)

        written = []
        for name in dataset.available_tables():
            df = dataset.get(name)
            path = directory / f"{name}.{file_format.value}"
            if file_format == FileFormat.CSV:
                df.write_csv(path)
            elif file_format == FileFormat.PARQUET:
                df.write_parquet(path)
            else:
                df.write_ndjson(path)
            logger.info(f"Written {len(df)} rows to {path}")
            written.append(path)

        return written


def load_dataset(
    source_dir: Optional[str] = None,
    database_url: Optional[str] = None,
    file_format: Optional[str] = None,
) -> SalesDataset:
    """Load from a database URL when one is given or configured, else from a directory"""
    loader = DatasetLoader()
    url = database_url or (None if source_dir else settings.data_source.database_url)
    if url:
        return loader.load_database(url)
    return loader.load_directory(source_dir, file_format)
