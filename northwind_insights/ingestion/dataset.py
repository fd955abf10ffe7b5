"""
Sales Dataset Snapshot

Immutable in-memory container for the eight Northwind tables. Loaders build
it with `SalesDataset.from_frames`, which selects the known columns and
normalises column types so every report sees the same schema regardless of
where the data came from.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, List, Optional

import polars as pl
import structlog

from northwind_insights.errors import DatasetLoadError, MissingTableError

logger = structlog.get_logger(__name__)


class TableName(str, Enum):
    """Tables of the sales dataset"""
    CUSTOMERS = "customers"
    ORDERS = "orders"
    ORDER_LINES = "order_lines"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    SUPPLIERS = "suppliers"
    EMPLOYEES = "employees"
    SHIPPERS = "shippers"


TABLE_COLUMNS: Dict[TableName, List[str]] = {
    TableName.CUSTOMERS: ["customer_id", "company_name", "country"],
    TableName.ORDERS: ["order_id", "customer_id", "employee_id", "shipper_id", "order_date"],
    TableName.ORDER_LINES: ["order_id", "product_id", "unit_price", "quantity", "discount"],
    TableName.PRODUCTS: ["product_id", "product_name", "category_id", "supplier_id"],
    TableName.CATEGORIES: ["category_id", "category_name"],
    TableName.SUPPLIERS: ["supplier_id", "company_name"],
    TableName.EMPLOYEES: ["employee_id", "first_name", "last_name"],
    TableName.SHIPPERS: ["shipper_id", "company_name"],
}

# Columns with a fixed type; keys keep the type the source used
COLUMN_TYPES: Dict[str, pl.DataType] = {
    "unit_price": pl.Float64,
    "quantity": pl.Int64,
    "discount": pl.Float64,
    "company_name": pl.Utf8,
    "country": pl.Utf8,
    "product_name": pl.Utf8,
    "category_name": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
}


# Key columns shared between tables; an all-null key takes the type other tables use
KEY_COLUMNS = [
    "customer_id",
    "order_id",
    "employee_id",
    "shipper_id",
    "product_id",
    "category_id",
    "supplier_id",
]


def _normalize_order_date(df: pl.DataFrame) -> pl.DataFrame:
    """Parse order_date into a Date unless it already is a temporal column"""
    dtype = df.schema["order_date"]
    if dtype.is_temporal():
        return df
    if dtype == pl.Utf8:
        # Northwind exports mix "1996-07-04" and "1996-07-04 00:00:00.000"
        return df.with_columns(
            pl.col("order_date").str.slice(0, 10).str.to_date("%Y-%m-%d").alias("order_date")
        )
    return df.with_columns(pl.col("order_date").cast(pl.Date))


def normalize_table(table: TableName, df: pl.DataFrame) -> pl.DataFrame:
    """
    Select and type the columns a table is expected to carry.

    Raises:
        DatasetLoadError: if a column is missing or cannot be converted
    """
    expected = TABLE_COLUMNS[table]
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise DatasetLoadError(table.value, f"missing columns {missing}")

    df = df.select(expected)
    casts = [
        pl.col(col).cast(COLUMN_TYPES[col])
        for col in expected
        if col in COLUMN_TYPES and df.schema[col] != COLUMN_TYPES[col]
    ]
    try:
        if casts:
            df = df.with_columns(casts)
        if table == TableName.ORDERS:
            df = _normalize_order_date(df)
    except pl.exceptions.PolarsError as e:
        raise DatasetLoadError(table.value, str(e)) from e

    return df


def _align_null_keys(tables: Dict[str, pl.DataFrame]) -> Dict[str, pl.DataFrame]:
    """
    Give all-null key columns the key type found in the other tables.

    A header-only CSV reads every column as a string, which would not join
    against integer keys elsewhere.
    """
    def all_null(df: pl.DataFrame, col: str) -> bool:
        return df[col].null_count() == len(df)

    key_types: Dict[str, pl.DataType] = {}
    for df in tables.values():
        for col in KEY_COLUMNS:
            if col in df.columns and col not in key_types and not all_null(df, col):
                key_types[col] = df.schema[col]

    aligned = {}
    for name, df in tables.items():
        casts = [
            pl.col(col).cast(key_types[col])
            for col in KEY_COLUMNS
            if col in df.columns and col in key_types
            and df.schema[col] != key_types[col] and all_null(df, col)
        ]
        aligned[name] = df.with_columns(casts) if casts else df
    return aligned


@dataclass(frozen=True)
class SalesDataset:
    """
    Read-only snapshot of the sales tables.

    Absent tables are None; reports that need them raise MissingTableError.

    Example:
        dataset = SalesDataset.from_frames({"orders": orders_df, ...})
        lines = dataset.require("order_lines", report="top_customers")
    """
    customers: Optional[pl.DataFrame] = None
    orders: Optional[pl.DataFrame] = None
    order_lines: Optional[pl.DataFrame] = None
    products: Optional[pl.DataFrame] = None
    categories: Optional[pl.DataFrame] = None
    suppliers: Optional[pl.DataFrame] = None
    employees: Optional[pl.DataFrame] = None
    shippers: Optional[pl.DataFrame] = None

    @classmethod
    def from_frames(cls, frames: Dict[str, pl.DataFrame]) -> "SalesDataset":
        """Build a snapshot from raw frames keyed by table name"""
        tables = {}
        for name, df in frames.items():
            table = TableName(name)
            if df is None:
                continue
            tables[table.value] = normalize_table(table, df)
        return cls(**_align_null_keys(tables))

    def get(self, table: str) -> Optional[pl.DataFrame]:
        """Return a table, or None when it is absent"""
        return getattr(self, TableName(table).value)

    def require(self, table: str, report: str) -> pl.DataFrame:
        """Return a table or raise MissingTableError on behalf of a report"""
        df = self.get(table)
        if df is None:
            raise MissingTableError(report=report, table=TableName(table).value)
        return df

    def available_tables(self) -> List[str]:
        """Names of the tables present in the snapshot"""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def row_counts(self) -> Dict[str, int]:
        """Row count per present table"""
        return {name: len(self.get(name)) for name in self.available_tables()}
