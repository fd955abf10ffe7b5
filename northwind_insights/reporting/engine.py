"""
Reporting Engine

Computes the ten sales reports over an immutable SalesDataset snapshot.

Every report is a pure function of the snapshot:
- joins are inner joins, so rows with dangling foreign keys drop out
- ratios with a zero denominator are null
- money and percentage fields are rounded to 2 decimals after ranking
- ties are broken on ascending ids so repeated runs give identical output
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import polars as pl
import structlog

from northwind_insights.config import get_settings
from northwind_insights.config.settings import ReportSettings
from northwind_insights.ingestion.dataset import SalesDataset, TableName
from .registry import REPORTS, ReportName, get_report

logger = structlog.get_logger(__name__)

LINE_REVENUE = (
    pl.col("unit_price") * pl.col("quantity") * (1 - pl.col("discount"))
).alias("revenue")

EMPLOYEE_NAME = pl.concat_str([pl.col("first_name"), pl.col("last_name")], separator=" ")

MS_PER_DAY = 86_400_000


@dataclass
class ReportResult:
    """Result of one report run"""
    name: ReportName
    title: str
    rows: pl.DataFrame
    started_at: datetime
    completed_at: datetime
    duration_seconds: float

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Rows as a list of dicts keyed by field name"""
        return self.rows.to_dicts()


def _percent_of(total: float) -> pl.Expr:
    """Share of `revenue` in `total` as a percentage; null when total is zero"""
    if not total:
        return pl.lit(None, dtype=pl.Float64)
    return pl.col("revenue") / total * 100


class ReportingEngine:
    """
    Sales reporting engine.

    Report parameters default to the configured ReportSettings and can be
    overridden per call.

    Example:
        engine = ReportingEngine(dataset)
        df = engine.top_customers(limit=10)
        results = engine.run_many(["top_shipper", "major_suppliers"])
    """

    def __init__(
        self,
        dataset: SalesDataset,
        report_settings: Optional[ReportSettings] = None,
    ):
        self.dataset = dataset
        self.report_settings = report_settings or get_settings().reports

    # =========================================================================
    # SHARED FRAMES
    # =========================================================================

    def _require(self, table: TableName, report: ReportName) -> pl.DataFrame:
        return self.dataset.require(table.value, report=report.value)

    def _line_revenue(self, report: ReportName) -> pl.DataFrame:
        """Order lines with their revenue"""
        return self._require(TableName.ORDER_LINES, report).with_columns(LINE_REVENUE)

    def _order_sales(self, report: ReportName) -> pl.DataFrame:
        """Order lines with revenue joined to their order header"""
        orders = self._require(TableName.ORDERS, report)
        return self._line_revenue(report).join(orders, on="order_id", how="inner")

    def _dated_sales(self, report: ReportName) -> pl.DataFrame:
        """Order sales with a known order date"""
        return self._order_sales(report).filter(pl.col("order_date").is_not_null())

    def total_revenue(self) -> float:
        """Sum of line revenue over every order line"""
        lines = self.dataset.require(TableName.ORDER_LINES.value, report="total_revenue")
        return lines.select(LINE_REVENUE.sum()).item() or 0.0

    # =========================================================================
    # REPORTS
    # =========================================================================

    def top_customers(self, limit: Optional[int] = None) -> pl.DataFrame:
        """
        Customers ranked by revenue, with distinct order count and
        average order value. Ties go to the lower customer_id.
        """
        report = ReportName.TOP_CUSTOMERS
        limit = self.report_settings.top_customers_limit if limit is None else limit
        customers = self._require(TableName.CUSTOMERS, report)

        return (
            self._order_sales(report)
            .join(customers.select(["customer_id", "company_name"]), on="customer_id", how="inner")
            .group_by("customer_id")
            .agg([
                pl.col("company_name").first().alias("customer"),
                pl.col("order_id").n_unique().alias("total_orders"),
                pl.col("revenue").sum(),
            ])
            .sort(["revenue", "customer_id"], descending=[True, False])
            .head(limit)
            .select([
                "customer",
                "total_orders",
                pl.col("revenue").round(2).alias("total_revenue"),
                (pl.col("revenue") / pl.col("total_orders")).round(2).alias("avg_order_value"),
            ])
        )

    def yearly_revenue_growth(self) -> pl.DataFrame:
        """
        Revenue per year with growth against the previous year in the series.

        Growth is computed from the rounded yearly totals. The first year,
        and any year following a zero-revenue year, has null growth.
        """
        report = ReportName.YEARLY_REVENUE_GROWTH
        previous = pl.col("total_revenue").shift(1)

        return (
            self._dated_sales(report)
            .group_by(pl.col("order_date").dt.year().alias("year"))
            .agg(pl.col("revenue").sum().round(2).alias("total_revenue"))
            .sort("year")
            .with_columns(
                pl.when(previous.is_not_null() & (previous != 0))
                .then(((pl.col("total_revenue") - previous) / previous * 100).round(2))
                .otherwise(pl.lit(None, dtype=pl.Float64))
                .alias("yoy_growth_percent")
            )
        )

    def top_employees(self, limit: Optional[int] = None) -> pl.DataFrame:
        """Employees ranked by revenue handled"""
        report = ReportName.TOP_EMPLOYEES
        limit = self.report_settings.top_employees_limit if limit is None else limit
        employees = self._require(TableName.EMPLOYEES, report)

        return (
            self._order_sales(report)
            .join(employees, on="employee_id", how="inner")
            .group_by("employee_id")
            .agg([
                EMPLOYEE_NAME.first().alias("employee"),
                pl.col("order_id").n_unique().alias("total_orders"),
                pl.col("customer_id").drop_nulls().n_unique().alias("customers_served"),
                pl.col("revenue").sum(),
            ])
            .sort(["revenue", "employee_id"], descending=[True, False])
            .head(limit)
            .select([
                "employee",
                "total_orders",
                "customers_served",
                pl.col("revenue").round(2).alias("total_revenue"),
                (pl.col("revenue") / pl.col("total_orders")).round(2).alias("avg_revenue_per_order"),
            ])
        )

    def category_top_products(self) -> pl.DataFrame:
        """
        Best-selling product of each category and the employee who handled
        the most orders for it.

        Product ties go to the lower product_id. Employee ties on order count
        are broken arbitrarily but deterministically: the lower employee_id wins.
        """
        report = ReportName.CATEGORY_TOP_PRODUCTS
        products = self._require(TableName.PRODUCTS, report)
        categories = self._require(TableName.CATEGORIES, report)
        orders = self._require(TableName.ORDERS, report)
        employees = self._require(TableName.EMPLOYEES, report)
        lines = self._line_revenue(report)

        top_products = (
            lines
            .join(products, on="product_id", how="inner")
            .join(categories, on="category_id", how="inner")
            .group_by(["category_id", "product_id"])
            .agg([
                pl.col("category_name").first(),
                pl.col("product_name").first(),
                pl.col("revenue").sum(),
            ])
            .sort(["category_id", "revenue", "product_id"], descending=[False, True, False])
            .group_by("category_id", maintain_order=True)
            .first()
        )

        top_handlers = (
            lines.select(["order_id", "product_id"])
            .join(top_products.select("product_id"), on="product_id", how="semi")
            .join(orders.select(["order_id", "employee_id"]), on="order_id", how="inner")
            .join(employees, on="employee_id", how="inner")
            .group_by(["product_id", "employee_id"])
            .agg([
                EMPLOYEE_NAME.first().alias("top_employee"),
                pl.col("order_id").n_unique().alias("orders_handled"),
            ])
            .sort(["product_id", "orders_handled", "employee_id"], descending=[False, True, False])
            .group_by("product_id", maintain_order=True)
            .first()
        )

        return (
            top_products
            .join(top_handlers, on="product_id", how="inner")
            .sort(["category_name", "category_id"])
            .select([
                pl.col("category_name").alias("category"),
                pl.col("product_name").alias("product"),
                pl.col("revenue").round(2).alias("total_revenue"),
                "top_employee",
                "orders_handled",
            ])
        )

    def top_month_products(self, limit: Optional[int] = None) -> pl.DataFrame:
        """
        The single highest-revenue month (earliest month on ties) and its
        top products by revenue within that month.
        """
        report = ReportName.TOP_MONTH_PRODUCTS
        limit = self.report_settings.top_month_products_limit if limit is None else limit
        products = self._require(TableName.PRODUCTS, report)

        sales = self._dated_sales(report).with_columns(
            pl.col("order_date").dt.strftime("%Y-%m").alias("month")
        )
        monthly = (
            sales.group_by("month")
            .agg(pl.col("revenue").sum())
            .sort(["revenue", "month"], descending=[True, False])
        )
        top_month = monthly["month"][0] if len(monthly) else None
        logger.debug("Highest revenue month selected", month=top_month)

        return (
            sales
            .filter(pl.col("month") == pl.lit(top_month, dtype=pl.Utf8))
            .join(products, on="product_id", how="inner")
            .group_by("product_id")
            .agg([
                pl.col("month").first(),
                pl.col("product_name").first().alias("product"),
                pl.col("quantity").sum().alias("units_sold"),
                pl.col("revenue").sum(),
            ])
            .sort(["revenue", "product_id"], descending=[True, False])
            .head(limit)
            .select([
                "month",
                "product",
                "units_sold",
                pl.col("revenue").round(2).alias("product_revenue"),
            ])
        )

    def major_suppliers(self, threshold: Optional[float] = None) -> pl.DataFrame:
        """
        Suppliers whose share of total supplier revenue is strictly above
        `threshold` percent.
        """
        report = ReportName.MAJOR_SUPPLIERS
        threshold = self.report_settings.supplier_share_threshold if threshold is None else threshold
        products = self._require(TableName.PRODUCTS, report)
        suppliers = self._require(TableName.SUPPLIERS, report)

        supplier_revenue = (
            self._line_revenue(report)
            .join(products.select(["product_id", "supplier_id"]), on="product_id", how="inner")
            .join(suppliers, on="supplier_id", how="inner")
            .group_by("supplier_id")
            .agg([
                pl.col("company_name").first().alias("supplier"),
                pl.col("revenue").sum(),
            ])
        )
        total = supplier_revenue["revenue"].sum()

        return (
            supplier_revenue
            .with_columns(_percent_of(total).alias("share"))
            .filter(pl.col("share") > threshold)
            .sort(["share", "supplier_id"], descending=[True, False])
            .select([
                "supplier",
                pl.col("revenue").round(2).alias("supplier_revenue"),
                pl.col("share").round(2).alias("revenue_percent"),
            ])
        )

    def repeat_customers(self, min_orders: Optional[int] = None) -> pl.DataFrame:
        """
        Customers with more than `min_orders` repeat orders and the average
        number of days between consecutive orders.

        Only orders with a predecessor count: a customer's first order
        contributes neither a gap nor to `total_orders`.
        """
        report = ReportName.REPEAT_CUSTOMERS
        min_orders = self.report_settings.repeat_customer_min_orders if min_orders is None else min_orders
        orders = self._require(TableName.ORDERS, report)
        customers = self._require(TableName.CUSTOMERS, report)

        ordered = (
            orders
            .filter(pl.col("order_date").is_not_null())
            .join(customers.select(["customer_id", "company_name"]), on="customer_id", how="inner")
            .with_columns(pl.col("order_date").cast(pl.Datetime("ms")).alias("order_ts"))
            .sort(["customer_id", "order_ts", "order_id"])
            .with_columns(
                (pl.col("order_ts") - pl.col("order_ts").shift(1).over("customer_id"))
                .dt.total_milliseconds()
                .alias("gap_ms")
            )
        )

        return (
            ordered
            .filter(pl.col("gap_ms").is_not_null())
            .group_by("customer_id")
            .agg([
                pl.col("company_name").first().alias("customer"),
                pl.len().alias("total_orders"),
                (pl.col("gap_ms").mean() / MS_PER_DAY).round(2).alias("avg_days_between_orders"),
            ])
            .filter(pl.col("total_orders") > min_orders)
            .sort(["total_orders", "customer", "customer_id"], descending=[True, False, False])
            .select(["customer", "total_orders", "avg_days_between_orders"])
        )

    def top_shipper(self) -> pl.DataFrame:
        """The shipper with the highest handled revenue and its share of the total"""
        report = ReportName.TOP_SHIPPER
        shippers = self._require(TableName.SHIPPERS, report)

        shipper_sales = (
            self._order_sales(report)
            .join(shippers, on="shipper_id", how="inner")
            .group_by("shipper_id")
            .agg([
                pl.col("company_name").first().alias("shipper"),
                pl.col("revenue").sum(),
                pl.col("order_id").n_unique().alias("orders_count"),
            ])
        )
        total = shipper_sales["revenue"].sum()

        return (
            shipper_sales
            .with_columns(_percent_of(total).alias("share"))
            .sort(["revenue", "shipper_id"], descending=[True, False])
            .head(1)
            .select([
                "shipper",
                pl.col("revenue").round(2).alias("total_revenue"),
                "orders_count",
                pl.col("share").round(2).alias("percent_of_total"),
            ])
        )

    def top_countries(self, limit: Optional[int] = None) -> pl.DataFrame:
        """
        Countries ranked by revenue, each paired with the employee who
        generated the most revenue there (lower employee_id on ties).

        Ranking uses the whole country's revenue, not the best employee's
        revenue, so `country_revenue` is always descending.
        """
        report = ReportName.TOP_COUNTRIES
        limit = self.report_settings.top_countries_limit if limit is None else limit
        customers = self._require(TableName.CUSTOMERS, report)
        employees = self._require(TableName.EMPLOYEES, report)

        country_employee = (
            self._order_sales(report)
            .join(customers.select(["customer_id", "country"]), on="customer_id", how="inner")
            .join(employees, on="employee_id", how="inner")
            .filter(pl.col("country").is_not_null())
            .group_by(["country", "employee_id"])
            .agg([
                EMPLOYEE_NAME.first().alias("top_employee"),
                pl.col("revenue").sum(),
            ])
        )

        country_totals = country_employee.group_by("country").agg(
            pl.col("revenue").sum().alias("country_revenue")
        )
        best_employee = (
            country_employee
            .sort(["country", "revenue", "employee_id"], descending=[False, True, False])
            .group_by("country", maintain_order=True)
            .first()
        )

        return (
            country_totals
            .join(best_employee, on="country", how="inner")
            .sort(["country_revenue", "country"], descending=[True, False])
            .head(limit)
            .select([
                "country",
                pl.col("country_revenue").round(2),
                "top_employee",
                pl.col("revenue").round(2).alias("employee_revenue"),
            ])
        )

    def yearly_top_products(self) -> pl.DataFrame:
        """Most profitable product of each year (lower product_id on ties)"""
        report = ReportName.YEARLY_TOP_PRODUCTS
        products = self._require(TableName.PRODUCTS, report)

        return (
            self._dated_sales(report)
            .join(products.select(["product_id", "product_name"]), on="product_id", how="inner")
            .with_columns(pl.col("order_date").dt.year().alias("year"))
            .group_by(["year", "product_id"])
            .agg([
                pl.col("product_name").first(),
                pl.col("revenue").sum(),
            ])
            .sort(["year", "revenue", "product_id"], descending=[False, True, False])
            .group_by("year", maintain_order=True)
            .first()
            .select([
                "year",
                pl.col("product_name").alias("top_product"),
                pl.col("revenue").round(2).alias("total_revenue"),
            ])
        )

    # =========================================================================
    # RUNNERS
    # =========================================================================

    def run(self, report: str, **params: Any) -> ReportResult:
        """
        Run a single report by name.

        Args:
            report: Report name (see ReportName)
            **params: Overrides for the report's configured parameters

        Returns:
            ReportResult with the report rows and timing

        Raises:
            UnknownReportError: if the name is not registered
            MissingTableError: if the snapshot lacks a required table
        """
        definition = get_report(report)
        for table in definition.tables:
            self._require(table, definition.name)

        kwargs = {
            keyword: getattr(self.report_settings, setting)
            for setting, keyword in definition.settings_params
        }
        kwargs.update(params)

        started_at = datetime.utcnow()
        rows = getattr(self, definition.name.value)(**kwargs)
        completed_at = datetime.utcnow()
        duration = (completed_at - started_at).total_seconds()

        logger.info(
            f"Report {definition.name.value} complete",
            rows=len(rows),
            duration_seconds=round(duration, 4),
            **kwargs,
        )

        return ReportResult(
            name=definition.name,
            title=definition.title,
            rows=rows,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=duration,
        )

    def run_many(self, reports: Optional[Iterable[str]] = None) -> Dict[str, ReportResult]:
        """
        Run several reports, all ten by default.

        Results are keyed by report name in registry order.
        """
        names = [get_report(r).name for r in reports] if reports is not None else list(REPORTS)
        ordered = [name for name in ReportName if name in names]

        logger.info("Running reports", reports=[n.value for n in ordered])
        return {name.value: self.run(name) for name in ordered}
