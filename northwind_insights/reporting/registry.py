"""
Report Registry

Names, titles and table dependencies of the ten sales reports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from northwind_insights.errors import UnknownReportError
from northwind_insights.ingestion.dataset import TableName


class ReportName(str, Enum):
    """Available reports, in presentation order"""
    TOP_CUSTOMERS = "top_customers"
    YEARLY_REVENUE_GROWTH = "yearly_revenue_growth"
    TOP_EMPLOYEES = "top_employees"
    CATEGORY_TOP_PRODUCTS = "category_top_products"
    TOP_MONTH_PRODUCTS = "top_month_products"
    MAJOR_SUPPLIERS = "major_suppliers"
    REPEAT_CUSTOMERS = "repeat_customers"
    TOP_SHIPPER = "top_shipper"
    TOP_COUNTRIES = "top_countries"
    YEARLY_TOP_PRODUCTS = "yearly_top_products"


@dataclass(frozen=True)
class ReportDefinition:
    """Static description of a report"""
    name: ReportName
    title: str
    tables: Tuple[TableName, ...]
    # ReportSettings attribute -> engine method keyword
    settings_params: Tuple[Tuple[str, str], ...] = ()


_SALES = (TableName.ORDER_LINES, TableName.ORDERS)

REPORTS: Dict[ReportName, ReportDefinition] = {
    ReportName.TOP_CUSTOMERS: ReportDefinition(
        name=ReportName.TOP_CUSTOMERS,
        title="Top customers by revenue",
        tables=_SALES + (TableName.CUSTOMERS,),
        settings_params=(("top_customers_limit", "limit"),),
    ),
    ReportName.YEARLY_REVENUE_GROWTH: ReportDefinition(
        name=ReportName.YEARLY_REVENUE_GROWTH,
        title="Year-over-year revenue growth",
        tables=_SALES,
    ),
    ReportName.TOP_EMPLOYEES: ReportDefinition(
        name=ReportName.TOP_EMPLOYEES,
        title="Top employees by revenue handled",
        tables=_SALES + (TableName.EMPLOYEES,),
        settings_params=(("top_employees_limit", "limit"),),
    ),
    ReportName.CATEGORY_TOP_PRODUCTS: ReportDefinition(
        name=ReportName.CATEGORY_TOP_PRODUCTS,
        title="Top product and employee per category",
        tables=_SALES + (TableName.PRODUCTS, TableName.CATEGORIES, TableName.EMPLOYEES),
    ),
    ReportName.TOP_MONTH_PRODUCTS: ReportDefinition(
        name=ReportName.TOP_MONTH_PRODUCTS,
        title="Best month and its top products",
        tables=_SALES + (TableName.PRODUCTS,),
        settings_params=(("top_month_products_limit", "limit"),),
    ),
    ReportName.MAJOR_SUPPLIERS: ReportDefinition(
        name=ReportName.MAJOR_SUPPLIERS,
        title="Suppliers above the revenue share threshold",
        tables=(TableName.ORDER_LINES, TableName.PRODUCTS, TableName.SUPPLIERS),
        settings_params=(("supplier_share_threshold", "threshold"),),
    ),
    ReportName.REPEAT_CUSTOMERS: ReportDefinition(
        name=ReportName.REPEAT_CUSTOMERS,
        title="Repeat customers and average days between orders",
        tables=(TableName.ORDERS, TableName.CUSTOMERS),
        settings_params=(("repeat_customer_min_orders", "min_orders"),),
    ),
    ReportName.TOP_SHIPPER: ReportDefinition(
        name=ReportName.TOP_SHIPPER,
        title="Shipper with the highest handled revenue",
        tables=_SALES + (TableName.SHIPPERS,),
    ),
    ReportName.TOP_COUNTRIES: ReportDefinition(
        name=ReportName.TOP_COUNTRIES,
        title="Top countries and their best employee",
        tables=_SALES + (TableName.CUSTOMERS, TableName.EMPLOYEES),
        settings_params=(("top_countries_limit", "limit"),),
    ),
    ReportName.YEARLY_TOP_PRODUCTS: ReportDefinition(
        name=ReportName.YEARLY_TOP_PRODUCTS,
        title="Most profitable product per year",
        tables=_SALES + (TableName.PRODUCTS,),
    ),
}


def get_report(name: str) -> ReportDefinition:
    """Look up a report definition by name"""
    try:
        return REPORTS[ReportName(name)]
    except ValueError:
        raise UnknownReportError(str(name)) from None


def list_reports() -> List[ReportDefinition]:
    """All report definitions in presentation order"""
    return [REPORTS[name] for name in ReportName]
