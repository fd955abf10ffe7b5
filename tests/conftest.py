"""
Test Suite Configuration
"""
from datetime import date
from typing import Dict

import pytest
import polars as pl

from northwind_insights.config.settings import ReportSettings
from northwind_insights.ingestion.dataset import SalesDataset
from northwind_insights.reporting.engine import ReportingEngine


@pytest.fixture
def report_settings() -> ReportSettings:
    """Report settings with the standard defaults"""
    return ReportSettings()


@pytest.fixture
def sample_frames() -> Dict[str, pl.DataFrame]:
    """
    Small hand-checked dataset.

    Revenue per order: 101=190, 102=60, 103=150, 104=200, 105=300, 106=130
    (total 1030; 400 in 2023, 630 in 2024).
    """
    return {
        "customers": pl.DataFrame({
            "customer_id": [1, 2, 3],
            "company_name": ["Alfreds Futterkiste", "Bottom-Dollar Markets", "Chop-suey Chinese"],
            "country": ["Germany", "Canada", "Switzerland"],
        }),
        "orders": pl.DataFrame({
            "order_id": [101, 102, 103, 104, 105, 106],
            "customer_id": [1, 1, 2, 3, 1, 2],
            "employee_id": [1, 2, 1, 3, 1, 2],
            "shipper_id": [1, 2, 1, 2, 1, 1],
            "order_date": [
                date(2023, 1, 10),
                date(2023, 2, 15),
                date(2023, 2, 20),
                date(2024, 3, 5),
                date(2024, 3, 25),
                date(2024, 3, 30),
            ],
        }),
        "order_lines": pl.DataFrame({
            "order_id": [101, 101, 102, 103, 103, 104, 105, 106, 106],
            "product_id": [1, 3, 2, 1, 4, 3, 1, 2, 4],
            "unit_price": [10.0, 20.0, 15.0, 10.0, 5.0, 20.0, 10.0, 15.0, 5.0],
            "quantity": [10, 5, 4, 20, 10, 10, 30, 10, 2],
            "discount": [0.0, 0.1, 0.0, 0.5, 0.0, 0.0, 0.0, 0.2, 0.0],
        }),
        "products": pl.DataFrame({
            "product_id": [1, 2, 3, 4],
            "product_name": ["Chai", "Chang", "Ikura", "Konbu"],
            "category_id": [1, 1, 2, 2],
            "supplier_id": [1, 1, 2, 3],
        }),
        "categories": pl.DataFrame({
            "category_id": [1, 2],
            "category_name": ["Beverages", "Seafood"],
        }),
        "suppliers": pl.DataFrame({
            "supplier_id": [1, 2, 3],
            "company_name": ["Exotic Liquids", "Tokyo Traders", "Mayumi's"],
        }),
        "employees": pl.DataFrame({
            "employee_id": [1, 2, 3],
            "first_name": ["Nancy", "Andrew", "Janet"],
            "last_name": ["Davolio", "Fuller", "Leverling"],
        }),
        "shippers": pl.DataFrame({
            "shipper_id": [1, 2, 3],
            "company_name": ["Speedy Express", "United Package", "Federal Shipping"],
        }),
    }


@pytest.fixture
def sample_dataset(sample_frames) -> SalesDataset:
    """Sample dataset snapshot"""
    return SalesDataset.from_frames(sample_frames)


@pytest.fixture
def engine(sample_dataset, report_settings) -> ReportingEngine:
    """Reporting engine over the sample dataset"""
    return ReportingEngine(sample_dataset, report_settings)


@pytest.fixture
def empty_dataset(sample_frames) -> SalesDataset:
    """All tables present with zero rows"""
    return SalesDataset.from_frames({name: df.clear() for name, df in sample_frames.items()})
