"""
Synthetic Data Generator

Generates a Northwind-like sales dataset for development and demos.
Includes:
- Customers spread over a fixed set of countries
- Categories, suppliers and a product catalog
- Employees and shippers
- Orders with one to five lines, Northwind-style discounts
"""

import random
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import polars as pl
import structlog
from faker import Faker

from northwind_insights.ingestion.dataset import SalesDataset
from northwind_insights.ingestion.loader import DatasetLoader, FileFormat

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Beverages", ["Chai", "Chang", "Lager", "Cote de Blaye", "Steeleye Stout"]),
    ("Condiments", ["Aniseed Syrup", "Cajun Seasoning", "Gumbo Mix", "Original Frankfurter Sauce"]),
    ("Confections", ["Pavlova", "Teatime Biscuits", "Chocolade", "Scottish Longbreads"]),
    ("Dairy Products", ["Queso Cabrales", "Gorgonzola Telino", "Mascarpone Fabioli", "Raclette Courdavault"]),
    ("Grains/Cereals", ["Gustaf's Knackebrod", "Tunnbrod", "Ravioli Angelo", "Wimmers Semmelknodel"]),
    ("Meat/Poultry", ["Mishi Kobe Niku", "Alice Mutton", "Thuringer Rostbratwurst", "Pate chinois"]),
    ("Produce", ["Uncle Bob's Dried Pears", "Tofu", "Manjimup Dried Apples", "Rossle Sauerkraut"]),
    ("Seafood", ["Ikura", "Konbu", "Carnarvon Tigers", "Nord-Ost Matjeshering", "Inlagd Sill"]),
]

COUNTRIES = [
    ("USA", 0.14), ("Germany", 0.13), ("France", 0.12), ("Brazil", 0.10),
    ("UK", 0.08), ("Spain", 0.06), ("Mexico", 0.06), ("Venezuela", 0.05),
    ("Italy", 0.04), ("Canada", 0.04), ("Sweden", 0.04), ("Austria", 0.04),
    ("Belgium", 0.03), ("Argentina", 0.03), ("Denmark", 0.02), ("Ireland", 0.02),
]

SHIPPERS = ["Speedy Express", "United Package", "Federal Shipping"]

DISCOUNTS = [0.0, 0.05, 0.10, 0.15, 0.20, 0.25]
DISCOUNT_WEIGHTS = [0.62, 0.09, 0.08, 0.08, 0.07, 0.06]

START_DATE = date(1996, 7, 4)
END_DATE = date(1998, 5, 6)


# =============================================================================
# GENERATORS
# =============================================================================

class CustomerGenerator:
    """Generate customer companies"""

    def __init__(self, fake: Faker, rng: random.Random):
        self.fake = fake
        self.rng = rng

    def generate(self, n: int = 91) -> pl.DataFrame:
        """Generate n customers"""
        countries = [c for c, _ in COUNTRIES]
        weights = [w for _, w in COUNTRIES]

        customers = []
        for i in range(1, n + 1):
            customers.append({
                "customer_id": i,
                "company_name": self.fake.company(),
                "country": self.rng.choices(countries, weights=weights)[0],
            })

        return pl.DataFrame(customers)


class CatalogGenerator:
    """Generate categories, suppliers and products"""

    def __init__(self, fake: Faker, rng: random.Random):
        self.fake = fake
        self.rng = rng

    def generate(self, n_suppliers: int = 29) -> Tuple[pl.DataFrame, pl.DataFrame, pl.DataFrame]:
        """Generate (categories, suppliers, products)"""
        categories = pl.DataFrame({
            "category_id": list(range(1, len(CATEGORIES) + 1)),
            "category_name": [name for name, _ in CATEGORIES],
        })
        suppliers = pl.DataFrame({
            "supplier_id": list(range(1, n_suppliers + 1)),
            "company_name": [self.fake.company() for _ in range(n_suppliers)],
        })

        products = []
        product_id = 1
        for category_id, (_, names) in enumerate(CATEGORIES, start=1):
            for name in names:
                products.append({
                    "product_id": product_id,
                    "product_name": name,
                    "category_id": category_id,
                    "supplier_id": self.rng.randint(1, n_suppliers),
                })
                product_id += 1

        return categories, suppliers, pl.DataFrame(products)


class EmployeeGenerator:
    """Generate sales employees"""

    def __init__(self, fake: Faker):
        self.fake = fake

    def generate(self, n: int = 9) -> pl.DataFrame:
        """Generate n employees"""
        return pl.DataFrame({
            "employee_id": list(range(1, n + 1)),
            "first_name": [self.fake.first_name() for _ in range(n)],
            "last_name": [self.fake.last_name() for _ in range(n)],
        })


class OrderGenerator:
    """Generate orders and their lines"""

    def __init__(
        self,
        customers_df: pl.DataFrame,
        products_df: pl.DataFrame,
        n_employees: int,
        n_shippers: int,
        rng: random.Random,
        np_rng: np.random.Generator,
    ):
        self.customer_ids = customers_df["customer_id"].to_list()
        self.product_ids = products_df["product_id"].to_list()
        self.n_employees = n_employees
        self.n_shippers = n_shippers
        self.rng = rng
        self.np_rng = np_rng
        # List prices are fixed per product; lines sell at list price
        self.list_prices = {
            pid: round(float(p), 2)
            for pid, p in zip(self.product_ids, self.np_rng.lognormal(mean=3.0, sigma=0.8, size=len(self.product_ids)))
        }

    def generate(
        self,
        n: int = 830,
        start_date: date = START_DATE,
        end_date: date = END_DATE,
    ) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """Generate n orders with lines"""
        span_days = (end_date - start_date).days
        # Order volume grows towards the end of the period
        offsets = np.sort(self.np_rng.triangular(0, span_days, span_days, size=n).astype(int))

        orders = []
        order_lines = []

        for i, offset in enumerate(offsets):
            order_id = 10248 + i
            orders.append({
                "order_id": order_id,
                "customer_id": self.rng.choice(self.customer_ids),
                "employee_id": self.rng.randint(1, self.n_employees),
                "shipper_id": self.rng.randint(1, self.n_shippers),
                "order_date": start_date + timedelta(days=int(offset)),
            })

            num_lines = self.rng.choices([1, 2, 3, 4, 5], weights=[0.25, 0.35, 0.25, 0.10, 0.05])[0]
            for product_id in self.rng.sample(self.product_ids, k=num_lines):
                order_lines.append({
                    "order_id": order_id,
                    "product_id": product_id,
                    "unit_price": self.list_prices[product_id],
                    "quantity": int(self.np_rng.integers(1, 60)),
                    "discount": self.rng.choices(DISCOUNTS, weights=DISCOUNT_WEIGHTS)[0],
                })

        return pl.DataFrame(orders), pl.DataFrame(order_lines)


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class DataGenerator:
    """
    Main data generator orchestrator.

    Example:
        dataset = DataGenerator(seed=42).generate_all(n_orders=830)
    """

    def __init__(self, seed: int = 42, output_dir: Optional[str] = None):
        self.seed = seed
        self.output_dir = Path(output_dir) if output_dir else None
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)

    def generate_all(
        self,
        n_customers: int = 91,
        n_employees: int = 9,
        n_suppliers: int = 29,
        n_orders: int = 830,
        file_format: str = FileFormat.CSV.value,
    ) -> SalesDataset:
        """Generate a complete dataset, saving it when an output directory is set"""
        logger.info(
            "Generating synthetic sales data",
            customers=n_customers,
            employees=n_employees,
            orders=n_orders,
            seed=self.seed,
        )

        customers_df = CustomerGenerator(self.fake, self.rng).generate(n_customers)
        categories_df, suppliers_df, products_df = CatalogGenerator(self.fake, self.rng).generate(n_suppliers)
        employees_df = EmployeeGenerator(self.fake).generate(n_employees)
        shippers_df = pl.DataFrame({
            "shipper_id": list(range(1, len(SHIPPERS) + 1)),
            "company_name": SHIPPERS,
        })

        orders_df, order_lines_df = OrderGenerator(
            customers_df,
            products_df,
            n_employees=n_employees,
            n_shippers=len(SHIPPERS),
            rng=self.rng,
            np_rng=self.np_rng,
        ).generate(n_orders)

        frames: Dict[str, pl.DataFrame] = {
            "customers": customers_df,
            "orders": orders_df,
            "order_lines": order_lines_df,
            "products": products_df,
            "categories": categories_df,
            "suppliers": suppliers_df,
            "employees": employees_df,
            "shippers": shippers_df,
        }
        dataset = SalesDataset.from_frames(frames)

        if self.output_dir is not None:
            DatasetLoader().write_directory(dataset, self.output_dir, file_format)

        logger.info("Data generation complete", **dataset.row_counts())
        return dataset

