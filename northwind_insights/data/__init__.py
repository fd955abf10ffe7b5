"""
Data Generation Module
"""
from .generators import DataGenerator, CustomerGenerator, CatalogGenerator, EmployeeGenerator, OrderGenerator

__all__ = [
    "DataGenerator",
    "CustomerGenerator",
    "CatalogGenerator",
    "EmployeeGenerator",
    "OrderGenerator",
]
