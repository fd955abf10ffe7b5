"""
Data Ingestion Module
"""
from .dataset import SalesDataset, TableName, TABLE_COLUMNS
from .loader import DatasetLoader, FileFormat, LoadResult, load_dataset

__all__ = [
    "SalesDataset",
    "TableName",
    "TABLE_COLUMNS",
    "DatasetLoader",
    "FileFormat",
    "LoadResult",
    "load_dataset",
]
