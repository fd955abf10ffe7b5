"""
Data Quality Module
"""
from .validators import DataValidator, ValidationResult, ValidationStatus, validate_dataset

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationStatus",
    "validate_dataset",
]
