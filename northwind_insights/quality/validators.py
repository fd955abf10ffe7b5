"""
Data Validation Module

Rule-based quality checks for a loaded sales snapshot.

Most rules count violating rows with a polars expression; a rule passes
when no row violates it. Orphan foreign keys default to warnings because
the reports drop them in joins rather than failing.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from northwind_insights.ingestion.dataset import SalesDataset, TableName

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Reports would be wrong
    WARNING = "warning"  # Rows drop out of joins
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


Check = Callable[[pl.DataFrame], ValidationCheck]


class DataValidator:
    """
    Data validator built from chained rules.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("order_id")
        validator.add_range_check("discount", min_value=0, max_value=1)
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Check] = []

    def _add_row_rule(
        self,
        name: str,
        column: str,
        violation: Callable[[], pl.Expr],
        describe: Callable[[int], str],
        severity: ValidationSeverity,
        details: Optional[Dict[str, Any]] = None,
    ) -> "DataValidator":
        """Register a rule that fails for every row matching `violation`"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Column '{column}' not found",
                )

            violations = df.filter(violation()).height
            return ValidationCheck(
                name=name,
                passed=violations == 0,
                severity=severity,
                message=describe(violations),
                details={**(details or {}), "violations": violations},
                failed_rows=violations,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        return self._add_row_rule(
            name=f"not_null_{column}",
            column=column,
            violation=lambda: pl.col(column).is_null(),
            describe=lambda n: f"'{column}' has {n} null values" if n else f"'{column}' is fully populated",
            severity=severity,
        )

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that a key column has no repeated values"""
        return self._add_row_rule(
            name=f"unique_{column}",
            column=column,
            # Every occurrence after the first counts once
            violation=lambda: pl.col(column).is_first_distinct().not_(),
            describe=lambda n: f"'{column}' has {n} duplicate values" if n else f"'{column}' values are unique",
            severity=severity,
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within [min_value, max_value]"""
        def violation() -> pl.Expr:
            below = pl.col(column) < min_value if min_value is not None else pl.lit(False)
            above = pl.col(column) > max_value if max_value is not None else pl.lit(False)
            return below | above

        return self._add_row_rule(
            name=f"range_{column}",
            column=column,
            violation=violation,
            describe=lambda n: (
                f"'{column}' has {n} values outside [{min_value}, {max_value}]" if n else "All values in range"
            ),
            severity=severity,
            details={"min": min_value, "max": max_value},
        )

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for non-negative (or strictly positive) values"""
        if allow_zero:
            return self.add_range_check(column, min_value=0, severity=severity)
        return self._add_row_rule(
            name=f"positive_{column}",
            column=column,
            violation=lambda: pl.col(column) <= 0,
            describe=lambda n: f"'{column}' has {n} values <= 0" if n else "All values positive",
            severity=severity,
        )

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that non-null values of `column` exist in the referenced table"""
        known = reference_df[reference_column].unique()
        return self._add_row_rule(
            name=f"ref_integrity_{column}",
            column=column,
            violation=lambda: pl.col(column).is_not_null() & ~pl.col(column).is_in(known),
            describe=lambda n: f"'{column}' has {n} orphan records" if n else "Referential integrity maintained",
            severity=severity,
            details={"reference_column": reference_column},
        )

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add a whole-frame rule; errors raised by polars count as failures"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            try:
                passed = bool(check_func(df))
            except pl.exceptions.PolarsError as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Check failed with error: {e}",
                )
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Status is FAILED when an ERROR check fails (or any check fails in
        strict mode), PARTIAL when only warnings fail.
        """
        started_at = datetime.utcnow()
        checks = [check(df) for check in self._checks]

        for result in checks:
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        failed = [c for c in checks if not c.passed]
        errors = sum(1 for c in failed if c.severity == ValidationSeverity.ERROR)
        warnings = sum(1 for c in failed if c.severity == ValidationSeverity.WARNING)

        if errors or (warnings and self.strict_mode):
            status = ValidationStatus.FAILED
        elif warnings:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(checks),
            passed_checks=len(checks) - len(failed),
            failed_checks=errors,
            warning_count=warnings,
            checks=checks,
            started_at=started_at,
            completed_at=datetime.utcnow(),
        )


# =============================================================================
# PRE-BUILT VALIDATORS
# =============================================================================

def create_order_lines_validator() -> DataValidator:
    """Create pre-configured validator for order lines"""
    return (
        DataValidator()
        .add_not_null_check("order_id")
        .add_not_null_check("product_id")
        .add_positive_check("unit_price")
        .add_positive_check("quantity")
        .add_range_check("discount", min_value=0, max_value=1)
        .add_custom_check(
            name="unique_order_product",
            check_func=lambda df: df.select(["order_id", "product_id"]).is_duplicated().sum() == 0,
            message_on_fail="Same product appears more than once in an order",
            severity=ValidationSeverity.WARNING,
        )
    )


def create_orders_validator() -> DataValidator:
    """Create pre-configured validator for orders"""
    return (
        DataValidator()
        .add_not_null_check("order_id")
        .add_unique_check("order_id")
        .add_not_null_check("order_date")
        .add_not_null_check("customer_id", severity=ValidationSeverity.WARNING)
    )


def _create_key_validator(key: str) -> DataValidator:
    return DataValidator().add_not_null_check(key).add_unique_check(key)


# Foreign key column -> (referenced table, referenced key)
FOREIGN_KEYS: Dict[TableName, List[tuple]] = {
    TableName.ORDERS: [
        ("customer_id", TableName.CUSTOMERS, "customer_id"),
        ("employee_id", TableName.EMPLOYEES, "employee_id"),
        ("shipper_id", TableName.SHIPPERS, "shipper_id"),
    ],
    TableName.ORDER_LINES: [
        ("order_id", TableName.ORDERS, "order_id"),
        ("product_id", TableName.PRODUCTS, "product_id"),
    ],
    TableName.PRODUCTS: [
        ("category_id", TableName.CATEGORIES, "category_id"),
        ("supplier_id", TableName.SUPPLIERS, "supplier_id"),
    ],
}

PRIMARY_KEYS: Dict[TableName, str] = {
    TableName.CUSTOMERS: "customer_id",
    TableName.PRODUCTS: "product_id",
    TableName.CATEGORIES: "category_id",
    TableName.SUPPLIERS: "supplier_id",
    TableName.EMPLOYEES: "employee_id",
    TableName.SHIPPERS: "shipper_id",
}


def create_dataset_validators(dataset: SalesDataset) -> Dict[str, DataValidator]:
    """
    Build one validator per present table.

    Orphan foreign keys are warnings: the reports treat them as empty
    joins rather than failing.
    """
    validators: Dict[str, DataValidator] = {}

    for table in TableName:
        if dataset.get(table.value) is None:
            continue

        if table == TableName.ORDERS:
            validator = create_orders_validator()
        elif table == TableName.ORDER_LINES:
            validator = create_order_lines_validator()
        else:
            validator = _create_key_validator(PRIMARY_KEYS[table])

        for column, ref_table, ref_column in FOREIGN_KEYS.get(table, []):
            reference_df = dataset.get(ref_table.value)
            if reference_df is not None:
                validator.add_referential_integrity_check(column, reference_df, ref_column)

        validators[table.value] = validator

    return validators


def validate_dataset(dataset: SalesDataset) -> Dict[str, ValidationResult]:
    """Validate every present table of a snapshot"""
    results = {
        table: validator.validate(dataset.get(table))
        for table, validator in create_dataset_validators(dataset).items()
    }

    failed = [t for t, r in results.items() if r.status == ValidationStatus.FAILED]
    logger.info(
        "Dataset validation complete",
        tables=len(results),
        failed_tables=failed,
    )
    return results
