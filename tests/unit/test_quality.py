"""
Unit Tests - Data Quality
"""
import pytest
import polars as pl

from northwind_insights.ingestion.dataset import SalesDataset
from northwind_insights.quality.validators import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_order_lines_validator,
    create_orders_validator,
    validate_dataset,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"id": [1, 2, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": [1, None, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": [1, 2, 1]})

        validator = DataValidator()
        validator.add_unique_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_range_check(self):
        """Test range check"""
        df = pl.DataFrame({"discount": [0.0, 0.25, -0.1, 1.5]})

        validator = DataValidator()
        validator.add_range_check("discount", min_value=0, max_value=1)

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        # Two values outside range: -0.1 and 1.5
        assert result.checks[0].failed_rows == 2

    def test_missing_column(self):
        """Test checks on absent columns fail instead of raising"""
        df = pl.DataFrame({"id": [1]})

        result = DataValidator().add_positive_check("unit_price").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert "not found" in result.checks[0].message

    def test_warning_gives_partial(self):
        """Test warning severity does not fail the suite"""
        df = pl.DataFrame({"id": [1, None]})

        validator = DataValidator().add_not_null_check("id", severity=ValidationSeverity.WARNING)
        result = validator.validate(df)

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1

    def test_strict_mode(self):
        """Test strict mode fails on warnings"""
        df = pl.DataFrame({"id": [1, None]})

        validator = DataValidator(strict_mode=True).add_not_null_check(
            "id", severity=ValidationSeverity.WARNING
        )

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_custom_check(self):
        """Test custom validation check"""
        df = pl.DataFrame({"quantity": [1, 2, 3]})

        validator = DataValidator()
        validator.add_custom_check(
            name="total_quantity",
            check_func=lambda df: df["quantity"].sum() < 10,
            message_on_fail="Too many units",
        )

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_custom_check_error(self):
        """Test errors raised inside a custom check are reported as failures"""
        df = pl.DataFrame({"quantity": [1, 2, 3]})

        validator = DataValidator().add_custom_check(
            name="bad_column",
            check_func=lambda df: df.select(pl.col("missing")).height == 0,
            message_on_fail="unused",
        )
        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].message.startswith("Check failed with error")

    def test_referential_integrity(self):
        """Test orphan foreign keys are counted"""
        lines = pl.DataFrame({"product_id": [1, 2, 99, None]})
        products = pl.DataFrame({"product_id": [1, 2]})

        validator = DataValidator().add_referential_integrity_check("product_id", products, "product_id")
        result = validator.validate(lines)

        check = result.checks[0]
        assert check.failed_rows == 1
        assert check.severity == ValidationSeverity.WARNING
        assert result.status == ValidationStatus.PARTIAL

    def test_success_rate(self):
        """Test success rate over mixed results"""
        df = pl.DataFrame({"id": [1, 1]})

        result = DataValidator().add_not_null_check("id").add_unique_check("id").validate(df)

        assert result.success_rate == pytest.approx(50.0)


class TestPrebuiltValidators:
    """Tests for the table validators"""

    def test_orders_validator(self, sample_frames):
        """Test orders validator on clean orders"""
        result = create_orders_validator().validate(sample_frames["orders"])

        assert result.total_checks == 4
        assert result.status == ValidationStatus.PASSED

    def test_duplicate_order_product_warns(self, sample_frames):
        """Test repeated product in one order is a warning"""
        lines = pl.concat([sample_frames["order_lines"], sample_frames["order_lines"].head(1)])

        result = create_order_lines_validator().validate(lines)

        assert result.status == ValidationStatus.PARTIAL
        failed = [c.name for c in result.checks if not c.passed]
        assert failed == ["unique_order_product"]

    def test_negative_quantity_fails(self, sample_frames):
        """Test negative quantities are errors"""
        lines = sample_frames["order_lines"].with_columns(
            pl.when(pl.col("order_id") == 102).then(-4).otherwise(pl.col("quantity")).alias("quantity")
        )

        result = create_order_lines_validator().validate(lines)

        assert result.status == ValidationStatus.FAILED


class TestValidateDataset:
    """Tests for whole-snapshot validation"""

    def test_clean_dataset(self, sample_dataset):
        """Test every table of the sample passes"""
        results = validate_dataset(sample_dataset)

        assert set(results) == set(sample_dataset.available_tables())
        assert all(r.status == ValidationStatus.PASSED for r in results.values())

    def test_orphans_are_warnings(self, sample_frames):
        """Test dangling keys produce partial results, not failures"""
        orphan = pl.DataFrame({
            "order_id": [999],
            "product_id": [99],
            "unit_price": [1.0],
            "quantity": [1],
            "discount": [0.0],
        })
        frames = dict(sample_frames)
        frames["order_lines"] = pl.concat([sample_frames["order_lines"], orphan])

        results = validate_dataset(SalesDataset.from_frames(frames))

        assert results["order_lines"].status == ValidationStatus.PARTIAL
        assert results["order_lines"].warning_count == 2

    def test_duplicate_primary_key_fails(self, sample_frames):
        """Test duplicated customer ids fail the customers table"""
        frames = dict(sample_frames)
        frames["customers"] = pl.concat([sample_frames["customers"], sample_frames["customers"].head(1)])

        results = validate_dataset(SalesDataset.from_frames(frames))

        assert results["customers"].status == ValidationStatus.FAILED

    def test_absent_tables_skipped(self, sample_frames):
        """Test only present tables are validated"""
        dataset = SalesDataset.from_frames({"orders": sample_frames["orders"]})

        results = validate_dataset(dataset)

        assert list(results) == ["orders"]
