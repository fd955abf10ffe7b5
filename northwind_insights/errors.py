"""
Exception Hierarchy

Errors surfaced to callers of the loaders and the reporting engine.
Division by zero and empty results are not errors: ratios become null and
reports return zero rows.
"""

from typing import Optional


class InsightsError(Exception):
    """Base exception for all Northwind Sales Insights errors"""


class DatasetLoadError(InsightsError):
    """Raised when a dataset source cannot be read"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot load dataset from {source}: {reason}")


class ReportError(InsightsError):
    """Base class for errors raised while computing a report"""

    def __init__(self, message: str, report: Optional[str] = None):
        self.report = report
        super().__init__(message)


class MissingTableError(ReportError):
    """Raised when a report needs a table the snapshot does not hold"""

    def __init__(self, report: str, table: str):
        self.table = table
        super().__init__(f"Report '{report}' requires missing table '{table}'", report=report)


class UnknownReportError(ReportError):
    """Raised when a report name is not registered"""

    def __init__(self, name: str):
        super().__init__(f"Unknown report: '{name}'", report=name)
