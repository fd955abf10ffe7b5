"""
Reporting Module
"""
from .engine import ReportingEngine, ReportResult
from .registry import REPORTS, ReportName, get_report, list_reports
from .renderers import OutputFormat, render_report, write_report

__all__ = [
    "ReportingEngine",
    "ReportResult",
    "REPORTS",
    "ReportName",
    "get_report",
    "list_reports",
    "OutputFormat",
    "render_report",
    "write_report",
]
