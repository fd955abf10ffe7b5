"""
Report Renderers

Turns ReportResult rows into text tables, CSV or JSON.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Union

import polars as pl
import structlog

from .engine import ReportResult

logger = structlog.get_logger(__name__)


class OutputFormat(str, Enum):
    """Supported output formats"""
    TABLE = "table"
    CSV = "csv"
    JSON = "json"


FILE_EXTENSIONS = {
    OutputFormat.TABLE: "txt",
    OutputFormat.CSV: "csv",
    OutputFormat.JSON: "json",
}


def _render_table(result: ReportResult) -> str:
    with pl.Config(
        tbl_rows=-1,
        tbl_cols=-1,
        tbl_hide_dataframe_shape=True,
        tbl_hide_column_data_types=True,
        fmt_str_lengths=80,
    ):
        body = str(result.rows)
    return f"{result.title}\n{body}\n"


def _render_csv(result: ReportResult) -> str:
    return result.rows.write_csv()


def _render_json(result: ReportResult) -> str:
    payload = {
        "report": result.name.value,
        "title": result.title,
        "row_count": result.row_count,
        "rows": result.to_dicts(),
    }
    return json.dumps(payload, indent=2, default=str)


def render_report(result: ReportResult, output_format: Union[str, OutputFormat] = OutputFormat.TABLE) -> str:
    """Render a report result as a string"""
    renderers = {
        OutputFormat.TABLE: _render_table,
        OutputFormat.CSV: _render_csv,
        OutputFormat.JSON: _render_json,
    }
    return renderers[OutputFormat(output_format)](result)


def write_report(
    result: ReportResult,
    directory: Union[str, Path],
    output_format: Union[str, OutputFormat] = OutputFormat.CSV,
) -> Path:
    """Write a rendered report to `<directory>/<report>.<ext>`"""
    output_format = OutputFormat(output_format)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    output_file = directory / f"{result.name.value}.{FILE_EXTENSIONS[output_format]}"
    output_file.write_text(render_report(result, output_format), encoding="utf-8")
    logger.info(f"Written {result.row_count} rows to {output_file}")

    return output_file
