"""
Command Line Entry Point

Runs one or more sales reports against a dataset directory or database.
Usage:
    northwind-reports                                 # all reports, configured source
    northwind-reports top_customers top_shipper --source data/northwind
    northwind-reports --database sqlite:///northwind.db --format csv --output-dir out/
    northwind-reports --list
"""

import argparse
import sys
from typing import List, Optional

import structlog

from northwind_insights.config import get_settings
from northwind_insights.config.logging import configure_logging
from northwind_insights.errors import DatasetLoadError, ReportError
from northwind_insights.ingestion.loader import load_dataset
from northwind_insights.quality.validators import ValidationStatus, validate_dataset
from northwind_insights.reporting import (
    OutputFormat,
    ReportingEngine,
    ReportName,
    list_reports,
    render_report,
    write_report,
)

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="northwind-reports",
        description="Northwind sales insight reports",
    )
    parser.add_argument(
        "reports",
        nargs="*",
        metavar="REPORT",
        help="Reports to run (default: all). See --list",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--source", help="Directory with one file per table")
    source.add_argument("--database", help="SQLAlchemy URL of a Northwind database")
    parser.add_argument(
        "--input-format",
        choices=["csv", "parquet", "jsonl"],
        help="File format of the source directory",
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in OutputFormat],
        help="Output format",
    )
    parser.add_argument("--output-dir", help="Write one file per report instead of printing")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Run data quality checks and stop on failures",
    )
    parser.add_argument("--list", action="store_true", help="List available reports and exit")
    parser.add_argument("--log-level", help="Override log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI; returns the process exit code"""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    configure_logging(args.log_level)

    if args.list:
        for definition in list_reports():
            print(f"{definition.name.value:<24} {definition.title}")
        return 0

    valid_names = {name.value for name in ReportName}
    unknown = [r for r in args.reports if r not in valid_names]
    if unknown:
        parser.error(f"unknown report(s): {', '.join(unknown)}")

    output_format = args.format or settings.reports.output_format
    output_dir = args.output_dir or settings.reports.output_dir

    try:
        dataset = load_dataset(
            source_dir=args.source,
            database_url=args.database,
            file_format=args.input_format,
        )
    except DatasetLoadError as e:
        logger.error("Dataset load failed", source=e.source, reason=e.reason)
        return 1

    if args.validate:
        results = validate_dataset(dataset)
        failed = [t for t, r in results.items() if r.status == ValidationStatus.FAILED]
        if failed:
            logger.error("Data quality checks failed", tables=failed)
            return 1

    engine = ReportingEngine(dataset, settings.reports)
    try:
        results = engine.run_many(args.reports or None)
    except ReportError as e:
        logger.error("Report failed", report=e.report, error=str(e))
        return 1

    for result in results.values():
        if output_dir:
            write_report(result, output_dir, output_format)
        else:
            print(render_report(result, output_format))

    return 0


if __name__ == "__main__":
    sys.exit(main())
