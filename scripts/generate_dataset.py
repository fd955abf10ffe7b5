"""
Northwind-style Sample Dataset Generator
Writes one file per table for use with `northwind-reports --source`
"""

import argparse
from pathlib import Path

from northwind_insights.config.logging import configure_logging
from northwind_insights.data.generators import DataGenerator

DEFAULT_OUTPUT_DIR = Path(__file__).parent.parent / "data" / "northwind"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic Northwind-style dataset")
    parser.add_argument("--output-dir", default=str(DEFAULT_OUTPUT_DIR), help="Target directory")
    parser.add_argument("--format", default="csv", choices=["csv", "parquet", "jsonl"], help="File format")
    parser.add_argument("--orders", type=int, default=830, help="Number of orders")
    parser.add_argument("--customers", type=int, default=91, help="Number of customers")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("Northwind Sample Dataset Generator")
    print("=" * 60 + "\n")

    dataset = DataGenerator(seed=args.seed, output_dir=args.output_dir).generate_all(
        n_customers=args.customers,
        n_orders=args.orders,
        file_format=args.format,
    )

    print(f"\nOutput: {args.output_dir}\n")
    total = 0
    for table, rows in dataset.row_counts().items():
        total += rows
        print(f"   {table}.{args.format}: {rows:,} rows")
    print(f"\nTotal: {total:,} rows")


if __name__ == "__main__":
    main()
