#!/usr/bin/env python3
"""Command-line interface for budgetsync."""

import argparse
import sys
from pathlib import Path
from typing import Any

from budgetsync.api import BudgetApiClient
from budgetsync.config import (
    get_api_settings,
    get_import_settings,
    get_log_level,
    load_config,
    write_default_config,
)
from budgetsync.errors import ConfigError, IngestError
from budgetsync.formats import describe_format, detect_format
from budgetsync.logging_setup import configure_logging
from budgetsync.normalizer import StatementImporter
from budgetsync.tabular import parse_tabular
from budgetsync.utils import is_spreadsheet, read_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="budgetsync",
        description="Import bank and card statement exports into the budget app",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  budgetsync export.csv --account-id 3 -o transactions.csv
  budgetsync statement.xlsx --account-id 3 --upload --dry-run
  budgetsync statement.xlsx --account-id 3 --upload
  budgetsync export.csv --detect-only
  budgetsync --init-config

Recognized layouts:
  - Abound Credit Union
  - American Express
  - USAA
  - PayPal
  - anything else with date/description/amount-like columns
        """,
    )

    parser.add_argument("input", nargs="?", help="CSV, XLS or XLSX statement export")
    parser.add_argument(
        "--account-id",
        help="Account the transactions belong to",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="transactions.csv",
        help="Output CSV file (default: transactions.csv)",
    )
    parser.add_argument(
        "--format",
        choices=["csv", "tsv"],
        default="csv",
        help="Output format (default: csv)",
    )
    parser.add_argument(
        "--detect-only",
        action="store_true",
        help="Print the detected layout and columns, then exit",
    )
    parser.add_argument(
        "--strict-dates",
        action="store_true",
        help="Drop rows whose date cannot be normalized to YYYY-MM-DD",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a config file with default settings (to --config or the user config dir)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="With --init-config, replace an existing config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # Backend upload
    parser.add_argument(
        "--upload",
        action="store_true",
        help="Create new transactions through the API instead of writing CSV",
    )
    parser.add_argument(
        "--api-url",
        help="API root, e.g. http://localhost:8000/api (or configure in config file)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --upload, show what would be created without sending it",
    )
    return parser


def _detect_only(path: Path, max_size: int) -> int:
    content = read_file(path, max_size=max_size)
    table = parse_tabular(content, is_spreadsheet=is_spreadsheet(content, path.name))
    fmt = detect_format(table.headers)
    print(f"Format: {describe_format(fmt)} ({fmt.value})")
    print(f"Columns: {', '.join(table.headers) or '(none)'}")
    print(f"Rows: {len(table.rows)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.init_config:
        try:
            written = write_default_config(args.config, overwrite=args.force)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Wrote default config to {written}")
        return 0

    if not args.input:
        parser.error("the following arguments are required: input")
    if args.dry_run and not args.upload:
        parser.error("--dry-run only applies together with --upload")

    try:
        config: dict[str, Any] | None = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    configure_logging("DEBUG" if args.verbose else get_log_level(config))

    settings = get_import_settings(config)
    path = Path(args.input)

    try:
        if args.detect_only:
            return _detect_only(path, settings.max_file_size)

        if not args.account_id:
            print("Error: --account-id is required", file=sys.stderr)
            return 1

        existing_hashes: set[str] = set()
        client: BudgetApiClient | None = None
        if args.upload:
            api = get_api_settings(config, args.api_url)
            client = BudgetApiClient(api.base_url, timeout=api.timeout)
            existing_hashes = client.fetch_existing_hashes(
                args.account_id, limit=settings.history_limit
            )

        importer = StatementImporter(
            strict_dates=args.strict_dates or settings.strict_dates,
            max_file_size=settings.max_file_size,
        )
        result = importer.import_file(path, args.account_id, existing_hashes)
    except IngestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Detected format: {describe_format(result.format)}", file=sys.stderr)
    print(f"Rows read: {result.total_rows}", file=sys.stderr)
    print(f"New transactions: {len(result.accepted)}", file=sys.stderr)
    if result.duplicate_count:
        print(f"Skipped duplicates: {result.duplicate_count}", file=sys.stderr)
    if result.rejected_count:
        print(f"Skipped unusable rows: {result.rejected_count}", file=sys.stderr)

    if client is not None:
        if args.dry_run:
            print("\nDry run - transactions that would be created:\n", file=sys.stderr)
            for tx in result.accepted:
                print(
                    f"  {tx.date}  {tx.amount:>10.2f}  {tx.merchant_raw[:40]:<40}  "
                    f"{tx.category}  [{tx.import_hash}]",
                    file=sys.stderr,
                )
            return 0

        upload = client.bulk_create(result.accepted, batch_size=settings.batch_size)
        print(f"\nCreated: {upload.created}", file=sys.stderr)
        if upload.errors:
            print(f"Errors: {len(upload.errors)}", file=sys.stderr)
            for error in upload.errors:
                print(f"  - {error}", file=sys.stderr)
        return 0 if upload.ok else 1

    output_path = Path(args.output)
    delimiter = "\t" if args.format == "tsv" else ","
    importer.write_csv(result.accepted, output_path, delimiter)
    print(f"Wrote {len(result.accepted)} transactions to {output_path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
