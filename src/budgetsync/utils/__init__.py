"""Utility functions for budgetsync."""

from budgetsync.utils.parsing import (
    is_spreadsheet,
    normalize_date,
    normalize_date_checked,
    parse_amount,
    read_file,
)

__all__ = [
    "parse_amount",
    "normalize_date",
    "normalize_date_checked",
    "is_spreadsheet",
    "read_file",
]
