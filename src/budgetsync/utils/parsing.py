"""Parsing utilities for bank statement cells and files."""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import overload

from budgetsync.errors import ParseError

XLS_MAGIC = b"\xd0\xcf\x11\xe0"
XLSX_MAGIC = b"PK\x03\x04"
SPREADSHEET_EXTENSIONS = (".xls", ".xlsx")

_GENERIC_DATE_FORMATS = (
    "%m/%d/%Y",  # 03/04/2024
    "%m/%d/%y",  # 03/04/24
    "%Y/%m/%d",  # 2024/03/04
    "%b %d, %Y",  # Mar 4, 2024
    "%B %d, %Y",  # March 4, 2024
    "%d %b %Y",  # 4 Mar 2024
    "%d %B %Y",  # 4 March 2024
)

_MDY_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_DMY_PATTERN = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")
_STRIP_PATTERN = re.compile(r"[$€£¥,\s]")


@overload
def parse_amount(value: object) -> float: ...


@overload
def parse_amount(value: object, default: float) -> float: ...


@overload
def parse_amount(value: object, default: None) -> float | None: ...


def parse_amount(value: object, default: float | None = 0.0) -> float | None:
    """
    Parse a currency-formatted cell to a signed float.

    Handles:
    - Currency symbols ($, €, £, ¥)
    - Thousands separators (commas)
    - Negative values in parentheses, e.g. (50.00)

    Args:
        value: Raw cell value (string, number, or None)
        default: Returned for empty or unparseable input

    Returns:
        Parsed amount, or ``default`` if the value is not a number
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else default

    amount_str = str(value).strip()
    if not amount_str:
        return default

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = _STRIP_PATTERN.sub("", amount_str)

    try:
        number = float(amount_str)
    except ValueError:
        return default

    if not math.isfinite(number):
        return default

    return -number if is_negative else number


def normalize_date_checked(value: object) -> tuple[str, bool]:
    """
    Normalize a date cell to ISO 8601 and report whether that succeeded.

    Attempts, in order:
    - ISO dates/datetimes and common locale-independent formats
    - M/D/YYYY anywhere in the string, rewritten zero-padded
    - D-M-YYYY anywhere in the string, rewritten zero-padded

    Args:
        value: Raw date cell

    Returns:
        Tuple of (date string, was_normalized). The input is returned
        unchanged with ``False`` when no rule matched.
    """
    if isinstance(value, datetime):
        return value.date().isoformat(), True
    if isinstance(value, date):
        return value.isoformat(), True
    if value is None:
        return "", False

    raw = str(value)
    date_str = raw.strip()
    if not date_str:
        return raw, False

    try:
        return datetime.fromisoformat(date_str).date().isoformat(), True
    except ValueError:
        pass

    for fmt in _GENERIC_DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date().isoformat(), True
        except ValueError:
            continue

    match = _MDY_PATTERN.search(date_str)
    if match:
        month, day, year = match.groups()
        return f"{year}-{int(month):02d}-{int(day):02d}", True

    match = _DMY_PATTERN.search(date_str)
    if match:
        day, month, year = match.groups()
        return f"{year}-{int(month):02d}-{int(day):02d}", True

    return raw, False


def normalize_date(value: object) -> str:
    """Normalize a date cell to YYYY-MM-DD, or return it unchanged."""
    return normalize_date_checked(value)[0]


def is_spreadsheet(content: bytes, filename: str | None = None) -> bool:
    """Decide from magic bytes or extension whether content is a workbook."""
    if content[:4] in (XLS_MAGIC, XLSX_MAGIC):
        return True
    return bool(filename) and Path(filename).suffix.lower() in SPREADSHEET_EXTENSIONS


def read_file(filepath: Path, max_size: int | None = None) -> bytes:
    """
    Read a statement file as raw bytes.

    Args:
        filepath: Path to the file
        max_size: Optional size ceiling in bytes

    Returns:
        File content

    Raises:
        ParseError: If the file is missing, unreadable or too large
    """
    if not filepath.exists():
        raise ParseError(f"File not found: {filepath}")

    if max_size is not None and filepath.stat().st_size > max_size:
        raise ParseError(
            f"File too large: {filepath.name} exceeds {max_size // (1024 * 1024)}MB"
        )

    try:
        return filepath.read_bytes()
    except OSError as e:
        raise ParseError(f"Could not read file {filepath}: {e}") from e
