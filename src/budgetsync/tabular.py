"""Turn uploaded CSV text or workbook bytes into header + row records."""

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from budgetsync.errors import ParseError
from budgetsync.logging_setup import get_logger
from budgetsync.models import RawRow, TabularData
from budgetsync.utils.parsing import XLS_MAGIC, XLSX_MAGIC

logger = get_logger(__name__)

TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")

# Header-row detection for workbooks with leading report metadata
HEADER_SCAN_ROWS = 10
HEADER_MIN_CELLS = 3
HEADER_KEYWORD_WEIGHT = 3
HEADER_KEYWORDS = (
    "date",
    "amount",
    "description",
    "merchant",
    "debit",
    "credit",
    "transaction",
)

MIN_FILLED_CELLS = 2


def parse_tabular(
    content: bytes | str,
    is_spreadsheet: bool = False,
    encodings: Sequence[str] = TEXT_ENCODINGS,
) -> TabularData:
    """
    Parse an uploaded statement into headers and rows.

    Args:
        content: CSV text, or raw file bytes
        is_spreadsheet: Treat ``content`` as an XLS/XLSX workbook
        encodings: Encodings tried in order when CSV content is bytes

    Returns:
        TabularData with rows that have at least two filled cells

    Raises:
        ParseError: If the workbook or text cannot be decoded
    """
    if is_spreadsheet:
        if isinstance(content, str):
            raise ParseError("Spreadsheet content must be bytes")
        return _parse_workbook(content)

    text = content if isinstance(content, str) else decode_text(content, encodings)
    return _parse_csv_text(text)


def decode_text(content: bytes, encodings: Sequence[str] = TEXT_ENCODINGS) -> str:
    """Decode file bytes, trying each encoding in turn."""
    for encoding in encodings:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise ParseError(
        f"Could not decode file with any of: {', '.join(encodings)}"
    )


def _has_enough_cells(values: Iterable[str]) -> bool:
    return sum(1 for v in values if v.strip()) >= MIN_FILLED_CELLS


def _parse_csv_text(text: str) -> TabularData:
    """Parse delimited text with the first non-blank line as the header."""
    text = text.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text))

    try:
        headers: list[str] = []
        for row in reader:
            if any(cell.strip() for cell in row):
                headers = unique_headers([cell.strip() for cell in row])
                break

        rows: list[RawRow] = []
        dropped = 0
        for cells in reader:
            if not _has_enough_cells(cells):
                if any(cell.strip() for cell in cells):
                    dropped += 1
                continue
            rows.append(_row_to_record(headers, cells))
    except csv.Error as e:
        raise ParseError(f"CSV parse error: {e}") from e

    logger.debug("Parsed CSV with %d columns and %d rows", len(headers), len(rows))
    return TabularData(headers=headers, rows=rows, dropped_rows=dropped)


def unique_headers(labels: Sequence[str]) -> list[str]:
    """
    Rename repeated header labels so every column keeps its own cells.

    The second ``Amount`` becomes ``Amount_1``, the third ``Amount_2``,
    skipping any suffix that is already a label in the row.
    """
    taken = set(labels)
    counts: dict[str, int] = {}
    result: list[str] = []
    for label in labels:
        if label not in counts:
            counts[label] = 0
            result.append(label)
            continue
        while True:
            counts[label] += 1
            candidate = f"{label}_{counts[label]}"
            if candidate not in taken:
                break
        taken.add(candidate)
        result.append(candidate)
    return result


def _row_to_record(headers: Sequence[str], cells: Sequence[str]) -> RawRow:
    """Zip cells onto headers, padding short rows and dropping surplus cells."""
    record: RawRow = {}
    for i, header in enumerate(headers):
        record[header] = cells[i] if i < len(cells) else ""
    return record


def _cell_text(value: Any) -> str:
    """Render a workbook cell as trimmed text."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _parse_workbook(content: bytes) -> TabularData:
    magic = content[:4]
    if magic == XLSX_MAGIC:
        grid = _read_xlsx_rows(content)
    elif magic == XLS_MAGIC:
        grid = _read_xls_rows(content)
    else:
        raise ParseError("Unrecognized spreadsheet format (expected XLS or XLSX)")

    return _grid_to_tabular([[_cell_text(v) for v in row] for row in grid])


def _read_xlsx_rows(content: bytes) -> list[list[Any]]:
    """Read the first worksheet of an XLSX workbook."""
    from openpyxl import load_workbook

    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            sheet = wb.worksheets[0]
            return [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            wb.close()
    except Exception as e:
        raise ParseError(f"Could not read XLSX file: {e}") from e


def _read_xls_rows(content: bytes) -> list[list[Any]]:
    """Read the first sheet of a legacy XLS workbook."""
    import xlrd  # type: ignore[import-untyped]

    try:
        wb = xlrd.open_workbook(file_contents=content)
        sheet = wb.sheet_by_index(0)

        grid: list[list[Any]] = []
        for row in range(sheet.nrows):
            values: list[Any] = []
            for col in range(sheet.ncols):
                cell = sheet.cell(row, col)
                if cell.ctype == xlrd.XL_CELL_DATE:
                    values.append(xlrd.xldate_as_datetime(cell.value, wb.datemode))
                else:
                    values.append(cell.value)
            grid.append(values)
        return grid
    except Exception as e:
        raise ParseError(f"Could not read XLS file: {e}") from e


def find_header_row(grid: Sequence[Sequence[str]]) -> int:
    """
    Pick the row most likely to hold column headers.

    Scores each of the first few rows by filled cells plus a bonus for
    cells mentioning a transaction keyword. Rows with fewer than three
    filled cells never qualify. Ties keep the earliest row.

    Args:
        grid: Workbook rows as trimmed text

    Returns:
        Index of the header row (0 when nothing qualifies)
    """
    best_index = 0
    best_score = -1

    for index, row in enumerate(grid[:HEADER_SCAN_ROWS]):
        filled = [cell for cell in row if cell]
        if len(filled) < HEADER_MIN_CELLS:
            continue

        keyword_hits = sum(
            1
            for cell in filled
            if any(keyword in cell.lower() for keyword in HEADER_KEYWORDS)
        )
        score = len(filled) + HEADER_KEYWORD_WEIGHT * keyword_hits
        if score > best_score:
            best_index, best_score = index, score

    return best_index


def _grid_to_tabular(grid: list[list[str]]) -> TabularData:
    if not grid:
        return TabularData(headers=[])

    header_index = find_header_row(grid)
    header_cells = list(grid[header_index])
    while header_cells and not header_cells[-1]:
        header_cells.pop()
    headers = unique_headers(
        [cell or f"Column {i + 1}" for i, cell in enumerate(header_cells)]
    )

    rows: list[RawRow] = []
    dropped = 0
    for cells in grid[header_index + 1 :]:
        if not _has_enough_cells(cells):
            if any(cells):
                dropped += 1
            continue
        rows.append(_row_to_record(headers, cells))

    logger.debug(
        "Parsed workbook with header row %d, %d columns and %d rows",
        header_index,
        len(headers),
        len(rows),
    )
    return TabularData(headers=headers, rows=rows, dropped_rows=dropped)
