"""Tests for CSV and workbook parsing."""

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import xlrd

from budgetsync.errors import ParseError
from budgetsync.tabular import decode_text, find_header_row, parse_tabular, unique_headers
from budgetsync.utils.parsing import XLS_MAGIC

MakeXlsx = Callable[[Sequence[Sequence[Any]]], bytes]


class TestParseCsv:
    """Tests for delimited text parsing."""

    def test_headers_and_rows(self, generic_file: Path) -> None:
        """Test a plain CSV export."""
        table = parse_tabular(generic_file.read_text())

        assert table.headers == ["Transaction Date", "Payee", "Amount", "Category"]
        assert len(table.rows) == 10
        assert table.rows[0] == {
            "Transaction Date": "04/01/2024",
            "Payee": "Coffee Shop",
            "Amount": "-4.50",
            "Category": "Dining",
        }

    def test_quoted_fields_with_newlines(self, amex_file: Path) -> None:
        """Test quoted cells may contain commas and line breaks."""
        table = parse_tabular(amex_file.read_bytes())

        assert len(table.rows) == 5
        assert table.rows[0]["Extended Details"] == "WHOLE FOODS #10234\nAUSTIN TX"
        assert table.rows[2]["Amount"] == "-1,250.00"

    def test_sparse_rows_dropped(self, metadata_only_file: Path) -> None:
        """Test rows with fewer than two filled cells are discarded."""
        table = parse_tabular(metadata_only_file.read_text())

        assert table.headers == ["Date", "Description", "Amount"]
        assert table.rows == []
        assert table.dropped_rows == 4

    def test_blank_lines_ignored(self) -> None:
        """Test blank lines before the header and between rows."""
        table = parse_tabular("\n\nDate,Amount\n\n01/01/2024,5\n")

        assert table.headers == ["Date", "Amount"]
        assert table.rows == [{"Date": "01/01/2024", "Amount": "5"}]
        assert table.dropped_rows == 0

    def test_ragged_rows(self) -> None:
        """Test short rows are padded and long rows truncated."""
        table = parse_tabular("A,B,C\n1,2\n1,2,3,4\n")

        assert table.rows == [
            {"A": "1", "B": "2", "C": ""},
            {"A": "1", "B": "2", "C": "3"},
        ]

    def test_duplicate_headers_suffixed(self) -> None:
        """Test repeated labels keep their own cells."""
        table = parse_tabular("Date,Description,Amount,Amount\n01/02/2024,A,5,\n")

        assert table.headers == ["Date", "Description", "Amount", "Amount_1"]
        assert table.rows == [
            {"Date": "01/02/2024", "Description": "A", "Amount": "5", "Amount_1": ""}
        ]

    def test_bom_and_header_whitespace(self) -> None:
        """Test BOMs are removed and header labels trimmed."""
        table = parse_tabular("\ufeff Date , Amount \n01/01/2024,5\n".encode())
        assert table.headers == ["Date", "Amount"]

    def test_cp1252_bytes(self) -> None:
        """Test non-UTF-8 exports still decode."""
        content = "Date,Description,Amount\n01/01/2024,Caf\xe9,5\n".encode("cp1252")
        table = parse_tabular(content)
        assert table.rows[0]["Description"] == "Café"

    def test_empty_input(self) -> None:
        """Test empty content gives no headers and no rows."""
        table = parse_tabular("")
        assert table.headers == []
        assert table.rows == []

    def test_undecodable_bytes(self) -> None:
        """Test decode failures surface as ParseError."""
        with pytest.raises(ParseError, match="Could not decode"):
            decode_text(b"\xff\xfe\x81", encodings=("utf-8",))


class TestUniqueHeaders:
    """Tests for unique_headers function."""

    def test_repeats_numbered(self) -> None:
        """Test each repeat gets the next free suffix."""
        assert unique_headers(["Amount", "Amount", "Amount"]) == [
            "Amount", "Amount_1", "Amount_2"
        ]

    def test_skips_existing_labels(self) -> None:
        """Test a suffix already used by another column is not reused."""
        assert unique_headers(["Amount", "Amount_1", "Amount"]) == [
            "Amount", "Amount_1", "Amount_2"
        ]


class TestFindHeaderRow:
    """Tests for header-row scoring."""

    def test_skips_metadata_rows(self) -> None:
        """Test a title and a blank row before the real header."""
        grid = [
            ["Account Activity Report", "", ""],
            ["", "", ""],
            ["Date", "Description", "Amount"],
            ["2024-03-04", "Coffee", "-4.5"],
        ]
        assert find_header_row(grid) == 2

    def test_keywords_beat_wider_rows(self) -> None:
        """Test keyword cells outweigh a wider metadata row."""
        grid = [
            ["Name", "Jane Doe", "Branch", "Main St", "Phone", "555"],
            ["Date", "Description", "Amount"],
        ]
        assert find_header_row(grid) == 1

    def test_first_row_wins_ties(self) -> None:
        """Test equal scores keep the earliest row."""
        grid = [["a", "b", "c"], ["d", "e", "f"]]
        assert find_header_row(grid) == 0

    def test_defaults_to_first_row(self) -> None:
        """Test row 0 when no row has three filled cells."""
        grid = [["Date", "Amount"], ["2024-01-01", "5"]]
        assert find_header_row(grid) == 0

    def test_only_first_ten_rows_scanned(self) -> None:
        """Test headers beyond the scan window are not considered."""
        grid: list[list[str]] = [["x", "", ""] for _ in range(10)]
        grid.append(["Date", "Description", "Amount"])
        assert find_header_row(grid) == 0


class TestParseXlsx:
    """Tests for XLSX workbook parsing."""

    def test_header_after_metadata(self, make_xlsx: MakeXlsx) -> None:
        """Test leading report rows are skipped."""
        content = make_xlsx([
            ["Account Activity Report"],
            [None],
            ["Date", "Description", "Amount"],
            [datetime(2024, 3, 4), "Coffee", -4.5],
            [datetime(2024, 3, 5), "  Salary  ", 2000],
            ["Total", None, None],
        ])

        table = parse_tabular(content, is_spreadsheet=True)

        assert table.headers == ["Date", "Description", "Amount"]
        assert table.rows == [
            {"Date": "2024-03-04", "Description": "Coffee", "Amount": "-4.5"},
            {"Date": "2024-03-05", "Description": "Salary", "Amount": "2000"},
        ]
        assert table.dropped_rows == 1

    def test_blank_header_cells_named(self, make_xlsx: MakeXlsx) -> None:
        """Test unlabeled columns get placeholder names."""
        content = make_xlsx([
            ["Date", None, "Amount", "Memo"],
            ["2024-03-04", "x", "5", "y"],
        ])

        table = parse_tabular(content, is_spreadsheet=True)

        assert table.headers == ["Date", "Column 2", "Amount", "Memo"]

    def test_corrupt_workbook(self) -> None:
        """Test a broken zip raises ParseError."""
        with pytest.raises(ParseError, match="XLSX"):
            parse_tabular(b"PK\x03\x04not really a zip", is_spreadsheet=True)

    def test_unknown_binary(self) -> None:
        """Test bytes that are neither XLS nor XLSX."""
        with pytest.raises(ParseError, match="Unrecognized spreadsheet"):
            parse_tabular(b"%PDF-1.7", is_spreadsheet=True)

    def test_text_passed_as_spreadsheet(self) -> None:
        """Test str content cannot be a workbook."""
        with pytest.raises(ParseError):
            parse_tabular("Date,Amount", is_spreadsheet=True)


def _xls_cell(ctype: int, value: Any) -> MagicMock:
    cell = MagicMock()
    cell.ctype = ctype
    cell.value = value
    return cell


class TestParseXls:
    """Tests for legacy XLS workbook parsing."""

    @patch("xlrd.open_workbook")
    def test_reads_first_sheet(self, mock_open: MagicMock) -> None:
        """Test XLS cells including date serials."""
        grid = [
            [_xls_cell(xlrd.XL_CELL_TEXT, "Statement"), _xls_cell(xlrd.XL_CELL_EMPTY, ""),
             _xls_cell(xlrd.XL_CELL_EMPTY, "")],
            [_xls_cell(xlrd.XL_CELL_TEXT, "Date"), _xls_cell(xlrd.XL_CELL_TEXT, "Description"),
             _xls_cell(xlrd.XL_CELL_TEXT, "Amount")],
            [_xls_cell(xlrd.XL_CELL_DATE, 45355.0), _xls_cell(xlrd.XL_CELL_TEXT, "Coffee"),
             _xls_cell(xlrd.XL_CELL_NUMBER, -4.5)],
        ]
        sheet = MagicMock()
        sheet.nrows = 3
        sheet.ncols = 3
        sheet.cell.side_effect = lambda r, c: grid[r][c]
        workbook = MagicMock()
        workbook.datemode = 0
        workbook.sheet_by_index.return_value = sheet
        mock_open.return_value = workbook

        table = parse_tabular(XLS_MAGIC + b"\x00" * 60, is_spreadsheet=True)

        workbook.sheet_by_index.assert_called_once_with(0)
        assert table.headers == ["Date", "Description", "Amount"]
        assert table.rows == [
            {"Date": "2024-03-04", "Description": "Coffee", "Amount": "-4.5"},
        ]

    @patch("xlrd.open_workbook", side_effect=xlrd.XLRDError("Unsupported format"))
    def test_corrupt_workbook(self, mock_open: MagicMock) -> None:
        """Test xlrd failures raise ParseError."""
        with pytest.raises(ParseError, match="XLS"):
            parse_tabular(XLS_MAGIC + b"\x00" * 60, is_spreadsheet=True)
