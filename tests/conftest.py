"""Pytest configuration and fixtures."""

import io
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment overrides out of the tests."""
    for var in ("BUDGETSYNC_API_URL", "BUDGETSYNC_MAX_FILE_SIZE", "BUDGETSYNC_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def amex_file(fixtures_dir: Path) -> Path:
    """Return path to American Express fixture."""
    return fixtures_dir / "amex.csv"


@pytest.fixture
def usaa_file(fixtures_dir: Path) -> Path:
    """Return path to USAA fixture."""
    return fixtures_dir / "usaa.csv"


@pytest.fixture
def abound_file(fixtures_dir: Path) -> Path:
    """Return path to Abound Credit Union fixture."""
    return fixtures_dir / "abound.csv"


@pytest.fixture
def paypal_file(fixtures_dir: Path) -> Path:
    """Return path to PayPal fixture."""
    return fixtures_dir / "paypal.csv"


@pytest.fixture
def generic_file(fixtures_dir: Path) -> Path:
    """Return path to a 10-row export with no known layout."""
    return fixtures_dir / "generic.csv"


@pytest.fixture
def generic_debit_credit_file(fixtures_dir: Path) -> Path:
    """Return path to an unknown export with separate debit/credit columns."""
    return fixtures_dir / "generic_debit_credit.csv"


@pytest.fixture
def metadata_only_file(fixtures_dir: Path) -> Path:
    """Return path to a CSV whose rows are all report noise."""
    return fixtures_dir / "metadata_only.csv"


@pytest.fixture
def make_xlsx() -> Callable[[Sequence[Sequence[Any]]], bytes]:
    """Return a helper that builds an XLSX workbook from rows."""

    def _make(rows: Sequence[Sequence[Any]]) -> bytes:
        wb = Workbook()
        ws = wb.active
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _make
