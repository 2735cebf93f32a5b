"""Fallback extractor for exports without a recognized layout.

Columns are found by keyword, see ``budgetsync.columns``. A single signed
amount column is preferred; otherwise separate debit and credit columns are
combined.
"""

from collections.abc import Sequence
from functools import lru_cache

from budgetsync.columns import GenericColumns, resolve_generic_columns
from budgetsync.models import UNCATEGORIZED, RawRow, TransactionDraft
from budgetsync.utils import parse_amount


@lru_cache(maxsize=64)
def _columns_for(headers: tuple[str, ...]) -> GenericColumns:
    return resolve_generic_columns(headers)


def _cell(row: RawRow, column: str | None) -> str:
    if not column:
        return ""
    return row.get(column) or ""


def extract(row: RawRow, headers: Sequence[str] = ()) -> TransactionDraft | None:
    """Extract one row of an unrecognized export."""
    columns = _columns_for(tuple(headers or row.keys()))

    amount_text = _cell(row, columns.amount)
    if amount_text.strip():
        amount = parse_amount(amount_text, default=None)
    else:
        # Debit columns may be signed or unsigned; both mean money out.
        debit = abs(parse_amount(_cell(row, columns.debit)))
        credit = abs(parse_amount(_cell(row, columns.credit)))
        amount = credit - debit

    if not amount:
        return None

    return TransactionDraft(
        date=_cell(row, columns.date),
        merchant_raw=_cell(row, columns.description),
        amount=amount,
        category=_cell(row, columns.category).strip() or UNCATEGORIZED,
    )
