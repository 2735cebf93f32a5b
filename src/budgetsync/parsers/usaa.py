"""USAA bank exports.

Header: ``Date, Description, Original Description, Category, Amount, Status``.
Amounts are already signed (debits negative).
"""

from collections.abc import Sequence

from budgetsync.models import RawRow, TransactionDraft
from budgetsync.parsers.base import get_category, get_value
from budgetsync.utils import parse_amount


def extract(row: RawRow, headers: Sequence[str] = ()) -> TransactionDraft | None:
    """Extract one USAA row."""
    amount = parse_amount(get_value(row, "Amount"), default=None)
    if amount is None:
        return None

    # USAA ships its own cleaned payee in "Description"
    cleaned = get_value(row, "Description").strip()

    return TransactionDraft(
        date=get_value(row, "Date"),
        merchant_raw=get_value(row, "Original Description", "Description"),
        amount=amount,
        category=get_category(row, "Category"),
        merchant_clean=cleaned or None,
    )
