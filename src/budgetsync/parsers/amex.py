"""American Express card exports.

Header: ``Date, Description, Amount, Extended Details,
Appears On Your Statement As, ..., Category``. Charges are listed as
positive amounts and payments/credits as negative.
"""

from collections.abc import Sequence

from budgetsync.models import RawRow, TransactionDraft
from budgetsync.parsers.base import get_category, get_value
from budgetsync.utils import parse_amount


def extract(row: RawRow, headers: Sequence[str] = ()) -> TransactionDraft | None:
    """Extract one AMEX row, flipping the sign so charges are outflows."""
    raw_amount = parse_amount(get_value(row, "Amount"), default=None)
    if raw_amount is None:
        return None

    return TransactionDraft(
        date=get_value(row, "Date"),
        merchant_raw=get_value(row, "Description", "Appears On Your Statement As"),
        amount=-raw_amount,
        category=get_category(row, "Category"),
    )
