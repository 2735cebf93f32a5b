"""Abound Credit Union checking/savings exports.

Header: ``Post Date, Debit, Credit, Description, ...`` with withdrawals and
deposits in separate columns.
"""

from collections.abc import Sequence

from budgetsync.models import RawRow, TransactionDraft
from budgetsync.parsers.base import get_category, get_value
from budgetsync.utils import parse_amount


def extract(row: RawRow, headers: Sequence[str] = ()) -> TransactionDraft | None:
    """Extract one Abound row; deposits are positive."""
    date_val = get_value(row, "Post Date", "Date")
    # Some exports write debits as negative numbers; either way they are outflows.
    debit = abs(parse_amount(get_value(row, "Debit")))
    credit = abs(parse_amount(get_value(row, "Credit")))

    if not debit and not credit:
        return None

    return TransactionDraft(
        date=date_val,
        merchant_raw=get_value(row, "Description"),
        amount=credit - debit,
        category=get_category(row, "Category"),
    )
