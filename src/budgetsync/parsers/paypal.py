"""PayPal activity and PayPal Savings exports."""

from collections.abc import Sequence

from budgetsync.models import RawRow, TransactionDraft
from budgetsync.parsers.base import get_value
from budgetsync.utils import parse_amount


def extract(row: RawRow, headers: Sequence[str] = ()) -> TransactionDraft | None:
    """Extract one PayPal row using the signed ``Net`` column."""
    date_val = get_value(row, "Date")
    net = get_value(row, "Net")
    if not date_val or not net:
        return None

    return TransactionDraft(
        date=date_val,
        merchant_raw=get_value(row, "Name") or "PayPal",
        amount=parse_amount(net, default=None),
    )
