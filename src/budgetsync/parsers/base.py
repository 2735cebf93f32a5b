"""Shared helpers for per-format row extractors."""

from collections.abc import Callable, Sequence

from budgetsync.models import UNCATEGORIZED, RawRow, TransactionDraft, TransactionType

Extractor = Callable[[RawRow, Sequence[str]], TransactionDraft | None]

_TRANSFER_CATEGORIES = {"transfer", "transfers"}
_REFUND_CATEGORIES = {"refund", "refunds"}


def get_value(row: RawRow, *names: str) -> str:
    """
    Look up a cell by header name, ignoring case and surrounding spaces.

    Each name is tried in turn; the first non-blank cell wins. Cell text is
    returned verbatim.

    Args:
        row: Parsed row
        names: Header names in fallback order

    Returns:
        Cell text, or "" if no named column has a value
    """
    lowered = {str(k).strip().lower(): v for k, v in row.items() if k is not None}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None and str(value).strip():
            return str(value)
    return ""


def get_category(row: RawRow, *names: str) -> str:
    """Return the source category label, or the default bucket."""
    return get_value(row, *names).strip() or UNCATEGORIZED


def derive_type(amount: float, category: str | None = None) -> TransactionType:
    """Classify a signed amount, letting transfer/refund categories win."""
    label = (category or "").strip().lower()
    if label in _TRANSFER_CATEGORIES:
        return TransactionType.TRANSFER
    if label in _REFUND_CATEGORIES and amount > 0:
        return TransactionType.REFUND
    return TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE
