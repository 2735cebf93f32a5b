"""Map free-form header labels to semantic column roles."""

from collections.abc import Sequence
from dataclasses import dataclass

DATE_PATTERNS = (
    "date",
    "transaction date",
    "posting date",
    "post date",
    "posted date",
    "trans date",
)
DESCRIPTION_PATTERNS = (
    "description",
    "merchant",
    "payee",
    "name",
    "memo",
    "details",
    "narrative",
)
CATEGORY_PATTERNS = ("category",)
AMOUNT_PATTERNS = ("amount", "total", "net", "sum", "value")
DEBIT_PATTERNS = ("debit", "withdrawal", "debits", "charge")
CREDIT_PATTERNS = ("credit", "deposit", "credits")


def resolve_column(headers: Sequence[str], patterns: Sequence[str]) -> str | None:
    """
    Find the header that best matches a list of keyword patterns.

    An exact (case-insensitive) match wins, checking patterns in the order
    given. Otherwise the first header containing a pattern is used, again
    checking patterns in order.

    Args:
        headers: Header labels in file order
        patterns: Lowercase keywords in priority order

    Returns:
        The matching header with its original casing, or None
    """
    lowered = [(h, h.strip().lower()) for h in headers if h]

    for pattern in patterns:
        for header, low in lowered:
            if low == pattern:
                return header

    for pattern in patterns:
        for header, low in lowered:
            if pattern in low:
                return header

    return None


@dataclass(frozen=True)
class GenericColumns:
    """Column roles resolved once per file for the generic layout."""

    date: str | None = None
    description: str | None = None
    category: str | None = None
    amount: str | None = None
    debit: str | None = None
    credit: str | None = None

    @property
    def has_amount(self) -> bool:
        return bool(self.amount or self.debit or self.credit)


def resolve_generic_columns(headers: Sequence[str]) -> GenericColumns:
    """
    Resolve every column role used by the generic layout.

    Debit and credit columns are resolved first and are never reused as
    the signed amount column, so ``Debit Amount``/``Credit Amount`` exports
    are read as a debit/credit pair.
    """
    debit = resolve_column(headers, DEBIT_PATTERNS)
    credit = resolve_column(headers, CREDIT_PATTERNS)
    amount_candidates = [h for h in headers if h not in (debit, credit)]

    return GenericColumns(
        date=resolve_column(headers, DATE_PATTERNS),
        description=resolve_column(headers, DESCRIPTION_PATTERNS),
        category=resolve_column(headers, CATEGORY_PATTERNS),
        amount=resolve_column(amount_candidates, AMOUNT_PATTERNS),
        debit=debit,
        credit=credit,
    )
