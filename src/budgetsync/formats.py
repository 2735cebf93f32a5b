"""Recognize known bank export layouts from their header row."""

from collections.abc import Callable, Sequence

from budgetsync.models import BankFormat

FORMAT_LABELS: dict[BankFormat, str] = {
    BankFormat.ABOUND: "Abound Credit Union",
    BankFormat.AMEX: "American Express",
    BankFormat.USAA: "USAA",
    BankFormat.PAYPAL: "PayPal",
    BankFormat.GENERIC: "Generic CSV",
}

# Evaluated in order; a header set may satisfy several rules.
_FORMAT_RULES: tuple[tuple[BankFormat, Callable[[str], bool]], ...] = (
    (
        BankFormat.ABOUND,
        lambda h: "post date" in h and "debit" in h and "credit" in h,
    ),
    (
        BankFormat.AMEX,
        lambda h: "extended details" in h or "appears on your statement as" in h,
    ),
    (
        BankFormat.USAA,
        lambda h: "original description" in h and "category" in h,
    ),
    (
        BankFormat.PAYPAL,
        lambda h: "date" in h and "name" in h and "net" in h,
    ),
)


def detect_format(headers: Sequence[str] | None) -> BankFormat:
    """
    Classify a header row into one of the known layouts.

    Args:
        headers: Header labels from the parsed file

    Returns:
        The first matching layout, or ``BankFormat.GENERIC``
    """
    if not headers:
        return BankFormat.GENERIC

    header_str = "|".join(str(h) for h in headers).lower()
    for fmt, matches in _FORMAT_RULES:
        if matches(header_str):
            return fmt

    return BankFormat.GENERIC


def describe_format(fmt: BankFormat) -> str:
    """Return a display name for a layout."""
    return FORMAT_LABELS.get(fmt, fmt.value)
