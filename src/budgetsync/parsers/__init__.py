"""Per-format row extractors."""

from budgetsync.models import BankFormat
from budgetsync.parsers import abound, amex, generic, paypal, usaa
from budgetsync.parsers.base import Extractor, derive_type, get_value

EXTRACTORS: dict[BankFormat, Extractor] = {
    BankFormat.ABOUND: abound.extract,
    BankFormat.AMEX: amex.extract,
    BankFormat.USAA: usaa.extract,
    BankFormat.PAYPAL: paypal.extract,
    BankFormat.GENERIC: generic.extract,
}


def get_extractor(fmt: BankFormat) -> Extractor:
    """Return the row extractor for a layout."""
    return EXTRACTORS[fmt]


__all__ = [
    "EXTRACTORS",
    "Extractor",
    "derive_type",
    "get_extractor",
    "get_value",
]
