"""Content fingerprints for imported transactions and duplicate filtering.

The fingerprint is the 32-bit rolling hash ``h = h * 31 + code_unit`` over the
UTF-16 code units of ``"date|amount|merchant_raw"`` (lower-cased, trimmed),
rendered in base 36. Previously stored ``import_hash`` values were produced by
a JavaScript implementation, so the overflow behaviour and the number-to-text
rendering of the amount have to match it exactly.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from budgetsync.logging_setup import get_logger
from budgetsync.models import CanonicalTransaction, DedupResult

logger = get_logger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _field(tx: Any, name: str) -> Any:
    if isinstance(tx, Mapping):
        return tx.get(name)
    return getattr(tx, name, None)


def format_amount(amount: Any) -> str:
    """Render an amount the way a JavaScript template string would."""
    if amount is None:
        return "undefined"
    if isinstance(amount, str):
        return amount

    number = float(amount)
    if number != number:
        return "NaN"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def string_hash(text: str) -> int:
    """32-bit signed polynomial string hash over UTF-16 code units."""
    encoded = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36_DIGITS[rem])
    return sign + "".join(reversed(digits))


def fingerprint_key(tx: Any) -> str:
    """Build the normalized ``date|amount|merchant`` string that gets hashed."""
    date = _field(tx, "date") or ""
    merchant = _field(tx, "merchant_raw") or ""
    key = f"{date}|{format_amount(_field(tx, 'amount'))}|{merchant}"
    return key.lower().strip()


def compute_fingerprint(tx: CanonicalTransaction | Mapping[str, Any] | Any) -> str:
    """
    Compute the ``import_hash`` of a transaction.

    Args:
        tx: Any object or mapping exposing ``date``, ``amount`` and
            ``merchant_raw``

    Returns:
        Base-36 encoded 32-bit hash
    """
    return to_base36(string_hash(fingerprint_key(tx)))


def dedupe(
    transactions: Iterable[CanonicalTransaction],
    existing_hashes: Iterable[str] = (),
) -> DedupResult:
    """
    Drop transactions whose fingerprint has already been seen.

    Works on a private copy of ``existing_hashes`` so the caller's set is
    left untouched. Repeats within the batch are caught as well.

    Args:
        transactions: Normalized transactions for a single account
        existing_hashes: Fingerprints already stored for that account

    Returns:
        DedupResult with accepted transactions and the number discarded
    """
    seen = set(existing_hashes)
    accepted: list[CanonicalTransaction] = []
    duplicates = 0

    for tx in transactions:
        fingerprint = tx.import_hash or compute_fingerprint(tx)
        if fingerprint in seen:
            duplicates += 1
            continue
        seen.add(fingerprint)
        accepted.append(tx)

    if duplicates:
        logger.info("Skipped %d duplicate transactions", duplicates)

    return DedupResult(accepted=accepted, duplicate_count=duplicates)
