"""Data models for imported bank transactions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

RawRow = dict[str, str]

UNCATEGORIZED = "uncategorized"


class BankFormat(str, Enum):
    """Known bank export layouts, recognized by header signature."""

    ABOUND = "abound"
    AMEX = "amex"
    USAA = "usaa"
    PAYPAL = "paypal"
    GENERIC = "generic"


class TransactionType(str, Enum):
    """Direction of money movement for a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    REFUND = "refund"


@dataclass
class TabularData:
    """Header labels plus one mapping per data row."""

    headers: list[str]
    rows: list[RawRow] = field(default_factory=list)
    dropped_rows: int = 0  # non-blank lines with fewer than two filled cells

    def __len__(self) -> int:
        return len(self.rows)


@dataclass
class TransactionDraft:
    """Per-row extraction result before the shared post-processing step."""

    date: str
    merchant_raw: str
    amount: float | None
    category: str = UNCATEGORIZED
    merchant_clean: str | None = None
    type: TransactionType | None = None


@dataclass(frozen=True)
class CanonicalTransaction:
    """Represents a normalized, storage-ready transaction."""

    date: str
    merchant_raw: str
    amount: float
    type: TransactionType
    category: str = UNCATEGORIZED
    merchant_clean: str = ""
    account_id: str | int | None = None
    import_hash: str = field(init=False, default="")

    def __post_init__(self) -> None:
        """Fill derived fields."""
        if not self.merchant_clean:
            object.__setattr__(self, "merchant_clean", self.merchant_raw)
        if not self.category:
            object.__setattr__(self, "category", UNCATEGORIZED)

        from budgetsync.fingerprint import compute_fingerprint

        object.__setattr__(self, "import_hash", compute_fingerprint(self))

    @property
    def is_expense(self) -> bool:
        """Return True if money left the account."""
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        """Return True if money came into the account."""
        return self.amount > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the backend's transaction entity payload."""
        return {
            "date": self.date,
            "merchant_raw": self.merchant_raw,
            "merchant_clean": self.merchant_clean,
            "amount": self.amount,
            "type": self.type.value,
            "category": self.category,
            "account_id": self.account_id,
            "import_hash": self.import_hash,
            "is_reviewed": False,
            "is_flagged": False,
            "is_duplicate": False,
        }


@dataclass
class DedupResult:
    """Outcome of filtering a batch against known fingerprints."""

    accepted: list[CanonicalTransaction]
    duplicate_count: int


@dataclass
class ImportResult:
    """Summary of one statement import."""

    format: BankFormat
    headers: list[str]
    total_rows: int
    accepted: list[CanonicalTransaction]
    duplicate_count: int = 0

    @property
    def extracted_count(self) -> int:
        """Transactions that survived normalization, duplicates included."""
        return len(self.accepted) + self.duplicate_count

    @property
    def rejected_count(self) -> int:
        """Rows dropped because they had no usable date or amount."""
        return self.total_rows - self.extracted_count
