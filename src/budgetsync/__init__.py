"""budgetsync - Import bank statement exports into the budget app."""

from budgetsync.errors import (
    ConfigError,
    EmptyStatementError,
    IngestError,
    NoTransactionsExtractable,
    ParseError,
)
from budgetsync.fingerprint import compute_fingerprint, dedupe
from budgetsync.formats import detect_format
from budgetsync.models import BankFormat, CanonicalTransaction, TransactionType
from budgetsync.normalizer import StatementImporter, normalize_transactions
from budgetsync.tabular import parse_tabular

__version__ = "0.1.0"
__all__ = [
    "BankFormat",
    "CanonicalTransaction",
    "ConfigError",
    "EmptyStatementError",
    "IngestError",
    "NoTransactionsExtractable",
    "ParseError",
    "StatementImporter",
    "TransactionType",
    "compute_fingerprint",
    "dedupe",
    "detect_format",
    "normalize_transactions",
    "parse_tabular",
]
