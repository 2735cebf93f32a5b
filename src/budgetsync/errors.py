"""Exceptions raised by the import pipeline."""

from collections.abc import Sequence


class IngestError(Exception):
    """Base class for statement import failures."""


class ParseError(IngestError):
    """The file could not be decoded as CSV text or as a spreadsheet."""


class EmptyStatementError(IngestError):
    """The file was readable but contained no data rows."""


class NoTransactionsExtractable(IngestError):
    """Rows were present but none produced a valid transaction."""

    def __init__(self, headers: Sequence[str], format: str | None = None) -> None:
        self.headers = list(headers)
        self.format = format
        columns = ", ".join(h for h in self.headers if h) or "(none)"
        super().__init__(
            f"Could not extract valid transactions. Found columns: {columns}"
        )


class ApiError(IngestError):
    """The budgeting backend rejected or failed a request."""


class ConfigError(IngestError):
    """The config file is unreadable, malformed, or would be overwritten."""
