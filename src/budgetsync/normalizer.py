"""Turn parsed statement rows into canonical transactions and run imports."""

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path

from budgetsync.errors import EmptyStatementError, NoTransactionsExtractable, ParseError
from budgetsync.fingerprint import dedupe
from budgetsync.formats import describe_format, detect_format
from budgetsync.logging_setup import get_logger
from budgetsync.models import (
    BankFormat,
    CanonicalTransaction,
    ImportResult,
    RawRow,
    TransactionDraft,
)
from budgetsync.parsers import derive_type, get_extractor
from budgetsync.tabular import parse_tabular
from budgetsync.utils import is_spreadsheet, normalize_date_checked, read_file

logger = get_logger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


def finalize_draft(
    draft: TransactionDraft | None,
    account_id: str | int | None,
    strict_dates: bool = False,
) -> CanonicalTransaction | None:
    """
    Apply the checks shared by every layout to an extracted row.

    Args:
        draft: Extractor output, or None if the row was already rejected
        account_id: Destination account assigned by the caller
        strict_dates: Also reject rows whose date is not ISO after normalizing

    Returns:
        CanonicalTransaction, or None if the row has no usable date or amount
    """
    if draft is None:
        return None
    if not draft.date or not draft.date.strip():
        return None
    if draft.amount is None or draft.amount != draft.amount or draft.amount == 0:
        return None

    date_str, normalized = normalize_date_checked(draft.date)
    if strict_dates and not normalized:
        return None

    return CanonicalTransaction(
        date=date_str,
        merchant_raw=draft.merchant_raw,
        merchant_clean=draft.merchant_clean or draft.merchant_raw or "",
        amount=draft.amount,
        type=draft.type or derive_type(draft.amount, draft.category),
        category=draft.category,
        account_id=account_id,
    )


def normalize_transactions(
    rows: Sequence[RawRow],
    headers: Sequence[str],
    account_id: str | int | None,
    *,
    fmt: BankFormat | None = None,
    strict_dates: bool = False,
) -> list[CanonicalTransaction]:
    """
    Convert parsed rows into canonical transactions.

    Rows without a usable date or a non-zero amount are dropped.

    Args:
        rows: Parsed rows
        headers: Header labels, used for layout detection
        account_id: Destination account for every transaction
        fmt: Layout override; detected from ``headers`` when omitted
        strict_dates: Drop rows whose date cannot be normalized to ISO

    Returns:
        Transactions in file order

    Raises:
        NoTransactionsExtractable: If rows were given but none were usable
    """
    if fmt is None:
        fmt = detect_format(headers)
    extract = get_extractor(fmt)

    transactions: list[CanonicalTransaction] = []
    unnormalized_dates = 0

    for index, row in enumerate(rows):
        tx = finalize_draft(extract(row, headers), account_id, strict_dates)
        if tx is None:
            logger.debug("Dropped row %d (%s): no usable date or amount", index, fmt.value)
            continue
        if not normalize_date_checked(tx.date)[1]:
            unnormalized_dates += 1
        transactions.append(tx)

    if unnormalized_dates:
        logger.warning(
            "%d transactions kept a date that could not be normalized to YYYY-MM-DD",
            unnormalized_dates,
        )

    if rows and not transactions:
        raise NoTransactionsExtractable(headers, format=fmt.value)

    logger.debug(
        "Extracted %d of %d rows as %s", len(transactions), len(rows), describe_format(fmt)
    )
    return transactions


class StatementImporter:
    """
    Runs the full import pipeline for one account.

    Usage:
        importer = StatementImporter()
        result = importer.import_file(Path("export.csv"), account_id=3,
                                      existing_hashes=known)
        store(result.accepted)
    """

    def __init__(
        self,
        strict_dates: bool = False,
        max_file_size: int | None = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        """
        Initialize importer.

        Args:
            strict_dates: Drop rows whose date cannot be normalized to ISO
            max_file_size: Size ceiling in bytes, or None for no limit
        """
        self.strict_dates = strict_dates
        self.max_file_size = max_file_size

    def import_content(
        self,
        content: bytes | str,
        account_id: str | int | None,
        existing_hashes: Iterable[str] = (),
        filename: str | None = None,
    ) -> ImportResult:
        """
        Parse, normalize and deduplicate one uploaded statement.

        Args:
            content: File bytes or CSV text
            account_id: Destination account
            existing_hashes: Fingerprints already stored for the account
            filename: Original file name, used to spot workbooks

        Returns:
            ImportResult with the accepted transactions

        Raises:
            ParseError: If the file is too large or cannot be decoded
            EmptyStatementError: If the file has no data rows
            NoTransactionsExtractable: If no row produced a transaction
        """
        if (
            self.max_file_size is not None
            and isinstance(content, bytes)
            and len(content) > self.max_file_size
        ):
            raise ParseError(
                f"File too large: maximum size is {self.max_file_size // (1024 * 1024)}MB"
            )

        spreadsheet = isinstance(content, bytes) and is_spreadsheet(content, filename)
        table = parse_tabular(content, is_spreadsheet=spreadsheet)
        if not table.headers or not (table.rows or table.dropped_rows):
            raise EmptyStatementError("Empty or invalid file")

        fmt = detect_format(table.headers)
        if not table.rows:
            raise NoTransactionsExtractable(table.headers, format=fmt.value)

        transactions = normalize_transactions(
            table.rows,
            table.headers,
            account_id,
            fmt=fmt,
            strict_dates=self.strict_dates,
        )
        deduped = dedupe(transactions, existing_hashes)

        result = ImportResult(
            format=fmt,
            headers=table.headers,
            total_rows=len(table.rows),
            accepted=deduped.accepted,
            duplicate_count=deduped.duplicate_count,
        )
        logger.info(
            "Imported %s: %d new, %d duplicates, %d rejected of %d rows",
            describe_format(fmt),
            len(result.accepted),
            result.duplicate_count,
            result.rejected_count,
            result.total_rows,
        )
        return result

    def import_file(
        self,
        filepath: Path,
        account_id: str | int | None,
        existing_hashes: Iterable[str] = (),
    ) -> ImportResult:
        """Read a statement from disk and import it."""
        content = read_file(filepath, max_size=self.max_file_size)
        return self.import_content(
            content, account_id, existing_hashes, filename=filepath.name
        )

    @staticmethod
    def write_csv(
        transactions: list[CanonicalTransaction],
        output_path: Path,
        delimiter: str = ",",
    ) -> None:
        """
        Write transactions to a CSV file.

        Args:
            transactions: Transactions to write
            output_path: Output file path
            delimiter: CSV delimiter (default comma)
        """
        fieldnames = [
            "date",
            "merchant_raw",
            "merchant_clean",
            "amount",
            "type",
            "category",
            "account_id",
            "import_hash",
        ]
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(
                f, fieldnames=fieldnames, delimiter=delimiter, extrasaction="ignore"
            )
            writer.writeheader()
            for tx in transactions:
                writer.writerow(tx.to_dict())
