"""Client for the budgeting backend's entity API."""

from dataclasses import dataclass, field
from typing import Any

import requests

from budgetsync.config import DEFAULT_API_URL, DEFAULT_BATCH_SIZE, DEFAULT_TIMEOUT
from budgetsync.errors import ApiError
from budgetsync.logging_setup import get_logger
from budgetsync.models import CanonicalTransaction

logger = get_logger(__name__)


@dataclass
class UploadResult:
    """Result of creating transactions in the backend."""

    created: int = 0
    ids: list[Any] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every batch was stored."""
        return not self.errors


def _rows_from_response(payload: Any) -> list[dict[str, Any]]:
    """Accept both plain lists and paginated ``{"data": [...]}`` bodies."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "items", "results"):
            rows = payload.get(key)
            if isinstance(rows, list):
                return rows
    return []


class BudgetApiClient:
    """Client for the ``/api/{entity}`` CRUD endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize client with the API root, e.g. http://localhost:8000/api."""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request."""
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self._session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ApiError(f"{method} {url} failed: {e}") from e
        return response.json()

    def list_accounts(self) -> list[dict[str, Any]]:
        """Get all accounts."""
        return _rows_from_response(self._request("GET", "account"))

    def fetch_existing_hashes(
        self, account_id: str | int, limit: int = 500
    ) -> set[str]:
        """Get import hashes of the most recent transactions in an account.

        Args:
            account_id: Account to look up
            limit: Number of most recent transactions to consider

        Returns:
            Set of non-empty ``import_hash`` values
        """
        rows = _rows_from_response(
            self._request(
                "GET",
                "transaction",
                params={
                    "account_id": account_id,
                    "sort_by": "date",
                    "sort_order": "desc",
                    "limit": limit,
                },
            )
        )
        hashes = {str(row["import_hash"]) for row in rows if row.get("import_hash")}
        logger.debug("Loaded %d existing hashes for account %s", len(hashes), account_id)
        return hashes

    def bulk_create(
        self,
        transactions: list[CanonicalTransaction],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> UploadResult:
        """Create transactions in batches.

        A failed batch is recorded in ``errors`` and the remaining batches
        are still sent.

        Args:
            transactions: Transactions to store
            batch_size: Transactions per request

        Returns:
            UploadResult with created count, new ids and per-batch errors
        """
        result = UploadResult()

        for i in range(0, len(transactions), batch_size):
            batch = [tx.to_dict() for tx in transactions[i : i + batch_size]]
            batch_no = i // batch_size + 1

            try:
                response = self._request("POST", "transaction/bulk", json={"items": batch})
            except ApiError as e:
                logger.warning("Batch %d failed: %s", batch_no, e)
                result.errors.append(f"Batch {batch_no}: {e}")
                continue

            if isinstance(response, dict):
                ids = response.get("ids", [])
                result.ids.extend(ids)
                result.created += int(response.get("created", len(ids)))

        return result
