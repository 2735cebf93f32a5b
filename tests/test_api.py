"""Tests for the budgeting backend client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from budgetsync.api import BudgetApiClient, UploadResult
from budgetsync.errors import ApiError
from budgetsync.models import CanonicalTransaction, TransactionType


def _transactions(count: int) -> list[CanonicalTransaction]:
    return [
        CanonicalTransaction(
            date="2024-01-15",
            merchant_raw=f"Merchant {i}",
            amount=-(i + 1),
            type=TransactionType.EXPENSE,
            account_id=3,
        )
        for i in range(count)
    ]


def _response(payload: object) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    return response


class TestUploadResult:
    """Tests for UploadResult."""

    def test_ok(self) -> None:
        """Test ok reflects recorded errors."""
        assert UploadResult(created=2).ok is True
        assert UploadResult(errors=["Batch 1: boom"]).ok is False


class TestBudgetApiClient:
    """Tests for BudgetApiClient class."""

    @patch("budgetsync.api.requests.Session")
    def test_fetch_existing_hashes(self, mock_session_class: MagicMock) -> None:
        """Test recent hashes are requested newest first."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response([
            {"id": 1, "import_hash": "abc"},
            {"id": 2, "import_hash": ""},
            {"id": 3},
            {"id": 4, "import_hash": "-zik0zk"},
        ])

        client = BudgetApiClient("http://localhost:8000/api/")
        hashes = client.fetch_existing_hashes(3, limit=500)

        assert hashes == {"abc", "-zik0zk"}
        method, url = mock_session.request.call_args.args
        assert method == "GET"
        assert url == "http://localhost:8000/api/transaction"
        assert mock_session.request.call_args.kwargs["params"] == {
            "account_id": 3,
            "sort_by": "date",
            "sort_order": "desc",
            "limit": 500,
        }

    @patch("budgetsync.api.requests.Session")
    def test_paginated_response_body(self, mock_session_class: MagicMock) -> None:
        """Test list payloads wrapped in a data key."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response({"data": [{"import_hash": "x1"}]})

        client = BudgetApiClient()

        assert client.fetch_existing_hashes(1) == {"x1"}

    @patch("budgetsync.api.requests.Session")
    def test_list_accounts(self, mock_session_class: MagicMock) -> None:
        """Test getting accounts."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response([{"id": 1, "name": "Checking"}])

        client = BudgetApiClient()
        accounts = client.list_accounts()

        assert accounts == [{"id": 1, "name": "Checking"}]

    @patch("budgetsync.api.requests.Session")
    def test_request_error_wrapped(self, mock_session_class: MagicMock) -> None:
        """Test transport failures surface as ApiError."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.side_effect = requests.ConnectionError("refused")

        client = BudgetApiClient()

        with pytest.raises(ApiError, match="refused"):
            client.list_accounts()

    @patch("budgetsync.api.requests.Session")
    def test_bulk_create_success(self, mock_session_class: MagicMock) -> None:
        """Test successful bulk creation."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response({"created": 3, "ids": [1, 2, 3]})

        client = BudgetApiClient()
        result = client.bulk_create(_transactions(3))

        assert result.ok
        assert result.created == 3
        assert result.ids == [1, 2, 3]
        method, url = mock_session.request.call_args.args
        assert method == "POST"
        assert url.endswith("/transaction/bulk")
        items = mock_session.request.call_args.kwargs["json"]["items"]
        assert len(items) == 3
        assert items[0]["import_hash"]
        assert items[0]["type"] == "expense"

    @patch("budgetsync.api.requests.Session")
    def test_bulk_create_batches(self, mock_session_class: MagicMock) -> None:
        """Test large sets are split into batches."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _response({"created": 50, "ids": []})

        client = BudgetApiClient()
        client.bulk_create(_transactions(120), batch_size=50)

        assert mock_session.request.call_count == 3
        sizes = [len(c.kwargs["json"]["items"]) for c in mock_session.request.call_args_list]
        assert sizes == [50, 50, 20]

    @patch("budgetsync.api.requests.Session")
    def test_failed_batch_does_not_stop_upload(self, mock_session_class: MagicMock) -> None:
        """Test a failing batch is recorded and later batches still sent."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.side_effect = [
            requests.HTTPError("500 Server Error"),
            _response({"created": 1, "ids": [9]}),
        ]

        client = BudgetApiClient()
        result = client.bulk_create(_transactions(2), batch_size=1)

        assert result.created == 1
        assert result.ids == [9]
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Batch 1:")
        assert not result.ok
