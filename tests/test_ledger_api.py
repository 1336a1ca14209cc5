"""Tests for the ledger store REST client."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ledgerbook.accounts import AccountType
from ledgerbook.store import (
    AuthenticationError,
    DateRange,
    InvoiceType,
    LedgerStoreClient,
    LedgerStoreError,
)


@pytest.fixture
def client():
    """Create a LedgerStoreClient instance."""
    return LedgerStoreClient(base_url="http://localhost:54321", api_key="service-key")


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"x" if payload is not None else b""
    response.json.return_value = payload
    response.text = ""
    return response


def _patched(client, mock_httpx_client, response):
    mock_httpx_client.request = AsyncMock(return_value=response)
    return patch.object(client, "_get_client", AsyncMock(return_value=mock_httpx_client))


class TestLedgerStoreClientInit:
    """Tests for LedgerStoreClient initialization."""

    def test_init_with_explicit_params(self):
        client = LedgerStoreClient(base_url="http://books:9000", api_key="k", timeout=5)

        assert client.base_url == "http://books:9000"
        assert client._api_key == "k"
        assert client._timeout == 5

    def test_init_strips_trailing_slash(self):
        client = LedgerStoreClient(base_url="http://localhost:54321/", api_key="k")

        assert client.base_url == "http://localhost:54321"

    def test_init_from_settings(self):
        client = LedgerStoreClient(base_url="http://localhost:54321")

        assert client._api_key == "test-service-key"

    def test_headers(self, client):
        headers = client._get_headers()

        assert headers["apikey"] == "service-key"
        assert headers["Authorization"] == "Bearer service-key"


class TestRequests:
    """Tests for the generic request path."""

    @pytest.mark.asyncio
    async def test_unauthorized(self, client, mock_httpx_client):
        with _patched(client, mock_httpx_client, _response(401, {"message": "bad key"})):
            with pytest.raises(AuthenticationError):
                await client.get("/clients")

    @pytest.mark.asyncio
    async def test_server_error_carries_details(self, client, mock_httpx_client):
        with _patched(client, mock_httpx_client, _response(500, {"message": "boom"})):
            with pytest.raises(LedgerStoreError) as exc_info:
                await client.get("/clients")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == {"message": "boom"}

    @pytest.mark.asyncio
    async def test_transport_error(self, client, mock_httpx_client):
        mock_httpx_client.request = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with patch.object(client, "_get_client", AsyncMock(return_value=mock_httpx_client)):
            with pytest.raises(LedgerStoreError, match="Request failed"):
                await client.get("/clients")

        assert mock_httpx_client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_body(self, client, mock_httpx_client):
        with _patched(client, mock_httpx_client, _response(204)):
            assert await client.get("/clients") == []

    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        async with LedgerStoreClient(base_url="http://localhost:54321", api_key="k") as store:
            assert store._client is not None
            http_client = store._client

        assert store._client is None
        assert http_client.is_closed


class TestFetchClient:
    """Tests for fetch_client."""

    @pytest.mark.asyncio
    async def test_found(self, client, mock_httpx_client):
        payload = [
            {
                "client_name": None,
                "business_name": "Acme Traders",
                "gstin": " 27AAAPA1234A1ZT ",
                "address": "Mumbai",
            }
        ]
        with _patched(client, mock_httpx_client, _response(200, payload)):
            profile = await client.fetch_client("c-1")

        assert profile.name == "Acme Traders"
        assert profile.tax_id == "27AAAPA1234A1ZT"
        call = mock_httpx_client.request.call_args
        assert call.kwargs["method"] == "GET"
        assert call.kwargs["url"] == "/rest/v1/clients"
        assert ("id", "eq.c-1") in call.kwargs["params"]

    @pytest.mark.asyncio
    async def test_not_found(self, client, mock_httpx_client):
        with _patched(client, mock_httpx_client, _response(200, [])):
            assert await client.fetch_client("missing") is None


class TestFetchTrialBalance:
    """Tests for fetch_aggregated_trial_balance."""

    @pytest.mark.asyncio
    async def test_calls_rpc(self, client, mock_httpx_client):
        payload = [
            {
                "account_code": "1100",
                "account_name": "Cash",
                "account_type": "Asset",
                "debit_total": "1500.50",
                "credit_total": None,
            }
        ]
        with _patched(client, mock_httpx_client, _response(200, payload)):
            entries = await client.fetch_aggregated_trial_balance("c-1", date(2025, 3, 31))

        assert entries[0].account_type is AccountType.ASSET
        assert entries[0].debit_total == Decimal("1500.50")
        assert entries[0].credit_total == 0
        call = mock_httpx_client.request.call_args
        assert call.kwargs["method"] == "POST"
        assert call.kwargs["url"] == "/rest/v1/rpc/get_trial_balance"
        assert call.kwargs["json"] == {"p_client_id": "c-1", "p_as_of_date": "2025-03-31"}

    @pytest.mark.asyncio
    async def test_unknown_account_type(self, client, mock_httpx_client):
        payload = [{"account_code": "9000", "account_name": "?", "account_type": "memo"}]
        with _patched(client, mock_httpx_client, _response(200, payload)):
            with pytest.raises(ValueError):
                await client.fetch_aggregated_trial_balance("c-1", date(2025, 3, 31))


class TestFetchJournalLines:
    """Tests for fetch_posted_journal_lines."""

    @pytest.mark.asyncio
    async def test_flattens_line_items(self, client, mock_httpx_client):
        payload = [
            {
                "id": "je-1",
                "entry_date": "2025-01-10",
                "line_items": [
                    {"account_code": "1110", "account_name": "Cash", "debit_amount": "8000"},
                    {"account_code": "4100", "account_name": "Sales", "credit_amount": 8000},
                ],
            },
            {"id": "je-2", "entry_date": None, "line_items": [{"account_code": "1110"}]},
            {"id": "je-3", "entry_date": "2025-01-11", "line_items": None},
        ]
        period = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31))
        with _patched(client, mock_httpx_client, _response(200, payload)):
            lines = await client.fetch_posted_journal_lines("c-1", period)

        assert len(lines) == 2
        assert lines[0].entry_date == date(2025, 1, 10)
        assert lines[0].entry_id == "je-1"
        assert lines[0].debit_amount == Decimal("8000")
        assert lines[1].credit_amount == Decimal("8000")
        params = mock_httpx_client.request.call_args.kwargs["params"]
        assert ("status", "eq.posted") in params
        assert ("entry_date", "gte.2025-01-01") in params
        assert ("entry_date", "lte.2025-01-31") in params

    @pytest.mark.asyncio
    async def test_open_start(self, client, mock_httpx_client):
        with _patched(client, mock_httpx_client, _response(200, [])):
            await client.fetch_posted_journal_lines("c-1", DateRange(end=date(2024, 12, 31)))

        params = mock_httpx_client.request.call_args.kwargs["params"]
        assert [value for key, value in params if key == "entry_date"] == ["lte.2024-12-31"]


class TestFetchInvoices:
    """Tests for fetch_invoices."""

    @pytest.mark.asyncio
    async def test_filters_and_parses(self, client, mock_httpx_client):
        payload = [
            {
                "invoice_number": "INV-1",
                "invoice_date": "2025-03-10",
                "customer_gstin": "27BBBPB5678B1Z3",
                "customer_name": "Beta Stores",
                "subtotal": "10000",
                "cgst": "900",
                "sgst": "900",
                "total_amount": "11800",
            }
        ]
        period = DateRange(start=date(2025, 3, 1), end=date(2025, 3, 31))
        with _patched(client, mock_httpx_client, _response(200, payload)):
            invoices = await client.fetch_invoices("c-1", InvoiceType.PURCHASE, period)

        assert invoices[0].buyer_tax_id == "27BBBPB5678B1Z3"
        assert invoices[0].total_tax == Decimal("1800")
        assert invoices[0].igst == 0
        params = mock_httpx_client.request.call_args.kwargs["params"]
        assert ("invoice_type", "eq.purchase") in params
        assert ("invoice_date", "gte.2025-03-01") in params
