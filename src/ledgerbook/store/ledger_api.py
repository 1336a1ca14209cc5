"""Async client for the ledger store's REST API (PostgREST dialect)."""

from datetime import date
from typing import Any, cast

import httpx
import structlog

from ledgerbook.config import get_settings
from ledgerbook.store.base import (
    ClientProfile,
    DateRange,
    InvoiceRecord,
    InvoiceType,
    JournalLine,
    TrialBalanceEntry,
    to_date,
)

logger = structlog.get_logger(__name__)

Params = list[tuple[str, str]]


class LedgerStoreError(Exception):
    """Base exception for ledger store errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthenticationError(LedgerStoreError):
    """API key rejected."""

    pass


class LedgerStoreClient:
    """Async client for the ledger store.

    Failures are raised immediately; nothing is retried.
    """

    REST_PREFIX = "/rest/v1"

    _JOURNAL_SELECT = (
        "id,entry_date,"
        "line_items:journal_line_items(account_name,account_code,debit_amount,credit_amount)"
    )

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.ledger_api_url).rstrip("/")
        self._api_key = api_key or settings.ledger_api_key.get_secret_value()
        self._timeout = timeout if timeout is not None else settings.ledger_timeout

        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "LedgerStoreClient":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    # === Generic Request Methods ===

    async def _request(
        self,
        method: str,
        path: str,
        params: Params | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make an authenticated API request."""
        client = await self._get_client()

        try:
            response = await client.request(
                method=method,
                url=f"{self.REST_PREFIX}{path}",
                params=params,
                json=json,
                headers=self._get_headers(),
            )
        except httpx.RequestError as e:
            logger.error("ledger_request_failed", method=method, path=path, error=str(e))
            raise LedgerStoreError(f"Request failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Ledger store rejected the API key", status_code=response.status_code
            )

        if response.status_code >= 400:
            try:
                error_detail = response.json() if response.content else {}
            except ValueError:
                error_detail = {
                    "raw": response.text[:500] if response.text else "empty response"
                }
            logger.warning(
                "ledger_api_error",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise LedgerStoreError(
                f"API error: {response.status_code}",
                status_code=response.status_code,
                details=error_detail,
            )

        return response.json() if response.content else []

    async def get(self, path: str, params: Params | None = None) -> Any:
        """Make GET request."""
        return await self._request("GET", path, params=params)

    async def post(
        self, path: str, json: dict[str, Any] | None = None, params: Params | None = None
    ) -> Any:
        """Make POST request."""
        return await self._request("POST", path, params=params, json=json)

    @staticmethod
    def _extract_rows(result: Any) -> list[dict[str, Any]]:
        """Return the list of row objects from a response body."""
        if isinstance(result, list):
            return [cast(dict[str, Any], row) for row in result if isinstance(row, dict)]
        if isinstance(result, dict):
            return [result]
        return []

    @staticmethod
    def _date_filters(column: str, period: DateRange) -> Params:
        filters: Params = []
        if period.start is not None:
            filters.append((column, f"gte.{period.start.isoformat()}"))
        filters.append((column, f"lte.{period.end.isoformat()}"))
        return filters

    # === Ledger Store Contract ===

    async def fetch_client(self, client_id: str) -> ClientProfile | None:
        """Get the client's name, GSTIN and address."""
        result = await self.get(
            "/clients",
            params=[
                ("select", "client_name,business_name,gstin,address"),
                ("id", f"eq.{client_id}"),
                ("limit", "1"),
            ],
        )
        rows = self._extract_rows(result)
        if not rows:
            logger.warning("client_not_found", client_id=client_id)
            return None
        return ClientProfile.from_row(client_id, rows[0])

    async def fetch_aggregated_trial_balance(
        self, client_id: str, as_of: date
    ) -> list[TrialBalanceEntry]:
        """Call the store's trial balance aggregation function."""
        result = await self.post(
            "/rpc/get_trial_balance",
            json={"p_client_id": client_id, "p_as_of_date": as_of.isoformat()},
        )
        return [TrialBalanceEntry.from_row(row) for row in self._extract_rows(result)]

    async def fetch_posted_journal_lines(
        self, client_id: str, period: DateRange
    ) -> list[JournalLine]:
        """List line items of posted journal entries dated within the period."""
        params: Params = [
            ("select", self._JOURNAL_SELECT),
            ("client_id", f"eq.{client_id}"),
            ("status", "eq.posted"),
            *self._date_filters("entry_date", period),
        ]
        result = await self.get("/journal_entries", params=params)

        lines: list[JournalLine] = []
        for entry in self._extract_rows(result):
            entry_date = to_date(entry.get("entry_date"))
            if entry_date is None:
                logger.warning("journal_entry_without_date", entry_id=entry.get("id"))
                continue
            entry_id = str(entry["id"]) if entry.get("id") is not None else None
            for item in entry.get("line_items") or []:
                lines.append(JournalLine.from_row(item, entry_date, entry_id))
        return lines

    async def fetch_invoices(
        self, client_id: str, invoice_type: InvoiceType, period: DateRange
    ) -> list[InvoiceRecord]:
        """List invoices of one type dated within the period."""
        params: Params = [
            ("select", "*"),
            ("client_id", f"eq.{client_id}"),
            ("invoice_type", f"eq.{invoice_type.value}"),
            *self._date_filters("invoice_date", period),
        ]
        result = await self.get("/invoices", params=params)
        return [InvoiceRecord.from_row(row) for row in self._extract_rows(result)]
