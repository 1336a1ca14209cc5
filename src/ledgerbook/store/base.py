"""Records read from the ledger store and the store contract."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol

from ledgerbook.accounts import AccountType

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a store value to Decimal; missing or invalid values read as zero."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return ZERO


def to_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class InvoiceType(str, Enum):
    SALES = "sales"
    PURCHASE = "purchase"


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; ``start=None`` means from the beginning of the books."""

    end: date
    start: date | None = None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        return day <= self.end


@dataclass(frozen=True)
class ClientProfile:
    client_id: str
    name: str | None
    tax_id: str | None = None
    address: str | None = None

    @classmethod
    def from_row(cls, client_id: str, row: dict[str, Any]) -> ClientProfile:
        name = row.get("client_name") or row.get("business_name") or row.get("name")
        tax_id = row.get("gstin") or row.get("tax_id")
        return cls(
            client_id=client_id,
            name=name or None,
            tax_id=tax_id.strip() if isinstance(tax_id, str) and tax_id.strip() else None,
            address=row.get("address"),
        )


@dataclass(frozen=True)
class TrialBalanceEntry:
    """Per-account totals returned by the store's aggregation function."""

    account_code: str
    account_name: str
    account_type: AccountType
    debit_total: Decimal
    credit_total: Decimal

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> TrialBalanceEntry:
        return cls(
            account_code=str(row.get("account_code") or ""),
            account_name=str(row.get("account_name") or ""),
            account_type=AccountType(str(row.get("account_type", "")).lower()),
            debit_total=to_decimal(row.get("debit_total")),
            credit_total=to_decimal(row.get("credit_total")),
        )


@dataclass(frozen=True)
class JournalLine:
    """One line item of a posted journal entry."""

    entry_date: date
    account_code: str
    account_name: str
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    entry_id: str | None = None

    @classmethod
    def from_row(
        cls, row: dict[str, Any], entry_date: date, entry_id: str | None = None
    ) -> JournalLine:
        return cls(
            entry_date=entry_date,
            account_code=str(row.get("account_code") or ""),
            account_name=str(row.get("account_name") or ""),
            debit_amount=to_decimal(row.get("debit_amount")),
            credit_amount=to_decimal(row.get("credit_amount")),
            entry_id=entry_id,
        )


@dataclass(frozen=True)
class InvoiceRecord:
    invoice_number: str
    invoice_date: date
    buyer_tax_id: str | None = None
    buyer_name: str = ""
    buyer_address: str = ""
    subtotal: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    cess: Decimal = ZERO
    total_amount: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst + self.cess

    @property
    def has_buyer_tax_id(self) -> bool:
        return bool(self.buyer_tax_id and self.buyer_tax_id.strip())

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> InvoiceRecord:
        invoice_date = to_date(row.get("invoice_date"))
        if invoice_date is None:
            raise ValueError(f"Invoice {row.get('invoice_number')!r} has no invoice_date")
        return cls(
            invoice_number=str(row.get("invoice_number") or ""),
            invoice_date=invoice_date,
            buyer_tax_id=row.get("customer_gstin") or row.get("buyer_tax_id"),
            buyer_name=str(row.get("customer_name") or row.get("buyer_name") or ""),
            buyer_address=str(row.get("customer_address") or row.get("buyer_address") or ""),
            subtotal=to_decimal(row.get("subtotal")),
            cgst=to_decimal(row.get("cgst")),
            sgst=to_decimal(row.get("sgst")),
            igst=to_decimal(row.get("igst")),
            cess=to_decimal(row.get("cess")),
            total_amount=to_decimal(row.get("total_amount")),
        )


class LedgerStore(Protocol):
    """Read-only view of a client's books used by every report."""

    async def fetch_client(self, client_id: str) -> ClientProfile | None: ...

    async def fetch_aggregated_trial_balance(
        self, client_id: str, as_of: date
    ) -> list[TrialBalanceEntry]: ...

    async def fetch_posted_journal_lines(
        self, client_id: str, period: DateRange
    ) -> list[JournalLine]: ...

    async def fetch_invoices(
        self, client_id: str, invoice_type: InvoiceType, period: DateRange
    ) -> list[InvoiceRecord]: ...
