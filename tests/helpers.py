"""In-memory ledger store and record builders shared by the report tests."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from ledgerbook.accounts import AccountType
from ledgerbook.store import (
    ClientProfile,
    DateRange,
    InvoiceRecord,
    InvoiceType,
    JournalLine,
    LedgerStoreError,
    TrialBalanceEntry,
)

ACME = ClientProfile(
    client_id="c-1",
    name="Acme Traders",
    tax_id="27AAAPA1234A1ZT",
    address="Mumbai",
)


def d(value: str | int | float) -> Decimal:
    return Decimal(str(value))


def tb(
    code: str,
    name: str,
    account_type: AccountType,
    debit: str | int = 0,
    credit: str | int = 0,
) -> TrialBalanceEntry:
    return TrialBalanceEntry(
        account_code=code,
        account_name=name,
        account_type=account_type,
        debit_total=d(debit),
        credit_total=d(credit),
    )


def line(
    code: str,
    name: str,
    debit: str | int = 0,
    credit: str | int = 0,
    on: date = date(2025, 1, 15),
) -> JournalLine:
    return JournalLine(
        entry_date=on,
        account_code=code,
        account_name=name,
        debit_amount=d(debit),
        credit_amount=d(credit),
    )


def invoice(
    number: str,
    subtotal: str,
    cgst: str = "0",
    sgst: str = "0",
    igst: str = "0",
    cess: str = "0",
    buyer_tax_id: str | None = None,
    on: date = date(2025, 3, 10),
) -> InvoiceRecord:
    taxes = d(cgst) + d(sgst) + d(igst) + d(cess)
    return InvoiceRecord(
        invoice_number=number,
        invoice_date=on,
        buyer_tax_id=buyer_tax_id,
        buyer_name=f"Buyer {number}",
        buyer_address="Pune",
        subtotal=d(subtotal),
        cgst=d(cgst),
        sgst=d(sgst),
        igst=d(igst),
        cess=d(cess),
        total_amount=d(subtotal) + taxes,
    )


@dataclass
class FakeLedgerStore:
    """Ledger store backed by lists; records every call it receives."""

    client: ClientProfile | None = ACME
    trial_balance: list[TrialBalanceEntry] = field(default_factory=list)
    trial_balance_by_date: dict[date, list[TrialBalanceEntry]] = field(default_factory=dict)
    journal_lines: list[JournalLine] = field(default_factory=list)
    invoices: dict[InvoiceType, list[InvoiceRecord]] = field(default_factory=dict)
    fail_when: Callable[[str, Any], bool] | None = None
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def _record(self, method: str, arg: Any) -> None:
        self.calls.append((method, arg))
        if self.fail_when is not None and self.fail_when(method, arg):
            raise LedgerStoreError(f"{method} failed", status_code=503)

    async def fetch_client(self, client_id: str) -> ClientProfile | None:  # noqa: ARG002
        self._record("fetch_client", client_id)
        return self.client

    async def fetch_aggregated_trial_balance(
        self, client_id: str, as_of: date  # noqa: ARG002
    ) -> list[TrialBalanceEntry]:
        self._record("fetch_aggregated_trial_balance", as_of)
        return list(self.trial_balance_by_date.get(as_of, self.trial_balance))

    async def fetch_posted_journal_lines(
        self, client_id: str, period: DateRange  # noqa: ARG002
    ) -> list[JournalLine]:
        self._record("fetch_posted_journal_lines", period)
        return [item for item in self.journal_lines if period.contains(item.entry_date)]

    async def fetch_invoices(
        self, client_id: str, invoice_type: InvoiceType, period: DateRange  # noqa: ARG002
    ) -> list[InvoiceRecord]:
        self._record("fetch_invoices", invoice_type)
        return [
            item
            for item in self.invoices.get(invoice_type, [])
            if period.contains(item.invoice_date)
        ]

    async def __aenter__(self) -> "FakeLedgerStore":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None
