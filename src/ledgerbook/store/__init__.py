"""Ledger store contract and its REST client."""

from ledgerbook.store.base import (
    ClientProfile,
    DateRange,
    InvoiceRecord,
    InvoiceType,
    JournalLine,
    LedgerStore,
    TrialBalanceEntry,
)
from ledgerbook.store.ledger_api import (
    AuthenticationError,
    LedgerStoreClient,
    LedgerStoreError,
)

__all__ = [
    "AuthenticationError",
    "ClientProfile",
    "DateRange",
    "InvoiceRecord",
    "InvoiceType",
    "JournalLine",
    "LedgerStore",
    "LedgerStoreClient",
    "LedgerStoreError",
    "TrialBalanceEntry",
]
