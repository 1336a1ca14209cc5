"""ledgerbook - financial reports and GST returns from a client's ledger."""

__version__ = "0.1.0"

from ledgerbook.accounts import CLASSIFICATION_VERSION, AccountBucket, AccountType, classify
from ledgerbook.config import configure_logging, get_settings
from ledgerbook.reports import (
    generate_balance_sheet,
    generate_cash_flow,
    generate_gstr1,
    generate_gstr3b,
    generate_profit_loss,
    generate_trial_balance,
)
from ledgerbook.store import LedgerStore, LedgerStoreClient, LedgerStoreError

__all__ = [
    # Version
    "__version__",
    # Chart of accounts
    "CLASSIFICATION_VERSION",
    "AccountBucket",
    "AccountType",
    "classify",
    # Store
    "LedgerStore",
    "LedgerStoreClient",
    "LedgerStoreError",
    # Reports
    "generate_trial_balance",
    "generate_balance_sheet",
    "generate_profit_loss",
    "generate_cash_flow",
    "generate_gstr1",
    "generate_gstr3b",
    # Config
    "get_settings",
    "configure_logging",
]
