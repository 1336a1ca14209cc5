"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("LEDGER_API_KEY", "test-service-key")

from helpers import FakeLedgerStore, line, tb  # noqa: E402

from ledgerbook.accounts import AccountType  # noqa: E402


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx AsyncClient."""
    client = AsyncMock()
    client.request = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def balanced_trial_balance():
    """A small balanced chart: net profit 16,500 and totals of 1,25,000."""
    return [
        tb("1100", "Cash", AccountType.ASSET, debit=50000),
        tb("1140", "Inventory", AccountType.ASSET, debit=20000),
        tb("1499", "Prepaid Expenses", AccountType.ASSET, debit=1000),
        tb("1500", "Equipment", AccountType.ASSET, debit=30000),
        tb("1050", "Petty Float", AccountType.ASSET, debit=500),
        tb("2110", "Accounts Payable", AccountType.LIABILITY, credit=15000),
        tb("2500", "Term Loan", AccountType.LIABILITY, credit=20000),
        tb("3100", "Share Capital", AccountType.EQUITY, credit=50000),
        tb("4100", "Sales", AccountType.INCOME, credit=40000),
        tb("5200", "Rent", AccountType.EXPENSE, debit=23500),
    ]


@pytest.fixture
def store(balanced_trial_balance):
    """Fake store holding the balanced trial balance."""
    return FakeLedgerStore(trial_balance=balanced_trial_balance)


@pytest.fixture
def sales_entry_lines():
    """One credit sale of 10,000 plus 1,800 GST."""
    return [
        line("1130", "Accounts Receivable", debit=11800),
        line("4100", "Sales", credit=10000),
        line("2210", "GST Output", credit=1800),
    ]
