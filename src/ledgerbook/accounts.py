"""Chart-of-accounts classification shared by every report.

Account codes are four-digit strings. A code maps to at most one bucket in
``ACCOUNT_BUCKETS``; codes outside every range (or not numeric at all) map to
``None`` and never appear on a bucketed report line.

Bump ``CLASSIFICATION_VERSION`` whenever a range below changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

CLASSIFICATION_VERSION = "2025.1"


class AccountType(str, Enum):
    """Account type as tagged by the ledger store's chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


class AccountBucket(str, Enum):
    """Reporting bucket derived from an account code."""

    CURRENT_ASSET = "current_asset"
    NON_CURRENT_ASSET = "non_current_asset"
    INVESTMENT = "investment"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LOAN = "long_term_loan"
    SHARE_CAPITAL = "share_capital"
    DRAWINGS = "drawings"
    SALES = "sales"
    OTHER_INCOME = "other_income"
    COST_OF_SALES = "cost_of_sales"
    OPERATING_EXPENSE = "operating_expense"
    OTHER_EXPENSE = "other_expense"


@dataclass(frozen=True)
class CodeRange:
    """Half-open numeric range ``[start, end)`` of account codes."""

    start: int
    end: int
    value: AccountBucket | AccountType

    def contains(self, number: int) -> bool:
        return self.start <= number < self.end


ACCOUNT_BUCKETS: tuple[CodeRange, ...] = (
    CodeRange(1100, 1500, AccountBucket.CURRENT_ASSET),
    CodeRange(1500, 1900, AccountBucket.NON_CURRENT_ASSET),
    CodeRange(1900, 1901, AccountBucket.INVESTMENT),
    CodeRange(2100, 2500, AccountBucket.CURRENT_LIABILITY),
    CodeRange(2500, 2600, AccountBucket.LONG_TERM_LOAN),
    CodeRange(3100, 3101, AccountBucket.SHARE_CAPITAL),
    CodeRange(3300, 3301, AccountBucket.DRAWINGS),
    CodeRange(4100, 4200, AccountBucket.SALES),
    CodeRange(4200, 5000, AccountBucket.OTHER_INCOME),
    CodeRange(5100, 5200, AccountBucket.COST_OF_SALES),
    CodeRange(5200, 5900, AccountBucket.OPERATING_EXPENSE),
    CodeRange(5900, 6000, AccountBucket.OTHER_EXPENSE),
)

# Thousand bands of the chart.
ACCOUNT_CLASSES: tuple[CodeRange, ...] = (
    CodeRange(1000, 2000, AccountType.ASSET),
    CodeRange(2000, 3000, AccountType.LIABILITY),
    CodeRange(3000, 4000, AccountType.EQUITY),
    CodeRange(4000, 5000, AccountType.INCOME),
    CodeRange(5000, 6000, AccountType.EXPENSE),
)

# Named accounts
CASH_IN_HAND = "1110"
CASH_AT_BANK = "1120"
ACCOUNTS_RECEIVABLE = "1130"
INVENTORY = "1140"
INVESTMENTS = "1900"
ACCOUNTS_PAYABLE = "2110"
SHARE_CAPITAL = "3100"
CURRENT_YEAR_PROFIT = "3250"
DRAWINGS = "3300"
DEPRECIATION = "5320"

CASH_ACCOUNTS: frozenset[str] = frozenset({CASH_IN_HAND, CASH_AT_BANK})


def code_number(code: str | None) -> int | None:
    """Return the numeric value of an account code, or None if not numeric."""
    if not code:
        return None
    code = code.strip()
    if not code.isdigit():
        return None
    return int(code)


def _lookup(code: str | None, table: tuple[CodeRange, ...]) -> AccountBucket | AccountType | None:
    number = code_number(code)
    if number is None:
        return None
    for code_range in table:
        if code_range.contains(number):
            return code_range.value
    return None


def classify(code: str | None) -> AccountBucket | None:
    """Return the reporting bucket for an account code."""
    bucket = _lookup(code, ACCOUNT_BUCKETS)
    return bucket if isinstance(bucket, AccountBucket) else None


def account_class(code: str | None) -> AccountType | None:
    """Return the account type implied by the code's thousand band."""
    value = _lookup(code, ACCOUNT_CLASSES)
    return value if isinstance(value, AccountType) else None
