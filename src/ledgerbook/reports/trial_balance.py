"""Trial balance: the foundation of the balance sheet."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from ledgerbook.accounts import AccountType
from ledgerbook.reports.base import (
    client_display_name,
    is_balanced,
    sum_amounts,
    utc_now,
)
from ledgerbook.reports.export import trial_balance_to_csv
from ledgerbook.store.base import LedgerStore, TrialBalanceEntry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TrialBalanceRow:
    account_code: str
    account_name: str
    account_type: AccountType
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal

    @classmethod
    def from_entry(cls, entry: TrialBalanceEntry) -> TrialBalanceRow:
        return cls(
            account_code=entry.account_code,
            account_name=entry.account_name,
            account_type=entry.account_type,
            debit_total=entry.debit_total,
            credit_total=entry.credit_total,
            balance=entry.debit_total - entry.credit_total,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_code": self.account_code,
            "account_name": self.account_name,
            "account_type": self.account_type.value,
            "debit_total": str(self.debit_total),
            "credit_total": str(self.credit_total),
            "balance": str(self.balance),
        }


@dataclass(frozen=True)
class TrialBalanceSummary:
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    row_count: int

    @classmethod
    def of(cls, rows: Iterable[TrialBalanceRow]) -> TrialBalanceSummary:
        items = list(rows)
        total_debits = sum_amounts(row.debit_total for row in items)
        total_credits = sum_amounts(row.credit_total for row in items)
        difference = abs(total_debits - total_credits)
        return cls(
            total_debits=total_debits,
            total_credits=total_credits,
            difference=difference,
            is_balanced=is_balanced(difference),
            row_count=len(items),
        )


@dataclass(frozen=True)
class TrialBalanceReport:
    client_id: str
    client_name: str
    as_of_date: date
    rows: tuple[TrialBalanceRow, ...]
    summary: TrialBalanceSummary
    generated_at: datetime = field(default_factory=utc_now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "as_of_date": self.as_of_date.isoformat(),
            "rows": [row.to_dict() for row in self.rows],
            "summary": {
                "total_debits": str(self.summary.total_debits),
                "total_credits": str(self.summary.total_credits),
                "difference": str(self.summary.difference),
                "is_balanced": self.summary.is_balanced,
                "row_count": self.summary.row_count,
            },
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class TrialBalanceValidation:
    is_valid: bool
    error_message: str | None = None
    difference: Decimal | None = None


async def generate_trial_balance(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> TrialBalanceReport:
    """Build the trial balance from the store's per-account totals.

    Rows keep the order the store returns them in. Store errors propagate.
    """
    as_of = as_of or date.today()
    log = logger.bind(client_id=client_id, as_of=as_of)
    log.debug("trial_balance_requested")

    client = await store.fetch_client(client_id)
    entries = await store.fetch_aggregated_trial_balance(client_id, as_of)

    rows = tuple(TrialBalanceRow.from_entry(entry) for entry in entries)
    summary = TrialBalanceSummary.of(rows)

    log.info(
        "trial_balance_generated",
        row_count=summary.row_count,
        is_balanced=summary.is_balanced,
    )
    return TrialBalanceReport(
        client_id=client_id,
        client_name=client_display_name(client),
        as_of_date=as_of,
        rows=rows,
        summary=summary,
    )


def group_by_account_type(
    rows: Iterable[TrialBalanceRow],
) -> dict[AccountType, list[TrialBalanceRow]]:
    """Partition rows into the five account types, preserving order."""
    groups: dict[AccountType, list[TrialBalanceRow]] = {
        account_type: [] for account_type in AccountType
    }
    for row in rows:
        groups[row.account_type].append(row)
    return groups


async def get_trial_balance_grouped(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> dict[AccountType, list[TrialBalanceRow]]:
    report = await generate_trial_balance(store, client_id, as_of)
    return group_by_account_type(report.rows)


async def validate_trial_balance(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> TrialBalanceValidation:
    """Check that total debits equal total credits within one paisa."""
    report = await generate_trial_balance(store, client_id, as_of)
    if not report.summary.is_balanced:
        difference = report.summary.difference
        return TrialBalanceValidation(
            is_valid=False,
            error_message=f"Trial balance is not balanced. Difference: ₹{difference:.2f}",
            difference=difference,
        )
    return TrialBalanceValidation(is_valid=True)


async def export_trial_balance_to_csv(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> str:
    return trial_balance_to_csv(await generate_trial_balance(store, client_id, as_of))
