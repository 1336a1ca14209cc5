"""Ledger aggregation: one fold of journal lines into per-account totals."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from ledgerbook.store.base import ZERO, JournalLine


@dataclass(frozen=True)
class AccountTotals:
    """Debit and credit accumulated for one account."""

    account_code: str
    account_name: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def debit_balance(self) -> Decimal:
        return self.debit - self.credit

    @property
    def credit_balance(self) -> Decimal:
        return self.credit - self.debit

    def add(self, line: JournalLine) -> AccountTotals:
        return AccountTotals(
            account_code=self.account_code,
            account_name=self.account_name,
            debit=self.debit + line.debit_amount,
            credit=self.credit + line.credit_amount,
        )


def account_key(line: JournalLine) -> str:
    """Accounts are keyed by code, falling back to name for uncoded lines."""
    return line.account_code or line.account_name


def aggregate_lines(
    lines: Iterable[JournalLine],
    include: Callable[[JournalLine], bool] | None = None,
) -> list[AccountTotals]:
    """Sum debits and credits per account, in order of first appearance.

    Args:
        lines: Journal line items to fold.
        include: Optional predicate restricting which lines are counted.
    """
    totals: dict[str, AccountTotals] = {}
    for line in lines:
        if include is not None and not include(line):
            continue
        key = account_key(line)
        current = totals.get(key)
        if current is None:
            current = AccountTotals(account_code=line.account_code, account_name=line.account_name)
        totals[key] = current.add(line)
    return list(totals.values())
