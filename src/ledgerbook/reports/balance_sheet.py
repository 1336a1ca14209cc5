"""Balance sheet derived from the trial balance.

Assets = Liabilities + Equity, where equity includes the current year's
profit taken from income and expense rows of the same trial balance.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from ledgerbook.accounts import (
    CURRENT_YEAR_PROFIT,
    AccountBucket,
    AccountType,
    classify,
)
from ledgerbook.reports.base import (
    LineSource,
    StatementLine,
    StatementSection,
    is_balanced,
    sum_amounts,
    utc_now,
)
from ledgerbook.reports.export import balance_sheet_to_csv
from ledgerbook.reports.trial_balance import (
    TrialBalanceReport,
    TrialBalanceRow,
    generate_trial_balance,
    group_by_account_type,
)
from ledgerbook.store.base import ZERO, LedgerStore

logger = structlog.get_logger(__name__)

CURRENT_YEAR_PROFIT_NAME = "Current Year Profit"


@dataclass(frozen=True)
class AssetSection:
    current_assets: StatementSection
    non_current_assets: StatementSection

    @property
    def total(self) -> Decimal:
        return self.current_assets.total + self.non_current_assets.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_assets": self.current_assets.to_dict(),
            "non_current_assets": self.non_current_assets.to_dict(),
            "total": str(self.total),
        }


@dataclass(frozen=True)
class LiabilitySection:
    current_liabilities: StatementSection
    non_current_liabilities: StatementSection

    @property
    def total(self) -> Decimal:
        return self.current_liabilities.total + self.non_current_liabilities.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_liabilities": self.current_liabilities.to_dict(),
            "non_current_liabilities": self.non_current_liabilities.to_dict(),
            "total": str(self.total),
        }


@dataclass(frozen=True)
class BalanceSheetData:
    assets: AssetSection
    liabilities: LiabilitySection
    equity: StatementSection
    total_liabilities_equity: Decimal
    difference: Decimal
    is_balanced: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "assets": self.assets.to_dict(),
            "liabilities": self.liabilities.to_dict(),
            "equity": self.equity.to_dict(),
            "total_liabilities_equity": str(self.total_liabilities_equity),
            "difference": str(self.difference),
            "is_balanced": self.is_balanced,
        }


@dataclass(frozen=True)
class BalanceSheetReport:
    client_id: str
    client_name: str
    as_of_date: date
    data: BalanceSheetData
    generated_at: datetime = field(default_factory=utc_now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "as_of_date": self.as_of_date.isoformat(),
            "data": self.data.to_dict(),
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class BalanceSheetChanges:
    assets: Decimal
    liabilities: Decimal
    equity: Decimal


@dataclass(frozen=True)
class ComparativeBalanceSheet:
    current: BalanceSheetReport
    previous: BalanceSheetReport
    changes: BalanceSheetChanges


@dataclass(frozen=True)
class FinancialRatios:
    current_ratio: Decimal
    quick_ratio: Decimal
    debt_to_equity: Decimal
    working_capital: Decimal


def _debit_line(row: TrialBalanceRow) -> StatementLine:
    return StatementLine(row.account_code, row.account_name, row.debit_total - row.credit_total)


def _credit_line(row: TrialBalanceRow) -> StatementLine:
    return StatementLine(row.account_code, row.account_name, row.credit_total - row.debit_total)


def net_profit_from_rows(
    income_rows: list[TrialBalanceRow], expense_rows: list[TrialBalanceRow]
) -> Decimal:
    total_income = sum_amounts(row.credit_total - row.debit_total for row in income_rows)
    total_expense = sum_amounts(row.debit_total - row.credit_total for row in expense_rows)
    return total_income - total_expense


def derive_balance_sheet(trial_balance: TrialBalanceReport) -> BalanceSheetData:
    """Derive the balance sheet from a trial balance snapshot.

    Any asset that is not a current asset is reported as non-current, which
    includes codes below 1100, investments and uncoded rows. Liabilities are
    split the same way.
    """
    groups = group_by_account_type(trial_balance.rows)

    current_assets: list[StatementLine] = []
    non_current_assets: list[StatementLine] = []
    for row in groups[AccountType.ASSET]:
        if classify(row.account_code) is AccountBucket.CURRENT_ASSET:
            current_assets.append(_debit_line(row))
        else:
            non_current_assets.append(_debit_line(row))

    current_liabilities: list[StatementLine] = []
    non_current_liabilities: list[StatementLine] = []
    for row in groups[AccountType.LIABILITY]:
        if classify(row.account_code) is AccountBucket.CURRENT_LIABILITY:
            current_liabilities.append(_credit_line(row))
        else:
            non_current_liabilities.append(_credit_line(row))

    equity_lines = [_credit_line(row) for row in groups[AccountType.EQUITY]]
    net_profit = net_profit_from_rows(groups[AccountType.INCOME], groups[AccountType.EXPENSE])
    if net_profit != 0:
        equity_lines.append(
            StatementLine(
                CURRENT_YEAR_PROFIT,
                CURRENT_YEAR_PROFIT_NAME,
                net_profit,
                source=LineSource.DERIVED,
            )
        )

    assets = AssetSection(
        current_assets=StatementSection.of(current_assets),
        non_current_assets=StatementSection.of(non_current_assets),
    )
    liabilities = LiabilitySection(
        current_liabilities=StatementSection.of(current_liabilities),
        non_current_liabilities=StatementSection.of(non_current_liabilities),
    )
    equity = StatementSection.of(equity_lines)

    total_liabilities_equity = liabilities.total + equity.total
    difference = abs(assets.total - total_liabilities_equity)
    return BalanceSheetData(
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_liabilities_equity=total_liabilities_equity,
        difference=difference,
        is_balanced=is_balanced(difference),
    )


async def generate_balance_sheet(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> BalanceSheetReport:
    """Generate the balance sheet as of a date (defaults to today)."""
    trial_balance = await generate_trial_balance(store, client_id, as_of)
    data = derive_balance_sheet(trial_balance)

    logger.info(
        "balance_sheet_generated",
        client_id=client_id,
        as_of=trial_balance.as_of_date,
        total_assets=data.assets.total,
        total_liabilities_equity=data.total_liabilities_equity,
        is_balanced=data.is_balanced,
    )
    return BalanceSheetReport(
        client_id=client_id,
        client_name=trial_balance.client_name,
        as_of_date=trial_balance.as_of_date,
        data=data,
    )


async def generate_comparative_balance_sheet(
    store: LedgerStore, client_id: str, current_date: date, previous_date: date
) -> ComparativeBalanceSheet:
    """Balance sheets at two dates, computed concurrently, with their deltas."""
    current, previous = await asyncio.gather(
        generate_balance_sheet(store, client_id, current_date),
        generate_balance_sheet(store, client_id, previous_date),
    )
    changes = BalanceSheetChanges(
        assets=current.data.assets.total - previous.data.assets.total,
        liabilities=current.data.liabilities.total - previous.data.liabilities.total,
        equity=current.data.equity.total - previous.data.equity.total,
    )
    return ComparativeBalanceSheet(current=current, previous=previous, changes=changes)


def ratios_from_balance_sheet(data: BalanceSheetData) -> FinancialRatios:
    current_assets = data.assets.current_assets.total
    current_liabilities = data.liabilities.current_liabilities.total

    inventory = next(
        (
            line.amount
            for line in data.assets.current_assets.lines
            if "inventory" in line.name.lower()
        ),
        ZERO,
    )
    quick_assets = current_assets - inventory

    def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
        return numerator / denominator if denominator > 0 else ZERO

    return FinancialRatios(
        current_ratio=_ratio(current_assets, current_liabilities),
        quick_ratio=_ratio(quick_assets, current_liabilities),
        debt_to_equity=_ratio(data.liabilities.total, data.equity.total),
        working_capital=current_assets - current_liabilities,
    )


async def calculate_financial_ratios(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> FinancialRatios:
    report = await generate_balance_sheet(store, client_id, as_of)
    return ratios_from_balance_sheet(report.data)


async def export_balance_sheet_to_csv(
    store: LedgerStore, client_id: str, as_of: date | None = None
) -> str:
    return balance_sheet_to_csv(await generate_balance_sheet(store, client_id, as_of))
