"""Profit & loss statement over a date range.

Built from posted journal lines, not from the trial balance.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from ledgerbook.accounts import AccountBucket, classify
from ledgerbook.reports.aggregation import aggregate_lines
from ledgerbook.reports.base import (
    StatementLine,
    StatementSection,
    client_display_name,
    month_bounds,
    percentage,
    sum_amounts,
    utc_now,
)
from ledgerbook.reports.errors import ReportPeriodError
from ledgerbook.reports.export import profit_loss_to_csv
from ledgerbook.store.base import ZERO, DateRange, JournalLine, LedgerStore

logger = structlog.get_logger(__name__)

_INCOME_BUCKETS = (AccountBucket.SALES, AccountBucket.OTHER_INCOME)
_EXPENSE_BUCKETS = (
    AccountBucket.COST_OF_SALES,
    AccountBucket.OPERATING_EXPENSE,
    AccountBucket.OTHER_EXPENSE,
)


@dataclass(frozen=True)
class RevenueSection:
    sales: tuple[StatementLine, ...]
    other_income: tuple[StatementLine, ...]
    total: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "sales": [line.to_dict() for line in self.sales],
            "other_income": [line.to_dict() for line in self.other_income],
            "total": str(self.total),
        }


@dataclass(frozen=True)
class ProfitLossData:
    revenue: RevenueSection
    cost_of_sales: StatementSection
    gross_profit: Decimal
    operating_expenses: StatementSection
    operating_profit: Decimal
    other_expenses: StatementSection
    profit_before_tax: Decimal
    tax_expense: Decimal
    net_profit: Decimal
    profit_margin: Decimal

    @property
    def total_expenses(self) -> Decimal:
        return (
            self.cost_of_sales.total
            + self.operating_expenses.total
            + self.other_expenses.total
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "revenue": self.revenue.to_dict(),
            "cost_of_sales": self.cost_of_sales.to_dict(),
            "gross_profit": str(self.gross_profit),
            "operating_expenses": self.operating_expenses.to_dict(),
            "operating_profit": str(self.operating_profit),
            "other_expenses": self.other_expenses.to_dict(),
            "profit_before_tax": str(self.profit_before_tax),
            "tax_expense": str(self.tax_expense),
            "net_profit": str(self.net_profit),
            "profit_margin": str(self.profit_margin),
        }


@dataclass(frozen=True)
class ProfitLossReport:
    client_id: str
    client_name: str
    start_date: date
    end_date: date
    data: ProfitLossData
    generated_at: datetime = field(default_factory=utc_now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "data": self.data.to_dict(),
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class ProfitLossChanges:
    revenue: Decimal
    revenue_pct: Decimal
    net_profit: Decimal
    net_profit_pct: Decimal


@dataclass(frozen=True)
class ComparativeProfitLoss:
    current: ProfitLossReport
    previous: ProfitLossReport
    changes: ProfitLossChanges


@dataclass(frozen=True)
class MonthlyProfitLoss:
    month: int
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    profit: Decimal = ZERO


@dataclass(frozen=True)
class ProfitLossMetrics:
    gross_margin: Decimal
    operating_margin: Decimal
    net_margin: Decimal
    expense_ratio: Decimal


def derive_profit_loss(lines: Iterable[JournalLine]) -> ProfitLossData:
    """Classify per-account balances into the P&L cascade.

    Income rows need a credit balance and expense rows a debit balance;
    rows with the other sign are left out.
    """
    buckets: dict[AccountBucket, list[StatementLine]] = {
        bucket: [] for bucket in _INCOME_BUCKETS + _EXPENSE_BUCKETS
    }
    for totals in aggregate_lines(lines):
        bucket = classify(totals.account_code)
        balance = totals.credit_balance
        if bucket in _INCOME_BUCKETS:
            keep = balance > 0
        elif bucket in _EXPENSE_BUCKETS:
            keep = balance < 0
        else:
            keep = False
        if not keep or bucket is None:
            continue
        buckets[bucket].append(
            StatementLine(totals.account_code, totals.account_name, abs(balance))
        )

    sales = tuple(buckets[AccountBucket.SALES])
    other_income = tuple(buckets[AccountBucket.OTHER_INCOME])
    total_revenue = sum_amounts(line.amount for line in sales + other_income)

    cost_of_sales = StatementSection.of(buckets[AccountBucket.COST_OF_SALES])
    operating_expenses = StatementSection.of(buckets[AccountBucket.OPERATING_EXPENSE])
    other_expenses = StatementSection.of(buckets[AccountBucket.OTHER_EXPENSE])

    gross_profit = total_revenue - cost_of_sales.total
    operating_profit = gross_profit - operating_expenses.total
    profit_before_tax = operating_profit - other_expenses.total
    # TODO: read tax expense from the income-tax accounts once they are in the chart
    tax_expense = ZERO
    net_profit = profit_before_tax - tax_expense

    return ProfitLossData(
        revenue=RevenueSection(sales=sales, other_income=other_income, total=total_revenue),
        cost_of_sales=cost_of_sales,
        gross_profit=gross_profit,
        operating_expenses=operating_expenses,
        operating_profit=operating_profit,
        other_expenses=other_expenses,
        profit_before_tax=profit_before_tax,
        tax_expense=tax_expense,
        net_profit=net_profit,
        profit_margin=percentage(net_profit, total_revenue),
    )


async def generate_profit_loss(
    store: LedgerStore, client_id: str, start_date: date, end_date: date
) -> ProfitLossReport:
    """Generate the P&L for ``[start_date, end_date]`` (both inclusive)."""
    if start_date > end_date:
        raise ReportPeriodError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )

    client = await store.fetch_client(client_id)
    lines = await store.fetch_posted_journal_lines(
        client_id, DateRange(start=start_date, end=end_date)
    )
    data = derive_profit_loss(lines)

    logger.info(
        "profit_loss_generated",
        client_id=client_id,
        start=start_date,
        end=end_date,
        revenue=data.revenue.total,
        net_profit=data.net_profit,
    )
    return ProfitLossReport(
        client_id=client_id,
        client_name=client_display_name(client),
        start_date=start_date,
        end_date=end_date,
        data=data,
    )


async def generate_comparative_profit_loss(
    store: LedgerStore,
    client_id: str,
    current_start: date,
    current_end: date,
    previous_start: date,
    previous_end: date,
) -> ComparativeProfitLoss:
    """Two P&L periods computed concurrently, with absolute and % changes."""
    current, previous = await asyncio.gather(
        generate_profit_loss(store, client_id, current_start, current_end),
        generate_profit_loss(store, client_id, previous_start, previous_end),
    )

    revenue_change = current.data.revenue.total - previous.data.revenue.total
    profit_change = current.data.net_profit - previous.data.net_profit
    previous_profit = previous.data.net_profit
    profit_change_pct = (
        profit_change / abs(previous_profit) * 100 if previous_profit != 0 else ZERO
    )

    return ComparativeProfitLoss(
        current=current,
        previous=previous,
        changes=ProfitLossChanges(
            revenue=revenue_change,
            revenue_pct=percentage(revenue_change, previous.data.revenue.total),
            net_profit=profit_change,
            net_profit_pct=profit_change_pct,
        ),
    )


async def get_monthly_profit_loss_summary(
    store: LedgerStore, client_id: str, year: int
) -> list[MonthlyProfitLoss]:
    """Revenue, expenses and profit for each month of a year.

    A month that fails is logged and reported as zeros.
    """
    summaries: list[MonthlyProfitLoss] = []
    for month in range(1, 13):
        start, end = month_bounds(year, month)
        try:
            report = await generate_profit_loss(store, client_id, start, end)
        except Exception as e:
            logger.warning(
                "monthly_pl_failed",
                client_id=client_id,
                year=year,
                month=month,
                error=str(e),
            )
            summaries.append(MonthlyProfitLoss(month=month))
            continue
        summaries.append(
            MonthlyProfitLoss(
                month=month,
                revenue=report.data.revenue.total,
                expenses=report.data.total_expenses,
                profit=report.data.net_profit,
            )
        )
    return summaries


def metrics_from_profit_loss(data: ProfitLossData) -> ProfitLossMetrics:
    revenue = data.revenue.total
    return ProfitLossMetrics(
        gross_margin=percentage(data.gross_profit, revenue),
        operating_margin=percentage(data.operating_profit, revenue),
        net_margin=data.profit_margin,
        expense_ratio=percentage(data.total_expenses, revenue),
    )


async def calculate_profit_loss_metrics(
    store: LedgerStore, client_id: str, start_date: date, end_date: date
) -> ProfitLossMetrics:
    report = await generate_profit_loss(store, client_id, start_date, end_date)
    return metrics_from_profit_loss(report.data)


async def export_profit_loss_to_csv(
    store: LedgerStore, client_id: str, start_date: date, end_date: date
) -> str:
    return profit_loss_to_csv(
        await generate_profit_loss(store, client_id, start_date, end_date)
    )
