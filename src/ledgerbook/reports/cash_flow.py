"""Cash flow statement (indirect method) over a date range.

Movements are folded line by line from posted journal lines. Fixed asset
and long-term loan lines are netted per line item, not per account, so a
period holding both a purchase and a sale of the same asset reports both.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

import structlog

from ledgerbook.accounts import (
    ACCOUNTS_PAYABLE,
    ACCOUNTS_RECEIVABLE,
    CASH_ACCOUNTS,
    DEPRECIATION,
    DRAWINGS,
    INVENTORY,
    INVESTMENTS,
    SHARE_CAPITAL,
    AccountBucket,
    AccountType,
    account_class,
    classify,
)
from ledgerbook.reports.aggregation import aggregate_lines
from ledgerbook.reports.base import client_display_name, sum_amounts, utc_now
from ledgerbook.reports.errors import ReportPeriodError
from ledgerbook.reports.export import cash_flow_to_csv
from ledgerbook.store.base import ZERO, DateRange, JournalLine, LedgerStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CashFlowMovements:
    """Running accumulators of one cash flow pass, all seeded at zero."""

    net_profit: Decimal = ZERO
    depreciation: Decimal = ZERO
    receivables_change: Decimal = ZERO
    payables_change: Decimal = ZERO
    inventory_change: Decimal = ZERO
    asset_purchases: Decimal = ZERO
    asset_sales: Decimal = ZERO
    investments: Decimal = ZERO
    loans_received: Decimal = ZERO
    loans_repaid: Decimal = ZERO
    capital_contributed: Decimal = ZERO
    dividends_paid: Decimal = ZERO

    @property
    def operating(self) -> Decimal:
        return (
            self.net_profit
            + self.depreciation
            - self.receivables_change
            + self.payables_change
            - self.inventory_change
        )

    @property
    def investing(self) -> Decimal:
        return -self.asset_purchases + self.asset_sales - self.investments

    @property
    def financing(self) -> Decimal:
        return (
            self.loans_received
            - self.loans_repaid
            + self.capital_contributed
            - self.dividends_paid
        )

    @property
    def net_cash_flow(self) -> Decimal:
        return self.operating + self.investing + self.financing


def is_depreciation_line(line: JournalLine) -> bool:
    """Depreciation is code 5320, or any account whose name says so."""
    if line.account_code == DEPRECIATION:
        return True
    if "depreciation" in line.account_name.lower():
        logger.info(
            "depreciation_matched_by_name",
            account_code=line.account_code,
            account_name=line.account_name,
        )
        return True
    return False


def apply_line(movements: CashFlowMovements, line: JournalLine) -> CashFlowMovements:
    """Fold one journal line into the accumulators."""
    code = line.account_code
    debit = line.debit_amount
    credit = line.credit_amount
    changes: dict[str, Decimal] = {}

    # Operating
    kind = account_class(code)
    if kind is AccountType.INCOME:
        changes["net_profit"] = movements.net_profit + (credit - debit)
    elif kind is AccountType.EXPENSE:
        changes["net_profit"] = movements.net_profit - (debit - credit)

    if is_depreciation_line(line):
        changes["depreciation"] = movements.depreciation + (debit - credit)

    if code == ACCOUNTS_RECEIVABLE:
        changes["receivables_change"] = movements.receivables_change + (debit - credit)
    if code == ACCOUNTS_PAYABLE:
        changes["payables_change"] = movements.payables_change + (credit - debit)
    if code == INVENTORY:
        changes["inventory_change"] = movements.inventory_change + (debit - credit)

    # Investing
    bucket = classify(code)
    if bucket is AccountBucket.NON_CURRENT_ASSET:
        if debit > credit:
            changes["asset_purchases"] = movements.asset_purchases + (debit - credit)
        else:
            changes["asset_sales"] = movements.asset_sales + (credit - debit)
    if code == INVESTMENTS:
        changes["investments"] = movements.investments + (debit - credit)

    # Financing
    if bucket is AccountBucket.LONG_TERM_LOAN:
        if credit > debit:
            changes["loans_received"] = movements.loans_received + (credit - debit)
        else:
            changes["loans_repaid"] = movements.loans_repaid + (debit - credit)
    if code == SHARE_CAPITAL:
        changes["capital_contributed"] = movements.capital_contributed + (credit - debit)
    if code == DRAWINGS:
        changes["dividends_paid"] = movements.dividends_paid + (debit - credit)

    return replace(movements, **changes) if changes else movements


def derive_cash_flow_movements(lines: Iterable[JournalLine]) -> CashFlowMovements:
    movements = CashFlowMovements()
    for line in lines:
        movements = apply_line(movements, line)
    return movements


@dataclass(frozen=True)
class OperatingActivities:
    net_profit: Decimal
    depreciation: Decimal
    other_adjustments: Decimal
    receivables_change: Decimal  # negative means receivables grew
    payables_change: Decimal  # positive means payables grew
    inventory_change: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvestingActivities:
    asset_purchases: Decimal
    asset_sales: Decimal
    investments: Decimal
    total: Decimal


@dataclass(frozen=True)
class FinancingActivities:
    loans_received: Decimal
    loans_repaid: Decimal
    capital_contributed: Decimal
    dividends_paid: Decimal
    total: Decimal


@dataclass(frozen=True)
class CashFlowData:
    operating_activities: OperatingActivities
    investing_activities: InvestingActivities
    financing_activities: FinancingActivities
    net_cash_flow: Decimal
    opening_cash: Decimal
    closing_cash: Decimal

    @classmethod
    def from_movements(
        cls, movements: CashFlowMovements, opening_cash: Decimal
    ) -> CashFlowData:
        """Publish accumulators with the sign of their cash effect."""
        net_cash_flow = movements.net_cash_flow
        return cls(
            operating_activities=OperatingActivities(
                net_profit=movements.net_profit,
                depreciation=movements.depreciation,
                other_adjustments=ZERO,
                receivables_change=-movements.receivables_change,
                payables_change=movements.payables_change,
                inventory_change=-movements.inventory_change,
                total=movements.operating,
            ),
            investing_activities=InvestingActivities(
                asset_purchases=-movements.asset_purchases,
                asset_sales=movements.asset_sales,
                investments=-movements.investments,
                total=movements.investing,
            ),
            financing_activities=FinancingActivities(
                loans_received=movements.loans_received,
                loans_repaid=-movements.loans_repaid,
                capital_contributed=movements.capital_contributed,
                dividends_paid=-movements.dividends_paid,
                total=movements.financing,
            ),
            net_cash_flow=net_cash_flow,
            opening_cash=opening_cash,
            closing_cash=opening_cash + net_cash_flow,
        )

    def to_dict(self) -> dict[str, Any]:
        op = self.operating_activities
        inv = self.investing_activities
        fin = self.financing_activities
        return {
            "operating_activities": {
                "net_profit": str(op.net_profit),
                "adjustments": {
                    "depreciation": str(op.depreciation),
                    "other": str(op.other_adjustments),
                },
                "working_capital_changes": {
                    "receivables_change": str(op.receivables_change),
                    "payables_change": str(op.payables_change),
                    "inventory_change": str(op.inventory_change),
                },
                "total": str(op.total),
            },
            "investing_activities": {
                "asset_purchases": str(inv.asset_purchases),
                "asset_sales": str(inv.asset_sales),
                "investments": str(inv.investments),
                "total": str(inv.total),
            },
            "financing_activities": {
                "loans_received": str(fin.loans_received),
                "loans_repaid": str(fin.loans_repaid),
                "capital_contributed": str(fin.capital_contributed),
                "dividends_paid": str(fin.dividends_paid),
                "total": str(fin.total),
            },
            "net_cash_flow": str(self.net_cash_flow),
            "opening_cash": str(self.opening_cash),
            "closing_cash": str(self.closing_cash),
        }


@dataclass(frozen=True)
class CashFlowReport:
    client_id: str
    client_name: str
    start_date: date
    end_date: date
    data: CashFlowData
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


async def get_cash_balance(store: LedgerStore, client_id: str, as_of: date) -> Decimal:
    """Cash in hand plus cash at bank from all posted entries up to ``as_of``."""
    lines = await store.fetch_posted_journal_lines(client_id, DateRange(end=as_of))
    cash_accounts = aggregate_lines(
        lines, include=lambda line: line.account_code in CASH_ACCOUNTS
    )
    return sum_amounts(totals.debit_balance for totals in cash_accounts)


async def generate_cash_flow(
    store: LedgerStore, client_id: str, start_date: date, end_date: date
) -> CashFlowReport:
    """Generate the cash flow statement for ``[start_date, end_date]``.

    The period's lines and the opening balance come from two separate store
    reads.
    """
    if start_date > end_date:
        raise ReportPeriodError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )

    client = await store.fetch_client(client_id)
    lines = await store.fetch_posted_journal_lines(
        client_id, DateRange(start=start_date, end=end_date)
    )
    movements = derive_cash_flow_movements(lines)
    opening_cash = await get_cash_balance(store, client_id, start_date - timedelta(days=1))
    data = CashFlowData.from_movements(movements, opening_cash)

    logger.info(
        "cash_flow_generated",
        client_id=client_id,
        start=start_date,
        end=end_date,
        net_cash_flow=data.net_cash_flow,
    )
    return CashFlowReport(
        client_id=client_id,
        client_name=client_display_name(client),
        start_date=start_date,
        end_date=end_date,
        data=data,
    )


async def export_cash_flow_to_csv(
    store: LedgerStore, client_id: str, start_date: date, end_date: date
) -> str:
    return cash_flow_to_csv(await generate_cash_flow(store, client_id, start_date, end_date))
