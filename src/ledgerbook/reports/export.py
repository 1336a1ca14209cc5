"""CSV and GST-portal JSON renderings of the reports.

Statements are written with every cell quoted: a title block, then
section header rows, indented account rows and totals rows. The trial
balance is a plain table under a metadata block.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ledgerbook.reports.base import StatementLine

if TYPE_CHECKING:
    from ledgerbook.reports.balance_sheet import BalanceSheetReport
    from ledgerbook.reports.cash_flow import CashFlowReport
    from ledgerbook.reports.gst import Gstr1Report, Gstr3bReport
    from ledgerbook.reports.profit_loss import MonthlyProfitLoss, ProfitLossReport
    from ledgerbook.reports.trial_balance import TrialBalanceReport

_CENT = Decimal("0.01")


def money(amount: Decimal) -> str:
    """Two-decimal rendering; never prints a negative zero."""
    value = amount.quantize(_CENT)
    if value == 0:
        return "0.00"
    return f"{value:.2f}"


class _Sheet:
    """Accumulates CSV rows and renders them with ``\\n`` line endings."""

    def __init__(self, quoting: int = csv.QUOTE_ALL):
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer, quoting=quoting, lineterminator="\n")

    def row(self, *cells: Any) -> None:
        self._writer.writerow(cells)

    def blank(self) -> None:
        self._writer.writerow([])

    def section(self, title: str) -> None:
        self.row(title, "")

    def amount(self, label: str, amount: Decimal) -> None:
        self.row(label, money(amount))

    def lines(self, lines: Iterable[StatementLine]) -> None:
        for line in lines:
            self.amount(f"  {line.name}", line.amount)

    def render(self) -> str:
        return self._buffer.getvalue().rstrip("\n")


def trial_balance_to_csv(report: TrialBalanceReport) -> str:
    sheet = _Sheet(quoting=csv.QUOTE_MINIMAL)
    padding = [""] * 5
    sheet.row("Trial Balance", *padding)
    sheet.row(f"Client: {report.client_name}", *padding)
    sheet.row(f"As of: {report.as_of_date.isoformat()}", *padding)
    sheet.row(f"Generated: {report.generated_at.isoformat(timespec='seconds')}", *padding)
    sheet.blank()
    sheet.row("Account Code", "Account Name", "Type", "Debit", "Credit", "Balance")
    for row in report.rows:
        sheet.row(
            row.account_code,
            row.account_name,
            row.account_type.value,
            money(row.debit_total),
            money(row.credit_total),
            money(row.balance),
        )
    sheet.blank()
    summary = report.summary
    sheet.row(
        "",
        "TOTAL",
        "",
        money(summary.total_debits),
        money(summary.total_credits),
        money(summary.total_debits - summary.total_credits),
    )
    return sheet.render()


def balance_sheet_to_csv(report: BalanceSheetReport) -> str:
    data = report.data
    sheet = _Sheet()
    sheet.row("BALANCE SHEET")
    sheet.row(report.client_name)
    sheet.row(f"As of {report.as_of_date.isoformat()}")
    sheet.blank()

    sheet.section("ASSETS")
    sheet.section("Current Assets")
    sheet.lines(data.assets.current_assets.lines)
    sheet.amount("Total Current Assets", data.assets.current_assets.total)
    sheet.blank()
    sheet.section("Non-Current Assets")
    sheet.lines(data.assets.non_current_assets.lines)
    sheet.amount("Total Non-Current Assets", data.assets.non_current_assets.total)
    sheet.blank()
    sheet.amount("TOTAL ASSETS", data.assets.total)
    sheet.blank()
    sheet.blank()

    sheet.section("LIABILITIES")
    sheet.section("Current Liabilities")
    sheet.lines(data.liabilities.current_liabilities.lines)
    sheet.amount("Total Current Liabilities", data.liabilities.current_liabilities.total)
    sheet.blank()
    sheet.section("Non-Current Liabilities")
    sheet.lines(data.liabilities.non_current_liabilities.lines)
    sheet.amount(
        "Total Non-Current Liabilities", data.liabilities.non_current_liabilities.total
    )
    sheet.blank()
    sheet.amount("TOTAL LIABILITIES", data.liabilities.total)
    sheet.blank()

    sheet.section("EQUITY")
    sheet.lines(data.equity.lines)
    sheet.amount("TOTAL EQUITY", data.equity.total)
    sheet.blank()
    sheet.amount("TOTAL LIABILITIES + EQUITY", data.total_liabilities_equity)
    sheet.blank()
    sheet.row("Balance Check", "BALANCED" if data.is_balanced else "UNBALANCED")
    if not data.is_balanced:
        sheet.amount("Difference", data.difference)
    return sheet.render()


def profit_loss_to_csv(report: ProfitLossReport) -> str:
    data = report.data
    sheet = _Sheet()
    sheet.row("PROFIT & LOSS STATEMENT")
    sheet.row(report.client_name)
    sheet.row(f"Period: {report.start_date.isoformat()} to {report.end_date.isoformat()}")
    sheet.blank()

    sheet.section("REVENUE")
    sheet.lines(data.revenue.sales)
    if data.revenue.other_income:
        sheet.section("Other Income")
        sheet.lines(data.revenue.other_income)
    sheet.amount("Total Revenue", data.revenue.total)
    sheet.blank()

    if data.cost_of_sales.total > 0:
        sheet.section("COST OF SALES")
        sheet.lines(data.cost_of_sales.lines)
        sheet.amount("Total Cost of Sales", data.cost_of_sales.total)
        sheet.blank()
        sheet.amount("GROSS PROFIT", data.gross_profit)
        sheet.blank()

    sheet.section("OPERATING EXPENSES")
    sheet.lines(data.operating_expenses.lines)
    sheet.amount("Total Operating Expenses", data.operating_expenses.total)
    sheet.blank()
    sheet.amount("OPERATING PROFIT", data.operating_profit)
    sheet.blank()

    if data.other_expenses.total > 0:
        sheet.section("OTHER EXPENSES")
        sheet.lines(data.other_expenses.lines)
        sheet.amount("Total Other Expenses", data.other_expenses.total)
        sheet.blank()

    sheet.amount("PROFIT BEFORE TAX", data.profit_before_tax)
    if data.tax_expense > 0:
        sheet.amount("Tax Expense", data.tax_expense)
    sheet.blank()
    sheet.amount("NET PROFIT", data.net_profit)
    sheet.row("Profit Margin", f"{money(data.profit_margin)}%")
    return sheet.render()


def monthly_summary_to_csv(year: int, months: Sequence[MonthlyProfitLoss]) -> str:
    sheet = _Sheet()
    sheet.row(f"MONTHLY PROFIT & LOSS {year}")
    sheet.blank()
    sheet.row("Month", "Revenue", "Expenses", "Profit")
    for month in months:
        sheet.row(
            f"{year}-{month.month:02d}",
            money(month.revenue),
            money(month.expenses),
            money(month.profit),
        )
    return sheet.render()


def cash_flow_to_csv(report: CashFlowReport) -> str:
    data = report.data
    op = data.operating_activities
    inv = data.investing_activities
    fin = data.financing_activities
    sheet = _Sheet()
    sheet.row("CASH FLOW STATEMENT")
    sheet.row(report.client_name)
    sheet.row(f"Period: {report.start_date.isoformat()} to {report.end_date.isoformat()}")
    sheet.blank()

    sheet.section("CASH FLOWS FROM OPERATING ACTIVITIES")
    sheet.amount("Net Profit", op.net_profit)
    sheet.section("Adjustments:")
    sheet.amount("  Depreciation", op.depreciation)
    sheet.section("Working Capital Changes:")
    sheet.amount("  Receivables Decrease/(Increase)", op.receivables_change)
    sheet.amount("  Payables Increase/(Decrease)", op.payables_change)
    sheet.amount("  Inventory Decrease/(Increase)", op.inventory_change)
    sheet.amount("Net Cash from Operating Activities", op.total)
    sheet.blank()

    sheet.section("CASH FLOWS FROM INVESTING ACTIVITIES")
    sheet.amount("Purchase of Fixed Assets", inv.asset_purchases)
    sheet.amount("Sale of Fixed Assets", inv.asset_sales)
    sheet.amount("Investments", inv.investments)
    sheet.amount("Net Cash from Investing Activities", inv.total)
    sheet.blank()

    sheet.section("CASH FLOWS FROM FINANCING ACTIVITIES")
    sheet.amount("Loans Received", fin.loans_received)
    sheet.amount("Loan Repayments", fin.loans_repaid)
    sheet.amount("Capital Contributed", fin.capital_contributed)
    sheet.amount("Dividends Paid", fin.dividends_paid)
    sheet.amount("Net Cash from Financing Activities", fin.total)
    sheet.blank()

    sheet.amount("NET INCREASE/(DECREASE) IN CASH", data.net_cash_flow)
    sheet.amount("Cash at Beginning of Period", data.opening_cash)
    sheet.amount("Cash at End of Period", data.closing_cash)
    return sheet.render()


def _invoice_rows(sheet: _Sheet, invoices: Sequence[Any]) -> None:
    for inv in invoices:
        sheet.row(
            inv.invoice_number,
            inv.invoice_date.isoformat(),
            inv.gstin,
            inv.legal_name,
            money(inv.taxable_value),
            money(inv.cgst),
            money(inv.sgst),
            money(inv.igst),
            money(inv.cess),
            money(inv.invoice_value),
        )


def gstr1_to_csv(report: Gstr1Report) -> str:
    sheet = _Sheet()
    sheet.row("GSTR-1")
    sheet.row(report.legal_name)
    sheet.row(f"GSTIN: {report.gstin}")
    sheet.row(f"Period: {report.period}")
    sheet.blank()

    header = (
        "Invoice Number", "Invoice Date", "GSTIN", "Legal Name", "Taxable Value",
        "CGST", "SGST", "IGST", "Cess", "Invoice Value",
    )
    sheet.section("B2B INVOICES")
    sheet.row(*header)
    _invoice_rows(sheet, report.b2b.invoices)
    sheet.amount("Total B2B Taxable", report.b2b.total_taxable)
    sheet.amount("Total B2B Tax", report.b2b.taxes.total)
    sheet.blank()

    sheet.section("B2C LARGE INVOICES")
    sheet.row(*header)
    _invoice_rows(sheet, report.b2c_large.invoices)
    sheet.amount("Total B2C Large Taxable", report.b2c_large.total_taxable)
    sheet.amount("Total B2C Large Tax", report.b2c_large.total_tax)
    sheet.blank()

    sheet.section("B2C SMALL (CONSOLIDATED)")
    sheet.amount("Total B2C Small Taxable", report.b2c_small.total_taxable)
    sheet.amount("Total B2C Small Tax", report.b2c_small.total_tax)
    sheet.blank()

    sheet.amount("TOTAL TAXABLE VALUE", report.summary.total_taxable_value)
    sheet.amount("TOTAL TAX", report.summary.total_tax)
    sheet.amount("TOTAL OUTWARD SUPPLIES", report.summary.total_outward_supplies)
    return sheet.render()


def gstr3b_to_csv(report: Gstr3bReport) -> str:
    sheet = _Sheet()
    sheet.row("GSTR-3B")
    sheet.row(report.legal_name)
    sheet.row(f"GSTIN: {report.gstin}")
    sheet.row(f"Period: {report.period}")
    sheet.blank()

    sheet.row("", "Taxable Value", "CGST", "SGST", "IGST", "Cess")
    outward = report.outward_tax
    sheet.row(
        "3.1 Outward Supplies",
        money(report.outward_taxable_value),
        money(outward.cgst),
        money(outward.sgst),
        money(outward.igst),
        money(outward.cess),
    )
    sheet.row(
        "3.2 Inter-State Supplies",
        money(report.inter_state_taxable_value),
        "",
        "",
        money(report.inter_state_igst),
        "",
    )
    itc = report.itc.total
    sheet.row(
        "4 Input Tax Credit", "", money(itc.cgst), money(itc.sgst), money(itc.igst), money(itc.cess)
    )
    payable = report.tax_payable
    sheet.row(
        "5 Tax Payable",
        "",
        money(payable.cgst),
        money(payable.sgst),
        money(payable.igst),
        money(payable.cess),
    )
    sheet.blank()
    sheet.amount("TOTAL TAX PAYABLE", payable.total)
    return sheet.render()


def _portal_amount(amount: Decimal) -> float:
    return float(amount.quantize(_CENT))


def gstr1_to_portal_json(report: Gstr1Report, place_of_supply: str, rate: int) -> str:
    """Render GSTR-1 in the GST portal's upload shape.

    ``place_of_supply`` and ``rate`` are fixed annotations, not computed from
    the invoices.
    """
    half_small_tax = report.b2c_small.total_tax / 2
    document = {
        "gstin": report.gstin,
        "fp": report.period,
        "b2b": [
            {
                "ctin": inv.gstin,
                "inv": [
                    {
                        "inum": inv.invoice_number,
                        "idt": inv.invoice_date.isoformat(),
                        "val": _portal_amount(inv.invoice_value),
                        "pos": place_of_supply,
                        "rchrg": "Y" if inv.reverse_charge else "N",
                        "inv_typ": inv.invoice_type,
                        "itms": [
                            {
                                "num": 1,
                                "itm_det": {
                                    "txval": _portal_amount(inv.taxable_value),
                                    "rt": rate,
                                    "camt": _portal_amount(inv.cgst),
                                    "samt": _portal_amount(inv.sgst),
                                    "iamt": _portal_amount(inv.igst),
                                    "csamt": _portal_amount(inv.cess),
                                },
                            }
                        ],
                    }
                ],
            }
            for inv in report.b2b.invoices
        ],
        "b2cl": [
            {
                "inv": [
                    {
                        "inum": inv.invoice_number,
                        "idt": inv.invoice_date.isoformat(),
                        "val": _portal_amount(inv.invoice_value),
                        "pos": place_of_supply,
                    }
                ]
            }
            for inv in report.b2c_large.invoices
        ],
        "b2cs": [
            {
                "sply_ty": "INTRA",
                "txval": _portal_amount(report.b2c_small.total_taxable),
                "rt": rate,
                "iamt": 0,
                "camt": _portal_amount(half_small_tax),
                "samt": _portal_amount(half_small_tax),
            }
        ],
    }
    return json.dumps(document, indent=2)
