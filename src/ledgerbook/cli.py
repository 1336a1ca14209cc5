"""Command line entry point: run one report against the configured store.

Usage:
    ledgerbook trial-balance --client c-42 --as-of 2025-03-31
    ledgerbook profit-loss --client c-42 --start 2024-04-01 --end 2025-03-31 --format csv
    ledgerbook gstr1 --client c-42 --month 3 --year 2025 --format json
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from datetime import date
from typing import Any

import structlog
from pydantic import ValidationError

from ledgerbook.config import bind_report_context, configure_logging, get_settings
from ledgerbook.reports import (
    calculate_gst_liability,
    generate_balance_sheet,
    generate_cash_flow,
    generate_gstr1,
    generate_gstr3b,
    generate_profit_loss,
    generate_trial_balance,
    get_monthly_profit_loss_summary,
)
from ledgerbook.reports.errors import ReportError
from ledgerbook.reports.export import (
    balance_sheet_to_csv,
    cash_flow_to_csv,
    gstr1_to_csv,
    gstr1_to_portal_json,
    gstr3b_to_csv,
    monthly_summary_to_csv,
    profit_loss_to_csv,
    trial_balance_to_csv,
)
from ledgerbook.reports.formatting import format_indian_number
from ledgerbook.store import LedgerStore, LedgerStoreClient, LedgerStoreError

logger = structlog.get_logger(__name__)

FORMATS = ("text", "csv", "json")


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value!r}") from e


def _to_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, default=str)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerbook",
        description="Financial statements and GST returns from a client's ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s trial-balance --client c-42
  %(prog)s balance-sheet --client c-42 --as-of 2025-03-31 --format csv
  %(prog)s profit-loss --client c-42 --start 2024-04-01 --end 2025-03-31
  %(prog)s monthly-summary --client c-42 --year 2024
  %(prog)s gstr3b --client c-42 --month 3 --year 2025 --format json
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="report", required=True)

    def add_report(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--client", required=True, help="Client id in the ledger store")
        sub.add_argument("--format", choices=FORMATS, default="text", help="Output format")
        return sub

    for name, help_text in (
        ("trial-balance", "Trial balance as of a date"),
        ("balance-sheet", "Balance sheet as of a date"),
    ):
        sub = add_report(name, help_text)
        sub.add_argument("--as-of", type=_iso_date, default=None, help="Defaults to today")

    for name, help_text in (
        ("profit-loss", "Profit & loss over a period"),
        ("cash-flow", "Cash flow statement over a period"),
    ):
        sub = add_report(name, help_text)
        sub.add_argument("--start", type=_iso_date, required=True)
        sub.add_argument("--end", type=_iso_date, required=True)

    sub = add_report("monthly-summary", "Revenue, expenses and profit per month")
    sub.add_argument("--year", type=int, required=True)

    for name, help_text in (
        ("gstr1", "GSTR-1 outward supplies for a month"),
        ("gstr3b", "GSTR-3B summary return for a month"),
        ("gst-liability", "Net GST payable for a month"),
    ):
        sub = add_report(name, help_text)
        sub.add_argument("--month", type=int, required=True)
        sub.add_argument("--year", type=int, required=True)

    return parser


def _text_value(value: Any) -> str:
    return value if isinstance(value, str) else format_indian_number(value)


def _text_lines(title: str, rows: list[tuple[str, Any]]) -> str:
    width = max(len(label) for label, _ in rows)
    body = [f"{label:<{width}}  {_text_value(value)}" for label, value in rows]
    return "\n".join([title, "=" * len(title), *body])


async def render_report(store: LedgerStore, args: argparse.Namespace) -> str:
    """Generate the requested report and render it in the requested format."""
    fmt = args.format

    if args.report == "trial-balance":
        tb = await generate_trial_balance(store, args.client, args.as_of)
        if fmt == "csv":
            return trial_balance_to_csv(tb)
        if fmt == "json":
            return _to_json(tb.to_dict())
        return _text_lines(
            f"Trial Balance: {tb.client_name} as of {tb.as_of_date.isoformat()}",
            [
                *((f"{row.account_code} {row.account_name}", row.balance) for row in tb.rows),
                ("Total debits", tb.summary.total_debits),
                ("Total credits", tb.summary.total_credits),
                ("Status", "BALANCED" if tb.summary.is_balanced else "UNBALANCED"),
            ],
        )

    if args.report == "balance-sheet":
        bs = await generate_balance_sheet(store, args.client, args.as_of)
        if fmt == "csv":
            return balance_sheet_to_csv(bs)
        if fmt == "json":
            return _to_json(bs.to_dict())
        return _text_lines(
            f"Balance Sheet: {bs.client_name} as of {bs.as_of_date.isoformat()}",
            [
                ("Total assets", bs.data.assets.total),
                ("Total liabilities", bs.data.liabilities.total),
                ("Total equity", bs.data.equity.total),
                ("Liabilities + equity", bs.data.total_liabilities_equity),
                ("Status", "BALANCED" if bs.data.is_balanced else "UNBALANCED"),
            ],
        )

    if args.report == "profit-loss":
        pl = await generate_profit_loss(store, args.client, args.start, args.end)
        if fmt == "csv":
            return profit_loss_to_csv(pl)
        if fmt == "json":
            return _to_json(pl.to_dict())
        return _text_lines(
            f"Profit & Loss: {pl.client_name} "
            f"{pl.start_date.isoformat()} to {pl.end_date.isoformat()}",
            [
                ("Revenue", pl.data.revenue.total),
                ("Gross profit", pl.data.gross_profit),
                ("Operating profit", pl.data.operating_profit),
                ("Net profit", pl.data.net_profit),
                ("Profit margin", f"{pl.data.profit_margin:.2f}%"),
            ],
        )

    if args.report == "cash-flow":
        cf = await generate_cash_flow(store, args.client, args.start, args.end)
        if fmt == "csv":
            return cash_flow_to_csv(cf)
        if fmt == "json":
            return _to_json(cf.to_dict())
        return _text_lines(
            f"Cash Flow: {cf.client_name} "
            f"{cf.start_date.isoformat()} to {cf.end_date.isoformat()}",
            [
                ("Operating", cf.data.operating_activities.total),
                ("Investing", cf.data.investing_activities.total),
                ("Financing", cf.data.financing_activities.total),
                ("Net cash flow", cf.data.net_cash_flow),
                ("Opening cash", cf.data.opening_cash),
                ("Closing cash", cf.data.closing_cash),
            ],
        )

    if args.report == "monthly-summary":
        months = await get_monthly_profit_loss_summary(store, args.client, args.year)
        if fmt == "csv":
            return monthly_summary_to_csv(args.year, months)
        if fmt == "json":
            return _to_json({"year": args.year, "months": [asdict(m) for m in months]})
        return _text_lines(
            f"Monthly Profit: {args.year}",
            [(f"{args.year}-{m.month:02d}", m.profit) for m in months],
        )

    if args.report == "gstr1":
        gstr1 = await generate_gstr1(store, args.client, args.month, args.year)
        if fmt == "csv":
            return gstr1_to_csv(gstr1)
        if fmt == "json":
            settings = get_settings()
            return gstr1_to_portal_json(
                gstr1,
                place_of_supply=settings.gst_place_of_supply,
                rate=settings.gst_export_rate,
            )
        return _text_lines(
            f"GSTR-1: {gstr1.legal_name} ({gstr1.gstin}) {gstr1.period}",
            [
                ("B2B invoices", str(len(gstr1.b2b.invoices))),
                ("B2C large invoices", str(len(gstr1.b2c_large.invoices))),
                ("Taxable value", gstr1.summary.total_taxable_value),
                ("Total tax", gstr1.summary.total_tax),
                ("Outward supplies", gstr1.summary.total_outward_supplies),
            ],
        )

    if args.report == "gstr3b":
        gstr3b = await generate_gstr3b(store, args.client, args.month, args.year)
        if fmt == "csv":
            return gstr3b_to_csv(gstr3b)
        if fmt == "json":
            return _to_json(gstr3b.to_dict())
        return _text_lines(
            f"GSTR-3B: {gstr3b.legal_name} ({gstr3b.gstin}) {gstr3b.period}",
            [
                ("Output tax", gstr3b.outward_tax.total),
                ("Input tax credit", gstr3b.itc.total.total),
                ("Tax payable", gstr3b.tax_payable.total),
            ],
        )

    if args.report == "gst-liability":
        liability = await calculate_gst_liability(store, args.client, args.month, args.year)
        if fmt == "json":
            return _to_json(asdict(liability))
        if fmt == "csv":
            raise ReportError("gst-liability has no CSV layout; use text or json")
        return _text_lines(
            f"GST Liability: {args.month:02d}-{args.year}",
            [
                ("Output tax", liability.output_tax),
                ("Input credit", liability.input_credit),
                ("Net payable", liability.net_payable),
                ("Due date", liability.due_date.isoformat()),
            ],
        )

    raise ReportError(f"Unknown report: {args.report}")


async def main(argv: list[str] | None = None) -> int:
    """Run one report and print it to stdout. Returns the exit code."""
    args = build_parser().parse_args(argv)

    try:
        configure_logging(level=args.log_level)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    bind_report_context(report=args.report, client_id=args.client)
    logger.info("report_requested")

    try:
        async with LedgerStoreClient() as store:
            output = await render_report(store, args)
    except (ReportError, LedgerStoreError) as e:
        logger.error("report_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("report_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("report_interrupted")
        sys.exit(130)


if __name__ == "__main__":
    run()
