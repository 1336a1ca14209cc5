"""GST returns (GSTR-1, GSTR-3B) built from invoice data."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from ledgerbook.config import get_settings
from ledgerbook.reports.base import month_bounds, sum_amounts, utc_now
from ledgerbook.reports.errors import InvalidTaxIdError, MissingTaxIdError, ReportPeriodError
from ledgerbook.reports.export import gstr1_to_csv, gstr1_to_portal_json, gstr3b_to_csv
from ledgerbook.store.base import (
    ZERO,
    ClientProfile,
    DateRange,
    InvoiceRecord,
    InvoiceType,
    LedgerStore,
)

logger = structlog.get_logger(__name__)

# Invoices to unregistered buyers above this value are reported one by one.
B2C_LARGE_THRESHOLD = Decimal("250000")

# Returns are due on this day of the month after the period.
GST_DUE_DAY = 20

GSTIN_PATTERN = re.compile(r"[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]")
GSTIN_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass(frozen=True)
class TaxHeads:
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    cess: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst + self.cess

    @classmethod
    def of(cls, invoices: Iterable[InvoiceRecord]) -> TaxHeads:
        items = list(invoices)
        return cls(
            cgst=sum_amounts(inv.cgst for inv in items),
            sgst=sum_amounts(inv.sgst for inv in items),
            igst=sum_amounts(inv.igst for inv in items),
            cess=sum_amounts(inv.cess for inv in items),
        )

    def payable_after(self, credit: TaxHeads) -> TaxHeads:
        """Tax due per head after credit; a head never goes below zero."""
        return TaxHeads(
            cgst=max(ZERO, self.cgst - credit.cgst),
            sgst=max(ZERO, self.sgst - credit.sgst),
            igst=max(ZERO, self.igst - credit.igst),
            cess=max(ZERO, self.cess - credit.cess),
        )

    def to_dict(self, include_total: bool = False) -> dict[str, str]:
        data = {
            "cgst": str(self.cgst),
            "sgst": str(self.sgst),
            "igst": str(self.igst),
            "cess": str(self.cess),
        }
        if include_total:
            data["total"] = str(self.total)
        return data


@dataclass(frozen=True)
class GstInvoice:
    invoice_number: str
    invoice_date: date
    gstin: str
    legal_name: str
    address: str
    taxable_value: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    cess: Decimal
    invoice_value: Decimal
    place_of_supply: str
    reverse_charge: bool = False
    invoice_type: str = "Regular"

    @property
    def total_tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst + self.cess

    @classmethod
    def from_invoice(cls, invoice: InvoiceRecord) -> GstInvoice:
        return cls(
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            gstin=(invoice.buyer_tax_id or "").strip(),
            legal_name=invoice.buyer_name,
            address=invoice.buyer_address,
            taxable_value=invoice.subtotal,
            cgst=invoice.cgst,
            sgst=invoice.sgst,
            igst=invoice.igst,
            cess=invoice.cess,
            invoice_value=invoice.total_amount,
            place_of_supply=invoice.buyer_address,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoice_number": self.invoice_number,
            "invoice_date": self.invoice_date.isoformat(),
            "gstin": self.gstin,
            "legal_name": self.legal_name,
            "address": self.address,
            "taxable_value": str(self.taxable_value),
            "cgst": str(self.cgst),
            "sgst": str(self.sgst),
            "igst": str(self.igst),
            "cess": str(self.cess),
            "total_tax": str(self.total_tax),
            "invoice_value": str(self.invoice_value),
            "place_of_supply": self.place_of_supply,
            "reverse_charge": self.reverse_charge,
            "invoice_type": self.invoice_type,
        }


@dataclass(frozen=True)
class B2BSupplies:
    invoices: tuple[GstInvoice, ...]
    total_taxable: Decimal
    taxes: TaxHeads


@dataclass(frozen=True)
class B2CLargeSupplies:
    invoices: tuple[GstInvoice, ...]
    total_taxable: Decimal
    total_tax: Decimal


@dataclass(frozen=True)
class B2CSmallSupplies:
    total_taxable: Decimal = ZERO
    total_tax: Decimal = ZERO


@dataclass(frozen=True)
class Gstr1Summary:
    total_outward_supplies: Decimal
    total_taxable_value: Decimal
    total_tax: Decimal


@dataclass(frozen=True)
class Gstr1Report:
    gstin: str
    legal_name: str
    period: str  # MM-YYYY
    b2b: B2BSupplies
    b2c_large: B2CLargeSupplies
    b2c_small: B2CSmallSupplies
    summary: Gstr1Summary
    filing_status: str = "draft"
    credit_notes: tuple[GstInvoice, ...] = ()
    debit_notes: tuple[GstInvoice, ...] = ()
    generated_at: datetime = field(default_factory=utc_now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gstin": self.gstin,
            "legal_name": self.legal_name,
            "period": self.period,
            "filing_status": self.filing_status,
            "b2b": {
                "invoices": [inv.to_dict() for inv in self.b2b.invoices],
                "total_taxable": str(self.b2b.total_taxable),
                "total_cgst": str(self.b2b.taxes.cgst),
                "total_sgst": str(self.b2b.taxes.sgst),
                "total_igst": str(self.b2b.taxes.igst),
                "total_cess": str(self.b2b.taxes.cess),
            },
            "b2c_large": {
                "invoices": [inv.to_dict() for inv in self.b2c_large.invoices],
                "total_taxable": str(self.b2c_large.total_taxable),
                "total_tax": str(self.b2c_large.total_tax),
            },
            "b2c_small": {
                "total_taxable": str(self.b2c_small.total_taxable),
                "total_tax": str(self.b2c_small.total_tax),
            },
            "credit_notes": [inv.to_dict() for inv in self.credit_notes],
            "debit_notes": [inv.to_dict() for inv in self.debit_notes],
            "summary": {
                "total_outward_supplies": str(self.summary.total_outward_supplies),
                "total_taxable_value": str(self.summary.total_taxable_value),
                "total_tax": str(self.summary.total_tax),
            },
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class InputTaxCredit:
    inputs: TaxHeads
    capital_goods: TaxHeads = field(default_factory=TaxHeads)
    input_services: TaxHeads = field(default_factory=TaxHeads)

    @property
    def total(self) -> TaxHeads:
        return TaxHeads(
            cgst=self.inputs.cgst + self.capital_goods.cgst + self.input_services.cgst,
            sgst=self.inputs.sgst + self.capital_goods.sgst + self.input_services.sgst,
            igst=self.inputs.igst + self.capital_goods.igst + self.input_services.igst,
            cess=self.inputs.cess + self.capital_goods.cess + self.input_services.cess,
        )


@dataclass(frozen=True)
class Gstr3bReport:
    gstin: str
    legal_name: str
    period: str  # MM-YYYY
    outward_taxable_value: Decimal
    outward_tax: TaxHeads
    inter_state_taxable_value: Decimal
    inter_state_igst: Decimal
    itc: InputTaxCredit
    tax_payable: TaxHeads
    filing_status: str = "draft"
    generated_at: datetime = field(default_factory=utc_now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gstin": self.gstin,
            "legal_name": self.legal_name,
            "period": self.period,
            "filing_status": self.filing_status,
            "outward_supplies": {
                "taxable_value": str(self.outward_taxable_value),
                **self.outward_tax.to_dict(),
            },
            "inter_state_supplies": {
                "taxable_value": str(self.inter_state_taxable_value),
                "igst": str(self.inter_state_igst),
            },
            "itc": {
                "inputs": self.itc.inputs.to_dict(),
                "capital_goods": self.itc.capital_goods.to_dict(),
                "input_services": self.itc.input_services.to_dict(),
                "total": self.itc.total.to_dict(),
            },
            "tax_payable": self.tax_payable.to_dict(include_total=True),
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class GstLiability:
    output_tax: Decimal
    input_credit: Decimal
    net_payable: Decimal
    due_date: date


def format_period(month: int, year: int) -> str:
    return f"{month:02d}-{year}"


def due_date_for(month: int, year: int) -> date:
    """The 20th of the month following the return period."""
    if month == 12:
        return date(year + 1, 1, GST_DUE_DAY)
    return date(year, month + 1, GST_DUE_DAY)


def _month_range(month: int, year: int) -> DateRange:
    if not 1 <= month <= 12:
        raise ReportPeriodError(f"Month must be between 1 and 12, got {month}")
    start, end = month_bounds(year, month)
    return DateRange(start=start, end=end)


def is_valid_gstin(gstin: str) -> bool:
    """Check the 15-character GSTIN layout and its mod-36 check character."""
    if not GSTIN_PATTERN.fullmatch(gstin):
        return False
    total = 0
    for i, char in enumerate(gstin[:14]):
        product = GSTIN_CHARSET.index(char) * (2 if i % 2 else 1)
        total += product // 36 + product % 36
    return gstin[14] == GSTIN_CHARSET[(36 - total % 36) % 36]


async def _registered_client(store: LedgerStore, client_id: str) -> ClientProfile:
    client = await store.fetch_client(client_id)
    if client is None or not client.tax_id:
        logger.error("gst_client_without_gstin", client_id=client_id)
        raise MissingTaxIdError(client_id)
    if not is_valid_gstin(client.tax_id):
        logger.error("gst_client_gstin_invalid", client_id=client_id, tax_id=client.tax_id)
        raise InvalidTaxIdError(client_id, client.tax_id)
    return client


def derive_gstr1(
    client: ClientProfile, period: str, invoices: Iterable[InvoiceRecord]
) -> Gstr1Report:
    """Route each sales invoice to B2B, B2C-large or B2C-small.

    A buyer GSTIN puts an invoice in B2B whatever its value.
    """
    b2b: list[GstInvoice] = []
    b2c_large: list[GstInvoice] = []
    b2c_small_taxable = ZERO
    b2c_small_tax = ZERO

    for invoice in invoices:
        gst_invoice = GstInvoice.from_invoice(invoice)
        if invoice.has_buyer_tax_id:
            b2b.append(gst_invoice)
        elif invoice.total_amount > B2C_LARGE_THRESHOLD:
            b2c_large.append(gst_invoice)
        else:
            b2c_small_taxable += gst_invoice.taxable_value
            b2c_small_tax += gst_invoice.total_tax

    b2b_supplies = B2BSupplies(
        invoices=tuple(b2b),
        total_taxable=sum_amounts(inv.taxable_value for inv in b2b),
        taxes=TaxHeads(
            cgst=sum_amounts(inv.cgst for inv in b2b),
            sgst=sum_amounts(inv.sgst for inv in b2b),
            igst=sum_amounts(inv.igst for inv in b2b),
            cess=sum_amounts(inv.cess for inv in b2b),
        ),
    )
    b2c_large_supplies = B2CLargeSupplies(
        invoices=tuple(b2c_large),
        total_taxable=sum_amounts(inv.taxable_value for inv in b2c_large),
        total_tax=sum_amounts(inv.total_tax for inv in b2c_large),
    )
    b2c_small_supplies = B2CSmallSupplies(
        total_taxable=b2c_small_taxable, total_tax=b2c_small_tax
    )

    total_taxable = (
        b2b_supplies.total_taxable
        + b2c_large_supplies.total_taxable
        + b2c_small_supplies.total_taxable
    )
    total_tax = b2b_supplies.taxes.total + b2c_large_supplies.total_tax + b2c_small_tax

    return Gstr1Report(
        gstin=client.tax_id or "",
        legal_name=client.name or "",
        period=period,
        b2b=b2b_supplies,
        b2c_large=b2c_large_supplies,
        b2c_small=b2c_small_supplies,
        summary=Gstr1Summary(
            total_outward_supplies=total_taxable + total_tax,
            total_taxable_value=total_taxable,
            total_tax=total_tax,
        ),
    )


async def generate_gstr1(
    store: LedgerStore, client_id: str, month: int, year: int
) -> Gstr1Report:
    """Generate GSTR-1 (outward supplies) for a calendar month."""
    period_range = _month_range(month, year)
    client = await _registered_client(store, client_id)
    invoices = await store.fetch_invoices(client_id, InvoiceType.SALES, period_range)

    report = derive_gstr1(client, format_period(month, year), invoices)
    logger.info(
        "gstr1_generated",
        client_id=client_id,
        period=report.period,
        b2b_count=len(report.b2b.invoices),
        total_tax=report.summary.total_tax,
    )
    return report


def derive_gstr3b(
    client: ClientProfile,
    period: str,
    sales: Iterable[InvoiceRecord],
    purchases: Iterable[InvoiceRecord],
) -> Gstr3bReport:
    """Output tax against input tax credit; credit never carries forward."""
    sales_invoices = list(sales)
    outward = TaxHeads.of(sales_invoices)
    itc = InputTaxCredit(inputs=TaxHeads.of(purchases))
    inter_state = [inv for inv in sales_invoices if inv.igst > 0]

    return Gstr3bReport(
        gstin=client.tax_id or "",
        legal_name=client.name or "",
        period=period,
        outward_taxable_value=sum_amounts(inv.subtotal for inv in sales_invoices),
        outward_tax=outward,
        inter_state_taxable_value=sum_amounts(inv.subtotal for inv in inter_state),
        inter_state_igst=sum_amounts(inv.igst for inv in inter_state),
        itc=itc,
        tax_payable=outward.payable_after(itc.total),
    )


async def generate_gstr3b(
    store: LedgerStore, client_id: str, month: int, year: int
) -> Gstr3bReport:
    """Generate GSTR-3B (summary return) for a calendar month."""
    period_range = _month_range(month, year)
    client = await _registered_client(store, client_id)
    sales = await store.fetch_invoices(client_id, InvoiceType.SALES, period_range)
    purchases = await store.fetch_invoices(client_id, InvoiceType.PURCHASE, period_range)

    report = derive_gstr3b(client, format_period(month, year), sales, purchases)
    logger.info(
        "gstr3b_generated",
        client_id=client_id,
        period=report.period,
        tax_payable=report.tax_payable.total,
    )
    return report


async def calculate_gst_liability(
    store: LedgerStore, client_id: str, month: int, year: int
) -> GstLiability:
    gstr3b = await generate_gstr3b(store, client_id, month, year)
    return GstLiability(
        output_tax=gstr3b.outward_tax.total,
        input_credit=gstr3b.itc.total.total,
        net_payable=gstr3b.tax_payable.total,
        due_date=due_date_for(month, year),
    )


async def export_gstr1_to_json(
    store: LedgerStore, client_id: str, month: int, year: int
) -> str:
    """GSTR-1 in the GST portal's upload shape."""
    settings = get_settings()
    report = await generate_gstr1(store, client_id, month, year)
    return gstr1_to_portal_json(
        report,
        place_of_supply=settings.gst_place_of_supply,
        rate=settings.gst_export_rate,
    )


async def export_gstr1_to_csv(
    store: LedgerStore, client_id: str, month: int, year: int
) -> str:
    return gstr1_to_csv(await generate_gstr1(store, client_id, month, year))


async def export_gstr3b_to_csv(
    store: LedgerStore, client_id: str, month: int, year: int
) -> str:
    return gstr3b_to_csv(await generate_gstr3b(store, client_id, month, year))
