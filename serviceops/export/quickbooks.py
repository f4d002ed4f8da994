"""QuickBooks Online invoice-import CSV."""

from __future__ import annotations

from serviceops.constants import MONTH_LABELS, days_in_month
from serviceops.engine.money import round_money
from serviceops.export.common import fmt_amount, fmt_percent, fmt_quantity, render_csv, safe_filename_part
from serviceops.models.facility import TaxBehavior
from serviceops.models.preview import BillingLineItem, BillingPreview, LineSource
from serviceops.settings import settings

HEADERS = [
    "InvoiceNo",
    "Customer",
    "InvoiceDate",
    "DueDate",
    "ItemDescription",
    "ItemQuantity",
    "ItemRate",
    "ItemAmount",
    "TaxCode",
    "Memo",
]


def invoice_number(year: int, month: int) -> str:
    return f"{settings.invoice_number_prefix}-{year}{month:02d}"


def invoice_date(year: int, month: int) -> str:
    return f"{month:02d}/01/{year}"


def due_date(year: int, month: int) -> str:
    return f"{month:02d}/{days_in_month(year, month):02d}/{year}"


def describe_line(li: BillingLineItem) -> str:
    if li.source == LineSource.SERVICE:
        desc = li.description
        if li.location_name:
            desc += f" ({li.location_name})"
        return desc

    desc = f"{li.location_name} — {li.description or settings.qb_item_label}"
    if li.category:
        desc += f" ({li.category})"
    if li.is_pro_rated:
        desc += f" [Pro-rated: {li.active_days}/{li.scheduled_days} days]"
    if li.override_notes:
        desc += f" — {li.override_notes}"
    return desc


def tax_code(li: BillingLineItem) -> str:
    if li.line_tax > 0 and li.tax_behavior != TaxBehavior.TAX_INCLUDED:
        return "TAX"
    return "NON"


def _quantity_and_rate(li: BillingLineItem) -> tuple[str, str]:
    if li.source == LineSource.SERVICE and round_money(li.quantity * li.effective_rate) == li.line_subtotal:
        return fmt_quantity(li.quantity), fmt_amount(li.effective_rate)
    return "1", fmt_amount(li.line_subtotal)


def render_quickbooks_csv(preview: BillingPreview) -> str:
    number = invoice_number(preview.year, preview.month)
    issued = invoice_date(preview.year, preview.month)
    due = due_date(preview.year, preview.month)
    memo = f"{MONTH_LABELS[preview.month]} {preview.year} {settings.qb_memo_label}"

    rows: list[list[str]] = [list(HEADERS)]
    for li in preview.included_lines:
        quantity, rate = _quantity_and_rate(li)
        rows.append(
            [
                number,
                preview.client_name,
                issued,
                due,
                describe_line(li),
                quantity,
                rate,
                fmt_amount(li.line_subtotal),
                tax_code(li),
                memo,
            ]
        )

    if preview.tax_amount > 0:
        rows.append(
            [
                number,
                preview.client_name,
                issued,
                due,
                f"Sales Tax ({fmt_percent(preview.tax_rate)})",
                "1",
                fmt_amount(preview.tax_amount),
                fmt_amount(preview.tax_amount),
                "NON",
                memo,
            ]
        )
    return render_csv(rows)


def quickbooks_filename(preview: BillingPreview) -> str:
    return f"{safe_filename_part(preview.client_name)}_QB_invoice_{preview.year}_{preview.month:02d}.csv"
