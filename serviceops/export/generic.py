from __future__ import annotations

from serviceops.export.common import fmt_amount, fmt_percent, fmt_quantity, render_csv, safe_filename_part
from serviceops.models.preview import BillingLineItem, BillingPreview

HEADERS = [
    "Type",
    "Facility",
    "Description",
    "Category",
    "Status",
    "Monthly Rate",
    "Quantity",
    "Frequency",
    "Tax Behavior",
    "Line Subtotal",
    "Line Tax",
    "Line Total",
    "Included",
    "Override",
    "Seasonal Pause",
    "Pro-Rated",
    "Scheduled Days",
    "Active Days",
    "Pause Range",
    "Notes",
]

_AMOUNT_COLUMN = HEADERS.index("Line Total")


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _optional_int(value: int | None) -> str:
    return "" if value is None else str(value)


def _line_row(li: BillingLineItem) -> list[str]:
    pause_range = ""
    if li.pause_start_day is not None and li.pause_end_day is not None:
        pause_range = f"{li.pause_start_day}-{li.pause_end_day}"
    frequency = f"{li.effective_frequency}x/week" if li.effective_frequency is not None else ""
    notes = " | ".join(part for part in (li.override_notes, li.notes) if part)
    return [
        li.source.value,
        li.location_name,
        li.description,
        li.category or "",
        li.effective_status.value if li.effective_status else "",
        fmt_amount(li.effective_rate),
        fmt_quantity(li.quantity),
        frequency,
        li.tax_behavior.value,
        fmt_amount(li.line_subtotal),
        fmt_amount(li.line_tax),
        fmt_amount(li.line_total),
        _yes_no(li.included_in_total),
        _yes_no(li.is_overridden),
        _yes_no(li.is_seasonally_paused),
        _yes_no(li.is_pro_rated),
        _optional_int(li.scheduled_days),
        _optional_int(li.active_days),
        pause_range,
        notes,
    ]


def _summary_row(label: str, value: str) -> list[str]:
    row = [""] * (_AMOUNT_COLUMN + 1)
    row[0] = label
    row[_AMOUNT_COLUMN] = value
    return row


def render_billing_csv(preview: BillingPreview) -> str:
    rows: list[list[str]] = [list(HEADERS)]
    rows.extend(_line_row(li) for li in preview.line_items)

    rows.append([])
    rows.append(_summary_row("Subtotal", f"${fmt_amount(preview.subtotal)}"))
    rows.append(_summary_row(f"Tax ({fmt_percent(preview.tax_rate)})", f"${fmt_amount(preview.tax_amount)}"))
    rows.append(_summary_row("Total", f"${fmt_amount(preview.total)}"))
    if preview.previous_month_total is not None:
        rows.append(_summary_row("Previous Month", f"${fmt_amount(preview.previous_month_total)}"))
        if preview.explanation.delta_amount is not None:
            rows.append(_summary_row("Delta", f"${fmt_amount(preview.explanation.delta_amount)}"))
    return render_csv(rows)


def billing_csv_filename(preview: BillingPreview) -> str:
    return f"{safe_filename_part(preview.client_name)}_billing_{preview.year}_{preview.month:02d}.csv"
