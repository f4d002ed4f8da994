"""Printable billing preview rendered with fpdf2's core fonts."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from fpdf import FPDF

from serviceops.constants import DAY_LABELS, format_month
from serviceops.export.common import fmt_percent, fmt_quantity, safe_filename_part
from serviceops.models import format_usd
from serviceops.models.preview import BillingLineItem, BillingPreview

logger = logging.getLogger(__name__)

FONT = "helvetica"

HEADER_FILL = (245, 243, 240)
HEADER_TEXT = (80, 75, 70)
BODY_TEXT = (50, 50, 50)
DIMMED_TEXT = (170, 165, 160)
ROW_ALT = (252, 252, 250)
BORDER = (215, 210, 200)
MUTED_TEXT = (120, 115, 105)
HIGHLIGHT_FILL = (239, 246, 255)
HIGHLIGHT_BORDER = (186, 210, 240)
HIGHLIGHT_TEXT = (30, 64, 120)

FACILITY_COLUMNS = [
    ("Facility", 0.16, "L"),
    ("Category", 0.09, "L"),
    ("Status", 0.09, "L"),
    ("Schedule", 0.14, "L"),
    ("Rate", 0.15, "R"),
    ("Tax", 0.09, "R"),
    ("Total", 0.10, "R"),
    ("Notes", 0.18, "L"),
]

SERVICE_COLUMNS = [
    ("Description", 0.24, "L"),
    ("Facility", 0.16, "L"),
    ("Qty", 0.07, "R"),
    ("Rate", 0.11, "R"),
    ("Tax", 0.10, "R"),
    ("Total", 0.11, "R"),
    ("Notes", 0.21, "L"),
]


def _latin1(text: str) -> str:
    # core fonts only cover latin-1
    text = text.replace("\u2014", "-").replace("\u2013", "-").replace("\u2022", "-").replace("\u2192", "->")
    return text.encode("latin-1", "replace").decode("latin-1")


def format_days(days: list[int]) -> str:
    if not days:
        return "-"
    ordered = sorted(days)
    if len(ordered) == 7:
        return "Every day"
    if ordered == [1, 2, 3, 4, 5]:
        return "Mon-Fri"
    if ordered == [1, 2, 3, 4, 5, 6]:
        return "Mon-Sat"
    return ", ".join(DAY_LABELS[d] for d in ordered)


def _without_tax(columns: list[tuple[str, float, str]]) -> list[tuple[str, float, str]]:
    kept = [col for col in columns if col[0] != "Tax"]
    scale = 1 / sum(col[1] for col in kept)
    return [(name, width * scale, align) for name, width, align in kept]


def summary_boxes(preview: BillingPreview, hide_tax: bool = False) -> list[tuple[str, str, bool]]:
    """(label, value, highlighted) for the summary strip above the tables."""
    boxes = [("Subtotal", format_usd(preview.subtotal), False)]
    if not hide_tax:
        boxes.append((f"Tax ({fmt_percent(preview.tax_rate)})", format_usd(preview.tax_amount), False))
    boxes.append(("Total", format_usd(preview.subtotal if hide_tax else preview.total), True))

    delta = preview.explanation.delta_amount
    if preview.previous_month_total is not None and delta is not None:
        vs_prior = ("+" if delta >= 0 else "") + format_usd(delta)
    else:
        vs_prior = "N/A"
    boxes.append(("vs. Prior Month", vs_prior, False))
    return boxes


def _line_notes(li: BillingLineItem) -> str:
    notes = []
    if li.is_overridden:
        notes.append("Override")
    if li.is_seasonally_paused:
        notes.append("Seasonal")
    if li.is_pro_rated:
        notes.append("Pro-rated")
    if li.override_notes:
        notes.append(li.override_notes)
    return "; ".join(notes) or "-"


def facility_rows(preview: BillingPreview, hide_tax: bool = False) -> list[list[str]]:
    """Facility table body; the last row is the facility subtotal."""
    rows = []
    for li in preview.facility_lines:
        schedule = "-"
        if li.included_in_total:
            schedule = f"{li.effective_frequency or 0}x/wk - {format_days(li.effective_days_of_week)}"
        rate = format_usd(li.effective_rate)
        if li.is_pro_rated:
            rate += f" ({li.active_days}/{li.scheduled_days} days)"
        status = li.effective_status.value.replace("_", " ") if li.effective_status else "-"
        row = [li.location_name, li.category or "-", status, schedule, rate]
        if not hide_tax:
            row.append(format_usd(li.line_tax) if li.included_in_total else "-")
        row.append(format_usd(li.line_total) if li.included_in_total else "$0.00")
        row.append(_line_notes(li))
        rows.append(row)

    lines = preview.facility_lines
    subtotal = [f"Facility Subtotal ({preview.active_facility_count} active)", "", "", "", ""]
    if not hide_tax:
        subtotal.append(format_usd(sum((li.line_tax for li in lines), Decimal("0"))))
    subtotal.append(format_usd(sum((li.line_total for li in lines), Decimal("0"))))
    subtotal.append("")
    rows.append(subtotal)
    return rows


def service_rows(preview: BillingPreview, hide_tax: bool = False) -> list[list[str]]:
    """Service item table body, or an empty list when there are no service items."""
    lines = preview.service_lines
    if not lines:
        return []
    rows = []
    for li in lines:
        row = [li.description, li.location_name or "-", fmt_quantity(li.quantity), format_usd(li.effective_rate)]
        if not hide_tax:
            row.append(format_usd(li.line_tax))
        row.append(format_usd(li.line_total))
        row.append(li.notes or "-")
        rows.append(row)

    subtotal = [f"Service Subtotal ({len(lines)} items)", "", "", ""]
    if not hide_tax:
        subtotal.append(format_usd(sum((li.line_tax for li in lines), Decimal("0"))))
    subtotal.append(format_usd(sum((li.line_total for li in lines), Decimal("0"))))
    subtotal.append("")
    rows.append(subtotal)
    return rows


def billing_notes(preview: BillingPreview) -> list[str]:
    explanation = preview.explanation
    notes = []
    if explanation.seasonally_paused:
        notes.append(f"Seasonally paused: {', '.join(explanation.seasonally_paused)}")
    if explanation.paused_facilities:
        notes.append(f"Paused: {', '.join(explanation.paused_facilities)}")
    notes.extend(f"- {line}" for line in explanation.overrides)
    if explanation.delta_reason:
        notes.append(f"Month-over-month: {explanation.delta_reason}")
    return notes


class _PreviewDocument(FPDF):
    footer_text = ""

    def footer(self) -> None:
        self.set_y(-15)
        self.set_font(FONT, "", 7)
        self.set_text_color(160, 155, 150)
        self.cell(0, 5, self.footer_text, align="L")
        self.set_x(self.l_margin)
        self.cell(0, 5, f"Page {self.page_no()} of {{nb}}", align="R")


class BillingPreviewPDF:
    def generate(self, preview: BillingPreview, hide_tax: bool = False, generated_on: date | None = None) -> bytes:
        generated_on = generated_on or date.today()
        period = format_month(preview.year, preview.month)

        pdf = _PreviewDocument(orientation="landscape", unit="mm", format="letter")
        pdf.footer_text = _latin1(f"{preview.client_name} - {period} Billing Preview")
        pdf.set_auto_page_break(auto=True, margin=20)
        pdf.add_page()

        page_w = pdf.w - pdf.l_margin - pdf.r_margin

        self._draw_header(pdf, page_w, preview.client_name, period, generated_on)
        self._draw_summary(pdf, page_w, summary_boxes(preview, hide_tax))

        facility_columns = _without_tax(FACILITY_COLUMNS) if hide_tax else FACILITY_COLUMNS
        self._draw_table(pdf, page_w, facility_columns, facility_rows(preview, hide_tax), preview.facility_lines)

        services = service_rows(preview, hide_tax)
        if services:
            pdf.ln(6)
            self._draw_section_label(pdf, "Service Line Items")
            service_columns = _without_tax(SERVICE_COLUMNS) if hide_tax else SERVICE_COLUMNS
            self._draw_table(pdf, page_w, service_columns, services)

        notes = billing_notes(preview)
        if notes:
            pdf.ln(6)
            self._draw_section_label(pdf, "Billing Notes")
            pdf.set_font(FONT, "", 8)
            pdf.set_text_color(100, 95, 90)
            for note in notes:
                pdf.multi_cell(page_w, 5, _latin1(note), new_x="LMARGIN", new_y="NEXT")

        output = bytes(pdf.output())
        logger.debug(
            "PDF generated: client=%s period=%s-%s lines=%d size=%d bytes",
            preview.client_id,
            preview.year,
            preview.month,
            len(preview.line_items),
            len(output),
        )
        return output

    def _draw_header(self, pdf: FPDF, page_w: float, client_name: str, period: str, generated_on: date) -> None:
        x = pdf.l_margin
        y = pdf.get_y()

        pdf.set_font(FONT, "", 8)
        pdf.set_text_color(100, 100, 100)
        pdf.set_xy(x, y)
        pdf.cell(page_w, 8, f"Generated {generated_on:%b} {generated_on.day}, {generated_on.year}", align="R")

        pdf.set_xy(x, y)
        pdf.set_font(FONT, "B", 18)
        pdf.set_text_color(0, 0, 0)
        pdf.cell(page_w, 8, "Billing Preview", new_x="LMARGIN", new_y="NEXT")

        pdf.set_font(FONT, "", 11)
        pdf.set_text_color(100, 100, 100)
        pdf.cell(page_w, 6, _latin1(client_name), new_x="LMARGIN", new_y="NEXT")
        pdf.cell(page_w, 6, period, new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    def _draw_summary(self, pdf: FPDF, page_w: float, boxes: list[tuple[str, str, bool]]) -> None:
        gap = 4
        box_h = 16
        box_w = (page_w - gap * (len(boxes) - 1)) / len(boxes)
        y = pdf.get_y()

        for i, (label, value, highlight) in enumerate(boxes):
            x = pdf.l_margin + i * (box_w + gap)
            pdf.set_fill_color(*(HIGHLIGHT_FILL if highlight else (250, 250, 248)))
            pdf.set_draw_color(*(HIGHLIGHT_BORDER if highlight else BORDER))
            pdf.set_line_width(0.3)
            pdf.rect(x, y, box_w, box_h, "DF")

            pdf.set_xy(x + 3, y + 2)
            pdf.set_font(FONT, "", 7)
            pdf.set_text_color(*MUTED_TEXT)
            pdf.cell(box_w - 6, 4, label)

            pdf.set_xy(x + 3, y + 7)
            pdf.set_font(FONT, "B", 13)
            pdf.set_text_color(*(HIGHLIGHT_TEXT if highlight else BODY_TEXT))
            pdf.cell(box_w - 6, 7, value)

        pdf.set_y(y + box_h + 8)

    def _draw_section_label(self, pdf: FPDF, label: str) -> None:
        pdf.set_font(FONT, "B", 10)
        pdf.set_text_color(60, 55, 50)
        pdf.cell(0, 7, label, new_x="LMARGIN", new_y="NEXT")

    def _draw_table(
        self,
        pdf: FPDF,
        page_w: float,
        columns: list[tuple[str, float, str]],
        rows: list[list[str]],
        lines: list[BillingLineItem] | None = None,
    ) -> None:
        line_h = 7
        widths = [page_w * share for _, share, _ in columns]

        pdf.set_fill_color(*HEADER_FILL)
        pdf.set_text_color(*HEADER_TEXT)
        pdf.set_draw_color(*BORDER)
        pdf.set_line_width(0.2)
        pdf.set_font(FONT, "B", 8)
        for (name, _, align), width in zip(columns, widths):
            pdf.cell(width, line_h, name, border=1, fill=True, align=align)
        pdf.ln(line_h)

        last = len(rows) - 1
        for i, row in enumerate(rows):
            if i == last:
                pdf.set_fill_color(*HEADER_FILL)
                pdf.set_font(FONT, "B", 8)
            else:
                pdf.set_fill_color(*(ROW_ALT if i % 2 else (255, 255, 255)))
                pdf.set_font(FONT, "", 8)
            dimmed = lines is not None and i < len(lines) and not lines[i].included_in_total
            pdf.set_text_color(*(DIMMED_TEXT if dimmed else BODY_TEXT))

            for (_, _, align), width, value in zip(columns, widths, row):
                pdf.cell(width, line_h, self._fit(pdf, _latin1(value), width - 2), border=1, fill=True, align=align)
            pdf.ln(line_h)

    @staticmethod
    def _fit(pdf: FPDF, text: str, width: float) -> str:
        if pdf.get_string_width(text) <= width:
            return text
        while text and pdf.get_string_width(text + "...") > width:
            text = text[:-1]
        return text + "..."


def render_billing_pdf(preview: BillingPreview, hide_tax: bool = False, generated_on: date | None = None) -> bytes:
    return BillingPreviewPDF().generate(preview, hide_tax=hide_tax, generated_on=generated_on)


def billing_pdf_filename(preview: BillingPreview) -> str:
    return f"{safe_filename_part(preview.client_name)}_billing_{preview.year}_{preview.month:02d}.pdf"
