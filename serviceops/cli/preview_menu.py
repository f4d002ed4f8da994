from __future__ import annotations

from datetime import date
from pathlib import Path

import questionary
from rich.console import Console
from rich.table import Table

from serviceops.constants import DAY_LABELS, format_month
from serviceops.errors import ServiceOpsError
from serviceops.export.generic import billing_csv_filename, render_billing_csv
from serviceops.export.pdf import billing_pdf_filename, render_billing_pdf
from serviceops.export.quickbooks import quickbooks_filename, render_quickbooks_csv
from serviceops.models import format_usd
from serviceops.models.preview import BillingPreview
from serviceops.services.billing_preview_service import BillingPreviewService

console = Console()


def _ask_int(prompt: str, default: int) -> int | None:
    raw = questionary.text(prompt, default=str(default)).ask()
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        console.print("[red]Please enter a whole number.[/red]")
        return None


def ask_preview_request() -> tuple[str, int, int, int] | None:
    """Prompt for client uuid, company id, year and month. None when cancelled."""
    client_uuid = questionary.text("Client UUID:").ask()
    if not client_uuid:
        console.print("[yellow]Cancelled.[/yellow]")
        return None
    company_id = _ask_int("Company ID:", 1)
    if company_id is None:
        return None
    today = date.today()
    year = _ask_int("Year:", today.year)
    if year is None:
        return None
    month = _ask_int("Month (1-12):", today.month)
    if month is None:
        return None
    return client_uuid.strip(), company_id, year, month


def _load_preview(service: BillingPreviewService) -> BillingPreview | None:
    request = ask_preview_request()
    if request is None:
        return None
    client_uuid, company_id, year, month = request
    try:
        client = service.get_client_by_uuid(client_uuid, company_id)
        return service.compute_preview(client.id, company_id, year, month)
    except ServiceOpsError as exc:
        console.print(f"[red]{exc}[/red]")
        return None


def print_preview(preview: BillingPreview) -> None:
    table = Table(title=f"{preview.client_name} — {format_month(preview.year, preview.month)}")
    table.add_column("Facility / Item", style="bold")
    table.add_column("Status")
    table.add_column("Rate", justify="right")
    table.add_column("Schedule")
    table.add_column("Days", justify="right")
    table.add_column("Tax", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Included", justify="center")

    for li in preview.line_items:
        days = ""
        if li.scheduled_days is not None:
            days = f"{li.active_days}/{li.scheduled_days}"
        table.add_row(
            li.location_name or li.description,
            li.effective_status.value if li.effective_status else li.source.value,
            format_usd(li.effective_rate),
            " ".join(DAY_LABELS[d] for d in li.effective_days_of_week),
            days,
            format_usd(li.line_tax),
            format_usd(li.line_total),
            "✓" if li.included_in_total else "-",
        )

    console.print()
    console.print(table)
    console.print(f"  Subtotal: [bold]{format_usd(preview.subtotal)}[/bold]")
    console.print(f"  Tax:      [bold]{format_usd(preview.tax_amount)}[/bold]")
    console.print(f"  Total:    [bold green]{format_usd(preview.total)}[/bold green]")
    if preview.previous_month_total is not None:
        console.print(f"  Previous month: {format_usd(preview.previous_month_total)}")
    if preview.explanation.delta_reason:
        console.print(f"  [dim]{preview.explanation.delta_reason}[/dim]")
    for line in preview.explanation.overrides:
        console.print(f"  [cyan]Override:[/cyan] {line}")
    console.print()


def preview_menu(service: BillingPreviewService) -> None:
    preview = _load_preview(service)
    if preview is not None:
        print_preview(preview)


def export_menu(service: BillingPreviewService, quickbooks: bool = False) -> Path | None:
    preview = _load_preview(service)
    if preview is None:
        return None
    if quickbooks:
        path = Path(quickbooks_filename(preview))
        path.write_text(render_quickbooks_csv(preview), encoding="utf-8")
    else:
        path = Path(billing_csv_filename(preview))
        path.write_text(render_billing_csv(preview), encoding="utf-8")
    console.print(f"[green]Exported to {path}[/green]")
    return path


def pdf_export_menu(service: BillingPreviewService) -> Path | None:
    preview = _load_preview(service)
    if preview is None:
        return None
    hide_tax = questionary.confirm("Hide tax columns?", default=False).ask()
    path = Path(billing_pdf_filename(preview))
    path.write_bytes(render_billing_pdf(preview, hide_tax=bool(hide_tax)))
    console.print(f"[green]Exported to {path}[/green]")
    return path
