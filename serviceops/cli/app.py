import questionary
from rich.console import Console

from serviceops.cli.preview_menu import export_menu, pdf_export_menu, preview_menu
from serviceops.repositories.factory import (
    get_client_repository,
    get_facility_repository,
    get_service_item_repository,
)
from serviceops.services.billing_preview_service import BillingPreviewService

console = Console()


def _build_service() -> BillingPreviewService:
    return BillingPreviewService(
        get_client_repository(),
        get_facility_repository(),
        get_service_item_repository(),
    )


def main_menu() -> None:
    service = _build_service()

    console.print()
    console.print("[bold]Billing Preview[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "Preview Month",
                "Export CSV",
                "Export QuickBooks CSV",
                "Export PDF",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Bye![/bold]")
            break
        elif choice == "Preview Month":
            preview_menu(service)
        elif choice == "Export CSV":
            export_menu(service)
        elif choice == "Export QuickBooks CSV":
            export_menu(service, quickbooks=True)
        elif choice == "Export PDF":
            pdf_export_menu(service)
