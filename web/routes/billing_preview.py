from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from serviceops.export.generic import billing_csv_filename, render_billing_csv
from serviceops.export.pdf import billing_pdf_filename, render_billing_pdf
from serviceops.export.quickbooks import quickbooks_filename, render_quickbooks_csv
from serviceops.models.preview import BillingPreview
from web.deps import get_billing_preview_service, get_company_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients/{client_uuid}/billing-preview")


def _period(year: int | None, month: int | None) -> tuple[int, int]:
    today = date.today()
    return (year if year is not None else today.year, month if month is not None else today.month)


def _compute(request: Request, client_uuid: str, year: int | None, month: int | None) -> BillingPreview:
    company_id = get_company_id(request)
    year, month = _period(year, month)
    service = get_billing_preview_service(request)
    client = service.get_client_by_uuid(client_uuid, company_id)
    return service.compute_preview(client.id, company_id, year, month)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("")
async def billing_preview(request: Request, client_uuid: str, year: int | None = None, month: int | None = None):
    logger.info("GET billing-preview client=%s year=%s month=%s", client_uuid, year, month)
    preview = _compute(request, client_uuid, year, month)
    return JSONResponse(preview.model_dump(mode="json"))


@router.get("/export")
async def billing_preview_export(
    request: Request, client_uuid: str, year: int | None = None, month: int | None = None
):
    logger.info("GET billing-preview/export client=%s year=%s month=%s", client_uuid, year, month)
    preview = _compute(request, client_uuid, year, month)
    return _csv_response(render_billing_csv(preview), billing_csv_filename(preview))


@router.get("/export-qb")
async def billing_preview_export_qb(
    request: Request, client_uuid: str, year: int | None = None, month: int | None = None
):
    logger.info("GET billing-preview/export-qb client=%s year=%s month=%s", client_uuid, year, month)
    preview = _compute(request, client_uuid, year, month)
    return _csv_response(render_quickbooks_csv(preview), quickbooks_filename(preview))


@router.get("/export-pdf")
async def billing_preview_export_pdf(
    request: Request, client_uuid: str, year: int | None = None, month: int | None = None, hide_tax: bool = False
):
    logger.info("GET billing-preview/export-pdf client=%s year=%s month=%s", client_uuid, year, month)
    preview = _compute(request, client_uuid, year, month)
    return Response(
        content=render_billing_pdf(preview, hide_tax=hide_tax),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{billing_pdf_filename(preview)}"'},
    )


@router.get("/delta")
async def billing_preview_delta(
    request: Request, client_uuid: str, year: int | None = None, month: int | None = None
):
    logger.info("GET billing-preview/delta client=%s year=%s month=%s", client_uuid, year, month)
    company_id = get_company_id(request)
    year, month = _period(year, month)
    service = get_billing_preview_service(request)
    client = service.get_client_by_uuid(client_uuid, company_id)
    report = service.compute_delta_report(client.id, company_id, year, month)
    return JSONResponse(report.model_dump(mode="json"))
