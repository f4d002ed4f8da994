from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from serviceops.models.facility import FacilityStatus, MonthlyOverride
from web.deps import get_billing_preview_service, get_company_id, get_facility_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients/{client_uuid}/facilities/{facility_uuid}")


class OverrideBody(BaseModel):
    override_status: FacilityStatus | None = None
    override_frequency: int | None = Field(default=None, ge=0)
    override_days_of_week: list[int] | None = None
    override_rate: Decimal | None = None
    override_notes: str | None = None
    pause_start_day: int | None = None
    pause_end_day: int | None = None


def _resolve(request: Request, client_uuid: str, facility_uuid: str):
    company_id = get_company_id(request)
    client = get_billing_preview_service(request).get_client_by_uuid(client_uuid, company_id)
    facility_service = get_facility_service(request)
    facility = facility_service.get_facility_by_uuid(client.id, facility_uuid)
    return client, facility, facility_service


@router.put("/overrides/{year}/{month}")
async def override_upsert(
    request: Request, client_uuid: str, facility_uuid: str, year: int, month: int, body: OverrideBody
):
    logger.info("PUT override facility=%s period=%s-%s", facility_uuid, year, month)
    client, facility, facility_service = _resolve(request, client_uuid, facility_uuid)
    override = MonthlyOverride(year=year, month=month, **body.model_dump())
    stored = facility_service.set_monthly_override(client.id, facility.id, override)
    return JSONResponse(stored.model_dump(mode="json"))


@router.delete("/overrides/{year}/{month}")
async def override_delete(request: Request, client_uuid: str, facility_uuid: str, year: int, month: int):
    logger.info("DELETE override facility=%s period=%s-%s", facility_uuid, year, month)
    client, facility, facility_service = _resolve(request, client_uuid, facility_uuid)
    facility_service.clear_monthly_override(client.id, facility.id, year, month)
    return Response(status_code=204)
