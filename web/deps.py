from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from starlette.types import ASGIApp, Receive, Scope, Send

from serviceops.db import get_engine
from serviceops.repositories.sqlalchemy import (
    SQLAlchemyClientRepository,
    SQLAlchemyFacilityProfileRepository,
    SQLAlchemyServiceLineItemRepository,
)
from serviceops.services.billing_preview_service import BillingPreviewService
from serviceops.services.facility_service import FacilityService

logger = logging.getLogger(__name__)

COMPANY_HEADER = "X-Company-Id"


class DBConnectionMiddleware:
    """Pure ASGI middleware: creates a single DB connection per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use and closed by the middleware."""
    if request.state.db_conn is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def get_company_id(request: Request) -> int:
    """Company scope of the caller. Session resolution happens upstream; we only read the header."""
    raw = request.headers.get(COMPANY_HEADER, "").strip()
    if not raw.isdigit():
        logger.info("Rejected %s %s: missing or malformed %s", request.method, request.url.path, COMPANY_HEADER)
        raise HTTPException(status_code=401, detail="Unauthorized")
    return int(raw)


def get_billing_preview_service(request: Request) -> BillingPreviewService:
    conn = _get_conn(request)
    return BillingPreviewService(
        SQLAlchemyClientRepository(conn),
        SQLAlchemyFacilityProfileRepository(conn),
        SQLAlchemyServiceLineItemRepository(conn),
    )


def get_facility_service(request: Request) -> FacilityService:
    return FacilityService(SQLAlchemyFacilityProfileRepository(_get_conn(request)))
