from __future__ import annotations

import logging
from decimal import Decimal

from serviceops.constants import previous_month
from serviceops.engine.aggregator import build_delta_report, build_preview, validate_period
from serviceops.errors import ComputationDegraded, NotFoundError
from serviceops.models.client import Client
from serviceops.models.preview import BillingPreview, DeltaReport
from serviceops.repositories.base import (
    ClientRepository,
    FacilityProfileRepository,
    ServiceLineItemRepository,
)
from serviceops.settings import settings

logger = logging.getLogger(__name__)


class BillingPreviewService:
    """Computes billing previews from storage. Stateless: nothing is cached between calls."""

    def __init__(
        self,
        client_repo: ClientRepository,
        facility_repo: FacilityProfileRepository,
        service_item_repo: ServiceLineItemRepository,
    ) -> None:
        self.client_repo = client_repo
        self.facility_repo = facility_repo
        self.service_item_repo = service_item_repo

    @staticmethod
    def tax_rate_for(client: Client) -> Decimal:
        if client.tax_rate is not None:
            return client.tax_rate
        return settings.default_tax_rate

    def get_client(self, client_id: int, company_id: int) -> Client:
        client = self.client_repo.get_by_id(client_id, company_id)
        logger.debug("get_client id=%s company=%s found=%s", client_id, company_id, client is not None)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def get_client_by_uuid(self, uuid: str, company_id: int) -> Client:
        client = self.client_repo.get_by_uuid(uuid, company_id)
        logger.debug("get_client_by_uuid uuid=%s company=%s found=%s", uuid, company_id, client is not None)
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def compute_preview(
        self,
        client_id: int,
        company_id: int,
        year: int,
        month: int,
        history_depth: int | None = None,
    ) -> BillingPreview:
        """Compute the billing preview for one client and month.

        ``history_depth`` bounds how many months back the comparison recurses;
        the previous month is always computed with one level less, so the
        default of 1 never looks further than month - 1.
        """
        validate_period(year, month)
        depth = settings.history_depth if history_depth is None else history_depth
        client = self.get_client(client_id, company_id)

        facilities = self.facility_repo.list_for_client(client_id)
        service_items = self.service_item_repo.list_for_month(client_id, year, month)

        previous_total: Decimal | None = None
        if depth > 0:
            try:
                previous_total = self._previous_month_total(client_id, company_id, year, month, depth)
            except ComputationDegraded as exc:
                logger.warning("Previous-month comparison skipped for client=%s: %s", client_id, exc)

        preview = build_preview(
            client,
            facilities,
            service_items,
            year,
            month,
            self.tax_rate_for(client),
            previous_month_total=previous_total,
        )
        logger.info(
            "Billing preview computed: client=%s period=%04d-%02d total=%s previous=%s",
            client_id,
            year,
            month,
            preview.total,
            preview.previous_month_total,
        )
        return preview

    def _previous_month_total(
        self,
        client_id: int,
        company_id: int,
        year: int,
        month: int,
        depth: int,
    ) -> Decimal:
        prev_year, prev_month = previous_month(year, month)
        try:
            previous = self.compute_preview(client_id, company_id, prev_year, prev_month, history_depth=depth - 1)
        except Exception as exc:
            raise ComputationDegraded(
                f"could not compute {prev_year:04d}-{prev_month:02d}: {exc}"
            ) from exc
        return previous.total

    def compute_delta_report(self, client_id: int, company_id: int, year: int, month: int) -> DeltaReport:
        validate_period(year, month)
        prev_year, prev_month = previous_month(year, month)
        current = self.compute_preview(client_id, company_id, year, month, history_depth=0)
        previous = self.compute_preview(client_id, company_id, prev_year, prev_month, history_depth=0)
        report = build_delta_report(current, previous)
        logger.info(
            "Delta report computed: client=%s period=%04d-%02d changed=%d unchanged=%d",
            client_id,
            year,
            month,
            report.changed_count,
            report.unchanged_count,
        )
        return report
