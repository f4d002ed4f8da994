from __future__ import annotations

import logging

from serviceops.engine.schedule import validate_pause_window
from serviceops.errors import InvalidArgumentError, NotFoundError
from serviceops.models.facility import FacilityProfile, MonthlyOverride, SeasonalRule
from serviceops.repositories.base import FacilityProfileRepository

logger = logging.getLogger(__name__)


def _check_months(months: list[int], label: str) -> None:
    for m in months:
        if not 1 <= m <= 12:
            raise InvalidArgumentError(f"{label} must only contain months between 1 and 12")


def _check_days_of_week(days: list[int]) -> None:
    for d in days:
        if not 0 <= d <= 6:
            raise InvalidArgumentError("Days of week must be between 0 (Sunday) and 6 (Saturday)")


class FacilityService:
    def __init__(self, repo: FacilityProfileRepository) -> None:
        self.repo = repo

    def create_facility(self, profile: FacilityProfile) -> FacilityProfile:
        _check_days_of_week(profile.normal_days_of_week)
        if profile.default_monthly_rate < 0:
            raise InvalidArgumentError("Monthly rate must not be negative")
        result = self.repo.create(profile)
        logger.info("Facility profile created: id=%s location=%s", result.id, result.location_name)
        return result

    def get_facility(self, client_id: int, facility_id: int) -> FacilityProfile:
        facility = self.repo.get_by_id(facility_id)
        logger.debug("get_facility id=%s found=%s", facility_id, facility is not None)
        if facility is None or facility.client_id != client_id:
            raise NotFoundError("Facility not found")
        return facility

    def get_facility_by_uuid(self, client_id: int, uuid: str) -> FacilityProfile:
        facility = self.repo.get_by_uuid(uuid)
        logger.debug("get_facility_by_uuid uuid=%s found=%s", uuid, facility is not None)
        if facility is None or facility.client_id != client_id:
            raise NotFoundError("Facility not found")
        return facility

    def list_facilities(self, client_id: int) -> list[FacilityProfile]:
        result = self.repo.list_for_client(client_id)
        logger.debug("Listed %d facilities for client=%s", len(result), client_id)
        return result

    def add_seasonal_rule(self, client_id: int, facility_id: int, rule: SeasonalRule) -> SeasonalRule:
        facility = self.get_facility(client_id, facility_id)
        _check_months(rule.active_months, "Active months")
        _check_months(rule.paused_months, "Paused months")
        if (
            rule.effective_year_start is not None
            and rule.effective_year_end is not None
            and rule.effective_year_start > rule.effective_year_end
        ):
            raise InvalidArgumentError("Effective year start must not be after effective year end")
        result = self.repo.add_seasonal_rule(rule.model_copy(update={"facility_profile_id": facility.id}))
        logger.info("Seasonal rule %s added to facility %s", result.id, facility.id)
        return result

    def set_monthly_override(self, client_id: int, facility_id: int, override: MonthlyOverride) -> MonthlyOverride:
        """Create or replace the override for ``override.year``/``override.month``."""
        facility = self.get_facility(client_id, facility_id)
        if not 1 <= override.month <= 12:
            raise InvalidArgumentError("Month must be between 1 and 12")
        validate_pause_window(override.pause_start_day, override.pause_end_day)
        if override.override_days_of_week is not None:
            _check_days_of_week(override.override_days_of_week)
        if override.override_rate is not None and override.override_rate < 0:
            raise InvalidArgumentError("Override rate must not be negative")

        result = self.repo.upsert_override(override.model_copy(update={"facility_profile_id": facility.id}))
        logger.info(
            "Monthly override stored: facility=%s period=%04d-%02d",
            facility.id,
            result.year,
            result.month,
        )
        return result

    def clear_monthly_override(self, client_id: int, facility_id: int, year: int, month: int) -> None:
        facility = self.get_facility(client_id, facility_id)
        if not self.repo.delete_override(facility_id, year, month):
            logger.warning("Override not found: facility=%s period=%04d-%02d", facility.id, year, month)
            raise NotFoundError("Override not found")
        logger.info("Monthly override removed: facility=%s period=%04d-%02d", facility.id, year, month)
