"""Resolve the effective state of a facility for one month.

Three layers are merged, later layers winning field by field:

1. the facility profile (base service agreement),
2. its seasonal rules,
3. the monthly override for the exact (year, month).

Each layer is expressed as a sparse :class:`FacilityPatch`; ``None`` means
"inherit from the layer below".
"""

from __future__ import annotations

import logging
from decimal import Decimal

from pydantic import BaseModel

from serviceops.models.facility import (
    FacilityProfile,
    FacilityStatus,
    MonthlyOverride,
    SeasonalRule,
    TaxBehavior,
)

logger = logging.getLogger(__name__)


class EffectiveFacilityState(BaseModel):
    status: FacilityStatus = FacilityStatus.ACTIVE
    frequency: int = 0
    days_of_week: list[int] = []
    rate: Decimal = Decimal("0")
    tax_behavior: TaxBehavior = TaxBehavior.INHERIT_CLIENT
    is_seasonally_paused: bool = False
    is_overridden: bool = False
    override_notes: str | None = None
    pause_start_day: int | None = None
    pause_end_day: int | None = None


class FacilityPatch(BaseModel):
    status: FacilityStatus | None = None
    frequency: int | None = None
    days_of_week: list[int] | None = None
    rate: Decimal | None = None
    tax_behavior: TaxBehavior | None = None
    is_seasonally_paused: bool | None = None
    is_overridden: bool | None = None
    override_notes: str | None = None
    pause_start_day: int | None = None
    pause_end_day: int | None = None


def apply_patch(state: EffectiveFacilityState, patch: FacilityPatch) -> EffectiveFacilityState:
    """Return a copy of ``state`` with every non-null field of ``patch`` applied."""
    return state.model_copy(update=patch.model_dump(exclude_none=True), deep=True)


def base_patch(profile: FacilityProfile) -> FacilityPatch:
    return FacilityPatch(
        status=profile.status,
        frequency=profile.normal_frequency_per_week,
        days_of_week=list(profile.normal_days_of_week),
        rate=profile.default_monthly_rate,
        tax_behavior=profile.tax_behavior,
    )


def is_month_seasonally_active(rules: list[SeasonalRule], year: int, month: int) -> bool:
    """Decide whether seasonal rules leave ``month`` billable.

    A rule votes "paused" when the month is in its paused set, or when it has
    an active set that does not contain the month. A rule that lists the month
    as active outvotes every pause, so overlapping sets resolve to active.
    """
    paused = False
    for rule in rules:
        if not rule.is_active or not rule.applies_to_year(year):
            continue
        if month in rule.active_months:
            return True
        if month in rule.paused_months:
            paused = True
        elif rule.active_months:
            paused = True
    return not paused


def seasonal_patch(rules: list[SeasonalRule], year: int, month: int) -> FacilityPatch:
    if is_month_seasonally_active(rules, year, month):
        return FacilityPatch()
    return FacilityPatch(status=FacilityStatus.SEASONAL_PAUSED, is_seasonally_paused=True)


def override_patch(override: MonthlyOverride) -> FacilityPatch:
    patch = FacilityPatch(
        status=override.override_status,
        frequency=override.override_frequency,
        days_of_week=override.override_days_of_week,
        rate=override.override_rate,
        is_overridden=True,
        override_notes=override.override_notes,
        pause_start_day=override.pause_start_day,
        pause_end_day=override.pause_end_day,
    )
    if override.override_status is not None:
        patch.is_seasonally_paused = override.override_status == FacilityStatus.SEASONAL_PAUSED
    return patch


def resolve_facility_state(profile: FacilityProfile, year: int, month: int) -> EffectiveFacilityState:
    state = apply_patch(EffectiveFacilityState(), base_patch(profile))

    if profile.seasonal_rules_enabled and state.status == FacilityStatus.ACTIVE:
        state = apply_patch(state, seasonal_patch(profile.seasonal_rules, year, month))

    override = profile.override_for(year, month)
    if override is not None:
        state = apply_patch(state, override_patch(override))

    logger.debug(
        "Resolved facility=%s %04d-%02d status=%s rate=%s overridden=%s",
        profile.id,
        year,
        month,
        state.status.value,
        state.rate,
        state.is_overridden,
    )
    return state
