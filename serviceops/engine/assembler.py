from __future__ import annotations

import logging
from decimal import Decimal

from serviceops.engine.money import ZERO, round_money
from serviceops.engine.proration import is_pro_rated, prorate
from serviceops.engine.resolver import resolve_facility_state
from serviceops.engine.schedule import count_schedule
from serviceops.engine.tax import compute_tax
from serviceops.models import format_usd
from serviceops.models.client import Client
from serviceops.models.facility import FacilityProfile, FacilityStatus
from serviceops.models.preview import BillingLineItem, LineSource
from serviceops.models.service_item import ServiceLineItem
from serviceops.settings import settings

logger = logging.getLogger(__name__)


def build_facility_line(
    profile: FacilityProfile,
    client: Client,
    tax_rate: Decimal,
    year: int,
    month: int,
) -> BillingLineItem:
    state = resolve_facility_state(profile, year, month)
    schedule = count_schedule(
        year,
        month,
        state.days_of_week,
        state.status,
        state.pause_start_day,
        state.pause_end_day,
    )

    active = state.status == FacilityStatus.ACTIVE
    included = active and schedule.active_days > 0
    pro_rated = active and is_pro_rated(schedule.scheduled_days, schedule.active_days)

    if included:
        amount = prorate(state.rate, schedule.scheduled_days, schedule.active_days)
        tax = compute_tax(amount, state.tax_behavior, client.tax_exempt, tax_rate)
        subtotal, line_tax, total = tax.subtotal, tax.tax, tax.total
    else:
        subtotal = line_tax = total = ZERO

    logger.debug(
        "Facility line %s: included=%s scheduled=%d active=%d total=%s",
        profile.location_name,
        included,
        schedule.scheduled_days,
        schedule.active_days,
        total,
    )
    return BillingLineItem(
        source=LineSource.FACILITY,
        facility_profile_id=profile.id,
        location_name=profile.location_name,
        description=settings.qb_item_label,
        category=profile.category,
        effective_status=state.status,
        effective_rate=state.rate,
        effective_frequency=state.frequency,
        effective_days_of_week=sorted(state.days_of_week),
        tax_behavior=state.tax_behavior,
        line_subtotal=subtotal,
        line_tax=line_tax,
        line_total=total,
        included_in_total=included,
        is_overridden=state.is_overridden,
        is_seasonally_paused=state.is_seasonally_paused,
        is_pro_rated=pro_rated,
        scheduled_days=schedule.scheduled_days,
        active_days=schedule.active_days,
        pause_start_day=state.pause_start_day,
        pause_end_day=state.pause_end_day,
        override_notes=state.override_notes or None,
    )


def build_service_line(
    item: ServiceLineItem,
    client: Client,
    tax_rate: Decimal,
    location_name: str = "",
) -> BillingLineItem:
    amount = round_money(item.quantity * item.unit_rate)
    tax = compute_tax(amount, item.tax_behavior, client.tax_exempt, tax_rate)
    return BillingLineItem(
        source=LineSource.SERVICE,
        facility_profile_id=item.facility_profile_id,
        service_line_item_id=item.id,
        location_name=location_name,
        description=item.description,
        effective_rate=item.unit_rate,
        quantity=item.quantity,
        tax_behavior=item.tax_behavior,
        line_subtotal=tax.subtotal,
        line_tax=tax.tax,
        line_total=tax.total,
        included_in_total=True,
        notes=item.notes,
    )


def describe_override(
    profile: FacilityProfile,
    status: FacilityStatus | None,
    year: int,
    month: int,
) -> str | None:
    """Human readable summary of the monthly override applied to a facility, if any."""
    override = profile.override_for(year, month)
    if override is None:
        return None

    parts: list[str] = []
    if override.override_rate is not None:
        parts.append(f"rate → {format_usd(override.override_rate)}")
    if override.override_status is not None:
        parts.append(f"status → {override.override_status.value}")
    if override.override_frequency is not None:
        parts.append(f"frequency → {override.override_frequency}x/week")
    if override.has_pause_window and status == FacilityStatus.ACTIVE:
        parts.append(f"paused {month}/{override.pause_start_day}–{month}/{override.pause_end_day}")
    if not parts:
        return None

    summary = f"{profile.location_name}: {', '.join(parts)}"
    if override.override_notes:
        summary += f" ({override.override_notes})"
    return summary
