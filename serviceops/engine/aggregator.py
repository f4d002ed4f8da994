from __future__ import annotations

import logging
from decimal import Decimal

from serviceops.constants import MONTH_LABELS, previous_month
from serviceops.engine.assembler import build_facility_line, build_service_line, describe_override
from serviceops.engine.money import ZERO
from serviceops.errors import InvalidArgumentError, NotFoundError
from serviceops.models import format_usd
from serviceops.models.client import Client
from serviceops.models.facility import FacilityProfile, FacilityStatus
from serviceops.models.preview import (
    BillingExplanation,
    BillingLineItem,
    BillingPreview,
    ChangeType,
    DeltaReport,
    FacilityDelta,
    LineSource,
    MonthSummary,
)
from serviceops.models.service_item import ServiceLineItem

logger = logging.getLogger(__name__)

_STATUS_BUCKETS = {
    FacilityStatus.ACTIVE: "active_facilities",
    FacilityStatus.PAUSED: "paused_facilities",
    FacilityStatus.SEASONAL_PAUSED: "seasonally_paused",
    FacilityStatus.PENDING_APPROVAL: "pending_approval",
    FacilityStatus.CLOSED: "closed_facilities",
}


def validate_period(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidArgumentError("Month must be between 1 and 12")
    if year < 1:
        raise InvalidArgumentError("Year must be positive")


def delta_reason(delta: Decimal, year: int, month: int) -> str | None:
    if delta == 0:
        return None
    _, prev_month = previous_month(year, month)
    direction = "increase" if delta > 0 else "decrease"
    return f"{format_usd(abs(delta))} {direction} from {MONTH_LABELS[prev_month]}"


def build_preview(
    client: Client,
    facilities: list[FacilityProfile],
    service_items: list[ServiceLineItem],
    year: int,
    month: int,
    tax_rate: Decimal,
    previous_month_total: Decimal | None = None,
) -> BillingPreview:
    """Assemble every line for the month and total the included ones."""
    validate_period(year, month)
    if client.id is None:
        raise NotFoundError("Client not found")

    explanation = BillingExplanation()
    lines: list[BillingLineItem] = []
    locations: dict[int | None, str] = {}

    for profile in facilities:
        line = build_facility_line(profile, client, tax_rate, year, month)
        lines.append(line)
        locations[profile.id] = profile.location_name

        if line.effective_status is not None:
            getattr(explanation, _STATUS_BUCKETS[line.effective_status]).append(profile.location_name)
        summary = describe_override(profile, line.effective_status, year, month)
        if summary:
            explanation.overrides.append(summary)

    for item in service_items:
        if not item.is_billable:
            continue
        if item.year != year or item.month != month:
            continue
        location_name = ""
        if item.facility_profile_id is not None:
            if item.facility_profile_id not in locations:
                raise NotFoundError("Facility not found")
            location_name = locations[item.facility_profile_id]
        lines.append(build_service_line(item, client, tax_rate, location_name))

    included = [li for li in lines if li.included_in_total]
    subtotal = sum((li.line_subtotal for li in included), ZERO)
    tax_amount = sum((li.line_tax for li in included), ZERO)
    total = subtotal + tax_amount
    service_subtotal = sum((li.line_subtotal for li in included if li.source == LineSource.SERVICE), ZERO)

    if previous_month_total is not None:
        explanation.delta_amount = total - previous_month_total
        explanation.delta_reason = delta_reason(explanation.delta_amount, year, month)

    facility_lines = [li for li in lines if li.source == LineSource.FACILITY]
    logger.debug(
        "Preview built: client=%s period=%04d-%02d lines=%d included=%d total=%s",
        client.id,
        year,
        month,
        len(lines),
        len(included),
        total,
    )
    return BillingPreview(
        client_id=client.id,
        client_uuid=client.uuid,
        client_name=client.name,
        year=year,
        month=month,
        month_label=MONTH_LABELS[month],
        line_items=lines,
        subtotal=subtotal,
        service_subtotal=service_subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=total,
        display_mode=client.billing_display_mode,
        explanation=explanation,
        previous_month_total=previous_month_total,
        active_facility_count=sum(1 for li in facility_lines if li.included_in_total),
        total_facility_count=len(facility_lines),
    )


def build_delta_report(current: BillingPreview, previous: BillingPreview) -> DeltaReport:
    """Compare two previews facility by facility."""
    by_facility: dict[int | None, FacilityDelta] = {}

    for li in current.facility_lines:
        by_facility[li.facility_profile_id] = FacilityDelta(
            facility_profile_id=li.facility_profile_id,
            location_name=li.location_name,
            category=li.category,
            current_status=li.effective_status.value if li.effective_status else "-",
            current_rate=li.effective_rate,
            current_total=li.line_subtotal,
            current_frequency=li.effective_frequency or 0,
            current_included=li.included_in_total,
            total_delta=li.line_subtotal,
            change_type=ChangeType.ADDED,
        )

    for li in previous.facility_lines:
        status = li.effective_status.value if li.effective_status else "-"
        existing = by_facility.get(li.facility_profile_id)
        if existing is None:
            by_facility[li.facility_profile_id] = FacilityDelta(
                facility_profile_id=li.facility_profile_id,
                location_name=li.location_name,
                category=li.category,
                previous_status=status,
                previous_rate=li.effective_rate,
                previous_total=li.line_subtotal,
                previous_frequency=li.effective_frequency or 0,
                previous_included=li.included_in_total,
                total_delta=-li.line_subtotal,
                change_type=ChangeType.REMOVED,
            )
            continue

        existing.previous_status = status
        existing.previous_rate = li.effective_rate
        existing.previous_total = li.line_subtotal
        existing.previous_frequency = li.effective_frequency or 0
        existing.previous_included = li.included_in_total
        existing.total_delta = existing.current_total - li.line_subtotal
        if existing.total_delta == 0 and existing.current_status == status:
            existing.change_type = ChangeType.UNCHANGED
        else:
            existing.change_type = ChangeType.CHANGED

    facilities = list(by_facility.values())
    unchanged = sum(1 for f in facilities if f.change_type == ChangeType.UNCHANGED)
    return DeltaReport(
        current_month=MonthSummary(
            year=current.year, month=current.month, month_label=current.month_label, total=current.total
        ),
        previous_month=MonthSummary(
            year=previous.year, month=previous.month, month_label=previous.month_label, total=previous.total
        ),
        total_delta=current.total - previous.total,
        subtotal_delta=current.subtotal - previous.subtotal,
        tax_delta=current.tax_amount - previous.tax_amount,
        facilities=facilities,
        changed_count=len(facilities) - unchanged,
        unchanged_count=unchanged,
    )
