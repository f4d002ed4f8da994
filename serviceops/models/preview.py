from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from serviceops.models.facility import FacilityStatus, TaxBehavior


class LineSource(str, Enum):
    FACILITY = "facility"
    SERVICE = "service"


class BillingLineItem(BaseModel):
    source: LineSource = LineSource.FACILITY
    facility_profile_id: int | None = None
    service_line_item_id: int | None = None
    location_name: str = ""
    description: str = ""
    category: str | None = None
    effective_status: FacilityStatus | None = None
    effective_rate: Decimal = Decimal("0")
    effective_frequency: int | None = None
    effective_days_of_week: list[int] = []
    quantity: Decimal = Decimal("1")
    tax_behavior: TaxBehavior
    line_subtotal: Decimal = Decimal("0")  # pre-tax
    line_tax: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")
    included_in_total: bool = True
    is_overridden: bool = False
    is_seasonally_paused: bool = False
    is_pro_rated: bool = False
    scheduled_days: int | None = None
    active_days: int | None = None
    pause_start_day: int | None = None
    pause_end_day: int | None = None
    override_notes: str | None = None
    notes: str | None = None


class BillingExplanation(BaseModel):
    active_facilities: list[str] = []
    paused_facilities: list[str] = []
    seasonally_paused: list[str] = []
    pending_approval: list[str] = []
    closed_facilities: list[str] = []
    overrides: list[str] = []
    delta_amount: Decimal | None = None
    delta_reason: str | None = None


class BillingPreview(BaseModel):
    client_id: int
    client_uuid: str = ""
    client_name: str
    year: int
    month: int
    month_label: str
    line_items: list[BillingLineItem] = []
    subtotal: Decimal = Decimal("0")
    service_subtotal: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    display_mode: str = "itemized"
    explanation: BillingExplanation = Field(default_factory=BillingExplanation)
    previous_month_total: Decimal | None = None
    active_facility_count: int = 0
    total_facility_count: int = 0

    @property
    def facility_lines(self) -> list[BillingLineItem]:
        return [li for li in self.line_items if li.source == LineSource.FACILITY]

    @property
    def service_lines(self) -> list[BillingLineItem]:
        return [li for li in self.line_items if li.source == LineSource.SERVICE]

    @property
    def included_lines(self) -> list[BillingLineItem]:
        return [li for li in self.line_items if li.included_in_total]


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class FacilityDelta(BaseModel):
    facility_profile_id: int | None = None
    location_name: str
    category: str | None = None
    current_status: str = "-"
    previous_status: str = "-"
    current_rate: Decimal = Decimal("0")
    previous_rate: Decimal = Decimal("0")
    current_total: Decimal = Decimal("0")
    previous_total: Decimal = Decimal("0")
    current_frequency: int = 0
    previous_frequency: int = 0
    current_included: bool = False
    previous_included: bool = False
    total_delta: Decimal = Decimal("0")
    change_type: ChangeType


class MonthSummary(BaseModel):
    year: int
    month: int
    month_label: str
    total: Decimal


class DeltaReport(BaseModel):
    current_month: MonthSummary
    previous_month: MonthSummary
    total_delta: Decimal
    subtotal_delta: Decimal
    tax_delta: Decimal
    facilities: list[FacilityDelta] = []
    changed_count: int = 0
    unchanged_count: int = 0
