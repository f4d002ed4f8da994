from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class FacilityStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    SEASONAL_PAUSED = "SEASONAL_PAUSED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    CLOSED = "CLOSED"


class TaxBehavior(str, Enum):
    TAXABLE = "TAXABLE"
    TAX_INCLUDED = "TAX_INCLUDED"
    EXEMPT = "EXEMPT"
    INHERIT_CLIENT = "INHERIT_CLIENT"


class SeasonalRule(BaseModel):
    id: int | None = None
    facility_profile_id: int | None = None
    active_months: list[int] = []
    paused_months: list[int] = []
    effective_year_start: int | None = None
    effective_year_end: int | None = None
    is_active: bool = True
    notes: str = ""
    created_at: datetime | None = None

    def applies_to_year(self, year: int) -> bool:
        if self.effective_year_start is not None and year < self.effective_year_start:
            return False
        if self.effective_year_end is not None and year > self.effective_year_end:
            return False
        return True


class MonthlyOverride(BaseModel):
    """One-off correction for a single (year, month). ``None`` fields inherit."""

    id: int | None = None
    uuid: str = ""
    facility_profile_id: int | None = None
    year: int
    month: int
    override_status: FacilityStatus | None = None
    override_frequency: int | None = Field(default=None, ge=0)
    override_days_of_week: list[int] | None = None
    override_rate: Decimal | None = None
    override_notes: str | None = None
    pause_start_day: int | None = None
    pause_end_day: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_pause_window(self) -> bool:
        return self.pause_start_day is not None and self.pause_end_day is not None


class FacilityProfile(BaseModel):
    id: int | None = None
    uuid: str = ""
    client_id: int
    location_id: str = ""
    location_name: str
    status: FacilityStatus = FacilityStatus.ACTIVE
    normal_frequency_per_week: int = Field(default=0, ge=0)
    normal_days_of_week: list[int] = []  # 0=Sunday .. 6=Saturday
    default_monthly_rate: Decimal = Decimal("0")
    category: str | None = None
    tax_behavior: TaxBehavior = TaxBehavior.INHERIT_CLIENT
    seasonal_rules_enabled: bool = True
    sort_order: int = 0
    seasonal_rules: list[SeasonalRule] = []
    monthly_overrides: list[MonthlyOverride] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def override_for(self, year: int, month: int) -> MonthlyOverride | None:
        for override in self.monthly_overrides:
            if override.year == year and override.month == month:
                return override
        return None
