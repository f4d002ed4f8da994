from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from serviceops.models.facility import TaxBehavior


class ServiceItemStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    CANCELLED = "cancelled"
    VOID = "void"


NON_BILLABLE_STATUSES = {ServiceItemStatus.CANCELLED, ServiceItemStatus.VOID}


class ServiceLineItem(BaseModel):
    id: int | None = None
    uuid: str = ""
    client_id: int
    facility_profile_id: int | None = None
    year: int
    month: int
    description: str
    quantity: Decimal = Decimal("1")
    unit_rate: Decimal
    tax_behavior: TaxBehavior = TaxBehavior.INHERIT_CLIENT
    performed_date: date | None = None
    notes: str | None = None
    status: ServiceItemStatus = ServiceItemStatus.PENDING
    created_at: datetime | None = None

    @property
    def is_billable(self) -> bool:
        return self.status not in NON_BILLABLE_STATUSES
