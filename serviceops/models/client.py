from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class PaymentTerms(str, Enum):
    NET_15 = "NET_15"
    NET_30 = "NET_30"
    DUE_ON_RECEIPT = "DUE_ON_RECEIPT"


class Client(BaseModel):
    id: int | None = None
    uuid: str = ""
    company_id: int
    name: str
    tax_exempt: bool = False
    tax_rate: Decimal | None = None  # fraction, 0.0825 == 8.25%
    payment_terms: PaymentTerms = PaymentTerms.NET_30
    billing_display_mode: str = "itemized"
    created_at: datetime | None = None
    updated_at: datetime | None = None
