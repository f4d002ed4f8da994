from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from serviceops.engine.money import ZERO, round_money
from serviceops.models.facility import TaxBehavior


class TaxResult(BaseModel):
    subtotal: Decimal  # amount net of tax
    tax: Decimal
    total: Decimal


def compute_tax(amount: Decimal, behavior: TaxBehavior, tax_exempt: bool, tax_rate: Decimal) -> TaxResult:
    """Split a line amount into subtotal, tax and total.

    Client exemption wins over any line behavior. For TAX_INCLUDED lines the
    amount already carries the tax: the tax share is reported and moved out of
    the subtotal, and the total stays equal to the amount.
    """
    amount = round_money(amount)
    if tax_exempt or behavior == TaxBehavior.EXEMPT:
        return TaxResult(subtotal=amount, tax=ZERO, total=amount)

    if behavior == TaxBehavior.TAX_INCLUDED:
        tax = round_money(amount - amount / (Decimal("1") + tax_rate))
        return TaxResult(subtotal=amount - tax, tax=tax, total=amount)

    tax = round_money(amount * tax_rate)
    return TaxResult(subtotal=amount, tax=tax, total=amount + tax)
