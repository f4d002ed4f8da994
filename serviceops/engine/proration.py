from __future__ import annotations

from decimal import Decimal

from serviceops.engine.money import ZERO, round_money


def prorate(rate: Decimal, scheduled_days: int, active_days: int) -> Decimal:
    """Scale a monthly rate by active/scheduled days, rounded half-up to cents.

    A month without scheduled days contributes nothing.
    """
    if scheduled_days <= 0:
        return ZERO
    if active_days == scheduled_days:
        return round_money(rate)
    return round_money(rate * Decimal(active_days) / Decimal(scheduled_days))


def is_pro_rated(scheduled_days: int, active_days: int) -> bool:
    return scheduled_days > 0 and active_days != scheduled_days
