from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Decimal) -> Decimal:
    """Round to the currency minor unit, half-up: 10.005 -> 10.01."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Decimal:
    """Coerce a storage value (int, str, float from SQLite NUMERIC) without binary noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
