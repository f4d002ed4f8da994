from decimal import Decimal


def format_usd(amount: Decimal) -> str:
    """Format a dollar amount: Decimal('1234.5') -> '$1,234.50', negatives as '-$12.00'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
