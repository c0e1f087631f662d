"""Currency rounding and display helpers.

Amounts are carried as unrounded floats through every calculation and only pass
through round_currency at output boundaries (to_dict, formatting).
"""
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal('0.01')


def round_currency(amount: float) -> float:
    """Round half-up to cents. repr() keeps the shortest float text so 10.600000000000001 -> 10.60."""
    return float(Decimal(repr(float(amount))).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_price(amount: float) -> str:
    """Format an amount as $X.XX (negative amounts as -$X.XX)."""
    value = round_currency(amount)
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_price_delta(amount: float) -> str:
    """Format a signed price change: +$X.XX, -$X.XX, or $0.00 when there is no change."""
    value = round_currency(amount)
    if value > 0:
        return f"+${value:,.2f}"
    if value < 0:
        return f"-${abs(value):,.2f}"
    return "$0.00"


__all__ = ['round_currency', 'format_price', 'format_price_delta']
