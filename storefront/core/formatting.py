"""Human-readable money formatting."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from storefront.core.constants import CURRENCY_SIGN


def format_rub(amount: Decimal | int | float | None) -> str:
    """
    Format an amount in rubles, rounded to whole units.

    Args:
        amount: Price or total

    Returns:
        Formatted price string like "1 200 ₽"

    Example:
        >>> format_rub(1200)
        '1 200 ₽'
        >>> format_rub(Decimal("99.5"))
        '100 ₽'
    """
    if amount is None:
        amount = 0
    value = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    formatted = f"{int(value):,}".replace(",", " ")
    return f"{formatted} {CURRENCY_SIGN}"
