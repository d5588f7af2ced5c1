"""Money helpers

All amounts are Decimal with two-decimal-place currency semantics.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half up"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def has_at_most_two_places(value: Decimal) -> bool:
    """True for finite values with no significant digit past the cent"""
    value = Decimal(value)
    if not value.is_finite():
        return False
    return value == value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return quantize_money(Decimal(quantity) * Decimal(unit_price))


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    return quantize_money(sum(amounts, ZERO))
