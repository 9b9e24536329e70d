"""
Decimal helpers for monetary arithmetic.
Amounts, rates and fees never pass through float.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# Whole-unit currency: fees are rounded to 1 before the fixed fee is added.
MINOR_UNIT = Decimal("1")

ZERO = Decimal("0")


def to_decimal(value: Union[str, int, Decimal, None]) -> Decimal:
    """Convert to Decimal, refusing float so binary rounding never leaks in."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        raise TypeError("float is not an accepted monetary type, pass str or Decimal")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_minor(amount: Decimal) -> Decimal:
    """Round half-up to the currency's minor unit."""
    return amount.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)
