"""Monetary rounding helpers."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value: Number, places: int = 2) -> Decimal:
    """
    Round a monetary amount half away from zero.

    Args:
        value: Amount to round.
        places: Decimal places to keep (default 2).

    Returns:
        Decimal: Rounded amount, e.g. 1234.565 -> 1234.57.
    """
    quantum = TWO_PLACES if places == 2 else Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
