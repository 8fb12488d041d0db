"""
Decimal helpers shared by the calculation modules.

Currency never passes through binary floats: every input is converted to
Decimal on entry and results are rounded to cents only for presentation.
"""

from dataclasses import asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWELVE = Decimal("12")
CENTS = Decimal("0.01")


def to_decimal(value: Optional[Number], default: Decimal = ZERO) -> Decimal:
    """
    Convert a stored or submitted numeric value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. None and empty strings fall back to ``default``.
    """
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def percent_of(base: Number, percent: Optional[Number]) -> Decimal:
    """Return ``percent`` (whole-number, 10 means 10%) of ``base``."""
    return to_decimal(base) * to_decimal(percent) / HUNDRED


def safe_ratio_percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if denominator == 0:
        return ZERO
    return numerator / denominator * HUNDRED


def round_money(value: Number) -> Decimal:
    """Round to cents, half up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_fields(result, exclude=()) -> dict:
    """asdict() of a result dataclass with every Decimal rounded to cents."""
    return {
        key: round_money(value) if isinstance(value, Decimal) else value
        for key, value in asdict(result).items()
        if key not in exclude
    }
