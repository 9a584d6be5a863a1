"""Fixed-point helpers for milliunit amounts (1 currency unit = 1000 milliunits)"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from fractions import Fraction
from typing import Iterable, Union

from ledger_insights.domain.exceptions import InvalidAmountError

MILLIUNITS_PER_UNIT = 1000

Number = Union[int, float, Decimal, Fraction]


def sum_milliunits(values: Iterable[int]) -> int:
    """Exact sum of milliunit amounts"""
    return sum((int(v) for v in values), 0)


def to_display_amount(milliunits: int) -> Decimal:
    """Convert milliunits to a decimal currency amount (12500 -> Decimal('12.5'))"""
    return Decimal(int(milliunits)) / MILLIUNITS_PER_UNIT


def from_display_amount(value: Union[str, int, float, Decimal]) -> int:
    """
    Convert a human-entered currency amount to milliunits.

    Rounds half-up at the milliunit boundary (never banker's rounding).
    Floats go through str() so 0.1 is read as the user typed it.

    Raises:
        InvalidAmountError: value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    scaled = (amount * MILLIUNITS_PER_UNIT).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(scaled)


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, ties away from zero"""
    exact = Fraction(value)
    magnitude = math.floor(abs(exact) + Fraction(1, 2))
    return magnitude if exact >= 0 else -magnitude


def scale_milliunits(amount: Number, factor: Number) -> int:
    """Multiply an amount by a factor, rounding half-up to whole milliunits"""
    return round_half_up(Fraction(amount) * Fraction(factor))


def average_milliunits(values: Iterable[int]) -> Fraction:
    """Exact mean of milliunit amounts (0 for an empty input)"""
    items = [int(v) for v in values]
    if not items:
        return Fraction(0)
    return Fraction(sum_milliunits(items), len(items))


def safe_ratio(numerator: Number, denominator: Number) -> float:
    """numerator / denominator, or 0.0 when the result would be undefined or infinite"""
    if denominator == 0:
        return 0.0
    result = float(numerator) / float(denominator)
    if not math.isfinite(result):
        return 0.0
    return result


def percentage_of(part: int, whole: int) -> float:
    """Percentage of part relative to whole, one decimal place (0.0 when whole is 0)"""
    if whole == 0:
        return 0.0
    pct = (Decimal(part) / Decimal(whole) * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(pct)
