"""Decimal and statistics helpers shared by the JSI calculators.

Rounding is half-up (``ROUND_HALF_UP``) throughout so that an average of
62.5 always reports as 63, independent of binary float representation.
"""
import math
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Iterable, List, Sequence, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Number, places: int = 4) -> Decimal:
    """Convert a number to Decimal with explicit precision and ROUND_HALF_UP rounding.

    Args:
        value: Numeric value to convert.
        places: Number of decimal places to quantize to.

    Returns:
        Decimal with the specified precision.
    """
    if isinstance(value, Decimal):
        return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places,
        rounding=ROUND_HALF_UP,
    )


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(to_decimal(value, 0))


def round_half_ceiling(value: Number) -> int:
    """Round to the nearest integer, halves toward +infinity (-2.5 -> -2)."""
    shifted = Decimal(str(value)) + Decimal("0.5")
    return int(shifted.to_integral_value(rounding=ROUND_FLOOR))


def round_to(value: Number, places: int) -> float:
    """Round to ``places`` decimals, halves away from zero, as a float."""
    return float(to_decimal(value, places))


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal(0),
    max_val: Decimal = Decimal(100),
) -> Decimal:
    """Clamp a Decimal value to [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def weighted_sum(values: List[Number], weights: List[Number]) -> Decimal:
    """Literal weighted sum (not normalised by the weight total).

    Raises:
        ValueError: If lengths differ.
    """
    if len(values) != len(weights):
        raise ValueError("Values and weights must have the same length")
    return sum(
        (to_decimal(v) * to_decimal(w) for v, w in zip(values, weights)),
        Decimal(0),
    )


def mean(values: Iterable[Number]) -> float:
    """Arithmetic mean; 0.0 for an empty input."""
    items = list(values)
    if not items:
        return 0.0
    return float(sum(Decimal(str(v)) for v in items) / len(items))


def population_std_dev(values: Sequence[Number]) -> float:
    """Population standard deviation (divide by n, not n - 1).

    Returns 0.0 for fewer than two values.
    """
    if len(values) < 2:
        return 0.0
    m = sum(values) / len(values)
    variance = sum((v - m) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def percentile(sorted_values: Sequence[Number], p: float) -> float:
    """Percentile by linear interpolation between closest ranks.

    ``index = p/100 * (n - 1)``; integral indices return the element itself,
    otherwise the two neighbours are blended by the fractional part.
    ``sorted_values`` must already be in ascending order.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    index = (p / 100) * (n - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if upper >= n:
        return float(sorted_values[n - 1])
    if lower == upper:
        return float(sorted_values[lower])
    weight = index - lower
    return sorted_values[lower] * (1 - weight) + sorted_values[upper] * weight
