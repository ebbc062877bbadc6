#!/usr/bin/env python3
"""
Score aggregation: trimmed mean and rounding.

Pure functions over Decimal so results are exact and reproducible:

- Below ``trim_from_count`` evaluations: plain arithmetic mean.
- From ``trim_from_count`` on: sort ascending, drop ``trim_low`` lowest and
  ``trim_high`` highest by position (ties are dropped by position too),
  mean of the remainder.
- Round half away from zero to ``decimals`` places.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Union

from core.exceptions import ConfigurationError

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first: Decimal(0.1) would carry the binary float error along
    return Decimal(str(value))


def round_half_away_from_zero(value: Decimal, decimals: int) -> Decimal:
    # Decimal's ROUND_HALF_UP rounds ties away from zero for either sign
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def check_trim_fits(count: int, trim_low: int, trim_high: int) -> None:
    if trim_low + trim_high >= count:
        raise ConfigurationError(
            f"Trimming {trim_low} low and {trim_high} high leaves nothing of {count} evaluations"
        )


def applies_trimming(count: int, trim_from_count: int, trim_low: int, trim_high: int) -> bool:
    return count >= trim_from_count and trim_low + trim_high > 0


def trimmed_values(values: Iterable[Number], trim_from_count: int, trim_low: int, trim_high: int) -> List[Decimal]:
    """Return the values that take part in the average, in ascending order."""
    ordered = sorted(to_decimal(v) for v in values)
    if not applies_trimming(len(ordered), trim_from_count, trim_low, trim_high):
        return ordered

    check_trim_fits(len(ordered), trim_low, trim_high)
    return ordered[trim_low:len(ordered) - trim_high]


def mean(values: List[Decimal]) -> Decimal:
    if not values:
        raise ValueError("mean of no values")
    return sum(values, Decimal(0)) / len(values)


def aggregate(values: Iterable[Number], trim_from_count: int, trim_low: int, trim_high: int, decimals: int) -> Decimal:
    """Trimmed (when applicable) mean of ``values`` rounded to ``decimals`` places."""
    kept = trimmed_values(values, trim_from_count, trim_low, trim_high)
    return round_half_away_from_zero(mean(kept), decimals)
