"""Half-up rounding used for every reported statistic.

Python's ``round`` rounds half to even; reported numbers round half up
(2.5 -> 3, 0.25 -> 0.3) so that values match what users have always
been shown.
"""

from __future__ import annotations

import math

__all__ = ["round_minutes", "round_one_decimal"]


def round_minutes(value: float) -> int:
    """Round to the nearest whole minute, halves up."""
    return int(math.floor(value + 0.5))


def round_one_decimal(value: float) -> float:
    """Round to one decimal place, halves up."""
    return math.floor(value * 10 + 0.5) / 10
