"""Rounding helpers.

Dashboard figures round halves up (12.5% -> 13%), not to the nearest even
number as ``round()`` does.
"""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(part: int, whole: int) -> int:
    """Whole-number percentage; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))
