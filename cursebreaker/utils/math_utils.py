# File: utils/math_utils.py
"""Math and calculation utilities for Cursebreaker Codex.

All experience values are integers; every multiplier result is floored.

Functions:
    - floor_exp: Floor a computed experience value to an int
    - apply_multiplier: Multiplier arithmetic with flooring
    - geometric_threshold: floor(base * factor ** exponent)
    - calculate_percentage: Progress percentage with one decimal
"""

from __future__ import annotations

import logging
import math

# Module-level logger
_LOGGER = logging.getLogger(__name__)


def floor_exp(value: float) -> int:
    """Floor an experience value to an integer.

    Examples:
        floor_exp(15.0) → 15
        floor_exp(14.999) → 14
    """
    return math.floor(value)


def apply_multiplier(base: float, multiplier: float) -> int:
    """Apply a multiplier to a base value and floor the result.

    Examples:
        apply_multiplier(10, 1.5) → 15
        apply_multiplier(7, 0.5) → 3
    """
    return floor_exp(base * multiplier)


def geometric_threshold(base: int, factor: float, exponent: int) -> int:
    """Return floor(base * factor ** exponent).

    Negative exponents are treated as zero.
    """
    return floor_exp(base * factor ** max(0, exponent))


def calculate_percentage(part: int, whole: int) -> float:
    """Return part / whole as a percentage rounded to one decimal.

    Returns 0.0 when whole is zero.

    Examples:
        calculate_percentage(1, 3) → 33.3
        calculate_percentage(0, 0) → 0.0
    """
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)
