"""Input sanitising helpers shared by every calculator.

Planning inputs come straight from form fields, so a value can be missing,
NaN, infinite or negative where that makes no sense. The calculators never
raise for such values; they fall back to a safe default instead.
"""

import logging
import math
from typing import Any, Optional

logger = logging.getLogger(__name__)


def safe_amount(value: Any, default: float = 0.0, minimum: Optional[float] = None) -> float:
    """Convert value to a finite float, clamping it to minimum when given.

    Args:
        value: Raw input (number, numeric string, None, ...)
        default: Returned when value is missing or not a finite number
        minimum: Optional lower bound applied after conversion

    Returns:
        A finite float
    """
    if isinstance(value, bool):
        value = float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug("Replacing non-numeric input %r with %s", value, default)
        return default
    if not math.isfinite(number):
        logger.debug("Replacing non-finite input %r with %s", value, default)
        return default
    if minimum is not None and number < minimum:
        logger.debug("Clamping input %s to minimum %s", number, minimum)
        return minimum
    return number


def safe_non_negative(value: Any, default: float = 0.0) -> float:
    """Shortcut for amounts that may not go below zero (balances, costs, ages)."""
    return safe_amount(value, default=default, minimum=0.0)


def percent_to_fraction(value: Any, default: float = 0.0, minimum: Optional[float] = None) -> float:
    """Convert a whole-number percentage (6.5 means 6.5%) to a fraction (0.065)."""
    return safe_amount(value, default=default, minimum=minimum) / 100.0


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is zero or negative."""
    if denominator <= 0:
        return default
    return numerator / denominator


def growth_factor(rate: float, years: float) -> float:
    """Compound growth multiplier (1 + rate) ** years.

    A rate at or below -100% wipes the balance out, so the factor is 0.
    """
    if 1.0 + rate <= 0:
        return 0.0
    return (1.0 + rate) ** years
