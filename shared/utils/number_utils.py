"""Rounding helpers for dashboard figures."""
import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3), unlike Python's banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
