"""Money rounding utilities"""

import math


def round_up_to_increment(amount: float, increment: float = 50.0) -> float:
    """Round up to the next multiple of `increment` ($1,012 -> $1,050 for $50 steps)"""
    return math.ceil(amount / increment) * increment


def floor_to_cents(amount: float) -> float:
    """Truncate toward negative infinity at two decimals"""
    return math.floor(round(amount * 100, 6)) / 100


def round_to_increment(amount: float, increment: float = 50.0) -> float:
    """Round to the nearest multiple of `increment`, halves going up"""
    return math.floor(amount / increment + 0.5) * increment
