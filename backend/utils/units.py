"""Numeric helpers shared by the scoring services."""

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (12.5 -> 13, not banker's 12)."""
    return int(math.floor(value + 0.5))


def clamp_pct(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def completion_pct(total: int, completed: int) -> int:
    if total <= 0:
        return 0
    return clamp_pct((completed / total) * 100.0)
