"""Display formatting for dashboard numbers. English suffixes only."""

import math
from decimal import ROUND_HALF_UP, Decimal

from tripscope.services.forecasting import round_half_up


def to_fixed(value: float, decimals: int) -> str:
    """Fixed-point text with ties rounded away from zero (0.25 -> "0.3")."""
    # Decimal(value) is the exact binary value, so 1.005 stays below the tie
    quantum = Decimal(1).scaleb(-decimals)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


def format_duration(seconds: float) -> str:
    """45 -> "45s", 125 -> "2m 5s", 3720 -> "1h 2m"."""
    if seconds < 60:
        return f"{round_half_up(seconds)}s"
    if seconds < 3600:
        return f"{math.floor(seconds / 60)}m {round_half_up(seconds % 60)}s"
    return f"{math.floor(seconds / 3600)}h {math.floor((seconds % 3600) / 60)}m"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{to_fixed(value, decimals)}%"


def format_compact_number(num: float) -> str:
    """1_234 -> "1.2K", 2_500_000 -> "2.5M"."""
    if num >= 1_000_000:
        return f"{to_fixed(num / 1_000_000, 1)}M"
    if num >= 1000:
        return f"{to_fixed(num / 1000, 1)}K"
    if isinstance(num, float) and num.is_integer():
        return str(int(num))
    return str(num)
