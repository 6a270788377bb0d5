"""
Display helpers for gauge summaries: trend direction, level range status and
human-readable formatting.
"""

from typing import Optional

import pandas as pd

from src.models import Unit
from src.utils.config import config
from src.utils.numbers import round_half_up


def is_flat(trend: float, unit: Unit) -> bool:
    """A trend is flat if exactly zero, or for stage gauges within 0.1 ft/hr of zero."""
    if trend == 0:
        return True
    return Unit.parse(unit) is Unit.STAGE and abs(trend) <= config.trend.stage_flat_threshold


def trend_direction(trend: Optional[float], unit: Unit) -> str:
    """
    Classify a trend.

    Returns:
        "rising", "falling", "stable", or "unknown" when the trend is absent.
    """
    if trend is None or pd.isna(trend):
        return "unknown"
    if is_flat(trend, unit):
        return "stable"
    return "rising" if trend > 0 else "falling"


def level_status(
    level: Optional[float],
    min_flow: Optional[float],
    max_flow: Optional[float]
) -> Optional[str]:
    """
    Compare a level with the user's preferred range.

    Returns:
        "in_range", "out_of_range", or None if there is no level or no range.
    """
    if level is None or pd.isna(level):
        return None
    if min_flow is None and max_flow is None:
        return None
    if min_flow is not None and level < min_flow:
        return "out_of_range"
    if max_flow is not None and level > max_flow:
        return "out_of_range"
    return "in_range"


def format_level(level: Optional[float], unit: Unit) -> str:
    if level is None or pd.isna(level):
        return "—"
    if Unit.parse(unit) is Unit.FLOW:
        return f"{int(round_half_up(level)):,} cfs"
    return f"{level:.2f} ft"


def format_trend(trend: Optional[float], unit: Unit) -> str:
    if trend is None or pd.isna(trend):
        return "—"
    if is_flat(trend, unit):
        return "Flat"
    sign = "+" if trend > 0 else "-"
    if Unit.parse(unit) is Unit.FLOW:
        return f"{sign}{abs(int(round_half_up(trend))):,} cfs/hr"
    return f"{sign}{abs(trend):.2f} ft/hr"
