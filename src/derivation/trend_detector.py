"""
Trend Detection Module

Derives the current level, a smoothed hourly trend, and the freshness
timestamp of a gauge from its recent readings. Missing or non-numeric data
degrades to absent fields; nothing here raises.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

import numpy as np

from src.models import GaugeSummary, Series, TimeSeriesPoint
from src.utils.config import config
from src.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


def find_closest_point(
    points: Sequence[TimeSeriesPoint],
    target: datetime
) -> Optional[TimeSeriesPoint]:
    """
    Find the reading closest in time to a target, scanning newest to oldest.

    The scan stops at the first reading that is older than the target and no
    closer than the best so far. Points must be ascending by timestamp.

    Args:
        points: Readings sorted by time
        target: Time to match

    Returns:
        The closest reading, or None if there are no readings.
    """
    closest = None
    closest_diff = None

    for point in reversed(points):
        diff = abs(point.timestamp - target)

        if closest_diff is None or diff < closest_diff:
            closest_diff = diff
            closest = point
        elif point.timestamp < target:
            break

    return closest


def calculate_trend(
    points: Sequence[TimeSeriesPoint],
    hours_back: Sequence[int] = None,
    min_gap_hours: float = None
) -> Optional[float]:
    """
    Calculate the hourly rate of change over the last couple of hours.

    Algorithm:
    1. Take the latest reading plus the readings closest to 1h and 2h before it
    2. Stop collecting at the first reference that is non-numeric
    3. Rate for each consecutive pair = change in value / change in hours,
       skipping pairs closer together than min_gap_hours
    4. Trend = mean of the rates, rounded to 2 decimals

    Args:
        points: Readings sorted by time (oldest first)
        hours_back: Offsets of the reference readings (default: from config)
        min_gap_hours: Minimum pair spacing in hours (default: from config)

    Returns:
        Signed trend in units per hour, or None if it cannot be determined.
    """
    if hours_back is None:
        hours_back = config.trend.hours_back
    if min_gap_hours is None:
        min_gap_hours = config.trend.min_gap_hours

    if len(points) < 2:
        return None

    latest = points[-1]
    if not latest.is_numeric:
        return None

    references = [latest]
    for hours in hours_back:
        target = latest.timestamp - timedelta(hours=hours)
        reading = find_closest_point(points, target)
        if reading is None or not reading.is_numeric:
            break
        references.append(reading)

    if len(references) < 2:
        return None

    rates = []
    for newer, older in zip(references, references[1:]):
        hours = (newer.timestamp - older.timestamp).total_seconds() / 3600.0
        if hours < min_gap_hours:
            continue
        rates.append((newer.value - older.value) / hours)

    if not rates:
        return None

    return round_half_up(float(np.mean(rates)), config.trend.round_digits)


def derive_summary(series: Series) -> GaugeSummary:
    """
    Summarize a series as level, trend and last-updated time.

    Args:
        series: Series sorted by time

    Returns:
        GaugeSummary; all fields absent (frozen kept) for an empty series.
    """
    if series.is_empty:
        logger.debug(f"No readings for {series.gauge_id}")
        return GaugeSummary.unavailable(frozen=series.frozen, name=series.display_name)

    latest = series.latest

    return GaugeSummary(
        level=latest.value,
        trend=calculate_trend(series.points),
        updated=latest.timestamp,
        frozen=series.frozen,
        name=series.display_name
    )
