"""
Series Aligner & Operator Engine

Point-wise arithmetic between a series and a scalar, or between two series
whose readings are matched by nearest timestamp. None of these functions
raise: division by zero yields NaN and unmatched readings are dropped.
"""

import logging
from datetime import timedelta
from typing import Optional

import numpy as np

from src.models import Operator, Series, TimeSeriesPoint
from src.utils.config import config

logger = logging.getLogger(__name__)


def apply_operator(a: float, operator: Operator, b: float) -> float:
    """
    Apply one arithmetic operator.

    Args:
        a: Left operand (the running value)
        operator: Operator to apply
        b: Right operand

    Returns:
        The result; NaN when dividing by zero.
    """
    operator = Operator.parse(operator)

    if operator is Operator.ADD:
        return a + b
    if operator is Operator.SUB:
        return a - b
    if operator is Operator.MUL:
        return a * b
    if b == 0:
        return np.nan
    return a / b


def apply_scalar(series: Series, operator: Operator, scalar: float) -> Series:
    """Apply an operator with a scalar to every point of a series."""
    points = [
        TimeSeriesPoint(timestamp=p.timestamp, value=apply_operator(p.value, operator, scalar))
        for p in series.points
    ]
    return series.with_points(points)


def align_and_combine(
    series_a: Series,
    series_b: Series,
    operator: Operator,
    tolerance: Optional[timedelta] = None
) -> Series:
    """
    Combine two series point-by-point, matching each A reading to the nearest B reading.

    Every point of B is scanned for each point of A, so B need not be evenly
    spaced. Ties go to the first B point encountered. A points whose nearest
    B reading is further away than the tolerance are dropped, so the result
    is never longer than A.

    Args:
        series_a: Running series; its identity and timestamps are kept
        series_b: Operand series; contributes values only
        operator: Operator applied as a <op> b
        tolerance: Maximum timestamp gap for a match (default: 7.5 minutes)

    Returns:
        New Series with A's identity.
    """
    if tolerance is None:
        tolerance = timedelta(minutes=config.alignment.tolerance_minutes)

    combined = []
    for point_a in series_a.points:
        best_match = None
        best_diff = None

        for point_b in series_b.points:
            diff = abs(point_b.timestamp - point_a.timestamp)
            if best_diff is None or diff < best_diff:
                best_diff = diff
                best_match = point_b

        if best_match is not None and best_diff <= tolerance:
            value = apply_operator(point_a.value, operator, best_match.value)
            combined.append(TimeSeriesPoint(timestamp=point_a.timestamp, value=value))

    if len(combined) < len(series_a.points):
        logger.debug(
            f"Aligned {series_a.gauge_id} with {series_b.gauge_id}: "
            f"kept {len(combined)}/{len(series_a.points)} points"
        )

    return series_a.with_points(combined)
