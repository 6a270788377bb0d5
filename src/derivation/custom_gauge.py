"""
Custom Gauge Evaluator

Evaluates a derived gauge: fetch the base gauge, apply each operator step
left to right (scalar or another gauge), then summarize the result with the
same derivation used for plain gauges. The reported freshness is that of the
least recently updated input.
"""

import logging
import math
from typing import Any

from src.acquisition.series_fetcher import fetch_series
from src.models import CustomGaugeExpression, GaugeSummary, OperandType, Unit
from src.utils.errors import InvalidOperand
from .series_ops import align_and_combine, apply_scalar
from .trend_detector import derive_summary

logger = logging.getLogger(__name__)


async def fetch_gauge_summary(gauge_id: str, unit: Unit = Unit.FLOW) -> GaugeSummary:
    """
    Fetch and summarize a plain (non-custom) gauge.

    Raises:
        NetworkError: If the fetch fails.
    """
    series = await fetch_series(gauge_id, unit)
    return derive_summary(series)


async def evaluate_custom(expression: CustomGaugeExpression, unit: Unit = Unit.FLOW) -> GaugeSummary:
    """
    Evaluate a custom gauge expression.

    Steps run strictly in order with no precedence: ((base op1 x) op2 y) ...
    An unparseable scalar operand, or a running series that becomes empty,
    yields an all-absent summary.

    Args:
        expression: Base gauge plus operator steps
        unit: Unit to fetch every gauge in

    Returns:
        GaugeSummary whose updated time is the oldest latest-reading among inputs.

    Raises:
        NetworkError: If any gauge fetch fails.
    """
    base = await fetch_series(expression.base_gauge_id, unit)
    current = base
    oldest_updated = base.latest.timestamp if base.latest else None

    for index, step in enumerate(expression.steps):
        if current.is_empty:
            break

        if step.operand_type is OperandType.SCALAR:
            try:
                scalar = _parse_scalar(index, step.operand)
            except InvalidOperand as e:
                logger.warning(f"Custom gauge on {expression.base_gauge_id}: {e}")
                return GaugeSummary.unavailable()
            current = apply_scalar(current, step.operator, scalar)
        else:
            operand = await fetch_series(step.operand, unit)
            current = align_and_combine(current, operand, step.operator)

            if operand.latest and oldest_updated and operand.latest.timestamp < oldest_updated:
                oldest_updated = operand.latest.timestamp

    if current.is_empty:
        logger.warning(f"Custom gauge on {expression.base_gauge_id} produced no readings")
        return GaugeSummary.unavailable()

    summary = derive_summary(current)

    return GaugeSummary(
        level=summary.level,
        trend=summary.trend,
        updated=oldest_updated or summary.updated,
        frozen=summary.frozen,
        name=summary.name
    )


def _parse_scalar(index: int, operand: Any) -> float:
    """Parse a scalar operand as entered, raising InvalidOperand if it is not a number."""
    if operand is None or isinstance(operand, bool):
        raise InvalidOperand(index, operand)
    try:
        value = float(str(operand).strip())
    except ValueError:
        raise InvalidOperand(index, operand)
    if math.isnan(value) or math.isinf(value):
        raise InvalidOperand(index, operand)
    return value
