"""
Gauge Monitor

Evaluates a user's gauge list concurrently. Each gauge is independent: a
failure for one gauge marks only that gauge unavailable.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from src.models import GaugeConfig, GaugeSummary
from src.utils.config import config
from .custom_gauge import evaluate_custom, fetch_gauge_summary
from .status import level_status, trend_direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GaugeReading:
    """A configured gauge together with its freshly computed summary."""
    config: GaugeConfig
    summary: GaugeSummary
    available: bool = True
    error: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.config.display_name or self.summary.name or self.config.id


async def evaluate_gauge(gauge: GaugeConfig) -> GaugeReading:
    """
    Evaluate one configured gauge, custom or plain.

    Raises:
        NetworkError: If a fetch fails.
    """
    if gauge.is_custom:
        if gauge.custom_config is None:
            logger.warning(f"Custom gauge {gauge.id} has no configuration")
            return GaugeReading(config=gauge, summary=GaugeSummary.unavailable(), available=False,
                                error="missing custom configuration")
        summary = await evaluate_custom(gauge.custom_config, gauge.unit)
    else:
        summary = await fetch_gauge_summary(gauge.id, gauge.unit)

    return GaugeReading(config=gauge, summary=summary)


async def evaluate_gauges(
    gauges: list[GaugeConfig],
    max_concurrency: Optional[int] = None,
    on_complete: Optional[Callable[[GaugeReading], None]] = None
) -> list[GaugeReading]:
    """
    Evaluate all gauges concurrently.

    Args:
        gauges: Gauge list in display order
        max_concurrency: Gauges evaluated at once (default: from config)
        on_complete: Called with each reading as it finishes

    Returns:
        One GaugeReading per gauge, in input order.
    """
    if max_concurrency is None:
        max_concurrency = config.max_concurrency

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _evaluate(gauge: GaugeConfig) -> GaugeReading:
        async with semaphore:
            try:
                reading = await evaluate_gauge(gauge)
            except Exception as e:
                logger.warning(f"Gauge {gauge.id} unavailable: {e}")
                reading = GaugeReading(
                    config=gauge,
                    summary=GaugeSummary.unavailable(),
                    available=False,
                    error=str(e)
                )
        if on_complete is not None:
            on_complete(reading)
        return reading

    readings = await asyncio.gather(*[_evaluate(g) for g in gauges])

    unavailable = sum(1 for r in readings if not r.available)
    logger.info(f"Evaluated {len(readings)} gauges ({unavailable} unavailable)")

    return list(readings)


def readings_to_dataframe(readings: list[GaugeReading]) -> pd.DataFrame:
    """Tabulate readings for display or export."""
    columns = [
        "id", "display_name", "unit", "level", "trend", "updated",
        "frozen", "available", "level_status", "trend_direction",
    ]

    records = []
    for reading in readings:
        gauge = reading.config
        summary = reading.summary
        records.append({
            "id": gauge.id,
            "display_name": reading.display_name,
            "unit": gauge.unit.value,
            "level": summary.level,
            "trend": summary.trend,
            "updated": summary.updated,
            "frozen": summary.frozen,
            "available": reading.available,
            "level_status": level_status(summary.level, gauge.min_flow, gauge.max_flow),
            "trend_direction": trend_direction(summary.trend, gauge.unit),
        })

    return pd.DataFrame(records, columns=columns)
