"""
Forecast Client

Fetches the NOAA NWPS gauge metadata and stage/flow forecast for a gauge and
reduces the forecast to daily flow highs and lows.
"""

import asyncio
import logging
from typing import Any

import pandas as pd

from src.models import DailyForecast, ForecastResult
from src.utils.config import config
from src.utils.errors import NetworkError, ParseError
from src.utils.http_client import get_json

logger = logging.getLogger(__name__)


async def fetch_forecast(gauge_id: str) -> ForecastResult:
    """
    Fetch gauge metadata and forecast concurrently.

    Both requests share one deadline; if either fails the other is cancelled.

    Args:
        gauge_id: NWS location identifier (or USGS id known to NWPS)

    Returns:
        ForecastResult with up to forecast_days daily buckets, images and lid.

    Raises:
        NetworkError: If either request fails or the deadline passes.
    """
    base_url = f"{config.noaa.base_url}/gauges/{gauge_id}"
    timeout = config.noaa.timeout_seconds

    tasks = [
        asyncio.ensure_future(_get_json_or_empty(base_url, timeout)),
        asyncio.ensure_future(_get_json_or_empty(f"{base_url}/stageflow", timeout)),
    ]

    try:
        gauge_data, stageflow_data = await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise NetworkError(f"Forecast for {gauge_id} timed out after {timeout:.0f}s", url=base_url) from e
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    daily = parse_forecast(stageflow_data)
    logger.info(f"Fetched {len(daily)}-day forecast for {gauge_id}")

    return ForecastResult(
        daily=daily,
        images=gauge_data.get("images") or {},
        lid=gauge_data.get("lid")
    )


async def _get_json_or_empty(url: str, timeout: float) -> dict:
    """Fetch a JSON object, treating an unreadable body as empty."""
    try:
        data = await get_json(url, timeout=timeout)
    except ParseError as e:
        logger.warning(f"Unreadable forecast response from {url}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def parse_forecast(data: Any) -> list[DailyForecast]:
    """
    Bucket forecast points into daily flow highs and lows.

    Days are UTC calendar dates of each point's validTime. The secondary
    (flow) value is in kcfs and is converted to cfs; missing values count as 0.

    Args:
        data: Decoded stageflow JSON

    Returns:
        Up to forecast_days DailyForecast entries, ascending by date.
    """
    forecast = data.get("forecast") if isinstance(data, dict) else None
    points = forecast.get("data") if isinstance(forecast, dict) else None

    if not isinstance(points, list) or not points:
        return []

    df = pd.DataFrame(
        [p for p in points if isinstance(p, dict)],
        columns=["validTime", "secondary"]
    )
    if df.empty:
        return []

    df["valid_time"] = pd.to_datetime(df["validTime"], utc=True, errors="coerce", format="ISO8601")
    df = df.dropna(subset=["valid_time"])
    if df.empty:
        return []

    df["flow_cfs"] = pd.to_numeric(df["secondary"], errors="coerce").fillna(0.0) * config.noaa.flow_multiplier
    df["date"] = df["valid_time"].dt.date

    daily = (
        df.groupby("date")["flow_cfs"]
        .agg(high="max", low="min")
        .sort_index()
        .head(config.noaa.forecast_days)
    )

    return [
        DailyForecast(date=day, high=float(row.high), low=float(row.low))
        for day, row in daily.iterrows()
    ]
