"""
Series Fetcher

Fetches the last few hours of instantaneous values for one gauge from USGS
WaterServices and normalizes them into a Series. Sentinel "no data" values
and non-numeric readings are dropped; ice-affected data flags the series
as frozen.
"""

import logging
import math
from typing import Any, Optional

from src.models import Series, TimeSeriesPoint, Unit
from src.utils.config import config
from src.utils.errors import ParseError
from src.utils.http_client import get_json
from src.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


def parameter_code(unit: Unit) -> str:
    """Map a unit to its USGS parameter code."""
    if Unit.parse(unit) is Unit.STAGE:
        return config.usgs.gage_height_param
    return config.usgs.discharge_param


async def fetch_series(gauge_id: str, unit: Unit = Unit.FLOW) -> Series:
    """
    Fetch recent instantaneous values for a gauge.

    Args:
        gauge_id: USGS site identifier (e.g., "01013500")
        unit: Unit.FLOW for discharge, Unit.STAGE for gage height

    Returns:
        Series ascending by timestamp; empty if the response has no time series.

    Raises:
        NetworkError: On non-success status or timeout.
    """
    unit = Unit.parse(unit)
    url = f"{config.usgs.base_url}/iv/"
    params = {
        "format": "json",
        "sites": gauge_id,
        "parameterCd": parameter_code(unit),
        "period": config.usgs.period,
    }

    try:
        payload = await get_json(url, params=params, timeout=config.usgs.timeout_seconds)
    except ParseError as e:
        logger.warning(f"Unreadable series response for {gauge_id}: {e}")
        payload = None

    series = parse_series_payload(gauge_id, payload, unit)
    logger.debug(f"Fetched {len(series.points)} points for {gauge_id} ({unit.value})")
    return series


def parse_series_payload(gauge_id: str, payload: Any, unit: Unit = Unit.FLOW) -> Series:
    """
    Normalize a WaterServices IV JSON payload into a Series.

    Args:
        gauge_id: Gauge the payload belongs to
        payload: Decoded JSON body
        unit: Unit the series was requested in

    Returns:
        Series; empty and non-frozen if the expected structure is missing.
    """
    unit = Unit.parse(unit)

    try:
        time_series = _first_time_series(payload)
    except ParseError as e:
        logger.debug(f"No time series for {gauge_id}: {e}")
        return Series(gauge_id=gauge_id, display_name=gauge_id, unit=unit)

    source_info = time_series.get("sourceInfo") or {}
    name = source_info.get("siteName") or gauge_id
    no_data_value = _safe_float((time_series.get("variable") or {}).get("noDataValue"))

    values = time_series.get("values") or []
    raw_values = values[0].get("value", []) if values and isinstance(values[0], dict) else []
    if not isinstance(raw_values, list):
        raw_values = []

    # Ice is flagged from the raw readings, including ones dropped below
    frozen = any(
        config.usgs.ice_qualifier in (reading.get("qualifiers") or [])
        for reading in raw_values
        if isinstance(reading, dict)
    )

    points = []
    for reading in raw_values:
        if not isinstance(reading, dict):
            continue

        value = _safe_float(reading.get("value"))
        if value is None or math.isnan(value):
            continue
        if no_data_value is not None and value == no_data_value:
            continue

        timestamp = parse_timestamp(reading.get("dateTime"))
        if timestamp is None:
            logger.debug(f"Skipping reading with bad timestamp for {gauge_id}: {reading.get('dateTime')}")
            continue

        points.append(TimeSeriesPoint(timestamp=timestamp, value=value))

    # Closest-point searches downstream rely on time order
    points.sort(key=lambda p: p.timestamp)

    return Series(
        gauge_id=gauge_id,
        display_name=name,
        unit=unit,
        points=tuple(points),
        frozen=frozen
    )


def _first_time_series(payload: Any) -> dict:
    """Return value.timeSeries[0] or raise ParseError."""
    if not isinstance(payload, dict):
        raise ParseError("payload is not an object")

    value = payload.get("value")
    if not isinstance(value, dict):
        raise ParseError("payload has no value object")

    ts_list = value.get("timeSeries")
    if not isinstance(ts_list, list) or not ts_list or not isinstance(ts_list[0], dict):
        raise ParseError("value.timeSeries is missing or empty")

    return ts_list[0]


def _safe_float(value: Any) -> Optional[float]:
    """Safely convert a value to float, returning None if not possible."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
