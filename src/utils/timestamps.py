"""Timestamp parsing shared by the USGS and NOAA clients."""

from datetime import datetime, timezone
from typing import Any, Optional


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into a timezone-aware datetime.

    Naive timestamps are taken as UTC. Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value:
        return None

    timestamp_str = value.strip()
    if timestamp_str.endswith("Z"):
        timestamp_str = timestamp_str[:-1] + "+00:00"

    try:
        timestamp = datetime.fromisoformat(timestamp_str)
    except ValueError:
        return None

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp
