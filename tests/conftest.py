from datetime import datetime, timedelta, timezone

import pytest

from src.models import Series, TimeSeriesPoint, Unit

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def make_series():
    """Build a Series from (minutes after T0, value) pairs."""
    def _make(readings, gauge_id="01013500", name="FISH RIVER NEAR FORT KENT, ME",
              unit=Unit.FLOW, frozen=False):
        points = tuple(
            TimeSeriesPoint(timestamp=T0 + timedelta(minutes=minutes), value=float(value))
            for minutes, value in readings
        )
        return Series(gauge_id=gauge_id, display_name=name, unit=unit, points=points, frozen=frozen)
    return _make


@pytest.fixture
def iv_payload():
    """Build a WaterServices IV payload from (dateTime, value, qualifiers) tuples."""
    def _make(readings, site_name="FISH RIVER NEAR FORT KENT, ME", no_data_value=-999999.0):
        return {
            "value": {
                "timeSeries": [{
                    "sourceInfo": {"siteName": site_name},
                    "variable": {"noDataValue": no_data_value},
                    "values": [{
                        "value": [
                            {"dateTime": dt, "value": value, "qualifiers": qualifiers}
                            for dt, value, qualifiers in readings
                        ]
                    }],
                }]
            }
        }
    return _make
