from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from src.derivation import gauge_monitor
from src.derivation.gauge_monitor import evaluate_gauges, readings_to_dataframe
from src.derivation.status import format_level, format_trend, is_flat, level_status, trend_direction
from src.models import CustomGaugeExpression, GaugeConfig, GaugeSummary, Unit
from src.utils.errors import NetworkError

UPDATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================
# STATUS HELPERS
# ============================================================

@pytest.mark.parametrize("trend, unit, expected", [
    (0.0, Unit.FLOW, True),
    (0.05, Unit.FLOW, False),
    (0.1, Unit.STAGE, True),
    (-0.08, Unit.STAGE, True),
    (0.11, Unit.STAGE, False),
])
def test_is_flat(trend, unit, expected):
    assert is_flat(trend, unit) is expected


@pytest.mark.parametrize("trend, unit, expected", [
    (None, Unit.FLOW, "unknown"),
    (float("nan"), Unit.FLOW, "unknown"),
    (0.0, Unit.FLOW, "stable"),
    (12.5, Unit.FLOW, "rising"),
    (-3.0, Unit.FLOW, "falling"),
    (0.05, Unit.STAGE, "stable"),
    (-0.25, Unit.STAGE, "falling"),
])
def test_trend_direction(trend, unit, expected):
    assert trend_direction(trend, unit) == expected


@pytest.mark.parametrize("level, min_flow, max_flow, expected", [
    (None, 100, 500, None),
    (300, None, None, None),
    (300, 100, 500, "in_range"),
    (50, 100, 500, "out_of_range"),
    (600, 100, 500, "out_of_range"),
    (600, 100, None, "in_range"),
    (50, None, 500, "in_range"),
])
def test_level_status(level, min_flow, max_flow, expected):
    assert level_status(level, min_flow, max_flow) == expected


def test_formatting():
    assert format_level(1234.4, Unit.FLOW) == "1,234 cfs"
    assert format_level(1234.5, Unit.FLOW) == "1,235 cfs"
    assert format_trend(-12.5, Unit.FLOW) == "-12 cfs/hr"
    assert format_level(3.2, Unit.STAGE) == "3.20 ft"
    assert format_level(None, Unit.FLOW) == "—"
    assert format_trend(0.0, Unit.FLOW) == "Flat"
    assert format_trend(-1520.0, Unit.FLOW) == "-1,520 cfs/hr"
    assert format_trend(0.25, Unit.STAGE) == "+0.25 ft/hr"
    assert format_trend(None, Unit.STAGE) == "—"


# ============================================================
# CONCURRENT EVALUATION
# ============================================================

@pytest.mark.asyncio
async def test_failed_gauge_does_not_block_siblings():
    gauges = [
        GaugeConfig(id="01013500", display_name="Fish"),
        GaugeConfig(id="01014000", display_name="St. John"),
        GaugeConfig(id="01015800", display_name="Aroostook", unit=Unit.STAGE),
    ]

    async def fake_summary(gauge_id, unit):
        if gauge_id == "01014000":
            raise NetworkError("HTTP 503")
        return GaugeSummary(level=100.0, trend=1.0, updated=UPDATED, name=f"Site {gauge_id}")

    with patch.object(gauge_monitor, "fetch_gauge_summary", AsyncMock(side_effect=fake_summary)):
        readings = await evaluate_gauges(gauges, max_concurrency=2)

    assert [r.config.id for r in readings] == ["01013500", "01014000", "01015800"]
    assert [r.available for r in readings] == [True, False, True]
    assert readings[1].summary.is_empty
    assert "503" in readings[1].error
    assert readings[0].summary.level == 100.0


@pytest.mark.asyncio
async def test_custom_gauges_dispatch_to_evaluator():
    expression = CustomGaugeExpression(base_gauge_id="01013500")
    gauge = GaugeConfig(id="custom-1", display_name="Combined", is_custom=True, custom_config=expression)
    evaluate_custom = AsyncMock(return_value=GaugeSummary(level=5.0, trend=None, updated=UPDATED))

    with patch.object(gauge_monitor, "evaluate_custom", evaluate_custom), \
            patch.object(gauge_monitor, "fetch_gauge_summary", AsyncMock()) as plain:
        readings = await evaluate_gauges([gauge])

    evaluate_custom.assert_awaited_once_with(expression, Unit.FLOW)
    plain.assert_not_awaited()
    assert readings[0].summary.level == 5.0


@pytest.mark.asyncio
async def test_custom_gauge_without_config_is_unavailable():
    gauge = GaugeConfig(id="custom-1", display_name="Broken", is_custom=True)

    readings = await evaluate_gauges([gauge])

    assert readings[0].available is False


@pytest.mark.asyncio
async def test_on_complete_called_per_gauge():
    gauges = [GaugeConfig(id=str(i), display_name="") for i in range(4)]
    completed = []

    with patch.object(gauge_monitor, "fetch_gauge_summary",
                      AsyncMock(return_value=GaugeSummary.unavailable(name="Site"))):
        await evaluate_gauges(gauges, on_complete=completed.append)

    assert len(completed) == 4


def test_readings_to_dataframe():
    readings = [
        gauge_monitor.GaugeReading(
            config=GaugeConfig(id="01013500", display_name="", min_flow=100.0, max_flow=500.0),
            summary=GaugeSummary(level=600.0, trend=-12.0, updated=UPDATED, name="FISH RIVER"),
        ),
        gauge_monitor.GaugeReading(
            config=GaugeConfig(id="01014000", display_name="St. John", unit=Unit.STAGE),
            summary=GaugeSummary.unavailable(),
            available=False,
        ),
    ]

    df = readings_to_dataframe(readings)

    assert list(df["id"]) == ["01013500", "01014000"]
    assert list(df["display_name"]) == ["FISH RIVER", "St. John"]
    assert df.loc[0, "level_status"] == "out_of_range"
    assert df.loc[0, "trend_direction"] == "falling"
    assert df.loc[1, "trend_direction"] == "unknown"
    assert not df.loc[1, "available"]
