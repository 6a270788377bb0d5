from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from src.derivation.custom_gauge import evaluate_custom, fetch_gauge_summary
from src.models import CustomGaugeExpression, OperandType, Operator, OperatorStep, Unit
from src.utils.errors import NetworkError


def _expression(*steps, base="01013500"):
    return CustomGaugeExpression(base_gauge_id=base, steps=tuple(steps))


def _scalar(operator, value):
    return OperatorStep(operator=Operator.parse(operator), operand_type=OperandType.SCALAR, operand=value)


def _gauge(operator, gauge_id):
    return OperatorStep(operator=Operator.parse(operator), operand_type=OperandType.GAUGE, operand=gauge_id)


@pytest.mark.asyncio
async def test_scalar_chain_applies_left_to_right(make_series, t0):
    base = make_series([(0, 100), (60, 110), (120, 120)])
    fetch = AsyncMock(return_value=base)

    with patch("src.derivation.custom_gauge.fetch_series", fetch):
        # (x + 10) * 2, not x + (10 * 2)
        summary = await evaluate_custom(_expression(_scalar("+", "10"), _scalar("*", 2)), Unit.FLOW)

    assert summary.level == 260.0
    assert summary.trend == 20.0
    assert summary.updated == t0 + timedelta(hours=2)
    fetch.assert_awaited_once_with("01013500", Unit.FLOW)


@pytest.mark.asyncio
@pytest.mark.parametrize("operand", ["abc", "", None, "nan", "inf", "-Infinity"])
async def test_invalid_scalar_returns_absent_summary(make_series, operand):
    base = make_series([(0, 100), (60, 110), (120, 120)])

    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(return_value=base)):
        summary = await evaluate_custom(_expression(_scalar("+", "1"), _scalar("-", operand)))

    assert summary.level is None
    assert summary.trend is None
    assert summary.updated is None


@pytest.mark.asyncio
async def test_gauge_operand_older_than_base_bounds_updated(make_series, t0):
    base = make_series([(0, 100), (60, 110), (120, 120)])
    # Operand readings stop 5 minutes before the base's latest reading
    operand = make_series([(0, 1), (60, 2), (115, 3)], gauge_id="01014000")

    async def fake_fetch(gauge_id, unit):
        return base if gauge_id == "01013500" else operand

    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(side_effect=fake_fetch)):
        summary = await evaluate_custom(_expression(_gauge("+", "01014000")))

    assert summary.level == 123.0
    assert summary.updated == t0 + timedelta(minutes=115)


@pytest.mark.asyncio
async def test_gauge_operand_newer_than_base_keeps_base_time(make_series, t0):
    base = make_series([(0, 100), (60, 110), (120, 120)])
    operand = make_series([(0, 1), (60, 2), (125, 3)], gauge_id="01014000")

    async def fake_fetch(gauge_id, unit):
        return base if gauge_id == "01013500" else operand

    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(side_effect=fake_fetch)):
        summary = await evaluate_custom(_expression(_gauge("-", "01014000")))

    assert summary.level == 117.0
    assert summary.updated == t0 + timedelta(hours=2)


@pytest.mark.asyncio
async def test_unaligned_operand_empties_series_and_stops(make_series):
    base = make_series([(0, 100), (60, 110)])
    operand = make_series([(300, 1)], gauge_id="01014000")
    fetch = AsyncMock(side_effect=[base, operand])

    with patch("src.derivation.custom_gauge.fetch_series", fetch):
        summary = await evaluate_custom(_expression(_gauge("+", "01014000"), _gauge("+", "01015000")))

    assert summary.is_empty
    # The third gauge is never fetched once the running series is empty
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_empty_base_returns_absent_summary(make_series):
    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(return_value=make_series([]))):
        summary = await evaluate_custom(_expression(_scalar("+", "bad")))

    assert summary.is_empty


@pytest.mark.asyncio
async def test_no_steps_matches_plain_derivation(make_series, t0):
    base = make_series([(0, 100), (60, 110), (120, 120)])

    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(return_value=base)):
        summary = await evaluate_custom(_expression())

    assert (summary.level, summary.trend, summary.updated) == (120.0, 10.0, t0 + timedelta(hours=2))


@pytest.mark.asyncio
async def test_network_error_propagates(make_series):
    fetch = AsyncMock(side_effect=[make_series([(0, 100)]), NetworkError("HTTP 503")])

    with patch("src.derivation.custom_gauge.fetch_series", fetch):
        with pytest.raises(NetworkError):
            await evaluate_custom(_expression(_gauge("+", "01014000")))


@pytest.mark.asyncio
async def test_fetch_gauge_summary(make_series):
    series = make_series([(0, 3.1), (60, 3.3), (120, 3.5)], unit=Unit.STAGE, frozen=True)

    with patch("src.derivation.custom_gauge.fetch_series", AsyncMock(return_value=series)):
        summary = await fetch_gauge_summary("01013500", Unit.STAGE)

    assert summary.level == 3.5
    assert summary.trend == pytest.approx(0.2)
    assert summary.frozen is True
