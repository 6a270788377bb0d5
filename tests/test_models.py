import pytest

from src.models import GaugeConfig, Operator, Series, Unit


@pytest.mark.parametrize("value, expected", [
    ("cfs", Unit.FLOW),
    ("FLOW", Unit.FLOW),
    (None, Unit.FLOW),
    ("ft", Unit.STAGE),
    ("stage", Unit.STAGE),
])
def test_unit_parse(value, expected):
    assert Unit.parse(value) is expected


def test_unit_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Unit.parse("m3/s")


@pytest.mark.parametrize("value, expected", [
    ("+", Operator.ADD),
    ("sub", Operator.SUB),
    ("MUL", Operator.MUL),
    ("/", Operator.DIV),
])
def test_operator_parse(value, expected):
    assert Operator.parse(value) is expected


def test_gauge_config_defaults():
    gauge = GaugeConfig.from_dict({"id": 1013500, "maxFlow": "", "minFlow": "250"})

    assert gauge.id == "1013500"
    assert gauge.unit is Unit.FLOW
    assert gauge.max_flow is None
    assert gauge.min_flow == 250.0
    assert gauge.is_custom is False
    assert gauge.display_name == ""


def test_series_to_frame(make_series):
    df = make_series([(0, 1.5), (15, 2.5)]).to_frame()

    assert list(df.columns) == ["timestamp", "value"]
    assert list(df["value"]) == [1.5, 2.5]


def test_empty_series_frame():
    series = Series(gauge_id="01013500", display_name="01013500", unit=Unit.FLOW)

    assert series.to_frame().empty
    assert series.latest is None
