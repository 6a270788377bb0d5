"""
Value objects shared by the acquisition and derivation layers.

Everything here is created per request and discarded once the caller has
consumed it. GaugeConfig and CustomGaugeExpression also map to and from the
persisted camelCase gauge list format.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

import pandas as pd


class Unit(str, Enum):
    """Measurement a gauge reports."""
    FLOW = "cfs"
    STAGE = "ft"

    @classmethod
    def parse(cls, value: Any) -> "Unit":
        """Accept 'cfs'/'ft' or 'flow'/'stage'; missing values mean flow."""
        if isinstance(value, Unit):
            return value
        if value is None or value == "":
            return cls.FLOW
        key = str(value).strip().lower()
        aliases = {"cfs": cls.FLOW, "flow": cls.FLOW, "ft": cls.STAGE, "stage": cls.STAGE}
        if key not in aliases:
            raise ValueError(f"Unknown unit: {value!r}")
        return aliases[key]


class Operator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @classmethod
    def parse(cls, value: Any) -> "Operator":
        """Accept a symbol ('+') or a name ('add')."""
        if isinstance(value, Operator):
            return value
        key = str(value).strip().lower()
        names = {"add": cls.ADD, "sub": cls.SUB, "mul": cls.MUL, "div": cls.DIV}
        if key in names:
            return names[key]
        return cls(key)


class OperandType(str, Enum):
    SCALAR = "number"
    GAUGE = "gauge"


@dataclass(frozen=True)
class TimeSeriesPoint:
    timestamp: datetime
    value: float

    @property
    def is_numeric(self) -> bool:
        return not math.isnan(self.value)


@dataclass(frozen=True)
class Series:
    """Instantaneous values for one gauge, ascending by timestamp."""
    gauge_id: str
    display_name: str
    unit: Unit
    points: tuple = ()
    frozen: bool = False

    @property
    def latest(self) -> Optional[TimeSeriesPoint]:
        return self.points[-1] if self.points else None

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    def with_points(self, points) -> "Series":
        """Copy this series' identity onto a new set of points."""
        return replace(self, points=tuple(points))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [{"timestamp": p.timestamp, "value": p.value} for p in self.points],
            columns=["timestamp", "value"]
        )


@dataclass(frozen=True)
class OperatorStep:
    """
    One link in a custom gauge chain.

    For scalar steps the operand is kept as entered (string or number) and is
    parsed at evaluation time; for gauge steps it is the gauge id.
    """
    operator: Operator
    operand_type: OperandType
    operand: Union[str, float, None]
    operand_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "OperatorStep":
        operand_type = OperandType(data.get("operandType", OperandType.SCALAR.value))
        if operand_type is OperandType.GAUGE:
            operand = data.get("gauge")
        else:
            operand = data.get("operandValue")
        return cls(
            operator=Operator.parse(data.get("operator", "+")),
            operand_type=operand_type,
            operand=operand,
            operand_name=data.get("gaugeName")
        )

    def to_dict(self) -> dict:
        result = {
            "operator": self.operator.value,
            "operandType": self.operand_type.value,
        }
        if self.operand_type is OperandType.GAUGE:
            result["gauge"] = self.operand
            result["gaugeName"] = self.operand_name
        else:
            result["operandValue"] = self.operand
        return result


@dataclass(frozen=True)
class CustomGaugeExpression:
    """A base gauge followed by a flat left-to-right chain of operator steps."""
    base_gauge_id: str
    steps: tuple = ()
    base_gauge_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CustomGaugeExpression":
        return cls(
            base_gauge_id=data["baseGauge"],
            steps=tuple(OperatorStep.from_dict(op) for op in data.get("operations", [])),
            base_gauge_name=data.get("baseGaugeName")
        )

    def to_dict(self) -> dict:
        return {
            "baseGauge": self.base_gauge_id,
            "baseGaugeName": self.base_gauge_name,
            "operations": [step.to_dict() for step in self.steps],
        }


@dataclass(frozen=True)
class GaugeSummary:
    """Current level, hourly trend, and freshness for one gauge."""
    level: Optional[float]
    trend: Optional[float]
    updated: Optional[datetime]
    frozen: bool = False
    name: Optional[str] = None

    @classmethod
    def unavailable(cls, frozen: bool = False, name: Optional[str] = None) -> "GaugeSummary":
        return cls(level=None, trend=None, updated=None, frozen=frozen, name=name)

    @property
    def is_empty(self) -> bool:
        return self.level is None and self.trend is None and self.updated is None


@dataclass(frozen=True)
class DailyForecast:
    date: date
    high: float
    low: float


@dataclass(frozen=True)
class ForecastResult:
    daily: list
    images: dict = field(default_factory=dict)
    lid: Optional[str] = None


@dataclass(frozen=True)
class GaugeInfo:
    """Site directory entry."""
    id: str
    name: str


@dataclass(frozen=True)
class GaugeConfig:
    """A gauge on the user's list, as persisted by the gauge store."""
    id: str
    display_name: str
    unit: Unit = Unit.FLOW
    name: Optional[str] = None
    max_flow: Optional[float] = None
    min_flow: Optional[float] = None
    is_custom: bool = False
    custom_config: Optional[CustomGaugeExpression] = None

    @classmethod
    def from_dict(cls, data: dict) -> "GaugeConfig":
        is_custom = bool(data.get("isCustom", False))
        custom_config = None
        if is_custom and data.get("customConfig"):
            custom_config = CustomGaugeExpression.from_dict(data["customConfig"])

        return cls(
            id=str(data["id"]),
            display_name=data.get("displayName") or data.get("name") or "",
            unit=Unit.parse(data.get("unit")),
            name=data.get("name"),
            max_flow=_optional_float(data.get("maxFlow")),
            min_flow=_optional_float(data.get("minFlow")),
            is_custom=is_custom,
            custom_config=custom_config
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "unit": self.unit.value,
            "maxFlow": self.max_flow,
            "minFlow": self.min_flow,
        }
        if self.is_custom:
            result["isCustom"] = True
            result["customConfig"] = self.custom_config.to_dict() if self.custom_config else None
        return result


def _optional_float(value: Any) -> Optional[float]:
    """Convert a persisted number to float, treating blanks as unset."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
