"""
Derivation: Gauge Summaries

Combines fetched series with scalars and other gauges, and derives the
current level, hourly trend and freshness for plain and custom gauges.
"""

from .series_ops import apply_operator, apply_scalar, align_and_combine
from .trend_detector import calculate_trend, derive_summary, find_closest_point
from .custom_gauge import evaluate_custom, fetch_gauge_summary
from .gauge_monitor import GaugeReading, evaluate_gauge, evaluate_gauges, readings_to_dataframe
