"""Utility modules for the River Gauge Monitor."""

from .config import config, Config
from .errors import GaugeError, NetworkError, ParseError, InvalidOperand
from .gauge_store import GaugeStore
