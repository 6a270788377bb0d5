"""
Configuration management for the River Gauge Monitor.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


@dataclass
class USGSConfig:
    """USGS WaterServices configuration."""
    base_url: str = os.getenv("USGS_BASE_URL", "https://waterservices.usgs.gov/nwis")
    discharge_param: str = "00060"  # Discharge (cubic feet per second)
    gage_height_param: str = "00065"  # Gage height (feet)
    period: str = "PT3H"  # ISO 8601 lookback window for instantaneous values
    timeout_seconds: float = 15.0
    ice_qualifier: str = "Ice"


@dataclass
class NOAAConfig:
    """NOAA National Water Prediction Service configuration."""
    base_url: str = os.getenv("NOAA_BASE_URL", "https://api.water.noaa.gov/nwps/v1")
    timeout_seconds: float = 20.0
    forecast_days: int = 5
    flow_multiplier: float = 1000.0  # kcfs -> cfs


@dataclass
class AlignmentConfig:
    """Timestamp alignment for combining two gauge series."""
    tolerance_minutes: float = 7.5


@dataclass
class TrendConfig:
    """Hourly trend derivation configuration."""
    hours_back: tuple = (1, 2)      # Reference points behind the latest reading
    min_gap_hours: float = 0.1      # Pairs closer than this are skipped
    round_digits: int = 2
    stage_flat_threshold: float = 0.1  # ft/hr treated as flat for stage gauges


@dataclass
class StoreConfig:
    """Local gauge list persistence."""
    path: Path = field(
        default_factory=lambda: Path(
            os.getenv("GAUGE_STORE_PATH", str(Path.home() / ".river_gauges.json"))
        ).expanduser()
    )


@dataclass
class Config:
    """Main configuration container."""
    usgs: USGSConfig
    noaa: NOAAConfig
    alignment: AlignmentConfig
    trend: TrendConfig
    store: StoreConfig
    max_concurrency: int = 10  # Gauges evaluated at once by the monitor

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls(
            usgs=USGSConfig(),
            noaa=NOAAConfig(),
            alignment=AlignmentConfig(),
            trend=TrendConfig(),
            store=StoreConfig(),
            max_concurrency=int(os.getenv("MAX_CONCURRENCY", "10"))
        )


# Global config instance
config = Config.load()
