"""
Acquisition: Remote Data Sources

Fetches gauge directories and instantaneous values from USGS WaterServices
and daily forecasts from NOAA NWPS.
"""

from .site_directory import list_gauges, parse_site_directory
from .series_fetcher import fetch_series, parse_series_payload
from .forecast_client import fetch_forecast, parse_forecast
