"""
Gauge Store

Persists the user's gauge list (and display theme) to a local JSON file.
Loaded once at startup and saved whenever the list changes; the computed
readings are never stored.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from src.models import GaugeConfig
from .config import config

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")
DEFAULT_THEME = "dark"


class GaugeStore:
    """File-backed store for gauge configurations."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            path: JSON file location (default: from config)
        """
        self.path = Path(path) if path is not None else config.store.path
        self.gauges: list[GaugeConfig] = []
        self._theme = DEFAULT_THEME

    @property
    def theme(self) -> str:
        return self._theme

    @theme.setter
    def theme(self, value: str) -> None:
        if value not in THEMES:
            raise ValueError(f"Unknown theme: {value!r} (expected one of {THEMES})")
        self._theme = value

    def load(self) -> list[GaugeConfig]:
        """
        Load the gauge list from disk.

        Returns:
            The loaded gauges; empty if the file is missing or unreadable.
        """
        self.gauges = []
        self._theme = DEFAULT_THEME

        if not self.path.exists():
            logger.debug(f"No gauge store at {self.path}")
            return self.gauges

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read gauge store {self.path}: {e}")
            return self.gauges

        # Older files hold a bare list of gauges
        if isinstance(data, list):
            raw_gauges = data
        elif isinstance(data, dict):
            raw_gauges = data.get("gauges", [])
            if data.get("theme") in THEMES:
                self._theme = data["theme"]
        else:
            raw_gauges = []

        for raw in raw_gauges:
            try:
                self.gauges.append(GaugeConfig.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid gauge entry {raw!r}: {e}")

        logger.info(f"Loaded {len(self.gauges)} gauges from {self.path}")
        return self.gauges

    def save(self, gauges: Optional[list[GaugeConfig]] = None) -> bool:
        """
        Write the gauge list to disk, replacing the file atomically.

        Args:
            gauges: New gauge list (default: the current list)

        Returns:
            True if the write succeeded, False otherwise.
        """
        if gauges is not None:
            self.gauges = list(gauges)

        payload = {
            "gauges": [g.to_dict() for g in self.gauges],
            "theme": self._theme,
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save gauge store {self.path}: {e}")
            return False

        logger.debug(f"Saved {len(self.gauges)} gauges to {self.path}")
        return True

    def get(self, gauge_id: str) -> Optional[GaugeConfig]:
        for gauge in self.gauges:
            if gauge.id == gauge_id:
                return gauge
        return None

    def add(self, gauge: GaugeConfig) -> None:
        """Append a gauge, replacing any existing entry with the same id."""
        if self.get(gauge.id) is not None:
            self.update(gauge)
            return
        self.gauges.append(gauge)

    def update(self, gauge: GaugeConfig) -> bool:
        for i, existing in enumerate(self.gauges):
            if existing.id == gauge.id:
                self.gauges[i] = gauge
                return True
        return False

    def remove(self, gauge_id: str) -> bool:
        before = len(self.gauges)
        self.gauges = [g for g in self.gauges if g.id != gauge_id]
        return len(self.gauges) < before

    def reorder(self, gauge_ids: list[str]) -> None:
        """
        Reorder gauges to match gauge_ids.

        Gauges not named keep their relative order after the named ones.
        """
        position = {gauge_id: i for i, gauge_id in enumerate(gauge_ids)}
        self.gauges.sort(key=lambda g: position.get(g.id, len(position)))
