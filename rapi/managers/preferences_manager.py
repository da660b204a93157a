"""
User preferences persistence for the Rapi timetable client.

Preferences live in a small JSON key-value settings file. The default
stations are stored as a single named record that is read at startup to
pre-populate the next-train lookup.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.station_data import UserDefaultStations

logger = logging.getLogger(__name__)


class PreferencesManager:
    """Key-value settings storage for user preferences."""

    DEFAULT_STATIONS_KEY = "userDefaultStations"

    def __init__(self, settings_path: Path):
        """
        Initialize preferences manager.

        Args:
            settings_path: Path of the JSON settings file
        """
        self.settings_path = Path(settings_path)

    def _read_settings(self) -> Dict[str, Any]:
        if not self.settings_path.exists():
            return {}
        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable settings file {self.settings_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Settings file {self.settings_path} is not a JSON object")
            return {}
        return data

    def _write_settings(self, settings: Dict[str, Any]) -> bool:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Failed to write settings to {self.settings_path}: {e}")
            return False

    def save_default_stations(
        self,
        departure_station_id: str,
        departure_station_name: str,
        arrival_station_id: str,
        arrival_station_name: str,
    ) -> bool:
        """Save default stations for quick access."""
        stations = UserDefaultStations(
            departure_station_id=departure_station_id,
            departure_station_name=departure_station_name,
            arrival_station_id=arrival_station_id,
            arrival_station_name=arrival_station_name,
        )
        settings = self._read_settings()
        settings[self.DEFAULT_STATIONS_KEY] = stations.model_dump(by_alias=True)
        saved = self._write_settings(settings)
        if saved:
            logger.info(
                f"Saved default stations {departure_station_name} -> {arrival_station_name}"
            )
        return saved

    def get_default_stations(self) -> Optional[UserDefaultStations]:
        """Get saved default stations, or None if unset or unreadable."""
        blob = self._read_settings().get(self.DEFAULT_STATIONS_KEY)
        if blob is None:
            return None
        try:
            return UserDefaultStations.model_validate(blob)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid default stations record: {e}")
            return None

    def has_default_stations(self) -> bool:
        return self.DEFAULT_STATIONS_KEY in self._read_settings()

    def clear_default_stations(self) -> None:
        settings = self._read_settings()
        if settings.pop(self.DEFAULT_STATIONS_KEY, None) is not None:
            self._write_settings(settings)
            logger.info("Default stations cleared")
