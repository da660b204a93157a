"""
Application wiring for the Rapi timetable client.

This module sets up logging, loads the configuration and builds the
single cache, data source and journey manager used for an application
session. Collaborators are constructed here and passed in explicitly.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .api.cercanias_api_manager import CercaniasAPIFactory, TimetableDataSource
from .cache.journey_cache import JourneyCache
from .managers.config_manager import ConfigData, ConfigManager, LoggingConfig
from .managers.journey_manager import JourneyManager
from .managers.preferences_manager import PreferencesManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_dir() -> Path:
    """Get the platform log directory."""
    if sys.platform == "darwin":  # macOS
        return Path.home() / "Library" / "Logs" / "Rapi"
    elif sys.platform == "win32":  # Windows
        return Path(os.environ.get("APPDATA", Path.home())) / "Rapi" / "logs"
    else:  # Linux and others
        return Path.home() / ".local" / "share" / "rapi" / "logs"


def setup_logging(config: Optional[LoggingConfig] = None, log_dir: Optional[Path] = None) -> None:
    """Setup application logging with file and console output."""
    if config is None:
        config = LoggingConfig()

    handlers = [logging.StreamHandler()]
    if config.log_to_file:
        log_dir = log_dir or get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_dir / "rapi.log")))

    logging.basicConfig(level=config.level, format=LOG_FORMAT, handlers=handlers)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)


@dataclass
class Application:
    """Objects that live for one application session."""

    config: ConfigData
    cache: JourneyCache
    source: TimetableDataSource
    journeys: JourneyManager
    preferences: PreferencesManager

    def restore_default_route(self) -> bool:
        """
        Select the saved default stations as the current route.

        Returns:
            bool: True if a saved route was restored
        """
        stations = self.preferences.get_default_stations()
        if stations is None:
            return False
        self.journeys.change_route(stations.departure_station_name, stations.arrival_station_name)
        logger.info(
            f"Restored default route {stations.departure_station_name} -> "
            f"{stations.arrival_station_name}"
        )
        return True

    async def shutdown(self) -> None:
        await self.journeys.shutdown()


def create_application(
    config: Optional[ConfigData] = None,
    config_manager: Optional[ConfigManager] = None,
    source: Optional[TimetableDataSource] = None,
) -> Application:
    """
    Build the application object graph.

    Args:
        config: Configuration to use (loaded through config_manager if None)
        config_manager: Manager used to load config and locate preferences
        source: Data source override (aiohttp-backed API source if None)
    """
    if config_manager is None:
        config_manager = ConfigManager()
    if config is None:
        config = config_manager.load_config()
    else:
        config_manager.config = config

    cache = JourneyCache(
        default_max_age=config.cache.get_max_age(),
        timetable_retention=config.cache.get_timetable_retention(),
        next_train_retention=config.cache.get_next_train_retention(),
    )
    if source is None:
        source = CercaniasAPIFactory.create_source_from_config(config.api)

    journeys = JourneyManager(cache, source, max_age=config.cache.get_max_age())
    preferences = PreferencesManager(config_manager.get_preferences_path())

    logger.info(f"Application created against {config.api.base_url}")
    return Application(
        config=config,
        cache=cache,
        source=source,
        journeys=journeys,
        preferences=preferences,
    )
