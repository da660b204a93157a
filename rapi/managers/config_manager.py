"""
Configuration management for the Rapi timetable client.

This module handles loading, saving, and validating application configuration
using Pydantic models for type safety and validation.
"""

import json
import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from version import (
    __api_url__,
    __cache_default_max_age_minutes__,
    __cache_next_train_retention_hours__,
    __cache_timetable_retention_hours__,
)

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class APIConfig(BaseModel):
    """Configuration for timetable API access."""

    base_url: str = Field(default=__api_url__, description="Timetable API base URL")
    timeout_seconds: int = Field(default=10, ge=1, le=120, description="Request timeout")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Validate the base URL is an absolute http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")


class CacheConfig(BaseModel):
    """Configuration for the journey cache."""

    max_age_minutes: int = Field(
        default=__cache_default_max_age_minutes__,
        gt=0,
        description="Freshness window for cached next train and timetable results",
    )
    timetable_retention_hours: int = Field(
        default=__cache_timetable_retention_hours__,
        gt=0,
        description="Age after which cached timetables are evicted",
    )
    next_train_retention_hours: int = Field(
        default=__cache_next_train_retention_hours__,
        gt=0,
        description="Age after which cached next trains are evicted",
    )

    def get_max_age(self) -> timedelta:
        return timedelta(minutes=self.max_age_minutes)

    def get_timetable_retention(self) -> timedelta:
        return timedelta(hours=self.timetable_retention_hours)

    def get_next_train_retention(self) -> timedelta:
        return timedelta(hours=self.next_train_retention_hours)


class LoggingConfig(BaseModel):
    """Configuration for application logging."""

    level: str = "WARNING"
    log_to_file: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate log level name."""
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(VALID_LOG_LEVELS)}")
        return v


class ConfigData(BaseModel):
    """Main configuration data model."""

    api: APIConfig = Field(default_factory=APIConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    preferences_path: Optional[str] = None


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


def get_app_config_dir() -> Path:
    """
    Get the per-user configuration directory.

    On Windows, uses AppData/Roaming/Rapi.
    On Linux, uses XDG_CONFIG_HOME/Rapi or ~/.config/Rapi.
    """
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "Rapi"
        return Path.home() / "Rapi"

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "Rapi"
    return Path.home() / ".config" / "Rapi"


class ConfigManager:
    """
    Manages application configuration with file persistence.

    Handles loading configuration from JSON files, creating default
    configurations, and saving changes back to disk.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses the
                per-user configuration directory
        """
        if config_path is None:
            self.config_path = self.get_default_config_path()
        else:
            self.config_path = Path(config_path)
        self.config: Optional[ConfigData] = None

        logger.debug(f"ConfigManager initialized with path: {self.config_path}")

    @staticmethod
    def get_default_config_path() -> Path:
        """Get the default configuration file path."""
        return get_app_config_dir() / "config.json"

    def load_config(self) -> ConfigData:
        """
        Load configuration from file.

        If the configuration file doesn't exist, creates a default one.

        Returns:
            ConfigData: The loaded configuration

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        logger.debug(f"Loading config from: {self.config_path}")

        if not self.config_path.exists():
            logger.info(f"Config file doesn't exist, creating default at: {self.config_path}")
            self.create_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.config = ConfigData(**data)
            logger.debug(f"Successfully loaded config from: {self.config_path}")
            return self.config
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration values: {e}")
        except (OSError, TypeError) as e:
            raise ConfigurationError(f"Failed to load config: {e}")

    def save_config(self, config: ConfigData) -> bool:
        """
        Save configuration to file.

        Returns:
            bool: True if saved successfully, False otherwise
        """
        logger.info(f"Saving config to: {self.config_path}")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            self.config = config
            return True
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            return False

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        self.save_config(ConfigData())

    def get_preferences_path(self) -> Path:
        """Path of the key-value settings file holding user preferences."""
        if self.config and self.config.preferences_path:
            return Path(self.config.preferences_path)
        return self.config_path.parent / "preferences.json"
