"""
Business logic managers for the Rapi timetable client.

This module contains the core business logic components including
configuration management, user preferences and journey lookups.
"""

from .config_manager import ConfigManager, ConfigData, ConfigurationError
from .preferences_manager import PreferencesManager
# Note: JourneyManager not imported here to avoid circular import with the api package

__all__ = [
    "ConfigManager",
    "ConfigData",
    "ConfigurationError",
    "PreferencesManager",
    # "JourneyManager",  # Import directly when needed to avoid circular import
]
