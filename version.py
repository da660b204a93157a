"""
Version information for Rapi.

Centralized version management for the timetable client core, including
the remote API provider details used for the HTTP User-Agent.
"""

# Core application information
__version__ = "1.2.0"
__version_info__ = (1, 2, 0)
__app_name__ = "Rapi"
__app_display_name__ = "Rapi - Cercanías Train Times"
__author__ = "Rapi contributors"
__description__ = "Cercanías timetable client with route caching"

# Feature information
__features__ = [
    "Next train between two stations",
    "Full-day timetable for a route",
    "Station and route browsing",
    "In-memory route cache with freshness tracking",
    "Default station preferences",
]

# API information
__api_provider__ = "Project Polaris Cercanías API"
__api_url__ = "https://project-polaris-proud-voice-5352.fly.dev"

# Cache information
__cache_default_max_age_minutes__ = 30
__cache_timetable_retention_hours__ = 24
__cache_next_train_retention_hours__ = 2

__python_version_required__ = "3.9+"
__license__ = "MIT"


def get_version_string() -> str:
    """Get formatted version string."""
    return f"{__app_name__} v{__version__}"


def get_user_agent() -> str:
    """Get the User-Agent header sent to the timetable API."""
    return f"{__app_name__}/{__version__}"


def get_api_info() -> dict:
    """Get remote API information."""
    return {
        "version": __version__,
        "provider": __api_provider__,
        "api_url": __api_url__,
        "api_key_required": False,
    }
