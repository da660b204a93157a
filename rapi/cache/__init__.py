"""
Route caching for the timetable client.

This package provides the in-memory journey cache that avoids redundant
network calls for the same route query within a freshness window.
"""

from .journey_cache import CacheEntry, JourneyCache, RouteKey

__all__ = [
    'CacheEntry',
    'JourneyCache',
    'RouteKey'
]
