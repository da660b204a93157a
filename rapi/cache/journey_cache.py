"""
In-memory route cache for next-train and timetable lookups.

This module provides the process-lifetime cache that sits in front of the
timetable API. Entries are keyed by route (and date, for timetables), carry
the wall-clock time they were written, and are swept by age after every
write. Next-train answers go stale much faster than a full day's timetable,
so the two kinds have separate retention windows.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from ..models.train_data import Train

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_AGE = timedelta(minutes=30)
TIMETABLE_RETENTION = timedelta(hours=24)
NEXT_TRAIN_RETENTION = timedelta(hours=2)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached payload and the time it was written."""

    payload: T
    last_updated: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.last_updated


class RouteKey:
    """Helper class for generating consistent route cache keys."""

    # Unit separator; never part of a station name or ISO date
    SEPARATOR = "\x1f"
    INVALID_PREFIX = "invalid_key_"

    @staticmethod
    def normalize(value: Optional[str]) -> str:
        """Trim surrounding whitespace; None normalizes to empty."""
        if value is None:
            return ""
        return value.strip()

    @classmethod
    def invalid(cls) -> str:
        """
        Generate a key that can never match a stored entry.

        Each call returns a fresh key, and sentinel keys never contain the
        separator, so they cannot equal a real key either.
        """
        return f"{cls.INVALID_PREFIX}{uuid.uuid4().hex}"

    @classmethod
    def is_invalid(cls, key: str) -> bool:
        return key.startswith(cls.INVALID_PREFIX) and cls.SEPARATOR not in key

    @classmethod
    def _join(cls, *parts: Optional[str]) -> str:
        normalized = [cls.normalize(part) for part in parts]
        if not all(normalized):
            return cls.invalid()
        return cls.SEPARATOR.join(normalized)

    @classmethod
    def next_train(cls, departure: Optional[str], arrival: Optional[str]) -> str:
        """Generate cache key for a next-train lookup."""
        return cls._join(departure, arrival)

    @classmethod
    def timetable(
        cls, departure: Optional[str], arrival: Optional[str], date: Optional[str]
    ) -> str:
        """Generate cache key for a timetable lookup on a given date."""
        return cls._join(departure, arrival, date)

    @classmethod
    def route_prefix(cls, departure: Optional[str], arrival: Optional[str]) -> Optional[str]:
        """Prefix shared by every timetable key of a route, or None if invalid."""
        key = cls.next_train(departure, arrival)
        if cls.is_invalid(key):
            return None
        return key + cls.SEPARATOR


class JourneyCache:
    """
    Thread-safe route cache with per-entry freshness tracking.

    Reads never evict; stale entries are swept after each write. All
    operations are total: a missing or stale entry is simply a miss.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        default_max_age: timedelta = DEFAULT_MAX_AGE,
        timetable_retention: timedelta = TIMETABLE_RETENTION,
        next_train_retention: timedelta = NEXT_TRAIN_RETENTION,
    ):
        """
        Initialize journey cache.

        Args:
            clock: Source of the current wall-clock time
            default_max_age: Freshness window used by is_valid when none is given
            timetable_retention: Age after which timetable entries are evicted
            next_train_retention: Age after which next-train entries are evicted
        """
        self._clock = clock
        self.default_max_age = default_max_age
        self.timetable_retention = timetable_retention
        self.next_train_retention = next_train_retention
        self._next_trains: Dict[str, CacheEntry[Train]] = {}
        self._timetables: Dict[str, CacheEntry[Tuple[Train, ...]]] = {}
        self._lock = threading.RLock()

    def now(self) -> datetime:
        return self._clock()

    # Keys

    def key_for_next_train(self, departure: Optional[str], arrival: Optional[str]) -> str:
        return RouteKey.next_train(departure, arrival)

    def key_for_timetable(
        self, departure: Optional[str], arrival: Optional[str], date: Optional[str]
    ) -> str:
        return RouteKey.timetable(departure, arrival, date)

    # Lookups

    def get_next_train(self, key: str) -> Optional[CacheEntry[Train]]:
        """Get the next-train entry for a key without side effects."""
        with self._lock:
            return self._next_trains.get(key)

    def get_timetable(self, key: str) -> Optional[CacheEntry[Tuple[Train, ...]]]:
        """Get the timetable entry for a key without side effects."""
        with self._lock:
            return self._timetables.get(key)

    def is_valid(
        self, entry: Optional[CacheEntry], max_age: Optional[timedelta] = None
    ) -> bool:
        """
        Check whether an entry exists and is younger than max_age.

        A missing or non-positive max_age uses the default freshness window.
        """
        if entry is None:
            return False
        if max_age is None or max_age <= timedelta(0):
            max_age = self.default_max_age
        return entry.age(self.now()) < max_age

    # Writes

    def put_next_train(self, key: str, train: Train) -> None:
        """Insert or overwrite a next-train entry, then sweep stale entries."""
        if RouteKey.is_invalid(key):
            logger.debug("Skipping next train cache write for invalid route key")
            return
        with self._lock:
            self._next_trains[key] = CacheEntry(payload=train, last_updated=self.now())
            self._evict_stale()

    def put_timetable(self, key: str, trains: Sequence[Train]) -> None:
        """Insert or overwrite a timetable entry, then sweep stale entries."""
        if RouteKey.is_invalid(key):
            logger.debug("Skipping timetable cache write for invalid route key")
            return
        with self._lock:
            self._timetables[key] = CacheEntry(payload=tuple(trains), last_updated=self.now())
            self._evict_stale()

    def cache_next_train(self, departure: str, arrival: str, train: Train) -> str:
        """Cache a next train for a route. Returns the key used."""
        key = self.key_for_next_train(departure, arrival)
        self.put_next_train(key, train)
        return key

    def cache_timetable(
        self, departure: str, arrival: str, date: str, trains: Sequence[Train]
    ) -> str:
        """Cache a day's timetable for a route. Returns the key used."""
        key = self.key_for_timetable(departure, arrival, date)
        self.put_timetable(key, trains)
        return key

    # Invalidation

    def invalidate_route(self, departure: Optional[str], arrival: Optional[str]) -> int:
        """
        Remove the next-train entry and every timetable entry for a route.

        Returns:
            Number of entries removed
        """
        prefix = RouteKey.route_prefix(departure, arrival)
        if prefix is None:
            return 0

        with self._lock:
            removed = 0
            next_train_key = self.key_for_next_train(departure, arrival)
            if self._next_trains.pop(next_train_key, None) is not None:
                removed += 1

            timetable_keys = [key for key in self._timetables if key.startswith(prefix)]
            for key in timetable_keys:
                del self._timetables[key]
            removed += len(timetable_keys)

        if removed:
            logger.debug(f"Invalidated {removed} cache entries for route {departure} -> {arrival}")
        return removed

    def clear_all(self) -> None:
        """Clear all entries of both kinds."""
        with self._lock:
            self._next_trains.clear()
            self._timetables.clear()
        logger.debug("Journey cache cleared")

    def _evict_stale(self) -> int:
        """Remove entries older than their retention window."""
        now = self.now()
        expired_timetables = [
            key
            for key, entry in self._timetables.items()
            if entry.age(now) > self.timetable_retention
        ]
        for key in expired_timetables:
            del self._timetables[key]

        expired_next_trains = [
            key
            for key, entry in self._next_trains.items()
            if entry.age(now) > self.next_train_retention
        ]
        for key in expired_next_trains:
            del self._next_trains[key]

        evicted = len(expired_timetables) + len(expired_next_trains)
        if evicted:
            logger.debug(
                f"Evicted {len(expired_timetables)} timetable and "
                f"{len(expired_next_trains)} next train cache entries"
            )
        return evicted

    # Introspection

    def get_timetable_keys(self, departure: str, arrival: str) -> List[str]:
        """Get all timetable keys cached for a route."""
        prefix = RouteKey.route_prefix(departure, arrival)
        if prefix is None:
            return []
        with self._lock:
            return [key for key in self._timetables if key.startswith(prefix)]

    def get_stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary with entry counts per kind
        """
        with self._lock:
            return {
                "next_train_entries": len(self._next_trains),
                "timetable_entries": len(self._timetables),
                "total_entries": len(self._next_trains) + len(self._timetables),
            }
