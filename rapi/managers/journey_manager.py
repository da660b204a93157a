"""
Journey manager for next-train and timetable lookups.

This module coordinates the journey cache and the timetable API: it
consults the cache before issuing a request, writes successful results
back, invalidates cached data when the user changes route, and keeps a
small state store that observers (the UI layer) subscribe to.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

from ..api.cercanias_api_manager import TimetableDataSource, describe_error
from ..cache.journey_cache import JourneyCache
from ..models.train_data import Train
from ..utils.helpers import today_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JourneyState:
    """Snapshot of the journey lookup state."""

    departure: str = ""
    arrival: str = ""
    is_loading: bool = False
    next_train: Optional[Train] = None
    timetable: Tuple[Train, ...] = field(default_factory=tuple)
    timetable_date: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def has_route(self) -> bool:
        return bool(self.departure.strip() and self.arrival.strip())


StateObserver = Callable[[JourneyState], None]


class JourneyManager:
    """
    Request orchestration in front of the journey cache.

    The cache and the data source are injected so a single cache instance
    can be shared for the whole application session.
    """

    def __init__(
        self,
        cache: JourneyCache,
        source: TimetableDataSource,
        max_age: Optional[timedelta] = None,
    ):
        """
        Initialize journey manager.

        Args:
            cache: Shared journey cache
            source: Timetable data source
            max_age: Freshness window for cache hits (cache default if None)
        """
        self.cache = cache
        self.source = source
        self.max_age = max_age
        self._state = JourneyState()
        self._observers: List[StateObserver] = []
        self._pending = 0

    # State store

    @property
    def state(self) -> JourneyState:
        return self._state

    def subscribe(self, observer: StateObserver) -> None:
        """Register an observer called with every new state."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: StateObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for observer in list(self._observers):
            try:
                observer(self._state)
            except Exception as e:
                logger.error(f"State observer {observer!r} failed: {e}", exc_info=True)

    def _begin_request(self) -> None:
        self._pending += 1
        self._set_state(is_loading=True, error_message=None)

    def _end_request(self, **changes) -> None:
        self._pending = max(0, self._pending - 1)
        self._set_state(is_loading=self._pending > 0, **changes)

    def _is_current_route(self, departure: str, arrival: str) -> bool:
        return (
            self.cache.key_for_next_train(departure, arrival)
            == self.cache.key_for_next_train(self._state.departure, self._state.arrival)
        )

    def _adopt_route_if_unset(self, departure: str, arrival: str) -> None:
        if not self._state.has_route:
            self._set_state(departure=departure, arrival=arrival)

    # Route selection

    def change_route(self, departure: str, arrival: str) -> None:
        """
        Select a new route, dropping cached data for the previous one.

        Args:
            departure: Departure station name
            arrival: Arrival station name
        """
        old_departure, old_arrival = self._state.departure, self._state.arrival
        if self._state.has_route and not self._is_current_route(departure, arrival):
            removed = self.cache.invalidate_route(old_departure, old_arrival)
            logger.info(
                f"Route changed from {old_departure} -> {old_arrival} to "
                f"{departure} -> {arrival}; {removed} cache entries dropped"
            )

        self._set_state(
            departure=departure,
            arrival=arrival,
            next_train=None,
            timetable=(),
            timetable_date=None,
            error_message=None,
        )

    # Lookups

    async def get_next_train(
        self,
        departure: str,
        arrival: str,
        use_cache: bool = True,
        max_age: Optional[timedelta] = None,
    ) -> Train:
        """
        Get the next train for a route, from cache when fresh.

        Raises:
            CercaniasAPIException: If the request fails; the error message is
                also recorded in the state
        """
        self._adopt_route_if_unset(departure, arrival)
        key = self.cache.key_for_next_train(departure, arrival)
        if use_cache:
            entry = self.cache.get_next_train(key)
            if self.cache.is_valid(entry, max_age or self.max_age):
                logger.debug(f"Next train cache hit for {departure} -> {arrival}")
                if self._is_current_route(departure, arrival):
                    self._set_state(next_train=entry.payload, error_message=None)
                return entry.payload

        logger.debug(f"Fetching next train for {departure} -> {arrival}")
        self._begin_request()
        try:
            response = await self.source.fetch_next_train(departure, arrival)
        except Exception as e:
            logger.error(f"Failed to fetch next train for {departure} -> {arrival}: {e}")
            if self._is_current_route(departure, arrival):
                self._end_request(
                    next_train=None,
                    error_message=f"Unable to find the next train: {describe_error(e)}",
                )
            else:
                self._end_request()
            raise

        # Always written under the key it was fetched for
        self.cache.put_next_train(key, response.next_train)

        if self._is_current_route(departure, arrival):
            self._end_request(next_train=response.next_train)
        else:
            logger.debug(f"Discarding superseded next train result for {departure} -> {arrival}")
            self._end_request()
        return response.next_train

    async def get_timetable(
        self,
        departure: str,
        arrival: str,
        date: Optional[str] = None,
        use_cache: bool = True,
        max_age: Optional[timedelta] = None,
    ) -> List[Train]:
        """
        Get a day's timetable for a route, from cache when fresh.

        Args:
            departure: Departure station name
            arrival: Arrival station name
            date: ISO-8601 calendar date (today if None)
            use_cache: Whether a fresh cache entry may be returned

        Raises:
            CercaniasAPIException: If the request fails
        """
        if date is None:
            date = today_iso(self.cache.now())

        self._adopt_route_if_unset(departure, arrival)
        key = self.cache.key_for_timetable(departure, arrival, date)
        if use_cache:
            entry = self.cache.get_timetable(key)
            if self.cache.is_valid(entry, max_age or self.max_age):
                logger.debug(f"Timetable cache hit for {departure} -> {arrival} on {date}")
                if self._is_current_route(departure, arrival):
                    self._set_state(timetable=entry.payload, timetable_date=date, error_message=None)
                return list(entry.payload)

        logger.debug(f"Fetching timetable for {departure} -> {arrival} on {date}")
        self._begin_request()
        try:
            response = await self.source.fetch_timetable(departure, arrival, date)
        except Exception as e:
            logger.error(f"Failed to fetch timetable for {departure} -> {arrival}: {e}")
            if self._is_current_route(departure, arrival):
                self._end_request(
                    timetable=(),
                    error_message=f"Unable to load the timetable: {describe_error(e)}",
                )
            else:
                self._end_request()
            raise

        self.cache.put_timetable(key, response.timetable)

        if self._is_current_route(departure, arrival):
            self._end_request(timetable=response.timetable, timetable_date=date)
        else:
            logger.debug(f"Discarding superseded timetable result for {departure} -> {arrival}")
            self._end_request()
        return list(response.timetable)

    async def refresh_next_train(self, departure: str, arrival: str) -> Train:
        """Fetch the next train bypassing the cache."""
        return await self.get_next_train(departure, arrival, use_cache=False)

    async def refresh_timetable(
        self, departure: str, arrival: str, date: Optional[str] = None
    ) -> List[Train]:
        """Fetch a timetable bypassing the cache."""
        return await self.get_timetable(departure, arrival, date, use_cache=False)

    def clear_cache(self) -> None:
        """Drop every cached result (settings reset)."""
        self.cache.clear_all()
        logger.info("All cached journeys cleared")

    async def shutdown(self) -> None:
        await self.source.shutdown()
        self._observers.clear()
        logger.info("JourneyManager shutdown complete")
