"""
Train data models.

This module defines the core data structures for representing scheduled
Cercanías services and the timetable API responses that embed them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils.helpers import combine_date_and_time, format_duration, format_time_string, minutes_between

# Wire field name -> Train attribute
TRAIN_FIELD_MAP = {
    "route_short_name": "route_short_name",
    "route_long_name": "route_long_name",
    "trip_id": "trip_id",
    "trip_headsign": "trip_headsign",
    "service_id": "service_id",
    "departure_station_departure_time": "departure_time",
    "arrival_station_arrival_time": "arrival_time",
}


def _require_str(data: Mapping[str, Any], key: str) -> str:
    """Read a required string field from a decoded JSON object."""
    if key not in data:
        raise ValueError(f"Missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class Train:
    """
    Immutable data class representing one scheduled train service.

    Times are kept as the HH:MM:SS strings delivered by the API; derived
    display values and full timestamps are computed on demand. Trains are
    never mutated, only replaced wholesale when a cache entry is refreshed.
    """

    route_short_name: str
    route_long_name: str
    trip_id: str
    trip_headsign: str
    service_id: str
    departure_time: str
    arrival_time: str

    @property
    def id(self) -> str:
        """Stable identifier for list display."""
        return self.trip_id

    @property
    def formatted_departure_time(self) -> str:
        """Departure time for display (HH:MM)."""
        return format_time_string(self.departure_time)

    @property
    def formatted_arrival_time(self) -> str:
        """Arrival time for display (HH:MM)."""
        return format_time_string(self.arrival_time)

    @property
    def duration_minutes(self) -> int:
        """Journey duration in minutes, or 0 if either time is malformed."""
        return minutes_between(self.departure_time, self.arrival_time)

    def format_duration(self) -> str:
        """Format journey duration for display."""
        return format_duration(self.duration_minutes)

    def departure_datetime(self, day: date) -> Optional[datetime]:
        """Departure time projected onto the given calendar date."""
        return combine_date_and_time(day, self.departure_time)

    def arrival_datetime(self, day: date) -> Optional[datetime]:
        """Arrival time projected onto the given calendar date."""
        return combine_date_and_time(day, self.arrival_time)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Train":
        """
        Build a Train from its JSON representation.

        Raises:
            ValueError: If a required field is missing or not a string
        """
        data = _require_mapping(data, "Train")
        values = {attr: _require_str(data, key) for key, attr in TRAIN_FIELD_MAP.items()}
        return cls(**values)

    def to_api(self) -> Dict[str, str]:
        """Convert back to the API's JSON shape."""
        return {key: getattr(self, attr) for key, attr in TRAIN_FIELD_MAP.items()}


@dataclass(frozen=True)
class QueryMetadata:
    """Query parameters echoed back by the timetable endpoints."""

    departure_station_name_query: str
    arrival_station_name_query: str
    departure_station_found: str
    arrival_station_found: str
    date_queried: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "QueryMetadata":
        return cls(
            departure_station_name_query=_require_str(data, "departure_station_name_query"),
            arrival_station_name_query=_require_str(data, "arrival_station_name_query"),
            departure_station_found=_require_str(data, "departure_station_found"),
            arrival_station_found=_require_str(data, "arrival_station_found"),
            date_queried=_require_str(data, "date_queried"),
        )


@dataclass(frozen=True)
class NextTrainResponse:
    """Response of the next-train endpoint."""

    query: QueryMetadata
    time_queried: str
    next_train: Train

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "NextTrainResponse":
        """
        Parse a next-train response body.

        Raises:
            ValueError: If the body does not match the expected shape
        """
        data = _require_mapping(data, "Next train response")
        if "next_train" not in data:
            raise ValueError("Missing required field 'next_train'")
        return cls(
            query=QueryMetadata.from_api(data),
            time_queried=_require_str(data, "time_queried"),
            next_train=Train.from_api(data["next_train"]),
        )


@dataclass(frozen=True)
class TimetableResponse:
    """Response of the timetable endpoint, trains in API order."""

    query: QueryMetadata
    timetable: Tuple[Train, ...] = field(default_factory=tuple)

    @property
    def trains(self) -> List[Train]:
        return list(self.timetable)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "TimetableResponse":
        """
        Parse a timetable response body.

        Raises:
            ValueError: If the body does not match the expected shape
        """
        data = _require_mapping(data, "Timetable response")
        raw_trains = data.get("timetable")
        if not isinstance(raw_trains, list):
            raise ValueError("Field 'timetable' must be a list")
        return cls(
            query=QueryMetadata.from_api(data),
            timetable=tuple(Train.from_api(item) for item in raw_trains),
        )
