"""
Station and route data models.

This module defines the station, departure board and route detail
structures returned by the timetable API, plus the persisted default
stations record. Models use Pydantic for validation so malformed API
payloads are rejected at the boundary.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.helpers import format_time_string

# ASCII digits only; int() would also take "1_000" and non-ASCII digits
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class Station(BaseModel):
    """A station as returned by the stations endpoints."""

    stop_id: str
    stop_name: str
    stop_lat: str
    stop_lon: str

    @field_validator("stop_lat", "stop_lon", mode="before")
    @classmethod
    def coerce_coordinate(cls, v):
        """Accept numeric coordinates, keep them as delivered text."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def id(self) -> str:
        return self.stop_id

    def get_coordinates(self) -> Optional[tuple[float, float]]:
        """Get (latitude, longitude), or None if either is not numeric."""
        try:
            return (float(self.stop_lat), float(self.stop_lon))
        except ValueError:
            return None


class Departure(BaseModel):
    """One departure on a station board."""

    route_short_name: str
    route_long_name: str
    trip_id: str
    trip_headsign: str
    departure_time: str

    @property
    def formatted_departure_time(self) -> str:
        """Format departure time for display (HH:MM)."""
        return format_time_string(self.departure_time)


class StationDepartures(BaseModel):
    """Departure board for a station."""

    station_found: str
    station_id: str
    date_queried: str
    time_queried: str
    departures: List[Departure] = []


class RouteSummary(BaseModel):
    """Route list entry."""

    route_id: str
    route_short_name: str
    route_long_name: str

    @property
    def id(self) -> str:
        return self.route_id


class RouteStop(BaseModel):
    """A stop on a route, in sequence order."""

    stop_id: str
    stop_name: str
    stop_sequence: int

    @field_validator("stop_sequence", mode="before")
    @classmethod
    def coerce_stop_sequence(cls, v):
        """
        Accept stop_sequence as a JSON integer or a numeric string.

        The upstream API is inconsistent about which form it sends, so
        neither is treated as authoritative.
        """
        if isinstance(v, bool):
            raise ValueError("stop_sequence is not a valid Int or String convertible to Int")
        if isinstance(v, int):
            return v
        if isinstance(v, str) and INTEGER_PATTERN.fullmatch(v.strip()):
            return int(v.strip())
        raise ValueError("stop_sequence is not a valid Int or String convertible to Int")

    @property
    def id(self) -> str:
        return self.stop_id


class RouteDetail(BaseModel):
    """Route with its ordered stop list."""

    route_id: str
    route_short_name: str
    route_long_name: str
    stops: List[RouteStop] = []

    def ordered_stops(self) -> List[RouteStop]:
        """Stops sorted by stop_sequence."""
        return sorted(self.stops, key=lambda stop: stop.stop_sequence)

    def get_stop_names(self) -> List[str]:
        return [stop.stop_name for stop in self.ordered_stops()]


class ApiErrorResponse(BaseModel):
    """Error body sent by the API alongside non-2xx responses."""

    error: str
    details: Optional[str] = None


class UserDefaultStations(BaseModel):
    """Default departure and arrival stations saved by the user."""

    model_config = ConfigDict(populate_by_name=True)

    departure_station_id: str = Field(..., alias="departureStationId")
    departure_station_name: str = Field(..., alias="departureStationName")
    arrival_station_id: str = Field(..., alias="arrivalStationId")
    arrival_station_name: str = Field(..., alias="arrivalStationName")
