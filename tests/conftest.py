"""
Global pytest configuration and fixtures.
"""

import json
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from rapi.cache.journey_cache import JourneyCache
from rapi.managers.config_manager import APIConfig, CacheConfig, ConfigData, LoggingConfig
from rapi.models.train_data import Train


class FakeClock:
    """Controllable wall clock for cache tests."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Provide a fake clock starting at a fixed morning."""
    return FakeClock(datetime(2024, 1, 1, 7, 0, 0))


@pytest.fixture
def cache(clock):
    """Provide a journey cache driven by the fake clock."""
    return JourneyCache(clock=clock)


@pytest.fixture
def sample_train():
    """Provide a single train between Atocha and Alcalá."""
    return Train(
        route_short_name="C2",
        route_long_name="Guadalajara - Chamartín",
        trip_id="1056D23580C2",
        trip_headsign="Guadalajara",
        service_id="1056D",
        departure_time="07:35:00",
        arrival_time="08:08:00",
    )


@pytest.fixture
def sample_trains():
    """Provide a short timetable."""
    return [
        Train(
            route_short_name="C2",
            route_long_name="Guadalajara - Chamartín",
            trip_id=f"1056D2358{i}C2",
            trip_headsign="Guadalajara",
            service_id="1056D",
            departure_time=f"{7 + i:02d}:35:00",
            arrival_time=f"{8 + i:02d}:08:00",
        )
        for i in range(3)
    ]


@pytest.fixture
def train_payload():
    """Provide a train as sent by the API."""
    return {
        "route_short_name": "C2",
        "route_long_name": "Guadalajara - Chamartín",
        "trip_id": "1056D23580C2",
        "trip_headsign": "Guadalajara",
        "service_id": "1056D",
        "departure_station_departure_time": "07:35:00",
        "arrival_station_arrival_time": "08:08:00",
    }


@pytest.fixture
def test_api_responses(train_payload):
    """Provide test API response data."""
    metadata = {
        "departure_station_name_query": "Atocha",
        "arrival_station_name_query": "Alcala",
        "departure_station_found": "Madrid-Atocha Cercanías",
        "arrival_station_found": "Alcalá de Henares",
        "date_queried": "2024-01-01",
    }
    second = dict(train_payload, trip_id="1056D23581C2",
                  departure_station_departure_time="07:50:00",
                  arrival_station_arrival_time="08:23:00")
    return {
        "next_train": dict(metadata, time_queried="07:30:00", next_train=train_payload),
        "timetable": dict(metadata, timetable=[train_payload, second]),
        "stations": [
            {"stop_id": "18000", "stop_name": "Madrid-Atocha Cercanías",
             "stop_lat": "40.406", "stop_lon": "-3.690"},
            {"stop_id": "70103", "stop_name": "Alcalá de Henares",
             "stop_lat": "40.489", "stop_lon": "-3.366"},
        ],
        "route": {
            "route_id": "10T0002C2",
            "route_short_name": "C2",
            "route_long_name": "Guadalajara - Chamartín",
            "stops": [
                {"stop_id": "70103", "stop_name": "Alcalá de Henares", "stop_sequence": "2"},
                {"stop_id": "18000", "stop_name": "Madrid-Atocha Cercanías", "stop_sequence": 1},
            ],
        },
        "not_found": {"error": "Route with ID 'XYZ' not found."},
    }


@pytest.fixture
def test_config():
    """Provide a test configuration."""
    return ConfigData(
        api=APIConfig(base_url="https://api.example.com", timeout_seconds=5),
        cache=CacheConfig(max_age_minutes=30),
        logging=LoggingConfig(level="DEBUG", log_to_file=False),
    )


@pytest.fixture
def temp_config_file():
    """Provide a temporary config file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(
            {
                "api": {"base_url": "https://api.example.com", "timeout_seconds": 5},
                "cache": {"max_age_minutes": 15},
                "logging": {"level": "info", "log_to_file": False},
            },
            f,
            indent=2,
        )
        temp_path = f.name

    yield temp_path

    Path(temp_path).unlink(missing_ok=True)
