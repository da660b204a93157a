"""
Unit tests for station, route and preference models.
"""

import pytest
from pydantic import ValidationError

from rapi.models.station_data import (
    ApiErrorResponse,
    Departure,
    RouteDetail,
    RouteStop,
    Station,
    StationDepartures,
    UserDefaultStations,
)


class TestRouteStop:
    """Test stop_sequence coercion."""

    def test_integer_sequence(self):
        stop = RouteStop.model_validate({"stop_id": "1", "stop_name": "A", "stop_sequence": 3})
        assert stop.stop_sequence == 3

    def test_numeric_string_sequence(self):
        stop = RouteStop.model_validate({"stop_id": "1", "stop_name": "A", "stop_sequence": "07"})
        assert stop.stop_sequence == 7

    def test_string_with_whitespace(self):
        stop = RouteStop.model_validate({"stop_id": "1", "stop_name": "A", "stop_sequence": " 12 "})
        assert stop.stop_sequence == 12

    @pytest.mark.parametrize(
        "value", ["abc", "1.5", "", "1_000", "\uff11\uff12", 1.5, True, None, [1]]
    )
    def test_invalid_sequence(self, value):
        with pytest.raises(ValidationError):
            RouteStop.model_validate({"stop_id": "1", "stop_name": "A", "stop_sequence": value})

    def test_missing_sequence(self):
        with pytest.raises(ValidationError):
            RouteStop.model_validate({"stop_id": "1", "stop_name": "A"})


class TestRouteDetail:
    def test_mixed_sequence_forms(self, test_api_responses):
        route = RouteDetail.model_validate(test_api_responses["route"])

        assert [stop.stop_sequence for stop in route.stops] == [2, 1]
        assert route.get_stop_names() == ["Madrid-Atocha Cercanías", "Alcalá de Henares"]

    def test_bad_stop_fails_whole_route(self, test_api_responses):
        body = test_api_responses["route"]
        body["stops"][0]["stop_sequence"] = "second"
        with pytest.raises(ValidationError):
            RouteDetail.model_validate(body)


class TestStation:
    def test_station_fields(self, test_api_responses):
        station = Station.model_validate(test_api_responses["stations"][0])
        assert station.id == "18000"
        assert station.get_coordinates() == (40.406, -3.690)

    def test_numeric_coordinates_accepted(self):
        station = Station.model_validate(
            {"stop_id": "1", "stop_name": "A", "stop_lat": 40.5, "stop_lon": -3}
        )
        assert station.stop_lat == "40.5"
        assert station.stop_lon == "-3"

    def test_non_numeric_coordinates(self):
        station = Station(stop_id="1", stop_name="A", stop_lat="n/a", stop_lon="n/a")
        assert station.get_coordinates() is None


class TestDepartures:
    def test_departure_board(self):
        board = StationDepartures.model_validate(
            {
                "station_found": "Sol",
                "station_id": "18002",
                "date_queried": "2024-01-01",
                "time_queried": "08:00:00",
                "departures": [
                    {
                        "route_short_name": "C3",
                        "route_long_name": "Aranjuez - Chamartín",
                        "trip_id": "T1",
                        "trip_headsign": "Aranjuez",
                        "departure_time": "08:04:00",
                    }
                ],
            }
        )
        assert board.departures[0].formatted_departure_time == "08:04"

    def test_departure_format_passthrough(self):
        departure = Departure(
            route_short_name="C3",
            route_long_name="",
            trip_id="T1",
            trip_headsign="",
            departure_time="soon",
        )
        assert departure.formatted_departure_time == "soon"


class TestUserDefaultStations:
    def test_wire_aliases(self):
        stations = UserDefaultStations.model_validate(
            {
                "departureStationId": "18000",
                "departureStationName": "Atocha",
                "arrivalStationId": "70103",
                "arrivalStationName": "Alcalá de Henares",
            }
        )
        assert stations.departure_station_name == "Atocha"
        assert stations.model_dump(by_alias=True)["arrivalStationId"] == "70103"

    def test_populate_by_name(self):
        stations = UserDefaultStations(
            departure_station_id="1",
            departure_station_name="A",
            arrival_station_id="2",
            arrival_station_name="B",
        )
        assert stations.arrival_station_name == "B"


def test_api_error_response_details_optional():
    error = ApiErrorResponse.model_validate({"error": "boom"})
    assert error.details is None
