"""
Unit tests for the Train model and timetable responses.
"""

import dataclasses
from datetime import date, datetime

import pytest

from rapi.models.train_data import NextTrainResponse, TimetableResponse, Train


class TestTrain:
    """Test Train model with real data scenarios."""

    def test_duration_minutes(self, sample_train):
        """07:35:00 to 08:08:00 is a 33 minute journey."""
        assert sample_train.duration_minutes == 33

    def test_formatted_times(self, sample_train):
        assert sample_train.formatted_departure_time == "07:35"
        assert sample_train.formatted_arrival_time == "08:08"

    def test_format_duration(self, sample_train):
        long_train = dataclasses.replace(sample_train, arrival_time="09:05:00")
        assert sample_train.format_duration() == "33m"
        assert long_train.format_duration() == "1h 30m"

    def test_duration_with_malformed_time(self, sample_train):
        broken = dataclasses.replace(sample_train, arrival_time="late")
        assert broken.duration_minutes == 0

    def test_departure_datetime_projection(self, sample_train):
        day = date(2024, 3, 15)
        assert sample_train.departure_datetime(day) == datetime(2024, 3, 15, 7, 35, 0)
        assert sample_train.arrival_datetime(day) == datetime(2024, 3, 15, 8, 8, 0)

    def test_projection_accepts_datetime(self, sample_train):
        assert sample_train.departure_datetime(datetime(2024, 3, 15, 23, 59)) == datetime(
            2024, 3, 15, 7, 35
        )

    def test_projection_with_malformed_time(self, sample_train):
        broken = dataclasses.replace(sample_train, departure_time="")
        assert broken.departure_datetime(date(2024, 3, 15)) is None

    def test_train_is_immutable(self, sample_train):
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_train.departure_time = "09:00:00"

    def test_id_is_trip_id(self, sample_train):
        assert sample_train.id == "1056D23580C2"

    def test_from_api(self, train_payload, sample_train):
        assert Train.from_api(train_payload) == sample_train

    def test_to_api_matches_wire_shape(self, train_payload):
        assert Train.from_api(train_payload).to_api() == train_payload

    def test_from_api_missing_field(self, train_payload):
        del train_payload["trip_id"]
        with pytest.raises(ValueError, match="trip_id"):
            Train.from_api(train_payload)

    def test_from_api_wrong_type(self, train_payload):
        train_payload["departure_station_departure_time"] = 735
        with pytest.raises(ValueError):
            Train.from_api(train_payload)


class TestResponses:
    """Test timetable API response parsing."""

    def test_next_train_response(self, test_api_responses, sample_train):
        response = NextTrainResponse.from_api(test_api_responses["next_train"])

        assert response.next_train == sample_train
        assert response.time_queried == "07:30:00"
        assert response.query.departure_station_found == "Madrid-Atocha Cercanías"

    def test_next_train_response_missing_train(self, test_api_responses):
        body = dict(test_api_responses["next_train"])
        del body["next_train"]
        with pytest.raises(ValueError):
            NextTrainResponse.from_api(body)

    def test_timetable_response_keeps_order(self, test_api_responses):
        response = TimetableResponse.from_api(test_api_responses["timetable"])

        assert [t.departure_time for t in response.trains] == ["07:35:00", "07:50:00"]
        assert response.query.date_queried == "2024-01-01"

    def test_timetable_response_requires_list(self, test_api_responses):
        body = dict(test_api_responses["timetable"], timetable={"not": "a list"})
        with pytest.raises(ValueError):
            TimetableResponse.from_api(body)

    def test_response_must_be_object(self):
        with pytest.raises(ValueError):
            TimetableResponse.from_api(["not", "an", "object"])
