"""
Unit tests for helper utility functions.
"""

from datetime import date, datetime, time

import pytest

from rapi.utils.helpers import (
    combine_date_and_time,
    format_duration,
    format_time_string,
    minutes_between,
    parse_time_of_day,
    today_iso,
)


class TestTimeParsing:
    def test_parse_time_of_day(self):
        assert parse_time_of_day("07:35:00") == time(7, 35, 0)
        assert parse_time_of_day(" 23:59:59 ") == time(23, 59, 59)

    @pytest.mark.parametrize("value", ["", "7:35", "25:00:00", "abc", None])
    def test_parse_time_of_day_invalid(self, value):
        assert parse_time_of_day(value) is None

    def test_format_time_string(self):
        assert format_time_string("08:08:00") == "08:08"
        assert format_time_string("08:08") == "08:08"
        assert format_time_string("0808") == "0808"

    def test_minutes_between(self):
        assert minutes_between("07:35:00", "08:08:00") == 33
        assert minutes_between("07:35:00", "07:35:59") == 0
        assert minutes_between("bad", "08:08:00") == 0

    def test_combine_date_and_time(self):
        assert combine_date_and_time(date(2024, 1, 2), "06:10:30") == datetime(2024, 1, 2, 6, 10, 30)
        assert combine_date_and_time(date(2024, 1, 2), "x") is None


class TestFormatting:
    def test_format_duration(self):
        assert format_duration(45) == "45m"
        assert format_duration(60) == "1h 0m"
        assert format_duration(95) == "1h 35m"

    def test_today_iso(self):
        assert today_iso(datetime(2024, 2, 29, 23, 0)) == "2024-02-29"
