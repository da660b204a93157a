"""
Helper utility functions for the Rapi timetable client.

This module contains utility functions for parsing and formatting the
HH:MM:SS time-of-day strings delivered by the timetable API, projecting
them onto calendar dates and formatting durations.
"""

from datetime import date, datetime, time
from typing import Optional

TIME_OF_DAY_FORMAT = "%H:%M:%S"


def parse_time_of_day(time_string: str) -> Optional[time]:
    """
    Parse an HH:MM:SS time-of-day string.

    Args:
        time_string: Time string as delivered by the API

    Returns:
        Optional[time]: Parsed time, or None if the string is malformed
    """
    try:
        return datetime.strptime(time_string.strip(), TIME_OF_DAY_FORMAT).time()
    except (ValueError, AttributeError):
        return None


def format_time_string(time_string: str) -> str:
    """
    Convert an HH:MM:SS string to HH:MM for display.

    Strings with fewer than two components are returned unchanged.
    """
    components = time_string.split(":")
    if len(components) >= 2:
        return f"{components[0]}:{components[1]}"
    return time_string


def combine_date_and_time(day: date, time_string: str) -> Optional[datetime]:
    """
    Project a time-of-day string onto a calendar date.

    Args:
        day: Calendar date (a datetime is accepted and truncated to its date)
        time_string: HH:MM:SS time string

    Returns:
        Optional[datetime]: Full timestamp, or None if the time is malformed
    """
    parsed = parse_time_of_day(time_string)
    if parsed is None:
        return None
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, parsed)


def minutes_between(start: str, end: str) -> int:
    """
    Whole minutes from one time-of-day to another on the same day.

    Returns 0 when either string cannot be parsed.
    """
    start_time = parse_time_of_day(start)
    end_time = parse_time_of_day(end)
    if start_time is None or end_time is None:
        return 0

    reference = date(2000, 1, 1)
    delta = datetime.combine(reference, end_time) - datetime.combine(reference, start_time)
    return int(delta.total_seconds() / 60)


def format_duration(minutes: int) -> str:
    """
    Format a duration in minutes to a human-readable string.

    Returns:
        str: Formatted duration string (e.g., "1h 30m", "45m")
    """
    hours = minutes // 60
    remainder = minutes % 60

    if hours > 0:
        return f"{hours}h {remainder}m"
    else:
        return f"{remainder}m"


def today_iso(now: Optional[datetime] = None) -> str:
    """Get today's date as an ISO-8601 calendar date string."""
    if now is None:
        now = datetime.now()
    return now.date().isoformat()
