"""
Utility functions for the Rapi timetable client.

This module contains helper functions for time-of-day parsing and
formatting used throughout the application.
"""

from .helpers import format_time_string, format_duration, parse_time_of_day

__all__ = ["format_time_string", "format_duration", "parse_time_of_day"]
