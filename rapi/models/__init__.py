"""
Data models for the Rapi timetable client.

This module contains the data structures used throughout the application,
including trains, timetable responses, stations and routes.
"""

from .train_data import Train, NextTrainResponse, TimetableResponse
from .station_data import Station, RouteDetail, RouteStop, UserDefaultStations

__all__ = [
    "Train",
    "NextTrainResponse",
    "TimetableResponse",
    "Station",
    "RouteDetail",
    "RouteStop",
    "UserDefaultStations",
]
