"""
API integration for the Rapi timetable client.

This module handles communication with the Cercanías timetable API,
including error mapping and response parsing.
"""

from .cercanias_api_manager import (
    APINotFoundException,
    CercaniasAPIException,
    CercaniasAPIFactory,
    CercaniasAPISource,
)

__all__ = [
    "APINotFoundException",
    "CercaniasAPIException",
    "CercaniasAPIFactory",
    "CercaniasAPISource",
]
