"""
Rapi Cercanías timetable client core

Client-side core of a Spanish commuter rail timetable app: remote API
access, an in-memory route cache with freshness tracking, and request
orchestration for next-train and full-day timetable lookups.

Features:
- Next train between two stations
- Full-day timetable for a route
- Station and route browsing
- Route cache with selective invalidation and age-based eviction
"""

__version__ = "1.2.0"
__author__ = "Rapi contributors"
__description__ = "Rapi Cercanías timetable client core"
