"""Persistence of routes and hazard records."""

from .base import (
    HazardStore,
    COLLECTIONS,
    ROUTES,
    SHARP_TURNS,
    BLIND_SPOTS,
    ACCIDENT_PRONE_AREAS,
    ROAD_CONDITIONS,
    NETWORK_COVERAGES,
    EMERGENCY_SERVICES,
    ECO_SENSITIVE_ZONES,
    TRAFFIC_DATA,
    WEATHER_CONDITIONS,
)
from .memory import MemoryStore
from .json_file import JsonFileStore

__all__ = [
    "HazardStore",
    "MemoryStore",
    "JsonFileStore",
    "COLLECTIONS",
    "ROUTES",
    "SHARP_TURNS",
    "BLIND_SPOTS",
    "ACCIDENT_PRONE_AREAS",
    "ROAD_CONDITIONS",
    "NETWORK_COVERAGES",
    "EMERGENCY_SERVICES",
    "ECO_SENSITIVE_ZONES",
    "TRAFFIC_DATA",
    "WEATHER_CONDITIONS",
]
