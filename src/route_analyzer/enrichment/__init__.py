"""Enrichment of route analyses with third-party data."""

from .poi import EmergencyServiceLocator, EcoZoneLocator
from .samplers import (
    PointSampler,
    SampleBatch,
    TrafficSampler,
    WeatherSampler,
    classify_congestion,
    classify_weather,
    season_for,
)

__all__ = [
    "EmergencyServiceLocator",
    "EcoZoneLocator",
    "PointSampler",
    "SampleBatch",
    "TrafficSampler",
    "WeatherSampler",
    "classify_congestion",
    "classify_weather",
    "season_for",
]
