"""Hazard detection for vehicle routes."""

from .models import (
    Waypoint,
    BoundingBox,
    Route,
    RouteAnalysis,
    HazardRecord,
    SharpTurn,
    BlindSpot,
    RoadCondition,
    NetworkCoverage,
    AccidentProneArea,
    EmergencyService,
    EcoZone,
    TrafficSample,
    WeatherCondition,
)
from .criteria import HazardCriteria
from .turns import SharpTurnDetector
from .blind_spots import BlindSpotDetector, BlindSpotGate, GeometricGate
from .road_conditions import RoadConditionClassifier
from .coverage import (
    CoverageProvider,
    CoverageReading,
    NetworkCoverageSampler,
    SimulatedCoverageProvider,
)
from .accidents import AccidentRiskAggregator

__all__ = [
    "Waypoint",
    "BoundingBox",
    "Route",
    "RouteAnalysis",
    "HazardRecord",
    "SharpTurn",
    "BlindSpot",
    "RoadCondition",
    "NetworkCoverage",
    "AccidentProneArea",
    "EmergencyService",
    "EcoZone",
    "TrafficSample",
    "WeatherCondition",
    "HazardCriteria",
    "SharpTurnDetector",
    "BlindSpotDetector",
    "BlindSpotGate",
    "GeometricGate",
    "RoadConditionClassifier",
    "CoverageProvider",
    "CoverageReading",
    "NetworkCoverageSampler",
    "SimulatedCoverageProvider",
    "AccidentRiskAggregator",
]
