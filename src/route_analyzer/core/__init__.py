"""Core utilities for the route analyzer."""

from .geo import (
    haversine_km,
    distance_km,
    bearing,
    bearing_delta,
    cumulative_distance,
    cumulative_distances,
    nearest_point,
)
from .config import Config
from .exceptions import (
    RouteAnalyzerError,
    ConfigError,
    ProviderError,
    StorageError,
    BatchInProgressError,
)

# Loaders depend on the hazard models; import them from core.loaders.

__all__ = [
    "haversine_km",
    "distance_km",
    "bearing",
    "bearing_delta",
    "cumulative_distance",
    "cumulative_distances",
    "nearest_point",
    "Config",
    "RouteAnalyzerError",
    "ConfigError",
    "ProviderError",
    "StorageError",
    "BatchInProgressError",
]
