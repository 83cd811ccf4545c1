"""Route Hazard Analyzer - Detect driving hazards along vehicle routes."""

__version__ = "0.1.0"

# Expose main classes for programmatic use
from .core import Config
from .hazards import HazardCriteria, Route, RouteAnalysis, Waypoint
from .pipeline import BatchProcessor, RouteAnalyzer, RouteCache
from .providers import Providers, build_providers
from .storage import JsonFileStore, MemoryStore

__all__ = [
    "__version__",
    "Config",
    "HazardCriteria",
    "Route",
    "RouteAnalysis",
    "Waypoint",
    "RouteAnalyzer",
    "RouteCache",
    "BatchProcessor",
    "Providers",
    "build_providers",
    "JsonFileStore",
    "MemoryStore",
]
