"""Analysis pipeline: orchestration, caching and batch runs."""

from .analyzer import RouteAnalyzer
from .cache import RouteCache
from .batch import BatchProcessor, BatchRun, candidate_filenames

__all__ = [
    "RouteAnalyzer",
    "RouteCache",
    "BatchProcessor",
    "BatchRun",
    "candidate_filenames",
]
