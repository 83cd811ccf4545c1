"""Exporters for route analyses."""

from .geojson import analysis_to_geojson, export_geojson
from .gpx import analysis_to_gpx, export_gpx

__all__ = [
    "analysis_to_geojson",
    "export_geojson",
    "analysis_to_gpx",
    "export_gpx",
]
