"""GeoJSON export of a route analysis."""

import json
from pathlib import Path
from typing import Dict, List

ROUTE_COLOR = "#4285F4"  # Google Maps blue


def analysis_to_geojson(analysis) -> Dict:
    """FeatureCollection with the route line first, then one point per hazard."""
    features: List[Dict] = []
    route = analysis.route

    if route.waypoints:
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "LineString",
                "coordinates": [[wp.lng, wp.lat] for wp in route.waypoints]
            },
            "properties": {
                "type": "route",
                "name": route.key,
                "total_distance_km": round(route.total_distance_km, 2),
                "color": ROUTE_COLOR,
                "stroke": ROUTE_COLOR,
                "stroke-width": 3,
                "stroke-opacity": 0.8
            }
        })

    for record in analysis.hazards():
        properties = record.to_dict()
        properties.pop("location", None)
        properties.update({
            "type": record.KIND,
            "risk_level": record.risk_level,
            "color": record.color,
            "marker-color": record.color,
        })
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [record.lng, record.lat]
            },
            "properties": properties
        })

    return {
        "type": "FeatureCollection",
        "features": features
    }


def export_geojson(analysis, output_path) -> str:
    """
    Write an analysis as GeoJSON.

    Returns:
        Path to output file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(analysis_to_geojson(analysis), f, indent=2)

    return str(output_file)
