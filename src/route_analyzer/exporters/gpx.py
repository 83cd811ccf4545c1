"""Garmin-compatible GPX export of a route analysis."""

from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

import gpxpy.gpx

from ..core.config import Config

GPX_NS = 'http://www.topografix.com/GPX/1/1'
GPXX_NS = 'http://www.garmin.com/xmlschemas/GpxExtensions/v3'


def analysis_to_gpx(analysis, config: Optional[Config] = None) -> str:
    """
    Build GPX XML: the route as a blue track plus one waypoint per hazard.

    Waypoint symbols come from the ``[garmin_symbols]`` configuration.
    """
    config = config or Config()
    route = analysis.route

    gpx = gpxpy.gpx.GPX()
    gpx.name = f"Route Hazards {route.key}"
    gpx.description = (
        f"Hazard analysis for {route.key}: "
        f"{route.total_distance_km:.1f} km, {len(analysis.hazards())} hazards"
    )

    if route.waypoints:
        track = gpxpy.gpx.GPXTrack()
        track.name = route.key
        track.type = "Route"
        segment = gpxpy.gpx.GPXTrackSegment()
        for wp in route.waypoints:
            segment.points.append(gpxpy.gpx.GPXTrackPoint(wp.lat, wp.lng))
        track.segments.append(segment)
        gpx.tracks.append(track)

    for record in analysis.hazards():
        label = record.KIND.replace('_', ' ').capitalize()
        wpt = gpxpy.gpx.GPXWaypoint(
            latitude=record.lat,
            longitude=record.lng,
            name=f"{label} ({record.risk_score}/10)"
        )
        wpt.symbol = config.get_symbol(record.KIND)
        wpt.type = record.KIND
        wpt.description = (
            f"Risk: {record.risk_level} ({record.risk_score}/10) | "
            f"{record.distance_from_start_km:.2f} km from start"
        )
        gpx.waypoints.append(wpt)

    return _inject_track_color(gpx.to_xml(), 'Blue')


def _inject_track_color(gpx_xml: str, color: str) -> str:
    """Add a Garmin DisplayColor extension to every track."""
    root = ET.fromstring(gpx_xml)

    # Register namespaces to preserve them in output
    ET.register_namespace('', GPX_NS)
    ET.register_namespace('gpxx', GPXX_NS)

    for track in root.findall(f'{{{GPX_NS}}}trk'):
        extensions = track.find(f'{{{GPX_NS}}}extensions')
        if extensions is None:
            extensions = ET.SubElement(track, f'{{{GPX_NS}}}extensions')
        garmin_ext = ET.SubElement(extensions, f'{{{GPXX_NS}}}TrackExtension')
        display_color = ET.SubElement(garmin_ext, f'{{{GPXX_NS}}}DisplayColor')
        display_color.text = color

    xml_str = ET.tostring(root, encoding='unicode', method='xml')
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml_str


def export_gpx(analysis, output_path, config: Optional[Config] = None) -> str:
    """
    Write an analysis as GPX.

    Returns:
        Path to output file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(analysis_to_gpx(analysis, config))

    return str(output_file)
