"""Geodesic helpers shared by the hazard detectors.

Points are any objects exposing ``lat`` and ``lng`` attributes (usually
:class:`~route_analyzer.hazards.models.Waypoint`).
"""

from math import radians, degrees, sin, cos, sqrt, atan2
from typing import List, Optional, Sequence, Tuple

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1, lng1, lat2, lng2):
    """
    Calculate great-circle distance between two coordinates.

    Args:
        lat1, lng1: Coordinates of first point
        lat2, lng2: Coordinates of second point

    Returns:
        Distance in kilometers
    """
    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat/2)**2 + cos(lat1) * cos(lat2) * sin(dlng/2)**2
    c = 2 * atan2(sqrt(a), sqrt(1-a))

    return EARTH_RADIUS_KM * c


def distance_km(p1, p2) -> float:
    """Haversine distance between two points in kilometers."""
    return haversine_km(p1.lat, p1.lng, p2.lat, p2.lng)


def bearing(p1, p2) -> float:
    """Initial compass bearing from p1 to p2, in degrees [0, 360)."""
    lat1 = radians(p1.lat)
    lat2 = radians(p2.lat)
    dlng = radians(p2.lng - p1.lng)

    y = sin(dlng) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlng)

    result = (degrees(atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 can round to exactly 360.0
    return 0.0 if result >= 360.0 else result


def cumulative_distance(points: Sequence) -> float:
    """Total polyline length in kilometers (0 for fewer than two points)."""
    total = 0.0
    for i in range(1, len(points)):
        total += distance_km(points[i - 1], points[i])
    return total


def cumulative_distances(points: Sequence) -> List[float]:
    """Running distance from the first point to each point, in kilometers."""
    running = []
    total = 0.0
    for i, point in enumerate(points):
        if i > 0:
            total += distance_km(points[i - 1], point)
        running.append(total)
    return running


def bearing_delta(incoming: float, outgoing: float, wrap: bool = True) -> float:
    """
    Signed change of heading from ``incoming`` to ``outgoing``.

    With ``wrap`` the result lies in (-180, 180] and is positive for a
    clockwise (right) turn. Without it the raw difference is returned,
    which misreads turns that cross due north.
    """
    delta = outgoing - incoming
    if not wrap:
        return delta
    delta = (delta + 180.0) % 360.0 - 180.0
    return 180.0 if delta == -180.0 else delta


def nearest_point(lat: float, lng: float, points: Sequence) -> Tuple[Optional[int], float]:
    """
    Find the route point closest to a coordinate.

    Returns:
        (index, distance_km), or (None, inf) for an empty sequence
    """
    best_index = None
    best_distance = float("inf")
    for i, point in enumerate(points):
        d = haversine_km(lat, lng, point.lat, point.lng)
        if d < best_distance:
            best_index = i
            best_distance = d
    return best_index, best_distance
