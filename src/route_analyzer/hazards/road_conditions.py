"""Road-condition classification from OSM way tags around sampled waypoints."""

import logging
import re
from typing import Dict, List, Optional, Sequence

import requests

from ..core.exceptions import ProviderError
from ..core.geo import cumulative_distances
from .criteria import HazardCriteria, stride
from .models import RoadCondition, Waypoint

logger = logging.getLogger(__name__)


class RoadConditionClassifier:
    """Classify surface quality at evenly spaced samples along a route."""

    def __init__(self, road_tags, criteria: Optional[HazardCriteria] = None):
        """
        Initialize classifier.

        Args:
            road_tags: Object with ``query_road_tags(lat, lng, radius)``
                returning a tag dict or None (normally an OverpassClient)
            criteria: HazardCriteria configuration object
        """
        self.road_tags = road_tags
        self.criteria = criteria or HazardCriteria()

    def classify(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[RoadCondition]:
        """
        Look up road tags at each sample and score the surface.

        Missing or failed lookups contribute no record; they are not retried.
        """
        settings = self.criteria.road_conditions
        step = stride(len(waypoints), settings['samples'])
        radius = settings['lookup_radius_m']
        distances = cumulative_distances(waypoints)
        conditions = []
        failed = 0

        for i in range(0, len(waypoints), step):
            point = waypoints[i]
            try:
                tags = self.road_tags.query_road_tags(point.lat, point.lng, radius)
            except (ProviderError, requests.RequestException) as e:
                failed += 1
                logger.debug("Could not fetch road data for %.6f,%.6f: %s",
                             point.lat, point.lng, e)
                continue

            if not tags:
                continue

            conditions.append(
                self._score_tags(route_key, point, distances[i], tags)
            )

        if failed:
            logger.debug("%s: %d road tag lookups failed", route_key, failed)
        return conditions

    def _score_tags(self, route_key: str, point: Waypoint,
                    distance_km: float, tags: Dict[str, str]) -> RoadCondition:
        """Build a RoadCondition record from one way's tags."""
        settings = self.criteria.road_conditions
        surface = tags.get('surface') or 'unknown'
        under_construction = bool(tags.get('construction'))
        quality = self.criteria.surface_quality(surface, under_construction)

        return RoadCondition(
            route_key=route_key,
            lat=point.lat,
            lng=point.lng,
            risk_score=self.criteria.surface_risk_score(quality),
            distance_from_start_km=distance_km,
            surface_quality=quality,
            road_type=tags.get('highway') or 'unclassified',
            surface=surface,
            lanes=parse_int(tags.get('lanes'), default=settings['default_lanes']),
            max_speed_kmh=parse_maxspeed(
                tags.get('maxspeed'), default=settings['default_maxspeed_kmh']
            ),
            under_construction=under_construction,
        )


def parse_maxspeed(maxspeed, default: int = 60) -> int:
    """Parse maxspeed tag to integer km/h."""
    if not maxspeed or maxspeed == 'none':
        return default

    # Handle "50 mph", "80 km/h", etc.
    match = re.search(r'(\d+)', str(maxspeed))
    if match:
        speed = int(match.group(1))
        if 'mph' in str(maxspeed).lower():
            speed = int(speed * 1.60934)
        return speed or default

    return default


def parse_int(value, default: int = 2) -> int:
    """Safely parse integer value."""
    try:
        # Handle ranges like "2-3" - take the lower value
        if isinstance(value, str) and '-' in value:
            return int(value.split('-')[0]) or default
        return int(value) or default
    except (ValueError, TypeError):
        return default
