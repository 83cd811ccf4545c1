"""Emergency services and eco-sensitive zones near a route, from Overpass."""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from shapely.geometry import Point

from ..core.geo import cumulative_distances, nearest_point
from ..hazards.models import BoundingBox, EcoZone, EmergencyService, Waypoint
from ..providers.geocoding import format_coordinates

logger = logging.getLogger(__name__)


def element_position(element: Dict) -> Optional[Tuple[float, float]]:
    """(lat, lng) of a node, or of a way's centre. None when neither exists."""
    if element.get('lat') is not None and element.get('lon') is not None:
        return element['lat'], element['lon']
    center = element.get('center') or {}
    if center.get('lat') is not None and center.get('lon') is not None:
        return center['lat'], center['lon']
    return None


class EmergencyServiceLocator:
    """Hospitals, police, fire stations, fuel and schools around a route."""

    BUFFER_DEG = 0.05
    SERVICE_TYPES = ('hospital', 'police', 'fire_station', 'fuel', 'school')

    def __init__(self, overpass, categories: Dict[str, Dict[str, List[str]]],
                 geocoder=None, buffer_deg: float = BUFFER_DEG):
        self.overpass = overpass
        self.categories = categories
        self.geocoder = geocoder
        self.buffer_deg = buffer_deg

    def locate(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[EmergencyService]:
        bbox = BoundingBox.from_points(waypoints)
        if bbox is None:
            return []

        elements = self.overpass.query_pois(bbox.expand(self.buffer_deg), self.categories)
        distances = cumulative_distances(waypoints)
        services = []

        for element in elements:
            position = element_position(element)
            if position is None:
                continue
            lat, lng = position
            tags = element.get('tags') or {}

            index, distance = nearest_point(lat, lng, waypoints)
            service_type = tags.get('amenity')
            if service_type not in self.SERVICE_TYPES:
                service_type = 'other'

            services.append(EmergencyService(
                route_key=route_key,
                lat=lat,
                lng=lng,
                risk_score=0,
                distance_from_start_km=distances[index],
                service_type=service_type,
                name=tags.get('name') or service_type.replace('_', ' ').capitalize(),
                address=self._address(tags, lat, lng),
                phone=tags.get('phone') or tags.get('contact:phone') or 'Not available',
                distance_from_route_km=distance,
            ))

        logger.debug("%s: %d emergency services", route_key, len(services))
        return services

    def _address(self, tags: Dict[str, str], lat: float, lng: float) -> str:
        address = tags.get('addr:full') or tags.get('addr:street')
        if address:
            return address
        if self.geocoder is not None:
            return self.geocoder.reverse_geocode(lat, lng)
        return format_coordinates(lat, lng)


class EcoZoneLocator:
    """Protected areas, parks and forests whose centre lies near the route."""

    BUFFER_DEG = 0.02
    RESTRICTIONS = ['no_horn', 'speed_limit_40', 'no_stopping']

    def __init__(self, overpass, categories: Dict[str, Dict[str, List[str]]],
                 buffer_deg: float = BUFFER_DEG):
        self.overpass = overpass
        self.categories = categories
        self.buffer_deg = buffer_deg

    def locate(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[EcoZone]:
        bbox = BoundingBox.from_points(waypoints)
        if bbox is None:
            return []

        area = bbox.expand(self.buffer_deg)
        polygon = area.to_polygon()
        elements = self.overpass.query_pois(area, self.categories, element_types=('way',))
        distances = cumulative_distances(waypoints)
        zones = []

        for element in elements:
            center = element.get('center') or {}
            if center.get('lat') is None or center.get('lon') is None:
                continue
            lat, lng = center['lat'], center['lon']
            if not polygon.intersects(Point(lng, lat)):
                continue

            tags = element.get('tags') or {}
            zone_type = zone_type_for(tags)
            is_park = zone_type == 'national_park'
            index, distance = nearest_point(lat, lng, waypoints)

            zones.append(EcoZone(
                route_key=route_key,
                lat=lat,
                lng=lng,
                risk_score=8 if is_park else 6,
                distance_from_start_km=distances[index],
                zone_type=zone_type,
                name=tags.get('name') or f"{zone_type.replace('_', ' ')} zone",
                severity='critical' if is_park else 'high',
                restrictions=list(self.RESTRICTIONS),
                distance_from_route_km=distance,
            ))

        logger.debug("%s: %d eco-sensitive zones", route_key, len(zones))
        return zones


def zone_type_for(tags: Dict[str, str]) -> str:
    return (
        tags.get('boundary')
        or tags.get('natural')
        or tags.get('landuse')
        or tags.get('leisure')
        or 'protected_area'
    )
