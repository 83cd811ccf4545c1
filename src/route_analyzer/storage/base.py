"""Collection store interface for routes and hazard records."""

from abc import ABC, abstractmethod
from typing import Dict, List

from ..core.geo import haversine_km

ROUTES = "routes"
SHARP_TURNS = "sharp_turns"
BLIND_SPOTS = "blind_spots"
ACCIDENT_PRONE_AREAS = "accident_prone_areas"
ROAD_CONDITIONS = "road_conditions"
NETWORK_COVERAGES = "network_coverages"
EMERGENCY_SERVICES = "emergency_services"
ECO_SENSITIVE_ZONES = "eco_sensitive_zones"
TRAFFIC_DATA = "traffic_data"
WEATHER_CONDITIONS = "weather_conditions"

COLLECTIONS = (
    ROUTES,
    SHARP_TURNS,
    BLIND_SPOTS,
    ACCIDENT_PRONE_AREAS,
    ROAD_CONDITIONS,
    NETWORK_COVERAGES,
    EMERGENCY_SERVICES,
    ECO_SENSITIVE_ZONES,
    TRAFFIC_DATA,
    WEATHER_CONDITIONS,
)


class HazardStore(ABC):
    """
    JSON documents grouped by collection and route key.

    Documents carry their route key under ``routeKey``. Writes are
    per-collection; there are no cross-collection transactions.
    """

    @abstractmethod
    def insert_many(self, collection: str, documents: List[Dict]) -> int:
        """Append documents, returning how many were written."""

    @abstractmethod
    def delete_by_route(self, collection: str, route_key: str) -> int:
        """Remove every document of a route, returning how many were removed."""

    @abstractmethod
    def find_by_route(self, collection: str, route_key: str) -> List[Dict]:
        """Documents of a route in insertion order."""

    @abstractmethod
    def all_documents(self, collection: str) -> List[Dict]:
        pass

    @abstractmethod
    def ping(self) -> bool:
        """True when the store is reachable and writable."""

    def replace_route(self, collection: str, route_key: str, documents: List[Dict]) -> int:
        """Delete a route's documents then insert the new ones."""
        self.delete_by_route(collection, route_key)
        if not documents:
            return 0
        return self.insert_many(collection, documents)

    def find_near(self, collection: str, lat: float, lng: float,
                  max_distance_km: float) -> List[Dict]:
        """Documents whose ``location`` is within ``max_distance_km``, nearest first."""
        matches = []
        for doc in self.all_documents(collection):
            location = doc.get("location") or {}
            if "lat" not in location or "lng" not in location:
                continue
            distance = haversine_km(lat, lng, location["lat"], location["lng"])
            if distance <= max_distance_km:
                matches.append((distance, doc))
        matches.sort(key=lambda item: item[0])
        return [doc for _, doc in matches]
