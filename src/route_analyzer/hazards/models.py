"""Data models for route hazard analysis."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Sequence

from shapely.geometry import Point, box

from ..core.geo import cumulative_distance


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _risk_level(score: float) -> str:
    if score >= 9:
        return "critical"
    elif score >= 7:
        return "high"
    elif score >= 5:
        return "medium"
    elif score >= 3:
        return "low"
    return "minimal"


RISK_COLORS = {
    "critical": "#FF0000",  # Red
    "high": "#FF8800",      # Orange
    "medium": "#FFFF00",    # Yellow
    "low": "#88FF00",       # Light green
    "minimal": "#00FF00",   # Green
}


@dataclass(frozen=True)
class Waypoint:
    """A single GPS sample along a route, in travel order."""

    lat: float
    lng: float
    sequence_id: Optional[int] = None
    extra: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_valid(self) -> bool:
        """False for zero, missing, NaN or out-of-range coordinates."""
        if self.lat is None or self.lng is None:
            return False
        if math.isnan(self.lat) or math.isnan(self.lng):
            return False
        if not self.lat or not self.lng:
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    @classmethod
    def from_points(cls, points: Sequence) -> Optional["BoundingBox"]:
        if not points:
            return None
        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        return cls(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))

    def expand(self, degrees: float) -> "BoundingBox":
        return BoundingBox(
            north=self.north + degrees,
            south=self.south - degrees,
            east=self.east + degrees,
            west=self.west - degrees,
        )

    def to_polygon(self):
        """Shapely polygon in (lng, lat) axis order."""
        return box(self.west, self.south, self.east, self.north)

    def contains(self, lat: float, lng: float) -> bool:
        return self.to_polygon().intersects(Point(lng, lat))

    def to_dict(self) -> Dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


@dataclass
class Route:
    """A route parsed from one input file. Waypoints never change after creation."""

    key: str
    waypoints: tuple
    total_distance_km: float = 0.0
    bounding_box: Optional[BoundingBox] = None
    depot_code: str = ""
    consumer_code: str = ""
    customer_name: str = ""
    location: str = ""
    filename: str = ""
    start_address: str = ""
    end_address: str = ""
    created_at: datetime = field(default_factory=utcnow)

    AVERAGE_SPEED_KMH: ClassVar[float] = 40.0

    @classmethod
    def from_waypoints(cls, key: str, waypoints: Sequence[Waypoint], **meta) -> "Route":
        """Build a route, dropping invalid waypoints and deriving distance and bbox."""
        valid = tuple(wp for wp in waypoints if wp.is_valid)
        return cls(
            key=key,
            waypoints=valid,
            total_distance_km=cumulative_distance(valid),
            bounding_box=BoundingBox.from_points(valid),
            **meta,
        )

    @staticmethod
    def make_key(depot_code: str, consumer_code: str) -> str:
        return f"{depot_code}_{consumer_code}"

    @property
    def estimated_duration_min(self) -> float:
        return self.total_distance_km / self.AVERAGE_SPEED_KMH * 60

    @property
    def start(self) -> Optional[Waypoint]:
        return self.waypoints[0] if self.waypoints else None

    @property
    def end(self) -> Optional[Waypoint]:
        return self.waypoints[-1] if self.waypoints else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "routeKey": self.key,
            "routeName": f"{self.depot_code}_to_{self.consumer_code}"
            if self.depot_code or self.consumer_code else self.key,
            "fromCode": self.depot_code,
            "toCode": self.consumer_code,
            "customerName": self.customer_name,
            "location": self.location,
            "filename": self.filename,
            "fromAddress": self.start_address,
            "toAddress": self.end_address,
            "fromCoordinates": _location(self.start) if self.start else None,
            "toCoordinates": _location(self.end) if self.end else None,
            "totalDistanceKm": self.total_distance_km,
            "estimatedDurationMin": self.estimated_duration_min,
            "boundingBox": self.bounding_box.to_dict() if self.bounding_box else None,
            "routePoints": [
                {"lat": wp.lat, "lng": wp.lng, "sequenceId": wp.sequence_id}
                for wp in self.waypoints
            ],
            "totalWaypoints": len(self.waypoints),
            "createdAt": self.created_at.isoformat(),
        }


def _location(point) -> Dict[str, float]:
    return {"lat": point.lat, "lng": point.lng}


@dataclass
class HazardRecord:
    """
    Common fields of every annotation attached to a route.

    Subclass fields all carry defaults so they can follow the base fields.
    """

    route_key: str
    lat: float
    lng: float
    risk_score: int
    distance_from_start_km: float = 0.0
    created_at: datetime = field(default_factory=utcnow)

    KIND: ClassVar[str] = "hazard"
    COLLECTION: ClassVar[str] = "hazards"

    @property
    def risk_level(self) -> str:
        return _risk_level(self.risk_score)

    @property
    def color(self) -> str:
        return RISK_COLORS.get(self.risk_level, "#808080")

    def to_dict(self) -> Dict[str, Any]:
        doc = {
            "kind": self.KIND,
            "routeKey": self.route_key,
            "location": _location(self),
            "riskScore": self.risk_score,
            "distanceFromStartKm": self.distance_from_start_km,
            "createdAt": self.created_at.isoformat(),
        }
        doc.update(self._detail())
        return doc

    def _detail(self) -> Dict[str, Any]:
        return {}


@dataclass
class SharpTurn(HazardRecord):
    turn_angle_deg: float = 0.0
    direction: str = "right"
    recommended_speed_kmh: int = 30
    visibility: str = "moderate"
    driver_action: str = ""

    KIND: ClassVar[str] = "sharp_turn"
    COLLECTION: ClassVar[str] = "sharp_turns"

    def _detail(self):
        return {
            "turnAngleDeg": self.turn_angle_deg,
            "direction": self.direction,
            "recommendedSpeedKmh": self.recommended_speed_kmh,
            "visibility": self.visibility,
            "driverActionRequired": self.driver_action,
        }


@dataclass
class BlindSpot(HazardRecord):
    spot_type: str = "curve"
    visibility_distance_m: int = 100
    driver_action: str = "Reduce speed and honk before curve"

    KIND: ClassVar[str] = "blind_spot"
    COLLECTION: ClassVar[str] = "blind_spots"

    def _detail(self):
        return {
            "spotType": self.spot_type,
            "visibilityDistanceM": self.visibility_distance_m,
            "driverActionRequired": self.driver_action,
        }


@dataclass
class RoadCondition(HazardRecord):
    surface_quality: str = "good"
    road_type: str = "unclassified"
    surface: str = "unknown"
    lanes: int = 2
    max_speed_kmh: int = 60
    under_construction: bool = False

    KIND: ClassVar[str] = "road_condition"
    COLLECTION: ClassVar[str] = "road_conditions"

    LANE_WIDTH_M: ClassVar[float] = 3.5

    @property
    def width_m(self) -> float:
        return self.lanes * self.LANE_WIDTH_M

    def _detail(self):
        return {
            "surfaceQuality": self.surface_quality,
            "roadType": self.road_type,
            "surface": self.surface,
            "lanes": self.lanes,
            "widthM": self.width_m,
            "maxSpeedKmh": self.max_speed_kmh,
            "underConstruction": self.under_construction,
        }


@dataclass
class NetworkCoverage(HazardRecord):
    signal_strength: int = 4
    is_dead_zone: bool = False
    signal_category: str = "good"
    communication_risk: str = "low"
    providers: List[str] = field(default_factory=list)

    KIND: ClassVar[str] = "network_coverage"
    COLLECTION: ClassVar[str] = "network_coverages"

    def _detail(self):
        return {
            "signalStrength": self.signal_strength,
            "isDeadZone": self.is_dead_zone,
            "signalCategory": self.signal_category,
            "communicationRisk": self.communication_risk,
            "providers": list(self.providers),
        }


@dataclass
class AccidentProneArea(HazardRecord):
    accident_type: str = ""
    severity_level: str = "medium"
    accident_frequency: str = "medium"
    contributing_factors: List[str] = field(default_factory=list)
    source_kind: str = ""

    KIND: ClassVar[str] = "accident_prone_area"
    COLLECTION: ClassVar[str] = "accident_prone_areas"

    def _detail(self):
        return {
            "accidentType": self.accident_type,
            "severityLevel": self.severity_level,
            "accidentFrequency": self.accident_frequency,
            "contributingFactors": list(self.contributing_factors),
            "sourceKind": self.source_kind,
        }


@dataclass
class EmergencyService(HazardRecord):
    service_type: str = "other"
    name: str = ""
    address: str = ""
    phone: str = "Not available"
    distance_from_route_km: float = 0.0

    KIND: ClassVar[str] = "emergency_service"
    COLLECTION: ClassVar[str] = "emergency_services"

    def _detail(self):
        return {
            "serviceType": self.service_type,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "distanceFromRouteKm": self.distance_from_route_km,
        }


@dataclass
class EcoZone(HazardRecord):
    zone_type: str = "protected_area"
    name: str = ""
    address: str = ""
    severity: str = "high"
    compliance_required: str = "No horn, maintain speed limits, no littering"
    restrictions: List[str] = field(default_factory=list)
    distance_from_route_km: float = 0.0

    KIND: ClassVar[str] = "eco_zone"
    COLLECTION: ClassVar[str] = "eco_sensitive_zones"

    def _detail(self):
        return {
            "zoneType": self.zone_type,
            "name": self.name,
            "address": self.address,
            "severity": self.severity,
            "complianceRequired": self.compliance_required,
            "restrictions": list(self.restrictions),
            "distanceFromRouteKm": self.distance_from_route_km,
        }


@dataclass
class TrafficSample(HazardRecord):
    congestion_level: str = "free_flow"
    congestion_percentage: float = 0.0
    current_speed_kmh: float = 0.0
    free_flow_speed_kmh: float = 0.0
    confidence: Optional[float] = None

    KIND: ClassVar[str] = "traffic"
    COLLECTION: ClassVar[str] = "traffic_data"

    def _detail(self):
        return {
            "congestionLevel": self.congestion_level,
            "congestionPercentage": round(self.congestion_percentage, 1),
            "currentSpeedKmh": self.current_speed_kmh,
            "freeFlowSpeedKmh": self.free_flow_speed_kmh,
            "confidence": self.confidence,
        }


@dataclass
class WeatherCondition(HazardRecord):
    condition: str = ""
    description: str = ""
    season: str = ""
    temperature_c: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    visibility_m: int = 10000
    challenges: List[str] = field(default_factory=list)
    driver_caution: List[str] = field(default_factory=list)

    KIND: ClassVar[str] = "weather"
    COLLECTION: ClassVar[str] = "weather_conditions"

    def _detail(self):
        return {
            "condition": self.condition,
            "currentWeather": self.description,
            "season": self.season,
            "temperature": self.temperature_c,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "visibility": self.visibility_m,
            "challenges": list(self.challenges),
            "driverCaution": list(self.driver_caution),
        }


# Order matters: output document keys follow this order.
DETECTOR_FIELDS = (
    "sharp_turns",
    "blind_spots",
    "accident_prone_areas",
    "road_conditions",
    "network_coverages",
)

ENRICHMENT_FIELDS = (
    "emergency_services",
    "eco_zones",
    "traffic_data",
    "weather_conditions",
)

FIELD_TYPES = {
    "sharp_turns": SharpTurn,
    "blind_spots": BlindSpot,
    "accident_prone_areas": AccidentProneArea,
    "road_conditions": RoadCondition,
    "network_coverages": NetworkCoverage,
    "emergency_services": EmergencyService,
    "eco_zones": EcoZone,
    "traffic_data": TrafficSample,
    "weather_conditions": WeatherCondition,
}


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class RouteAnalysis:
    """Result of one analysis request for a route."""

    route: Route
    status: str = "idle"
    enhanced: bool = False
    from_cache: bool = False
    sharp_turns: List[SharpTurn] = field(default_factory=list)
    blind_spots: List[BlindSpot] = field(default_factory=list)
    accident_prone_areas: List[AccidentProneArea] = field(default_factory=list)
    road_conditions: List[RoadCondition] = field(default_factory=list)
    network_coverages: List[NetworkCoverage] = field(default_factory=list)
    emergency_services: List[EmergencyService] = field(default_factory=list)
    eco_zones: List[EcoZone] = field(default_factory=list)
    traffic_data: List[TrafficSample] = field(default_factory=list)
    weather_conditions: List[WeatherCondition] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def hazards(self) -> List[HazardRecord]:
        """All records in output order (enrichment only when enhanced)."""
        names = DETECTOR_FIELDS + (ENRICHMENT_FIELDS if self.enhanced else ())
        records = []
        for name in names:
            records.extend(getattr(self, name))
        return records

    def to_dict(self) -> Dict[str, Any]:
        doc = {
            "route": self.route.to_dict(),
            "status": self.status,
            "enhanced": self.enhanced,
            "fromCache": self.from_cache,
        }
        for name in DETECTOR_FIELDS:
            doc[camel_case(name)] = [r.to_dict() for r in getattr(self, name)]
        if self.enhanced:
            for name in ENRICHMENT_FIELDS:
                doc[camel_case(name)] = [r.to_dict() for r in getattr(self, name)]
        doc["errors"] = list(self.errors)
        return doc
