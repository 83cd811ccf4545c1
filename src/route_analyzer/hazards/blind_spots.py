"""Blind-spot detection over a five-point bearing window."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..core.geo import bearing, bearing_delta, cumulative_distances
from .criteria import HazardCriteria
from .models import BlindSpot, Waypoint


class BlindSpotGate(ABC):
    """
    Secondary check applied after the geometric curve test.

    A real implementation would look at terrain (crests, cuttings) around
    the candidate waypoint. Subclasses override :meth:`passes`.
    """

    @abstractmethod
    def passes(self, waypoints: Sequence[Waypoint], index: int, bearing_change: float) -> bool:
        pass


class GeometricGate(BlindSpotGate):
    """Accept every geometric candidate (no elevation data available)."""

    def passes(self, waypoints, index, bearing_change):
        return True


class BlindSpotDetector:
    """Find curves whose bearing change over two points either side exceeds the threshold."""

    def __init__(
        self,
        criteria: Optional[HazardCriteria] = None,
        gate: Optional[BlindSpotGate] = None,
    ):
        self.criteria = criteria or HazardCriteria()
        self.gate = gate or GeometricGate()

    def detect(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[BlindSpot]:
        settings = self.criteria.blind_spots
        threshold = settings['threshold_deg']
        distances = cumulative_distances(waypoints)
        spots = []

        for i in range(2, len(waypoints) - 2):
            before = bearing(waypoints[i - 2], waypoints[i])
            after = bearing(waypoints[i], waypoints[i + 2])
            change = self._bearing_change(before, after)

            if change <= threshold:
                continue
            if not self.gate.passes(waypoints, i, change):
                continue

            spot_type = self.criteria.blind_spot_type(change)
            point = waypoints[i]
            spots.append(BlindSpot(
                route_key=route_key,
                lat=point.lat,
                lng=point.lng,
                risk_score=int(settings['risk_scores'][spot_type]),
                distance_from_start_km=distances[i],
                spot_type=spot_type,
                visibility_distance_m=int(settings['visibility_distance_m'][spot_type]),
            ))

        return spots

    def _bearing_change(self, before: float, after: float) -> float:
        if self.criteria.normalize_bearing_wrap:
            return abs(bearing_delta(before, after))
        return abs(after - before)
