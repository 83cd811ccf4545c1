"""Sharp-turn detection from consecutive route bearings."""

from typing import List, Optional, Sequence

from ..core.geo import bearing, bearing_delta, cumulative_distances
from .criteria import HazardCriteria
from .models import SharpTurn, Waypoint


class SharpTurnDetector:
    """Flag interior waypoints where the heading changes by more than the threshold."""

    def __init__(self, criteria: Optional[HazardCriteria] = None):
        self.criteria = criteria or HazardCriteria()

    def detect(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[SharpTurn]:
        """
        Scan every interior waypoint once.

        Args:
            route_key: Key of the route the records belong to
            waypoints: Ordered waypoints (travel direction)

        Returns:
            List of SharpTurn records, in route order
        """
        threshold = self.criteria.sharp_turns['threshold_deg']
        wrap = self.criteria.normalize_bearing_wrap
        distances = cumulative_distances(waypoints)
        turns = []

        for i in range(1, len(waypoints) - 1):
            p1, p2, p3 = waypoints[i - 1], waypoints[i], waypoints[i + 1]

            incoming = bearing(p1, p2)
            outgoing = bearing(p2, p3)

            turn_angle = abs(outgoing - incoming)
            if turn_angle > 180:
                turn_angle = 360 - turn_angle

            if turn_angle <= threshold:
                continue

            if bearing_delta(incoming, outgoing, wrap=wrap) > 0:
                direction = 'right'
            else:
                direction = 'left'

            speed = self.criteria.recommended_speed(turn_angle)
            turns.append(SharpTurn(
                route_key=route_key,
                lat=p2.lat,
                lng=p2.lng,
                risk_score=self.criteria.turn_risk_score(turn_angle),
                distance_from_start_km=distances[i],
                turn_angle_deg=turn_angle,
                direction=direction,
                recommended_speed_kmh=speed,
                visibility=self.criteria.turn_visibility(turn_angle),
                driver_action=f"Reduce speed to {speed} km/h for sharp {direction} turn",
            ))

        return turns
