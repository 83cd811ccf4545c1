"""Accident-prone areas derived from sharp turns and poor road surfaces."""

from typing import List, Optional, Sequence

from .criteria import HazardCriteria
from .models import AccidentProneArea, RoadCondition, SharpTurn


class AccidentRiskAggregator:
    """
    Promote high-risk sharp turns and road conditions to accident-prone areas.

    Overlapping sources are not merged: a turn and a bad surface at the same
    point yield two records.
    """

    def __init__(self, criteria: Optional[HazardCriteria] = None):
        self.criteria = criteria or HazardCriteria()

    def aggregate(
        self,
        route_key: str,
        sharp_turns: Sequence[SharpTurn],
        road_conditions: Sequence[RoadCondition],
    ) -> List[AccidentProneArea]:
        min_score = self.criteria.accident_min_risk_score
        areas = []

        for turn in sharp_turns:
            if turn.risk_score >= min_score:
                areas.append(AccidentProneArea(
                    route_key=route_key,
                    lat=turn.lat,
                    lng=turn.lng,
                    risk_score=turn.risk_score,
                    distance_from_start_km=turn.distance_from_start_km,
                    accident_type='rollover',
                    severity_level=turn_severity(turn.risk_score),
                    accident_frequency='high',
                    contributing_factors=[
                        'sharp_turn', f'{turn.turn_angle_deg:.0f}° turn'
                    ],
                    source_kind=turn.KIND,
                ))

        for condition in road_conditions:
            if condition.risk_score >= min_score:
                areas.append(AccidentProneArea(
                    route_key=route_key,
                    lat=condition.lat,
                    lng=condition.lng,
                    risk_score=condition.risk_score,
                    distance_from_start_km=condition.distance_from_start_km,
                    accident_type='skidding',
                    severity_level=surface_severity(condition.risk_score),
                    accident_frequency='medium',
                    contributing_factors=[
                        f'{condition.surface_quality}_road_surface', condition.road_type
                    ],
                    source_kind=condition.KIND,
                ))

        return areas


def turn_severity(risk_score: int) -> str:
    return 'critical' if risk_score >= 9 else 'high'


def surface_severity(risk_score: int) -> str:
    return 'high' if risk_score >= 8 else 'medium'
