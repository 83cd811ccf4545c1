"""Per-point weather and traffic sampling along a route."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

import requests

from ..core.exceptions import ProviderError
from ..core.geo import cumulative_distances
from ..hazards.criteria import stride
from ..hazards.models import HazardRecord, TrafficSample, Waypoint, WeatherCondition, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SampleBatch:
    """Records built from one sampling pass, with failure accounting."""

    records: List[HazardRecord] = field(default_factory=list)
    attempted: int = 0
    failed: int = 0

    def failure_note(self, name: str) -> Optional[str]:
        if not self.failed:
            return None
        return f"{name}: {self.failed} of {self.attempted} samples failed"


class PointSampler(ABC):
    """
    Fan out one remote lookup per sampled waypoint.

    Subclasses set ``SAMPLES`` and implement ``lookup`` and ``build``.
    Lookups that raise count as failed; lookups that return None count as
    "no data" and produce no record.
    """

    SAMPLES = 10
    INCLUDE_LAST = True

    def __init__(self, max_workers: int = 4):
        self.max_workers = max(1, max_workers)

    def sample_indices(self, count: int) -> List[int]:
        step = stride(count, self.SAMPLES)
        end = count if self.INCLUDE_LAST else count - 1
        return list(range(0, max(end, 0), step))

    @abstractmethod
    def lookup(self, point: Waypoint) -> Optional[Dict]:
        pass

    @abstractmethod
    def build(self, route_key: str, point: Waypoint, distance_km: float,
              data: Dict) -> HazardRecord:
        pass

    def sample(self, route_key: str, waypoints: Sequence[Waypoint]) -> SampleBatch:
        indices = self.sample_indices(len(waypoints))
        batch = SampleBatch(attempted=len(indices))
        if not indices:
            return batch

        distances = cumulative_distances(waypoints)
        workers = min(self.max_workers, len(indices))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                (i, executor.submit(self.lookup, waypoints[i])) for i in indices
            ]
            # Collect in route order regardless of completion order
            for i, future in futures:
                point = waypoints[i]
                try:
                    data = future.result()
                except (ProviderError, requests.RequestException) as e:
                    batch.failed += 1
                    logger.debug("%s lookup failed at %.6f,%.6f: %s",
                                 type(self).__name__, point.lat, point.lng, e)
                    continue
                if data is None:
                    continue
                batch.records.append(self.build(route_key, point, distances[i], data))

        return batch


WEATHER_RULES = [
    # (keywords, risk, challenges, driver caution)
    (('rain', 'drizzle'), 6,
     ['Wet roads', 'Reduced visibility'],
     ['Reduce speed', 'Increase following distance']),
    (('storm', 'thunder'), 9,
     ['Heavy rain', 'Lightning', 'Strong winds'],
     ['Avoid travel if possible', 'Find safe shelter']),
    (('fog', 'mist'), 7,
     ['Poor visibility'],
     ['Use fog lights', 'Drive slowly']),
    (('snow',), 8,
     ['Slippery roads', 'Poor visibility'],
     ['Use chains if required', 'Drive very slowly']),
]


def classify_weather(condition: str):
    """Return (risk_score, challenges, driver_caution) for a weather condition."""
    condition = (condition or '').lower()
    for keywords, risk, challenges, caution in WEATHER_RULES:
        if any(k in condition for k in keywords):
            return risk, list(challenges), list(caution)
    return 3, [], []


def season_for(when: datetime) -> str:
    """Indian driving season for a date."""
    month = when.month
    if 3 <= month <= 5:
        return 'Summer'
    elif 6 <= month <= 9:
        return 'Monsoon'
    elif 10 <= month <= 11:
        return 'Post-Monsoon'
    return 'Winter'


class WeatherSampler(PointSampler):
    """Current weather at up to ten points along the route."""

    SAMPLES = 10

    def __init__(self, client, max_workers: int = 4,
                 clock: Callable[[], datetime] = utcnow):
        super().__init__(max_workers)
        self.client = client
        self.clock = clock

    def lookup(self, point):
        return self.client.get_weather(point.lat, point.lng)

    def build(self, route_key, point, distance_km, data):
        risk, challenges, caution = classify_weather(data.get('condition'))
        return WeatherCondition(
            route_key=route_key,
            lat=point.lat,
            lng=point.lng,
            risk_score=risk,
            distance_from_start_km=distance_km,
            condition=data.get('condition') or '',
            description=data.get('description') or '',
            season=season_for(self.clock()),
            temperature_c=data.get('temp'),
            humidity=data.get('humidity'),
            wind_speed=data.get('wind'),
            visibility_m=int(data.get('visibility') or 10000),
            challenges=challenges,
            driver_caution=caution,
        )


def classify_congestion(percentage: float):
    """Return (congestion_level, risk_score) for a congestion percentage."""
    if percentage > 50:
        return 'heavy', 8
    elif percentage > 30:
        return 'moderate', 5
    return 'free_flow', 2


class TrafficSampler(PointSampler):
    """Traffic flow at up to twenty points, never including the final waypoint."""

    SAMPLES = 20
    INCLUDE_LAST = False

    def __init__(self, client, max_workers: int = 4):
        super().__init__(max_workers)
        self.client = client

    def sample_indices(self, count):
        if count < 2:
            return []
        return super().sample_indices(count)

    def lookup(self, point):
        data = self.client.get_traffic_flow(point.lat, point.lng)
        if not data or not data.get('freeFlowSpeed'):
            return None
        return data

    def build(self, route_key, point, distance_km, data):
        free_flow = float(data['freeFlowSpeed'])
        current = float(data.get('currentSpeed') or 0.0)
        percentage = (free_flow - current) / free_flow * 100
        level, risk = classify_congestion(percentage)
        return TrafficSample(
            route_key=route_key,
            lat=point.lat,
            lng=point.lng,
            risk_score=risk,
            distance_from_start_km=distance_km,
            congestion_level=level,
            congestion_percentage=percentage,
            current_speed_kmh=current,
            free_flow_speed_kmh=free_flow,
            confidence=data.get('confidence'),
        )
