"""Network-coverage sampling along a route.

No signal-strength data source is integrated yet. The default provider
simulates coverage: 80% of samples fall in the "normal" buckets (2-4 bars),
20% in the "remote" buckets (0-1 bars). Swap in a real provider by subclassing
``CoverageProvider``.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.geo import cumulative_distances
from .criteria import HazardCriteria, stride
from .models import NetworkCoverage, Waypoint


@dataclass
class CoverageReading:
    signal_strength: int  # 0 (no signal) to 4 bars
    providers: List[str] = field(default_factory=list)


class CoverageProvider(ABC):
    """Signal-strength source for a single waypoint."""

    @abstractmethod
    def sample(self, waypoint: Waypoint) -> CoverageReading:
        pass


class SimulatedCoverageProvider(CoverageProvider):
    """Weighted random coverage model."""

    REMOTE_PROBABILITY = 0.2
    PROVIDERS = ['Airtel', 'Jio', 'Vi']

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def sample(self, waypoint):
        is_remote = self.rng.random() < self.REMOTE_PROBABILITY
        if is_remote:
            strength = self.rng.randrange(2)
        else:
            strength = self.rng.randrange(3) + 2
        return CoverageReading(signal_strength=strength, providers=list(self.PROVIDERS))


class NetworkCoverageSampler:
    """Build coverage records at evenly spaced samples."""

    def __init__(
        self,
        provider: Optional[CoverageProvider] = None,
        criteria: Optional[HazardCriteria] = None,
    ):
        self.provider = provider or SimulatedCoverageProvider()
        self.criteria = criteria or HazardCriteria()

    def sample(self, route_key: str, waypoints: Sequence[Waypoint]) -> List[NetworkCoverage]:
        step = stride(len(waypoints), self.criteria.network_coverage['samples'])
        distances = cumulative_distances(waypoints)
        coverages = []

        for i in range(0, len(waypoints), step):
            point = waypoints[i]
            reading = self.provider.sample(point)
            strength = max(0, min(4, int(reading.signal_strength)))
            coverages.append(NetworkCoverage(
                route_key=route_key,
                lat=point.lat,
                lng=point.lng,
                risk_score=self.criteria.coverage_risk_score(strength),
                distance_from_start_km=distances[i],
                signal_strength=strength,
                is_dead_zone=strength == 0,
                signal_category=signal_category(strength),
                communication_risk=communication_risk(strength),
                providers=reading.providers,
            ))

        return coverages


def signal_category(strength: int) -> str:
    if strength == 0:
        return 'no_signal'
    elif strength <= 2:
        return 'weak'
    return 'good'


def communication_risk(strength: int) -> str:
    if strength == 0:
        return 'high'
    elif strength <= 2:
        return 'medium'
    return 'low'
