import threading

import pytest

from route_analyzer.core.config import Config
from route_analyzer.core.exceptions import ProviderError
from route_analyzer.hazards import CoverageProvider, CoverageReading, HazardCriteria
from route_analyzer.hazards.models import Route, Waypoint
from route_analyzer.pipeline import RouteAnalyzer, RouteCache
from route_analyzer.providers import Providers
from route_analyzer.storage import MemoryStore


def make_waypoints(coords):
    return [Waypoint(lat=lat, lng=lng, sequence_id=i) for i, (lat, lng) in enumerate(coords)]


# East for two steps, then north for two steps: one left turn at index 2.
L_ROUTE = [
    (10.0, 76.0),
    (10.0, 76.005),
    (10.0, 76.01),
    (10.005, 76.01),
    (10.01, 76.01),
]

STRAIGHT_ROUTE = [(10.0, 76.0 + i * 0.001) for i in range(30)]


class FakeOverpass:
    """Overpass stand-in returning canned tags and POI elements."""

    url = "http://overpass.test/api/interpreter"

    def __init__(self, road_tags=None, elements=None, fail_road=None, reachable=True):
        self.road_tags = road_tags
        self.elements = elements or []
        self.fail_road = fail_road
        self.reachable = reachable
        self.poi_calls = []
        self.road_calls = 0
        self._lock = threading.Lock()

    def query_road_tags(self, lat, lng, radius=50):
        with self._lock:
            self.road_calls += 1
        if self.fail_road is not None:
            raise self.fail_road
        return dict(self.road_tags) if self.road_tags else None

    def query_pois(self, bbox, categories, element_types=('node', 'way')):
        self.poi_calls.append((bbox, categories, tuple(element_types)))
        return list(self.elements)

    def ping(self):
        return self.reachable


class FakeWeather:
    def __init__(self, condition="Clear", fail_at=()):
        self.condition = condition
        self.fail_at = set(fail_at)
        self.calls = 0
        self._lock = threading.Lock()

    def get_weather(self, lat, lng):
        with self._lock:
            self.calls += 1
        if (lat, lng) in self.fail_at:
            raise ProviderError("openweather", "timed out after 5s")
        return {
            'temp': 24.5,
            'condition': self.condition,
            'description': self.condition.lower(),
            'humidity': 70,
            'wind': 3.2,
            'visibility': 8000,
        }


class FakeTraffic:
    def __init__(self, current=30.0, free_flow=60.0):
        self.current = current
        self.free_flow = free_flow
        self.calls = 0

    def get_traffic_flow(self, lat, lng):
        self.calls += 1
        return {
            'currentSpeed': self.current,
            'freeFlowSpeed': self.free_flow,
            'confidence': 0.9,
        }


class FakeGeocoder:
    def reverse_geocode(self, lat, lng):
        return f"Near {lat:.2f},{lng:.2f}"


class FixedCoverage(CoverageProvider):
    def __init__(self, strength=3):
        self.strength = strength

    def sample(self, waypoint):
        return CoverageReading(signal_strength=self.strength, providers=['Jio'])


@pytest.fixture
def l_waypoints():
    return make_waypoints(L_ROUTE)


@pytest.fixture
def l_route():
    return Route.from_waypoints("D01_42", make_waypoints(L_ROUTE),
                                depot_code="D01", consumer_code="42")


@pytest.fixture
def straight_route():
    return Route.from_waypoints("STRAIGHT", make_waypoints(STRAIGHT_ROUTE))


@pytest.fixture
def criteria():
    return HazardCriteria()


@pytest.fixture
def config():
    return Config(environ={})


@pytest.fixture
def gravel_overpass():
    return FakeOverpass(road_tags={'highway': 'track', 'surface': 'gravel', 'lanes': '1'})


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def make_analyzer(config, criteria, store, gravel_overpass):
    """Build an analyzer wired to fakes; keyword arguments override the defaults."""

    def _make(**overrides):
        providers = overrides.pop('providers', None) or Providers(
            overpass=gravel_overpass,
            geocoder=FakeGeocoder(),
        )
        options = dict(
            providers=providers,
            criteria=criteria,
            config=config,
            store=store,
            cache=RouteCache(ttl=3600),
            coverage_provider=FixedCoverage(3),
        )
        options.update(overrides)
        return RouteAnalyzer(**options)

    return _make
