"""Tests for the remote provider clients. No network access: sessions are mocked."""

from unittest.mock import MagicMock

import pytest
import requests

from route_analyzer.core.config import Config
from route_analyzer.core.exceptions import ProviderError
from route_analyzer.hazards.models import BoundingBox
from route_analyzer.providers import (
    MapboxGeocoder,
    OpenWeatherClient,
    OverpassClient,
    TomTomTrafficClient,
    build_providers,
)


def mock_session(payload=None, error=None, status_error=None):
    session = MagicMock()
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    for method in (session.get, session.post):
        if error is not None:
            method.side_effect = error
        else:
            method.return_value = response
    return session


class TestOverpassClient:
    def test_road_tags_first_way(self):
        session = mock_session({'elements': [
            {'type': 'way', 'tags': {'highway': 'primary', 'surface': 'asphalt'}},
            {'type': 'way', 'tags': {'highway': 'service'}},
        ]})
        client = OverpassClient("http://overpass.test", timeout=30, session=session)
        assert client.query_road_tags(10.0, 76.0, 50) == {'highway': 'primary', 'surface': 'asphalt'}

        _, kwargs = session.post.call_args
        assert kwargs['timeout'] == 30
        assert 'way(around:50,10.0,76.0)["highway"]' in kwargs['data']['data']

    def test_road_tags_empty(self):
        client = OverpassClient(session=mock_session({'elements': []}))
        assert client.query_road_tags(10.0, 76.0) is None

    def test_query_pois_builds_clauses(self):
        session = mock_session({'elements': [{'type': 'node', 'lat': 1, 'lon': 2}]})
        client = OverpassClient(session=session)
        bbox = BoundingBox(north=10.1, south=9.9, east=76.1, west=75.9)
        elements = client.query_pois(bbox, {
            'hospital': {'amenity': ['hospital']},
            'wood': {'natural': ['wood']},
        })
        assert len(elements) == 1

        ql = session.post.call_args[1]['data']['data']
        assert 'node["amenity"="hospital"](9.9,75.9,10.1,76.1);' in ql
        assert 'way["natural"="wood"](9.9,75.9,10.1,76.1);' in ql
        assert ql.strip().endswith('out center;')

    def test_query_pois_way_only(self):
        session = mock_session({'elements': []})
        client = OverpassClient(session=session)
        bbox = BoundingBox(north=1, south=0, east=1, west=0)
        client.query_pois(bbox, {'park': {'boundary': ['national_park']}}, element_types=('way',))
        ql = session.post.call_args[1]['data']['data']
        assert 'node[' not in ql

    def test_no_categories_skips_request(self):
        session = mock_session({'elements': []})
        client = OverpassClient(session=session)
        assert client.query_pois(BoundingBox(1, 0, 1, 0), {}) == []
        session.post.assert_not_called()

    @pytest.mark.parametrize("kwargs", [
        {'error': requests.Timeout()},
        {'error': requests.ConnectionError("refused")},
        {'payload': {}, 'status_error': requests.HTTPError("504 Gateway Timeout")},
    ])
    def test_failures_raise_provider_error(self, kwargs):
        client = OverpassClient(session=mock_session(**kwargs))
        with pytest.raises(ProviderError) as exc:
            client.query_road_tags(10.0, 76.0)
        assert exc.value.provider == 'overpass'
        assert exc.value.to_dict()['error'] == 'provider_error'

    def test_invalid_json(self):
        session = mock_session()
        session.post.return_value.json.side_effect = ValueError("not json")
        with pytest.raises(ProviderError):
            OverpassClient(session=session).query('[out:json];')

    def test_ping(self):
        assert OverpassClient(session=mock_session({'elements': []})).ping() is True
        assert OverpassClient(session=mock_session(error=requests.Timeout())).ping() is False


class TestOpenWeatherClient:
    def test_parses_payload(self):
        session = mock_session({
            'weather': [{'main': 'Rain', 'description': 'light rain'}],
            'main': {'temp': 21.3, 'humidity': 88},
            'wind': {'speed': 4.1},
        })
        client = OpenWeatherClient("key", session=session)
        weather = client.get_weather(10.0, 76.0)
        assert weather == {
            'temp': 21.3,
            'condition': 'Rain',
            'description': 'light rain',
            'humidity': 88,
            'wind': 4.1,
            'visibility': 10000,
        }
        _, kwargs = session.get.call_args
        assert kwargs['params']['units'] == 'metric'
        assert kwargs['params']['appid'] == 'key'
        assert kwargs['timeout'] == 5.0

    def test_no_weather_entry(self):
        client = OpenWeatherClient("key", session=mock_session({'weather': []}))
        assert client.get_weather(10.0, 76.0) is None

    def test_timeout(self):
        client = OpenWeatherClient("key", session=mock_session(error=requests.Timeout()))
        with pytest.raises(ProviderError) as exc:
            client.get_weather(10.0, 76.0)
        assert "timed out" in str(exc.value)


class TestTomTomTrafficClient:
    def test_parses_flow(self):
        session = mock_session({'flowSegmentData': {
            'currentSpeed': 25, 'freeFlowSpeed': 50, 'confidence': 0.8, 'frc': 'FRC2'
        }})
        client = TomTomTrafficClient("key", session=session)
        assert client.get_traffic_flow(10.0, 76.0) == {
            'currentSpeed': 25, 'freeFlowSpeed': 50, 'confidence': 0.8
        }
        assert session.get.call_args[1]['params']['point'] == "10.0,76.0"

    def test_no_segment(self):
        client = TomTomTrafficClient("key", session=mock_session({}))
        assert client.get_traffic_flow(10.0, 76.0) is None

    def test_http_error(self):
        session = mock_session({}, status_error=requests.HTTPError("403 Forbidden"))
        with pytest.raises(ProviderError):
            TomTomTrafficClient("key", session=session).get_traffic_flow(10.0, 76.0)


class TestMapboxGeocoder:
    def test_place_name(self):
        session = mock_session({'features': [{'place_name': 'Palakkad, Kerala, India'}]})
        geocoder = MapboxGeocoder("token", session=session)
        assert geocoder.reverse_geocode(10.0, 76.0) == 'Palakkad, Kerala, India'
        url = session.get.call_args[0][0]
        assert url.endswith("/76.0,10.0.json")

    def test_without_key(self):
        session = mock_session()
        assert MapboxGeocoder(None, session=session).reverse_geocode(10.0, 76.5) == \
            "10.000000, 76.500000"
        session.get.assert_not_called()

    def test_failure_falls_back(self):
        geocoder = MapboxGeocoder("token", session=mock_session(error=requests.Timeout()))
        assert geocoder.reverse_geocode(10.0, 76.0) == "10.000000, 76.000000"

    def test_no_features(self):
        geocoder = MapboxGeocoder("token", session=mock_session({'features': []}))
        assert geocoder.reverse_geocode(10.0, 76.0) == "10.000000, 76.000000"


class TestBuildProviders:
    def test_without_keys(self):
        providers = build_providers(Config(environ={}))
        assert providers.overpass is not None
        assert providers.weather is None
        assert providers.traffic is None
        assert providers.geocoder is not None

    def test_with_keys(self):
        config = Config(environ={
            'OPENWEATHER_API_KEY': 'w',
            'TOMTOM_API_KEY': 't',
            'OVERPASS_API_URL': 'http://overpass.local/api',
        })
        providers = build_providers(config)
        assert providers.weather.api_key == 'w'
        assert providers.traffic.api_key == 't'
        assert providers.overpass.url == 'http://overpass.local/api'
        assert providers.overpass.timeout == 30.0
