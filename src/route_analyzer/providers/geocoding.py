"""Mapbox reverse geocoding."""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


def format_coordinates(lat: float, lng: float) -> str:
    return f"{lat:.6f}, {lng:.6f}"


class MapboxGeocoder:
    """Reverse geocoder that falls back to a coordinate string instead of failing."""

    DEFAULT_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"

    def __init__(self, api_key: Optional[str], timeout: float = 5.0, url: str = DEFAULT_URL,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.url = url
        self.session = session or requests.Session()

    def reverse_geocode(self, lat: float, lng: float) -> str:
        if not self.api_key:
            return format_coordinates(lat, lng)

        url = f"{self.url}/{lng},{lat}.json"
        try:
            response = self.session.get(
                url, params={'access_token': self.api_key}, timeout=self.timeout
            )
            response.raise_for_status()
            features = response.json().get('features') or []
        except (requests.RequestException, ValueError) as e:
            logger.debug("Reverse geocoding failed for %.6f,%.6f: %s", lat, lng, e)
            return format_coordinates(lat, lng)

        if features and features[0].get('place_name'):
            return features[0]['place_name']
        return format_coordinates(lat, lng)
