"""Remote data providers used by the analyzer."""

from dataclasses import dataclass
from typing import Optional

from .overpass import OverpassClient
from .weather import OpenWeatherClient
from .traffic import TomTomTrafficClient
from .geocoding import MapboxGeocoder, format_coordinates


@dataclass
class Providers:
    """Bundle of provider clients. Unconfigured optional clients are None."""

    overpass: Optional[OverpassClient] = None
    weather: Optional[OpenWeatherClient] = None
    traffic: Optional[TomTomTrafficClient] = None
    geocoder: Optional[MapboxGeocoder] = None


def build_providers(config) -> Providers:
    """
    Build provider clients from configuration.

    Weather and traffic clients are only created when an API key is set.
    The geocoder always exists and falls back to coordinates without a key.
    """
    weather_key = config.get_api_key("weather")
    traffic_key = config.get_api_key("traffic")

    return Providers(
        overpass=OverpassClient(
            url=config.get_url("overpass"),
            timeout=config.get_timeout("overpass"),
        ),
        weather=OpenWeatherClient(
            weather_key,
            timeout=config.get_timeout("weather"),
            url=config.get_url("weather"),
        ) if weather_key else None,
        traffic=TomTomTrafficClient(
            traffic_key,
            timeout=config.get_timeout("traffic"),
            url=config.get_url("traffic"),
        ) if traffic_key else None,
        geocoder=MapboxGeocoder(
            config.get_api_key("geocoding"),
            timeout=config.get_timeout("geocoding"),
            url=config.get_url("geocoding"),
        ),
    )


__all__ = [
    "Providers",
    "build_providers",
    "OverpassClient",
    "OpenWeatherClient",
    "TomTomTrafficClient",
    "MapboxGeocoder",
    "format_coordinates",
]
