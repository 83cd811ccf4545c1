"""OpenWeatherMap current-conditions client."""

from typing import Dict, Optional

import requests

from ..core.exceptions import ProviderError


class OpenWeatherClient:
    DEFAULT_URL = "https://api.openweathermap.org/data/2.5/weather"
    PROVIDER = "openweather"

    def __init__(self, api_key: str, timeout: float = 5.0, url: str = DEFAULT_URL,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.url = url
        self.session = session or requests.Session()

    def get_weather(self, lat: float, lng: float) -> Optional[Dict]:
        """
        Current weather at a point.

        Returns:
            Dict with temp, condition, description, humidity, wind and
            visibility, or None when the response carries no weather entry

        Raises:
            ProviderError: On network errors, timeouts or HTTP errors
        """
        params = {
            'lat': lat,
            'lon': lng,
            'appid': self.api_key,
            'units': 'metric',
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            raise ProviderError(self.PROVIDER, f"timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise ProviderError(self.PROVIDER, str(e))
        except ValueError as e:
            raise ProviderError(self.PROVIDER, f"invalid JSON response: {e}")

        weather = data.get('weather') or []
        if not weather:
            return None

        main = data.get('main') or {}
        wind = data.get('wind') or {}
        return {
            'temp': main.get('temp'),
            'condition': weather[0].get('main', ''),
            'description': weather[0].get('description', ''),
            'humidity': main.get('humidity'),
            'wind': wind.get('speed'),
            'visibility': data.get('visibility') or 10000,
        }
