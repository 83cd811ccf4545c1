"""TomTom traffic flow client."""

from typing import Dict, Optional

import requests

from ..core.exceptions import ProviderError


class TomTomTrafficClient:
    DEFAULT_URL = "https://api.tomtom.com/traffic/services/4/flowSegmentData/absolute/10/json"
    PROVIDER = "tomtom"

    def __init__(self, api_key: str, timeout: float = 5.0, url: str = DEFAULT_URL,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.url = url
        self.session = session or requests.Session()

    def get_traffic_flow(self, lat: float, lng: float) -> Optional[Dict]:
        """
        Flow segment data for the road nearest a point.

        Returns:
            Dict with currentSpeed, freeFlowSpeed and confidence, or None
            when TomTom has no segment for the point

        Raises:
            ProviderError: On network errors, timeouts or HTTP errors
        """
        params = {'point': f"{lat},{lng}", 'key': self.api_key}
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

        segment = data.get('flowSegmentData')
        if not segment:
            return None

        return {
            'currentSpeed': segment.get('currentSpeed'),
            'freeFlowSpeed': segment.get('freeFlowSpeed'),
            'confidence': segment.get('confidence'),
        }
