"""Overpass API client for OSM road tags and POI lookups."""

import logging
from typing import Dict, Iterable, List, Optional

import requests

from ..core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class OverpassClient:
    """Thin wrapper around an Overpass interpreter endpoint."""

    DEFAULT_URL = "https://overpass-api.de/api/interpreter"
    PROVIDER = "overpass"

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def query(self, ql: str) -> Dict:
        """
        Run a raw Overpass QL query.

        Returns:
            Parsed JSON response

        Raises:
            ProviderError: On network errors, timeouts, HTTP errors or bad JSON
        """
        try:
            response = self.session.post(
                self.url,
                data={'data': ql},
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout:
            raise ProviderError(self.PROVIDER, f"timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise ProviderError(self.PROVIDER, str(e))
        except ValueError as e:
            raise ProviderError(self.PROVIDER, f"invalid JSON response: {e}")

    def query_road_tags(self, lat: float, lng: float, radius: float = 50) -> Optional[Dict[str, str]]:
        """Tags of the first highway way within ``radius`` metres, or None."""
        ql = (
            "[out:json][timeout:25];\n"
            f'way(around:{radius:g},{lat},{lng})["highway"];\n'
            "out tags;"
        )
        elements = self.query(ql).get('elements') or []
        if not elements:
            return None
        return elements[0].get('tags') or None

    def query_pois(self, bbox, categories: Dict[str, Dict[str, List[str]]],
                   element_types: Iterable[str] = ('node', 'way')) -> List[Dict]:
        """
        Query POIs matching category tag filters inside a bounding box.

        Args:
            bbox: BoundingBox (north/south/east/west)
            categories: {category: {tag_key: [values]}}
            element_types: OSM element types to include

        Returns:
            Raw Overpass elements (ways carry a ``center``)
        """
        bbox_str = f"({bbox.south},{bbox.west},{bbox.north},{bbox.east})"

        # Build query for multiple tag types
        clauses = []
        for filters in categories.values():
            for key, values in filters.items():
                for value in values:
                    for element_type in element_types:
                        clauses.append(f'  {element_type}["{key}"="{value}"]{bbox_str};')

        if not clauses:
            return []

        ql = f"[out:json][timeout:{int(self.timeout)}];\n(\n"
        ql += "\n".join(clauses)
        ql += "\n);\nout center;"

        elements = self.query(ql).get('elements') or []
        logger.debug("Overpass returned %d elements for %d clauses",
                     len(elements), len(clauses))
        return elements

    def ping(self) -> bool:
        """Check the endpoint answers a trivial query."""
        try:
            self.query('[out:json];node(0,0,0,0);out;')
        except ProviderError as e:
            logger.warning("Overpass not reachable: %s", e)
            return False
        return True
