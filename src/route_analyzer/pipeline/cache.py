"""In-process TTL cache of route analyses."""

import time
from threading import Lock
from typing import Callable, Optional


class RouteCache:
    """
    Analyses keyed by route key and mode (``basic`` or ``enhanced``).

    Entries expire after ``ttl`` seconds and are never invalidated on content
    change. A ``ttl`` of 0 disables caching.
    """

    def __init__(self, ttl: float = 3600, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock
        self._cache = {}
        self._lock = Lock()

    @staticmethod
    def _get_cache_key(route_key: str, enhanced: bool) -> str:
        return f"{route_key}:{'enhanced' if enhanced else 'basic'}"

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, route_key: str, enhanced: bool):
        if not self.enabled:
            return None
        key = self._get_cache_key(route_key, enhanced)
        with self._lock:
            if key in self._cache:
                entry = self._cache[key]
                if self.clock() - entry['timestamp'] < self.ttl:
                    return entry['data']
                del self._cache[key]
        return None

    def set(self, route_key: str, enhanced: bool, data):
        if not self.enabled:
            return
        key = self._get_cache_key(route_key, enhanced)
        with self._lock:
            self._cache[key] = {
                'data': data,
                'timestamp': self.clock()
            }

    def invalidate(self, route_key: str, enhanced: Optional[bool] = None):
        with self._lock:
            if enhanced is not None:
                self._cache.pop(self._get_cache_key(route_key, enhanced), None)
            else:
                keys_to_delete = [k for k in self._cache if k.startswith(f"{route_key}:")]
                for k in keys_to_delete:
                    del self._cache[k]

    def __len__(self):
        with self._lock:
            return len(self._cache)
