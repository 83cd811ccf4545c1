"""Thread-safe in-memory store."""

import copy
from collections import defaultdict
from threading import Lock
from typing import Dict, List

from .base import HazardStore


class MemoryStore(HazardStore):
    def __init__(self):
        self._collections = defaultdict(list)
        self._lock = Lock()

    def insert_many(self, collection, documents):
        with self._lock:
            self._collections[collection].extend(copy.deepcopy(documents))
        return len(documents)

    def delete_by_route(self, collection, route_key):
        with self._lock:
            docs = self._collections[collection]
            kept = [d for d in docs if d.get("routeKey") != route_key]
            self._collections[collection] = kept
            return len(docs) - len(kept)

    def find_by_route(self, collection, route_key) -> List[Dict]:
        with self._lock:
            return [
                copy.deepcopy(d) for d in self._collections[collection]
                if d.get("routeKey") == route_key
            ]

    def all_documents(self, collection):
        with self._lock:
            return copy.deepcopy(self._collections[collection])

    def ping(self):
        return True
