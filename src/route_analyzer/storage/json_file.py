"""Directory-backed store: one JSON file per collection per route."""

import json
import logging
import os
import re
from pathlib import Path
from threading import Lock
from typing import Dict, List

from ..core.exceptions import StorageError
from .base import HazardStore

logger = logging.getLogger(__name__)


def _safe_name(route_key: str) -> str:
    return re.sub(r'[^A-Za-z0-9_.-]', '_', route_key) or '_'


class JsonFileStore(HazardStore):
    """
    Store documents under ``<root>/<collection>/<route key>.json``.

    Route keys are sanitized for use as file names.
    """

    def __init__(self, root):
        self.root = Path(root)
        self._lock = Lock()

    def _path(self, collection: str, route_key: str) -> Path:
        return self.root / collection / f"{_safe_name(route_key)}.json"

    def _read(self, path: Path) -> List[Dict]:
        if not path.exists():
            return []
        try:
            with open(path) as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read {path}", details=str(e))

    def _write(self, path: Path, documents: List[Dict]):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix('.json.tmp')
            with open(tmp, 'w') as f:
                json.dump(documents, f, indent=2, default=str)
            os.replace(tmp, path)
        except (OSError, TypeError) as e:
            raise StorageError(f"Could not write {path}", details=str(e))

    def insert_many(self, collection, documents):
        by_route = {}
        for doc in documents:
            by_route.setdefault(doc.get("routeKey", ""), []).append(doc)

        with self._lock:
            for route_key, docs in by_route.items():
                path = self._path(collection, route_key)
                self._write(path, self._read(path) + docs)
        return len(documents)

    def delete_by_route(self, collection, route_key):
        path = self._path(collection, route_key)
        with self._lock:
            existing = self._read(path)
            if path.exists():
                try:
                    path.unlink()
                except OSError as e:
                    raise StorageError(f"Could not delete {path}", details=str(e))
        return len(existing)

    def find_by_route(self, collection, route_key):
        with self._lock:
            return self._read(self._path(collection, route_key))

    def all_documents(self, collection):
        directory = self.root / collection
        if not directory.is_dir():
            return []
        documents = []
        with self._lock:
            for path in sorted(directory.glob("*.json")):
                documents.extend(self._read(path))
        return documents

    def ping(self):
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Store root %s not usable: %s", self.root, e)
            return False
        return os.access(self.root, os.W_OK)
