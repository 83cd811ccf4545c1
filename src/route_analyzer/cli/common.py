"""Shared CLI setup: configuration, store and analyzer construction."""

import json
import sys

from ..core.config import Config
from ..core.exceptions import RouteAnalyzerError, StorageError
from ..hazards.criteria import HazardCriteria
from ..pipeline import RouteAnalyzer
from ..storage import JsonFileStore, MemoryStore

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FATAL = 2


def print_error(error) -> None:
    """Print a structured JSON error to stderr."""
    if isinstance(error, RouteAnalyzerError):
        payload = error.to_dict()
    else:
        payload = {"error": "internal_error", "message": str(error)}
    print(json.dumps(payload), file=sys.stderr)


def open_store(args):
    """
    Open the configured store and make sure it is reachable.

    Raises:
        StorageError: If the store does not answer a ping
    """
    if not args.use_store:
        return MemoryStore()
    store = JsonFileStore(args.store_dir)
    if not store.ping():
        raise StorageError(f"Store not reachable: {args.store_dir}")
    return store


def build_analyzer(args, store) -> RouteAnalyzer:
    config = Config(args.config)
    criteria = HazardCriteria.from_yaml(args.criteria_config)
    return RouteAnalyzer(config=config, criteria=criteria, store=store)


def write_json(document, path) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2, default=str)
