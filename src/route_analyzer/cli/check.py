"""CLI command for connectivity checks."""

from ..core.config import Config
from ..core.exceptions import ConfigError, StorageError
from ..providers import build_providers
from .common import EXIT_ERROR, EXIT_FATAL, EXIT_OK, open_store, print_error


def run_check(args):
    """Check the store and remote providers."""
    try:
        open_store(args)
    except StorageError as e:
        print_error(e)
        return EXIT_FATAL
    print(f"✓ Store reachable ({args.store_dir if args.use_store else 'memory'})")

    try:
        config = Config(args.config)
    except ConfigError as e:
        print_error(e)
        return EXIT_ERROR

    providers = build_providers(config)
    ok = providers.overpass.ping()
    print(f"{'✓' if ok else '✗'} Overpass: {providers.overpass.url}")

    for name, enabled in config.enabled_providers().items():
        print(f"{'✓' if enabled else '-'} {name}: {'configured' if enabled else 'no API key'}")

    return EXIT_OK if ok else EXIT_ERROR
