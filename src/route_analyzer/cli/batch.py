"""CLI command for batch analysis of a route data directory."""

from ..core.exceptions import RouteAnalyzerError, StorageError
from ..pipeline import BatchProcessor
from .common import EXIT_ERROR, EXIT_FATAL, EXIT_OK, build_analyzer, open_store, print_error, write_json


def _print_progress(run):
    print(f"  [{run.processed_routes}/{run.total_routes}] {run.current_route}")


def run_batch(args):
    """Execute batch analysis command."""
    try:
        store = open_store(args)
    except StorageError as e:
        print_error(e)
        return EXIT_FATAL

    try:
        analyzer = build_analyzer(args, store)
    except RouteAnalyzerError as e:
        print_error(e)
        return EXIT_ERROR

    print(f"Processing routes in {args.data_dir}...")
    run = BatchProcessor(analyzer).run(
        args.data_dir, enhanced=args.enhanced, on_progress=_print_progress
    )

    if args.output:
        write_json(run.to_dict(), args.output)

    if run.status != "complete":
        print_error(RouteAnalyzerError(
            "Batch run failed", details={"runId": run.run_id, "errors": run.errors}
        ))
        return EXIT_ERROR

    stats = run.statistics
    print("\n=== Batch Statistics ===")
    print(f"Run: {run.run_id}")
    print(f"Routes processed: {run.processed_routes}")
    print(f"  With coordinates:    {stats.total_with_coordinates}")
    print(f"  Without coordinates: {stats.total_without_coordinates}")
    print(f"Total waypoints: {stats.total_waypoints} (avg {stats.average_waypoints})")
    print(f"Total distance: {stats.total_distance_km:.1f} km")
    print(f"Processing time: {stats.processing_time_s:.1f} s")
    for note in run.errors:
        print(f"  ⚠ {note}")
    if args.output:
        print(f"✓ Wrote {args.output}")
    return EXIT_OK
