"""CLI commands for single-route analysis and saved results."""

import json
from pathlib import Path

from ..core.exceptions import RouteAnalyzerError, StorageError
from ..core.loaders import load_waypoints
from ..exporters import export_geojson, export_gpx
from ..hazards.models import Route
from .common import (
    EXIT_ERROR,
    EXIT_FATAL,
    EXIT_OK,
    build_analyzer,
    open_store,
    print_error,
    write_json,
)


def _route_key(args) -> str:
    if args.key:
        return args.key
    if args.depot or args.consumer:
        return Route.make_key(args.depot, args.consumer)
    return Path(args.route_file).stem


def run_analyze(args):
    """Execute single-route analysis command."""
    try:
        store = open_store(args)
    except StorageError as e:
        print_error(e)
        return EXIT_FATAL

    try:
        analyzer = build_analyzer(args, store)
        waypoints = load_waypoints(args.route_file)
    except (RouteAnalyzerError, OSError, ValueError) as e:
        print_error(e)
        return EXIT_ERROR

    route = Route.from_waypoints(
        _route_key(args),
        waypoints,
        depot_code=args.depot,
        consumer_code=args.consumer,
        customer_name=args.customer_name,
        location=args.location,
        filename=Path(args.route_file).name,
    )

    if not args.print_json:
        print("=" * 70)
        print("ROUTE HAZARD ANALYSIS")
        print("=" * 70)
        print(f"Route: {route.key} ({args.route_file})")
        print(f"Waypoints: {len(route.waypoints)}")
        print(f"Distance: {route.total_distance_km:.1f} km")
        print(f"Enhanced: {args.enhanced}")

    analysis = analyzer.analyze(route, enhanced=args.enhanced)
    document = analysis.to_dict()

    if args.output_json:
        write_json(document, args.output_json)
    if args.output_gpx:
        export_gpx(analysis, args.output_gpx, analyzer.config)
    if args.output_geojson:
        export_geojson(analysis, args.output_geojson)

    if args.print_json:
        print(json.dumps(document, indent=2, default=str))
    else:
        _print_summary(analysis)
        for path in (args.output_json, args.output_gpx, args.output_geojson):
            if path:
                print(f"✓ Wrote {path}")

    return EXIT_OK if analysis.status == "complete" else EXIT_ERROR


def _print_summary(analysis):
    print("\n" + "=" * 70)
    print("ANALYSIS RESULTS")
    print("=" * 70)
    print(f"Status: {analysis.status}")
    fields = [
        ("Sharp turns", analysis.sharp_turns),
        ("Blind spots", analysis.blind_spots),
        ("Accident-prone areas", analysis.accident_prone_areas),
        ("Road conditions", analysis.road_conditions),
        ("Network coverage samples", analysis.network_coverages),
    ]
    if analysis.enhanced:
        fields += [
            ("Emergency services", analysis.emergency_services),
            ("Eco-sensitive zones", analysis.eco_zones),
            ("Traffic samples", analysis.traffic_data),
            ("Weather samples", analysis.weather_conditions),
        ]
    for label, records in fields:
        print(f"  {label:26s}: {len(records):4d}")

    critical = [r for r in analysis.hazards() if r.risk_level == "critical"]
    if critical:
        print(f"\nCritical hazards: {len(critical)}")
        for record in critical[:10]:
            print(f"  {record.KIND:20s} {record.lat:.6f},{record.lng:.6f} "
                  f"at {record.distance_from_start_km:.2f} km")

    if analysis.errors:
        print("\nNotes:")
        for note in analysis.errors:
            print(f"  ⚠ {note}")


def run_show(args):
    """Print a saved analysis as JSON."""
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

    document = analyzer.load_analysis(args.route_key)
    if document is None:
        print_error(RouteAnalyzerError(f"Route not found: {args.route_key}"))
        return EXIT_ERROR

    print(json.dumps(document, indent=2, default=str))
    return EXIT_OK
