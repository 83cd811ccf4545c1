"""Command-line interface for the route analyzer."""

import os
import sys
import argparse
import logging

from dotenv import load_dotenv


def _add_common_options(parser):
    parser.add_argument(
        "--config",
        help="Path to route_analyzer.ini (default: built-in settings)"
    )
    parser.add_argument(
        "--criteria-config",
        default="config/hazard_criteria.yaml",
        help="Path to hazard criteria config (default: config/hazard_criteria.yaml)"
    )
    parser.add_argument(
        "--store-dir",
        default="data/store",
        help="Directory for saved analyses (default: data/store)"
    )
    parser.add_argument(
        "--no-store",
        dest="use_store",
        action="store_false",
        help="Keep results in memory only"
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="route-analyzer",
        description="Analyze vehicle routes for driving hazards"
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "WARNING"),
        help="Logging level (default: $LOG_LEVEL or WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze subcommand
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze one route file"
    )
    analyze_parser.add_argument(
        "route_file",
        help="Route file (.gpx, .csv, .xlsx)"
    )
    analyze_parser.add_argument(
        "--key",
        help="Route key (default: DEPOT_CONSUMER or the file name)"
    )
    analyze_parser.add_argument("--depot", default="", help="Depot (BU) code")
    analyze_parser.add_argument("--consumer", default="", help="Consumer code")
    analyze_parser.add_argument("--customer-name", default="", help="Customer name")
    analyze_parser.add_argument("--location", default="", help="Customer location")
    analyze_parser.add_argument(
        "--enhanced",
        action="store_true",
        help="Also query weather, traffic, emergency services and eco zones"
    )
    analyze_parser.add_argument(
        "--output-json",
        help="Write the analysis document to this file"
    )
    analyze_parser.add_argument(
        "--output-gpx",
        help="Write route and hazards as Garmin GPX"
    )
    analyze_parser.add_argument(
        "--output-geojson",
        help="Write route and hazards as GeoJSON"
    )
    analyze_parser.add_argument(
        "--json",
        dest="print_json",
        action="store_true",
        help="Print the analysis document to stdout"
    )
    _add_common_options(analyze_parser)

    # Batch subcommand
    batch_parser = subparsers.add_parser(
        "batch",
        help="Analyze every route listed in the index CSVs of a directory"
    )
    batch_parser.add_argument(
        "data_dir",
        help="Directory with index CSVs and route files"
    )
    batch_parser.add_argument(
        "--enhanced",
        action="store_true",
        help="Also run third-party enrichment for every route"
    )
    batch_parser.add_argument(
        "--output",
        help="Write the batch report as JSON"
    )
    _add_common_options(batch_parser)

    # Show subcommand
    show_parser = subparsers.add_parser(
        "show",
        help="Print a saved analysis"
    )
    show_parser.add_argument("route_key", help="Route key")
    _add_common_options(show_parser)

    # Check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check store and provider connectivity"
    )
    _add_common_options(check_parser)

    return parser


def main(argv=None):
    """Main CLI entry point with subcommands."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Route to appropriate subcommand
    if args.command == "analyze":
        from .analyze import run_analyze
        return run_analyze(args)
    elif args.command == "batch":
        from .batch import run_batch
        return run_batch(args)
    elif args.command == "show":
        from .analyze import run_show
        return run_show(args)
    elif args.command == "check":
        from .check import run_check
        return run_check(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
