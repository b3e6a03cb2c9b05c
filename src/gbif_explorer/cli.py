"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import sys

from gbif_explorer import __version__
from gbif_explorer.cache import ResponseCache
from gbif_explorer.config import get_settings
from gbif_explorer.datasources.gbif import (
    GbifApiError,
    GbifClient,
    fetch_temporal_facets,
    occurrence_image_urls,
    search_species_by_vernacular,
    suggest_species,
)
from gbif_explorer.datasources.imports import ImportParseError
from gbif_explorer.datasources.places import PlaceSearchError, search_places
from gbif_explorer.flows.export import export_occurrences, resolve_bounds
from gbif_explorer.reference import CONTINENTS, IUCN_CATEGORIES, REGIONS, TAXON_CLASS_KEYS
from gbif_explorer.renderers import EXPORT_FORMATS
from gbif_explorer.schemas import OccurrenceFilters
from gbif_explorer.services.http import create_session
from gbif_explorer.services.logging import setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="gbif-explorer",
        description="Explore, filter and export GBIF biodiversity occurrences",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")
    subparsers.add_parser("regions", help="List predefined regions")

    suggest_parser = subparsers.add_parser("suggest", help="Suggest species by name")
    suggest_parser.add_argument("query", help="Scientific name prefix (or common name with --vernacular)")
    suggest_parser.add_argument("--limit", type=int, default=10, help="Maximum results (default: 10)")
    suggest_parser.add_argument(
        "--vernacular",
        action="store_true",
        help="Search common (vernacular) names instead of scientific names",
    )

    places_parser = subparsers.add_parser("places", help="Search places and show their bounds")
    places_parser.add_argument("query", help="Place name")

    timeline_parser = subparsers.add_parser(
        "timeline", help="Occurrence counts per year (and month) for a region"
    )
    timeline_where = timeline_parser.add_mutually_exclusive_group(required=True)
    timeline_where.add_argument("--region", help="Predefined region id (see 'regions')")
    timeline_where.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        metavar=("WEST", "SOUTH", "EAST", "NORTH"),
        help="Bounding box in degrees",
    )
    timeline_parser.add_argument(
        "--taxon-key", type=int, action="append", dest="taxon_keys", help="GBIF taxon key (repeatable)"
    )
    _add_taxon_group_argument(timeline_parser)
    timeline_parser.add_argument("--months", action="store_true", help="Also count by month")

    images_parser = subparsers.add_parser("images", help="Show image URLs for an occurrence")
    images_parser.add_argument("key", type=int, help="GBIF occurrence key")

    export_parser = subparsers.add_parser("export", help="Fetch occurrences and write export files")
    where = export_parser.add_mutually_exclusive_group()
    where.add_argument("--region", help="Predefined region id (see 'regions')")
    where.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        metavar=("WEST", "SOUTH", "EAST", "NORTH"),
        help="Bounding box in degrees",
    )
    export_parser.add_argument(
        "--taxon-key",
        type=int,
        action="append",
        dest="taxon_keys",
        help="GBIF taxon key (repeatable)",
    )
    _add_taxon_group_argument(export_parser)
    export_parser.add_argument("--limit", type=int, default=None, help="Maximum records to fetch")
    export_parser.add_argument(
        "--import",
        action="append",
        dest="imports",
        metavar="FILE",
        help="CSV, JSON or ZIP file of extra occurrences (repeatable)",
    )
    export_parser.add_argument("--year", type=int, default=None, help="Only export this year")
    export_parser.add_argument("--month", type=int, default=None, help="Only export this month (needs --year)")
    export_parser.add_argument("--country", default=None, help="ISO 3166-1 alpha-2 country code")
    export_parser.add_argument(
        "--continent", default=None, choices=CONTINENTS, help="GBIF continent (e.g. EUROPE)"
    )
    export_parser.add_argument(
        "--iucn", default=None, choices=IUCN_CATEGORIES, help="IUCN Red List category (e.g. EN)"
    )
    export_parser.add_argument("--out", default="exports", help="Output directory (default: exports)")
    export_parser.add_argument(
        "--format",
        action="append",
        dest="formats",
        choices=sorted(EXPORT_FORMATS),
        help="Export format (repeatable, default: geojson and csv)",
    )

    return parser


def _add_taxon_group_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--taxon-group",
        action="append",
        dest="taxon_groups",
        choices=sorted(TAXON_CLASS_KEYS),
        help="Preset taxon group such as birds or mammals (repeatable)",
    )


def _taxon_keys(args: argparse.Namespace) -> list[int]:
    """Explicit --taxon-key values followed by the keys of any --taxon-group presets."""
    keys = list(args.taxon_keys or [])
    for group in args.taxon_groups or []:
        if TAXON_CLASS_KEYS[group] not in keys:
            keys.append(TAXON_CLASS_KEYS[group])
    return keys


def _client() -> GbifClient:
    return GbifClient.from_settings(get_settings(), ResponseCache())


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"GBIF API: {settings.gbif_api_base}")
    return 0


def cmd_regions(_args: argparse.Namespace) -> int:
    """Handle the 'regions' command."""
    for region in REGIONS:
        b = region.bounds
        print(f"{region.id:<15} {region.name:<15} W{b.west} S{b.south} E{b.east} N{b.north}")
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    """Handle the 'suggest' command."""
    client = _client()
    try:
        if args.vernacular:
            results = search_species_by_vernacular(client, args.query, limit=args.limit)
        else:
            results = suggest_species(client, args.query, limit=args.limit)
    except GbifApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if not results:
        print("No matches.")
        return 0
    for item in results:
        key = item.get("nubKey") or item.get("key")
        name = item.get("scientificName") or item.get("canonicalName", "")
        rank = item.get("rank", "")
        print(f"{key}\t{name}\t{rank}")
    return 0


def cmd_places(args: argparse.Namespace) -> int:
    """Handle the 'places' command."""
    settings = get_settings()
    session = create_session(timeout=settings.request_timeout, user_agent=settings.user_agent)
    try:
        places = search_places(args.query, session=session, url=settings.nominatim_url)
    except PlaceSearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not places:
        print("No places found.")
        return 0
    for place in places:
        west, south, east, north = place.bounds.as_bbox()
        print(f"{place.display_name}\n    --bbox {west} {south} {east} {north}")
    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    """Handle the 'timeline' command: year/month facet counts."""
    try:
        bounds, region_name = resolve_bounds(args.region, args.bbox)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if bounds is None:
        print("Error: give --region or --bbox", file=sys.stderr)
        return 1

    filters = OccurrenceFilters(taxon_keys=tuple(_taxon_keys(args)))
    try:
        facets = fetch_temporal_facets(_client(), bounds, filters, facet_month=args.months)
    except GbifApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(f"{region_name}: {facets.total_count} occurrences")
    for year, count in sorted(facets.years.items()):
        print(f"{year}\t{count}")
    if args.months:
        print("Month\tCount")
        for month, count in sorted(facets.months.items()):
            print(f"{month}\t{count}")
    return 0


def cmd_images(args: argparse.Namespace) -> int:
    """Handle the 'images' command."""
    try:
        urls = occurrence_image_urls(_client(), args.key)
    except (ValueError, GbifApiError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for url in urls:
        print(url)
    if not urls:
        print("No images.")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Handle the 'export' command: run the export flow."""
    if args.month is not None and args.year is None:
        print("Error: --month requires --year", file=sys.stderr)
        return 1
    taxon_keys = _taxon_keys(args)
    if not taxon_keys and not args.imports:
        print("Error: give at least one --taxon-key, --taxon-group or --import", file=sys.stderr)
        return 1

    try:
        result = export_occurrences(
            region=args.region,
            bbox=args.bbox,
            taxon_keys=taxon_keys,
            limit=args.limit,
            imports=args.imports,
            year=args.year,
            month=args.month,
            country=args.country,
            continent=args.continent,
            iucn_red_list_category=args.iucn,
            out_dir=args.out,
            formats=args.formats,
        )
    except (GbifApiError, ImportParseError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for name, path in result["outputs"].items():
        print(f"{name}: {path}")
    print(f"Exported {result['exported']} records.")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    settings = get_settings()
    setup_logging("DEBUG" if args.debug or settings.debug else settings.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "regions": cmd_regions,
        "suggest": cmd_suggest,
        "places": cmd_places,
        "timeline": cmd_timeline,
        "images": cmd_images,
        "export": cmd_export,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
