"""Command-line entrypoints for the cargotrack location tools."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Dict, List, Optional

import orjson
from dotenv import load_dotenv

from cargotrack.geo.cache import LocationCache
from cargotrack.geo.distance import distance_km
from cargotrack.geo.service import build_cache, open_batch_resolver
from cargotrack.observability.log import configure_logging
from cargotrack.observability.metrics import MetricsRegistry
from cargotrack.settings import DEFAULT_SETTINGS_PATH, GeocodingSettings, load_geocoding_settings
from cargotrack.tracking.enrich import enrich_package
from cargotrack.tracking.models import PackageRecord

DEFAULT_LOGGING_CONFIG = Path("config/logging.yaml")


def _print_json(payload: object) -> None:
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="cargotrack", description="Shipment location tools")
    parser.add_argument("--settings", default=str(DEFAULT_SETTINGS_PATH), help="Path to settings TOML")
    parser.add_argument("--logging", default=str(DEFAULT_LOGGING_CONFIG), help="Path to logging YAML")
    parser.add_argument("--metrics", help="Write metric counters to this JSON file")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="Resolve location names to coordinates")
    resolve.add_argument("names", nargs="+", help="Free-text location names")

    distance = sub.add_parser("distance", help="Great-circle distance between two points")
    distance.add_argument("coords", nargs=4, type=float, metavar=("LAT1", "LNG1", "LAT2", "LNG2"))

    sub.add_parser("cache", help="Print the seeded location cache")

    enrich = sub.add_parser("enrich", help="Attach coordinates to a package JSON record")
    enrich.add_argument("path", help="JSON file holding one package row")

    return parser


async def run_resolve(
    names: List[str],
    settings: GeocodingSettings,
    *,
    cache: LocationCache,
    metrics: MetricsRegistry,
) -> Dict[str, Dict[str, float]]:
    async with open_batch_resolver(settings, cache=cache, metrics=metrics) as resolver:
        resolved = await resolver.resolve_all(names)
    return {name: coord.as_dict() for name, coord in resolved.items()}


async def run_enrich(
    path: Path,
    settings: GeocodingSettings,
    *,
    cache: LocationCache,
    metrics: MetricsRegistry,
) -> Dict[str, object]:
    try:
        package = PackageRecord.from_row(orjson.loads(path.read_bytes()))
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Failed to load package: {exc}")
    async with open_batch_resolver(settings, cache=cache, metrics=metrics) as resolver:
        response = await enrich_package(package, resolver)
    return response.to_payload()


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(Path(args.logging))
    try:
        settings = load_geocoding_settings(Path(args.settings))
    except ValueError as exc:
        raise SystemExit(str(exc))

    metrics = MetricsRegistry()
    cache = build_cache(settings)

    if args.command == "resolve":
        _print_json(asyncio.run(run_resolve(args.names, settings, cache=cache, metrics=metrics)))
    elif args.command == "distance":
        lat1, lng1, lat2, lng2 = args.coords
        km = distance_km({"lat": lat1, "lng": lng1}, {"lat": lat2, "lng": lng2})
        _print_json({"distance_km": round(km, 3)})
    elif args.command == "cache":
        _print_json(cache.snapshot())
    elif args.command == "enrich":
        _print_json(asyncio.run(run_enrich(Path(args.path), settings, cache=cache, metrics=metrics)))

    if args.metrics:
        metrics.export(path=Path(args.metrics))


if __name__ == "__main__":
    main()
