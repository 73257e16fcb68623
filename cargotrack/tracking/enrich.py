"""Attach coordinates to a package's history for map display."""
from __future__ import annotations

from typing import Dict, List

import structlog

from cargotrack.geo.batch import BatchResolver
from cargotrack.geo.coordinates import Coordinate
from cargotrack.observability.tracing import clear_context, set_context
from cargotrack.tracking.models import PackageRecord, TrackingResponse

LOGGER = structlog.get_logger(__name__)


def collect_locations(package: PackageRecord) -> List[str]:
    """Distinct history locations in order, then the current location."""
    locations: List[str] = []
    for entry in package.history:
        if isinstance(entry.location, str) and entry.location and entry.location not in locations:
            locations.append(entry.location)
    if isinstance(package.location, str) and package.location and package.location not in locations:
        locations.append(package.location)
    return locations


def _lookup(mapping: Dict[str, Coordinate], name: object):
    if not isinstance(name, str):
        return None
    coord = mapping.get(name)
    return coord.as_dict() if coord is not None else None


async def enrich_package(package: PackageRecord, resolver: BatchResolver) -> TrackingResponse:
    """Resolve every location of the package and merge the coordinates in."""
    set_context(tracking_number=package.tracking_number)
    try:
        locations = collect_locations(package)
        coordinates = await resolver.resolve_all(locations) if locations else {}
        history = [
            {**entry.model_dump(), "coordinates": _lookup(coordinates, entry.location)}
            for entry in package.history
        ]
        LOGGER.info(
            "package_enriched",
            locations=len(locations),
            resolved=len(coordinates),
        )
        return TrackingResponse(
            tracking_number=package.tracking_number,
            sender=package.sender,
            receiver=package.receiver,
            shipment_info=package.shipment_info,
            status=package.status,
            location=package.location,
            coordinates=_lookup(coordinates, package.location),
            history=history,
        )
    finally:
        clear_context()
