"""Great-circle distance helpers."""
from __future__ import annotations

import math

from cargotrack.geo.coordinates import coordinate_from_mapping

EARTH_RADIUS_KM = 6371.0


def distance_km(origin: object, destination: object) -> float:
    """Return the Haversine distance in kilometres, or 0.0 for invalid input."""
    start = coordinate_from_mapping(origin)
    end = coordinate_from_mapping(destination)
    if start is None or end is None:
        return 0.0

    d_lat = math.radians(end.lat - start.lat)
    d_lng = math.radians(end.lng - start.lng)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(start.lat)) * math.cos(math.radians(end.lat)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
