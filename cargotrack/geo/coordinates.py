"""Coordinate record, validation guard and explicit format conversions."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Coordinate:
    """A validated latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def _in_range(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


def is_valid_coordinate(value: object) -> bool:
    """Return True when value is a Coordinate or lat/lng mapping within range."""
    if isinstance(value, Coordinate):
        lat, lng = value.lat, value.lng
    elif isinstance(value, Mapping):
        lat, lng = value.get("lat"), value.get("lng")
    else:
        return False
    if not _is_number(lat) or not _is_number(lng):
        return False
    return _in_range(lat, lng)


def coordinate_from_mapping(value: object) -> Optional[Coordinate]:
    """Build a Coordinate from a ``{"lat": .., "lng": ..}`` mapping."""
    if not is_valid_coordinate(value):
        return None
    if isinstance(value, Coordinate):
        return value
    return Coordinate(lat=float(value["lat"]), lng=float(value["lng"]))


def coordinate_from_pair(value: object) -> Optional[Coordinate]:
    """Build a Coordinate from a ``[lat, lng]`` list or tuple."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    lat, lng = value
    if not _is_number(lat) or not _is_number(lng) or not _in_range(lat, lng):
        return None
    return Coordinate(lat=float(lat), lng=float(lng))


def coordinate_to_pair(value: object) -> Optional[List[float]]:
    """Return ``[lat, lng]`` for a valid coordinate, otherwise None."""
    coord = coordinate_from_mapping(value)
    if coord is None:
        return None
    return [coord.lat, coord.lng]
