"""Pydantic models for geocoding provider payloads and resolution outcomes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from cargotrack.geo.coordinates import Coordinate, coordinate_from_mapping

SOURCE_CACHE = "cache"
SOURCE_PROVIDER = "provider"


class Candidate(BaseModel):
    """A single search result returned by the geocoding provider."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    lat: float
    lon: float
    display_name: str = ""
    type: Optional[str] = None
    addresstype: Optional[str] = None
    place_class: Optional[str] = Field(default=None, alias="class")
    importance: Optional[float] = None

    def coordinate(self) -> Optional[Coordinate]:
        return coordinate_from_mapping({"lat": self.lat, "lng": self.lon})


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one location name.

    ``coordinate`` is None when the name could not be resolved; no default
    coordinate is ever substituted.
    """

    name: str
    coordinate: Optional[Coordinate] = None
    source: Optional[str] = None
    provider_calls: int = 0

    @property
    def resolved(self) -> bool:
        return self.coordinate is not None
