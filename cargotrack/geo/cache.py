"""In-process cache of known hub coordinates and learned geocoding results."""
from __future__ import annotations

from typing import Dict, Iterator, Optional

import structlog

from cargotrack.geo.coordinates import Coordinate, coordinate_from_mapping

LOGGER = structlog.get_logger(__name__)

MATCH_SUBSTRING = "substring"
MATCH_EXACT = "exact"
MATCH_STRATEGIES = (MATCH_SUBSTRING, MATCH_EXACT)

# Major logistics hubs, checked in this order.
HUB_COORDINATES: Dict[str, Coordinate] = {
    "london": Coordinate(51.5074, -0.1278),
    "paris": Coordinate(48.8566, 2.3522),
    "new york": Coordinate(40.7128, -74.0060),
    "tokyo": Coordinate(35.6762, 139.6503),
    "singapore": Coordinate(1.3521, 103.8198),
    "dubai": Coordinate(25.2048, 55.2708),
    "shanghai": Coordinate(31.2304, 121.4737),
    "hong kong": Coordinate(22.3193, 114.1694),
    "amsterdam": Coordinate(52.3676, 4.9041),
    "frankfurt": Coordinate(50.1109, 8.6821),
    "los angeles": Coordinate(34.0522, -118.2437),
    "chicago": Coordinate(41.8781, -87.6298),
    "toronto": Coordinate(43.6532, -79.3832),
    "sydney": Coordinate(-33.8688, 151.2093),
    "mumbai": Coordinate(19.0760, 72.8777),
    "bangkok": Coordinate(13.7563, 100.5018),
}


def normalise_name(name: object) -> str:
    """Lower-case and trim a location name; non-strings normalise to ''."""
    if not isinstance(name, str):
        return ""
    return name.strip().lower()


class LocationCache:
    """Maps normalised location keys to coordinates.

    The default ``substring`` strategy returns the first entry whose key is
    contained in the looked-up name, or which contains it. That lets
    "New York, NY" hit the "new york" hub, but it also sends
    "London, Ontario" to London, UK. Use the ``exact`` strategy where that
    ambiguity matters.

    Seeded hubs are never evicted. When ``max_entries`` is set, the oldest
    learned entries are dropped once the cache grows past it.
    """

    def __init__(
        self,
        *,
        seed: Optional[Dict[str, Coordinate]] = None,
        match_strategy: str = MATCH_SUBSTRING,
        max_entries: Optional[int] = None,
    ) -> None:
        if match_strategy not in MATCH_STRATEGIES:
            raise ValueError(f"Unknown match strategy: {match_strategy}")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        source = HUB_COORDINATES if seed is None else seed
        self._seed = {normalise_name(key): coord for key, coord in source.items()}
        self._match_strategy = match_strategy
        self._max_entries = max_entries
        self._entries: Dict[str, Coordinate] = {}
        self.reset()

    @property
    def match_strategy(self) -> str:
        return self._match_strategy

    def reset(self) -> None:
        """Drop learned entries and restore the seeded hubs."""
        self._entries = dict(self._seed)

    def get(self, name: object) -> Optional[Coordinate]:
        """Return the cached coordinate matching name, or None."""
        normalised = normalise_name(name)
        if not normalised:
            return None
        if self._match_strategy == MATCH_EXACT:
            return self._entries.get(normalised)
        for key, coord in self._entries.items():
            if key in normalised or normalised in key:
                return coord
        return None

    def put(self, name: object, coord: object) -> bool:
        """Store coord under the normalised name; False when either is invalid."""
        key = normalise_name(name)
        validated = coordinate_from_mapping(coord)
        if not key or validated is None:
            LOGGER.debug("cache_put_rejected", name=name)
            return False
        if self._max_entries is not None and key not in self._seed:
            # refresh recency for bounded caches
            self._entries.pop(key, None)
        self._entries[key] = validated
        self._evict()
        return True

    def _evict(self) -> None:
        if self._max_entries is None:
            return
        learned = [key for key in self._entries if key not in self._seed]
        capacity = max(self._max_entries - len(self._seed), 1)
        for key in learned[:max(len(learned) - capacity, 0)]:
            del self._entries[key]
            LOGGER.debug("cache_evicted", key=key)

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Return a JSON-friendly copy of the cache."""
        return {key: coord.as_dict() for key, coord in self._entries.items()}

    def __contains__(self, name: object) -> bool:
        return normalise_name(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
