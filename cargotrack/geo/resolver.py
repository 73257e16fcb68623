"""Fallback resolution of free-text location names to coordinates."""
from __future__ import annotations

import re
from typing import List, Optional

import structlog

from cargotrack.geo.cache import LocationCache
from cargotrack.geo.coordinates import Coordinate
from cargotrack.geo.models import SOURCE_CACHE, SOURCE_PROVIDER, Resolution
from cargotrack.geo.provider import NominatimProvider
from cargotrack.observability.tracing import safe_text

LOGGER = structlog.get_logger(__name__)

MIN_QUERY_LENGTH = 3
_TOKEN_SPLIT_RE = re.compile(r"[\s,]+")


def fallback_queries(name: str) -> List[str]:
    """Return the provider queries tried for name, in order.

    The full name first, then each comma-separated segment of at least three
    characters, then the leading word when it differs from everything above.
    """
    full = name.strip()
    if not full:
        return []
    queries = [full]
    segments = [part.strip() for part in full.split(",") if part.strip()]
    if len(segments) > 1:
        for segment in segments:
            if len(segment) >= MIN_QUERY_LENGTH and segment not in queries:
                queries.append(segment)
    first_word = _TOKEN_SPLIT_RE.split(full)[0]
    if len(first_word) >= MIN_QUERY_LENGTH and first_word not in queries:
        queries.append(first_word)
    return queries


class LocationResolver:
    """Resolves one name via the cache, then the provider with fallbacks."""

    def __init__(self, *, cache: LocationCache, provider: NominatimProvider) -> None:
        self.cache = cache
        self.provider = provider

    async def resolve(self, name: Optional[str]) -> Optional[Coordinate]:
        return (await self.resolve_detailed(name)).coordinate

    async def resolve_detailed(self, name: Optional[str]) -> Resolution:
        if not name or not isinstance(name, str) or not name.strip():
            return Resolution(name=name or "")

        cached = self.cache.get(name)
        if cached is not None:
            LOGGER.debug("geocode_cache_hit", name=safe_text(name))
            return Resolution(name=name, coordinate=cached, source=SOURCE_CACHE)

        calls = 0
        for query in fallback_queries(name):
            calls += 1
            coord = await self.provider.geocode(query)
            if coord is None:
                continue
            # keyed by the full name so the next lookup is a cache hit
            self.cache.put(name, coord)
            LOGGER.info("geocode_result", name=safe_text(name), query=safe_text(query), lat=coord.lat, lng=coord.lng)
            return Resolution(name=name, coordinate=coord, source=SOURCE_PROVIDER, provider_calls=calls)

        LOGGER.warning("geocode_unresolved", name=safe_text(name), attempts=calls)
        return Resolution(name=name, provider_calls=calls)
