"""Sequential, rate-limited resolution of many location names."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import structlog

from cargotrack.geo.coordinates import Coordinate
from cargotrack.geo.models import SOURCE_CACHE
from cargotrack.geo.resolver import LocationResolver
from cargotrack.observability.metrics import MetricsRegistry, record_duration

LOGGER = structlog.get_logger(__name__)


def _as_list(names: object) -> List[object]:
    if names is None or isinstance(names, (str, bytes)):
        return []
    try:
        return list(names)
    except TypeError:
        return []


def unique_names(names: Optional[Iterable[object]]) -> List[str]:
    """Drop empty and non-string entries and duplicates, keeping first occurrence."""
    seen: Dict[str, None] = {}
    for name in _as_list(names):
        if isinstance(name, str) and name and name not in seen:
            seen[name] = None
    return list(seen)


class BatchResolver:
    """Resolves names one at a time; only provider calls are throttled.

    Throttling lives in the provider's RateLimiter, so cache hits never wait
    and a batch never has more than one request in flight.
    """

    def __init__(self, resolver: LocationResolver, *, metrics: Optional[MetricsRegistry] = None) -> None:
        self._resolver = resolver
        self._metrics = metrics or MetricsRegistry()

    async def resolve_all(self, names: Optional[Iterable[object]]) -> Dict[str, Coordinate]:
        """Map each resolvable name to its coordinate; unresolved names are absent."""
        requested = _as_list(names)
        pending = unique_names(requested)
        self._metrics.incr("locations_requested", len(requested))
        self._metrics.incr("locations_unique", len(pending))
        results: Dict[str, Coordinate] = {}
        if not pending:
            return results

        with record_duration(self._metrics, "batch_duration_ms", locations=len(pending)):
            for name in pending:
                resolution = await self._resolver.resolve_detailed(name)
                if resolution.source == SOURCE_CACHE:
                    self._metrics.incr("cache_hits")
                if resolution.coordinate is None:
                    self._metrics.incr("unresolved")
                    continue
                self._metrics.incr("resolved")
                results[name] = resolution.coordinate

        LOGGER.info("batch_resolved", requested=len(pending), resolved=len(results))
        return results
