"""Wiring of cache, limiter, provider and resolvers from settings."""
from __future__ import annotations

import contextlib
from typing import AsyncIterator, Optional

import httpx

from cargotrack.geo.batch import BatchResolver
from cargotrack.geo.cache import LocationCache
from cargotrack.geo.provider import NominatimProvider, create_geocoder_client
from cargotrack.geo.resolver import LocationResolver
from cargotrack.geo.throttle import RateLimiter
from cargotrack.observability.metrics import MetricsRegistry
from cargotrack.settings import GeocodingSettings


def build_cache(settings: GeocodingSettings) -> LocationCache:
    return LocationCache(
        match_strategy=settings.match_strategy,
        max_entries=settings.max_cache_entries,
    )


def build_batch_resolver(
    settings: GeocodingSettings,
    *,
    client: httpx.AsyncClient,
    cache: LocationCache,
    metrics: MetricsRegistry,
    limiter: Optional[RateLimiter] = None,
) -> BatchResolver:
    """Assemble a BatchResolver around an existing HTTP client."""
    provider = NominatimProvider(
        client,
        endpoint=settings.endpoint,
        result_limit=settings.result_limit,
        timeout=settings.timeout_seconds,
        limiter=limiter or RateLimiter(settings.min_interval_seconds),
        metrics=metrics,
    )
    resolver = LocationResolver(cache=cache, provider=provider)
    return BatchResolver(resolver, metrics=metrics)


@contextlib.asynccontextmanager
async def open_batch_resolver(
    settings: GeocodingSettings,
    *,
    cache: LocationCache,
    metrics: MetricsRegistry,
) -> AsyncIterator[BatchResolver]:
    """Yield a BatchResolver whose HTTP client lives for the context."""
    async with create_geocoder_client(user_agent=settings.user_agent, timeout=settings.timeout_seconds) as client:
        yield build_batch_resolver(settings, client=client, cache=cache, metrics=metrics)
