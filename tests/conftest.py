"""Shared stubs for geocoding tests."""
from typing import Dict, List, Optional

import httpx
import pytest

from cargotrack.geo.batch import BatchResolver
from cargotrack.geo.cache import LocationCache
from cargotrack.geo.provider import NominatimProvider
from cargotrack.geo.resolver import LocationResolver
from cargotrack.geo.throttle import RateLimiter
from cargotrack.observability.metrics import MetricsRegistry


def candidate(lat: float, lon: float, name: str, place_type: str = "city", importance: float = 0.5) -> Dict[str, object]:
    return {
        "lat": str(lat),
        "lon": str(lon),
        "display_name": name,
        "type": place_type,
        "addresstype": place_type,
        "importance": importance,
    }


class StubNominatim:
    """Serves canned search results per query and records every request."""

    def __init__(self, results: Optional[Dict[str, List[Dict[str, object]]]] = None) -> None:
        self.results = results or {}
        self.requests: List[httpx.Request] = []

    @property
    def queries(self) -> List[str]:
        return [request.url.params["q"] for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=self.results.get(request.url.params["q"], []))

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


class FakeClock:
    """Monotonic clock whose sleeps advance time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def build_batch(
    client: httpx.AsyncClient,
    *,
    cache: Optional[LocationCache] = None,
    metrics: Optional[MetricsRegistry] = None,
    limiter: Optional[RateLimiter] = None,
) -> BatchResolver:
    metrics = metrics or MetricsRegistry()
    provider = NominatimProvider(client, limiter=limiter, metrics=metrics)
    resolver = LocationResolver(cache=cache or LocationCache(), provider=provider)
    return BatchResolver(resolver, metrics=metrics)


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()
