"""Async client for the Nominatim search API."""
from __future__ import annotations

import contextlib
import time
from typing import AsyncIterator, List, Optional

import httpx
import orjson
import structlog
from pydantic import ValidationError

from cargotrack.geo.coordinates import Coordinate
from cargotrack.geo.models import Candidate
from cargotrack.geo.scoring import select_candidate
from cargotrack.geo.throttle import RateLimiter
from cargotrack.observability.metrics import MetricsRegistry
from cargotrack.observability.tracing import log_provider_error, log_provider_result, safe_text, span

LOGGER = structlog.get_logger(__name__)

DEFAULT_ENDPOINT = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "SwiftCargo-Tracker/1.0"
MAX_RESULT_LIMIT = 5


@contextlib.asynccontextmanager
async def create_geocoder_client(
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 5.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an HTTP client identified with the supplied user agent."""
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    async with httpx.AsyncClient(headers=headers, timeout=timeout, transport=transport) as client:
        yield client


class NominatimProvider:
    """Queries Nominatim and reduces every failure to an empty result."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        result_limit: int = MAX_RESULT_LIMIT,
        timeout: float = 5.0,
        limiter: Optional[RateLimiter] = None,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._result_limit = max(1, min(result_limit, MAX_RESULT_LIMIT))
        self._timeout = timeout
        self._limiter = limiter
        self._metrics = metrics or MetricsRegistry()

    @property
    def result_limit(self) -> int:
        return self._result_limit

    async def search(self, query: str) -> List[Candidate]:
        """Return parsed candidates for query; [] on any kind of failure."""
        if not query or not isinstance(query, str):
            return []
        if self._limiter is not None:
            waited = await self._limiter.wait()
            self._metrics.incr("throttle_wait_ms", int(waited * 1000))

        params = {
            "format": "json",
            "q": query,
            "limit": str(self._result_limit),
            "addressdetails": "1",
        }
        self._metrics.incr("provider_requests")
        start = time.perf_counter()
        try:
            with span(name="geocode", query=query):
                response = await self._client.get(
                    self._endpoint,
                    params=params,
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            self._metrics.incr("provider_errors")
            log_provider_error(query=query, reason=str(exc) or type(exc).__name__)
            return []
        except UnicodeError as exc:
            # lone surrogates cannot be percent-encoded into the query string
            self._metrics.incr("provider_errors")
            log_provider_error(query=query, reason=f"unencodable query: {exc.reason}")
            return []

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        self._metrics.incr(f"http_{response.status_code // 100}xx")
        if not response.is_success:
            self._metrics.incr("provider_errors")
            LOGGER.warning("geocode_http_status", query=safe_text(query), status=response.status_code)
            return []

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            self._metrics.incr("provider_errors")
            log_provider_error(query=query, reason=f"invalid json: {exc}")
            return []
        if not isinstance(payload, list):
            self._metrics.incr("provider_errors")
            log_provider_error(query=query, reason="unexpected payload shape")
            return []

        candidates: List[Candidate] = []
        for item in payload[: self._result_limit]:
            try:
                candidates.append(Candidate.model_validate(item))
            except ValidationError:
                LOGGER.debug("geocode_candidate_skipped", query=query)
        if not candidates:
            self._metrics.incr("provider_empty")
        log_provider_result(
            query=query,
            status=response.status_code,
            candidates=len(candidates),
            elapsed_ms=elapsed_ms,
        )
        return candidates

    async def geocode(self, query: str) -> Optional[Coordinate]:
        """Return the coordinate of the best candidate for query, if any."""
        best = select_candidate(query, await self.search(query))
        if best is None:
            return None
        LOGGER.debug("geocode_candidate_selected", query=query, display_name=best.display_name)
        return best.coordinate()
