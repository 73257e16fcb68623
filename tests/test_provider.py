import asyncio

import httpx

from cargotrack.geo.coordinates import Coordinate
from cargotrack.geo.provider import NominatimProvider, create_geocoder_client
from cargotrack.observability.metrics import MetricsRegistry

from conftest import StubNominatim, candidate


def _provider_for(handler, metrics=None, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, NominatimProvider(client, metrics=metrics, **kwargs)


def test_search_sends_identified_capped_query():
    stub = StubNominatim({"Rotterdam": [candidate(51.9225, 4.4792, "Rotterdam, South Holland, Netherlands")]})

    async def _run():
        async with create_geocoder_client(transport=httpx.MockTransport(stub)) as client:
            provider = NominatimProvider(client, result_limit=10)
            coord = await provider.geocode("Rotterdam")
        assert coord == Coordinate(lat=51.9225, lng=4.4792)

    asyncio.run(_run())
    request = stub.requests[0]
    assert request.headers.get_list("User-Agent") == ["SwiftCargo-Tracker/1.0"]
    assert request.headers.get_list("Accept") == ["application/json"]
    assert request.url.params["limit"] == "5"
    assert request.url.params["format"] == "json"
    assert str(request.url).startswith("https://nominatim.openstreetmap.org/search")


def test_http_error_status_is_no_match():
    metrics = MetricsRegistry()

    async def _run():
        client, provider = _provider_for(lambda request: httpx.Response(503), metrics=metrics)
        async with client:
            assert await provider.search("Hamburg") == []
            assert await provider.geocode("Hamburg") is None

    asyncio.run(_run())
    assert metrics.get("provider_errors") == 2
    assert metrics.get("http_5xx") == 2


def test_network_failures_are_no_match():
    def _handler(request):
        if request.url.params["q"] == "slow":
            raise httpx.ReadTimeout("timed out", request=request)
        raise httpx.ConnectError("connection refused", request=request)

    metrics = MetricsRegistry()

    async def _run():
        client, provider = _provider_for(_handler, metrics=metrics)
        async with client:
            assert await provider.search("Hamburg") == []
            assert await provider.search("slow") == []

    asyncio.run(_run())
    assert metrics.get("provider_errors") == 2
    assert metrics.get("provider_requests") == 2


def test_malformed_bodies_are_no_match():
    bodies = {
        "text": httpx.Response(200, content=b"<html>busy</html>"),
        "object": httpx.Response(200, json={"error": "Unable to geocode"}),
        "empty": httpx.Response(200, json=[]),
    }

    async def _run():
        client, provider = _provider_for(lambda request: bodies[request.url.params["q"]])
        async with client:
            for query in bodies:
                assert await provider.search(query) == []

    asyncio.run(_run())


def test_malformed_candidates_are_skipped():
    payload = [
        {"lat": "not-a-number", "lon": "4.4"},
        "garbage",
        candidate(53.5511, 9.9937, "Hamburg, Germany"),
    ]

    async def _run():
        client, provider = _provider_for(lambda request: httpx.Response(200, json=payload))
        async with client:
            candidates = await provider.search("Hamburg")
        assert [c.display_name for c in candidates] == ["Hamburg, Germany"]

    asyncio.run(_run())


def test_blank_query_makes_no_request():
    stub = StubNominatim()

    async def _run():
        client, provider = _provider_for(stub)
        async with client:
            assert await provider.search("") == []

    asyncio.run(_run())
    assert stub.requests == []


def test_unencodable_query_is_no_match():
    stub = StubNominatim()
    metrics = MetricsRegistry()

    async def _run():
        client, provider = _provider_for(stub, metrics=metrics)
        async with client:
            assert await provider.search("Bad\udcffplace") == []
            assert await provider.geocode("Bad\udcffplace") is None

    asyncio.run(_run())
    assert stub.requests == []
    assert metrics.get("provider_errors") == 2
