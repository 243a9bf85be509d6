"""Tests for EsiTransport against a mocked ESI."""

import json
import logging

import httpx
import pytest

from toonsettings import (
    CharacterId,
    EsiTransport,
    IdentityResolver,
    LookupTransport,
    ResolverConfig,
    RetryPolicy,
)
from toonsettings.resolution import MalformedResponse, NetworkUnavailable, ServiceError
from toonsettings.storage import FailureKind

BASE_URL = "https://esi.test/latest"


def make_transport(handler, **kwargs) -> EsiTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return EsiTransport(client=client, **kwargs)


def ids(*values: int) -> list[CharacterId]:
    return [CharacterId(v) for v in values]


def test_esi_transport_is_lookup_transport():
    assert isinstance(make_transport(lambda request: httpx.Response(200)), LookupTransport)


@pytest.mark.asyncio
async def test_bulk_lookup_keeps_only_characters():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"id": 98000001, "name": "Some Corp", "category": "corporation"},
                {"id": 2112625428, "name": "Some Pilot", "category": "character"},
            ],
        )

    transport = make_transport(handler)
    names = await transport.lookup(ids(2112625428, 98000001))

    assert names == {CharacterId(2112625428): "Some Pilot", CharacterId(98000001): None}
    (request,) = seen
    assert request.method == "POST"
    assert request.url.path == "/latest/universe/names/"
    assert request.url.params["datasource"] == "tranquility"
    assert json.loads(request.content) == [2112625428, 98000001]


@pytest.mark.asyncio
async def test_datasource_is_configurable():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    await make_transport(handler, datasource="singularity").lookup(ids(1))

    assert seen[0].url.params["datasource"] == "singularity"


@pytest.mark.asyncio
async def test_unknown_id_falls_back_to_per_character_lookup():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/latest/universe/names/":
            return httpx.Response(404, json={"error": "Ensure all IDs are valid before resolving."})
        if request.url.path == "/latest/characters/2112625428/":
            return httpx.Response(200, json={"name": "Some Pilot", "corporation_id": 1})
        return httpx.Response(404, json={"error": "Character not found"})

    names = await make_transport(handler).lookup(ids(2112625428, 5))

    assert names == {CharacterId(2112625428): "Some Pilot", CharacterId(5): None}


@pytest.mark.asyncio
@pytest.mark.parametrize("status, transient", [(500, True), (503, True), (420, True), (400, False)])
async def test_error_status_raises_service_error(status, transient):
    transport = make_transport(lambda request: httpx.Response(status, json={"error": "nope"}))

    with pytest.raises(ServiceError) as exc_info:
        await transport.lookup(ids(1))

    assert exc_info.value.status == status
    assert exc_info.value.transient is transient
    assert exc_info.value.kind is FailureKind.SERVICE_ERROR
    assert "nope" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("error_cls", [httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout])
async def test_network_errors_raise_network_unavailable(error_cls):
    def handler(request: httpx.Request) -> httpx.Response:
        raise error_cls("boom", request=request)

    with pytest.raises(NetworkUnavailable) as exc_info:
        await make_transport(handler).lookup(ids(1))

    assert exc_info.value.transient
    assert exc_info.value.kind is FailureKind.NETWORK_UNAVAILABLE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"<html>maintenance</html>"),
        httpx.Response(200, json={"id": 1}),
        httpx.Response(200, json=["not an object"]),
        httpx.Response(200, json=[{"id": "1", "name": "x", "category": "character"}]),
    ],
)
async def test_unreadable_payload_raises_malformed(response):
    transport = make_transport(lambda request: response)

    with pytest.raises(MalformedResponse):
        await transport.lookup(ids(1))


@pytest.mark.asyncio
async def test_empty_batch_sends_nothing():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    assert await make_transport(handler).lookup([]) == {}
    assert seen == []


@pytest.mark.asyncio
async def test_oversized_batch_rejected():
    transport = make_transport(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(ValueError):
        await transport.lookup(ids(*range(EsiTransport.max_batch_size + 1)))


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
        base_url=BASE_URL,
    )
    async with EsiTransport(client=client) as transport:
        await transport.lookup(ids(1))

    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_corrupt_compressed_body_raises_malformed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip at all")

    with pytest.raises(MalformedResponse):
        await make_transport(handler).lookup(ids(1))


@pytest.mark.asyncio
async def test_redirect_loop_raises_network_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

    with pytest.raises(NetworkUnavailable):
        await make_transport(handler).lookup(ids(1))


@pytest.mark.asyncio
async def test_corrupt_body_still_labels_numerically(cache, clock):
    """resolve_all() absorbs every transport failure, including body decoding."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip at all")

    resolver = IdentityResolver(
        make_transport(handler),
        cache=cache,
        config=ResolverConfig(retry_policy=RetryPolicy(max_attempts=1)),
        clock=clock,
    )

    assert await resolver.resolve_all({CharacterId(1)}) == {CharacterId(1): "1"}
    assert cache.get(CharacterId(1)).failure is FailureKind.MALFORMED_RESPONSE


@pytest.mark.asyncio
async def test_error_status_without_json_body(caplog):
    transport = make_transport(lambda request: httpx.Response(502, content=b"Bad Gateway"))

    with caplog.at_level(logging.DEBUG, logger="toonsettings.resolution.transport"):
        with pytest.raises(ServiceError) as exc_info:
            await transport.lookup(ids(1))

    assert str(exc_info.value) == "HTTP 502"
    assert "no JSON error body" in caplog.text
