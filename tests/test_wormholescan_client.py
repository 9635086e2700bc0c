import httpx
import pytest

from monad_mcp.config import MonadConfig
from monad_mcp.wormholescan import (
    OperationsQuery,
    WormholescanClient,
    WormholescanError,
    WormholescanUnreachableError,
)

QUERY = OperationsQuery(address="0xabc", source_chain=48, target_chain=10002)


def _client(handler):
    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport, base_url="https://wormholescan.test")
    return WormholescanClient(MonadConfig(), async_client=async_client)


@pytest.mark.asyncio
async def test_fetch_operations_sends_query_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"operations": [{"id": "1"}, "junk", {"id": "2"}]})

    client = _client(handler)
    operations = await client.fetch_operations(QUERY)
    assert operations == [{"id": "1"}, {"id": "2"}]
    assert seen["path"] == "/api/v1/operations"
    assert seen["params"] == {
        "page": "0",
        "pageSize": "10",
        "sortOrder": "DESC",
        "address": "0xabc",
        "appId": "GENERIC_RELAYER",
        "sourceChain": "48",
        "targetChain": "10002",
    }


@pytest.mark.asyncio
async def test_missing_operations_key_is_empty():
    client = _client(lambda request: httpx.Response(200, json={"operations": None}))
    assert await client.fetch_operations(QUERY) == []


@pytest.mark.asyncio
async def test_http_error_uses_message_from_body():
    client = _client(lambda request: httpx.Response(500, json={"message": "internal failure"}))
    with pytest.raises(WormholescanError) as excinfo:
        await client.fetch_operations(QUERY)
    assert str(excinfo.value) == "internal failure"
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_http_error_without_body():
    client = _client(lambda request: httpx.Response(404, text="not found"))
    with pytest.raises(WormholescanError) as excinfo:
        await client.fetch_operations(QUERY)
    assert str(excinfo.value) == "Wormholescan returned HTTP 404"


@pytest.mark.asyncio
async def test_unexpected_payloads():
    for response in (
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["not", "a", "dict"]),
        httpx.Response(200, json={"operations": {"id": "1"}}),
    ):
        client = _client(lambda request, response=response: response)
        with pytest.raises(WormholescanError) as excinfo:
            await client.fetch_operations(QUERY)
        assert str(excinfo.value) == "Unexpected response from Wormholescan."


@pytest.mark.asyncio
async def test_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(WormholescanUnreachableError):
        await client.fetch_operations(QUERY)


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    async_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
    client = WormholescanClient(async_client=async_client)
    await client.aclose()
    assert not async_client.is_closed
    await async_client.aclose()
