import json
from decimal import Decimal

import httpx
import pytest
import respx

from tzkit.errors import RpcResponseError, RpcTransportError
from tzkit.rpc.http import RpcClient

URL = "http://node.test:8732"
HEAD = "/chains/main/blocks/head"


def _client(**kw):
    kw.setdefault("backoff_base", 0.0)
    kw.setdefault("backoff_jitter", 0.0)
    return RpcClient(URL, **kw)


@pytest.mark.asyncio
async def test_block_queries_use_chain_and_block_paths():
    with respx.mock(base_url=URL) as node:
        route = node.get(path=f"{HEAD}/header").mock(return_value=httpx.Response(200, json={"hash": "BLx", "level": 5}))
        async with _client() as rpc:
            header = await rpc.get_block_header()
    assert header == {"hash": "BLx", "level": 5}
    assert route.call_count == 1
    assert route.calls.last.request.headers["user-agent"].startswith("tzkit-python/")


@pytest.mark.asyncio
async def test_balance_is_decimal_and_missing_delegate_is_none():
    base = f"{HEAD}/context/contracts/tz1x"
    with respx.mock(base_url=URL) as node:
        node.get(path=f"{base}/balance").mock(return_value=httpx.Response(200, json="1500000"))
        node.get(path=f"{base}/delegate").mock(return_value=httpx.Response(404, json=[{"id": "not_found"}]))
        async with _client() as rpc:
            assert await rpc.get_balance("tz1x") == Decimal("1500000")
            assert await rpc.get_delegate("tz1x") is None


@pytest.mark.asyncio
async def test_error_status_raises_with_body():
    with respx.mock(base_url=URL) as node:
        route = node.get(path=f"{HEAD}/metadata").mock(return_value=httpx.Response(500, json=[{"id": "internal"}]))
        async with _client() as rpc:
            with pytest.raises(RpcResponseError) as exc:
                await rpc.get_block_metadata()
    assert exc.value.status == 500
    assert exc.value.body == [{"id": "internal"}]
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_get_not_retried_by_default():
    with respx.mock(base_url=URL) as node:
        route = node.get(path=f"{HEAD}/header").mock(
            side_effect=[httpx.Response(503, text="busy"), httpx.Response(200, json={"level": 1})]
        )
        async with _client() as rpc:
            with pytest.raises(RpcResponseError):
                await rpc.get_block_header()
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_get_retried_on_transient_status_when_enabled():
    with respx.mock(base_url=URL) as node:
        route = node.get(path=f"{HEAD}/header").mock(
            side_effect=[
                httpx.Response(503, text="busy"),
                httpx.Response(429, text="slow down"),
                httpx.Response(200, json={"level": 1}),
            ]
        )
        async with _client(max_retries=2) as rpc:
            assert await rpc.get_block_header() == {"level": 1}
    assert route.call_count == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    with respx.mock(base_url=URL) as node:
        route = node.get(path=f"{HEAD}/header").mock(return_value=httpx.Response(400, json={"id": "bad"}))
        async with _client(max_retries=3) as rpc:
            with pytest.raises(RpcResponseError):
                await rpc.get_block_header()
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_get_retried_on_transport_error_when_enabled():
    with respx.mock(base_url=URL) as node:
        node.get(path="/chains/main/chain_id").mock(
            side_effect=[httpx.ConnectError("refused"), httpx.Response(200, json="NetXdQprcVkpaWU")]
        )
        async with _client(max_retries=1) as rpc:
            assert await rpc.get_chain_id() == "NetXdQprcVkpaWU"


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    with respx.mock(base_url=URL) as node:
        node.get(path="/chains/main/chain_id").mock(side_effect=httpx.ConnectError("refused"))
        async with _client() as rpc:
            with pytest.raises(RpcTransportError, match="refused"):
                await rpc.get_chain_id()


@pytest.mark.asyncio
async def test_post_is_never_retried():
    with respx.mock(base_url=URL) as node:
        route = node.post(path="/injection/operation").mock(
            side_effect=[httpx.Response(503, text="busy"), httpx.Response(200, json="ooHash")]
        )
        async with _client(max_retries=5) as rpc:
            with pytest.raises(RpcResponseError):
                await rpc.inject_operation("aa")
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_injection_posts_json_string_with_chain_param():
    with respx.mock(base_url=URL) as node:
        route = node.post(path="/injection/operation").mock(return_value=httpx.Response(200, json="ooHash"))
        async with _client(chain="NetXtest") as rpc:
            assert await rpc.inject_operation("deadbeef") == "ooHash"
    request = route.calls.last.request
    assert request.url.params["chain"] == "NetXtest"
    assert json.loads(request.content) == "deadbeef"


@pytest.mark.asyncio
async def test_preapply_posts_list_of_groups():
    group = {"branch": "BL", "contents": [], "protocol": "P", "signature": "s"}
    with respx.mock(base_url=URL) as node:
        route = node.post(path=f"{HEAD}/helpers/preapply/operations").mock(
            return_value=httpx.Response(200, json=[{"contents": []}])
        )
        async with _client() as rpc:
            assert await rpc.preapply_operations([group]) == [{"contents": []}]
    assert json.loads(route.calls.last.request.content) == [group]


@pytest.mark.asyncio
async def test_non_json_body_is_an_error():
    with respx.mock(base_url=URL) as node:
        node.get(path=f"{HEAD}/header").mock(return_value=httpx.Response(200, text="<html>proxy</html>"))
        async with _client() as rpc:
            with pytest.raises(RpcResponseError, match="non-JSON"):
                await rpc.get_block_header()


@pytest.mark.asyncio
async def test_requests_after_close_raise_transport_error():
    rpc = _client()
    await rpc.aclose()
    await rpc.aclose()
    with pytest.raises(RpcTransportError, match="closed"):
        await rpc.get_block_header()
