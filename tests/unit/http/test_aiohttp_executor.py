"""Tests for the aiohttp executor against an in-process aiohttp server."""

import asyncio

import orjson
import pytest
from aiohttp import test_utils, web

from binance_fapi.api import BinanceFuturesClient
from binance_fapi.auth import compute_signature
from binance_fapi.errors import HttpConnectionError, TransportTimeoutError
from binance_fapi.executors.aiohttp import AiohttpHttpExecutor
from binance_fapi.types import OrderRequest, OrderStatus, OrderType, Side, TimeInForce
from tests.unit.conftest import API_KEY, API_SECRET, load_json


async def start_server(handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


def json_reply(payload) -> web.Response:
    return web.Response(body=orjson.dumps(payload), content_type="application/json")


@pytest.mark.asyncio
async def test_query_is_sent_without_reencoding():
    seen: list[tuple[str, dict[str, str]]] = []

    async def handler(request: web.Request) -> web.Response:
        seen.append((request.raw_path, dict(request.headers)))
        return web.Response(body=b'{"ok":true}')

    server = await start_server(handler)
    executor = AiohttpHttpExecutor()
    query = "symbol=BTCUSDT&newClientOrderId=a%2Fb%20c&timestamp=1&signature=ab12"
    try:
        response = await executor.send_request(
            "GET",
            f"{server.make_url('/fapi/v1/order')}?{query}",
            headers={"X-MBX-APIKEY": "k"},
        )
    finally:
        await executor.close()
        await server.close()

    assert response.status == 200
    assert response.content == b'{"ok":true}'
    raw_path, headers = seen[0]
    assert raw_path == f"/fapi/v1/order?{query}"
    assert headers["X-MBX-APIKEY"] == "k"


@pytest.mark.asyncio
async def test_signed_query_matches_signature_on_arrival():
    seen: list[str] = []

    async def handler(request: web.Request) -> web.Response:
        seen.append(request.raw_path)
        return json_reply(load_json("response.order"))

    server = await start_server(handler)
    client = BinanceFuturesClient(
        api_url=str(server.make_url("")).rstrip("/"),
        api_key=API_KEY,
        api_secret=API_SECRET,
        executor=AiohttpHttpExecutor(),
        recv_window=5000,
    )
    try:
        async with client:
            order = await client.get_order("BTCUSDT", orig_client_order_id="my/order 1")
    finally:
        await server.close()

    path, _, query = seen[0].partition("?")
    payload, _, signature = query.rpartition("&signature=")
    assert path == "/fapi/v1/order"
    assert payload.startswith(
        "symbol=BTCUSDT&origClientOrderId=my%2Forder%201&recvWindow=5000&timestamp="
    )
    assert signature == compute_signature(API_SECRET, payload)
    assert order.order_id == 22542179


@pytest.mark.asyncio
async def test_signed_body_matches_signature_on_arrival():
    seen: list[tuple[str, str, bytes]] = []

    async def handler(request: web.Request) -> web.Response:
        seen.append((request.method, request.headers["Content-Type"], await request.read()))
        return json_reply(load_json("response.order.1"))

    server = await start_server(handler)
    client = BinanceFuturesClient(
        api_url=str(server.make_url("")).rstrip("/"),
        api_key=API_KEY,
        api_secret=API_SECRET,
        executor=AiohttpHttpExecutor(),
    )
    try:
        async with client:
            order = await client.place_order(
                OrderRequest(
                    symbol="ETHUSDT",
                    side=Side.SELL,
                    order_type=OrderType.LIMIT,
                    time_in_force=TimeInForce.GTC,
                    quantity="0.5",
                    price="3000",
                )
            )
    finally:
        await server.close()

    method, content_type, body = seen[0]
    payload, _, signature = body.decode().rpartition("&signature=")
    assert method == "POST"
    assert content_type == "application/x-www-form-urlencoded"
    assert payload.startswith(
        "symbol=ETHUSDT&side=SELL&type=LIMIT&timeInForce=GTC&quantity=0.5&price=3000&timestamp="
    )
    assert signature == compute_signature(API_SECRET, payload)
    assert order.status is OrderStatus.FILLED


@pytest.mark.asyncio
async def test_timeout_is_mapped():
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.Response(body=b"{}")

    server = await start_server(handler)
    executor = AiohttpHttpExecutor()
    try:
        with pytest.raises(TransportTimeoutError) as exc_info:
            await executor.send_request(
                "GET",
                f"{server.make_url('/fapi/v2/account')}?timestamp=1&signature=deadbeef",
                headers={},
                timeout=0.05,
            )
    finally:
        await executor.close()
        await server.close()

    assert exc_info.value.retryable
    assert "deadbeef" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_connection_error_is_mapped():
    async def handler(request: web.Request) -> web.Response:
        return web.Response(body=b"{}")

    server = await start_server(handler)
    url = f"{server.make_url('/fapi/v1/ping')}"
    await server.close()

    executor = AiohttpHttpExecutor()
    try:
        with pytest.raises(HttpConnectionError) as exc_info:
            await executor.send_request("GET", url, headers={}, timeout=2.0)
    finally:
        await executor.close()

    assert exc_info.value.retryable
