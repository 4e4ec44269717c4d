"""Tests for request preparation, dispatch and decoding in the Transport."""

import asyncio
import logging
from urllib.parse import parse_qsl, urlsplit

import pytest

from binance_fapi.auth import Credentials, compute_signature
from binance_fapi.errors import (
    ConfigurationError,
    DecodeError,
    ExchangeError,
    HttpConnectionError,
    MissingCredentialsError,
    ValidationError,
)
from binance_fapi.executors.interface import HttpResponse
from binance_fapi.transport import Endpoint, Security, Transport
from binance_fapi.types import Json, KlinesQuery, Order, OrderQuery, OrderStatus
from tests.mock_executors import (
    MockExceptionOutput,
    MockHttpExecutor,
    MockSuccessfulOutput,
    json_response,
)
from tests.unit.conftest import API_KEY, API_SECRET, load_json

BASE_URL = "https://fapi.gaierror.xyz"

PUBLIC = Endpoint("GET", "/fapi/v1/depth", Security.NONE, Json)
KEYED = Endpoint("GET", "/fapi/v1/historicalTrades", Security.API_KEY, Json)
SIGNED_GET = Endpoint("GET", "/fapi/v1/order", Security.SIGNED, Order, OrderQuery)
SIGNED_POST = Endpoint("POST", "/fapi/v1/order", Security.SIGNED, Order)
SIGNED_PUT = Endpoint("PUT", "/fapi/v1/listenKey", Security.SIGNED, None)
SIGNED_DELETE = Endpoint("DELETE", "/fapi/v1/order", Security.SIGNED, Order)


def make_transport(credentials: Credentials | None = None, **kwargs):
    executor = MockHttpExecutor()
    transport = Transport(
        BASE_URL, credentials, executor, clock=lambda: 1700000000000, **kwargs
    )
    return transport, executor


def signed_transport(**kwargs):
    return make_transport(Credentials(API_KEY, API_SECRET), **kwargs)


def test_public_request_has_no_key_or_signature():
    transport, _ = make_transport()

    prepared = transport.prepare(PUBLIC, {"symbol": "BTCUSDT", "limit": 5})

    assert prepared.method == "GET"
    assert prepared.url == f"{BASE_URL}/fapi/v1/depth?symbol=BTCUSDT&limit=5"
    assert prepared.body is None
    assert "X-MBX-APIKEY" not in prepared.headers
    assert "signature" not in prepared.url


def test_public_request_without_params_has_no_query():
    transport, _ = make_transport()
    assert transport.prepare(PUBLIC).url == f"{BASE_URL}/fapi/v1/depth"


def test_api_key_request_sends_header_without_signature():
    transport, _ = signed_transport()

    prepared = transport.prepare(KEYED, {"symbol": "BTCUSDT"})

    assert prepared.headers["X-MBX-APIKEY"] == API_KEY
    assert prepared.url == f"{BASE_URL}/fapi/v1/historicalTrades?symbol=BTCUSDT"


def test_signed_get_puts_signature_last_in_query():
    transport, _ = signed_transport()

    prepared = transport.prepare(
        SIGNED_GET, OrderQuery(symbol="BTCUSDT", order_id=7), recv_window=5000
    )

    query = urlsplit(prepared.url).query
    payload, _, signature = query.rpartition("&signature=")
    assert payload == "symbol=BTCUSDT&orderId=7&recvWindow=5000&timestamp=1700000000000"
    assert signature == compute_signature(API_SECRET, payload)
    assert prepared.headers["X-MBX-APIKEY"] == API_KEY
    assert prepared.body is None


def test_signed_post_sends_form_body():
    transport, _ = signed_transport()

    prepared = transport.prepare(SIGNED_POST, {"symbol": "BTCUSDT", "side": "BUY"})

    assert prepared.url == f"{BASE_URL}/fapi/v1/order"
    assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"
    body = prepared.body.decode()
    payload, _, signature = body.rpartition("&signature=")
    assert payload == "symbol=BTCUSDT&side=BUY&timestamp=1700000000000"
    assert signature == compute_signature(API_SECRET, payload)


@pytest.mark.parametrize("endpoint", [SIGNED_PUT, SIGNED_DELETE])
def test_put_and_delete_sign_the_query(endpoint):
    transport, _ = signed_transport()

    prepared = transport.prepare(endpoint)

    assert prepared.method == endpoint.method
    assert prepared.body is None
    assert "Content-Type" not in prepared.headers
    keys = [key for key, _ in parse_qsl(urlsplit(prepared.url).query)]
    assert keys == ["timestamp", "signature"]


def test_default_recv_window_is_applied_and_overridable():
    transport, _ = signed_transport(recv_window=5000)

    default = transport.prepare(SIGNED_DELETE)
    override = transport.prepare(SIGNED_DELETE, recv_window=10000)

    assert "recvWindow=5000&" in default.url
    assert "recvWindow=10000&" in override.url


def test_explicit_timestamp_is_used():
    transport, _ = signed_transport()
    prepared = transport.prepare(SIGNED_DELETE, timestamp=1499827319559)
    assert "timestamp=1499827319559&" in prepared.url


def test_recv_window_on_unsigned_endpoint_is_rejected():
    transport, _ = signed_transport()
    with pytest.raises(ValidationError):
        transport.prepare(PUBLIC, recv_window=5000)


def test_params_of_the_wrong_type_are_rejected():
    transport, _ = signed_transport()
    with pytest.raises(ValidationError):
        transport.prepare(
            SIGNED_GET, KlinesQuery(symbol="BTCUSDT", interval="1m")  # type: ignore[arg-type]
        )


def test_base_url_trailing_slash_is_ignored():
    transport = Transport(BASE_URL + "/", executor=MockHttpExecutor())
    assert transport.prepare(PUBLIC).url == f"{BASE_URL}/fapi/v1/depth"


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", [KEYED, SIGNED_GET, SIGNED_POST])
async def test_missing_credentials_fail_before_any_network_call(endpoint):
    transport, executor = make_transport()

    with pytest.raises(MissingCredentialsError) as exc_info:
        await transport.request(endpoint, {"symbol": "BTCUSDT", "orderId": 1})

    assert isinstance(exc_info.value, ConfigurationError)
    assert not exc_info.value.retryable
    assert executor.call_log == []


@pytest.mark.parametrize("endpoint", [SIGNED_GET, SIGNED_POST])
def test_prepare_refuses_to_sign_without_credentials(endpoint):
    transport, _ = make_transport()

    with pytest.raises(MissingCredentialsError):
        transport.prepare(endpoint, {"symbol": "BTCUSDT"}, timestamp=1)


@pytest.mark.asyncio
async def test_invalid_params_fail_before_any_network_call():
    transport, executor = signed_transport()

    with pytest.raises(ValidationError):
        await transport.request(SIGNED_POST, {"symbol": "BTCUSDT", "timestamp": 1})

    assert executor.call_log == []


@pytest.mark.asyncio
async def test_request_decodes_into_result_type():
    transport, executor = signed_transport()
    payload = load_json("response.order")
    executor.stage_output(
        MockSuccessfulOutput(
            output=json_response(payload),
            call_validation=lambda call: call.function_name == "send_request"
            and call.arg_pack[0] == "GET"
            and call.arg_pack[1].startswith(f"{BASE_URL}/fapi/v1/order?symbol=BTCUSDT&orderId=22542179&"),
        )
    )

    order = await transport.request(
        SIGNED_GET, OrderQuery(symbol="BTCUSDT", order_id=22542179)
    )

    assert isinstance(order, Order)
    assert order.status is OrderStatus.NEW
    assert order.order_id == 22542179


@pytest.mark.asyncio
async def test_timeout_is_passed_to_executor():
    transport, executor = make_transport(timeout=3.0)
    executor.stage_output(
        [
            MockSuccessfulOutput(
                output=json_response({}),
                call_validation=lambda call: call.arg_pack[4] == 3.0,
            ),
            MockSuccessfulOutput(
                output=json_response({}),
                call_validation=lambda call: call.arg_pack[4] == 0.5,
            ),
            MockSuccessfulOutput(
                output=json_response({}),
                call_validation=lambda call: call.arg_pack[4] is None,
            ),
        ]
    )

    await transport.request(PUBLIC)
    await transport.request(PUBLIC, timeout=0.5)
    await transport.request(PUBLIC, timeout=None)


@pytest.mark.asyncio
async def test_body_is_ignored_for_unit_results():
    transport, executor = signed_transport()
    executor.stage_output(MockSuccessfulOutput(output=json_response({})))

    assert await transport.request(SIGNED_PUT) is None


@pytest.mark.asyncio
async def test_exchange_error_envelope_is_mapped():
    transport, executor = make_transport()
    executor.stage_output(
        MockSuccessfulOutput(
            output=json_response({"code": -1121, "msg": "Invalid symbol."}, 400)
        )
    )

    with pytest.raises(ExchangeError) as exc_info:
        await transport.request(PUBLIC, {"symbol": "NOPE"})

    assert exc_info.value.code == -1121
    assert exc_info.value.message == "Invalid symbol."
    assert exc_info.value.status_code == 400
    assert not exc_info.value.retryable


@pytest.mark.asyncio
async def test_missing_required_field_is_a_decode_error():
    transport, executor = signed_transport()
    payload = load_json("response.order")
    del payload["status"]
    executor.stage_output(MockSuccessfulOutput(output=json_response(payload)))

    with pytest.raises(DecodeError) as exc_info:
        await transport.request(SIGNED_GET, {"symbol": "BTCUSDT", "orderId": 1})

    assert exc_info.value.status_code == 200
    assert b"orderId" in exc_info.value.raw


@pytest.mark.asyncio
async def test_invalid_json_is_a_decode_error():
    transport, executor = make_transport()
    executor.stage_output(
        MockSuccessfulOutput(output=HttpResponse(status=200, content=b"not json"))
    )

    with pytest.raises(DecodeError) as exc_info:
        await transport.request(PUBLIC)

    assert exc_info.value.raw == b"not json"


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged():
    transport, executor = make_transport()
    error = HttpConnectionError("Network error during GET request", url=BASE_URL)
    executor.stage_output(MockExceptionOutput(error))

    with pytest.raises(HttpConnectionError) as exc_info:
        await transport.request(PUBLIC)

    assert exc_info.value is error
    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_concurrent_requests_are_independent():
    transport, executor = signed_transport()
    count = 20
    executor.stage_output(
        [
            MockSuccessfulOutput(output=json_response({**load_json("response.order"), "orderId": i}))
            for i in range(count)
        ]
    )

    results = await asyncio.gather(
        *(
            transport.request(SIGNED_GET, {"symbol": "BTCUSDT", "orderId": i})
            for i in range(count)
        )
    )

    assert len(results) == count
    assert len(executor.call_log) == count
    urls = [call.arg_pack[1] for call in executor.call_log]
    for i in range(count):
        assert any(f"orderId={i}&" in url for url in urls)
    for call in executor.call_log:
        query = urlsplit(call.arg_pack[1]).query
        payload, _, signature = query.rpartition("&signature=")
        assert signature == compute_signature(API_SECRET, payload)


@pytest.mark.asyncio
async def test_debug_logs_do_not_contain_secrets_or_queries(caplog):
    transport, executor = signed_transport()
    executor.stage_output(MockSuccessfulOutput(output=json_response(load_json("response.order"))))

    with caplog.at_level(logging.DEBUG, logger="binance_fapi.transport"):
        await transport.request(SIGNED_GET, {"symbol": "BTCUSDT", "orderId": 1})

    assert any("/fapi/v1/order" in record.getMessage() for record in caplog.records)
    for record in caplog.records:
        message = record.getMessage()
        assert "signature" not in message
        assert API_SECRET not in message
        assert API_KEY not in message


@pytest.mark.asyncio
async def test_close_closes_executor():
    transport, executor = make_transport()
    async with transport:
        pass
    assert executor.closed
