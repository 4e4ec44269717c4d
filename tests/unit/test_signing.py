import hmac
from hashlib import sha256
from urllib.parse import parse_qsl

import pytest

from binance_fapi.auth import Credentials, Signer, compute_signature
from binance_fapi.encoding import encode_params
from binance_fapi.errors import ValidationError
from binance_fapi.types import OrderRequest, OrderType, Side, TimeInForce
from tests.unit.conftest import API_KEY, API_SECRET

DOC_PAYLOAD = (
    "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1"
    "&recvWindow=5000&timestamp=1499827319559"
)
DOC_SIGNATURE = "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


def test_compute_signature_matches_documented_vector():
    assert compute_signature(API_SECRET, DOC_PAYLOAD) == DOC_SIGNATURE


def test_signer_reproduces_documented_request():
    signer = Signer(Credentials(API_KEY, API_SECRET))
    query = encode_params(
        OrderRequest(
            symbol="LTCBTC",
            side=Side.BUY,
            order_type=OrderType.LIMIT,
            time_in_force=TimeInForce.GTC,
            quantity=1,
            price="0.1",
        )
    )

    signed = signer.sign(query, timestamp=1499827319559, recv_window=5000)

    assert signed == f"{DOC_PAYLOAD}&signature={DOC_SIGNATURE}"


def test_signature_covers_exact_transmitted_bytes():
    signer = Signer(Credentials(API_KEY, API_SECRET), clock=lambda: 1700000000000)
    signed = signer.sign("symbol=BTCUSDT&limit=5")

    payload, _, signature = signed.rpartition("&signature=")
    expected = hmac.new(API_SECRET.encode(), payload.encode(), sha256).hexdigest()
    assert signature == expected
    assert signature == signature.lower()
    assert payload == "symbol=BTCUSDT&limit=5&timestamp=1700000000000"


def test_signed_fields_follow_params_then_recv_window_then_timestamp():
    signer = Signer(Credentials(API_KEY, API_SECRET), clock=lambda: 42)
    signed = signer.sign("b=2&a=1", recv_window=1000)

    keys = [key for key, _ in parse_qsl(signed)]
    assert keys == ["b", "a", "recvWindow", "timestamp", "signature"]


def test_empty_query_signs_timestamp_only():
    signer = Signer(Credentials(API_KEY, API_SECRET), clock=lambda: 42)
    signed = signer.sign("")
    assert signed.startswith("timestamp=42&signature=")


def test_clock_is_read_per_signature():
    ticks = iter([1, 2])
    signer = Signer(Credentials(API_KEY, API_SECRET), clock=lambda: next(ticks))

    first = signer.sign("symbol=BTCUSDT")
    second = signer.sign("symbol=BTCUSDT")

    assert "timestamp=1&" in first
    assert "timestamp=2&" in second
    assert first != second


@pytest.mark.parametrize("recv_window", [0, -1, 60_001, True, 1.5, "5000"])
def test_invalid_recv_window_is_rejected(recv_window):
    signer = Signer(Credentials(API_KEY, API_SECRET))
    with pytest.raises(ValidationError):
        signer.sign("symbol=BTCUSDT", recv_window=recv_window)


@pytest.mark.parametrize("recv_window", [1, 5000, 60_000])
def test_recv_window_bounds_are_inclusive(recv_window):
    signer = Signer(Credentials(API_KEY, API_SECRET), clock=lambda: 1)
    assert f"recvWindow={recv_window}&" in signer.sign("", recv_window=recv_window)


def test_non_integer_timestamp_is_rejected():
    signer = Signer(Credentials(API_KEY, API_SECRET))
    with pytest.raises(ValidationError):
        signer.sign("symbol=BTCUSDT", timestamp=1.5)  # type: ignore[arg-type]


@pytest.mark.parametrize("api_key, api_secret", [("", "s"), ("k", ""), (None, "s")])
def test_credentials_require_non_empty_strings(api_key, api_secret):
    with pytest.raises(ValidationError):
        Credentials(api_key, api_secret)


def test_credentials_repr_hides_secret():
    text = repr(Credentials(API_KEY, API_SECRET))
    assert API_SECRET not in text
    assert API_KEY not in text
