"""Helper utilities for the Binance futures SDK.

This module contains utility functions for client identification, JSON
deserialization, typed response decoding, timestamps and display formatting.
"""

import logging
import re
from dataclasses import MISSING, asdict, fields, is_dataclass
from enum import Enum
from functools import lru_cache
from time import time_ns
from types import NoneType, UnionType
from typing import Any, ForwardRef, Union, get_args, get_origin, get_type_hints

import orjson
from prettyprinter import cpprint

from binance_fapi.errors import DecodeError
from binance_fapi.types import Json, wire_name

log = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_API_URL: str = "https://fapi.binance.com"
DEFAULT_WALLET_API_URL: str = "https://api.binance.com"
DEFAULT_STREAM_URL: str = "wss://fstream.binance.com"

TESTNET_API_URL: str = "https://testnet.binancefuture.com"
TESTNET_STREAM_URL: str = "wss://stream.binancefuture.com"

API_KEY_HEADER: str = "X-MBX-APIKEY"

# Largest recvWindow the exchange accepts, in milliseconds
MAX_RECV_WINDOW: int = 60_000


# ============================================================================
# CLIENT IDENTIFICATION
# ============================================================================


@lru_cache(maxsize=1)
def get_client_id() -> str:
    """Get the SDK identification string sent as User-Agent."""
    import binance_fapi

    return f"BinanceFapiPythonSDK/{binance_fapi.__version__}"


# ============================================================================
# TIME UTILITIES
# ============================================================================


def current_timestamp_ms() -> int:
    """Milliseconds since the UNIX epoch, from local wall time."""
    return time_ns() // 1_000_000


class OffsetClock:
    """Millisecond clock corrected by a server time offset.

    The offset is written by an explicit server time synchronization and read
    whenever a signed request needs a timestamp.
    """

    def __init__(self, offset_ms: int = 0):
        self.offset_ms = offset_ms

    def __call__(self) -> int:
        return current_timestamp_ms() + self.offset_ms


# ============================================================================
# STREAM UTILITIES
# ============================================================================

_LISTEN_KEY_PATH = re.compile(r"(/ws/)[^/?#]+")


def redact_stream_url(url: str) -> str:
    """Hide the listen key in a user data stream URL.

    The listen key grants read access to account events, so it is kept out of
    error messages and logs. Market stream URLs are returned unchanged.
    """
    return _LISTEN_KEY_PATH.sub(r"\1***", url)


# ============================================================================
# DESERIALIZATION
# ============================================================================


def deserialize_response(
    response_body: bytes, url: str, status_code: int | None = None
) -> Json:
    """Deserialize a JSON response body.

    Args:
        response_body: Response bytes to deserialize
        url: URL that was requested (for error messages)
        status_code: HTTP status of the response (kept on the error)

    Returns:
        Deserialized JSON object or array

    Raises:
        DecodeError: If the body is not valid JSON

    """
    try:
        return orjson.loads(response_body)  # type: ignore
    except orjson.JSONDecodeError as e:
        raise DecodeError(
            f"Failed to parse JSON response from {url}: {e}",
            raw=response_body,
            status_code=status_code,
        ) from e


# ============================================================================
# TYPED DECODING
# ============================================================================


@lru_cache(maxsize=None)
def _type_hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _type_label(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def _mismatch(tp: Any, data: Any, path: str) -> DecodeError:
    return DecodeError(
        f"{path}: expected {_type_label(tp)}, got {type(data).__name__} {data!r}"
    )


def decode_into(tp: Any, data: Any, path: str = "$") -> Any:
    """Decode deserialized JSON into the declared result type.

    Supports dataclasses (from objects by wire name, or from arrays by
    position), enums, ``list[X]``, ``dict[str, X]``, optional unions and the
    JSON scalars. Unknown object keys are ignored. Missing fields without a
    default and values of an incompatible type are errors, never defaulted.

    Args:
        tp: The target type annotation
        data: Deserialized JSON value
        path: Location of ``data`` in the response, for error messages

    Returns:
        The decoded value

    Raises:
        DecodeError: If ``data`` does not match ``tp``

    """
    if tp is Any or isinstance(tp, (str, ForwardRef)):
        return data

    if tp is None or tp is NoneType:
        if data is not None:
            raise _mismatch(NoneType, data, path)
        return None

    origin = get_origin(tp)

    if origin in (Union, UnionType):
        args = get_args(tp)
        if data is None:
            if NoneType in args:
                return None
            raise _mismatch(tp, data, path)
        errors: list[DecodeError] = []
        for arg in args:
            if arg is NoneType:
                continue
            try:
                return decode_into(arg, data, path)
            except DecodeError as e:
                errors.append(e)
        raise DecodeError("; ".join(e.message for e in errors))

    if origin is list:
        if not isinstance(data, list):
            raise _mismatch(list, data, path)
        (item_type,) = get_args(tp) or (Any,)
        return [
            decode_into(item_type, item, f"{path}[{i}]") for i, item in enumerate(data)
        ]

    if origin is dict:
        if not isinstance(data, dict):
            raise _mismatch(dict, data, path)
        _, value_type = get_args(tp) or (str, Any)
        return {
            key: decode_into(value_type, value, f"{path}.{key}")
            for key, value in data.items()
        }

    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(data)
        except ValueError as e:
            raise DecodeError(
                f"{path}: {data!r} is not a valid {tp.__name__}"
            ) from e

    if isinstance(tp, type) and is_dataclass(tp):
        return _decode_dataclass(tp, data, path)

    if tp is bool:
        if not isinstance(data, bool):
            raise _mismatch(tp, data, path)
        return data

    if tp is int:
        if not isinstance(data, int) or isinstance(data, bool):
            raise _mismatch(tp, data, path)
        return data

    if tp is float:
        if not isinstance(data, (int, float)) or isinstance(data, bool):
            raise _mismatch(tp, data, path)
        return float(data)

    if tp is str:
        if not isinstance(data, str):
            raise _mismatch(tp, data, path)
        return data

    if tp is dict or tp is list:
        if not isinstance(data, tp):
            raise _mismatch(tp, data, path)
        return data

    raise DecodeError(f"{path}: unsupported result type {_type_label(tp)}")


def _decode_dataclass(cls: type, data: Any, path: str) -> Any:
    hints = _type_hints(cls)
    init_fields = [f for f in fields(cls) if f.init]

    if isinstance(data, list):
        required = sum(
            1
            for f in init_fields
            if f.default is MISSING and f.default_factory is MISSING
        )
        if len(data) < required:
            raise DecodeError(
                f"{path}: expected at least {required} items for {cls.__name__}, got {len(data)}"
            )
        return cls(
            **{
                f.name: decode_into(hints[f.name], value, f"{path}[{i}]")
                for i, (f, value) in enumerate(zip(init_fields, data))
            }
        )

    if not isinstance(data, dict):
        raise _mismatch(cls, data, path)

    kwargs: dict[str, Any] = {}
    for f in init_fields:
        key = wire_name(f)
        if key in data:
            kwargs[f.name] = decode_into(hints[f.name], data[key], f"{path}.{key}")
        elif f.default is MISSING and f.default_factory is MISSING:
            raise DecodeError(f"{path}: missing required field {key!r}")
    return cls(**kwargs)


# ============================================================================
# DISPLAY UTILITIES
# ============================================================================


def print_data(response: Any) -> None:
    """Pretty-print response data, handling dataclasses specially.

    Dataclass instances are converted to dictionaries before printing
    for better formatting.

    Args:
        response: Data to print

    """
    if is_dataclass(response) and not isinstance(response, type):
        cpprint(asdict(response))
    else:
        cpprint(response)
