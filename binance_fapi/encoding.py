"""Canonical parameter encoding.

The exchange verifies signatures over the exact query bytes it receives, so
parameters are encoded deterministically: declared order is kept, absent
values are dropped, and every value has exactly one textual form.
"""

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, TypeAlias, get_args, get_type_hints
from urllib.parse import quote

from binance_fapi.errors import ValidationError
from binance_fapi.types import NumericInput, full_precision_string, wire_name

ParamValue: TypeAlias = str | int | float | bool | Decimal | Enum | datetime | None
Params: TypeAlias = Mapping[str, ParamValue] | Any

# Appended by the signer, never accepted from callers
RESERVED_KEYS = frozenset({"recvWindow", "timestamp", "signature"})

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_NUMERIC_TYPES = frozenset(get_args(NumericInput))


def encode_value(value: ParamValue) -> str:
    """Render a parameter value in its canonical textual form.

    Raises:
        ValidationError: If the value type has no canonical form

    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (Decimal, float)):
        return full_precision_string(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return str((value - EPOCH) // timedelta(milliseconds=1))
    if isinstance(value, str):
        return value
    raise ValidationError(
        f"Unsupported parameter value {value!r} of type {type(value).__name__}"
    )


def _is_numeric_hint(hint: Any) -> bool:
    return _NUMERIC_TYPES <= set(get_args(hint))


def _items(params: Params) -> list[tuple[Any, Any, bool]]:
    """List ``(key, value, numeric)`` triples.

    Dataclass fields annotated with NumericInput are flagged numeric, so their
    string values are checked and rendered as fixed-point decimals.
    """
    if isinstance(params, Mapping):
        return [(key, value, False) for key, value in params.items()]
    if is_dataclass(params) and not isinstance(params, type):
        hints = get_type_hints(type(params))
        return [
            (wire_name(f), getattr(params, f.name), _is_numeric_hint(hints[f.name]))
            for f in fields(params)
        ]
    raise ValidationError(
        f"Parameters must be a mapping or a dataclass instance, got {type(params).__name__}"
    )


def canonical_pairs(params: Params | None) -> list[tuple[str, str]]:
    """Flatten parameters into ordered ``(key, value)`` text pairs.

    Keys keep the mapping's insertion order or the dataclass field order.
    Pairs whose value is None are omitted.

    Raises:
        ValidationError: On non-string or reserved keys, unsupported values,
            or numeric fields whose value is not a plain decimal

    """
    if params is None:
        return []

    pairs: list[tuple[str, str]] = []
    for key, value, numeric in _items(params):
        if not isinstance(key, str) or not key:
            raise ValidationError(f"Invalid parameter name {key!r}")
        if key in RESERVED_KEYS:
            raise ValidationError(
                f"{key!r} is added when signing and cannot be passed as a parameter"
            )
        if value is None:
            continue
        if numeric:
            pairs.append((key, full_precision_string(value)))
        else:
            pairs.append((key, encode_value(value)))
    return pairs


def join_pairs(pairs: list[tuple[str, str]]) -> str:
    """Join text pairs into a query string, percent-encoding keys and values."""
    return "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in pairs
    )


def encode_params(params: Params | None) -> str:
    """Encode parameters into the canonical query string."""
    return join_pairs(canonical_pairs(params))
