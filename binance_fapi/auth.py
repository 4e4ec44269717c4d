"""Credentials and request signing.

Signed requests carry an HMAC-SHA256 of the exact query string that is sent,
keyed by the API secret. ``Signer.sign`` builds that final string in one pass:
request parameters, then ``recvWindow``, then ``timestamp``, then
``signature``. Nothing may be reordered or re-encoded afterwards.
"""

import hmac
from dataclasses import dataclass, field
from hashlib import sha256
from typing import Callable

from binance_fapi.errors import ValidationError
from binance_fapi.helpers import MAX_RECV_WINDOW, current_timestamp_ms


def _mask(value: str) -> str:
    return value[:4] + "..." if len(value) > 8 else "***"


@dataclass(frozen=True)
class Credentials:
    """API key and secret for one client instance.

    Immutable once constructed and safe to share between concurrent requests.
    The secret never appears in ``repr``.
    """

    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        for name in ("api_key", "api_secret"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValidationError(f"{name} must be a non-empty string")

    def __repr__(self) -> str:
        return f"Credentials(api_key={_mask(self.api_key)!r}, api_secret='***')"


def compute_signature(secret: str, payload: str) -> str:
    """Lowercase hex HMAC-SHA256 of ``payload`` keyed by ``secret``."""
    return hmac.new(secret.encode(), payload.encode(), sha256).hexdigest()


def validate_recv_window(recv_window: int) -> int:
    """Check that a recvWindow is a positive millisecond count within the exchange limit.

    Raises:
        ValidationError: If the value is not an int in ``1..MAX_RECV_WINDOW``

    """
    if isinstance(recv_window, bool) or not isinstance(recv_window, int):
        raise ValidationError(f"recv_window must be an int, got {recv_window!r}")
    if not 0 < recv_window <= MAX_RECV_WINDOW:
        raise ValidationError(
            f"recv_window must be between 1 and {MAX_RECV_WINDOW} ms, got {recv_window}"
        )
    return recv_window


class Signer:
    """Signs canonical query strings with one set of credentials."""

    def __init__(
        self,
        credentials: Credentials,
        clock: Callable[[], int] = current_timestamp_ms,
    ):
        """Initialize a Signer.

        Args:
            credentials: The credentials whose secret keys the signature.
            clock: Millisecond clock used when no timestamp is supplied.

        """
        self._credentials = credentials
        self._clock = clock

    def sign(
        self,
        query: str,
        *,
        timestamp: int | None = None,
        recv_window: int | None = None,
    ) -> str:
        """Append recvWindow, timestamp and signature to a canonical query string.

        Args:
            query: Canonical query string of the request parameters (may be empty).
            timestamp: Milliseconds since epoch; taken from the clock when None.
            recv_window: Optional tolerance for clock skew in milliseconds.

        Returns:
            The fully signed query string, ready to be sent as-is.

        Raises:
            ValidationError: If recv_window or timestamp is invalid.

        """
        parts = [query] if query else []
        if recv_window is not None:
            parts.append(f"recvWindow={validate_recv_window(recv_window)}")

        if timestamp is None:
            timestamp = self._clock()
        elif isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise ValidationError(f"timestamp must be an int, got {timestamp!r}")
        parts.append(f"timestamp={timestamp}")

        payload = "&".join(parts)
        signature = compute_signature(self._credentials.api_secret, payload)
        return f"{payload}&signature={signature}"
