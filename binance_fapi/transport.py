"""Signed transport layer.

An ``Endpoint`` describes one exchange operation: method, path, security level,
parameter schema and result schema. ``Transport`` turns an endpoint plus a
parameter value into an encoded (and, if required, signed) request, awaits the
executor once, and decodes the response into the declared result type or raises
a normalized error.

Encoding and signing are synchronous and happen before the only suspension
point, so nothing is left half-built if the awaiting task is cancelled.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Self, TypeVar

from binance_fapi.auth import Credentials, Signer
from binance_fapi.encoding import Params, encode_params
from binance_fapi.errors import (
    BadRequest,
    DecodeError,
    ExchangeError,
    Forbidden,
    IpBanned,
    MissingCredentialsError,
    NotFound,
    RateLimited,
    ServerError,
    Unauthorized,
    ValidationError,
)
from binance_fapi.executors.defaults import DEFAULT_HTTP_EXECUTOR
from binance_fapi.executors.interface import HttpExecutor, HttpResponse
from binance_fapi.helpers import (
    API_KEY_HEADER,
    DEFAULT_API_URL,
    current_timestamp_ms,
    decode_into,
    deserialize_response,
    get_client_id,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

# Sentinel for "use the transport's default timeout"
DEFAULT_TIMEOUT: Any = object()

QUERY_METHODS = frozenset({"GET", "PUT", "DELETE"})
BODY_METHODS = frozenset({"POST"})

STATUS_ERRORS: dict[int, type[ExchangeError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    418: IpBanned,
    429: RateLimited,
}


class Security(Enum):
    """How a request is authenticated."""

    NONE = "NONE"
    # API key header only (market data and user stream reads)
    API_KEY = "API_KEY"
    # API key header plus timestamp and signature
    SIGNED = "SIGNED"


@dataclass(frozen=True)
class Endpoint(Generic[T]):
    """Declaration of one exchange operation.

    ``result`` is the type the response body decodes into; it can be a
    dataclass, ``list[...]``, ``dict[str, ...]``, ``Json`` or None when the
    body is ignored. ``params`` optionally names the parameter dataclass the
    operation expects.
    """

    method: str
    path: str
    security: Security
    result: Any
    params: type | None = None

    @property
    def signed(self) -> bool:
        return self.security is Security.SIGNED


@dataclass(frozen=True)
class PreparedRequest:
    """A fully encoded request, consumed once by an executor."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None = None


def raise_response_errors(response: HttpResponse, url: str) -> None:
    """Check HTTP response status and raise the matching error.

    Non-2XX responses must carry the exchange error envelope
    ``{"code": int, "msg": str}``; anything else is reported as a DecodeError
    with the raw body.

    Args:
        response: The HTTP response to validate
        url: Requested URL without query, for error messages

    Raises:
        BadRequest: For 400 status codes
        Unauthorized: For 401 status codes
        Forbidden: For 403 status codes
        NotFound: For 404 status codes
        IpBanned: For 418 status codes
        RateLimited: For 429 status codes
        ServerError: For 5XX status codes
        ExchangeError: For other non-2XX status codes
        DecodeError: If the error envelope cannot be parsed

    """
    status = response.status

    if 200 <= status < 300:
        return

    try:
        body = deserialize_response(response.content, url, status)
    except DecodeError as e:
        raise DecodeError(
            f"Unparseable error response ({status}) from {url}",
            raw=response.content,
            status_code=status,
        ) from e

    code = body.get("code") if isinstance(body, dict) else None
    message = body.get("msg") if isinstance(body, dict) else None
    if not isinstance(code, int) or isinstance(code, bool) or not isinstance(message, str):
        raise DecodeError(
            f"Unexpected error response ({status}) from {url}",
            raw=response.content,
            status_code=status,
        )

    if status in STATUS_ERRORS:
        raise STATUS_ERRORS[status](status, code, message)

    if 500 <= status < 600:
        raise ServerError(status, code, message)

    raise ExchangeError(status, code, message)


def decode_response(response: HttpResponse, result_type: Any, url: str) -> Any:
    """Decode an HTTP response into the declared result type.

    Args:
        response: The raw HTTP response
        result_type: The declared result type, or None to ignore the body
        url: Requested URL without query, for error messages

    Returns:
        The decoded result

    Raises:
        ExchangeError: If the exchange rejected the request
        DecodeError: If the body does not match the declared result type

    """
    raise_response_errors(response, url)

    if result_type is None:
        return None

    body = deserialize_response(response.content, url, response.status)
    try:
        return decode_into(result_type, body)
    except DecodeError as e:
        raise DecodeError(
            f"Response from {url} does not match {getattr(result_type, '__name__', result_type)}: {e.message}",
            raw=response.content,
            status_code=response.status,
        ) from e


class Transport:
    """Builds, signs, dispatches and decodes requests against one base URL.

    The only state is configuration fixed at construction; credentials are
    immutable. One Transport can serve any number of concurrent requests.
    No retries, queuing or rate limiting are performed: that is left to callers.

    Examples:
        .. code-block:: python

            transport = Transport(
                credentials=Credentials("api-key", "api-secret"),
            )
            order = await transport.request(
                Endpoint("GET", "/fapi/v1/order", Security.SIGNED, Order),
                {"symbol": "BTCUSDT", "orderId": 1},
                recv_window=5000,
            )
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        credentials: Credentials | None = None,
        executor: HttpExecutor | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = None,
        clock: Callable[[], int] = current_timestamp_ms,
    ):
        """Initialize a Transport.

        Args:
            base_url: Scheme and host every endpoint path is appended to.
            credentials: API key and secret; None for a public-only transport.
            executor: HTTP executor (default: DEFAULT_HTTP_EXECUTOR).
            recv_window: Default recvWindow for signed requests, in milliseconds.
            timeout: Default per-request timeout in seconds; None for no timeout.
            clock: Millisecond clock used for signed request timestamps.

        """
        self.base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._signer = Signer(credentials, clock) if credentials is not None else None
        self._executor = executor if executor is not None else DEFAULT_HTTP_EXECUTOR()
        self.recv_window = recv_window
        self.timeout = timeout

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def executor(self) -> HttpExecutor:
        return self._executor

    def prepare(
        self,
        endpoint: Endpoint[Any],
        params: Params | None = None,
        *,
        recv_window: int | None = None,
        timestamp: int | None = None,
    ) -> PreparedRequest:
        """Encode, and sign if required, a request for an endpoint.

        Args:
            endpoint: The operation to call.
            params: Parameter mapping or dataclass instance, or None.
            recv_window: recvWindow override for signed endpoints.
            timestamp: Explicit timestamp for signed endpoints.

        Returns:
            The prepared request.

        Raises:
            MissingCredentialsError: If the endpoint needs credentials and none are set.
            ValidationError: If parameters cannot be encoded or do not fit the endpoint.

        """
        method = endpoint.method.upper()
        if method not in QUERY_METHODS | BODY_METHODS:
            raise ValidationError(f"Unsupported HTTP method {endpoint.method!r}")

        if (
            endpoint.params is not None
            and params is not None
            and not isinstance(params, (endpoint.params, Mapping))
        ):
            raise ValidationError(
                f"{endpoint.path} expects {endpoint.params.__name__} parameters, "
                f"got {type(params).__name__}"
            )

        headers = {
            "Accept": "application/json",
            "User-Agent": get_client_id(),
        }

        if endpoint.security is not Security.NONE:
            if self._credentials is None:
                raise MissingCredentialsError()
            headers[API_KEY_HEADER] = self._credentials.api_key

        query = encode_params(params)

        if endpoint.signed:
            if self._signer is None:
                raise MissingCredentialsError()
            query = self._signer.sign(
                query,
                timestamp=timestamp,
                recv_window=recv_window if recv_window is not None else self.recv_window,
            )
        elif recv_window is not None or timestamp is not None:
            raise ValidationError(
                f"recv_window and timestamp only apply to signed endpoints, not {endpoint.path}"
            )

        url = f"{self.base_url}{endpoint.path}"
        body: bytes | None = None
        if method in BODY_METHODS:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
            body = query.encode()
        elif query:
            url = f"{url}?{query}"

        return PreparedRequest(method=method, url=url, headers=headers, body=body)

    async def request(
        self,
        endpoint: Endpoint[T],
        params: Params | None = None,
        *,
        recv_window: int | None = None,
        timestamp: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> T:
        """Call an endpoint and decode its result.

        Args:
            endpoint: The operation to call.
            params: Parameter mapping or dataclass instance, or None.
            recv_window: recvWindow override for signed endpoints.
            timestamp: Explicit timestamp for signed endpoints.
            timeout: Timeout in seconds for this call; defaults to the transport's.

        Returns:
            The response decoded into ``endpoint.result``.

        Raises:
            ConfigurationError: If the endpoint needs credentials and none are set.
            ValidationError: If parameters are invalid. No request is sent.
            TransportError: If the request could not be completed.
            ExchangeError: If the exchange rejected the request.
            DecodeError: If the response does not match the declared result.

        """
        prepared = self.prepare(
            endpoint, params, recv_window=recv_window, timestamp=timestamp
        )
        if timeout is DEFAULT_TIMEOUT:
            timeout = self.timeout

        log.debug("%s %s", prepared.method, endpoint.path)
        response = await self._executor.send_request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            body=prepared.body,
            timeout=timeout,
        )
        log.debug("%s %s -> %d", prepared.method, endpoint.path, response.status)

        return decode_response(
            response, endpoint.result, f"{self.base_url}{endpoint.path}"
        )

    async def close(self) -> None:
        """Close the underlying executor."""
        await self._executor.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
