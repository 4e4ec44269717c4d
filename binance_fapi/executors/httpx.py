"""HTTP executor implementation using httpx.

This module provides asynchronous HTTP request handling using the httpx
library. It is the default HTTP executor of the SDK.
"""

from typing import override

import httpx

from binance_fapi.errors import (
    HttpConnectionError,
    TransportError,
    TransportTimeoutError,
)
from binance_fapi.executors.interface import HttpExecutor, HttpResponse


class HttpxHttpExecutor(HttpExecutor):
    """HTTP executor implementation using ``httpx.AsyncClient``.

    The client is created once and reused for connection pooling. Concurrent
    requests through the same executor are independent of each other.
    """

    def __init__(self, client: httpx.AsyncClient | None = None):
        """Initialize the HTTPX HTTP executor.

        Args:
            client: Optional preconfigured AsyncClient (proxies, transports, limits).
                Timeouts configured on it are overridden per request.

        """
        self.client = client if client is not None else httpx.AsyncClient()

    @override
    async def send_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send a request with httpx.

        Args:
            method: The HTTP method to use.
            url: Absolute URL including the encoded query string.
            headers: Request headers.
            body: Optional encoded request body.
            timeout: Timeout in seconds; None disables the timeout.

        Returns:
            HttpResponse containing the status code, raw body and headers.

        Raises:
            TransportTimeoutError: If the request times out.
            HttpConnectionError: If there is a connection or network error.
            TransportError: If any other transport-level error occurs.

        """
        target = url.partition("?")[0]
        try:
            response = await self.client.request(
                method,
                url,
                headers=headers,
                content=body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"{method} request to {target} timed out", timeout_seconds=timeout
            ) from e
        except httpx.NetworkError as e:
            raise HttpConnectionError(
                f"Network error during {method} request", url=target
            ) from e
        except Exception as e:
            raise TransportError(f"{method} request to {target} failed: {e}") from e
        return HttpResponse(
            status=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    @override
    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self.client.aclose()
