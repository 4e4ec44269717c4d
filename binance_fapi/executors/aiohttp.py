"""HTTP and WebSocket executor implementations using aiohttp.

This module provides async HTTP requests and WebSocket connection handling
using the aiohttp library. The WebSocket executor is the SDK default.
"""

import asyncio
from typing import override

import aiohttp
from yarl import URL

from binance_fapi.errors import (
    DecodeError,
    HttpConnectionError,
    TransportError,
    TransportTimeoutError,
    WebSocketConnectionError,
    WebSocketMessageError,
)
from binance_fapi.executors.interface import (
    HttpExecutor,
    HttpResponse,
    WsConnection,
    WsExecutor,
)
from binance_fapi.helpers import redact_stream_url


class AiohttpHttpExecutor(HttpExecutor):
    """HTTP executor implementation using aiohttp.

    The ClientSession is created lazily on first use, inside the running loop.
    """

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None

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
        """Send a request with aiohttp.

        The URL is marked as already encoded so that aiohttp does not re-quote
        the signed query string.

        Raises:
            TransportTimeoutError: If the request times out.
            HttpConnectionError: If there is a connection or network error.
            TransportError: If any other transport-level error occurs.

        """
        target = url.partition("?")[0]
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            async with self._session.request(
                method,
                URL(url, encoded=True),
                headers=headers,
                data=body,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                content = await response.read()
                return HttpResponse(
                    status=response.status,
                    content=content,
                    headers=dict(response.headers),
                )
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(
                f"{method} request to {target} timed out", timeout_seconds=timeout
            ) from e
        except aiohttp.ClientConnectionError as e:
            raise HttpConnectionError(
                f"Network error during {method} request", url=target
            ) from e
        except Exception as e:
            raise TransportError(f"{method} request to {target} failed: {e}") from e

    @override
    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None


class AiohttpWsConnection(WsConnection):
    """WebSocket connection implementation using aiohttp.

    Wraps an aiohttp ClientWebSocketResponse for WebSocket communication.
    """

    def __init__(self, ws: aiohttp.ClientWebSocketResponse):
        self._ws = ws

    @override
    async def send(self, serialized_body: str) -> None:
        """Send a message through the WebSocket connection.

        Raises:
            WebSocketConnectionError: If the connection is lost while sending.
            WebSocketMessageError: If sending the message fails for any other reason.

        """
        try:
            await self._ws.send_str(serialized_body)
        except ConnectionError as e:
            raise WebSocketConnectionError(
                f"WebSocket connection lost while sending message: {e}"
            ) from e
        except Exception as e:
            raise WebSocketMessageError(f"Failed to send WebSocket message: {e}") from e

    @override
    async def recv(self) -> str:
        """Receive a message from the WebSocket connection.

        Returns:
            The received message as a string.

        Raises:
            WebSocketConnectionError: If the WebSocket is closed or encounters an error.
            WebSocketMessageError: If an unexpected message type is received.
            DecodeError: If a binary message is not valid UTF-8.
            TransportError: If receiving the message fails for any other reason.

        """
        try:
            msg = await self._ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return msg.data  # type: ignore
            elif msg.type == aiohttp.WSMsgType.BINARY:
                return msg.data.decode("utf-8")  # type: ignore
            elif msg.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSING,
                aiohttp.WSMsgType.CLOSED,
            ):
                raise WebSocketConnectionError("WebSocket closed")
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise WebSocketConnectionError(
                    f"WebSocket error: {self._ws.exception()}"
                )
            else:
                raise WebSocketMessageError(f"Unexpected message type: {msg.type}")
        except (WebSocketConnectionError, WebSocketMessageError):
            raise
        except UnicodeDecodeError as e:
            raise DecodeError(f"Failed to decode WebSocket message: {e}") from e
        except Exception as e:
            raise TransportError(f"Failed to receive WebSocket message: {e}") from e

    @override
    async def close(self) -> None:
        """Close the WebSocket connection."""
        await self._ws.close()


class AiohttpWsExecutor(WsExecutor):
    """WebSocket executor implementation using aiohttp.

    Manages aiohttp ClientSession and establishes WebSocket connections.
    """

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None

    @override
    async def connect(
        self, web_url: str, headers: dict[str, str] | None = None
    ) -> WsConnection:
        """Connect to a WebSocket endpoint.

        Args:
            web_url: The WebSocket URL to connect to.
            headers: Optional dictionary of HTTP headers to send with the connection request.

        Returns:
            A WsConnection instance wrapping the established WebSocket connection.

        Raises:
            WebSocketConnectionError: If the WebSocket handshake fails, connection fails,
                or the connection times out. The listen key is redacted from the
                reported URL.
            TransportError: If an unexpected error occurs during connection.

        """
        safe_url = redact_stream_url(web_url)
        try:
            if self._session is None:
                self._session = aiohttp.ClientSession()

            ws = await self._session.ws_connect(web_url, headers=headers)
            return AiohttpWsConnection(ws)
        except aiohttp.WSServerHandshakeError as e:
            # the error text carries the full request URL
            raise WebSocketConnectionError(
                f"WebSocket handshake failed with HTTP {e.status}", url=safe_url
            ) from e
        except aiohttp.ClientConnectionError as e:
            raise WebSocketConnectionError(
                f"Failed to connect to WebSocket: {type(e).__name__}", url=safe_url
            ) from e
        except asyncio.TimeoutError as e:
            raise WebSocketConnectionError(
                "Connection to WebSocket timed out", url=safe_url
            ) from e
        except Exception as e:
            raise TransportError(
                f"Unexpected error connecting to WebSocket at {safe_url}: {type(e).__name__}"
            ) from e

    async def close(self) -> None:
        """Close the executor and its underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
