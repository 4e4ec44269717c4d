"""Stream executor built on the websockets library.

An alternative to the default aiohttp executor. The futures stream server
sends a ping frame every few minutes and drops clients that do not answer;
websockets answers those pings itself, so no client pings are scheduled.
"""

from typing import override

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from binance_fapi.errors import (
    DecodeError,
    TransportError,
    WebSocketConnectionError,
    WebSocketMessageError,
)
from binance_fapi.executors.interface import WsConnection, WsExecutor
from binance_fapi.helpers import redact_stream_url

# Depth snapshots for all symbols exceed the websockets 1 MiB default
DEFAULT_MAX_MESSAGE_SIZE: int = 4 * 1024 * 1024


def _close_reason(e: ConnectionClosed) -> str:
    frame = e.rcvd or e.sent
    if frame is None:
        return "no close frame"
    if frame.reason:
        return f"code {frame.code}: {frame.reason}"
    return f"code {frame.code}"


class WebsocketsWsConnection(WsConnection):
    """Stream connection backed by a websockets ClientConnection."""

    def __init__(self, ws: ClientConnection, url: str):
        self._ws = ws
        self._url = redact_stream_url(url)

    @property
    def close_code(self) -> int | None:
        """Close code of the connection, or None while it is open."""
        return self._ws.close_code

    @override
    async def send(self, serialized_body: str) -> None:
        try:
            await self._ws.send(serialized_body)
        except ConnectionClosed as e:
            raise WebSocketConnectionError(
                f"Stream closed while sending ({_close_reason(e)})", url=self._url
            ) from e
        except Exception as e:
            raise WebSocketMessageError(f"Failed to send stream message: {e}") from e

    @override
    async def recv(self) -> str:
        """Receive one frame as text.

        Raises:
            WebSocketConnectionError: If the server closed the stream, e.g. with
                code 1008 after too many incoming messages.
            DecodeError: If a binary frame is not valid UTF-8.
            WebSocketMessageError: If receiving fails for any other reason.

        """
        try:
            msg = await self._ws.recv()
        except ConnectionClosed as e:
            raise WebSocketConnectionError(
                f"Stream closed ({_close_reason(e)})", url=self._url
            ) from e
        except Exception as e:
            raise WebSocketMessageError(f"Failed to receive stream message: {e}") from e

        if isinstance(msg, bytes):
            try:
                return msg.decode("utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(
                    f"Binary stream frame is not UTF-8: {e}", raw=msg
                ) from e
        return msg

    @override
    async def close(self) -> None:
        await self._ws.close()


class WebsocketsWsExecutor(WsExecutor):
    """Opens stream connections with websockets.

    Args:
        open_timeout: Seconds allowed for the opening handshake, None for no limit.
        max_size: Largest accepted message in bytes, None for no limit.

    """

    def __init__(
        self,
        *,
        open_timeout: float | None = 10,
        max_size: int | None = DEFAULT_MAX_MESSAGE_SIZE,
    ):
        self.open_timeout = open_timeout
        self.max_size = max_size

    @override
    async def connect(
        self, web_url: str, headers: dict[str, str] | None = None
    ) -> WsConnection:
        """Open a stream connection.

        Raises:
            WebSocketConnectionError: If the URL is invalid, the handshake fails,
                times out or the host cannot be reached. The listen key is
                redacted from the reported URL.
            TransportError: If an unexpected error occurs during connection.

        """
        safe_url = redact_stream_url(web_url)
        try:
            ws = await websockets.connect(
                web_url,
                additional_headers=headers or {},
                open_timeout=self.open_timeout,
                max_size=self.max_size,
                ping_interval=None,
            )
        except websockets.exceptions.InvalidURI as e:
            raise WebSocketConnectionError("Invalid stream URL", url=safe_url) from e
        except websockets.exceptions.InvalidHandshake as e:
            raise WebSocketConnectionError(
                f"Stream handshake failed: {e}", url=safe_url
            ) from e
        except (OSError, TimeoutError) as e:
            raise WebSocketConnectionError(
                f"Failed to connect to stream: {e}", url=safe_url
            ) from e
        except Exception as e:
            raise TransportError(
                f"Unexpected error connecting to stream at {safe_url}: {e}"
            ) from e
        return WebsocketsWsConnection(ws, web_url)
