"""WebSocket client for the user data stream.

This module provides the BinanceWSAccountClient, which obtains a listen key
through the REST client and streams account, order and margin events.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import orjson

from binance_fapi.connection import connect_with_retry
from binance_fapi.errors import DecodeError, ValidationError, WebSocketConnectionError
from binance_fapi.executors import DEFAULT_WS_EXECUTOR, WsConnection, WsExecutor
from binance_fapi.helpers import DEFAULT_STREAM_URL
from binance_fapi.types import JsonObject, WsEventHandler

if TYPE_CHECKING:
    from binance_fapi.api import BinanceFuturesClient

log = logging.getLogger(__name__)

# Listen keys expire after 60 minutes without a keepalive
DEFAULT_KEEPALIVE_INTERVAL: float = 30 * 60


class BinanceWSAccountClient:
    """WebSocket client for streaming user data events.

    Events are dispatched by their ``e`` field, for example
    ``"ACCOUNT_UPDATE"``, ``"ORDER_TRADE_UPDATE"`` or ``"MARGIN_CALL"``.
    """

    def __init__(
        self,
        client: "BinanceFuturesClient",
        stream_url: str = DEFAULT_STREAM_URL,
        executor: WsExecutor | None = None,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
    ):
        """Initialize the user data stream client.

        Args:
            client: REST client holding the credentials used for the listen key.
            stream_url: Base stream URL. Defaults to DEFAULT_STREAM_URL.
            executor: Optional WebSocket executor. If None, uses the default executor.
            keepalive_interval: Seconds without a message after which ``listen``
                renews the listen key.

        """
        self.client = client
        self.stream_url = stream_url.rstrip("/")
        self.keepalive_interval = keepalive_interval
        self.listen_key: str | None = None
        self._websocket: WsConnection | None = None
        self._event_handlers: dict[str, list[WsEventHandler]] = {}
        self._executor: WsExecutor = (
            executor if executor is not None else DEFAULT_WS_EXECUTOR()
        )

    @property
    def websocket(self) -> WsConnection:
        """Get the active WebSocket connection.

        Raises:
            ValidationError: If no connection exists. Must call connect() first.

        """
        if self._websocket is None:
            raise ValidationError("No existing ws connection. Call `connect` first")
        return self._websocket

    @property
    def is_connected(self) -> bool:
        """Whether the stream socket is open."""
        return self._websocket is not None

    def on(self, event: str, handler: WsEventHandler) -> None:
        """Register a callback for a user data event type."""
        self._event_handlers.setdefault(event, []).append(handler)

    async def connect(self) -> None:
        """Start a user data stream and connect to it.

        Raises:
            MissingCredentialsError: If the REST client has no credentials.
            WebSocketConnectionError: If connection fails after retry attempts.

        """
        listen_key = await self.client.start_user_stream()
        self.listen_key = listen_key.listen_key
        self._websocket = await connect_with_retry(
            f"{self.stream_url}/ws/{self.listen_key}",
            executor=self._executor,
        )

    async def keepalive(self) -> None:
        """Extend the validity of the listen key.

        Raises:
            ValidationError: If the stream has not been started.

        """
        if not self.listen_key:
            raise ValidationError("Cannot send keepalive: listen key not initialized")
        await self.client.keepalive_user_stream()
        log.debug("Listen key renewed")

    async def listen(self) -> JsonObject | None:
        """Receive and dispatch a single message from the user data stream.

        Waits up to ``keepalive_interval`` seconds. If no message arrives in
        that time the listen key is renewed instead.

        Returns:
            The parsed event, or None if the wait timed out or the connection
            was closed.

        Raises:
            ValidationError: If not connected.
            DecodeError: If a message is not valid JSON.

        """
        try:
            raw = await asyncio.wait_for(
                self.websocket.recv(), timeout=self.keepalive_interval
            )
        except asyncio.TimeoutError:
            await self.keepalive()
            return None
        except WebSocketConnectionError as e:
            log.warning("WebSocket closed: %s", e)
            self._websocket = None
            return None

        try:
            message = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise DecodeError(
                f"Failed to parse user data stream message: {e}", raw=raw
            ) from e
        if not isinstance(message, dict):
            log.debug("Ignoring non-object message: %s", raw)
            return None

        event = message.get("e")
        if event == "listenKeyExpired":
            log.warning("Listen key expired")
        for handler in self._event_handlers.get(event, []):
            await handler(message)
        return message

    async def disconnect(self) -> None:
        """Close the connection and the user data stream.

        After calling this method, connect() must be called again before listening.
        """
        if self._websocket:
            await self._websocket.close()
            self._websocket = None
        if self.listen_key:
            self.listen_key = None
            await self.client.close_user_stream()
