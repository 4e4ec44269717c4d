"""WebSocket client for futures market streams.

This module provides the BinanceWSMarketClient for subscribing to real-time
market events such as trades, mark prices, klines and order book updates.
"""

import asyncio
import logging
from typing import Self

import orjson

from binance_fapi.connection import connect_with_retry
from binance_fapi.errors import ValidationError, WebSocketConnectionError
from binance_fapi.executors.defaults import DEFAULT_WS_EXECUTOR
from binance_fapi.executors.interface import WsConnection, WsExecutor
from binance_fapi.helpers import DEFAULT_STREAM_URL
from binance_fapi.types import StreamSubscription, WsEventHandler

log = logging.getLogger(__name__)


class BinanceWSMarketClient:
    """WebSocket client for streaming Binance futures market data.

    Handlers are registered per event type, the ``e`` field of each event
    (e.g. ``"aggTrade"``, ``"markPriceUpdate"``, ``"kline"``).

    Examples:
        .. code-block:: python

            client = BinanceWSMarketClient()
            await client.connect()

            async def on_mark_price(event):
                print(event["s"], event["p"])

            client.on("markPriceUpdate", on_mark_price)
            await client.subscribe(
                [StreamSubscription("BTCUSDT", StreamTopic.MARK_PRICE)]
            )
    """

    def __init__(
        self,
        stream_url: str = DEFAULT_STREAM_URL,
        executor: WsExecutor | None = None,
    ):
        """Initialize the market stream client.

        Args:
            stream_url: Base stream URL. Defaults to DEFAULT_STREAM_URL.
            executor: Optional WebSocket executor. If None, uses the default executor.

        """
        self.stream_url = stream_url.rstrip("/") + "/ws"
        self._websocket: WsConnection | None = None
        self._event_handlers: dict[str, list[WsEventHandler]] = {}
        self._receive_task: asyncio.Task[None] | None = None
        self._message_id = 0
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

    async def connect(self) -> Self:
        """Open the stream connection and start the receive loop.

        Raises:
            WebSocketConnectionError: If connection fails after retry attempts.

        """
        self._websocket = await connect_with_retry(self.stream_url, executor=self._executor)
        self._receive_task = asyncio.create_task(self._receive_loop())
        return self

    def _next_message_id(self) -> int:
        self._message_id += 1
        return self._message_id

    async def _send_method(
        self, method: str, subscriptions: list[StreamSubscription]
    ) -> int:
        if not subscriptions:
            raise ValidationError(f"{method} requires at least one subscription")
        message_id = self._next_message_id()
        message = {
            "method": method,
            "params": [sub.stream_name for sub in subscriptions],
            "id": message_id,
        }
        await self.websocket.send(orjson.dumps(message).decode())
        return message_id

    async def subscribe(self, subscriptions: list[StreamSubscription]) -> int:
        """Subscribe to one or more market streams.

        Args:
            subscriptions: Streams to subscribe to.

        Returns:
            The id of the request, echoed by the server's acknowledgement.

        Raises:
            ValidationError: If not connected or no subscriptions are given.

        """
        return await self._send_method("SUBSCRIBE", subscriptions)

    async def unsubscribe(self, subscriptions: list[StreamSubscription]) -> int:
        """Unsubscribe from one or more market streams.

        Returns:
            The id of the request, echoed by the server's acknowledgement.

        """
        return await self._send_method("UNSUBSCRIBE", subscriptions)

    def on(self, event: str, handler: WsEventHandler) -> None:
        """Register a callback for an event type (e.g. 'aggTrade')."""
        self._event_handlers.setdefault(event, []).append(handler)

    async def _receive_loop(self) -> None:
        """Receive messages and dispatch events to their handlers until cancelled.

        Acknowledgements (``{"result": ..., "id": ...}``) carry no event type and
        are only logged. Events from combined streams are unwrapped from their
        ``{"stream": ..., "data": ...}`` envelope.

        A handler that raises is logged and the loop moves on to the next message.
        The loop ends, with a log record, when the connection closes or a
        message cannot be parsed.
        """
        try:
            while True:
                raw = await self.websocket.recv()
                msg = orjson.loads(raw)
                if isinstance(msg, dict) and "stream" in msg and "data" in msg:
                    msg = msg["data"]
                if not isinstance(msg, dict):
                    continue

                event = msg.get("e")
                if event is None:
                    if "id" in msg:
                        log.debug("Request %s acknowledged: %s", msg["id"], msg.get("result"))
                    continue
                for handler in self._event_handlers.get(event, []):
                    try:
                        await handler(msg)
                    except Exception:
                        log.exception("Handler for %s event failed", event)
        except asyncio.CancelledError:
            pass
        except WebSocketConnectionError as e:
            log.warning("WebSocket closed: %s", e)
        except Exception as e:
            log.error("Receive loop error: %s", e)

    async def disconnect(self) -> None:
        """Stop the receive loop and close the connection.

        After calling this method, connect() must be called again before subscribing.
        """
        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None
        if self._websocket:
            await self._websocket.close()
            self._websocket = None
