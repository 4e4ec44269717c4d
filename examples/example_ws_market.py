"""
WebSocket Market Data Client Example

Subscribes to mark price and aggregated trade streams for one symbol and
prints events until the message limit is reached or Ctrl+C is pressed.
"""

import asyncio

from binance_fapi import BinanceWSMarketClient, StreamSubscription, StreamTopic
from binance_fapi.env_setup import setup_environment
from binance_fapi.types import JsonObject


async def example_ws_market(max_messages: int | None = None) -> None:
    """Stream market events for BTCUSDT."""
    _, _, stream_url, _, _, _ = setup_environment()
    client = BinanceWSMarketClient(stream_url)
    received = asyncio.Event()
    count = 0

    async def on_event(event: JsonObject) -> None:
        nonlocal count
        count += 1
        print(f"[{event['e']}] {event['s']} price={event['p']}")
        if max_messages is not None and count >= max_messages:
            received.set()

    client.on("markPriceUpdate", on_event)
    client.on("aggTrade", on_event)

    await client.connect()
    subscriptions = [
        StreamSubscription("BTCUSDT", StreamTopic.MARK_PRICE),
        StreamSubscription("BTCUSDT", StreamTopic.AGG_TRADE),
    ]
    try:
        await client.subscribe(subscriptions)
        await received.wait()
        await client.unsubscribe(subscriptions)
    finally:
        await client.disconnect()


if __name__ == "__main__":
    try:
        asyncio.run(example_ws_market(max_messages=20))
    except KeyboardInterrupt:
        print("\n[Shutdown] interrupted")
