"""
User Data Stream Example

Opens a listen key with the REST client, connects to the user data stream and
prints account and order events. The listen key is renewed whenever the
stream is quiet for the keepalive interval.
"""

import asyncio

from binance_fapi import BinanceFuturesClient, BinanceWSAccountClient
from binance_fapi.env_setup import setup_environment
from binance_fapi.types import JsonObject


async def example_ws_account(max_messages: int = 10) -> None:
    """Print user data events until max_messages have arrived."""
    api_url, wallet_api_url, stream_url, api_key, api_secret, recv_window = (
        setup_environment()
    )

    async with BinanceFuturesClient(
        api_url, wallet_api_url, api_key, api_secret, recv_window=recv_window
    ) as rest:
        stream = BinanceWSAccountClient(rest, stream_url)

        async def on_order(event: JsonObject) -> None:
            order = event["o"]
            print(f"[Order] {order['s']} {order['S']} {order['X']}")

        async def on_account(event: JsonObject) -> None:
            print(f"[Account] reason={event['a']['m']}")

        stream.on("ORDER_TRADE_UPDATE", on_order)
        stream.on("ACCOUNT_UPDATE", on_account)

        await stream.connect()
        try:
            received = 0
            while stream.is_connected and received < max_messages:
                if await stream.listen() is not None:
                    received += 1
        finally:
            await stream.disconnect()


if __name__ == "__main__":
    asyncio.run(example_ws_account())
