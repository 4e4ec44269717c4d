"""
Public API Example

Calls the market data endpoints, which need no credentials.

Endpoints covered:
- Connectivity and server time
- Exchange information
- Order book, recent trades and klines
- Mark price, ticker price and book ticker
"""

import asyncio

from binance_fapi import BinanceFuturesClient, Interval, get_version, print_data
from binance_fapi.env_setup import setup_environment

SYMBOL = "BTCUSDT"


async def example_public_api() -> None:
    """Demonstrate the public endpoints without authentication."""

    print("=" * 70)
    print("Binance Futures Public API Example")
    print("=" * 70)
    print(f"\n[Info] SDK Version: {get_version()}\n")

    api_url, wallet_api_url, _, _, _, _ = setup_environment()

    async with BinanceFuturesClient(api_url, wallet_api_url) as client:
        await client.ping()
        server_time = await client.get_server_time()
        print(f"[Server Time] {server_time.server_time}")

        offset = await client.sync_time()
        print(f"[Clock] offset to exchange: {offset} ms")

        exchange_info = await client.get_exchange_info()
        print(f"[Exchange Info] {len(exchange_info.symbols)} symbols")
        for limit in exchange_info.rate_limits:
            print_data(limit)

        print("\n[Order Book]")
        print_data(await client.get_order_book(SYMBOL, limit=5))

        print("\n[Recent Trades]")
        for trade in await client.get_recent_trades(SYMBOL, limit=5):
            print(f"  {trade.price} x {trade.qty}")

        print("\n[Klines]")
        for kline in await client.get_klines(SYMBOL, Interval.ONE_HOUR, limit=3):
            print(f"  {kline.open_time}: O={kline.open} H={kline.high} L={kline.low} C={kline.close}")

        print("\n[Mark Price]")
        print_data(await client.get_mark_price(SYMBOL))

        print("\n[Ticker Price]")
        print_data(await client.get_ticker_price(SYMBOL))

        print("\n[Book Ticker]")
        print_data(await client.get_book_ticker(SYMBOL))


if __name__ == "__main__":
    asyncio.run(example_public_api())
