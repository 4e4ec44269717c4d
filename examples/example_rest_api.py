"""
Authenticated REST API Example

Reads the account and places, queries and cancels a limit order far from the
market. Run it against the testnet (ENVIRONMENT=testnet).

Environment Variables Required:
- BINANCE_API_KEY_<ENVIRONMENT>: Your API key
- BINANCE_API_SECRET_<ENVIRONMENT>: Your API secret
- BINANCE_API_URL_<ENVIRONMENT> (optional): API base URL
"""

import asyncio
from decimal import Decimal

from binance_fapi import (
    BinanceFuturesClient,
    ExchangeError,
    OrderRequest,
    OrderType,
    Side,
    TimeInForce,
    print_data,
)
from binance_fapi.env_setup import setup_environment

SYMBOL = "BTCUSDT"


async def example_auth_rest_api() -> None:
    """Demonstrate signed account and order endpoints."""

    api_url, wallet_api_url, _, api_key, api_secret, recv_window = setup_environment()

    async with BinanceFuturesClient(
        api_url=api_url,
        wallet_api_url=wallet_api_url,
        api_key=api_key,
        api_secret=api_secret,
        recv_window=recv_window,
        timeout=10,
    ) as client:
        await client.sync_time()

        account = await client.get_account()
        print(f"[Account] wallet balance {account.total_wallet_balance}")
        print_data(await client.get_balance("USDT"))

        ticker = await client.get_ticker_price(SYMBOL)
        price = (Decimal(ticker.price) * Decimal("0.5")).quantize(Decimal("0.1"))

        order = await client.place_order(
            OrderRequest(
                symbol=SYMBOL,
                side=Side.BUY,
                order_type=OrderType.LIMIT,
                time_in_force=TimeInForce.GTC,
                quantity="0.002",
                price=price,
            )
        )
        print(f"[Order] placed {order.order_id} at {order.price}: {order.status.value}")

        open_orders = await client.get_open_orders(SYMBOL)
        print(f"[Open Orders] {len(open_orders)}")

        status = await client.get_order(SYMBOL, order_id=order.order_id)
        print(f"[Order] status {status.status.value}")

        try:
            canceled = await client.cancel_order(SYMBOL, order_id=order.order_id)
            print(f"[Order] {canceled.order_id} {canceled.status.value}")
        except ExchangeError as e:
            print(f"[Order] cancel failed: {e} (retryable: {e.retryable})")

        for trade in await client.get_trade_history(SYMBOL, limit=5):
            print(f"  trade {trade.id}: {trade.side.value} {trade.qty} @ {trade.price}")


if __name__ == "__main__":
    asyncio.run(example_auth_rest_api())
