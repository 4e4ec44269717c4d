"""HTTP API client for the Binance USDⓈ-M futures exchange.

This module provides the BinanceFuturesClient class, a typed catalog of
exchange operations built on the signed ``Transport``. Market data, account
and order operations go to the futures host; deposit and asset operations go
to the wallet host. Both share one executor, one set of credentials and one
clock.
"""

import logging
from typing import Self

from binance_fapi.auth import Credentials, validate_recv_window
from binance_fapi.errors import AssetNotFound, ValidationError
from binance_fapi.executors import HttpExecutor
from binance_fapi.executors.defaults import DEFAULT_HTTP_EXECUTOR
from binance_fapi.helpers import (
    DEFAULT_API_URL,
    DEFAULT_WALLET_API_URL,
    OffsetClock,
    current_timestamp_ms,
)
from binance_fapi.transport import DEFAULT_TIMEOUT, Endpoint, Security, Transport
from binance_fapi.types import (
    AccountAsset,
    AccountInformation,
    AccountTrade,
    AssetDetail,
    BookTicker,
    DepositAddress,
    DepositHistoryQuery,
    DepositRecord,
    ExchangeInformation,
    Interval,
    Kline,
    KlinesQuery,
    ListenKey,
    MarketTrade,
    MarkPrice,
    Order,
    OrderId,
    OrderQuery,
    OrderRequest,
    OrderBook,
    ServerTime,
    TickerPrice,
    TradeHistoryQuery,
)

log = logging.getLogger(__name__)


# ============================================================================
# ENDPOINTS
# ============================================================================

PING = Endpoint("GET", "/fapi/v1/ping", Security.NONE, None)
SERVER_TIME = Endpoint("GET", "/fapi/v1/time", Security.NONE, ServerTime)
EXCHANGE_INFO = Endpoint(
    "GET", "/fapi/v1/exchangeInfo", Security.NONE, ExchangeInformation
)

ORDER_BOOK = Endpoint("GET", "/fapi/v1/depth", Security.NONE, OrderBook)
RECENT_TRADES = Endpoint("GET", "/fapi/v1/trades", Security.NONE, list[MarketTrade])
HISTORICAL_TRADES = Endpoint(
    "GET", "/fapi/v1/historicalTrades", Security.API_KEY, list[MarketTrade]
)
KLINES = Endpoint("GET", "/fapi/v1/klines", Security.NONE, list[Kline], KlinesQuery)
MARK_PRICE = Endpoint("GET", "/fapi/v1/premiumIndex", Security.NONE, MarkPrice)
TICKER_PRICE = Endpoint("GET", "/fapi/v1/ticker/price", Security.NONE, TickerPrice)
BOOK_TICKER = Endpoint("GET", "/fapi/v1/ticker/bookTicker", Security.NONE, BookTicker)

ACCOUNT = Endpoint("GET", "/fapi/v2/account", Security.SIGNED, AccountInformation)
OPEN_ORDERS = Endpoint("GET", "/fapi/v1/openOrders", Security.SIGNED, list[Order])
QUERY_ORDER = Endpoint("GET", "/fapi/v1/order", Security.SIGNED, Order, OrderQuery)
NEW_ORDER = Endpoint("POST", "/fapi/v1/order", Security.SIGNED, Order, OrderRequest)
CANCEL_ORDER = Endpoint("DELETE", "/fapi/v1/order", Security.SIGNED, Order, OrderQuery)
USER_TRADES = Endpoint(
    "GET",
    "/fapi/v1/userTrades",
    Security.SIGNED,
    list[AccountTrade],
    TradeHistoryQuery,
)

DEPOSIT_ADDRESS = Endpoint(
    "GET", "/sapi/v1/capital/deposit/address", Security.SIGNED, DepositAddress
)
DEPOSIT_HISTORY = Endpoint(
    "GET",
    "/sapi/v1/capital/deposit/hisrec",
    Security.SIGNED,
    list[DepositRecord],
    DepositHistoryQuery,
)
ASSET_DETAIL = Endpoint(
    "GET", "/sapi/v1/asset/assetDetail", Security.SIGNED, dict[str, AssetDetail]
)

START_USER_STREAM = Endpoint("POST", "/fapi/v1/listenKey", Security.SIGNED, ListenKey)
KEEPALIVE_USER_STREAM = Endpoint("PUT", "/fapi/v1/listenKey", Security.SIGNED, None)
CLOSE_USER_STREAM = Endpoint("DELETE", "/fapi/v1/listenKey", Security.SIGNED, None)


def _order_selector(
    symbol: str, order_id: OrderId | None, orig_client_order_id: str | None
) -> OrderQuery:
    if order_id is None and orig_client_order_id is None:
        raise ValidationError(
            "Either order_id or orig_client_order_id must be provided"
        )
    return OrderQuery(
        symbol=symbol, order_id=order_id, orig_client_order_id=orig_client_order_id
    )


class BinanceFuturesClient:
    """Binance USDⓈ-M futures API client.

    Every operation is a coroutine that awaits exactly one HTTP round trip.
    Signed operations accept ``recv_window`` and every operation accepts
    ``timeout`` (seconds) to override the client defaults for that call.

    Examples:
        .. code-block:: python

            import asyncio
            import os

            from binance_fapi import BinanceFuturesClient, OrderRequest, OrderType, Side

            async def main():
                async with BinanceFuturesClient(
                    api_key=os.environ["BINANCE_API_KEY"],
                    api_secret=os.environ["BINANCE_API_SECRET"],
                ) as client:
                    await client.sync_time()
                    account = await client.get_account()
                    print(f"Wallet balance: {account.total_wallet_balance}")

                    order = await client.place_order(
                        OrderRequest(
                            symbol="BTCUSDT",
                            side=Side.BUY,
                            order_type=OrderType.MARKET,
                            quantity="0.001",
                        )
                    )
                    print(order.status)

            asyncio.run(main())
    """

    _credentials: Credentials | None = None

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        wallet_api_url: str = DEFAULT_WALLET_API_URL,
        api_key: str | None = None,
        api_secret: str | None = None,
        executor: HttpExecutor | None = None,
        recv_window: int | None = None,
        timeout: float | None = None,
    ):
        """Initialize the Binance futures client.

        Args:
            api_url: Base URL of the futures API (default: production URL)
            wallet_api_url: Base URL of the wallet API (default: production URL)
            api_key: Your API key (optional, public endpoints only without it)
            api_secret: Your API secret, required together with api_key
            executor: Custom HTTP executor (optional, uses default if not provided)
            recv_window: Default recvWindow in milliseconds for signed requests
            timeout: Default request timeout in seconds; None waits indefinitely

        Raises:
            ValidationError: If only one of api_key and api_secret is given, or
                recv_window is out of range

        """
        if (api_key is None) != (api_secret is None):
            raise ValidationError("api_key and api_secret must be provided together")
        if api_key is not None and api_secret is not None:
            self._credentials = Credentials(api_key, api_secret)
        if recv_window is not None:
            validate_recv_window(recv_window)

        self._clock = OffsetClock()
        self._executor = executor if executor is not None else DEFAULT_HTTP_EXECUTOR()

        self._futures = Transport(
            api_url,
            self._credentials,
            self._executor,
            recv_window=recv_window,
            timeout=timeout,
            clock=self._clock,
        )
        self._wallet = Transport(
            wallet_api_url,
            self._credentials,
            self._executor,
            recv_window=recv_window,
            timeout=timeout,
            clock=self._clock,
        )

    @property
    def api_url(self) -> str:
        return self._futures.base_url

    @property
    def wallet_api_url(self) -> str:
        return self._wallet.base_url

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    @property
    def time_offset_ms(self) -> int:
        """Offset applied to local time when timestamping signed requests."""
        return self._clock.offset_ms

    async def close(self) -> None:
        """Close the shared HTTP executor."""
        await self._executor.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    """ General endpoints, can be called without credentials """

    async def ping(self, *, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        """Test connectivity to the REST API.

        Endpoint:
            GET /fapi/v1/ping

        """
        await self._futures.request(PING, timeout=timeout)

    async def get_server_time(
        self, *, timeout: float | None = DEFAULT_TIMEOUT
    ) -> ServerTime:
        """Get the exchange server time.

        Returns:
            ServerTime: Server time in milliseconds since epoch

        Endpoint:
            GET /fapi/v1/time

        """
        return await self._futures.request(SERVER_TIME, timeout=timeout)

    async def get_exchange_info(
        self, *, timeout: float | None = DEFAULT_TIMEOUT
    ) -> ExchangeInformation:
        """Get exchange trading rules and symbol information.

        Returns:
            ExchangeInformation: Rate limits, symbols and their trading rules

        Endpoint:
            GET /fapi/v1/exchangeInfo

        """
        return await self._futures.request(EXCHANGE_INFO, timeout=timeout)

    async def sync_time(self, *, timeout: float | None = DEFAULT_TIMEOUT) -> int:
        """Align signed request timestamps with the exchange clock.

        Measures the difference between server time and the midpoint of the
        local request window and applies it to every subsequent signed request.

        Returns:
            int: The offset in milliseconds (server minus local)

        Example:
            .. code-block:: python

                offset = await client.sync_time()
                print(f"Local clock is {-offset} ms ahead of the exchange")

        """
        sent_at = current_timestamp_ms()
        server_time = await self.get_server_time(timeout=timeout)
        received_at = current_timestamp_ms()

        offset = server_time.server_time - (sent_at + received_at) // 2
        self._clock.offset_ms = offset
        log.debug("Server time offset set to %d ms", offset)
        return offset

    """ Market data endpoints """

    async def get_order_book(
        self,
        symbol: str,
        limit: int | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> OrderBook:
        """Get the order book snapshot for a symbol.

        Args:
            symbol: Trading symbol (e.g. "BTCUSDT")
            limit: Depth (5, 10, 20, 50, 100, 500 or 1000)

        Endpoint:
            GET /fapi/v1/depth

        """
        return await self._futures.request(
            ORDER_BOOK, {"symbol": symbol, "limit": limit}, timeout=timeout
        )

    async def get_recent_trades(
        self,
        symbol: str,
        limit: int | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[MarketTrade]:
        """Get recent public trades for a symbol.

        Endpoint:
            GET /fapi/v1/trades

        """
        return await self._futures.request(
            RECENT_TRADES, {"symbol": symbol, "limit": limit}, timeout=timeout
        )

    async def get_historical_trades(
        self,
        symbol: str,
        limit: int | None = None,
        from_id: int | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[MarketTrade]:
        """Get older public trades for a symbol. Requires an API key.

        Args:
            symbol: Trading symbol
            limit: Number of trades to return
            from_id: Trade id to start from

        Raises:
            MissingCredentialsError: If the client has no credentials

        Endpoint:
            GET /fapi/v1/historicalTrades

        """
        return await self._futures.request(
            HISTORICAL_TRADES,
            {"symbol": symbol, "limit": limit, "fromId": from_id},
            timeout=timeout,
        )

    async def get_klines(
        self,
        symbol: str,
        interval: Interval,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[Kline]:
        """Get candlesticks for a symbol.

        Args:
            symbol: Trading symbol
            interval: Candlestick interval
            start_time: Start of the range in milliseconds since epoch
            end_time: End of the range in milliseconds since epoch
            limit: Number of candlesticks to return

        Returns:
            list[Kline]: Candlesticks, oldest first

        Endpoint:
            GET /fapi/v1/klines

        """
        return await self._futures.request(
            KLINES,
            KlinesQuery(
                symbol=symbol,
                interval=interval,
                start_time=start_time,
                end_time=end_time,
                limit=limit,
            ),
            timeout=timeout,
        )

    async def get_mark_price(
        self, symbol: str, *, timeout: float | None = DEFAULT_TIMEOUT
    ) -> MarkPrice:
        """Get mark price and funding rate for a symbol.

        Endpoint:
            GET /fapi/v1/premiumIndex

        """
        return await self._futures.request(
            MARK_PRICE, {"symbol": symbol}, timeout=timeout
        )

    async def get_ticker_price(
        self, symbol: str, *, timeout: float | None = DEFAULT_TIMEOUT
    ) -> TickerPrice:
        """Get the latest price for a symbol.

        Endpoint:
            GET /fapi/v1/ticker/price

        """
        return await self._futures.request(
            TICKER_PRICE, {"symbol": symbol}, timeout=timeout
        )

    async def get_book_ticker(
        self, symbol: str, *, timeout: float | None = DEFAULT_TIMEOUT
    ) -> BookTicker:
        """Get the best bid and ask for a symbol.

        Endpoint:
            GET /fapi/v1/ticker/bookTicker

        """
        return await self._futures.request(
            BOOK_TICKER, {"symbol": symbol}, timeout=timeout
        )

    """ Account endpoints, require credentials """

    async def get_account(
        self,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> AccountInformation:
        """Get the futures account snapshot.

        Returns:
            AccountInformation: Balances, margins, assets and positions

        Raises:
            MissingCredentialsError: If the client has no credentials

        Endpoint:
            GET /fapi/v2/account

        """
        return await self._futures.request(
            ACCOUNT, recv_window=recv_window, timeout=timeout
        )

    async def get_balance(
        self,
        asset: str,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> AccountAsset:
        """Get the balance of one asset from the account snapshot.

        Args:
            asset: Asset symbol (e.g. "USDT")

        Returns:
            AccountAsset: The asset's balances and margins

        Raises:
            AssetNotFound: If the account has no entry for the asset

        """
        account = await self.get_account(recv_window=recv_window, timeout=timeout)
        for entry in account.assets:
            if entry.asset == asset:
                return entry
        raise AssetNotFound(asset)

    async def get_open_orders(
        self,
        symbol: str,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[Order]:
        """Get open orders for one symbol.

        Endpoint:
            GET /fapi/v1/openOrders

        """
        return await self._futures.request(
            OPEN_ORDERS, {"symbol": symbol}, recv_window=recv_window, timeout=timeout
        )

    async def get_all_open_orders(
        self,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[Order]:
        """Get open orders for all symbols.

        Endpoint:
            GET /fapi/v1/openOrders

        """
        return await self._futures.request(
            OPEN_ORDERS, recv_window=recv_window, timeout=timeout
        )

    async def get_order(
        self,
        symbol: str,
        order_id: OrderId | None = None,
        orig_client_order_id: str | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> Order:
        """Get the status of an order.

        Args:
            symbol: Trading symbol
            order_id: Exchange order id
            orig_client_order_id: Client order id given at placement

        Raises:
            ValidationError: If neither order_id nor orig_client_order_id is given

        Endpoint:
            GET /fapi/v1/order

        """
        return await self._futures.request(
            QUERY_ORDER,
            _order_selector(symbol, order_id, orig_client_order_id),
            recv_window=recv_window,
            timeout=timeout,
        )

    async def place_order(
        self,
        order_request: OrderRequest,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> Order:
        """Place a new order.

        Parameters are sent in the form-encoded request body, in the field
        order of ``OrderRequest``.

        Args:
            order_request: The order to place

        Returns:
            Order: The accepted order

        Example:
            .. code-block:: python

                order = await client.place_order(
                    OrderRequest(
                        symbol="BTCUSDT",
                        side=Side.SELL,
                        order_type=OrderType.LIMIT,
                        time_in_force=TimeInForce.GTC,
                        quantity="0.01",
                        price="70000",
                    )
                )

        Endpoint:
            POST /fapi/v1/order

        """
        return await self._futures.request(
            NEW_ORDER, order_request, recv_window=recv_window, timeout=timeout
        )

    async def cancel_order(
        self,
        symbol: str,
        order_id: OrderId | None = None,
        orig_client_order_id: str | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> Order:
        """Cancel an active order.

        Raises:
            ValidationError: If neither order_id nor orig_client_order_id is given

        Endpoint:
            DELETE /fapi/v1/order

        """
        return await self._futures.request(
            CANCEL_ORDER,
            _order_selector(symbol, order_id, orig_client_order_id),
            recv_window=recv_window,
            timeout=timeout,
        )

    async def get_trade_history(
        self,
        symbol: str,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
        from_id: int | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[AccountTrade]:
        """Get trades executed on the account for a symbol.

        Endpoint:
            GET /fapi/v1/userTrades

        """
        return await self._futures.request(
            USER_TRADES,
            TradeHistoryQuery(
                symbol=symbol,
                start_time=start_time,
                end_time=end_time,
                from_id=from_id,
                limit=limit,
            ),
            recv_window=recv_window,
            timeout=timeout,
        )

    """ Wallet endpoints, sent to the wallet host """

    async def get_deposit_address(
        self,
        coin: str,
        network: str | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> DepositAddress:
        """Get the deposit address for a coin.

        Endpoint:
            GET /sapi/v1/capital/deposit/address

        """
        return await self._wallet.request(
            DEPOSIT_ADDRESS,
            {"coin": coin, "network": network},
            recv_window=recv_window,
            timeout=timeout,
        )

    async def get_deposit_history(
        self,
        coin: str | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> list[DepositRecord]:
        """Get deposit history, optionally for one coin.

        Endpoint:
            GET /sapi/v1/capital/deposit/hisrec

        """
        return await self._wallet.request(
            DEPOSIT_HISTORY,
            DepositHistoryQuery(coin=coin, start_time=start_time, end_time=end_time),
            recv_window=recv_window,
            timeout=timeout,
        )

    async def get_asset_detail(
        self,
        asset: str | None = None,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> dict[str, AssetDetail]:
        """Get deposit and withdrawal settings, keyed by asset.

        Endpoint:
            GET /sapi/v1/asset/assetDetail

        """
        return await self._wallet.request(
            ASSET_DETAIL, {"asset": asset}, recv_window=recv_window, timeout=timeout
        )

    """ User data stream endpoints """

    async def start_user_stream(
        self,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> ListenKey:
        """Start a user data stream and get its listen key.

        Endpoint:
            POST /fapi/v1/listenKey

        """
        return await self._futures.request(
            START_USER_STREAM, recv_window=recv_window, timeout=timeout
        )

    async def keepalive_user_stream(
        self,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Extend the validity of the current listen key by 60 minutes.

        Endpoint:
            PUT /fapi/v1/listenKey

        """
        await self._futures.request(
            KEEPALIVE_USER_STREAM, recv_window=recv_window, timeout=timeout
        )

    async def close_user_stream(
        self,
        *,
        recv_window: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        """Close the user data stream.

        Endpoint:
            DELETE /fapi/v1/listenKey

        """
        await self._futures.request(
            CLOSE_USER_STREAM, recv_window=recv_window, timeout=timeout
        )

