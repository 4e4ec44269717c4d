"""Type definitions for the Binance futures SDK.

This module contains type definitions, enums, and dataclasses used throughout
the SDK, organized into logical sections for clarity.

Field names are snake_case; the exchange's camelCase wire names are derived
from them by ``wire_name``. Fields whose wire name cannot be derived that way
declare it explicitly with ``alias``.
"""

import re
from dataclasses import Field, dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Coroutine, TypeAlias, overload

from binance_fapi.errors import ValidationError

# ============================================================================
# TYPE ALIASES
# ============================================================================

OrderId: TypeAlias = int

# JSON type hierarchy
JsonObject: TypeAlias = dict[str, "JsonValue"]
JsonArray: TypeAlias = list["JsonValue"]
JsonValue: TypeAlias = None | bool | int | float | str | JsonObject | JsonArray
Json: TypeAlias = JsonObject | JsonArray

# Numeric input accepted for prices, quantities and rates
NumericInput: TypeAlias = Decimal | str | float | int

# WebSocket event handler
WsEventHandler: TypeAlias = Callable[[JsonObject], Coroutine[None, None, None]]


# ============================================================================
# WIRE NAMES
# ============================================================================

WIRE_NAME = "wire_name"


def alias(wire: str, **kwargs: Any) -> Any:
    """Declare a dataclass field whose wire name is not its camelCase name."""
    return field(metadata={WIRE_NAME: wire}, **kwargs)


def to_camel(name: str) -> str:
    """Convert a snake_case name to camelCase."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def wire_name(f: Field[Any]) -> str:
    """Get the wire name of a dataclass field."""
    return f.metadata.get(WIRE_NAME) or to_camel(f.name)


# ============================================================================
# NUMERIC CONVERSION UTILITIES
# ============================================================================

DECIMAL_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


def full_precision_string(n: NumericInput) -> str:
    """Convert a numeric input to a fixed-point string without exponent."""
    if isinstance(n, str):
        if not DECIMAL_PATTERN.match(n):
            raise ValidationError(f"Invalid numeric input {n}")
        return n
    return format(numeric_to_decimal(n), "f")


@overload
def numeric_to_decimal(n: NumericInput) -> Decimal: ...


@overload
def numeric_to_decimal(n: None) -> None: ...


def numeric_to_decimal(n: NumericInput | None) -> Decimal | None:
    """Convert various numeric input types to Decimal, or None if input is None."""
    if n is None:
        return n
    if isinstance(n, bool):
        raise ValidationError(f"Invalid numeric input type {n} - {type(n)}")
    if isinstance(n, str):
        if not DECIMAL_PATTERN.match(n):
            raise ValidationError(f"Invalid numeric input {n}")
        return Decimal(n)
    if isinstance(n, (int, float)):
        try:
            n = Decimal(str(n))
        except InvalidOperation as e:
            raise ValidationError(f"Invalid numeric input {n}") from e
    if not isinstance(n, Decimal):
        raise ValidationError(f"Invalid numeric input type {n} - {type(n)}")
    if not n.is_finite():
        raise ValidationError(f"Invalid numeric input {n}")
    return n


# ============================================================================
# CORE ENUMS
# ============================================================================


class Side(Enum):
    """Order side."""

    BUY = "BUY"
    SELL = "SELL"


class PositionSide(Enum):
    """Position side in hedge mode (BOTH in one-way mode)."""

    BOTH = "BOTH"
    LONG = "LONG"
    SHORT = "SHORT"


class OrderType(Enum):
    """Order type."""

    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP = "STOP"
    STOP_MARKET = "STOP_MARKET"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_MARKET = "TAKE_PROFIT_MARKET"
    TRAILING_STOP_MARKET = "TRAILING_STOP_MARKET"


class OrderStatus(Enum):
    """Order status."""

    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    EXPIRED_IN_MATCH = "EXPIRED_IN_MATCH"


class TimeInForce(Enum):
    """Time in force."""

    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"
    GTX = "GTX"
    GTD = "GTD"


class WorkingType(Enum):
    """Price type used to evaluate stop orders."""

    MARK_PRICE = "MARK_PRICE"
    CONTRACT_PRICE = "CONTRACT_PRICE"


class NewOrderRespType(Enum):
    """Level of detail in the order placement response."""

    ACK = "ACK"
    RESULT = "RESULT"


class Interval(Enum):
    """Time intervals for klines/candlestick data."""

    ONE_MINUTE = "1m"
    THREE_MINUTES = "3m"
    FIVE_MINUTES = "5m"
    FIFTEEN_MINUTES = "15m"
    THIRTY_MINUTES = "30m"
    ONE_HOUR = "1h"
    TWO_HOURS = "2h"
    FOUR_HOURS = "4h"
    SIX_HOURS = "6h"
    EIGHT_HOURS = "8h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "1d"
    THREE_DAYS = "3d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1M"


class StreamTopic(Enum):
    """Market stream topics."""

    AGG_TRADE = "aggTrade"
    MARK_PRICE = "markPrice"
    BOOK_TICKER = "bookTicker"
    DEPTH = "depth"
    DEPTH_5 = "depth5"
    DEPTH_10 = "depth10"
    DEPTH_20 = "depth20"
    TICKER = "ticker"
    MINI_TICKER = "miniTicker"
    FORCE_ORDER = "forceOrder"


# ============================================================================
# REQUEST PARAMETER TYPES
# ============================================================================


@dataclass(kw_only=True)
class OrderRequest:
    """Parameters for placing a new order.

    Field order is the order in which parameters are encoded, and therefore
    signed. Optional fields left as None are not sent.
    """

    symbol: str
    side: Side
    position_side: PositionSide | None = None
    order_type: OrderType = alias("type")
    time_in_force: TimeInForce | None = None
    quantity: NumericInput | None = None
    reduce_only: bool | None = None
    price: NumericInput | None = None
    new_client_order_id: str | None = None
    stop_price: NumericInput | None = None
    close_position: bool | None = None
    activation_price: NumericInput | None = None
    callback_rate: NumericInput | None = None
    working_type: WorkingType | None = None
    new_order_resp_type: NewOrderRespType | None = None


@dataclass
class OrderQuery:
    """Selects one order by exchange id or by client id."""

    symbol: str
    order_id: OrderId | None = None
    orig_client_order_id: str | None = None


@dataclass
class KlinesQuery:
    """Parameters for candlestick queries."""

    symbol: str
    interval: Interval
    start_time: int | None = None
    end_time: int | None = None
    limit: int | None = None


@dataclass
class TradeHistoryQuery:
    """Parameters for account trade history queries."""

    symbol: str
    start_time: int | None = None
    end_time: int | None = None
    from_id: int | None = None
    limit: int | None = None


@dataclass
class DepositHistoryQuery:
    """Parameters for deposit history queries."""

    coin: str | None = None
    status: int | None = None
    start_time: int | None = None
    end_time: int | None = None
    offset: int | None = None
    limit: int | None = None


# ============================================================================
# GENERAL TYPES
# ============================================================================


@dataclass
class ServerTime:
    """Exchange server time."""

    server_time: int


@dataclass
class RateLimit:
    """Rate limit rule advertised by the exchange."""

    rate_limit_type: str
    interval: str
    interval_num: int
    limit: int


@dataclass
class SymbolInfo:
    """Trading rules for one futures symbol."""

    symbol: str
    status: str
    base_asset: str
    quote_asset: str
    price_precision: int
    quantity_precision: int
    pair: str | None = None
    contract_type: str | None = None
    margin_asset: str | None = None
    base_asset_precision: int | None = None
    quote_precision: int | None = None
    underlying_type: str | None = None
    onboard_date: int | None = None
    delivery_date: int | None = None
    order_types: list[OrderType] = field(default_factory=list)
    time_in_force: list[TimeInForce] = field(default_factory=list)
    filters: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ExchangeInformation:
    """Exchange trading rules and symbol metadata."""

    timezone: str
    server_time: int
    rate_limits: list[RateLimit]
    symbols: list[SymbolInfo]
    exchange_filters: list[dict[str, Any]] = field(default_factory=list)


# ============================================================================
# MARKET DATA TYPES
# ============================================================================


@dataclass
class PriceLevel:
    """Single order book level, sent as ``[price, quantity]``."""

    price: str
    quantity: str


@dataclass
class OrderBook:
    """Order book snapshot."""

    last_update_id: int
    bids: list[PriceLevel]
    asks: list[PriceLevel]
    event_time: int | None = alias("E", default=None)
    transaction_time: int | None = alias("T", default=None)


@dataclass
class MarketTrade:
    """Public trade."""

    id: int
    price: str
    qty: str
    time: int
    is_buyer_maker: bool
    quote_qty: str | None = None


@dataclass
class Kline:
    """Candlestick, sent as a positional array."""

    open_time: int
    open: str
    high: str
    low: str
    close: str
    volume: str
    close_time: int
    quote_asset_volume: str
    number_of_trades: int
    taker_buy_base_asset_volume: str
    taker_buy_quote_asset_volume: str


@dataclass
class MarkPrice:
    """Mark price and funding rate."""

    symbol: str
    mark_price: str
    index_price: str
    last_funding_rate: str
    next_funding_time: int
    time: int
    estimated_settle_price: str | None = None
    interest_rate: str | None = None


@dataclass
class TickerPrice:
    """Latest price for a symbol."""

    symbol: str
    price: str
    time: int | None = None


@dataclass
class BookTicker:
    """Best bid and ask for a symbol."""

    symbol: str
    bid_price: str
    bid_qty: str
    ask_price: str
    ask_qty: str
    time: int | None = None


# ============================================================================
# ORDER TYPES
# ============================================================================


@dataclass
class Order:
    """Order record as returned by placement, query and cancellation."""

    order_id: OrderId
    symbol: str
    status: OrderStatus
    client_order_id: str
    price: str
    orig_qty: str
    executed_qty: str
    side: Side
    order_type: OrderType = alias("type")
    avg_price: str | None = None
    cum_qty: str | None = None
    cum_quote: str | None = None
    time_in_force: TimeInForce | None = None
    reduce_only: bool | None = None
    close_position: bool | None = None
    position_side: PositionSide | None = None
    stop_price: str | None = None
    working_type: WorkingType | None = None
    price_protect: bool | None = None
    orig_type: OrderType | None = None
    activate_price: str | None = None
    price_rate: str | None = None
    time: int | None = None
    update_time: int | None = None


# ============================================================================
# ACCOUNT TYPES
# ============================================================================


@dataclass
class AccountAsset:
    """Per-asset margin balance."""

    asset: str
    wallet_balance: str
    unrealized_profit: str
    margin_balance: str
    available_balance: str
    maint_margin: str | None = None
    initial_margin: str | None = None
    position_initial_margin: str | None = None
    open_order_initial_margin: str | None = None
    cross_wallet_balance: str | None = None
    cross_un_pnl: str | None = None
    max_withdraw_amount: str | None = None
    margin_available: bool | None = None
    update_time: int | None = None


@dataclass
class AccountPosition:
    """Position entry in the account snapshot."""

    symbol: str
    position_amt: str
    unrealized_profit: str
    position_side: PositionSide | None = None
    initial_margin: str | None = None
    maint_margin: str | None = None
    position_initial_margin: str | None = None
    open_order_initial_margin: str | None = None
    leverage: str | None = None
    isolated: bool | None = None
    entry_price: str | None = None
    max_notional: str | None = None
    update_time: int | None = None


@dataclass
class AccountInformation:
    """Futures account snapshot."""

    total_wallet_balance: str
    total_unrealized_profit: str
    total_margin_balance: str
    available_balance: str
    assets: list[AccountAsset]
    positions: list[AccountPosition]
    fee_tier: int | None = None
    can_trade: bool | None = None
    can_deposit: bool | None = None
    can_withdraw: bool | None = None
    update_time: int | None = None
    total_initial_margin: str | None = None
    total_maint_margin: str | None = None
    total_position_initial_margin: str | None = None
    total_open_order_initial_margin: str | None = None
    total_cross_wallet_balance: str | None = None
    total_cross_un_pnl: str | None = None
    max_withdraw_amount: str | None = None


@dataclass
class AccountTrade:
    """Trade executed on the account."""

    id: int
    symbol: str
    order_id: OrderId
    side: Side
    price: str
    qty: str
    realized_pnl: str
    commission: str
    commission_asset: str
    time: int
    buyer: bool
    maker: bool
    quote_qty: str | None = None
    position_side: PositionSide | None = None
    margin_asset: str | None = None


# ============================================================================
# WALLET TYPES
# ============================================================================


@dataclass
class DepositAddress:
    """Deposit address for a coin."""

    address: str
    coin: str
    tag: str
    url: str | None = None


@dataclass
class DepositRecord:
    """Single deposit."""

    amount: str
    coin: str
    network: str
    status: int
    address: str
    tx_id: str
    insert_time: int
    address_tag: str | None = None
    id: str | None = None
    transfer_type: int | None = None
    confirm_times: str | None = None
    unlock_confirm: int | None = None
    wallet_type: int | None = None


@dataclass
class AssetDetail:
    """Deposit and withdrawal settings for an asset."""

    min_withdraw_amount: str
    deposit_status: bool
    withdraw_fee: str | float
    withdraw_status: bool
    deposit_tip: str | None = None


# ============================================================================
# USER STREAM TYPES
# ============================================================================


@dataclass
class ListenKey:
    """Token authorizing a user data stream connection."""

    listen_key: str


@dataclass
class StreamSubscription:
    """Market stream subscription, rendered as ``<symbol>@<topic>``."""

    symbol: str
    topic: StreamTopic

    @property
    def stream_name(self) -> str:
        return f"{self.symbol.lower()}@{self.topic.value}"
