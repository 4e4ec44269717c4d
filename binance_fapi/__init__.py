"""Async typed client for the Binance USDⓈ-M futures API."""

from binance_fapi.api import BinanceFuturesClient
from binance_fapi.api_ws_account import BinanceWSAccountClient
from binance_fapi.api_ws_market import BinanceWSMarketClient
from binance_fapi.auth import Credentials, Signer
from binance_fapi.errors import (
    AssetNotFound,
    BadRequest,
    BaseError,
    ConfigurationError,
    DecodeError,
    ExchangeError,
    Forbidden,
    HttpConnectionError,
    IpBanned,
    MissingCredentialsError,
    NotFound,
    RateLimited,
    SerializationError,
    ServerError,
    TransportError,
    TransportTimeoutError,
    Unauthorized,
    ValidationError,
    WebSocketConnectionError,
    WebSocketMessageError,
)
from binance_fapi.helpers import print_data
from binance_fapi.transport import Endpoint, PreparedRequest, Security, Transport
from binance_fapi.types import (
    Interval,
    NewOrderRespType,
    OrderRequest,
    OrderStatus,
    OrderType,
    PositionSide,
    Side,
    StreamSubscription,
    StreamTopic,
    TimeInForce,
    WorkingType,
)

__version__ = "0.1.0"


def get_version() -> str:
    """Get the installed SDK version."""
    return __version__


__all__ = [
    "BinanceFuturesClient",
    "BinanceWSAccountClient",
    "BinanceWSMarketClient",
    "Credentials",
    "Signer",
    "Endpoint",
    "PreparedRequest",
    "Security",
    "Transport",
    "Interval",
    "NewOrderRespType",
    "OrderRequest",
    "OrderStatus",
    "OrderType",
    "PositionSide",
    "Side",
    "StreamSubscription",
    "StreamTopic",
    "TimeInForce",
    "WorkingType",
    "AssetNotFound",
    "BadRequest",
    "BaseError",
    "ConfigurationError",
    "DecodeError",
    "ExchangeError",
    "Forbidden",
    "HttpConnectionError",
    "IpBanned",
    "MissingCredentialsError",
    "NotFound",
    "RateLimited",
    "SerializationError",
    "ServerError",
    "TransportError",
    "TransportTimeoutError",
    "Unauthorized",
    "ValidationError",
    "WebSocketConnectionError",
    "WebSocketMessageError",
    "get_version",
    "print_data",
]
