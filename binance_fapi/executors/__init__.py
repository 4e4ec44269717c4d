from binance_fapi.executors.aiohttp import AiohttpHttpExecutor, AiohttpWsExecutor
from binance_fapi.executors.defaults import DEFAULT_HTTP_EXECUTOR, DEFAULT_WS_EXECUTOR
from binance_fapi.executors.httpx import HttpxHttpExecutor
from binance_fapi.executors.interface import (
    HttpExecutor,
    HttpResponse,
    WsConnection,
    WsExecutor,
)
from binance_fapi.executors.websockets import WebsocketsWsExecutor

__all__ = [
    "HttpExecutor",
    "HttpResponse",
    "HttpxHttpExecutor",
    "AiohttpHttpExecutor",
    "WsConnection",
    "WsExecutor",
    "WebsocketsWsExecutor",
    "AiohttpWsExecutor",
    "DEFAULT_HTTP_EXECUTOR",
    "DEFAULT_WS_EXECUTOR",
]
