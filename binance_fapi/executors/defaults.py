"""Default executor configurations.

This module defines the default HTTP and WebSocket executor implementations
used by the SDK when no custom executor is provided.
"""

from typing import Type

from binance_fapi.executors.aiohttp import AiohttpWsExecutor
from binance_fapi.executors.httpx import HttpxHttpExecutor
from binance_fapi.executors.interface import HttpExecutor, WsExecutor

DEFAULT_WS_EXECUTOR: Type[WsExecutor] = AiohttpWsExecutor
DEFAULT_HTTP_EXECUTOR: Type[HttpExecutor] = HttpxHttpExecutor
