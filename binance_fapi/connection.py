"""Stream connection establishment with retries."""

import asyncio
import logging

from binance_fapi.errors import ValidationError, WebSocketConnectionError
from binance_fapi.executors.interface import WsConnection, WsExecutor

log = logging.getLogger(__name__)


async def connect_with_retry(
    web_url: str,
    headers: dict[str, str] | None = None,
    executor: WsExecutor | None = None,
    max_retries: int = 10,
    retry_delay: float = 1,
    backoff_factor: float = 1.5,
) -> WsConnection:
    """Open a stream connection, retrying failed attempts with exponential backoff.

    The delay before attempt ``n + 1`` is ``retry_delay * backoff_factor ** (n - 1)``.

    Args:
        web_url: Stream URL (ws:// or wss://)
        headers: Optional handshake headers
        executor: WebSocket executor (default: DEFAULT_WS_EXECUTOR)
        max_retries: Maximum number of connection attempts (default: 10)
        retry_delay: Delay before the second attempt in seconds (default: 1)
        backoff_factor: Multiplier applied to the delay after each failure

    Returns:
        The established connection

    Raises:
        ValidationError: If max_retries is not positive
        WebSocketConnectionError: If every attempt failed

    """
    if max_retries < 1:
        raise ValidationError(f"max_retries must be at least 1, got {max_retries}")

    if executor is None:
        from binance_fapi.executors.defaults import DEFAULT_WS_EXECUTOR

        executor = DEFAULT_WS_EXECUTOR()

    for attempt in range(1, max_retries + 1):
        try:
            return await executor.connect(web_url, headers)
        except Exception as e:
            if attempt == max_retries:
                raise WebSocketConnectionError(
                    f"Failed to connect after {max_retries} attempts: {e}"
                ) from e

            log.warning(
                "Stream connection attempt %d/%d failed: %s. Retrying in %.1f seconds",
                attempt,
                max_retries,
                e,
                retry_delay,
            )
            await asyncio.sleep(retry_delay)
            retry_delay *= backoff_factor

    raise AssertionError("unreachable")
