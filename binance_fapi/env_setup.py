"""Environment configuration setup utilities.

This module loads SDK settings from a .env file or the process environment,
for example scripts and local development.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from binance_fapi.auth import validate_recv_window
from binance_fapi.errors import ValidationError
from binance_fapi.helpers import (
    DEFAULT_API_URL,
    DEFAULT_STREAM_URL,
    DEFAULT_WALLET_API_URL,
    TESTNET_API_URL,
    TESTNET_STREAM_URL,
)

log = logging.getLogger(__name__)

_DEFAULT_URLS: dict[str, tuple[str, str, str]] = {
    "production": (DEFAULT_API_URL, DEFAULT_WALLET_API_URL, DEFAULT_STREAM_URL),
    # Wallet endpoints have no futures testnet counterpart
    "testnet": (TESTNET_API_URL, DEFAULT_WALLET_API_URL, TESTNET_STREAM_URL),
}


def setup_environment() -> tuple[str, str, str, str, str, int | None]:
    """Load and return Binance futures configuration from the environment.

    Loads a .env file if present, otherwise reads system environment variables.
    Variables are suffixed by the upper-cased ENVIRONMENT value (default
    'production'), e.g. ``BINANCE_API_KEY_TESTNET``.

    Returns:
        Tuple:
            - api_url: The futures API base URL
            - wallet_api_url: The wallet API base URL
            - stream_url: The market stream base URL
            - api_key: The API key
            - api_secret: The API secret
            - recv_window: recvWindow in milliseconds, or None if unset

    Raises:
        ValidationError: If BINANCE_RECV_WINDOW_<ENV> is not a valid recvWindow

    """
    env_file_path = Path(".env")
    if env_file_path.exists():
        log.info("Loading environment variables from .env file")
        load_dotenv(env_file_path)
    else:
        log.info(".env file not found. Falling back to process environment variables")

    environment = os.getenv("ENVIRONMENT", "production").lower()
    suffix = environment.upper()
    log.info("Using %s environment", environment)

    api_url, wallet_api_url, stream_url = _DEFAULT_URLS.get(
        environment, _DEFAULT_URLS["production"]
    )
    api_url = os.environ.get(f"BINANCE_API_URL_{suffix}", api_url)
    wallet_api_url = os.environ.get(f"BINANCE_WALLET_API_URL_{suffix}", wallet_api_url)
    stream_url = os.environ.get(f"BINANCE_STREAM_URL_{suffix}", stream_url)
    api_key = os.environ.get(f"BINANCE_API_KEY_{suffix}", "your-api-key")
    api_secret = os.environ.get(f"BINANCE_API_SECRET_{suffix}", "your-api-secret")

    recv_window: int | None = None
    raw_recv_window = os.environ.get(f"BINANCE_RECV_WINDOW_{suffix}")
    if raw_recv_window:
        try:
            recv_window = validate_recv_window(int(raw_recv_window))
        except ValueError as e:
            raise ValidationError(
                f"Invalid BINANCE_RECV_WINDOW_{suffix}: {raw_recv_window!r}"
            ) from e

    return api_url, wallet_api_url, stream_url, api_key, api_secret, recv_window
