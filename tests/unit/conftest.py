import asyncio
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Generator

import orjson
import pytest

from binance_fapi.api import BinanceFuturesClient
from tests.mock_executors import MockHttpExecutor, MockOutputNotExhausted

DATA_DIR = Path(__file__).parent.joinpath("data")

# Key and secret from the exchange's signed endpoint documentation
API_KEY = "vmPUZE6mv9SD5VNHk4HlWFsOr6aKE2zvsw0MuIgwCIPy6utIco14y7Ju91duEh8A"
API_SECRET = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"

log = logging.getLogger(__name__)


async def wait_for_predicate(
    condition: Callable[[], bool], timeout: float, poll_interval: float = 0.01
) -> None:
    """
    Wait for a condition to become true, polling at regular intervals.

    Raises:
        TimeoutError: If the condition doesn't become true within the timeout
    """
    loop = asyncio.get_running_loop()
    end_time = loop.time() + timeout

    while not condition():
        if loop.time() >= end_time:
            raise TimeoutError(f"Condition not met within {timeout}s timeout")
        await asyncio.sleep(poll_interval)


@pytest.fixture
def mock_http_client() -> Generator[
    tuple[BinanceFuturesClient, MockHttpExecutor], None, None
]:
    mock_http = MockHttpExecutor()
    client = BinanceFuturesClient(
        # these don't matter as they will not be used with the mock in place
        api_url="https://fapi.gaierror.xyz",
        wallet_api_url="https://wallet.gaierror.xyz",
        api_key=API_KEY,
        api_secret=API_SECRET,
        # replace real network requests with our mock
        executor=mock_http,
    )

    yield (client, mock_http)

    if len(mock_http.staged_outputs) > 0:
        raise MockOutputNotExhausted(mock_http.staged_outputs)


@pytest.fixture
def mock_public_client() -> Generator[
    tuple[BinanceFuturesClient, MockHttpExecutor], None, None
]:
    mock_http = MockHttpExecutor()
    client = BinanceFuturesClient(
        api_url="https://fapi.gaierror.xyz",
        wallet_api_url="https://wallet.gaierror.xyz",
        executor=mock_http,
    )

    yield (client, mock_http)

    if len(mock_http.staged_outputs) > 0:
        raise MockOutputNotExhausted(mock_http.staged_outputs)


@lru_cache(maxsize=1)
def data_files() -> list[Path]:
    return list(DATA_DIR.iterdir())


def json_data_files(name: str) -> list[Path]:
    return sorted(
        path
        for path in data_files()
        if path.match(f"{name}.*json", case_sensitive=True)
    )


def load_json(name: str, case: int | None = None) -> Any:
    case_part = f"{case}." if case else ""
    path = DATA_DIR / f"{name}.{case_part}json"
    with open(path, "rb") as fh:
        return orjson.loads(fh.read())


def load_json_all_cases(name: str) -> list[tuple[Any, Path]]:
    """Load all json payloads for a given base name (case0, case1, ...)."""
    results = []
    for path in json_data_files(name):
        with open(path, "rb") as fh:
            results.append((orjson.loads(fh.read()), path))
    return results
