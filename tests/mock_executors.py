import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Iterable,
    NamedTuple,
    Tuple,
    TypeAlias,
)

import orjson

from binance_fapi.executors import HttpExecutor, WsExecutor
from binance_fapi.executors.interface import HttpResponse, WsConnection

log = logging.getLogger(__name__)


class MockExecutorException(Exception):
    pass


class InputPack(NamedTuple):
    function_name: str
    arg_pack: Tuple


class MockOutput:
    pass


class MockValidationFailure(MockExecutorException):
    input_pack: InputPack
    message: str


class MockOutputExhausted(MockExecutorException):
    input_pack: InputPack


class MockOutputNotExhausted(MockExecutorException):
    remaining_staged_outputs: deque[MockOutput]


# returns false or raises MockValidationFailure on error
InputValidation: TypeAlias = Callable[[InputPack], bool]


@dataclass
class MockExceptionOutput(MockOutput):
    exception: Exception
    call_validation: InputValidation | None = None


@dataclass
class MockSuccessfulOutput(MockOutput):
    output: Any
    call_validation: InputValidation | None = None


def json_response(payload: Any, status: int = 200) -> HttpResponse:
    """Build an HttpResponse whose body is the JSON encoding of payload."""
    return HttpResponse(status=status, content=orjson.dumps(payload))


class MockHttpExecutor(HttpExecutor):
    """Records every request and answers with staged outputs, in order.

    ``send_request`` is recorded as
    ``InputPack("send_request", (method, url, headers, body, timeout))``.
    """

    def __init__(self):
        self.call_log: list[InputPack] = []
        self.staged_outputs: deque[MockOutput] = deque()
        self.closed = False

    def stage_output(self, output: MockOutput | Iterable[MockOutput]) -> None:
        """Stage an output to be returned by the next request."""
        if isinstance(output, Iterable):
            self.staged_outputs.extend(output)
        else:
            self.staged_outputs.append(output)

    def _execute_mock(self, input_pack: InputPack) -> Any:
        """Execute a mock operation with the given input pack."""
        self.call_log.append(input_pack)
        if not self.staged_outputs:
            raise MockOutputExhausted(input_pack)
        output = self.staged_outputs.popleft()
        if output.call_validation is not None and not output.call_validation(
            input_pack
        ):
            raise MockValidationFailure(input_pack, "Validation failed")
        if isinstance(output, MockExceptionOutput):
            raise output.exception
        elif isinstance(output, MockSuccessfulOutput):
            return output.output
        raise MockExecutorException(f"Unexpected staged mock {output=}")

    async def send_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        # yield once so concurrent callers interleave like real I/O
        await asyncio.sleep(0)
        input_pack = InputPack(
            inspect.stack()[0].function, (method, url, headers, body, timeout)
        )
        return self._execute_mock(input_pack)

    async def close(self) -> None:
        self.closed = True


class MockWsHarness:
    executor: "MockWsExecutor"
    connections: list["MockWsConnection"]

    def __init__(self):
        self.executor = MockWsExecutor(self)
        self.http_executor = MockHttpExecutor()
        self.connections = []


class MockWsConnection(WsConnection):
    def __init__(self, harness: MockWsHarness):
        self.call_log: list[InputPack] = []
        self.staged_recv: asyncio.Queue[MockOutput] = asyncio.Queue()
        self._harness = harness

    def stage_recv(self, output: MockOutput | Iterable[MockOutput]) -> None:
        """Stage recv outputs (strings or exceptions) to be returned by subsequent recv calls."""
        if isinstance(output, Iterable):
            for item in output:
                self.staged_recv.put_nowait(item)
        else:
            self.staged_recv.put_nowait(output)

    def sent_messages(self) -> list[Any]:
        """Decode every message sent over this connection."""
        return [
            orjson.loads(call.arg_pack[0])
            for call in self.call_log
            if call.function_name == "send"
        ]

    async def send(
        self,
        serialized_body: str,
    ) -> None:
        input_pack = InputPack(inspect.stack()[0].function, (serialized_body,))
        self.call_log.append(input_pack)

    async def recv(self) -> str:
        # waits for staged output instead of failing when nothing is staged
        next_output = await self.staged_recv.get()

        if isinstance(next_output, MockExceptionOutput):
            raise next_output.exception
        elif isinstance(next_output, MockSuccessfulOutput):
            return next_output.output
        raise MockExecutorException(f"Unexpected staged mock {next_output=}")

    async def close(self) -> None:
        input_pack = InputPack(inspect.stack()[0].function, ())
        self.call_log.append(input_pack)


class MockWsExecutor(WsExecutor):
    def __init__(self, harness: MockWsHarness):
        self._harness = harness
        self.call_log: list[InputPack] = []
        self.staged_failures: deque[Exception] = deque()

    async def connect(
        self, web_url: str, headers: dict[str, str] | None = None
    ) -> WsConnection:
        input_pack = InputPack(inspect.stack()[0].function, (web_url, headers))
        self.call_log.append(input_pack)
        if self.staged_failures:
            raise self.staged_failures.popleft()
        connection = MockWsConnection(self._harness)
        self._harness.connections.append(connection)
        return connection
