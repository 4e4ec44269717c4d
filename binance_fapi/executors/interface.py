"""Abstract interfaces for HTTP and WebSocket executors.

This module defines the abstract base classes that all HTTP and WebSocket
executor implementations must follow, enabling pluggable transport layers.
"""

from abc import ABC, abstractmethod


class HttpResponse:
    """Container for raw HTTP response data.

    The body is kept as bytes; interpreting it is the response decoder's job.
    """

    status: int
    content: bytes
    headers: dict[str, str]

    __slots__ = ("status", "content", "headers")

    def __init__(
        self,
        *,
        status: int,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize an HTTP response object.

        Args:
            status: The HTTP status code of the response.
            content: The raw response body.
            headers: Optional HTTP response headers as key-value pairs.

        """
        self.status = status
        self.content = content
        self.headers = headers if headers is not None else {}

    def __repr__(self) -> str:
        return f"HttpResponse(status={self.status}, content={self.content[:200]!r})"


class HttpExecutor(ABC):
    """Abstract base class for asynchronous HTTP request executors.

    An executor sends exactly the request it is given: the URL query and body
    are already canonically encoded (and signed) and must not be re-encoded.
    It performs no retries, queuing or rate limiting.
    """

    @abstractmethod
    async def send_request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: bytes | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Send one HTTP request.

        Args:
            method: The HTTP method (e.g., 'GET', 'POST', 'PUT', 'DELETE').
            url: Absolute URL including the encoded query string.
            headers: Request headers.
            body: Optional encoded request body.
            timeout: Timeout in seconds for the whole request; None for no timeout.

        Returns:
            An HttpResponse with the status, raw body and headers.

        Raises:
            TransportError: If the request could not be completed.

        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release pooled connections."""
        ...


class WsConnection(ABC):
    """Abstract base class for WebSocket connection wrappers.

    Defines the interface for WebSocket communication operations.
    """

    @abstractmethod
    async def send(
        self,
        serialized_body: str,
    ) -> None:
        """Send a message through the WebSocket connection.

        Args:
            serialized_body: The serialized message body to send.

        """
        ...

    @abstractmethod
    async def recv(self) -> str:
        """Receive a message from the WebSocket connection.

        Returns:
            The received message as a string.

        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the WebSocket connection."""
        ...


class WsExecutor(ABC):
    """Abstract base class for WebSocket connection executors.

    Defines the interface for establishing WebSocket connections.
    """

    @abstractmethod
    async def connect(
        self,
        web_url: str,
        headers: dict[str, str] | None = None,
    ) -> WsConnection:
        """Establish a WebSocket connection.

        Args:
            web_url: The WebSocket URL to connect to.
            headers: Optional headers to include in the connection handshake.

        Returns:
            A WsConnection object representing the established connection.

        """
        ...
