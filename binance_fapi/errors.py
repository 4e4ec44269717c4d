"""Exception hierarchy for the Binance futures SDK.

This module defines the public exception hierarchy for the entire SDK. All exceptions
raised by this library inherit from BaseError.

Exception Hierarchy
-------------------
BaseError
├── ConfigurationError - Client setup is incomplete (e.g. missing credentials)
├── ValidationError - Client-side input validation failures
├── TransportError - Network/protocol-level errors during transmission
├── ExchangeError - API server rejected the request with an error envelope
└── DecodeError - Response did not match the expected shape
"""

# Exchange error codes that signal transient server-side conditions
RETRYABLE_EXCHANGE_CODES: frozenset[int] = frozenset(
    {
        -1001,  # DISCONNECTED
        -1003,  # TOO_MANY_REQUESTS
        -1006,  # UNEXPECTED_RESP
        -1007,  # TIMEOUT
        -1008,  # SERVER_BUSY
    }
)


class BaseError(Exception):
    """Base exception for all SDK errors.

    All exceptions raised by this library inherit from this class, allowing users
    to catch all SDK-related errors with a single except clause.

    This exception should not be raised directly. Use one of the specific subclasses
    instead.
    """

    @property
    def retryable(self) -> bool:
        """Whether repeating the same request may succeed without changes."""
        return False


# ============================================================================
# CONFIGURATION ERROR
# ============================================================================


class ConfigurationError(BaseError):
    """Exception raised when the client is not set up for the requested operation.

    ConfigurationError indicates that:
    - No network request was attempted
    - The caller must fix the client setup (retrying will not help)
    """

    pass


class MissingCredentialsError(ConfigurationError):
    """Raised when an authenticated operation is issued on a client without credentials."""

    def __init__(self, credential_type: str = "API key and secret"):
        """Initialize a MissingCredentialsError.

        Args:
            credential_type: The type of credential that is missing.

        """
        self.credential_type = credential_type
        super().__init__(f"{credential_type} is not set")


# ============================================================================
# VALIDATION ERROR
# ============================================================================


class ValidationError(BaseError):
    """Exception raised for client-side input validation failures.

    This exception is raised when input parameters fail validation checks before
    any request is sent to the API server.

    ValidationError indicates that:
    - No network request was attempted
    - The error is due to invalid input from the caller
    - The error can be fixed by correcting the input parameters

    Common causes include:
    - Missing required parameters
    - Parameter values that have no canonical wire representation
    - Out-of-range values (e.g. recvWindow above the exchange maximum)
    - Mutually exclusive parameters specified together
    """

    pass


class SerializationError(ValidationError):
    """Raised when request data cannot be serialized/encoded."""

    def __init__(self, message: str):
        """Initialize a SerializationError.

        Args:
            message: Description of the serialization error.

        """
        self.message = message
        super().__init__(message)


class AssetNotFound(ValidationError):
    """Raised when an asset is not present in the account snapshot."""

    def __init__(self, asset: str):
        """Initialize an AssetNotFound error.

        Args:
            asset: The asset symbol that was looked up.

        """
        self.asset = asset
        super().__init__(f"Asset {asset!r} not found in account")


# ============================================================================
# TRANSPORT ERROR
# ============================================================================


class TransportError(BaseError):
    """Exception raised for errors in the process of transporting data to/from the API server.

    TransportError indicates that:
    - Valid application-level data was not successfully exchanged
    - The error could be transient and may succeed on retry

    Common causes include DNS failures, TLS errors, connection refused or
    dropped, read/write timeouts and unexpected connection closure.
    """

    @property
    def retryable(self) -> bool:
        return True


class HttpConnectionError(TransportError):
    """Raised when a connection cannot be established or is lost."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize an HttpConnectionError.

        Args:
            message: Description of the connection error.
            url: The URL that failed to connect, if available.

        """
        self.message = message
        self.url = url
        if url:
            super().__init__(f"{message} (url: {url})")
        else:
            super().__init__(message)


class TransportTimeoutError(TransportError):
    """Raised when a request or connection times out."""

    def __init__(self, message: str, timeout_seconds: float | None = None):
        """Initialize a TransportTimeoutError.

        Args:
            message: Description of the timeout error.
            timeout_seconds: The timeout duration in seconds, if available.

        """
        self.message = message
        self.timeout_seconds = timeout_seconds
        if timeout_seconds:
            super().__init__(f"{message} (timeout: {timeout_seconds}s)")
        else:
            super().__init__(message)


class WebSocketConnectionError(TransportError):
    """Raised when WebSocket connection fails or is closed unexpectedly."""

    def __init__(self, message: str, url: str | None = None):
        """Initialize a WebSocketConnectionError.

        Args:
            message: Description of the WebSocket connection error.
            url: The WebSocket URL that failed to connect, if available.

        """
        self.message = message
        self.url = url
        if url:
            super().__init__(f"{message} (url: {url})")
        else:
            super().__init__(message)


class WebSocketMessageError(TransportError):
    """Raised when there's an error sending or receiving a WebSocket message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ============================================================================
# EXCHANGE ERROR
# ============================================================================


class ExchangeError(BaseError):
    """Exception raised when the API server rejects a well-formed request.

    The server answered with a non-2XX status and a ``{"code": ..., "msg": ...}``
    error envelope.

    ExchangeError indicates that:
    - The network connection succeeded
    - The request was properly formatted and transmitted
    - The exchange processed the request and refused it
    """

    status_code: int
    code: int
    message: str

    def __init__(self, status_code: int, code: int, message: str):
        """Initialize an ExchangeError.

        Args:
            status_code: The HTTP status code returned by the server.
            code: The exchange error code from the envelope.
            message: The exchange error message from the envelope.

        """
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message} (status: {status_code})")

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_EXCHANGE_CODES


## 4xx status errors


class BadRequest(ExchangeError):
    """Raised when the server returns a 400 Bad Request error."""

    pass


class Unauthorized(ExchangeError):
    """Raised when the server returns a 401 Unauthorized error."""

    pass


class Forbidden(ExchangeError):
    """Raised when the server returns a 403 Forbidden error."""

    pass


class NotFound(ExchangeError):
    """Raised when the server returns a 404 Not Found error."""

    pass


class IpBanned(ExchangeError):
    """Raised when the server returns 418 after repeated rate limit violations."""

    @property
    def retryable(self) -> bool:
        return True


class RateLimited(ExchangeError):
    """Raised when the server returns a 429 Rate Limited error."""

    @property
    def retryable(self) -> bool:
        return True


## 5xx status errors - execution status unknown, should be reported


class ServerError(ExchangeError):
    """Raised when the server returns a 5XX status with an error envelope."""

    @property
    def retryable(self) -> bool:
        return True


# ============================================================================
# DECODE ERROR
# ============================================================================


class DecodeError(BaseError):
    """Raised when a response cannot be decoded into the expected shape.

    This is a contract-drift signal: the server answered, but the payload is not
    valid JSON, is missing required fields, or carries values of the wrong type.
    The raw payload is kept for diagnosis.
    """

    def __init__(
        self,
        message: str,
        raw: bytes | str | None = None,
        status_code: int | None = None,
    ):
        """Initialize a DecodeError.

        Args:
            message: Description of the decoding failure.
            raw: The raw response payload, if available.
            status_code: The HTTP status code of the response, if available.

        """
        self.message = message
        self.raw = raw
        self.status_code = status_code
        super().__init__(message)
