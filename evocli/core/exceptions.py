"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Client errors form one family so callers can catch ClientError and still
tell the failing stage apart:

    ClientError
    ├── NetworkError            - DNS, connect, TLS, protocol failure
    │   └── RequestTimeoutError - total request time exceeded
    ├── HTTPStatusError         - remote answered with status >= 400
    ├── EnvelopeDecodeError     - body is not a {status, message, data} envelope
    ├── PayloadDecodeError      - envelope data does not fit the expected shape
    └── EnvelopeStatusError     - embedded status is not a success (strict policy)
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when a settings file is missing required keys or malformed."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")


class AuthenticationError(ApplicationError):
    """Raised when no API token could be obtained."""

    def __init__(self, message: str = "API token not provided") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class ClientError(ApplicationError):
    """Base exception for a failed API call."""


class NetworkError(ClientError):
    """Raised when the request never produced an HTTP response."""

    def __init__(
        self,
        message: str = "Network error",
        cause: BaseException | None = None,
        code: str = "NET_UNREACHABLE",
    ) -> None:
        self.cause = cause
        super().__init__(message, code=code)


class RequestTimeoutError(NetworkError):
    """Raised when the request exceeds the session timeout."""

    def __init__(self, timeout: float, cause: BaseException | None = None) -> None:
        self.timeout = timeout
        super().__init__(
            f"Request timed out after {timeout:g}s",
            cause=cause,
            code="NET_TIMEOUT",
        )


class HTTPStatusError(ClientError):
    """Raised when the API answers with an HTTP status of 400 or above."""

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"API error: status code {status_code}, body: {self.body_text}",
            code="HTTP_STATUS",
        )

    @property
    def body_text(self) -> str:
        """Response body decoded for display."""
        return self.body.decode("utf-8", errors="replace")


class EnvelopeDecodeError(ClientError):
    """Raised when the response body is not a valid envelope."""

    def __init__(self, message: str = "Malformed response envelope", cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message, code="DECODE_ENVELOPE")


class PayloadDecodeError(ClientError):
    """Raised when the envelope data cannot be read as the expected shape."""

    def __init__(self, shape: str, cause: BaseException | None = None) -> None:
        self.shape = shape
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not decode {shape} payload{detail}", code="DECODE_PAYLOAD")


class EnvelopeStatusError(ClientError):
    """Raised when the envelope reports a business failure under the strict status policy."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.api_message = message
        super().__init__(f"API reported status {status}: {message}", code="API_STATUS")
