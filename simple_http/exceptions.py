"""Public exceptions for simple-http.

Request and codec failures are not raised at the call site; they travel
inside a ``Result`` (or ``ResponseOutcome``) so callers can branch on
``error.kind`` instead of parsing log output.
"""

from typing import Literal

ErrorKind = Literal[
    "error",
    "invalid_request",
    "invalid_url",
    "transport",
    "timeout",
    "http_status",
    "decode",
    "encode",
    "config",
]

DecodeFailure = Literal["malformed_json", "timestamp", "shape", "unsupported_type"]


class SimpleHTTPError(Exception):
    """Base exception for all simple-http errors."""

    kind: ErrorKind = "error"

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


class InvalidRequestError(SimpleHTTPError):
    """The request descriptor could not be built (bad method, timeout, ...)."""

    kind: ErrorKind = "invalid_request"


class InvalidURLError(InvalidRequestError):
    """The target address is not a usable http(s) URL."""

    kind: ErrorKind = "invalid_url"


class TransportError(SimpleHTTPError):
    """Network or protocol failure reported by the HTTP stack."""

    kind: ErrorKind = "transport"


class RequestTimeoutError(TransportError):
    """The request did not complete within its timeout."""

    kind: ErrorKind = "timeout"


class HTTPStatusError(SimpleHTTPError):
    """Server answered with a 4xx/5xx status (only when status checking is on)."""

    kind: ErrorKind = "http_status"

    def __init__(
        self,
        message: str,
        status_code: int,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class DecodeError(SimpleHTTPError):
    """Payload could not be turned into a domain object."""

    kind: ErrorKind = "decode"

    def __init__(
        self,
        message: str,
        reason: DecodeFailure,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.reason = reason


class EncodeError(SimpleHTTPError):
    """Domain object could not be serialized to bytes."""

    kind: ErrorKind = "encode"


class ConfigError(SimpleHTTPError):
    """Configuration error (invalid codec or dispatcher settings)."""

    kind: ErrorKind = "config"
