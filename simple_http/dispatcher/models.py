"""Pydantic models for requests and their outcomes."""

import re

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from simple_http._internal.http import DEFAULT_TIMEOUT
from simple_http.exceptions import InvalidURLError, SimpleHTTPError
from simple_http.result import Result

# =============================================================================
# Constants
# =============================================================================

DEFAULT_METHOD = "GET"
ALLOWED_SCHEMES = frozenset({"http", "https"})

# RFC 9110 token characters
_METHOD_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Z]+")


def parse_url(url: str) -> httpx.URL:
    """Parse an absolute http(s) address.

    Raises:
        InvalidURLError: If the address cannot be parsed, is relative, uses
            another scheme or has no host.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(f"Malformed URL {url!r}: {e}", cause=e) from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(f"Unsupported URL {url!r}: expected an http or https address")
    if not parsed.host:
        raise InvalidURLError(f"Malformed URL {url!r}: missing host")
    return parsed


# =============================================================================
# Request
# =============================================================================


class RequestDescriptor(BaseModel):
    """Everything needed to issue one HTTP request.

    Fields:
        url: Absolute http(s) address, validated lazily by ``target()``
        method: HTTP verb, normalized to upper case (default: "GET")
        body: Raw request body
        headers: Per-request headers, merged over the dispatcher defaults
        timeout: Seconds before the transport gives up (default: 60)
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = DEFAULT_METHOD
    body: bytes | None = None
    headers: dict[str, str] | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @field_validator("method")
    @classmethod
    def method_is_token(cls, v: str) -> str:
        method = v.strip().upper()
        if not _METHOD_TOKEN.fullmatch(method):
            raise ValueError(f"method must be an HTTP token, got {v!r}")
        return method

    def target(self) -> httpx.URL:
        """Return the parsed URL or raise ``InvalidURLError``."""
        return parse_url(self.url)


# =============================================================================
# Response
# =============================================================================


class ResponseMetadata(BaseModel):
    """Status line and headers of a completed response."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    reason_phrase: str
    url: str
    http_version: str = "HTTP/1.1"
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ResponseMetadata":
        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            url=str(response.url),
            http_version=response.http_version,
            headers=dict(response.headers),
        )

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


class ResponseOutcome(BaseModel):
    """Payload, metadata and error of a finished request.

    Any combination may be present: a transport failure has only ``error``,
    a rejected status (with status checking on) has all three.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    payload: bytes | None = None
    metadata: ResponseMetadata | None = None
    error: SimpleHTTPError | None = None

    def to_result(self) -> Result[bytes]:
        """Collapse into a ``Result``; the payload is dropped on error."""
        if self.error is not None:
            return Result[bytes].failure(self.error)
        return Result[bytes].success(self.payload if self.payload is not None else b"")
