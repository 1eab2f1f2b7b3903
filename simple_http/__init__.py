"""simple-http: small helpers for HTTP requests and JSON payloads.

Public API:
    http_sync / http_async / fetch - Issue a request through the shared dispatcher
    Dispatcher - Configurable request dispatcher (timeouts, headers, worker pool)
    PayloadCodec / decode / encode - JSON bytes <-> domain objects
    Timestamp - Datetime field type following the codec's wire format
    Result - Value-or-error returned by every operation
"""

from simple_http._version import __version__
from simple_http.codec import PayloadCodec, Timestamp, decode, encode
from simple_http.dispatcher import (
    Dispatcher,
    RequestDescriptor,
    ResponseMetadata,
    ResponseOutcome,
    fetch,
    get_dispatcher,
    http_async,
    http_sync,
)
from simple_http.result import Result

__all__ = [
    "__version__",
    "Dispatcher",
    "RequestDescriptor",
    "ResponseMetadata",
    "ResponseOutcome",
    "get_dispatcher",
    "http_sync",
    "http_async",
    "fetch",
    "PayloadCodec",
    "Timestamp",
    "decode",
    "encode",
    "Result",
]
