"""Request dispatcher: send HTTP requests blocking, with a callback, or awaited."""

from simple_http.dispatcher.client import (
    COMPLETION_GRACE_SECONDS,
    CompletionHandler,
    Dispatcher,
    fetch,
    get_dispatcher,
    http_async,
    http_sync,
)
from simple_http.dispatcher.models import (
    RequestDescriptor,
    ResponseMetadata,
    ResponseOutcome,
    parse_url,
)

__all__ = [
    "COMPLETION_GRACE_SECONDS",
    "CompletionHandler",
    "Dispatcher",
    "get_dispatcher",
    "http_sync",
    "http_async",
    "fetch",
    "RequestDescriptor",
    "ResponseMetadata",
    "ResponseOutcome",
    "parse_url",
]
