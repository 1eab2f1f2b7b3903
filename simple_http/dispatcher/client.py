"""Request dispatcher: blocking, callback and awaitable HTTP calls."""

import asyncio
import logging
import os
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache, partial

import httpx
from pydantic import ValidationError

from simple_http._internal.http import (
    DEFAULT_TIMEOUT,
    create_async_http_client,
    create_http_client,
    default_headers,
)
from simple_http._internal.log import enable_debug_logging
from simple_http.dispatcher.models import (
    DEFAULT_METHOD,
    RequestDescriptor,
    ResponseMetadata,
    ResponseOutcome,
)
from simple_http.exceptions import (
    ConfigError,
    HTTPStatusError,
    InvalidRequestError,
    InvalidURLError,
    RequestTimeoutError,
    SimpleHTTPError,
    TransportError,
)
from simple_http.result import Result

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
# Extra wait on top of the request timeout before a blocking call gives up
COMPLETION_GRACE_SECONDS = 1.0

CompletionHandler = Callable[
    [bytes | None, ResponseMetadata | None, SimpleHTTPError | None], None
]


class Dispatcher:
    """Issues HTTP requests on a worker pool.

    Every call goes through the same path: the request is submitted to the
    pool and its future is either waited on (``request``/``send``) or handed a
    completion callback (``request_async``/``send_async``). ``fetch`` is the
    coroutine flavour for callers already running an event loop.

    Failures never raise out of a request method. They are logged and come
    back as the ``error`` of a ``Result`` or ``ResponseOutcome``.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        check_status: bool = False,
        user_agent: str | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            timeout: Default request timeout in seconds.
            headers: Headers sent with every request; per-call headers win.
            max_workers: Size of the worker pool.
            check_status: Treat 4xx/5xx responses as ``HTTPStatusError``.
            user_agent: Override for the default User-Agent header.
            debug: Enable debug logging to stderr.

        Raises:
            ConfigError: If timeout or max_workers is not positive.
        """
        if timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout}")
        if max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {max_workers}")

        self._timeout = timeout
        self._headers = {**default_headers(user_agent), **(headers or {})}
        self._max_workers = max_workers
        self._check_status = check_status
        self._debug = debug
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="simple-http"
        )
        if debug:
            enable_debug_logging()

    @classmethod
    def from_env(cls) -> "Dispatcher":
        """Create a dispatcher from environment variables.

        Optional environment variables:
            SIMPLE_HTTP_TIMEOUT: Default request timeout in seconds.
            SIMPLE_HTTP_MAX_WORKERS: Size of the worker pool.
            SIMPLE_HTTP_CHECK_STATUS: Set to "1" to treat 4xx/5xx as errors.
            SIMPLE_HTTP_USER_AGENT: Override for the User-Agent header.
            SIMPLE_HTTP_DEBUG: Set to "1" to enable debug logging.

        Raises:
            ValueError: If a numeric variable is not a valid number.
        """
        timeout = float(os.environ.get("SIMPLE_HTTP_TIMEOUT", str(DEFAULT_TIMEOUT)))
        max_workers = int(os.environ.get("SIMPLE_HTTP_MAX_WORKERS", str(DEFAULT_MAX_WORKERS)))
        check_status = os.environ.get("SIMPLE_HTTP_CHECK_STATUS", "") == "1"
        user_agent = os.environ.get("SIMPLE_HTTP_USER_AGENT") or None
        debug = os.environ.get("SIMPLE_HTTP_DEBUG", "") == "1"

        return cls(
            timeout=timeout,
            max_workers=max_workers,
            check_status=check_status,
            user_agent=user_agent,
            debug=debug,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def describe(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> RequestDescriptor:
        """Build a request descriptor, applying the dispatcher's default timeout.

        Raises:
            InvalidRequestError: If the method, headers or timeout are invalid.
        """
        try:
            return RequestDescriptor(
                url=url,
                method=method,
                body=body,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors(include_url=False)
            )
            raise InvalidRequestError(f"Invalid request for {url!r}: {details}", cause=e) from e

    # =========================================================================
    # Blocking
    # =========================================================================

    def send(self, descriptor: RequestDescriptor) -> ResponseOutcome:
        """Send a request and block until it completes.

        The wait is bounded by the request timeout plus
        ``COMPLETION_GRACE_SECONDS``; a worker that is still busy after that
        yields a ``RequestTimeoutError`` and its late outcome is discarded.
        """
        future = self._submit(descriptor)
        wait = descriptor.timeout + COMPLETION_GRACE_SECONDS
        try:
            outcome = future.result(timeout=wait)
        except TimeoutError as e:
            outcome = ResponseOutcome(
                error=RequestTimeoutError(
                    f"{descriptor.method} {descriptor.url} did not complete within {wait:g}s",
                    cause=e,
                )
            )
        if outcome.error is not None:
            logger.warning("%s %s failed: %s", descriptor.method, descriptor.url, outcome.error)
        return outcome

    def request(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[bytes]:
        """Send a request and block until it completes.

        Returns:
            The response body on success. On failure the result carries the
            error and no payload, even if a body was received.
        """
        try:
            descriptor = self.describe(url, method, body, headers, timeout=timeout)
        except InvalidRequestError as e:
            logger.warning("Request not sent: %s", e)
            return Result[bytes].failure(e)
        return self.send(descriptor).to_result()

    # =========================================================================
    # Non-blocking
    # =========================================================================

    def send_async(self, descriptor: RequestDescriptor, completion: CompletionHandler) -> None:
        """Schedule a request; ``completion`` runs once on a worker thread."""
        future = self._submit(descriptor)
        future.add_done_callback(partial(self._deliver, completion=completion))

    def request_async(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
        completion: CompletionHandler,
    ) -> None:
        """Schedule a request and report it through ``completion``.

        ``completion(payload, metadata, error)`` is invoked exactly once, from
        a worker thread, including when the request could not be built. On a
        closed dispatcher it runs inline with a ``TransportError``.
        """
        try:
            descriptor = self.describe(url, method, body, headers, timeout=timeout)
        except InvalidRequestError as e:
            future = self._schedule(ResponseOutcome, error=e)
        else:
            future = self._submit(descriptor)
        future.add_done_callback(partial(self._deliver, completion=completion))

    # =========================================================================
    # Awaitable
    # =========================================================================

    async def fetch(
        self,
        url: str,
        method: str = DEFAULT_METHOD,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
        *,
        timeout: float | None = None,
    ) -> Result[bytes]:
        """Coroutine version of ``request`` using ``httpx.AsyncClient``."""
        try:
            descriptor = self.describe(url, method, body, headers, timeout=timeout)
            target = descriptor.target()
        except InvalidRequestError as e:
            logger.warning("Request not sent: %s", e)
            return Result[bytes].failure(e)

        wait = descriptor.timeout + COMPLETION_GRACE_SECONDS
        try:
            outcome = await asyncio.wait_for(self._perform_async(descriptor, target), wait)
        except TimeoutError as e:
            outcome = ResponseOutcome(
                error=RequestTimeoutError(
                    f"{descriptor.method} {descriptor.url} did not complete within {wait:g}s",
                    cause=e,
                )
            )
        if outcome.error is not None:
            logger.warning("%s %s failed: %s", descriptor.method, descriptor.url, outcome.error)
        return outcome.to_result()

    # =========================================================================
    # Workers
    # =========================================================================

    def _submit(self, descriptor: RequestDescriptor) -> "Future[ResponseOutcome]":
        logger.debug("Submitting %s %s", descriptor.method, descriptor.url)
        return self._schedule(self._perform, descriptor)

    def _schedule(
        self, fn: Callable[..., ResponseOutcome], *args: object, **kwargs: object
    ) -> "Future[ResponseOutcome]":
        """Submit to the pool; a closed pool yields an already failed future."""
        try:
            return self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            future: Future[ResponseOutcome] = Future()
            future.set_result(
                ResponseOutcome(error=TransportError("Dispatcher is closed", cause=e))
            )
            return future

    def _deliver(self, future: "Future[ResponseOutcome]", completion: CompletionHandler) -> None:
        try:
            outcome = future.result()
        except Exception as e:
            logger.exception("Request worker failed")
            outcome = ResponseOutcome(error=TransportError(f"Request worker failed: {e}", cause=e))
        if outcome.error is not None:
            logger.debug("Delivering error to completion handler: %s", outcome.error)
        completion(outcome.payload, outcome.metadata, outcome.error)

    def _perform(self, descriptor: RequestDescriptor) -> ResponseOutcome:
        """Run one request on the calling (worker) thread."""
        try:
            target = descriptor.target()
        except InvalidURLError as e:
            return ResponseOutcome(error=e)

        try:
            with create_http_client(timeout=descriptor.timeout, headers=self._headers) as client:
                response = client.request(
                    descriptor.method,
                    target,
                    content=descriptor.body,
                    headers=descriptor.headers,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._transport_failure(descriptor, e)
        return self._outcome(descriptor, response)

    async def _perform_async(
        self, descriptor: RequestDescriptor, target: httpx.URL
    ) -> ResponseOutcome:
        try:
            async with create_async_http_client(
                timeout=descriptor.timeout, headers=self._headers
            ) as client:
                response = await client.request(
                    descriptor.method,
                    target,
                    content=descriptor.body,
                    headers=descriptor.headers,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._transport_failure(descriptor, e)
        return self._outcome(descriptor, response)

    def _transport_failure(
        self, descriptor: RequestDescriptor, exc: Exception
    ) -> ResponseOutcome:
        if isinstance(exc, httpx.TimeoutException):
            error: SimpleHTTPError = RequestTimeoutError(
                f"{descriptor.method} {descriptor.url} timed out after {descriptor.timeout:g}s",
                cause=exc,
            )
        else:
            error = TransportError(
                f"{descriptor.method} {descriptor.url} failed: {str(exc) or type(exc).__name__}",
                cause=exc,
            )
        return ResponseOutcome(error=error)

    def _outcome(self, descriptor: RequestDescriptor, response: httpx.Response) -> ResponseOutcome:
        metadata = ResponseMetadata.from_response(response)
        logger.debug("Status Code: %d - %s", metadata.status_code, metadata.reason_phrase)

        error = None
        if self._check_status and metadata.is_error:
            error = HTTPStatusError(
                f"{descriptor.method} {descriptor.url} returned "
                f"{metadata.status_code} {metadata.reason_phrase}",
                metadata.status_code,
            )
        return ResponseOutcome(payload=response.content, metadata=metadata, error=error)


@lru_cache(maxsize=1)
def get_dispatcher() -> Dispatcher:
    """Get the shared dispatcher configured from environment variables.

    The dispatcher is created on first use and reused afterwards. Call
    ``get_dispatcher.cache_clear()`` to pick up changed environment variables.

    Returns:
        The shared Dispatcher instance.
    """
    return Dispatcher.from_env()


def http_sync(
    url: str,
    method: str = DEFAULT_METHOD,
    body: bytes | None = None,
    headers: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[bytes]:
    """Blocking request through the shared dispatcher."""
    return get_dispatcher().request(url, method, body, headers, timeout=timeout)


def http_async(
    url: str,
    method: str = DEFAULT_METHOD,
    body: bytes | None = None,
    headers: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    completion: CompletionHandler,
) -> None:
    """Non-blocking request through the shared dispatcher."""
    get_dispatcher().request_async(
        url, method, body, headers, timeout=timeout, completion=completion
    )


async def fetch(
    url: str,
    method: str = DEFAULT_METHOD,
    body: bytes | None = None,
    headers: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[bytes]:
    """Awaitable request through the shared dispatcher."""
    return await get_dispatcher().fetch(url, method, body, headers, timeout=timeout)
