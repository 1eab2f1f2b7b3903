"""Shared HTTP client configuration."""

import httpx

from simple_http._version import __version__

DEFAULT_TIMEOUT = 60.0
DEFAULT_USER_AGENT = f"simple-http/{__version__}"


def default_headers(user_agent: str | None = None) -> dict[str, str]:
    """Headers sent with every request unless the caller overrides them."""
    return {"User-Agent": user_agent or DEFAULT_USER_AGENT}


def create_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create configured HTTP client.

    Args:
        timeout: Request timeout in seconds.
        headers: Headers applied to every request made by the client.

    Returns:
        Configured httpx.Client instance.
    """
    return httpx.Client(
        timeout=timeout,
        headers=headers if headers is not None else default_headers(),
        follow_redirects=True,
    )


def create_async_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Same defaults as ``create_http_client``.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        headers=headers if headers is not None else default_headers(),
        follow_redirects=True,
    )
