"""Client factory functions for creating pre-configured httpx clients."""

from __future__ import annotations

import httpx

from .config import DEFAULT_TIMEOUT

USER_AGENT = "azstore-python"


def _client_kwargs(timeout: float | None) -> dict:
    effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
    return {
        "timeout": httpx.Timeout(effective_timeout),
        "headers": {"user-agent": USER_AGENT},
    }


def create_base_client(timeout: float | None = None) -> httpx.Client:
    """Create a sync httpx client with basic configuration (no auth).

    Authorization is attached per request by the authorizers, never through
    client-level headers or hooks, because the SharedKey signature covers the
    exact header set of each request.

    Args:
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
    """
    return httpx.Client(**_client_kwargs(timeout))


def create_base_async_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create an async httpx client with basic configuration (no auth).

    Args:
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
    """
    return httpx.AsyncClient(**_client_kwargs(timeout))


__all__ = [
    "create_base_client",
    "create_base_async_client",
]
