"""HTTP transport implementations for sync and async clients."""

from __future__ import annotations

import abc
from collections.abc import AsyncIterable, Iterable
from typing import Any

import httpx

from .request import RequestDescriptor, StreamBody


def _request_headers(request: RequestDescriptor) -> list[tuple[str, str]]:
    headers = list(request.headers)
    body = request.body
    if (
        isinstance(body, StreamBody)
        and body.length is not None
        and request.header("content-length") is None
    ):
        headers.append(("content-length", str(body.length)))
    return headers


def _request_content(request: RequestDescriptor) -> bytes | Iterable[bytes] | AsyncIterable[bytes] | None:
    body = request.body
    if isinstance(body, StreamBody):
        return body.chunks
    return body


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports.

    A transport sends a fully authorized ``RequestDescriptor`` and returns the
    raw ``httpx.Response`` whatever its status. Network failures surface as
    ``httpx.TransportError``.
    """

    @abc.abstractmethod
    async def send(
        self,
        request: RequestDescriptor,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an HTTP request and return the response."""
        ...

    @abc.abstractmethod
    def close(self) -> None:
        """Close any underlying resources."""
        ...


class BlockingTransport(BaseTransport):
    """
    Synchronous HTTP transport using httpx.Client.

    ``send`` is declared async but never awaits, so it can be executed via
    iter_coroutine().
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    async def send(
        self,
        request: RequestDescriptor,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a synchronous HTTP request (wrapped as async for iter_coroutine)."""
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        return self._client.request(
            request.method,
            request.url,
            params=list(request.params) or None,
            headers=_request_headers(request),
            content=_request_content(request),
            **kwargs,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


class AsyncTransport(BaseTransport):
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(
        self,
        request: RequestDescriptor,
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an asynchronous HTTP request."""
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        return await self._client.request(
            request.method,
            request.url,
            params=list(request.params) or None,
            headers=_request_headers(request),
            content=_request_content(request),
            **kwargs,
        )

    def close(self) -> None:
        """No-op; the async client is released by aclose()."""
        pass

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = [
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
]
