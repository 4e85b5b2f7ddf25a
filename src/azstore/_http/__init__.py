"""Shared HTTP infrastructure for the storage clients."""

from .clients import create_base_async_client, create_base_client
from .config import DEFAULT_AUTH_URL, DEFAULT_ENDPOINT_SUFFIX, DEFAULT_TIMEOUT
from .iter_coroutine import iter_coroutine
from .request import RequestBody, RequestDescriptor, StreamBody
from .transport import AsyncTransport, BaseTransport, BlockingTransport

__all__ = [
    "DEFAULT_AUTH_URL",
    "DEFAULT_ENDPOINT_SUFFIX",
    "DEFAULT_TIMEOUT",
    "iter_coroutine",
    "RequestDescriptor",
    "RequestBody",
    "StreamBody",
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
    "create_base_client",
    "create_base_async_client",
]
