from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import Any

import httpx

from .._http import (
    AsyncTransport,
    BlockingTransport,
    StreamBody,
    create_base_async_client,
    create_base_client,
    iter_coroutine,
)
from ..auth import Authorizer, ServicePrincipalAuth, TokenCache
from ..auth.service_principal import (
    AsyncServicePrincipalAuthorizer,
    FailureObserver,
    ServicePrincipalAuthorizer,
)
from ..config import StorageConfig
from ._core import Params, _BaseBlobClient
from .errors import BlobError

DEFAULT_BLOCK_SIZE = 8 * 1024 * 1024  # 8MB
MAX_CONCURRENCY = 6

BlobData = bytes | bytearray | memoryview | str | StreamBody


def _is_single_shot(data: Any) -> bool:
    return isinstance(data, (bytes, bytearray, memoryview, str, StreamBody))


def _iter_blocks(data: Any, block_size: int) -> Iterator[bytes]:
    """Chunks of a file-like object, or the items of an iterable as they come."""
    if hasattr(data, "read"):
        while True:
            chunk = data.read(block_size)
            if not chunk:
                return
            yield bytes(chunk)
    else:
        for chunk in data:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


async def _aiter_blocks(data: Any, block_size: int) -> AsyncIterator[bytes]:
    if isinstance(data, AsyncIterable):
        async for chunk in data:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
    else:
        for chunk in _iter_blocks(data, block_size):
            yield chunk


def _resolve(
    config: StorageConfig | None,
    authorizer: Authorizer | None,
    cache: TokenCache | None,
    on_failure: FailureObserver | None,
    use_async: bool,
    overrides: dict[str, Any],
) -> tuple[StorageConfig, Authorizer, bool]:
    if config is not None and overrides:
        raise BlobError("Pass either config=... or individual settings, not both")
    resolved = config or StorageConfig.from_env(**overrides)
    if authorizer is not None:
        return resolved, authorizer, False
    return resolved, resolved.authorizer(cache=cache, on_failure=on_failure, use_async=use_async), True


class BlobClient(_BaseBlobClient):
    """Blocking client for one storage account.

    Settings not passed explicitly are read from the environment (see
    ``azstore.config``). Stream uploads send one block at a time.
    """

    def __init__(
        self,
        config: StorageConfig | None = None,
        *,
        authorizer: Authorizer | None = None,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        **overrides: Any,
    ) -> None:
        self._config, self._auth, self._owns_authorizer = _resolve(
            config, authorizer, cache, on_failure, False, overrides
        )
        if isinstance(self._auth, ServicePrincipalAuth) and not isinstance(
            self._auth.authorizer, ServicePrincipalAuthorizer
        ):
            raise BlobError("BlobClient needs a blocking ServicePrincipalAuthorizer")
        self._transport = BlockingTransport(create_base_client(timeout=self._config.timeout))
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise BlobError("Client is closed")

    def list_containers(self) -> str:
        self._ensure_open()
        return iter_coroutine(self._list_containers())

    def create_container(self, container: str) -> str:
        self._ensure_open()
        return iter_coroutine(self._create_container(container))

    def head_container(self, container: str) -> httpx.Headers:
        self._ensure_open()
        return iter_coroutine(self._head_container(container))

    def put_blob(
        self,
        name: str,
        data: BlobData | Iterable[bytes] | Any,
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
        timeout: float | None = None,
    ) -> None:
        """Upload a blob.

        ``bytes``, ``str`` and ``StreamBody`` are sent in a single request.
        File-like objects (read in ``block_size`` chunks) and iterables of
        chunks are uploaded as blocks and committed once all have succeeded;
        a failed block aborts the upload without committing anything.
        """
        self._ensure_open()
        if _is_single_shot(data):
            body = bytes(data) if isinstance(data, (bytearray, memoryview)) else data
            iter_coroutine(
                self._put_blob(
                    name, body, content_type, container=container, params=params, timeout=timeout
                )
            )
            return

        block_ids = [
            iter_coroutine(
                self._put_block(name, chunk, container=container, params=params, timeout=timeout)
            )
            for chunk in _iter_blocks(data, block_size)
        ]
        iter_coroutine(
            self._put_block_list(
                name, block_ids, content_type, container=container, params=params
            )
        )

    def get_blob(
        self,
        name: str,
        *,
        container: str | None = None,
        params: Params = None,
        timeout: float | None = None,
    ) -> bytes:
        self._ensure_open()
        return iter_coroutine(
            self._get_blob(name, container=container, params=params, timeout=timeout)
        )

    def head_blob(
        self, name: str, *, container: str | None = None, params: Params = None
    ) -> httpx.Headers:
        self._ensure_open()
        return iter_coroutine(self._head_blob(name, container=container, params=params))

    def copy_blob(
        self, source_name: str, destination_name: str, *, container: str | None = None
    ) -> httpx.Headers:
        self._ensure_open()
        return iter_coroutine(
            self._copy_blob(source_name, destination_name, container=container)
        )

    def delete_blob(
        self, name: str, *, container: str | None = None, params: Params = None
    ) -> None:
        self._ensure_open()
        iter_coroutine(self._delete_blob(name, container=container, params=params))

    def list_blobs(self, *, container: str | None = None, params: Params = None) -> str:
        self._ensure_open()
        return iter_coroutine(self._list_blobs(container=container, params=params))

    def put_block(
        self, name: str, chunk: bytes, *, container: str | None = None, params: Params = None
    ) -> str:
        self._ensure_open()
        return iter_coroutine(self._put_block(name, chunk, container=container, params=params))

    def put_block_list(
        self,
        name: str,
        block_ids: Iterable[str],
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> None:
        self._ensure_open()
        iter_coroutine(
            self._put_block_list(
                name, block_ids, content_type, container=container, params=params
            )
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._transport.close()
        if self._owns_authorizer and isinstance(self._auth, ServicePrincipalAuth):
            self._auth.authorizer.close()  # type: ignore[union-attr]

    def __enter__(self) -> BlobClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncBlobClient(_BaseBlobClient):
    """Asyncio client for one storage account.

    Stream uploads send up to ``MAX_CONCURRENCY`` blocks at a time, all
    authorized through the same authorizer.
    """

    def __init__(
        self,
        config: StorageConfig | None = None,
        *,
        authorizer: Authorizer | None = None,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        max_concurrency: int = MAX_CONCURRENCY,
        **overrides: Any,
    ) -> None:
        self._config, self._auth, self._owns_authorizer = _resolve(
            config, authorizer, cache, on_failure, True, overrides
        )
        self._transport = AsyncTransport(create_base_async_client(timeout=self._config.timeout))
        self._max_concurrency = max_concurrency
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise BlobError("Client is closed")

    async def list_containers(self) -> str:
        self._ensure_open()
        return await self._list_containers()

    async def create_container(self, container: str) -> str:
        self._ensure_open()
        return await self._create_container(container)

    async def head_container(self, container: str) -> httpx.Headers:
        self._ensure_open()
        return await self._head_container(container)


    async def put_blob(
        self,
        name: str,
        data: BlobData | Iterable[bytes] | AsyncIterable[bytes] | Any,
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
        timeout: float | None = None,
    ) -> None:
        self._ensure_open()
        if _is_single_shot(data):
            body = bytes(data) if isinstance(data, (bytearray, memoryview)) else data
            await self._put_blob(
                name, body, content_type, container=container, params=params, timeout=timeout
            )
            return

        sem = asyncio.Semaphore(self._max_concurrency)
        block_ids: dict[int, str] = {}
        tasks: list[asyncio.Task[None]] = []

        async def upload_one(idx: int, chunk: bytes) -> None:
            try:
                block_ids[idx] = await self._put_block(
                    name, chunk, container=container, params=params, timeout=timeout
                )
            finally:
                sem.release()

        try:
            idx = 0
            async for chunk in _aiter_blocks(data, block_size):
                # Wait for a free slot before taking on another block.
                await sem.acquire()
                for task in tasks:
                    if task.done():
                        task.result()
                tasks.append(asyncio.create_task(upload_one(idx, chunk)))
                idx += 1
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        await self._put_block_list(
            name,
            [block_ids[i] for i in range(len(tasks))],
            content_type,
            container=container,
            params=params,
        )

    async def get_blob(
        self,
        name: str,
        *,
        container: str | None = None,
        params: Params = None,
        timeout: float | None = None,
    ) -> bytes:
        self._ensure_open()
        return await self._get_blob(name, container=container, params=params, timeout=timeout)

    async def head_blob(
        self, name: str, *, container: str | None = None, params: Params = None
    ) -> httpx.Headers:
        self._ensure_open()
        return await self._head_blob(name, container=container, params=params)

    async def copy_blob(
        self, source_name: str, destination_name: str, *, container: str | None = None
    ) -> httpx.Headers:
        self._ensure_open()
        return await self._copy_blob(source_name, destination_name, container=container)

    async def delete_blob(
        self, name: str, *, container: str | None = None, params: Params = None
    ) -> None:
        self._ensure_open()
        await self._delete_blob(name, container=container, params=params)

    async def list_blobs(self, *, container: str | None = None, params: Params = None) -> str:
        self._ensure_open()
        return await self._list_blobs(container=container, params=params)

    async def put_block(
        self, name: str, chunk: bytes, *, container: str | None = None, params: Params = None
    ) -> str:
        self._ensure_open()
        return await self._put_block(name, chunk, container=container, params=params)

    async def put_block_list(
        self,
        name: str,
        block_ids: Iterable[str],
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> None:
        self._ensure_open()
        await self._put_block_list(
            name, block_ids, content_type, container=container, params=params
        )

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._transport.aclose()
        if self._owns_authorizer and isinstance(self._auth, ServicePrincipalAuth):
            authorizer = self._auth.authorizer
            if isinstance(authorizer, AsyncServicePrincipalAuthorizer):
                await authorizer.aclose()
            else:
                authorizer.close()

    async def __aenter__(self) -> AsyncBlobClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = ["BlobClient", "AsyncBlobClient", "DEFAULT_BLOCK_SIZE", "MAX_CONCURRENCY"]
