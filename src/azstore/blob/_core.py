"""Core blob, container and block operations shared by the sync and async clients."""

from __future__ import annotations

import base64
import logging
import secrets
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from .._http import BaseTransport, RequestDescriptor, StreamBody
from ..auth import Authorizer
from ..config import StorageConfig
from .errors import BlobNotFoundError, BlobRequestError, ContainerAlreadyExistsError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
BLOCK_LIST_CONTENT_TYPE = "text/plain; charset=UTF-8"

Params = Mapping[str, Any] | None


def make_block_id() -> str:
    # Every block of a blob must have an id of the same length.
    return base64.b64encode(secrets.token_hex(8).encode("ascii")).decode("ascii")


def build_block_list(block_ids: Iterable[str]) -> str:
    blocks = "".join(f"<Uncommitted>{block_id}</Uncommitted>" for block_id in block_ids)
    return f'<?xml version="1.0" encoding="utf-8"?>\n<BlockList>\n{blocks}\n</BlockList>\n'


def _merge_params(base: list[tuple[str, str]], extra: Params) -> list[tuple[str, Any]]:
    return base + list((extra or {}).items())


def _expect(
    resp: httpx.Response,
    status: int,
    *,
    not_found: str | None = None,
) -> httpx.Response:
    if resp.status_code == status:
        return resp
    if not_found is not None and resp.status_code == 404:
        raise BlobNotFoundError(not_found)
    raise BlobRequestError(resp)


class _BaseBlobClient:
    """Base class for blob clients with shared async implementation.

    Every operation builds an unsigned ``RequestDescriptor``, runs it through
    the configured authorizer and hands the result to the transport.
    """

    _transport: BaseTransport
    _auth: Authorizer
    _config: StorageConfig

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def authorizer(self) -> Authorizer:
        return self._auth

    def get_url(self, name: str | None = None, *, container: str | None = None) -> str:
        """URL of ``container`` (the configured one by default), or of blob ``name`` in it."""
        url = f"{self._config.require_api_url()}/{self._config.require_container(container)}"
        if name is None:
            return url
        return f"{url}/{quote(name.lstrip('/'), safe='/')}"

    async def _send(
        self,
        request: RequestDescriptor,
        *,
        content_type: str | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        authorized = await self._auth.authorize(request, content_type=content_type)
        logger.debug("%s %s", request.method, request.url)
        return await self._transport.send(authorized, timeout=timeout)

    async def _list_containers(self) -> str:
        request = RequestDescriptor.build(
            "GET", f"{self._config.require_api_url()}/", params={"comp": "list"}
        )
        resp = _expect(await self._send(request), 200)
        return resp.text

    async def _create_container(self, container: str) -> str:
        request = RequestDescriptor.build(
            "PUT",
            f"{self._config.require_api_url()}/{container}",
            params={"restype": "container"},
        )
        resp = await self._send(request, content_type=DEFAULT_CONTENT_TYPE)
        if resp.status_code == 409:
            raise ContainerAlreadyExistsError(container)
        _expect(resp, 201)
        return container

    async def _head_container(self, container: str) -> httpx.Headers:
        request = RequestDescriptor.build(
            "HEAD",
            f"{self._config.require_api_url()}/{container}",
            params={"restype": "container"},
        )
        resp = _expect(await self._send(request), 200, not_found=container)
        return resp.headers

    async def _put_blob(
        self,
        name: str,
        body: bytes | str | StreamBody,
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
        timeout: float | None = None,
    ) -> None:
        request = RequestDescriptor.build(
            "PUT",
            self.get_url(name, container=container),
            params=params,
            headers={"x-ms-blob-type": "BlockBlob"},
            body=body,
        )
        resp = await self._send(
            request, content_type=content_type or DEFAULT_CONTENT_TYPE, timeout=timeout
        )
        _expect(resp, 201)

    async def _get_blob(
        self,
        name: str,
        *,
        container: str | None = None,
        params: Params = None,
        timeout: float | None = None,
    ) -> bytes:
        request = RequestDescriptor.build(
            "GET", self.get_url(name, container=container), params=params
        )
        resp = _expect(await self._send(request, timeout=timeout), 200, not_found=name)
        return resp.content

    async def _head_blob(
        self,
        name: str,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> httpx.Headers:
        request = RequestDescriptor.build(
            "HEAD", self.get_url(name, container=container), params=params
        )
        resp = _expect(await self._send(request), 200, not_found=name)
        return resp.headers

    async def _copy_blob(
        self,
        source_name: str,
        destination_name: str,
        *,
        container: str | None = None,
    ) -> httpx.Headers:
        # Source and destination live in the same account and container.
        request = RequestDescriptor.build(
            "PUT",
            self.get_url(destination_name, container=container),
            headers={
                "x-ms-copy-source": self.get_url(source_name, container=container),
                "content-type": DEFAULT_CONTENT_TYPE,
            },
        )
        resp = _expect(await self._send(request, content_type=DEFAULT_CONTENT_TYPE), 202)
        return resp.headers

    async def _delete_blob(
        self,
        name: str,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> None:
        request = RequestDescriptor.build(
            "DELETE", self.get_url(name, container=container), params=params
        )
        _expect(await self._send(request), 202, not_found=name)

    async def _list_blobs(
        self,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> str:
        request = RequestDescriptor.build(
            "GET",
            self.get_url(container=container),
            params=_merge_params([("comp", "list"), ("restype", "container")], params),
        )
        resp = _expect(await self._send(request), 200)
        return resp.text

    async def _put_block(
        self,
        name: str,
        chunk: bytes,
        *,
        container: str | None = None,
        params: Params = None,
        timeout: float | None = None,
    ) -> str:
        """Upload one uncommitted block and return its base64 block id."""
        block_id = make_block_id()
        request = RequestDescriptor.build(
            "PUT",
            self.get_url(name, container=container),
            params=_merge_params([("comp", "block"), ("blockid", block_id)], params),
            headers={"content-type": DEFAULT_CONTENT_TYPE},
            body=chunk,
        )
        resp = await self._send(request, content_type=DEFAULT_CONTENT_TYPE, timeout=timeout)
        _expect(resp, 201)
        return block_id

    async def _put_block_list(
        self,
        name: str,
        block_ids: Iterable[str],
        content_type: str | None = None,
        *,
        container: str | None = None,
        params: Params = None,
    ) -> None:
        """Commit ``block_ids``, in order, as the content of blob ``name``."""
        request = RequestDescriptor.build(
            "PUT",
            self.get_url(name, container=container),
            params=_merge_params([("comp", "blocklist")], params),
            headers={
                "content-type": BLOCK_LIST_CONTENT_TYPE,
                "x-ms-blob-content-type": content_type or DEFAULT_CONTENT_TYPE,
            },
            body=build_block_list(block_ids),
        )
        resp = await self._send(request, content_type=BLOCK_LIST_CONTENT_TYPE)
        _expect(resp, 201)


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "BLOCK_LIST_CONTENT_TYPE",
    "make_block_id",
    "build_block_list",
]
