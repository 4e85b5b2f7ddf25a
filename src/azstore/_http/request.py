"""Request descriptors handed between the blob operations, authorizers and transports."""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

Pair = tuple[str, str]
PairsLike = Mapping[str, Any] | Sequence[tuple[str, Any]] | None


@dataclass(frozen=True, slots=True)
class StreamBody:
    """Lazily produced body. ``length`` is ``None`` when it is not known upfront."""

    chunks: Iterable[bytes] | AsyncIterable[bytes]
    length: int | None = None


RequestBody = bytes | StreamBody | None


def _pairs(items: PairsLike) -> tuple[Pair, ...]:
    # Mapping values may be lists to express repeated names.
    if items is None:
        return ()
    source = items.items() if isinstance(items, Mapping) else items
    out: list[Pair] = []
    for name, value in source:
        if isinstance(value, (list, tuple)):
            out.extend((str(name), str(v)) for v in value)
        else:
            out.append((str(name), str(value)))
    return tuple(out)


def _coerce_body(body: Any) -> RequestBody:
    if body is None or isinstance(body, (bytes, StreamBody)):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"Unsupported request body type: {type(body).__name__}")


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """An outgoing request that has not been sent yet.

    Headers and query parameters are ordered and may repeat. Instances are
    immutable: authorizers return a new descriptor carrying the extra headers.
    """

    method: str
    url: str
    params: tuple[Pair, ...] = ()
    headers: tuple[Pair, ...] = ()
    body: RequestBody = None

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        params: PairsLike = None,
        headers: PairsLike = None,
        body: Any = None,
    ) -> RequestDescriptor:
        return cls(
            method=method.upper(),
            url=url,
            params=_pairs(params),
            headers=_pairs(headers),
            body=_coerce_body(body),
        )

    @property
    def content_length(self) -> int | None:
        """Body size in bytes, or ``None`` for a stream of unknown length."""
        if self.body is None:
            return 0
        if isinstance(self.body, StreamBody):
            return self.body.length
        return len(self.body)

    def header_values(self, name: str) -> list[str]:
        lowered = name.lower()
        return [v for k, v in self.headers if k.lower() == lowered]

    def header(self, name: str) -> str | None:
        values = self.header_values(name)
        if not values:
            return None
        return ",".join(values)

    def with_header(self, name: str, value: str) -> RequestDescriptor:
        """Return a copy where ``name`` has exactly one value, ``value``."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=kept + ((name, value),))

    def with_headers(self, headers: Mapping[str, str]) -> RequestDescriptor:
        request = self
        for name, value in headers.items():
            request = request.with_header(name, value)
        return request


__all__ = ["RequestDescriptor", "StreamBody", "RequestBody"]
