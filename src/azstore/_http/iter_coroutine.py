"""Run the shared async implementation on the blocking clients."""

from __future__ import annotations

import typing

_T = typing.TypeVar("_T")


def iter_coroutine(coro: typing.Coroutine[None, None, _T]) -> _T:
    """Step ``coro`` once and hand back what it returned.

    ``BlobClient`` and ``ServicePrincipalAuthorizer`` reuse the ``async``
    operations of their base classes. Over a ``BlockingTransport`` those
    operations finish during the first step, so no event loop is involved
    and the caller's thread does all the I/O.

    Raises:
        RuntimeError: ``coro`` yielded to an event loop, for example because
            an asyncio authorizer was handed to a blocking client.
    """
    try:
        coro.send(None)
    except StopIteration as done:
        return done.value  # type: ignore [no-any-return]
    finally:
        coro.close()
    raise RuntimeError(f"{coro!r} suspended; it cannot run on a blocking client")


__all__ = ["iter_coroutine"]
