import pytest

from azstore._http import iter_coroutine


class _SuspendingAwaitable:
    def __await__(self):
        yield None
        return None


def test_returns_result_and_closes_coroutine() -> None:
    closed = False

    async def coro() -> str:
        nonlocal closed
        try:
            return "ok"
        finally:
            closed = True

    assert iter_coroutine(coro()) == "ok"
    assert closed


def test_propagates_exceptions() -> None:
    async def coro() -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        iter_coroutine(coro())


def test_rejects_suspending_coroutine() -> None:
    closed = False

    async def coro() -> None:
        nonlocal closed
        try:
            await _SuspendingAwaitable()
        finally:
            closed = True

    with pytest.raises(RuntimeError, match="cannot run on a blocking client"):
        iter_coroutine(coro())

    assert closed
