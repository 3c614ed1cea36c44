"""Utilities for testing code built on distributed objects."""

from __future__ import annotations

from collections import Counter
from typing import Any, Awaitable, Callable, Sequence, TypeVar

import anyio

from ..runtime.invoker import RemoteInvoker
from ..type_utils import MaybeAwaitableCallable

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout: float = 1.0) -> T:
    """Await ``awaitable``; raises TimeoutError after ``timeout`` seconds."""
    with anyio.fail_after(timeout):
        return await awaitable


async def wait_for(
    condition: Callable[[], bool],
    timeout: float = 1.0,
    interval: float = 0.01,
) -> None:
    """Poll ``condition`` until it is true; raises TimeoutError otherwise."""
    with anyio.fail_after(timeout):
        while not condition():
            await anyio.sleep(interval)


class CountingInvoker:
    """
    RemoteInvoker wrapper that counts the remote operations going through it.

    ``calls`` counts synchronous remote calls per process, ``dos``
    fire-and-forget ones.
    """

    def __init__(self, inner: RemoteInvoker):
        self.inner = inner
        self.calls: Counter[int] = Counter()
        self.dos: Counter[int] = Counter()

    @property
    def total(self) -> int:
        return sum(self.calls.values()) + sum(self.dos.values())

    def workers(self) -> list[int]:
        return self.inner.workers()

    def procs(self) -> list[int]:
        return self.inner.procs()

    def current_process(self) -> int:
        return self.inner.current_process()

    async def remote_call(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> Any:
        self.calls[pid] += 1
        return await self.inner.remote_call(pid, fn, *args)

    async def remote_do(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> None:
        self.dos[pid] += 1
        await self.inner.remote_do(pid, fn, *args)

    async def run_concurrently(self, tasks: Sequence[Callable[[], Awaitable[T]]]) -> list[T]:
        return await self.inner.run_concurrently(tasks)
