"""The contract distributed objects need from the cluster runtime."""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import Any, Awaitable, Callable, Protocol, Sequence, TypeVar, runtime_checkable

import anyio

from ..type_utils import MaybeAwaitableCallable

T = TypeVar("T")


@runtime_checkable
class RemoteInvoker(Protocol):
    """
    Operations a cluster runtime supplies.

    ``remote_call`` blocks until the closure has run on the target process
    and returns its result. ``remote_do`` only queues the closure; its
    outcome is never reported back.
    """

    def workers(self) -> list[int]: ...

    def procs(self) -> list[int]: ...

    def current_process(self) -> int: ...

    async def remote_call(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> Any: ...

    async def remote_do(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> None: ...

    async def run_concurrently(self, tasks: Sequence[Callable[[], Awaitable[T]]]) -> list[T]: ...


def _first_error(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first


async def gather(tasks: Sequence[Callable[[], Awaitable[T]]]) -> list[T]:
    """
    Run ``tasks`` concurrently and wait for all of them.

    Results come back in task order. If a task fails, the others are
    cancelled and the first failure is raised as is.
    """
    results: list[Any] = [None] * len(tasks)

    async def _run(index: int, task: Callable[[], Awaitable[T]]) -> None:
        results[index] = await task()

    try:
        async with anyio.create_task_group() as tg:
            for index, task in enumerate(tasks):
                tg.start_soon(_run, index, task)
    except BaseExceptionGroup as group:
        raise _first_error(group)
    return results


_active_runtime: ContextVar[RemoteInvoker | None] = ContextVar("distobjects_runtime", default=None)


def get_runtime() -> RemoteInvoker:
    """Return the runtime of the cluster the caller runs in."""
    runtime = _active_runtime.get()
    if runtime is None:
        raise RuntimeError("No active cluster; use 'async with Cluster(...)' first")
    return runtime


def set_runtime(runtime: RemoteInvoker | None) -> Token[RemoteInvoker | None]:
    return _active_runtime.set(runtime)


def reset_runtime(token: Token[RemoteInvoker | None]) -> None:
    _active_runtime.reset(token)
