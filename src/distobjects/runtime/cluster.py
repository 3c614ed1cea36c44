"""
Cluster - a master process plus worker processes, all in this interpreter.

Implements RemoteInvoker on top of Node actors:

    async with Cluster(workers=3) as cluster:
        obj = await DistributedObject.create(lambda pid: [pid] * 3)

The task that enters the cluster runs as the master process.
"""

from __future__ import annotations

import dataclasses
import logging
from contextvars import Token
from typing import Any, Awaitable, Callable, Sequence, TypeVar

import anyio
from anyio.abc import TaskGroup

from ..config import ClusterConfig
from ..errors import RemoteExecutionError, UnknownProcessError
from ..messaging import call, cast
from ..primitives.pid import PID
from ..store.local import LocalStore, NodeContext, current_process, enter_node, leave_node
from ..type_utils import MaybeAwaitableCallable, call_maybe_await
from .invoker import RemoteInvoker, gather, reset_runtime, set_runtime
from .node import Node

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Cluster:
    """Local cluster of Node processes."""

    def __init__(self, config: ClusterConfig | None = None, **overrides: Any):
        config = config or ClusterConfig()
        self.config = dataclasses.replace(config, **overrides) if overrides else config
        self._nodes: dict[int, PID] = {}
        self._stores: dict[int, LocalStore] = {}
        self._task_group: TaskGroup | None = None
        self._tokens: tuple[Token[NodeContext | None], Token[RemoteInvoker | None]] | None = None

    async def __aenter__(self) -> "Cluster":
        if self._task_group is not None:
            raise RuntimeError("Cluster already started")

        master = self.config.master
        self._stores = {pid: LocalStore() for pid in [master, *self.config.worker_ids]}
        self._tokens = (
            enter_node(NodeContext(pid=master, store=self._stores[master])),
            set_runtime(self),
        )

        self._task_group = anyio.create_task_group()
        await self._task_group.__aenter__()
        try:
            for pid, store in self._stores.items():
                self._nodes[pid] = await Node.start(pid, store, task_group=self._task_group)
        except BaseException:
            await self._shutdown()
            raise

        logger.info("cluster started: master %d, workers %s", master, self.config.worker_ids)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._shutdown()

    async def _shutdown(self) -> None:
        # Errors from the body propagate on their own; the task group only
        # has to wind down the nodes.
        task_group, self._task_group = self._task_group, None
        if self._tokens is not None:
            node_token, runtime_token = self._tokens
            reset_runtime(runtime_token)
            leave_node(node_token)
            self._tokens = None
        self._nodes.clear()
        if task_group is None:
            return
        task_group.cancel_scope.cancel()
        await task_group.__aexit__(None, None, None)
        logger.info("cluster stopped")

    # --- RemoteInvoker ---

    def procs(self) -> list[int]:
        return sorted(self._nodes)

    def workers(self) -> list[int]:
        """Worker ids; the master alone when there are no workers."""
        workers = [pid for pid in self.procs() if pid != self.config.master]
        return workers or [self.config.master]

    def current_process(self) -> int:
        return current_process()

    def store(self, pid: int) -> LocalStore:
        """Return the store of process ``pid``, for inspection."""
        if pid not in self._nodes:
            raise UnknownProcessError(pid)
        return self._stores[pid]

    def _node(self, pid: int) -> PID:
        try:
            return self._nodes[pid]
        except KeyError:
            raise UnknownProcessError(pid) from None

    async def remote_call(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> Any:
        """
        Run ``fn(*args)`` on process ``pid`` and return its result.

        Runs inline when ``pid`` is the calling process, so a process can
        call itself without waiting on its own mailbox.
        """
        node = self._node(pid)
        if pid == current_process():
            try:
                return await call_maybe_await(fn, *args)
            except Exception as exc:
                raise RemoteExecutionError(pid, exc) from exc

        status, payload = await call(node, ("run", fn, args), timeout=self.config.call_timeout)
        if status == "error":
            raise RemoteExecutionError(pid, payload) from payload
        return payload

    async def remote_do(self, pid: int, fn: MaybeAwaitableCallable, *args: Any) -> None:
        """Queue ``fn(*args)`` on process ``pid`` without waiting for it."""
        await cast(self._node(pid), ("run", fn, args))

    async def run_concurrently(self, tasks: Sequence[Callable[[], Awaitable[T]]]) -> list[T]:
        return await gather(tasks)

    async def stats(self, pid: int) -> dict[str, int]:
        """Request counters and object count of process ``pid``."""
        return await call(self._node(pid), "stats", timeout=self.config.call_timeout)

    def __repr__(self) -> str:
        return f"Cluster(procs={self.procs()})"
