"""
DistributedObject - a typed handle to objects living on cluster processes.

A handle keeps a location table (process id → object id) and an element
type. The objects themselves stay in the LocalStore of the process that
holds them; reading one from another process goes through a remote call.

    obj = await DistributedObject.create(lambda pid: [pid] * 3, pids=[2, 3, 4])
    await obj.get(3)        # [3, 3, 3]
    await obj.delete(3)
    obj.locations()         # [2, 4]
    await obj.close()
"""

from __future__ import annotations

import functools
import logging
import types
from typing import Any, Callable, Generic, Iterable, Mapping, Sequence, TypeVar, Union, get_args, get_origin

from .errors import (
    EmptyTargetSetError,
    NotFoundError,
    RemoteExecutionError,
    TypeMismatchError,
    UnknownProcessError,
)
from .runtime.invoker import RemoteInvoker, get_runtime
from .store.local import ObjectID, add_object, current_process, get_object, remove_object

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _constant(value: Any) -> Any:
    return value


def _conforms(value_type: type, eltype: Any) -> bool:
    """Whether values of ``value_type`` may be stored under ``eltype``."""
    if eltype is Any or eltype is object:
        return True
    origin = get_origin(eltype) or eltype
    if origin is Union or origin is types.UnionType:
        return any(_conforms(value_type, arg) for arg in get_args(eltype))
    return isinstance(origin, type) and issubclass(value_type, origin)


async def _add_on(runtime: RemoteInvoker, pid: int, producer: Callable[[], Any]) -> tuple[ObjectID, type]:
    """Run ``producer`` on ``pid`` and store the result there.

    A failing producer raises RemoteExecutionError wherever it ran.
    """
    if pid == runtime.current_process():
        try:
            return await add_object(producer)
        except Exception as exc:
            raise RemoteExecutionError(pid, exc) from exc
    return await runtime.remote_call(pid, add_object, producer)


async def _sweep(runtime: RemoteInvoker, refs: Mapping[int, ObjectID]) -> None:
    """Fire-and-forget removal of every object in ``refs``."""
    await runtime.run_concurrently([
        functools.partial(runtime.remote_do, pid, remove_object, oid)
        for pid, oid in refs.items()
    ])


def _check_procs(runtime: RemoteInvoker, pids: Iterable[int]) -> None:
    known = set(runtime.procs())
    for pid in pids:
        if pid not in known:
            raise UnknownProcessError(pid)


class DistributedObject(Generic[T]):
    """
    Handle to objects of type ``T`` stored on one or more processes.

    At most one object per process. The handle owns only the location
    table; it can be emptied with delete()/close() and filled again with
    set()/put().
    """

    def __init__(
        self,
        eltype: type[T],
        *,
        runtime: RemoteInvoker | None = None,
        refs: Mapping[int, ObjectID] | None = None,
    ):
        self._eltype = eltype
        self._runtime = runtime
        self._refs: dict[int, ObjectID] = dict(refs or {})

    # --- construction ---

    @classmethod
    def empty(cls, eltype: type[T], *, runtime: RemoteInvoker | None = None) -> "DistributedObject[T]":
        """Handle with no objects yet, referencing values of type ``eltype``."""
        return cls(eltype, runtime=runtime)

    @classmethod
    async def create(
        cls,
        factory: Callable[[int], T],
        pids: Sequence[int] | None = None,
        *,
        runtime: RemoteInvoker | None = None,
    ) -> "DistributedObject[T]":
        """
        Store ``factory(pid)`` on each process of ``pids``.

        ``factory`` runs on the target process itself, concurrently for all
        targets. ``pids`` defaults to the cluster's workers. All values must
        have the same type, which becomes the element type.

        If anything fails after some objects were stored, those objects are
        removed again before the error is raised.
        """
        if pids is not None and not pids:
            raise EmptyTargetSetError("create() needs at least one target process")
        runtime = runtime or get_runtime()
        targets = list(dict.fromkeys(runtime.workers() if pids is None else pids))
        if not targets:
            raise EmptyTargetSetError("create() needs at least one target process")
        _check_procs(runtime, targets)

        created: dict[int, tuple[ObjectID, type]] = {}

        async def _create(pid: int) -> None:
            created[pid] = await _add_on(runtime, pid, functools.partial(factory, pid))

        try:
            await runtime.run_concurrently([functools.partial(_create, pid) for pid in targets])
        except Exception:
            logger.warning("create() failed, removing %d stored objects", len(created))
            await _sweep(runtime, {pid: oid for pid, (oid, _) in created.items()})
            raise

        found = tuple(dict.fromkeys(created[pid][1] for pid in targets))
        if len(found) > 1:
            logger.warning("create() produced mixed types %s, removing stored objects", found)
            await _sweep(runtime, {pid: oid for pid, (oid, _) in created.items()})
            raise TypeMismatchError(
                "factory returned values of different types: "
                + ", ".join(t.__name__ for t in found),
                found,
            )

        logger.debug("created %s on %s", found[0].__name__, targets)
        return cls(found[0], runtime=runtime, refs={pid: created[pid][0] for pid in targets})

    @classmethod
    async def create_on(
        cls,
        factory: Callable[[], T],
        pid: int,
        *,
        runtime: RemoteInvoker | None = None,
    ) -> "DistributedObject[T]":
        """Store ``factory()`` on process ``pid`` only."""
        return await cls.create(lambda _pid: factory(), [pid], runtime=runtime)

    # --- introspection ---

    @property
    def runtime(self) -> RemoteInvoker:
        return self._runtime or get_runtime()

    @property
    def eltype(self) -> type[T]:
        return self._eltype

    def locations(self) -> list[int]:
        """Sorted ids of the processes holding an object."""
        return sorted(self._refs)

    def __contains__(self, pid: object) -> bool:
        return pid in self._refs

    def __len__(self) -> int:
        return len(self._refs)

    def __repr__(self) -> str:
        return f"DistributedObject[{getattr(self._eltype, '__name__', self._eltype)}](locations={self.locations()})"

    def _lookup(self, pid: int) -> ObjectID:
        try:
            return self._refs[pid]
        except KeyError:
            raise NotFoundError(
                f"This distributed object has no object on process {pid}", pid=pid
            ) from None

    # --- read ---

    async def get(self, pid: int | None = None) -> T:
        """
        Return the object stored on ``pid`` (default: the current process).

        Reading from another process copies the value over a remote call.
        """
        runtime = self.runtime
        here = runtime.current_process()
        pid = here if pid is None else pid
        oid = self._lookup(pid)
        if pid == here:
            return get_object(oid)
        return await runtime.remote_call(pid, get_object, oid)

    async def get_many(self, *pids: int) -> list[T]:
        """Fetch the objects of ``pids`` concurrently, in the order given."""
        for pid in pids:
            self._lookup(pid)
        return await self.runtime.run_concurrently([functools.partial(self.get, pid) for pid in pids])

    # --- write ---

    async def _store(self, producers: Mapping[int, Callable[[], Any]]) -> None:
        """Run each producer on its process and store the result, replacing any existing object."""
        if not producers:
            raise EmptyTargetSetError("no target processes given")
        runtime = self.runtime
        _check_procs(runtime, producers)

        async def _write(pid: int, producer: Callable[[], Any]) -> None:
            if pid in self._refs:
                await self.delete(pid)
            oid, value_type = await _add_on(runtime, pid, producer)
            if not _conforms(value_type, self._eltype):
                await runtime.remote_do(pid, remove_object, oid)
                raise TypeMismatchError(
                    f"process {pid} produced {value_type.__name__}, expected {self._eltype!r}",
                    (value_type,),
                )
            # A concurrent write to the same pid may have landed meanwhile.
            stale = self._refs.get(pid)
            self._refs[pid] = oid
            if stale is not None:
                await runtime.remote_do(pid, remove_object, stale)

        await runtime.run_concurrently([
            functools.partial(_write, pid, producer) for pid, producer in producers.items()
        ])

    def _check_value(self, value: Any) -> None:
        if not _conforms(type(value), self._eltype):
            raise TypeMismatchError(
                f"cannot store {type(value).__name__}, expected {self._eltype!r}",
                (type(value),),
            )

    async def set(self, factory: Callable[[], T], pid: int | None = None) -> None:
        """Store ``factory()``, evaluated on ``pid`` (default: the current process)."""
        pid = self.runtime.current_process() if pid is None else pid
        await self._store({pid: factory})

    async def set_many(self, factory: Callable[[int], T], *pids: int) -> None:
        """Store ``factory(pid)`` on each of ``pids``, concurrently."""
        await self._store({pid: functools.partial(factory, pid) for pid in pids})

    async def put(self, value: T, pid: int | None = None) -> None:
        """Store ``value`` on ``pid`` (default: the current process)."""
        self._check_value(value)
        await self.set(functools.partial(_constant, value), pid)

    async def put_many(self, values: Sequence[T], *pids: int) -> None:
        """Store ``values[i]`` on ``pids[i]``."""
        if len(values) != len(pids):
            raise ValueError(f"got {len(values)} values for {len(pids)} processes")
        for value in values:
            self._check_value(value)
        by_pid = dict(zip(pids, values))
        await self._store({pid: functools.partial(_constant, value) for pid, value in by_pid.items()})

    # --- delete ---

    async def delete(self, pid: int) -> None:
        """
        Remove the object stored on ``pid``.

        The removal is fire-and-forget: the location table is updated at
        once and remote failures are not reported.
        """
        oid = self._lookup(pid)
        del self._refs[pid]
        await self.runtime.remote_do(pid, remove_object, oid)
        logger.debug("deleted %s from process %d", oid, pid)

    async def close(self) -> None:
        """Remove every object. The handle stays usable."""
        refs, self._refs = self._refs, {}
        if refs:
            await _sweep(self.runtime, refs)
        logger.debug("closed, released %d objects", len(refs))


def localpart(obj: DistributedObject[T]) -> T:
    """Return the object ``obj`` holds on the calling process, without a remote call."""
    return get_object(obj._lookup(current_process()))
