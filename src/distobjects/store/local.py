"""Per-process object store."""

from __future__ import annotations

import threading
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Dict

from ..errors import NotFoundError
from ..type_utils import MaybeAwaitableCallable, call_maybe_await

ObjectID = uuid.UUID


class LocalStore:
    """
    Thread-safe store of the objects held by one process.

    Maps object ids to values. Entries live until removed; nothing is
    evicted implicitly.
    """

    def __init__(self):
        self._objects: Dict[ObjectID, Any] = {}
        self._lock = threading.Lock()

    def add(self, value: Any) -> tuple[ObjectID, type]:
        """
        Store ``value`` under a freshly minted id.

        Returns the id and the value's concrete type.
        """
        oid = uuid.uuid1()
        with self._lock:
            self._objects[oid] = value
        return oid, type(value)

    def remove(self, oid: ObjectID) -> bool:
        """
        Remove an object.

        Returns True if it was present. Removing a missing id is not an error.
        """
        with self._lock:
            if oid not in self._objects:
                return False
            del self._objects[oid]
            return True

    def get(self, oid: ObjectID) -> Any:
        """Return the object stored under ``oid``; raises NotFoundError if absent."""
        with self._lock:
            try:
                return self._objects[oid]
            except KeyError:
                raise NotFoundError(f"no object {oid} in this store", key=oid) from None

    def ids(self) -> list[ObjectID]:
        """Return the ids of all stored objects."""
        with self._lock:
            return list(self._objects.keys())

    def clear(self) -> None:
        with self._lock:
            self._objects.clear()

    def __contains__(self, oid: object) -> bool:
        with self._lock:
            return oid in self._objects

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)


@dataclass(frozen=True)
class NodeContext:
    """Identity and store of the process a piece of code is running on."""
    pid: int
    store: LocalStore


# Set by each node for its own task, and by the cluster for the task that
# entered it (which runs as the master process).
_current_node: ContextVar[NodeContext | None] = ContextVar("distobjects_node", default=None)


def enter_node(context: NodeContext) -> Token[NodeContext | None]:
    """Make ``context`` the current process for the running task."""
    return _current_node.set(context)


def leave_node(token: Token[NodeContext | None]) -> None:
    _current_node.reset(token)


def _context() -> NodeContext:
    context = _current_node.get()
    if context is None:
        raise RuntimeError("Not running on a cluster process")
    return context


def current_process() -> int:
    """Return the id of the process the caller runs on."""
    return _context().pid


def local_store() -> LocalStore:
    """Return the store of the process the caller runs on."""
    return _context().store


async def add_object(factory: MaybeAwaitableCallable) -> tuple[ObjectID, type]:
    """Run ``factory`` on this process and store its result."""
    value = await call_maybe_await(factory)
    return local_store().add(value)


def remove_object(oid: ObjectID) -> bool:
    return local_store().remove(oid)


def get_object(oid: ObjectID) -> Any:
    return local_store().get(oid)
