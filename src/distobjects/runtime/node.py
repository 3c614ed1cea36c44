"""
Node - one process of the cluster.

A node owns a LocalStore and runs closures sent to it by other
processes, one at a time, with itself as the current process.
"""

from __future__ import annotations

import logging
from typing import Any

from typing_extensions import override

from ..actor.genserver import GenServer
from ..primitives.pid import Ref
from ..store.local import LocalStore, NodeContext, enter_node
from ..type_utils import call_maybe_await

logger = logging.getLogger(__name__)


class Node(GenServer):
    """
    GenServer hosting one process.

    Requests:
      - call ("run", fn, args) → ("ok", result) | ("error", exception)
      - cast ("run", fn, args) → result dropped, failures logged
      - anything else is logged and dropped
    """

    def __init__(self, pid: int, store: LocalStore | None = None):
        super().__init__()
        self._context = NodeContext(pid=pid, store=store if store is not None else LocalStore())

    @property
    def node_id(self) -> int:
        return self._context.pid

    @property
    def store(self) -> LocalStore:
        return self._context.store

    @override
    async def init(self) -> dict[str, Any]:
        # The actor's whole lifetime runs in this task, so closures see
        # this node as the current process.
        enter_node(self._context)
        logger.debug("process %d started", self.node_id)
        return {"calls": 0, "casts": 0, "dropped": 0}

    @override
    async def handle_call(self, request: Any, from_ref: Ref, state: dict[str, Any]):
        match request:
            case ("run", fn, tuple() as args):
                state = {**state, "calls": state["calls"] + 1}
                try:
                    result = await call_maybe_await(fn, *args)
                except Exception as exc:
                    return (("error", exc), state)
                return (("ok", result), state)
            case "stats":
                return ({**state, "objects": len(self.store)}, state)
            case _:
                return (("error", ValueError(f"unknown request {request!r}")), state)

    @override
    async def handle_cast(self, request: Any, state: dict[str, Any]):
        match request:
            case ("run", fn, tuple() as args):
                try:
                    await call_maybe_await(fn, *args)
                except Exception:
                    logger.warning(
                        "process %d: fire-and-forget %s failed",
                        self.node_id, getattr(fn, "__name__", fn), exc_info=True,
                    )
                return {**state, "casts": state["casts"] + 1}
            case _:
                return state

    @override
    async def handle_info(self, message: Any, state: dict[str, Any]):
        logger.debug("process %d: dropping unexpected message %r", self.node_id, message)
        return {**state, "dropped": state["dropped"] + 1}

    @override
    async def terminate(self, reason: str, state: Any) -> None:
        logger.debug("process %d stopped (%s), dropping %d objects", self.node_id, reason, len(self.store))
        self.store.clear()
