"""
Actor - a task with a private mailbox and state.

Lifecycle: init() once, then run(state) in a loop until stop() is
called or the task is cancelled, then terminate(reason, state).
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import anyio
from anyio.abc import TaskGroup, TaskStatus

from ..primitives.mailbox import Mailbox
from ..primitives.pid import PID
from ..type_utils import MaybeAwaitableCallable

logger = logging.getLogger(__name__)


class Actor:
    """
    Base actor. Subclass and implement init() and run().
    """

    def __init__(self):
        self._pid: PID | None = None
        self._mailbox: Mailbox | None = None
        self._state: Any = None
        self._stop_reason: str | None = None

    @property
    def pid(self) -> PID:
        if self._pid is None:
            raise RuntimeError("Actor not started")
        return self._pid

    @classmethod
    async def start(cls, *args: Any, task_group: TaskGroup, **kwargs: Any) -> PID:
        """
        Start an actor in ``task_group`` and return its PID.

        Returns once init() has completed, so the actor is ready to
        receive messages.
        """
        actor = cls(*args, **kwargs)
        return await task_group.start(actor._main)

    async def _main(self, *, task_status: TaskStatus[PID] = anyio.TASK_STATUS_IGNORED) -> None:
        self._mailbox = Mailbox()
        self._pid = PID(_id=uuid.uuid4(), _mailbox=self._mailbox)

        state = self._state = await self.init()
        task_status.started(self._pid)

        reason = "normal"
        try:
            while self._stop_reason is None:
                state = self._state = await self.run(state)
            reason = self._stop_reason
        except anyio.get_cancelled_exc_class():
            reason = "shutdown"
            raise
        except Exception as exc:
            reason = f"error: {exc!r}"
            logger.exception("%s %r crashed", type(self).__name__, self._pid)
        finally:
            with anyio.CancelScope(shield=True):
                await self.terminate(reason, state)

    def stop(self, reason: str = "normal") -> None:
        """Ask the actor to leave its run loop after the current message."""
        self._stop_reason = reason

    async def receive(
        self,
        *handlers: tuple[Any, MaybeAwaitableCallable],
        timeout: float | None = None,
    ) -> Any:
        """Selective receive on this actor's mailbox."""
        if self._mailbox is None:
            raise RuntimeError("Actor not started")
        return await self._mailbox.receive(*handlers, timeout=timeout)

    # --- Override these ---

    async def init(self) -> Any:
        """Return the initial state."""
        return None

    async def run(self, state: Any) -> Any:
        """Handle one step of work and return the new state."""
        raise NotImplementedError(f"{self.__class__.__name__}.run/1 not implemented")

    async def terminate(self, reason: str, state: Any) -> None:
        """Called once when the actor exits, whatever the reason."""
        pass
