"""Actor mailbox with selective receive."""

from collections import deque
from typing import Any

import anyio

from .pattern import match
from ..type_utils import MaybeAwaitableCallable, call_maybe_await


class ReceiveTimeout(TimeoutError):
    """Raised when no matching message arrives in time."""
    pass


class Mailbox:
    """
    Unbounded FIFO mailbox.

    Messages that match none of the handlers given to ``receive`` stay
    queued, in order, for a later ``receive``.
    """

    def __init__(self):
        self._messages: deque[Any] = deque()
        self._arrived = anyio.Event()

    def __len__(self) -> int:
        return len(self._messages)

    async def put(self, message: Any) -> None:
        self._messages.append(message)
        arrived, self._arrived = self._arrived, anyio.Event()
        arrived.set()

    def _take(self, handlers: tuple[tuple[Any, MaybeAwaitableCallable], ...]):
        for index, message in enumerate(self._messages):
            for pattern, callback in handlers:
                captured = match(pattern, message)
                if captured is not None:
                    del self._messages[index]
                    return callback, captured
        return None

    async def receive(
        self,
        *handlers: tuple[Any, MaybeAwaitableCallable],
        timeout: float | None = None,
    ) -> Any:
        """
        Wait for the first queued message matching one of ``handlers``.

        Each handler is a ``(pattern, callback)`` pair. The callback is
        called with the values captured by the pattern and its result is
        returned.
        """
        with anyio.move_on_after(timeout) as scope:
            while True:
                found = self._take(handlers)
                if found is not None:
                    break
                await self._arrived.wait()

        if scope.cancelled_caught:
            raise ReceiveTimeout(f"No matching message within {timeout}s")

        callback, captured = found
        return await call_maybe_await(callback, *captured)
