"""Message passing between actors: send, call and cast."""

import uuid
from typing import Any

from .primitives.mailbox import Mailbox
from .primitives.pattern import ANY
from .primitives.pid import PID, Ref


async def send(pid: PID, message: Any) -> None:
    """Deliver ``message`` to ``pid``'s mailbox without waiting."""
    await pid._mailbox.put(message)


async def cast(pid: PID, request: Any) -> None:
    """Fire-and-forget request to a GenServer."""
    await send(pid, ("$cast", request))


async def call(pid: PID, request: Any, timeout: float | None = 5.0) -> Any:
    """
    Synchronous request to a GenServer.

    Blocks until the server replies. ``timeout=None`` waits forever;
    otherwise ``ReceiveTimeout`` is raised when no reply arrives in time.
    """
    ref = Ref()
    reply_box = Mailbox()
    reply_to = PID(_id=uuid.uuid4(), _mailbox=reply_box)
    await send(pid, ("$call", ref, reply_to, request))
    return await reply_box.receive(
        (("$reply", ref, ANY), lambda reply: reply),
        timeout=timeout,
    )
