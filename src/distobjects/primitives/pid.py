"""Process identifiers and references."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .mailbox import Mailbox


@dataclass(frozen=True)
class PID:
    """
    Address of a running actor.

    Two PIDs are equal when they name the same actor; the mailbox is
    carried along so messages can be delivered without a lookup.
    """
    _id: uuid.UUID
    _mailbox: "Mailbox" = field(compare=False, repr=False)

    def __repr__(self) -> str:
        return f"<PID {str(self._id)[:8]}>"


@dataclass(frozen=True)
class Ref:
    """Unique token used to correlate a call with its reply."""
    _id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __repr__(self) -> str:
        return f"#Ref<{str(self._id)[:8]}>"
