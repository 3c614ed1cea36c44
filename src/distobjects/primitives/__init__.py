"""Actor primitives: addresses, mailboxes and patterns."""

from .pid import PID, Ref
from .mailbox import Mailbox, ReceiveTimeout
from .pattern import ANY, IGNORE

__all__ = [
    "PID",
    "Ref",
    "Mailbox",
    "ReceiveTimeout",
    "ANY",
    "IGNORE",
]
