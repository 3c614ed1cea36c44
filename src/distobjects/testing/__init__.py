"""Testing helpers."""

from .helpers import CountingInvoker, wait_for, with_timeout

__all__ = [
    "CountingInvoker",
    "wait_for",
    "with_timeout",
]
