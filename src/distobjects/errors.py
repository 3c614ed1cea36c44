"""Error types raised by distobjects."""

from typing import Any


class DistributedObjectError(Exception):
    """Base class for all distobjects errors."""


class EmptyTargetSetError(DistributedObjectError, ValueError):
    """Raised when a bulk create or write is given no target processes."""

    def __init__(self, message: str = "no target processes given") -> None:
        super().__init__(message)


class TypeMismatchError(DistributedObjectError, TypeError):
    """Raised when stored values do not share the expected element type."""

    types: tuple[type, ...]

    def __init__(self, message: str, types: tuple[type, ...] = ()) -> None:
        self.types = types
        super().__init__(message)


class NotFoundError(DistributedObjectError, LookupError):
    """Raised when a process holds no entry for the requested object."""

    pid: int | None
    key: Any

    def __init__(self, message: str, *, pid: int | None = None, key: Any = None) -> None:
        self.pid = pid
        self.key = key
        super().__init__(message)


class UnknownProcessError(DistributedObjectError, LookupError):
    """Raised when a process id is not part of the cluster."""

    pid: int

    def __init__(self, pid: int) -> None:
        self.pid = pid
        super().__init__(f"no process with id {pid} in the cluster")


class RemoteExecutionError(DistributedObjectError):
    """Raised when a closure executed on another process fails."""

    pid: int
    original: BaseException

    def __init__(self, pid: int, original: BaseException) -> None:
        """Wrap the exception raised on process ``pid``.

        :param pid: Process the closure ran on.
        :param original: Exception raised by the closure.
        """
        self.pid = pid
        self.original = original
        super().__init__(
            f"On process {pid}: {type(original).__name__}: {original}"
        )
