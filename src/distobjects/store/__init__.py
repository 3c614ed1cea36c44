"""Per-process object storage."""

from .local import (
    LocalStore,
    NodeContext,
    ObjectID,
    add_object,
    current_process,
    get_object,
    local_store,
    remove_object,
)

__all__ = [
    "LocalStore",
    "NodeContext",
    "ObjectID",
    "add_object",
    "current_process",
    "get_object",
    "local_store",
    "remove_object",
]
