"""Typed handles to objects stored on the processes of a cluster."""

from .primitives.pid import PID, Ref
from .primitives.mailbox import Mailbox, ReceiveTimeout
from .primitives.pattern import ANY, IGNORE
from .actor.base import Actor
from .actor.genserver import GenServer
from .messaging import send, call, cast
from .config import ClusterConfig
from .errors import (
    DistributedObjectError,
    EmptyTargetSetError,
    NotFoundError,
    RemoteExecutionError,
    TypeMismatchError,
    UnknownProcessError,
)
from .store.local import LocalStore, ObjectID, current_process, local_store
from .runtime.invoker import RemoteInvoker, get_runtime
from .runtime.node import Node
from .runtime.cluster import Cluster
from .handle import DistributedObject, localpart

__all__ = [
    # Core primitives
    "PID",
    "Ref",
    "Mailbox",
    "ReceiveTimeout",
    "ANY",
    "IGNORE",
    # Actors
    "Actor",
    "GenServer",
    # Messaging
    "send",
    "call",
    "cast",
    # Cluster
    "ClusterConfig",
    "Cluster",
    "Node",
    "RemoteInvoker",
    "get_runtime",
    "current_process",
    # Storage
    "LocalStore",
    "ObjectID",
    "local_store",
    # Handles
    "DistributedObject",
    "localpart",
    # Errors
    "DistributedObjectError",
    "EmptyTargetSetError",
    "NotFoundError",
    "RemoteExecutionError",
    "TypeMismatchError",
    "UnknownProcessError",
]
