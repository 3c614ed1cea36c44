"""Cluster runtime: processes and remote invocation."""

from .invoker import RemoteInvoker, gather, get_runtime
from .node import Node
from .cluster import Cluster

__all__ = [
    "RemoteInvoker",
    "gather",
    "get_runtime",
    "Node",
    "Cluster",
]
