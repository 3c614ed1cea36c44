"""Cluster configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClusterConfig:
    """
    Settings for a local cluster of nodes.

    Attributes:
        workers: Number of worker nodes started next to the master
        master: Process id of the master node; workers follow it
        call_timeout: Seconds to wait for a synchronous remote call, or None
            to wait forever
    """
    workers: int = 2
    master: int = 1
    call_timeout: float | None = None

    def __post_init__(self):
        """Validate the configuration."""
        if self.workers < 0:
            raise ValueError("workers cannot be negative")
        if self.master < 1:
            raise ValueError("master process id must be at least 1")
        if self.call_timeout is not None and self.call_timeout <= 0:
            raise ValueError("call_timeout must be positive or None")

    @property
    def worker_ids(self) -> list[int]:
        return list(range(self.master + 1, self.master + 1 + self.workers))
