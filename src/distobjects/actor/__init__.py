"""Actors and generic servers."""

from .base import Actor
from .genserver import GenServer

__all__ = [
    "Actor",
    "GenServer",
]
