"""Message pattern matching for selective receive."""

from typing import Any


class _Wildcard:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


# Matches anything and passes the value to the handler.
ANY = _Wildcard("ANY")
# Matches anything and drops the value.
IGNORE = _Wildcard("IGNORE")

_NO_MATCH = None


def match(pattern: Any, message: Any) -> list[Any] | None:
    """
    Match ``message`` against ``pattern``.

    Returns the list of captured values, or None when the message does not
    match. Captures come from ``ANY`` and from type patterns, in order;
    literals and predicates only filter.
    """
    if pattern is ANY:
        return [message]
    if pattern is IGNORE:
        return []
    if isinstance(pattern, type):
        return [message] if isinstance(message, pattern) else _NO_MATCH
    if isinstance(pattern, tuple):
        if not isinstance(message, tuple) or len(message) != len(pattern):
            return _NO_MATCH
        captured: list[Any] = []
        for sub_pattern, item in zip(pattern, message):
            sub = match(sub_pattern, item)
            if sub is None:
                return _NO_MATCH
            captured.extend(sub)
        return captured
    if callable(pattern):
        return [] if pattern(message) else _NO_MATCH
    return [] if pattern == message else _NO_MATCH
