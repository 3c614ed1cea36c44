"""Helpers for callables that may or may not be coroutine functions."""

import inspect
from typing import Any, Awaitable, Callable, TypeAlias

MaybeAwaitableCallable: TypeAlias = Callable[..., Any | Awaitable[Any]]


async def call_maybe_await(func: MaybeAwaitableCallable, *args: Any, **kwargs: Any) -> Any:
    """Call ``func`` and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
