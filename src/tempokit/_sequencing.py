"""Helpers that run steps strictly one after the other."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

T = TypeVar("T")

__all__ = [
    "chain_awaitables",
    "chain_loop_iterations",
    "chain_n_times",
    "do_n_times",
]


def do_n_times(task: Callable[[], object], times: int) -> None:
    """Call `task` with no arguments `times` times."""
    for _ in range(times):
        task()


async def chain_awaitables(factories: Iterable[Callable[[], Awaitable[T]]]) -> list[T]:
    """Await the result of each factory in turn and collect the results.

    Unlike `asyncio.gather`, a factory is only called once the awaitable of the
    previous one has completed.  The first exception propagates and the
    remaining factories are never called.
    """
    values: list[T] = []
    for factory in factories:
        values.append(await factory())
    return values


async def chain_n_times(factory: Callable[[], Awaitable[T]], times: int) -> list[T]:
    """Call `factory` `times` times, each time after the previous one completed."""
    values: list[T] = []
    for _ in range(times):
        values.append(await factory())
    return values


async def chain_loop_iterations(functions: Iterable[Callable[[], T]]) -> list[T]:
    """Call each function on its own iteration of the running event loop.

    Control is handed back to the loop between two calls, so other tasks and
    callbacks get a chance to run.  Returns the list of return values; the
    first exception propagates.
    """
    values: list[T] = []
    for i, func in enumerate(functions):
        if i:
            await asyncio.sleep(0)
        values.append(func())
    return values
