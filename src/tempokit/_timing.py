from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar

from ._clock import get_default_clock

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ._clock import Clock

T = TypeVar("T")

__all__ = ["TimedResult", "time_awaitable", "time_function"]


class TimedResult(NamedTuple):
    """Value produced by an awaitable and the milliseconds it took."""

    time_elapsed: float
    value: Any


def time_function(callback: Callable[[], Any], clock: Clock | None = None) -> float:
    """Call `callback` and return the time it took, in milliseconds."""
    clock = clock or get_default_clock()
    start = clock.now()
    callback()
    return clock.now() - start


async def time_awaitable(
    factory: Callable[[], Awaitable[T]], clock: Clock | None = None
) -> TimedResult:
    """Await ``factory()`` and return its value along with the elapsed time."""
    clock = clock or get_default_clock()
    start = clock.now()
    value = await factory()
    return TimedResult(clock.now() - start, value)
