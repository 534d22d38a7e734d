from __future__ import annotations

import time
from typing import Protocol

__all__ = ["Clock", "MonotonicClock", "get_default_clock"]


class Clock(Protocol):
    """Anything with a `now()` method returning non-decreasing milliseconds."""

    def now(self) -> float:
        """Return the current time in milliseconds."""
        ...


class MonotonicClock:
    """Clock backed by `time.monotonic`, in milliseconds."""

    def now(self) -> float:
        return time.monotonic() * 1000

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


_DEFAULT_CLOCK = MonotonicClock()


def get_default_clock() -> MonotonicClock:
    """Return the clock used by wrappers that were not given one."""
    return _DEFAULT_CLOCK
