"""Utilities for testing code that uses tempokit wrappers without real delays."""

from __future__ import annotations

import heapq
from itertools import count
from typing import TYPE_CHECKING, Any

from ._exceptions import check_non_negative
from ._scheduler import Scheduler

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ["VirtualTimer"]


class _Entry:
    __slots__ = ("callback", "cancelled", "due")

    def __init__(self, due: float, callback: Callable[[], Any]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def __repr__(self) -> str:
        state = " cancelled" if self.cancelled else ""
        return f"<_Entry due={self.due}{state}>"


class VirtualTimer(Scheduler):
    """A clock and a scheduler sharing a manually advanced time line.

    Pass the same instance as both `clock` and `scheduler` to a wrapper, then
    call [`advance()`][tempokit.testing.VirtualTimer.advance] to move time
    forward.  Callbacks fire in order of due time, then in the order they were
    scheduled.  Exceptions raised by a callback propagate out of `advance()`.

    Parameters
    ----------
    start : float
        The initial time in milliseconds, by default 0.

    Examples
    --------
    ```python
    from unittest.mock import Mock

    from tempokit import create_debounced
    from tempokit.testing import VirtualTimer

    timer = VirtualTimer()
    mock = Mock()
    f = create_debounced(mock, 100, clock=timer, scheduler=timer)
    f(1)
    f(2)
    timer.advance(100)
    mock.assert_called_once_with(2)
    ```
    """

    def __init__(self, start: float = 0) -> None:
        super().__init__("virtual")
        self._now: float = start
        self._queue: list[tuple[float, int, _Entry]] = []
        self._counter = count()

    def now(self) -> float:
        """Return the current virtual time in milliseconds."""
        return self._now

    @property
    def pending_count(self) -> int:
        """Number of callbacks scheduled and not yet fired or cancelled."""
        return sum(not entry.cancelled for *_, entry in self._queue)

    def schedule_after(self, delay_ms: float, callback: Callable[[], Any]) -> _Entry:
        check_non_negative("delay_ms", delay_ms)
        entry = _Entry(self._now + delay_ms, callback)
        heapq.heappush(self._queue, (entry.due, next(self._counter), entry))
        return entry

    def cancel(self, handle: _Entry) -> None:
        handle.cancelled = True

    def advance(self, msec: float) -> None:
        """Move time forward by `msec`, firing every callback that becomes due."""
        check_non_negative("msec", msec)
        self.advance_to(self._now + msec)

    def advance_to(self, when: float) -> None:
        """Move time forward to `when`, firing every callback due by then.

        Callbacks scheduled while advancing fire too, if they fall due before
        `when`.  Moving backwards is an error.
        """
        if when < self._now:
            raise ValueError(f"Cannot move time backwards from {self._now} to {when}")
        while self._queue and self._queue[0][0] <= when:
            _, _, entry = heapq.heappop(self._queue)
            if entry.cancelled:
                continue
            self._now = max(self._now, entry.due)
            entry.callback()
        self._now = when

    def run_pending(self) -> None:
        """Fire the callbacks that are due at the current time."""
        self.advance_to(self._now)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(now={self._now}, pending={self.pending_count})"
