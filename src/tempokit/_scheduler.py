from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from threading import Timer
from typing import TYPE_CHECKING, Any, overload

from ._exceptions import check_non_negative

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable
    from typing import Literal, TypeAlias

    SupportedBackend: TypeAlias = Literal["threading", "asyncio"]

__all__ = [
    "AsyncioScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "clear_default_scheduler",
    "get_default_scheduler",
    "set_default_scheduler",
]

logger = logging.getLogger(__name__)

SCHEDULER_ENV_VAR = "TEMPOKIT_SCHEDULER"

_DEFAULT_SCHEDULER: Scheduler | None = None


def get_default_scheduler() -> Scheduler:
    """Get the default scheduler, creating it on first use.

    The backend is taken from the ``TEMPOKIT_SCHEDULER`` environment variable
    if set, otherwise "threading" is used.
    """
    if _DEFAULT_SCHEDULER is None:
        backend = os.getenv(SCHEDULER_ENV_VAR, "threading").strip().lower()
        return set_default_scheduler(backend)  # type: ignore[arg-type]
    return _DEFAULT_SCHEDULER


def clear_default_scheduler() -> None:
    """Clear the default scheduler. Primarily for testing purposes."""
    global _DEFAULT_SCHEDULER
    _DEFAULT_SCHEDULER = None


@overload
def set_default_scheduler(backend: Literal["threading"]) -> ThreadingScheduler: ...
@overload
def set_default_scheduler(backend: Literal["asyncio"]) -> AsyncioScheduler: ...
def set_default_scheduler(backend: SupportedBackend = "threading") -> Scheduler:
    """Set the default scheduler. Must be one of: 'threading', 'asyncio'.

    This should be done before creating any wrapper that relies on the default,
    since wrappers capture the scheduler when they are created.
    """
    global _DEFAULT_SCHEDULER

    if _DEFAULT_SCHEDULER and _DEFAULT_SCHEDULER._backend != backend:
        raise RuntimeError(
            f"Default scheduler already set to: {_DEFAULT_SCHEDULER._backend}"
        )
    if _DEFAULT_SCHEDULER is not None:
        # allow setting the same backend multiple times
        return _DEFAULT_SCHEDULER

    if backend == "threading":
        _DEFAULT_SCHEDULER = ThreadingScheduler()
    elif backend == "asyncio":
        _DEFAULT_SCHEDULER = AsyncioScheduler()
    else:
        raise RuntimeError(
            f"Scheduler backend not supported: {backend}.  "
            "Must be one of: 'threading', 'asyncio'"
        )
    logger.debug("default scheduler set to %r", _DEFAULT_SCHEDULER)
    return _DEFAULT_SCHEDULER


class Scheduler(ABC):
    """Defers callbacks by a delay in milliseconds and cancels pending ones.

    A delay of 0 still defers the callback past the current call stack.
    """

    def __init__(self, backend: str):
        self._backend = backend

    @abstractmethod
    def schedule_after(self, delay_ms: float, callback: Callable[[], Any]) -> Any:
        """Schedule `callback` to run after `delay_ms` and return a handle."""

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a handle returned by `schedule_after`.

        Cancelling a handle that already fired (or was cancelled) does nothing.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ThreadingScheduler(Scheduler):
    """Scheduler firing callbacks on `threading.Timer` threads.

    Exceptions raised by a callback are reported through `threading.excepthook`.
    """

    def __init__(self) -> None:
        super().__init__("threading")

    def schedule_after(self, delay_ms: float, callback: Callable[[], Any]) -> Timer:
        check_non_negative("delay_ms", delay_ms)
        timer = Timer(delay_ms / 1000, callback)
        timer.start()
        return timer

    def cancel(self, handle: Timer) -> None:
        handle.cancel()


class AsyncioScheduler(Scheduler):
    """Scheduler firing callbacks on an asyncio event loop via `call_later`.

    If no loop is given, the loop running at the time of the first
    `schedule_after` is used.  Like `loop.call_later` itself, this is not
    thread-safe: wrappers using it must be called from the loop's thread.
    Exceptions raised by a callback go to the loop's exception handler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__("asyncio")
        import asyncio

        self._asyncio = asyncio
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = self._asyncio.get_running_loop()
        return self._loop

    def schedule_after(
        self, delay_ms: float, callback: Callable[[], Any]
    ) -> asyncio.TimerHandle:
        check_non_negative("delay_ms", delay_ms)
        return self.loop.call_later(delay_ms / 1000, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(loop={self._loop!r})"
