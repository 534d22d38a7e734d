from __future__ import annotations

import logging
from threading import RLock
from typing import TYPE_CHECKING, Any, ClassVar, Generic

from typing_extensions import ParamSpec

from ._clock import get_default_clock
from ._exceptions import check_non_negative
from ._scheduler import get_default_scheduler

if TYPE_CHECKING:
    import inspect
    from collections.abc import Callable

    from ._clock import Clock
    from ._scheduler import Scheduler

P = ParamSpec("P")

__all__ = [
    "DEFAULT_MINIMUM_TIME_SPACE",
    "DEFAULT_WAIT_TIME",
    "Debouncer",
    "Throttler",
    "TrailingThrottler",
    "create_debounced",
    "create_throttled",
    "throttled_with_last",
]

logger = logging.getLogger(__name__)

DEFAULT_WAIT_TIME = 150
DEFAULT_MINIMUM_TIME_SPACE = 150


class _RateLimitedBase(Generic[P]):
    """Shared state of all wrappers: the wrapped callable, a clock, a scheduler.

    Each instance owns at most one pending deferred call (``_handle``), only
    touched while holding ``_lock``.  Wrappers that never defer (``_defers`` is
    False) keep whatever scheduler they were given and never look up the
    default one.
    """

    _defers: ClassVar[bool] = True

    def __init__(
        self,
        func: Callable[P, Any],
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.__wrapped__: Callable[P, Any] = func
        self._clock: Clock = clock if clock is not None else get_default_clock()
        if scheduler is None and self._defers:
            scheduler = get_default_scheduler()
        self._scheduler: Scheduler | None = scheduler
        self._lock = RLock()
        self._handle: Any = None
        self._last_execution: float | None = None

        self.__module__: str = getattr(func, "__module__", "")
        self.__name__: str = getattr(func, "__name__", "")
        self.__qualname__: str = getattr(func, "__qualname__", "")
        self.__doc__: str | None = getattr(func, "__doc__", None)
        self.__annotations__: dict[str, Any] = getattr(func, "__annotations__", {})

    @property
    def pending(self) -> bool:
        """Whether a deferred call is currently scheduled."""
        return self._handle is not None

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            assert self._scheduler is not None
            logger.debug("cancelling pending call of %s", self.__qualname__)
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _schedule(
        self,
        delay: float,
        args: tuple,
        kwargs: dict[str, Any],
        stamp: float | None = None,
    ) -> None:
        """Schedule the wrapped function; must be called with ``_lock`` held.

        When the deferred call fires, ``stamp`` (if given) is recorded as the
        last execution time.
        """
        handle: Any = None

        def _fire() -> None:
            with self._lock:
                # a newer call replaced us after the scheduler started firing
                if self._handle is not handle:
                    return
                self._handle = None
                if stamp is not None:
                    self._last_execution = stamp
            self.__wrapped__(*args, **kwargs)

        assert self._scheduler is not None, "this wrapper never defers calls"
        logger.debug("scheduling %s in %sms", self.__qualname__, delay)
        handle = self._scheduler.schedule_after(delay, _fire)
        self._handle = handle

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> None:
        raise NotImplementedError("Subclasses must implement this method.")

    @property
    def __signature__(self) -> inspect.Signature:
        import inspect

        return inspect.signature(self.__wrapped__)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} wrapping {self.__wrapped__!r}>"


class _ThrottlerBase(_RateLimitedBase, Generic[P]):
    """Wrapper that remembers when it last invoked the wrapped function."""

    @property
    def last_execution(self) -> float | None:
        """Clock time of the last invocation of the wrapped function, or None."""
        return self._last_execution

    def _elapsed(self, now: float) -> float:
        if self._last_execution is None:
            return float("inf")
        return now - self._last_execution


class Debouncer(_RateLimitedBase, Generic[P]):
    """Class that waits until calls stop for `wait_time` before calling `func`.

    Parameters
    ----------
    func : Callable[P, Any]
        a function to wrap
    wait_time : float, optional
        the quiet period in ms that must pass after the last call before `func`
        runs, by default 150
    clock : Clock, optional
        source of the current time in ms, by default a monotonic clock
    scheduler : Scheduler, optional
        used to defer calls, by default the default scheduler
    """

    def __init__(
        self,
        func: Callable[P, Any],
        wait_time: float = DEFAULT_WAIT_TIME,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(func, clock, scheduler)
        self._wait_time: float = check_non_negative("wait_time", wait_time)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Call underlying function once calls stop arriving."""
        with self._lock:
            self._cancel_pending()
            self._schedule(self._wait_time, args, kwargs)


class Throttler(_ThrottlerBase, Generic[P]):
    """Class that prevents calling `func` more than once per `minimum_time_space`.

    Calls arriving too early are dropped.

    Parameters
    ----------
    func : Callable[P, Any]
        a function to wrap
    minimum_time_space : float, optional
        the minimum interval in ms that must pass before the function is called
        again, by default 150
    clock : Clock, optional
        source of the current time in ms, by default a monotonic clock
    scheduler : Scheduler, optional
        unused by this class, accepted for symmetry with the other wrappers
    """

    _defers = False

    def __init__(
        self,
        func: Callable[P, Any],
        minimum_time_space: float = DEFAULT_MINIMUM_TIME_SPACE,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(func, clock, scheduler)
        self._minimum_time_space: float = check_non_negative(
            "minimum_time_space", minimum_time_space
        )

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Call underlying function, unless it was called too recently."""
        with self._lock:
            now = self._clock.now()
            if self._elapsed(now) < self._minimum_time_space:
                logger.debug("dropping call of %s", self.__qualname__)
                return
            self._last_execution = now
        self.__wrapped__(*args, **kwargs)


class TrailingThrottler(_ThrottlerBase, Generic[P]):
    """Throttler that always eventually runs the last suppressed call.

    The first call runs immediately.  A call arriving less than
    `minimum_time_space` after the last invocation replaces any pending call and
    is deferred by `wait_time` minus the time already waited (never less than
    zero).

    Parameters
    ----------
    func : Callable[P, Any]
        a function to wrap
    minimum_time_space : float, optional
        the minimum interval in ms between two immediate invocations,
        by default 150
    wait_time : float, optional
        the delay in ms, counted from the last invocation, after which a
        suppressed call runs, by default 150
    clock : Clock, optional
        source of the current time in ms, by default a monotonic clock
    scheduler : Scheduler, optional
        used to defer calls, by default the default scheduler
    """

    def __init__(
        self,
        func: Callable[P, Any],
        minimum_time_space: float = DEFAULT_MINIMUM_TIME_SPACE,
        wait_time: float = DEFAULT_WAIT_TIME,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(func, clock, scheduler)
        self._minimum_time_space: float = check_non_negative(
            "minimum_time_space", minimum_time_space
        )
        self._wait_time: float = check_non_negative("wait_time", wait_time)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Call underlying function now, or later if it was called too recently."""
        with self._lock:
            now = self._clock.now()
            time_already_waited = self._elapsed(now)
            self._cancel_pending()
            if time_already_waited < self._minimum_time_space:
                delay = max(0.0, self._wait_time - time_already_waited)
                self._schedule(delay, args, kwargs, stamp=now)
                return
            self._last_execution = now
        self.__wrapped__(*args, **kwargs)


def create_debounced(
    func: Callable[P, Any] | None = None,
    wait_time: float = DEFAULT_WAIT_TIME,
    *,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> Debouncer[P] | Callable[[Callable[P, Any]], Debouncer[P]]:
    """Create a debounced function that delays invoking `func`.

    `func` will not be invoked until `wait_time` ms have elapsed since the last
    time the debounced function was invoked, and it is invoked with the *last*
    arguments provided.  Calling the debounced function always returns None,
    and never invokes `func` before returning.

    This decorator may be used with or without parameters.

    Parameters
    ----------
    func : Callable
        A function to debounce
    wait_time : float
        Quiet period in milliseconds, by default 150
    clock : Clock, optional
        Source of the current time, by default a monotonic clock
    scheduler : Scheduler, optional
        Scheduler used to defer the call, by default `get_default_scheduler()`

    Examples
    --------
    ```python
    from tempokit import create_debounced

    def on_resize(width: int, height: int) -> None:
        # do something possibly expensive
        ...

    # only called once resizing stops for 50 milliseconds
    handler = create_debounced(on_resize, wait_time=50)
    ```
    """

    def deco(func: Callable[P, Any]) -> Debouncer[P]:
        return Debouncer(func, wait_time, clock=clock, scheduler=scheduler)

    return deco(func) if func is not None else deco


def create_throttled(
    func: Callable[P, Any] | None = None,
    minimum_time_space: float = DEFAULT_MINIMUM_TIME_SPACE,
    *,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> Throttler[P] | Callable[[Callable[P, Any]], Throttler[P]]:
    """Create a throttled function that invokes `func` at most once per interval.

    The first call invokes `func` immediately.  Calls made less than
    `minimum_time_space` ms after the last invocation are dropped; nothing is
    deferred.  A call made exactly `minimum_time_space` ms later runs.

    This decorator may be used with or without parameters.

    Parameters
    ----------
    func : Callable
        A function to throttle
    minimum_time_space : float
        Minimum spacing in milliseconds between invocations, by default 150
    clock : Clock, optional
        Source of the current time, by default a monotonic clock
    scheduler : Scheduler, optional
        Accepted for symmetry; a plain throttler never defers calls

    Examples
    --------
    ```python
    from tempokit import create_throttled

    @create_throttled(minimum_time_space=50)
    def on_scroll(position: float) -> None: ...
    ```
    """

    def deco(func: Callable[P, Any]) -> Throttler[P]:
        return Throttler(func, minimum_time_space, clock=clock, scheduler=scheduler)

    return deco(func) if func is not None else deco


def throttled_with_last(
    func: Callable[P, Any] | None = None,
    minimum_time_space: float = DEFAULT_MINIMUM_TIME_SPACE,
    wait_time: float = DEFAULT_WAIT_TIME,
    *,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
) -> TrailingThrottler[P] | Callable[[Callable[P, Any]], TrailingThrottler[P]]:
    """Create a throttled function that also runs the last suppressed call.

    Calling it once invokes `func` immediately.  Calling it very often during a
    period shorter than `minimum_time_space` invokes `func` only twice: for the
    first and the last call.  The last call is always eventually executed,
    `wait_time` ms after the previous invocation.

    This decorator may be used with or without parameters.

    Parameters
    ----------
    func : Callable
        A function to throttle
    minimum_time_space : float
        Minimum spacing in milliseconds between immediate invocations,
        by default 150
    wait_time : float
        Delay in milliseconds, counted from the previous invocation, after which
        the last suppressed call runs, by default 150
    clock : Clock, optional
        Source of the current time, by default a monotonic clock
    scheduler : Scheduler, optional
        Scheduler used to defer the call, by default `get_default_scheduler()`
    """

    def deco(func: Callable[P, Any]) -> TrailingThrottler[P]:
        return TrailingThrottler(
            func, minimum_time_space, wait_time, clock=clock, scheduler=scheduler
        )

    return deco(func) if func is not None else deco
