"""Tempokit provides rate-control and sequencing primitives for Python callables.

Debounce, throttle (with or without a trailing call), chain awaitables one
after the other, time calls, and memoize by stringified arguments.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tempokit")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "DEFAULT_MINIMUM_TIME_SPACE",
    "DEFAULT_WAIT_TIME",
    "AsyncioScheduler",
    "Clock",
    "Debouncer",
    "InvalidArgumentError",
    "MonotonicClock",
    "Scheduler",
    "StringMemoized",
    "ThreadingScheduler",
    "Throttler",
    "TimedResult",
    "TrailingThrottler",
    "__version__",
    "bytes_length_from_string",
    "chain_awaitables",
    "chain_loop_iterations",
    "chain_n_times",
    "clear_default_scheduler",
    "create_debounced",
    "create_template_tag",
    "create_throttled",
    "do_n_times",
    "get_default_clock",
    "get_default_scheduler",
    "memoize_as_strings",
    "set_default_scheduler",
    "throttled_with_last",
    "time_awaitable",
    "time_function",
]

from ._clock import Clock, MonotonicClock, get_default_clock
from ._exceptions import InvalidArgumentError
from ._memoize import StringMemoized, memoize_as_strings
from ._scheduler import (
    AsyncioScheduler,
    Scheduler,
    ThreadingScheduler,
    clear_default_scheduler,
    get_default_scheduler,
    set_default_scheduler,
)
from ._sequencing import (
    chain_awaitables,
    chain_loop_iterations,
    chain_n_times,
    do_n_times,
)
from ._text import bytes_length_from_string, create_template_tag
from ._throttler import (
    DEFAULT_MINIMUM_TIME_SPACE,
    DEFAULT_WAIT_TIME,
    Debouncer,
    Throttler,
    TrailingThrottler,
    create_debounced,
    create_throttled,
    throttled_with_last,
)
from ._timing import TimedResult, time_awaitable, time_function
