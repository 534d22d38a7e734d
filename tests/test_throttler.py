import time
from inspect import Parameter, signature
from typing import Callable
from unittest.mock import Mock, call

import pytest

from tempokit import (
    AsyncioScheduler,
    InvalidArgumentError,
    ThreadingScheduler,
    clear_default_scheduler,
    create_debounced,
    create_throttled,
    set_default_scheduler,
    throttled_with_last,
)
from tempokit.testing import VirtualTimer


class LateCancelTimer(VirtualTimer):
    """VirtualTimer whose cancel comes too late: cancelled callbacks still fire."""

    def cancel(self, handle: object) -> None:
        pass


def test_debounced(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_debounced(mock, 100, clock=timer, scheduler=timer)

    for i in range(5):
        f1(i)
        timer.advance(50)

    # last call at t=200, so nothing runs before t=300
    assert timer.now() == 250
    mock.assert_not_called()
    timer.advance(49)
    mock.assert_not_called()
    timer.advance(1)
    mock.assert_called_once_with(4)
    assert not f1.pending


def test_debounced_single_call(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_debounced(mock, 100, clock=timer, scheduler=timer)
    f1("a", key="b")
    assert f1.pending
    timer.advance(500)
    mock.assert_called_once_with("a", key="b")
    assert not f1.pending
    assert timer.pending_count == 0


def test_debounced_never_synchronous(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_debounced(mock, 0, clock=timer, scheduler=timer)
    assert f1() is None
    mock.assert_not_called()
    timer.run_pending()
    mock.assert_called_once_with()


def test_debounced_error_goes_to_scheduler(timer: VirtualTimer) -> None:
    f1 = create_debounced(Mock(side_effect=RuntimeError("boom")), 10, scheduler=timer)
    f1()
    with pytest.raises(RuntimeError, match="boom"):
        timer.advance(10)
    assert not f1.pending


def test_throttled(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_throttled(mock, 100, clock=timer, scheduler=timer)

    f1(0)
    mock.assert_called_once_with(0)
    timer.advance(50)
    f1(50)
    assert mock.call_count == 1
    timer.advance(100)
    f1(150)
    assert mock.call_args_list == [call(0), call(150)]
    assert f1.last_execution == 150
    # a plain throttler never defers anything
    assert timer.pending_count == 0


def test_throttled_boundary_is_inclusive(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_throttled(mock, 100, clock=timer, scheduler=timer)
    f1(1)
    timer.advance(99)
    f1(2)
    timer.advance(1)
    f1(3)
    assert mock.call_args_list == [call(1), call(3)]


def test_throttled_first_call_runs_at_any_time() -> None:
    timer = VirtualTimer(start=-1e12)
    mock = Mock()
    f1 = create_throttled(mock, 100, clock=timer, scheduler=timer)
    assert f1.last_execution is None
    f1()
    mock.assert_called_once()
    assert f1.last_execution == -1e12


def test_throttled_error_propagates(timer: VirtualTimer) -> None:
    f1 = create_throttled(Mock(side_effect=KeyError("k")), clock=timer)
    with pytest.raises(KeyError):
        f1()


def test_throttled_with_last(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = throttled_with_last(mock, 100, 100, clock=timer, scheduler=timer)

    f1(0)
    mock.assert_called_once_with(0)
    for t in (20, 40, 60):
        timer.advance_to(t)
        f1(t)
        assert f1.pending
        assert timer.pending_count == 1

    timer.advance_to(99)
    assert mock.call_count == 1
    timer.advance_to(100)
    assert mock.call_args_list == [call(0), call(60)]
    assert not f1.pending
    # the deferred call records the time it was scheduled at
    assert f1.last_execution == 60


def test_throttled_with_last_immediate_call_cancels_pending(
    timer: VirtualTimer,
) -> None:
    mock = Mock()
    f1 = throttled_with_last(mock, 100, 200, clock=timer, scheduler=timer)
    f1(0)
    timer.advance(50)
    f1(1)  # deferred until t=200
    timer.advance(60)
    f1(2)  # 110ms since the last call: runs now, replacing the deferred call
    assert not f1.pending
    timer.advance(500)
    assert mock.call_args_list == [call(0), call(2)]
    assert f1.last_execution == 110


def test_throttled_with_last_negative_delay_is_clamped(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = throttled_with_last(mock, 100, 10, clock=timer, scheduler=timer)
    f1(0)
    timer.advance(50)
    f1(1)
    # deferred by max(0, 10 - 50) == 0, which is still not synchronous
    assert mock.call_count == 1
    timer.run_pending()
    assert mock.call_args_list == [call(0), call(1)]
    assert timer.now() == 50


def test_throttled_with_last_kwargs(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = throttled_with_last(mock, 100, 100, clock=timer, scheduler=timer)
    f1(x=1)
    f1(x=2, y=3)
    timer.advance(100)
    assert mock.call_args_list == [call(x=1), call(x=2, y=3)]


def test_instances_do_not_share_state(timer: VirtualTimer) -> None:
    mock = Mock()
    f1 = create_throttled(mock, 100, clock=timer)
    f2 = create_throttled(mock, 100, clock=timer)
    f1(1)
    f2(2)
    f1(3)
    assert mock.call_args_list == [call(1), call(2)]

    mock.reset_mock()
    g1 = throttled_with_last(mock, 100, 100, clock=timer, scheduler=timer)
    g2 = throttled_with_last(mock, 100, 100, clock=timer, scheduler=timer)
    g1("a")
    g1("b")
    g2("c")
    assert g1.pending
    assert not g2.pending
    timer.advance(100)
    assert mock.call_args_list == [call("a"), call("c"), call("b")]


@pytest.mark.parametrize(
    "factory, args",
    [
        (create_debounced, (-1,)),
        (create_throttled, (-5,)),
        (throttled_with_last, (-1, 10)),
        (throttled_with_last, (10, -1)),
        (create_debounced, (float("nan"),)),
        (create_throttled, (float("nan"),)),
        (throttled_with_last, (10, float("nan"))),
    ],
)
def test_negative_times_are_rejected(factory: Callable, args: tuple) -> None:
    with pytest.raises(InvalidArgumentError, match="must be >= 0"):
        factory(Mock(), *args)
    with pytest.raises(ValueError):
        factory(Mock(), *args)


def test_debounced_threading() -> None:
    mock1 = Mock()
    f1 = create_debounced(mock1, 10, scheduler=ThreadingScheduler())
    f2 = Mock()

    for i in range(10):
        f1(i)
        f2()

    time.sleep(0.1)
    mock1.assert_called_once_with(9)
    assert f2.call_count == 10


def test_throttled_threading() -> None:
    mock1 = Mock()
    f1 = create_throttled(mock1, 1000)

    for i in range(10):
        f1(i)

    mock1.assert_called_once_with(0)


def test_throttled_with_last_threading() -> None:
    mock1 = Mock()
    f1 = throttled_with_last(mock1, 10, 10, scheduler=ThreadingScheduler())

    for i in range(10):
        f1(i)

    time.sleep(0.1)
    assert mock1.call_args_list[0] == call(0)
    # whatever happened in between, the last call always runs
    assert mock1.call_args == call(9)
    assert not f1.pending


@pytest.mark.parametrize(
    "deco", [create_debounced, create_throttled, throttled_with_last]
)
def test_decorated_signature(deco: Callable, timer: VirtualTimer) -> None:
    mock = Mock()

    @deco(clock=timer, scheduler=timer)
    def f1(x: int) -> None:
        """Doc."""
        mock(x)

    # make sure we can still inspect the signature
    assert signature(f1).parameters["x"] == Parameter(
        "x", Parameter.POSITIONAL_OR_KEYWORD, annotation=int
    )
    assert f1.__doc__ == "Doc."
    assert f1.__name__ == "f1"
    assert f1.__wrapped__ is not None

    f1(1)
    timer.advance(1000)
    mock.assert_called_once_with(1)


def test_bare_decorator() -> None:
    @create_throttled
    def f1() -> int:
        return 1

    assert f1.__name__ == "f1"
    assert f1() is None
    assert f1.last_execution is not None
    assert "Throttler" in repr(f1)


def test_throttled_leaves_default_scheduler_alone(
    timer: VirtualTimer, monkeypatch: pytest.MonkeyPatch
) -> None:
    create_throttled(Mock(), 10, clock=timer)
    # no default was chosen, so any backend can still be picked
    assert isinstance(set_default_scheduler("asyncio"), AsyncioScheduler)

    clear_default_scheduler()
    monkeypatch.setenv("TEMPOKIT_SCHEDULER", "bogus")
    mock = Mock()
    f1 = create_throttled(mock, 10, clock=timer)
    f1(1)
    mock.assert_called_once_with(1)
    with pytest.raises(RuntimeError, match="not supported: bogus"):
        create_debounced(Mock(), 10, clock=timer)


def test_superseded_deferred_call_does_nothing() -> None:
    timer = LateCancelTimer()
    mock = Mock()
    f1 = throttled_with_last(mock, 100, 100, clock=timer, scheduler=timer)
    f1(0)
    timer.advance(10)
    f1(1)
    timer.advance(10)
    f1(2)
    # both deferred calls are due at t=100 and both still fire
    assert timer.pending_count == 2
    timer.advance(100)
    assert mock.call_args_list == [call(0), call(2)]
    assert f1.last_execution == 20
    assert not f1.pending


def test_superseded_debounced_call_does_nothing() -> None:
    timer = LateCancelTimer()
    mock = Mock()
    f1 = create_debounced(mock, 50, clock=timer, scheduler=timer)
    for i in range(3):
        f1(i)
        timer.advance(10)
    timer.advance(100)
    mock.assert_called_once_with(2)
    assert not f1.pending


def test_debounced_has_no_last_execution(timer: VirtualTimer) -> None:
    f1 = create_debounced(Mock(), 10, clock=timer, scheduler=timer)
    f1()
    timer.advance(10)
    assert not hasattr(f1, "last_execution")
