from collections.abc import Iterator

import pytest

from tempokit import clear_default_scheduler
from tempokit.testing import VirtualTimer


@pytest.fixture(autouse=True)
def _reset_default_scheduler(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("TEMPOKIT_SCHEDULER", raising=False)
    clear_default_scheduler()
    yield
    clear_default_scheduler()


@pytest.fixture
def timer() -> VirtualTimer:
    return VirtualTimer()
