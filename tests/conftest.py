import pytest

from termsense.analyzer import ContextAnalyzer


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 100_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def analyzer(clock):
    """Fresh analyzer on a fake clock with the cooldown already expired."""
    a = ContextAnalyzer(clock=clock)
    a.clear_buffer()
    a.reset_cooldown()
    return a
