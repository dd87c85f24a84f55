import pytest

from securevault.vault import VaultConfig


class FakeClock:
    """Controllable wall clock for activity and auto-lock tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Config with short save/poll delays so async tests finish quickly."""
    return VaultConfig(
        auto_lock_timeout=300,
        poll_interval=0.01,
        activity_interval=1.0,
        save_delay=0.01,
    )
