# tests/conftest.py
"""
Shared Test Fixtures

Provides a deterministic scheduler so debounce timers can be fired by hand,
and an in-memory config store.

Files that USE this module:
- pytest (fixtures for test_risk_gate, test_engine, test_handlers)

Files that this module USES:
- p2pex.adapters.persistence.file_store (MemoryConfigStore)
"""
import pytest  # Testing framework for writing and running tests

from p2pex.adapters.persistence.file_store import MemoryConfigStore  # In-memory preferences


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records timers instead of running them; fire() runs the live ones."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay_seconds, callback):
        timer = FakeTimer(delay_seconds, callback)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire(self):
        for timer in self.live:
            timer.fired = True
            timer.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def store():
    return MemoryConfigStore()
