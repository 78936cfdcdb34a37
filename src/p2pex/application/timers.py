# src/p2pex/application/timers.py
"""
Timers - Cancellable One-shot Callbacks

The spread warning is debounced: it fires a few seconds after the spread
goes out of range unless the condition clears first. The risk gate asks a
Scheduler for a one-shot timer and keeps the returned handle so it can
cancel it; at most one handle is live per gate.

Schedulers run callbacks on the same event loop that delivers operator
events, so a callback never runs concurrently with an engine event.

Files that USE this module:
- p2pex.application.risk_gate (SpreadRiskGate schedules the warning)
- p2pex.adapters.telegram.jobs (JobQueueScheduler implements Scheduler)
- tests.conftest (FakeScheduler implements Scheduler)

Files that this module USES:
- None (interfaces only)
"""
from __future__ import annotations

from typing import Callable, Protocol


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled before it fires."""
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Creates one-shot timers."""
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...
