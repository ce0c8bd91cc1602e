"""
Shared test fixtures
"""

import pytest

from swipe_ledger.config import SwipeLedgerConfig


class ManualTimer:
    """Timer driven by a ManualClock instead of wall time"""

    def __init__(self, clock, delay_seconds, callback):
        self.clock = clock
        self.delay_seconds = delay_seconds
        self.callback = callback
        self.deadline = None
        self.cancelled = False
        self.fired = False

    def start(self):
        self.deadline = self.clock.now + round(self.delay_seconds * 1000)
        self.clock.timers.append(self)

    def cancel(self):
        self.cancelled = True


class ManualClock:
    """Virtual millisecond clock; also usable as a timer factory"""

    def __init__(self):
        self.now = 0
        self.timers = []

    def __call__(self, delay_seconds, callback):
        return ManualTimer(self, delay_seconds, callback)

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance_ms(self, ms):
        """Move time forward, firing due timers in deadline order"""
        target = self.now + ms
        while True:
            due = [t for t in self.pending if t.deadline <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.deadline)
            self.now = timer.deadline
            timer.fired = True
            timer.callback()
        self.now = target

    def advance(self, seconds):
        self.advance_ms(round(seconds * 1000))


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config(tmp_path):
    return SwipeLedgerConfig(data_dir=str(tmp_path / "data"))
