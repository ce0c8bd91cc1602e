"""
Swipe Aggregator Module

Assembles keystrokes into complete swipe payloads. Readers emit a swipe as a
fast burst of characters with no reliable delimiter, so a quiet period after
the last character (500 ms by default) is treated as the end of the swipe.

States:
    IDLE          no buffered characters
    ACCUMULATING  buffer non-empty, flush timer armed
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .keys import KeyAction, KeyInput, classify_key


DEFAULT_TIMEOUT_MS = 500


class AggregatorState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class ScheduledCall:
    """One-shot timer handle returned by a TimerWorker"""

    def __init__(self, worker: "TimerWorker", delay_seconds: float, callback: Callable[[], None]):
        self.worker = worker
        self.delay_seconds = delay_seconds
        self.callback = callback

    def start(self) -> None:
        self.worker.schedule(self)

    def cancel(self) -> None:
        self.worker.cancel(self)


class TimerWorker:
    """
    Deadline timer backed by a single daemon thread

    Holds at most one pending call: scheduling a new call replaces the
    previous one, so re-arming on every keystroke only moves the deadline.
    The thread is started on first use.
    """

    def __init__(self, name: str = "swipe-timer"):
        self.name = name
        self._condition = threading.Condition()
        self._pending: Optional[Tuple[float, ScheduledCall]] = None
        self._thread: Optional[threading.Thread] = None
        self.logger = logging.getLogger("swipe_ledger.aggregator")

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        return ScheduledCall(self, delay_seconds, callback)

    def schedule(self, call: ScheduledCall) -> None:
        with self._condition:
            self._pending = (time.monotonic() + call.delay_seconds, call)
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
                self._thread.start()
            self._condition.notify()

    def cancel(self, call: ScheduledCall) -> None:
        with self._condition:
            if self._pending is not None and self._pending[1] is call:
                self._pending = None
                self._condition.notify()

    def _run(self) -> None:
        while True:
            with self._condition:
                if self._pending is None:
                    self._condition.wait()
                    continue
                deadline, call = self._pending
                remaining = deadline - time.monotonic()
                if remaining > 0:
                    self._condition.wait(remaining)
                    continue
                self._pending = None

            # Callbacks run outside the condition so they may schedule again
            try:
                call.callback()
            except Exception:
                self.logger.exception("Timer callback failed")


TimerFactory = Callable[[float, Callable[[], None]], ScheduledCall]


class SwipeAggregator:
    """
    Time-windowed character buffer

    Every character re-arms the flush timer. Backspace removes the last
    buffered character without touching the timer. reset() cancels the timer
    and discards the buffer without emitting anything.
    """

    def __init__(
        self,
        on_payload: Callable[[str], None],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        timer_factory: Optional[TimerFactory] = None
    ):
        self.on_payload = on_payload
        self.timeout_ms = timeout_ms
        self._timer_factory = timer_factory or TimerWorker()
        self._buffer: List[str] = []
        self._timer: Optional[ScheduledCall] = None
        self._generation = 0
        self._lock = threading.RLock()
        self.logger = logging.getLogger("swipe_ledger.aggregator")

    @property
    def state(self) -> AggregatorState:
        with self._lock:
            return AggregatorState.ACCUMULATING if self._buffer else AggregatorState.IDLE

    @property
    def buffer(self) -> str:
        with self._lock:
            return "".join(self._buffer)

    def feed(self, event: KeyInput) -> KeyAction:
        """Feed a raw key event; returns how it was classified"""
        action, char = classify_key(event)
        if action == KeyAction.CHARACTER:
            self.add_char(char)
        elif action == KeyAction.BACKSPACE:
            self.backspace()
        return action

    def add_char(self, char: str) -> None:
        with self._lock:
            self._buffer.append(char)
            self._arm()

    def backspace(self) -> None:
        with self._lock:
            if self._buffer:
                self._buffer.pop()

    def reset(self) -> None:
        """Cancel the pending flush and discard buffered characters"""
        with self._lock:
            self._cancel()
            if self._buffer:
                self.logger.debug(f"Discarding {len(self._buffer)} buffered characters")
            self._buffer = []

    def flush(self) -> Optional[str]:
        """Emit the buffer now; returns the emitted payload"""
        with self._lock:
            self._cancel()
            payload = self._take()
        return self._emit(payload)

    def _take(self) -> str:
        payload = "".join(self._buffer)
        self._buffer = []
        return payload

    def _emit(self, payload: str) -> Optional[str]:
        if not payload:
            return None
        self.on_payload(payload)
        return payload

    def _arm(self) -> None:
        self._cancel()
        self._generation += 1
        generation = self._generation
        self._timer = self._timer_factory(
            self.timeout_ms / 1000.0, lambda: self._on_timeout(generation)
        )
        self._timer.start()

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            # A timer that lost the race with a re-arm or reset must not flush
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            payload = self._take()
        self._emit(payload)
