"""
Tests for the swipe aggregator state machine
"""

import threading
from unittest.mock import Mock

from swipe_ledger.aggregator import AggregatorState, SwipeAggregator, TimerWorker
from swipe_ledger.keys import BACKSPACE, KeyAction, KeyInput


def make_aggregator(clock, timeout_ms=500):
    handler = Mock()
    aggregator = SwipeAggregator(handler, timeout_ms=timeout_ms, timer_factory=clock)
    return aggregator, handler


def type_text(aggregator, text):
    for char in text:
        aggregator.feed(KeyInput.for_char(char))


class TestSwipeAggregator:

    def test_starts_idle(self, clock):
        aggregator, handler = make_aggregator(clock)
        assert aggregator.state == AggregatorState.IDLE
        assert aggregator.buffer == ""

    def test_burst_emits_once_after_timeout(self, clock):
        aggregator, handler = make_aggregator(clock)
        type_text(aggregator, "abc")
        assert aggregator.state == AggregatorState.ACCUMULATING

        clock.advance_ms(499)
        handler.assert_not_called()

        clock.advance_ms(1)
        handler.assert_called_once_with("abc")
        assert aggregator.state == AggregatorState.IDLE

        clock.advance_ms(5000)
        assert handler.call_count == 1

    def test_each_character_rearms_timer(self, clock):
        aggregator, handler = make_aggregator(clock)
        for char in "abcd":
            aggregator.feed(KeyInput.for_char(char))
            clock.advance_ms(400)
        handler.assert_not_called()

        clock.advance_ms(100)
        handler.assert_called_once_with("abcd")
        assert len(clock.pending) == 0

    def test_backspace_removes_last_character(self, clock):
        aggregator, handler = make_aggregator(clock)
        aggregator.feed(KeyInput.for_char("a"))
        assert aggregator.feed(BACKSPACE) == KeyAction.BACKSPACE
        aggregator.feed(KeyInput.for_char("b"))

        clock.advance_ms(500)
        handler.assert_called_once_with("b")

    def test_backspace_does_not_rearm_timer(self, clock):
        aggregator, handler = make_aggregator(clock)
        type_text(aggregator, "ab")
        clock.advance_ms(300)
        aggregator.feed(BACKSPACE)

        clock.advance_ms(200)
        handler.assert_called_once_with("a")

    def test_backspace_to_empty_keeps_timer_and_emits_nothing(self, clock):
        aggregator, handler = make_aggregator(clock)
        aggregator.feed(KeyInput.for_char("a"))
        aggregator.feed(BACKSPACE)
        assert aggregator.state == AggregatorState.IDLE
        assert len(clock.pending) == 1

        clock.advance_ms(500)
        handler.assert_not_called()

    def test_backspace_on_empty_buffer_is_noop(self, clock):
        aggregator, handler = make_aggregator(clock)
        aggregator.feed(BACKSPACE)
        assert aggregator.buffer == ""
        assert clock.pending == []

    def test_ignored_keys_do_not_rearm(self, clock):
        aggregator, handler = make_aggregator(clock)
        aggregator.feed(KeyInput.for_char("a"))
        clock.advance_ms(300)
        assert aggregator.feed(KeyInput(key="Shift", shift=True)) == KeyAction.IGNORED

        clock.advance_ms(200)
        handler.assert_called_once_with("a")

    def test_reset_discards_without_emitting(self, clock):
        aggregator, handler = make_aggregator(clock)
        type_text(aggregator, ";123")
        aggregator.reset()

        assert aggregator.state == AggregatorState.IDLE
        assert clock.pending == []
        clock.advance_ms(1000)
        handler.assert_not_called()

    def test_consecutive_swipes(self, clock):
        aggregator, handler = make_aggregator(clock)
        type_text(aggregator, ";111?")
        clock.advance_ms(500)
        type_text(aggregator, ";222?")
        clock.advance_ms(500)

        assert [c.args[0] for c in handler.call_args_list] == [";111?", ";222?"]

    def test_custom_timeout(self, clock):
        aggregator, handler = make_aggregator(clock, timeout_ms=100)
        type_text(aggregator, "x")
        clock.advance_ms(100)
        handler.assert_called_once_with("x")

    def test_stale_timer_callback_does_not_flush(self, clock):
        aggregator, handler = make_aggregator(clock)
        aggregator.feed(KeyInput.for_char("a"))
        first = clock.timers[0]
        aggregator.feed(KeyInput.for_char("b"))

        # A cancelled timer whose callback still runs must be ignored
        first.callback()
        handler.assert_not_called()
        assert aggregator.buffer == "ab"

    def test_flush_emits_immediately(self, clock):
        aggregator, handler = make_aggregator(clock)
        type_text(aggregator, "xyz")
        assert aggregator.flush() == "xyz"
        handler.assert_called_once_with("xyz")
        assert clock.pending == []
        assert aggregator.flush() is None


class TestTimerWorker:

    def test_burst_uses_one_thread_and_emits_once(self):
        done = threading.Event()
        payloads = []

        def on_payload(payload):
            payloads.append(payload)
            done.set()

        worker = TimerWorker()
        aggregator = SwipeAggregator(on_payload, timeout_ms=50, timer_factory=worker)
        before = threading.active_count()
        type_text(aggregator, ";" + "4" * 100 + "?")

        assert threading.active_count() <= before + 1
        assert done.wait(2)
        assert payloads == [";" + "4" * 100 + "?"]

    def test_cancelled_call_does_not_run(self):
        callback = Mock()
        worker = TimerWorker()
        call = worker(0.05, callback)
        call.start()
        call.cancel()

        fired = threading.Event()
        worker(0.1, fired.set).start()
        assert fired.wait(2)
        callback.assert_not_called()

    def test_failing_callback_keeps_worker_alive(self):
        failed = threading.Event()

        def explode():
            failed.set()
            raise RuntimeError("boom")

        worker = TimerWorker()
        worker(0.01, explode).start()
        assert failed.wait(2)

        fired = threading.Event()
        worker(0.05, fired.set).start()
        assert fired.wait(2)
