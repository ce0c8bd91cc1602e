"""
Tests for the capture controller: session state, routing and outcome events
"""

from unittest.mock import Mock

import pytest

from swipe_ledger.capture import CaptureController
from swipe_ledger.errors import StorageFull
from swipe_ledger.events import EventDispatcher, OutcomeEvent
from swipe_ledger.keys import BACKSPACE, KeyAction, KeyInput
from swipe_ledger.ledger import RecordStore
from swipe_ledger.settings_store import SettingsStore
from swipe_ledger.storage import InMemoryLedgerStorage


HEADER = "account_number,amount,activated"
FULL_SWIPE = "%B5022440200591308625^HEARTLAND GIFT^391200018130?;5022440200591308625=391200018130?"


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def events():
    return Mock()


@pytest.fixture
def controller(storage, events, clock):
    dispatcher = EventDispatcher()
    dispatcher.subscribe_all(events)
    store = RecordStore(storage, SettingsStore())
    return CaptureController(store, dispatcher, timeout_ms=500, timer_factory=clock)


def swipe(controller, text):
    for char in text:
        controller.on_raw_input(KeyInput.for_char(char))


def published(events):
    return [(c.args[0].event_type, c.args[0].data) for c in events.call_args_list]


class TestSessionState:

    def test_starts_inactive_and_ignores_input(self, controller, clock, events):
        assert not controller.is_active
        assert controller.on_raw_input(KeyInput.for_char("1")) == KeyAction.IGNORED
        clock.advance_ms(1000)
        events.assert_not_called()

    def test_start_is_idempotent(self, controller):
        assert controller.start() is True
        assert controller.start() is False
        assert controller.is_active

    def test_stop_discards_partial_swipe(self, controller, clock, events, storage):
        controller.start()
        swipe(controller, ";123456")
        controller.stop()
        clock.advance_ms(1000)

        events.assert_not_called()
        assert storage.content is None
        assert controller.aggregator.buffer == ""

    def test_input_after_stop_is_ignored(self, controller, clock, events):
        controller.start()
        controller.stop()
        swipe(controller, ";123?")
        clock.advance_ms(1000)
        events.assert_not_called()


class TestSwipeProcessing:

    def test_new_card_is_recorded(self, controller, clock, events, storage):
        controller.start()
        swipe(controller, FULL_SWIPE)
        clock.advance_ms(500)

        assert published(events) == [
            (OutcomeEvent.SWIPED, {"accountNumber": "5022440200591308625", "duplicate": False})
        ]
        assert storage.content == HEADER + "\n5022440200591308625,0,Y\n"

    def test_duplicate_swipe(self, controller, clock, events, storage):
        storage.write_lines([HEADER, "123456,0,Y"])
        before = storage.content
        controller.start()
        swipe(controller, ";123456=99?")
        clock.advance_ms(500)

        assert published(events) == [
            (OutcomeEvent.SWIPED, {"accountNumber": "123456", "duplicate": True})
        ]
        assert storage.content == before

    def test_backspace_during_swipe(self, controller, clock, events):
        controller.start()
        swipe(controller, ";12x")
        controller.on_raw_input(BACKSPACE)
        swipe(controller, "3?")
        clock.advance_ms(500)

        assert published(events)[0][1]["accountNumber"] == "123"

    def test_decode_failure_emits_error_without_write(self, controller, clock, events, storage):
        controller.start()
        swipe(controller, "not a card")
        clock.advance_ms(500)

        [(event_type, data)] = published(events)
        assert event_type == OutcomeEvent.SWIPE_ERROR
        assert data["error"] == "Failed to extract account number from swipe data"
        assert data["kind"] == "decode_failure"
        assert data["data"] == "not a card..."
        assert storage.content is None

    def test_storage_failure_emits_error_and_capture_continues(self, controller, clock, events, storage):
        controller.start()
        original_write = storage.write_lines
        storage.write_lines = Mock(side_effect=StorageFull())

        swipe(controller, ";111?")
        clock.advance_ms(500)

        [(event_type, data)] = published(events)
        assert event_type == OutcomeEvent.SWIPE_ERROR
        assert data == {"error": "Disk full. Please free up space.", "kind": "storage_full",
                        "accountNumber": "111"}

        storage.write_lines = original_write
        swipe(controller, ";222?")
        clock.advance_ms(500)
        assert published(events)[1] == (OutcomeEvent.SWIPED, {"accountNumber": "222", "duplicate": False})

    def test_unexpected_failure_is_contained(self, controller, clock, events, storage):
        controller.start()
        storage.read_lines = Mock(side_effect=RuntimeError("disk on fire"))

        swipe(controller, ";111?")
        clock.advance_ms(500)

        [(event_type, data)] = published(events)
        assert event_type == OutcomeEvent.SWIPE_ERROR
        assert data["kind"] == "unknown"
        assert data["error"] == "disk on fire"
        assert controller.is_active

    def test_one_event_per_swipe(self, controller, clock, events):
        controller.start()
        for payload in [";1?", ";2?", ";1?"]:
            swipe(controller, payload)
            clock.advance_ms(500)

        assert [data["duplicate"] for _, data in published(events)] == [False, False, True]

    def test_submit_payload_directly(self, controller, events):
        event = controller.submit_payload(";987654?")
        assert event.event_type == OutcomeEvent.SWIPED
        assert event.data == {"accountNumber": "987654", "duplicate": False}
        events.assert_called_once_with(event)
