"""
Capture Controller Module

Owns the capture session: routes raw key events into the swipe aggregator
while capture is active, decodes completed payloads, records new account
numbers in the ledger and emits exactly one outcome event per payload.
Per-swipe failures are converted to swipe-error events so that capture keeps
running; failed writes are not retried.
"""

import logging
import threading
from typing import Any, Dict, Optional

from .aggregator import DEFAULT_TIMEOUT_MS, SwipeAggregator, TimerFactory
from .decoder import TRUNCATE_CHARS, decode
from .errors import DecodeFailure, SwipeLedgerError
from .events import EventDispatcher, EventPayload, OutcomeEvent
from .keys import KeyAction, KeyInput
from .ledger import AppendResult, RecordStore
from .logging_config import log_action


class CaptureController:
    """
    Single capture stream per process

    The host creates one controller and routes all key events through
    on_raw_input(). start() and stop() are expected on the same delivery
    context as the key events.
    """

    def __init__(
        self,
        store: RecordStore,
        dispatcher: Optional[EventDispatcher] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        timer_factory: Optional[TimerFactory] = None,
        payload_log_chars: int = TRUNCATE_CHARS
    ):
        self.store = store
        self.dispatcher = dispatcher or EventDispatcher()
        self.payload_log_chars = payload_log_chars
        self.aggregator = SwipeAggregator(
            self.submit_payload, timeout_ms=timeout_ms, timer_factory=timer_factory
        )
        self._active = False
        self._lock = threading.RLock()
        self.logger = logging.getLogger("swipe_ledger.capture")

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> bool:
        """Begin capturing; returns False if capture was already active"""
        with self._lock:
            if self._active:
                return False
            self._active = True
        self.logger.info("Swipe capture started")
        return True

    def stop(self) -> None:
        """Stop capturing and discard any partially buffered swipe"""
        with self._lock:
            was_active = self._active
            self._active = False
            self.aggregator.reset()
        if was_active:
            self.logger.info("Swipe capture stopped")

    def on_raw_input(self, event: KeyInput) -> KeyAction:
        """Forward a raw key event to the aggregator while capture is active"""
        with self._lock:
            if not self._active:
                return KeyAction.IGNORED
            return self.aggregator.feed(event)

    def submit_payload(self, data: str) -> EventPayload:
        """Process one complete swipe payload and emit its outcome"""
        try:
            account_number = decode(data, self.payload_log_chars)
        except DecodeFailure as e:
            self.logger.warning(f"Failed to extract account number from swipe data: {e.data!r}")
            return self._emit_error(e.to_dict())

        return self.record_account(account_number)

    def record_account(self, account_number: str) -> EventPayload:
        """Append an account number to the ledger and emit the outcome"""
        account_number = (account_number or "").strip()
        try:
            result = self.store.append_account(account_number)
        except SwipeLedgerError as e:
            self.logger.error(f"Error processing swipe for {account_number}: {e.message}")
            error = e.to_dict()
            error["accountNumber"] = account_number
            return self._emit_error(error)
        except Exception as e:
            # Capture must survive any per-swipe failure
            self.logger.exception(f"Unexpected error processing swipe for {account_number}")
            return self._emit_error({
                "error": str(e) or "Unknown error occurred",
                "kind": "unknown",
                "accountNumber": account_number
            })

        return self._emit_swiped(result)

    def _emit_swiped(self, result: AppendResult) -> EventPayload:
        log_action(
            self.logger, "info",
            f"Card swiped: {result.account_number}" + (" (duplicate)" if result.duplicate else ""),
            action="swipe", resource=self.store.location,
            extra={"account_number": result.account_number, "duplicate": result.duplicate}
        )
        return self.dispatcher.emit(OutcomeEvent.SWIPED, {
            "accountNumber": result.account_number,
            "duplicate": result.duplicate
        })

    def _emit_error(self, data: Dict[str, Any]) -> EventPayload:
        return self.dispatcher.emit(OutcomeEvent.SWIPE_ERROR, data)
