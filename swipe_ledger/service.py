"""
Ledger Service Module

Wires the capture and ledger components together and exposes the operations
the UI layer calls. Every operation returns a structured result dict with a
``success`` flag; exceptions never cross this boundary.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .aggregator import TimerFactory
from .capture import CaptureController
from .config import SwipeLedgerConfig, get_config
from .errors import (
    ErrorKind, InvalidInput, LedgerNotFound, StoragePathMissing, SwipeLedgerError
)
from .events import EventDispatcher, OutcomeEvent, RecentEvents
from .host import HostBridge, SystemHost
from .keys import KeyInput
from .ledger import RecordStore
from .models import ColumnConfig
from .settings_store import SettingsStore
from .storage import FileLedgerStorage, LedgerStorage


logger = logging.getLogger("swipe_ledger.service")


def failure(error: Exception, **extra: Any) -> Dict[str, Any]:
    """Structured failure result for any exception"""
    if isinstance(error, SwipeLedgerError):
        result = {"success": False, "error": error.message, "kind": error.kind.value}
    else:
        result = {"success": False, "error": str(error) or "Unknown error occurred",
                  "kind": ErrorKind.UNKNOWN.value}
    result.update(extra)
    return result


class LedgerService:
    """Swipe ledger system with all components initialized"""

    def __init__(
        self,
        config: Optional[SwipeLedgerConfig] = None,
        settings: Optional[SettingsStore] = None,
        storage: Optional[LedgerStorage] = None,
        host: Optional[HostBridge] = None,
        timer_factory: Optional[TimerFactory] = None
    ):
        self.config = config or get_config()
        self.data_dir = Path(self.config.data_dir).expanduser()

        if settings is None or storage is None:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        self.settings = settings or SettingsStore(self.data_dir / self.config.settings_filename)
        self.storage = storage or FileLedgerStorage(self.get_ledger_path)
        self.host = host or SystemHost()

        self.store = RecordStore(self.storage, self.settings, strict_load=self.config.strict_load)
        self.dispatcher = EventDispatcher()
        self.recent_events = RecentEvents(self.config.recent_events_limit)
        self.dispatcher.subscribe_all(self.recent_events)

        self.controller = CaptureController(
            self.store,
            self.dispatcher,
            timeout_ms=self.config.swipe_timeout_ms,
            timer_factory=timer_factory,
            payload_log_chars=self.config.payload_log_chars
        )

    # Ledger location

    def get_ledger_directory(self) -> Path:
        return self.settings.get_ledger_directory(self.data_dir)

    def get_ledger_path(self) -> Path:
        return self.get_ledger_directory() / self.config.ledger_filename

    def ledger_path(self) -> Dict[str, Any]:
        return {"success": True, "path": str(self.get_ledger_path())}

    def ledger_directory(self) -> Dict[str, Any]:
        return {"success": True, "directory": str(self.get_ledger_directory())}

    def select_ledger_directory(self, directory: Optional[str] = None) -> Dict[str, Any]:
        """Choose the ledger directory, asking the host picker when none is given"""
        try:
            if directory is None:
                directory = self.host.pick_directory()
                if not directory:
                    return {"success": False, "canceled": True}

            selected = Path(directory).expanduser()
            if not selected.is_dir():
                raise StoragePathMissing()

            self.settings.set_ledger_directory(selected)
            logger.info(f"Ledger directory set to {selected}")
            return {
                "success": True,
                "directory": str(selected),
                "ledgerPath": str(selected / self.config.ledger_filename)
            }
        except Exception as e:
            logger.error(f"Error selecting directory: {e}")
            return failure(e)

    def open_ledger_file(self) -> Dict[str, Any]:
        path = self.get_ledger_path()
        try:
            if not path.exists():
                raise LedgerNotFound()
            self.host.open_path(path)
            return {"success": True}
        except Exception as e:
            logger.error(f"Error opening ledger file: {e}")
            return failure(e)

    # Records

    def deduplicate_ledger(self) -> Dict[str, Any]:
        try:
            result = self.store.deduplicate()
        except Exception as e:
            logger.error(f"Error deduplicating ledger: {e}")
            return failure(e, duplicatesRemoved=0, totalCards=0)

        return {
            "success": True,
            "duplicatesRemoved": result.duplicates_removed,
            "totalCards": result.total_cards,
            "originalCount": result.original_count
        }

    def write_record(self, account_number: Any) -> Dict[str, Any]:
        """Manual entry: same semantics and outcome event as a decoded swipe"""
        path = str(self.get_ledger_path())
        if not isinstance(account_number, str) or not account_number.strip():
            return failure(InvalidInput("Invalid account number"), path=path, duplicate=False)

        event = self.controller.record_account(account_number)
        if event.event_type == OutcomeEvent.SWIPE_ERROR:
            return {"success": False, "error": event.data["error"], "kind": event.data["kind"],
                    "path": path, "duplicate": False}

        if event.data["duplicate"]:
            return {"success": False, "duplicate": True,
                    "error": "Card already exists in CSV", "path": path}
        return {"success": True, "duplicate": False, "path": path,
                "accountNumber": event.data["accountNumber"]}

    def get_records(self, page: int = 1, page_size: int = 50) -> Dict[str, Any]:
        try:
            record_page = self.store.get_page(page, page_size)
        except Exception as e:
            logger.error(f"Error loading cards: {e}")
            return failure(e, cards=[], total=0)
        return {"success": True, **record_page.to_dict()}

    def get_record_count(self) -> Dict[str, Any]:
        try:
            return {"success": True, "count": self.store.count()}
        except Exception as e:
            return failure(e, count=0)

    def update_record_field(self, account_number: str, column_id: str, value: Any) -> Dict[str, Any]:
        try:
            record = self.store.update_field(account_number, column_id, value)
        except Exception as e:
            logger.error(f"Error updating {column_id} for card {account_number}: {e}")
            return failure(e)
        return {"success": True, "card": record.to_dict()}

    # Column configuration

    def get_column_config(self) -> Dict[str, Any]:
        return {"success": True, "columns": self.store.get_column_config().to_dict()}

    def save_column_config(self, payload: Any) -> Dict[str, Any]:
        try:
            columns = ColumnConfig.from_dict(payload)
            self.store.set_column_config(columns)
        except Exception as e:
            logger.error(f"Error saving CSV columns: {e}")
            return failure(e)
        return {"success": True, "columns": self.store.get_column_config().to_dict()}

    # Capture

    def start_capture(self) -> Dict[str, Any]:
        self.controller.start()
        return {"success": True, "capturing": True}

    def stop_capture(self) -> Dict[str, Any]:
        self.controller.stop()
        return {"success": True, "capturing": False}

    def capture_status(self) -> Dict[str, Any]:
        return {"success": True, "capturing": self.controller.is_active}

    def handle_key(self, event: KeyInput) -> Dict[str, Any]:
        action = self.controller.on_raw_input(event)
        return {"success": True, "action": action.value}

    def recent_outcomes(self, after: Optional[str] = None) -> Dict[str, Any]:
        events = self.recent_events.list(after)
        return {"success": True, "events": [event.to_dict() for event in events]}
