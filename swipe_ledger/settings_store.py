"""
Settings Store Module

Small persisted key-value store for user settings: the chosen ledger
directory and the column configuration. Independent of the ledger file.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import SwipeLedgerError, map_os_error
from .models import ColumnConfig


LEDGER_DIRECTORY_KEY = "csvDirectory"
COLUMNS_KEY = "csvColumns"


class SettingsStore:
    """
    JSON settings file, or a plain dict when no path is given (testing)

    Saving merges the given keys into the existing settings. An unreadable
    settings file is logged and treated as empty.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self._memory: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self.logger = logging.getLogger("swipe_ledger.settings")

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            if self.path is None:
                return json.loads(json.dumps(self._memory))
            if not self.path.exists():
                return {}
            try:
                with open(self.path, "r", encoding="utf-8") as settings_file:
                    data = json.load(settings_file)
            except (OSError, ValueError) as e:
                self.logger.warning(f"Error reading settings {self.path}: {e}")
                return {}
            if not isinstance(data, dict):
                self.logger.warning(f"Ignoring settings {self.path}: not a JSON object")
                return {}
            return data

    def save(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Merge updates into the stored settings and persist them"""
        with self._lock:
            merged = {**self.get_all(), **updates}
            if self.path is None:
                self._memory = json.loads(json.dumps(merged))
                return merged
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "w", encoding="utf-8") as settings_file:
                    json.dump(merged, settings_file, indent=2)
            except OSError as e:
                self.logger.error(f"Error writing settings {self.path}: {e}")
                raise map_os_error(e) from e
            return merged

    def get_ledger_directory(self, default: Union[str, Path]) -> Path:
        """Configured ledger directory if it still exists, else the default"""
        directory = self.get_all().get(LEDGER_DIRECTORY_KEY)
        if directory and Path(directory).is_dir():
            return Path(directory)
        return Path(default)

    def set_ledger_directory(self, directory: Union[str, Path]) -> None:
        self.save({LEDGER_DIRECTORY_KEY: str(directory)})

    def get_column_config(self) -> ColumnConfig:
        stored = self.get_all().get(COLUMNS_KEY)
        if stored is None:
            return ColumnConfig()
        try:
            return ColumnConfig.from_dict(stored)
        except SwipeLedgerError as e:
            self.logger.warning(f"Ignoring invalid stored column config: {e.message}")
            return ColumnConfig()

    def set_column_config(self, columns: ColumnConfig) -> None:
        self.save({COLUMNS_KEY: columns.to_dict()})
