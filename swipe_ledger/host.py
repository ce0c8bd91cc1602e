"""
Host Integration Module

Hooks the core delegates to its host environment: a directory picker and an
"open with default application" launcher. Desktop shells provide their own
HostBridge; SystemHost is the headless default.
"""

from abc import ABC, abstractmethod
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional


class HostBridge(ABC):
    """Interface to host dialogs and launchers"""

    def pick_directory(self, title: str = "Select CSV Save Directory") -> Optional[str]:
        """Ask the user for a directory; None when cancelled"""
        return None

    @abstractmethod
    def open_path(self, path: Path) -> None:
        """Open a file with the default application"""
        pass


class SystemHost(HostBridge):
    """Headless host: no picker, files opened with the platform opener"""

    def __init__(self):
        self.logger = logging.getLogger("swipe_ledger.host")

    def open_path(self, path: Path) -> None:
        self.logger.info(f"Opening {path}")
        if sys.platform.startswith("win"):
            os.startfile(str(path))  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", str(path)])
        else:
            subprocess.Popen(["xdg-open", str(path)])
