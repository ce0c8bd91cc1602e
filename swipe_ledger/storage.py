"""
Storage Backend Module

Provides the abstract line storage interface for the ledger and
implementations for in-memory (testing) and flat-file (persistence) use.
Platform errors are mapped to stable storage errors at this boundary.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Union
from pathlib import Path
import logging
import os
import tempfile
import threading

from .errors import StorageParseAnomaly, map_os_error


PathLike = Union[str, Path]


class LedgerStorage(ABC):
    """Abstract interface for ledger line storage"""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable location of the ledger"""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check if the ledger has been created"""
        pass

    @abstractmethod
    def read_lines(self) -> Optional[List[str]]:
        """Read all lines (without separators); None if the ledger does not exist"""
        pass

    @abstractmethod
    def write_lines(self, lines: List[str]) -> None:
        """Replace the ledger contents with the given lines"""
        pass


class InMemoryLedgerStorage(LedgerStorage):
    """In-memory storage implementation for testing"""

    def __init__(self, content: Optional[str] = None):
        self._content = content
        self._lock = threading.RLock()
        self.write_count = 0

    @property
    def location(self) -> str:
        return ":memory:"

    @property
    def content(self) -> Optional[str]:
        with self._lock:
            return self._content

    def exists(self) -> bool:
        with self._lock:
            return self._content is not None

    def read_lines(self) -> Optional[List[str]]:
        with self._lock:
            if self._content is None:
                return None
            return self._content.split("\n")

    def write_lines(self, lines: List[str]) -> None:
        with self._lock:
            self._content = "\n".join(lines) + "\n"
            self.write_count += 1


class FileLedgerStorage(LedgerStorage):
    """
    Flat-file storage

    The path is resolved on every call so that a change of ledger directory
    takes effect without rebuilding the store. Writes go to a temporary file
    in the same directory which then replaces the ledger.
    """

    def __init__(self, path: Union[PathLike, Callable[[], PathLike]]):
        self._path = path
        self.logger = logging.getLogger("swipe_ledger.storage")

    @property
    def path(self) -> Path:
        path = self._path() if callable(self._path) else self._path
        return Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read_lines(self) -> Optional[List[str]]:
        path = self.path
        try:
            with open(path, "r", encoding="utf-8") as ledger_file:
                return ledger_file.read().split("\n")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            self.logger.error(f"Ledger {path} is not valid UTF-8: {e}")
            raise StorageParseAnomaly(
                f"Ledger file is not valid UTF-8 text (byte offset {e.start})"
            ) from e
        except OSError as e:
            self.logger.error(f"Error reading ledger {path}: {e}")
            raise map_os_error(e) from e

    def write_lines(self, lines: List[str]) -> None:
        path = self.path
        data = "\n".join(lines) + "\n"
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as temp_file:
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.chmod(temp_path, self._file_mode(path))
            os.replace(temp_path, path)
            temp_path = None
        except OSError as e:
            self.logger.error(f"Error writing ledger {path}: {e}")
            raise map_os_error(e) from e
        finally:
            if temp_path is not None:
                self._discard(temp_path)

    @staticmethod
    def _file_mode(path: Path) -> int:
        # mkstemp creates 0600 files; keep the existing ledger's mode
        try:
            return path.stat().st_mode & 0o777
        except FileNotFoundError:
            return 0o644

    def _discard(self, temp_path: str) -> None:
        try:
            os.unlink(temp_path)
        except OSError as e:
            self.logger.warning(f"Could not remove temporary file {temp_path}: {e}")
