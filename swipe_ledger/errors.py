"""
Error Taxonomy Module

Stable error kinds for decode and storage failures. Raw platform errors are
mapped to these kinds at the storage boundary so the UI layer can render
consistent messages.
"""

import errno
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Stable error kinds surfaced to callers"""
    DECODE_FAILURE = "decode_failure"
    PERMISSION_DENIED = "permission_denied"
    STORAGE_FULL = "storage_full"
    PATH_MISSING = "path_missing"
    PARSE_ANOMALY = "parse_anomaly"
    INVALID_INPUT = "invalid_input"
    RECORD_NOT_FOUND = "record_not_found"
    LEDGER_NOT_FOUND = "ledger_not_found"
    UNKNOWN = "unknown"


class SwipeLedgerError(Exception):
    """Base class for all swipe ledger errors"""

    kind = ErrorKind.UNKNOWN
    default_message = "Unknown error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind.value}


class DecodeFailure(SwipeLedgerError):
    """No account number could be extracted from a swipe payload"""

    kind = ErrorKind.DECODE_FAILURE
    default_message = "Failed to extract account number from swipe data"

    def __init__(self, data: str = "", message: Optional[str] = None):
        super().__init__(message)
        self.data = data

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["data"] = self.data
        return result


class StoragePermissionDenied(SwipeLedgerError):
    kind = ErrorKind.PERMISSION_DENIED
    default_message = "Permission denied. Please check file permissions."


class StorageFull(SwipeLedgerError):
    kind = ErrorKind.STORAGE_FULL
    default_message = "Disk full. Please free up space."


class StoragePathMissing(SwipeLedgerError):
    kind = ErrorKind.PATH_MISSING
    default_message = "Directory not found. Please check CSV directory settings."


class StorageParseAnomaly(SwipeLedgerError):
    """Existing ledger data could not be parsed"""

    kind = ErrorKind.PARSE_ANOMALY
    default_message = "Ledger file contains malformed lines"

    def __init__(self, message: Optional[str] = None, line_numbers: Optional[list] = None):
        super().__init__(message)
        self.line_numbers = line_numbers or []


class InvalidInput(SwipeLedgerError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class RecordNotFound(SwipeLedgerError):
    kind = ErrorKind.RECORD_NOT_FOUND
    default_message = "Card not found in CSV"


class LedgerNotFound(SwipeLedgerError):
    kind = ErrorKind.LEDGER_NOT_FOUND
    default_message = "CSV file does not exist yet. Swipe a card to create it."


def map_os_error(error: OSError) -> SwipeLedgerError:
    """Map a platform OSError to a stable storage error"""
    if error.errno in (errno.EACCES, errno.EPERM):
        return StoragePermissionDenied()
    if error.errno == errno.ENOSPC:
        return StorageFull()
    if error.errno in (errno.ENOENT, errno.ENOTDIR):
        return StoragePathMissing()

    return SwipeLedgerError(error.strerror or str(error) or None)
