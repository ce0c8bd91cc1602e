"""
Ledger Module

The record store: loads, validates, deduplicates, sorts and persists the set
of account records. Every successful write leaves the ledger sorted by account
number (numeric-aware) with no duplicate account numbers.

Line format: first line is the comma-joined header from the column
configuration, each following line the comma-joined field values in the same
order. Values are not quoted or escaped.
"""

import logging
import math
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .errors import (
    InvalidInput, LedgerNotFound, RecordNotFound, StorageParseAnomaly,
    SwipeLedgerError
)
from .logging_config import log_action
from .models import (
    AccountRecord, ColumnConfig, DEFAULT_ACTIVATED, DEFAULT_AMOUNT,
    has_forbidden_chars
)
from .settings_store import SettingsStore
from .storage import LedgerStorage


MAX_PAGE_SIZE = 500

_DIGIT_RUN = re.compile(r"([0-9]+)")


def natural_sort_key(value: str) -> list:
    """
    Sort key comparing digit runs by value, so "9" < "10" and "a2" < "a10".

    Leading zeros and letter case do not count: "007" and "7" compare equal
    and keep their existing order under a stable sort.
    """
    key = []
    for part in _DIGIT_RUN.split(value):
        if not part:
            continue
        if _DIGIT_RUN.fullmatch(part):
            key.append((0, int(part)))
        else:
            key.append((1, part.casefold()))
    return key


def dedupe_records(records: Iterable[AccountRecord]) -> List[AccountRecord]:
    """Drop later records whose account number was already seen"""
    seen = set()
    unique = []
    for record in records:
        if record.account_number in seen:
            continue
        seen.add(record.account_number)
        unique.append(record)
    return unique


@dataclass
class AppendResult:
    """Outcome of appending a record; a duplicate is not an error"""
    account_number: str
    success: bool
    duplicate: bool


@dataclass
class DeduplicateResult:
    duplicates_removed: int
    total_cards: int
    original_count: int


@dataclass
class RecordPage:
    cards: List[AccountRecord]
    page: int
    page_size: int
    total: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cards": [card.to_dict() for card in self.cards],
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages
        }


@dataclass
class LoadReport:
    records: List[AccountRecord]
    skipped_lines: List[int] = field(default_factory=list)


class RecordStore:
    """
    Ledger of account records backed by a LedgerStorage

    Calls are serialized with a lock so that a later append for an account
    number observes the effect of an earlier completed write. No in-memory
    cache is kept: every operation re-reads storage.
    """

    def __init__(
        self,
        storage: LedgerStorage,
        settings: Optional[SettingsStore] = None,
        strict_load: bool = False
    ):
        self.storage = storage
        self.settings = settings or SettingsStore()
        self.strict_load = strict_load
        self._lock = threading.RLock()
        self.logger = logging.getLogger("swipe_ledger.ledger")

    @property
    def location(self) -> str:
        return self.storage.location

    def exists(self) -> bool:
        return self.storage.exists()

    # Reading

    def load(self) -> List[AccountRecord]:
        """Load all records; a missing ledger yields an empty list"""
        return self.load_report().records

    def load_report(self, columns: Optional[ColumnConfig] = None) -> LoadReport:
        """Load records along with the line numbers that were skipped as malformed"""
        with self._lock:
            lines = self.storage.read_lines()
            if lines is None:
                return LoadReport(records=[])

            columns = columns or self.settings.get_column_config()
            extra_ids = list(columns.extra.keys())
            report = LoadReport(records=[])

            # Line 1 is the header
            for line_number, raw_line in enumerate(lines[1:], start=2):
                line = raw_line.strip()
                if not line:
                    continue
                record = self._parse_line(line, extra_ids)
                if record is None:
                    report.skipped_lines.append(line_number)
                    continue
                report.records.append(record)

            if report.skipped_lines:
                message = (
                    f"Skipped {len(report.skipped_lines)} malformed line(s) in {self.location}: "
                    f"{report.skipped_lines[:10]}"
                )
                if self.strict_load:
                    raise StorageParseAnomaly(message, report.skipped_lines)
                self.logger.warning(message)

            return report

    @staticmethod
    def _parse_line(line: str, extra_ids: List[str]) -> Optional[AccountRecord]:
        parts = [part.strip() for part in line.split(",")]
        if not parts[0]:
            return None

        def part(index: int, default: str) -> str:
            return parts[index] if index < len(parts) and parts[index] else default

        extra = {column_id: part(3 + i, "") for i, column_id in enumerate(extra_ids)}
        return AccountRecord(
            account_number=parts[0],
            amount=part(1, DEFAULT_AMOUNT),
            activated=part(2, DEFAULT_ACTIVATED),
            extra=extra
        )

    def contains(self, account_number: str) -> bool:
        """Check whether the persisted ledger has this account number"""
        account_number = (account_number or "").strip()
        with self._lock:
            return any(record.account_number == account_number for record in self.load())

    def count(self) -> int:
        return len(self.load())

    def get_page(self, page: int = 1, page_size: int = 50) -> RecordPage:
        """Return one 1-based page of the ledger"""
        page_size = max(1, min(int(page_size), MAX_PAGE_SIZE))
        page = max(1, int(page))
        records = self.load()
        total = len(records)
        start = (page - 1) * page_size
        return RecordPage(
            cards=records[start:start + page_size],
            page=page,
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size)
        )

    # Writing

    def upsert_sorted(self, records: Iterable[AccountRecord],
                      columns: Optional[ColumnConfig] = None) -> int:
        """
        Deduplicate (first occurrence wins), sort and write the ledger.

        Returns:
            Number of unique records written
        """
        with self._lock:
            columns = columns or self.settings.get_column_config()
            unique = dedupe_records(records)
            unique.sort(key=lambda record: natural_sort_key(record.account_number))

            column_ids = columns.column_ids
            lines = [columns.header_line]
            lines.extend(",".join(record.values(column_ids)) for record in unique)

            self.storage.write_lines(lines)
            self.logger.debug(f"Wrote {len(unique)} records to {self.location}")
            return len(unique)

    def append(self, record: AccountRecord) -> AppendResult:
        """Add a record unless its account number is already in the ledger"""
        self._validate_account_number(record.account_number)

        with self._lock:
            records = self.load()
            if any(existing.account_number == record.account_number for existing in records):
                log_action(
                    self.logger, "info", f"Duplicate card detected: {record.account_number}",
                    action="append", resource=self.location,
                    extra={"account_number": record.account_number, "duplicate": True}
                )
                return AppendResult(record.account_number, success=True, duplicate=True)

            records.append(record)
            self.upsert_sorted(records)

        log_action(
            self.logger, "info", f"Card recorded: {record.account_number}",
            action="append", resource=self.location,
            extra={"account_number": record.account_number, "duplicate": False}
        )
        return AppendResult(record.account_number, success=True, duplicate=False)

    def append_account(self, account_number: str) -> AppendResult:
        """Append a new record with default amount and activation flag"""
        if not isinstance(account_number, str):
            raise InvalidInput("Invalid account number")
        return self.append(AccountRecord(account_number=account_number))

    def deduplicate(self) -> DeduplicateResult:
        """Force a load and rewrite pass over an existing ledger"""
        with self._lock:
            if not self.storage.exists():
                raise LedgerNotFound()
            records = self.load()
            written = self.upsert_sorted(records)

        result = DeduplicateResult(
            duplicates_removed=len(records) - written,
            total_cards=written,
            original_count=len(records)
        )
        log_action(
            self.logger, "info", f"Deduplicated ledger: removed {result.duplicates_removed}",
            action="deduplicate", resource=self.location,
            extra={"duplicates_removed": result.duplicates_removed, "total_cards": written}
        )
        return result

    def update_field(self, account_number: str, column_id: str, value: str) -> AccountRecord:
        """Edit one field of an existing record"""
        account_number = (account_number or "").strip()
        value = "" if value is None else str(value).strip()

        with self._lock:
            columns = self.settings.get_column_config()
            if column_id == "account_number" or column_id not in columns.column_ids:
                raise InvalidInput(f'Unknown or read-only column "{column_id}"')
            if has_forbidden_chars(value):
                raise InvalidInput("Values must not contain commas or line breaks")

            records = self.load()
            target = next((r for r in records if r.account_number == account_number), None)
            if target is None:
                raise RecordNotFound()

            if column_id == "amount":
                target.amount = value
            elif column_id == "activated":
                target.activated = value
            else:
                target.extra[column_id] = value

            self.upsert_sorted(records, columns)

        log_action(
            self.logger, "info", f"Updated {column_id} for card {account_number}",
            action="update_field", resource=self.location,
            extra={"account_number": account_number, "column": column_id}
        )
        return target

    # Schema

    def get_column_config(self) -> ColumnConfig:
        return self.settings.get_column_config()

    def set_column_config(self, columns: ColumnConfig) -> ColumnConfig:
        """Persist a new column configuration and rewrite the ledger header"""
        with self._lock:
            previous = self.settings.get_column_config()
            # Rows are parsed with the layout they were written with
            records = self.load_report(previous).records if self.storage.exists() else None
            # The settings only change once the ledger carries the new header
            if records is not None:
                self.upsert_sorted(records, columns)
            try:
                self.settings.set_column_config(columns)
            except SwipeLedgerError:
                if records is not None:
                    self.upsert_sorted(records, previous)
                raise

        self.logger.info(f"Column configuration saved: {columns.header_line}")
        return columns

    @staticmethod
    def _validate_account_number(account_number: str) -> None:
        if not account_number:
            raise InvalidInput("Invalid account number")
        if has_forbidden_chars(account_number):
            raise InvalidInput("Account number must not contain commas or line breaks")
