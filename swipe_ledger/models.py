"""
Ledger Data Model

Account records and the column configuration that names the ledger header.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidInput


DEFAULT_AMOUNT = "0"
DEFAULT_ACTIVATED = "Y"

REQUIRED_ROLES = ["account_number", "amount", "activated"]

# Persisted settings use the camelCase role names
_PERSISTED_ROLE_NAMES = {
    "account_number": "accountNumber",
    "amount": "amount",
    "activated": "activated",
}

FORBIDDEN_CHARS = (",", "\n", "\r")


def has_forbidden_chars(value: str) -> bool:
    """Commas and line breaks cannot be represented in the unquoted line format"""
    return any(char in value for char in FORBIDDEN_CHARS)


@dataclass
class AccountRecord:
    """One ledger row, identified by its account number"""
    account_number: str
    amount: str = DEFAULT_AMOUNT
    activated: str = DEFAULT_ACTIVATED
    extra: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.account_number = (self.account_number or "").strip()

    def get(self, column_id: str) -> str:
        if column_id == "account_number":
            return self.account_number
        if column_id == "amount":
            return self.amount
        if column_id == "activated":
            return self.activated
        return self.extra.get(column_id, "")

    def values(self, column_ids: List[str]) -> List[str]:
        return [self.get(column_id) for column_id in column_ids]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountNumber": self.account_number,
            "amount": self.amount,
            "activated": self.activated,
            **self.extra
        }


@dataclass
class ColumnConfig:
    """
    Header text for each ledger column

    The three required roles always come first, in order, followed by any
    extra columns in insertion order.
    """
    account_number: str = "account_number"
    amount: str = "amount"
    activated: str = "activated"
    extra: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for role in REQUIRED_ROLES:
            value = getattr(self, role)
            if not isinstance(value, str) or not value.strip():
                raise InvalidInput(
                    f'Column name for "{_PERSISTED_ROLE_NAMES[role]}" is required and must be a non-empty string'
                )
            setattr(self, role, value.strip())

        cleaned = {}
        for column_id, name in self.extra.items():
            if not column_id or column_id in REQUIRED_ROLES:
                raise InvalidInput(f'Invalid extra column id "{column_id}"')
            if not isinstance(name, str) or not name.strip():
                raise InvalidInput(f'Column name for "{column_id}" is required and must be a non-empty string')
            cleaned[column_id] = name.strip()
        self.extra = cleaned

        for name in self.header_names:
            if has_forbidden_chars(name):
                raise InvalidInput(f'Column name "{name}" must not contain commas or line breaks')

    @property
    def column_ids(self) -> List[str]:
        return REQUIRED_ROLES + list(self.extra.keys())

    @property
    def header_names(self) -> List[str]:
        return [self.account_number, self.amount, self.activated] + list(self.extra.values())

    @property
    def header_line(self) -> str:
        return ",".join(self.header_names)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "accountNumber": self.account_number,
            "amount": self.amount,
            "activated": self.activated,
        }
        if self.extra:
            result["extra"] = dict(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ColumnConfig':
        """Build from the persisted/UI shape; raises InvalidInput on bad payloads"""
        if not isinstance(data, dict):
            raise InvalidInput("Invalid columns configuration")
        extra = data.get("extra") or {}
        if not isinstance(extra, dict):
            raise InvalidInput("Invalid columns configuration")
        return cls(
            account_number=data.get("accountNumber"),
            amount=data.get("amount"),
            activated=data.get("activated"),
            extra=extra
        )
