"""
Track Decoder Module

Extracts the account number from a raw magnetic-stripe swipe payload.

Example payload from a keyboard-emulating reader (Track 1 followed by Track 2):

    %B5022440200591308625^HEARTLAND GIFT^391200018130?;5022440200591308625=391200018130?

Readers configured for Track 2 only emit e.g. ``;2130000000100080999?``.
No length or checksum validation is performed since gift-card issuer formats vary.
"""

import re
from typing import List, Optional, Tuple

from .errors import DecodeFailure


TRUNCATE_CHARS = 50

# Tried in order, first match wins
TRACK_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    ("track1", re.compile(r"%B([0-9]+)\^")),
    ("track2_separator", re.compile(r";([0-9]+)=")),
    ("track2_terminator", re.compile(r";([0-9]+)\?")),
    ("cross_track", re.compile(r"%B([0-9]+)\^.*?;\1=", re.DOTALL)),
]


def truncate_payload(data: str, limit: int = TRUNCATE_CHARS) -> str:
    """Shorten a payload for logs and error events"""
    return data[:limit] + "..."


def match_track(data: str) -> Optional[Tuple[str, str]]:
    """Return (pattern name, account number) for the first matching track pattern"""
    for name, pattern in TRACK_PATTERNS:
        match = pattern.search(data)
        if match:
            return name, match.group(1)
    return None


def extract_account_number(data: str) -> Optional[str]:
    """Extract the account number, or None when no pattern matches"""
    if not data:
        return None
    matched = match_track(data)
    return matched[1] if matched else None


def decode(data: str, truncate_to: int = TRUNCATE_CHARS) -> str:
    """
    Decode a swipe payload into an account number.

    Raises:
        DecodeFailure: no track pattern matched; carries the truncated payload
    """
    account_number = extract_account_number(data)
    if account_number is None:
        raise DecodeFailure(truncate_payload(data or "", truncate_to))
    return account_number
