"""
Key Classification Module

Turns raw keyboard events into swipe buffer input. Card readers emulate a
keyboard, and on some layouts the sentinel symbols arrive as shifted digit or
punctuation keys, so a small fixed set of key/code + modifier combinations is
remapped to the symbol the reader meant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class KeyAction(Enum):
    """What a raw key event means to the swipe buffer"""
    CHARACTER = "character"
    BACKSPACE = "backspace"
    IGNORED = "ignored"


@dataclass(frozen=True)
class KeyInput:
    """A raw key event as delivered by the host"""
    key: Optional[str] = None    # Logical key name, e.g. "a", "%", "Backspace", "Shift"
    char: Optional[str] = None   # Produced character, when the host knows it
    code: Optional[str] = None   # Physical key code, e.g. "Digit5", "Semicolon"
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    alt: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeyInput':
        return cls(
            key=data.get('key'),
            char=data.get('char'),
            code=data.get('code'),
            shift=bool(data.get('shift', False)),
            ctrl=bool(data.get('ctrl', False)),
            meta=bool(data.get('meta', False)),
            alt=bool(data.get('alt', False))
        )

    @classmethod
    def for_char(cls, char: str) -> 'KeyInput':
        return cls(key=char, char=char)


BACKSPACE = KeyInput(key="Backspace")


def _remap_symbol(event: KeyInput) -> Optional[str]:
    key, code, shift = event.key, event.code, event.shift
    if key == "%" or (code == "Digit5" and shift):
        return "%"
    if key == ";" or code == "Semicolon":
        return ";"
    if key == "=" or code == "Equal":
        return "="
    if key == "?" or (code == "Slash" and shift):
        return "?"
    if key == "^" or (code == "Digit6" and shift):
        return "^"
    return None


def classify_key(event: KeyInput) -> Tuple[KeyAction, Optional[str]]:
    """Classify a key event, returning the action and the character if any"""
    if event.char and len(event.char) == 1:
        return KeyAction.CHARACTER, event.char

    symbol = _remap_symbol(event)
    if symbol:
        return KeyAction.CHARACTER, symbol

    if event.key == "Backspace":
        return KeyAction.BACKSPACE, None

    if event.key and len(event.key) == 1 and not (event.ctrl or event.meta or event.alt):
        return KeyAction.CHARACTER, event.key

    # Modifiers, function keys, arrows...
    return KeyAction.IGNORED, None
