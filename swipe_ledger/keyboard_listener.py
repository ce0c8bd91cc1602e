"""
Keyboard Listener Module

Feeds OS-level key presses into a CaptureController using pynput, for hosts
without their own keyboard event source.
"""

import logging
import threading
from typing import Any, Optional

from .capture import CaptureController
from .keys import KeyInput


SHIFT_KEYS = {"shift", "shift_l", "shift_r"}
CTRL_KEYS = {"ctrl", "ctrl_l", "ctrl_r"}
ALT_KEYS = {"alt", "alt_l", "alt_r", "alt_gr"}
META_KEYS = {"cmd", "cmd_l", "cmd_r"}


class KeyboardListener:
    """Translates pynput key callbacks into KeyInput events"""

    def __init__(self, controller: CaptureController):
        self.controller = controller
        self._modifiers = set()
        self._listener = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger("swipe_ledger.keyboard")

    def start(self) -> None:
        try:
            from pynput import keyboard
        except ImportError:
            raise ImportError("pynput is required for keyboard capture. Install with: pip install pynput")

        self._listener = keyboard.Listener(on_press=self.on_press, on_release=self.on_release)
        self._listener.start()
        self.logger.info("Keyboard listener started")

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            self.logger.info("Keyboard listener stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._listener is not None:
            self._listener.join(timeout)

    def on_press(self, key: Any) -> None:
        name = getattr(key, "name", None)
        with self._lock:
            if name in SHIFT_KEYS | CTRL_KEYS | ALT_KEYS | META_KEYS:
                self._modifiers.add(name)
                return
            event = self.to_key_input(key)
        self.controller.on_raw_input(event)

    def on_release(self, key: Any) -> None:
        with self._lock:
            self._modifiers.discard(getattr(key, "name", None))

    def to_key_input(self, key: Any) -> KeyInput:
        """Build a KeyInput from a pynput Key or KeyCode"""
        name = getattr(key, "name", None)
        char = getattr(key, "char", None)
        if name == "backspace":
            return KeyInput(key="Backspace")
        return KeyInput(
            key=char if char else name,
            char=char,
            shift=bool(self._modifiers & SHIFT_KEYS),
            ctrl=bool(self._modifiers & CTRL_KEYS),
            meta=bool(self._modifiers & META_KEYS),
            alt=bool(self._modifiers & ALT_KEYS)
        )
