"""
Tests for translating pynput key callbacks into capture input
"""

from types import SimpleNamespace
from unittest.mock import Mock

from swipe_ledger.keyboard_listener import KeyboardListener
from swipe_ledger.keys import KeyAction, KeyInput, classify_key


def key_code(char):
    return SimpleNamespace(char=char)


def special(name):
    return SimpleNamespace(name=name)


class TestKeyboardListener:

    def test_printable_key(self):
        controller = Mock()
        listener = KeyboardListener(controller)
        listener.on_press(key_code("7"))
        controller.on_raw_input.assert_called_once_with(KeyInput(key="7", char="7"))

    def test_backspace(self):
        listener = KeyboardListener(Mock())
        event = listener.to_key_input(special("backspace"))
        assert classify_key(event) == (KeyAction.BACKSPACE, None)

    def test_modifiers_are_tracked_not_forwarded(self):
        controller = Mock()
        listener = KeyboardListener(controller)
        listener.on_press(special("shift"))
        controller.on_raw_input.assert_not_called()

        listener.on_press(key_code("%"))
        controller.on_raw_input.assert_called_once_with(KeyInput(key="%", char="%", shift=True))

        listener.on_release(special("shift"))
        listener.on_press(key_code("5"))
        assert controller.on_raw_input.call_args.args[0].shift is False

    def test_special_keys_are_ignored_by_classifier(self):
        listener = KeyboardListener(Mock())
        event = listener.to_key_input(special("enter"))
        assert classify_key(event) == (KeyAction.IGNORED, None)

    def test_ctrl_combination_keeps_char(self):
        listener = KeyboardListener(Mock())
        listener.on_press(special("ctrl_l"))
        event = listener.to_key_input(key_code("c"))
        assert event.ctrl is True
