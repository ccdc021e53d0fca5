"""Hex keypad state shared between the input bridge and the CPU."""

from __future__ import annotations

import operator
from typing import Dict, List, Optional, Set, Tuple

from .constants import NUM_KEYS


def _build_key_bindings() -> Tuple[Tuple[Tuple[int, ...], ...], Dict[str, int]]:
    """Return the COSMAC keypad layout and a host-keyboard binding table."""

    # Physical layout of the COSMAC VIP keypad, row by row.
    layout: List[List[int]] = [
        [0x1, 0x2, 0x3, 0xC],
        [0x4, 0x5, 0x6, 0xD],
        [0x7, 0x8, 0x9, 0xE],
        [0xA, 0x0, 0xB, 0xF],
    ]
    # Same shape on the left-hand block of a QWERTY keyboard.
    host_rows = ["1234", "qwer", "asdf", "zxcv"]

    bindings: Dict[str, int] = {}
    for codes, chars in zip(layout, host_rows):
        for code, char in zip(codes, chars):
            bindings[char] = code

    return tuple(tuple(row) for row in layout), bindings


DEFAULT_KEY_LAYOUT, KEY_BINDINGS = _build_key_bindings()


def _check_code(code: int) -> int:
    value = operator.index(code)
    if not 0 <= value < NUM_KEYS:
        raise ValueError(f"Key code out of range: {code!r}")
    return value


class Keypad:
    """Set of currently pressed key codes (0x0-0xF)."""

    def __init__(self) -> None:
        self._pressed: Set[int] = set()
        self.press_count = 0

    def press(self, code: int) -> bool:
        """Mark ``code`` pressed; returns False if it already was."""
        code = _check_code(code)
        if code in self._pressed:
            return False
        self._pressed.add(code)
        self.press_count += 1
        return True

    def release(self, code: int) -> bool:
        code = _check_code(code)
        if code not in self._pressed:
            return False
        self._pressed.discard(code)
        return True

    def release_all(self) -> None:
        self._pressed.clear()

    def is_pressed(self, code: int) -> bool:
        return code in self._pressed

    def pressed_keys(self) -> Tuple[int, ...]:
        return tuple(sorted(self._pressed))

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed code, or None. Used to latch FX0A deterministically."""
        return min(self._pressed) if self._pressed else None

    def any_pressed(self) -> bool:
        return bool(self._pressed)


def key_for_char(char: str) -> Optional[int]:
    """Look up the keypad code bound to a host keyboard character."""
    return KEY_BINDINGS.get(char.lower())


__all__ = ["DEFAULT_KEY_LAYOUT", "KEY_BINDINGS", "Keypad", "key_for_char"]
