"""Built-in hexadecimal font loaded into the bottom of RAM."""

from __future__ import annotations

from typing import List, Tuple

from .constants import FONT_BASE

GLYPH_HEIGHT = 5  # bytes per glyph
GLYPH_WIDTH = 4  # only the high nibble of each row is drawn
GLYPH_COUNT = 16

# Each glyph is 4x5; rows are padded to a full byte, e.g. "0":
#   ####  F0
#   #  #  90
#   #  #  90
#   #  #  90
#   ####  F0
FONT_GLYPHS: Tuple[Tuple[int, ...], ...] = (
    (0xF0, 0x90, 0x90, 0x90, 0xF0),  # 0
    (0x20, 0x60, 0x20, 0x20, 0x70),  # 1
    (0xF0, 0x10, 0xF0, 0x80, 0xF0),  # 2
    (0xF0, 0x10, 0xF0, 0x10, 0xF0),  # 3
    (0x90, 0x90, 0xF0, 0x10, 0x10),  # 4
    (0xF0, 0x80, 0xF0, 0x10, 0xF0),  # 5
    (0xF0, 0x80, 0xF0, 0x90, 0xF0),  # 6
    (0xF0, 0x10, 0x20, 0x40, 0x40),  # 7
    (0xF0, 0x90, 0xF0, 0x90, 0xF0),  # 8
    (0xF0, 0x90, 0xF0, 0x10, 0xF0),  # 9
    (0xF0, 0x90, 0xF0, 0x90, 0x90),  # A
    (0xE0, 0x90, 0xE0, 0x90, 0xE0),  # B
    (0xF0, 0x80, 0x80, 0x80, 0xF0),  # C
    (0xE0, 0x90, 0x90, 0x90, 0xE0),  # D
    (0xF0, 0x80, 0xF0, 0x80, 0xF0),  # E
    (0xF0, 0x80, 0xF0, 0x80, 0x80),  # F
)

FONT_DATA = bytes(row for glyph in FONT_GLYPHS for row in glyph)


def glyph_address(digit: int) -> int:
    """Return the RAM address of the glyph for a hex digit."""
    if not (0 <= digit < GLYPH_COUNT):
        raise ValueError(f"Glyph index out of range: {digit}")
    return FONT_BASE + digit * GLYPH_HEIGHT


def glyph_bitmap(digit: int) -> List[List[int]]:
    """Decode a glyph into a 5x4 bitmap (1 = pixel on)."""
    glyph_address(digit)
    rows = FONT_GLYPHS[digit]
    return [
        [(row >> (7 - bit)) & 1 for bit in range(GLYPH_WIDTH)] for row in rows
    ]


__all__ = [
    "FONT_DATA",
    "FONT_GLYPHS",
    "GLYPH_COUNT",
    "GLYPH_HEIGHT",
    "GLYPH_WIDTH",
    "glyph_address",
    "glyph_bitmap",
]
