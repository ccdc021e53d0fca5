"""Bounds-checked 4 KiB RAM for the CHIP-8 interpreter."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Tuple

from .constants import FONT_BASE, MAX_ROM_SIZE, MEMORY_SIZE, PROGRAM_START
from .errors import MemoryAccessError, RomTooLargeError
from .font import FONT_DATA

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemoryAccessLog:
    address: int
    value: int
    previous: int
    pc: Optional[int]


class Chip8Memory:
    """Flat RAM with the font preloaded at ``FONT_BASE``.

    Every access is range checked; anything outside ``[0, MEMORY_SIZE)``
    raises :class:`MemoryAccessError` instead of wrapping.
    """

    def __init__(self, *, log_limit: int = 256) -> None:
        self._data = bytearray(MEMORY_SIZE)
        self._write_log: Deque[MemoryAccessLog] = deque(maxlen=log_limit)
        self.program_size = 0
        self._load_font()

    def _load_font(self) -> None:
        self._data[FONT_BASE : FONT_BASE + len(FONT_DATA)] = FONT_DATA

    def reset(self) -> None:
        """Zero RAM and reload the font."""
        self._data[:] = bytes(MEMORY_SIZE)
        self._write_log.clear()
        self.program_size = 0
        self._load_font()

    def __len__(self) -> int:
        return MEMORY_SIZE

    @staticmethod
    def _check(address: int, length: int = 1, pc: Optional[int] = None) -> None:
        if address < 0 or length < 0 or address + length > MEMORY_SIZE:
            raise MemoryAccessError(address, length=length, pc=pc)

    def read_byte(self, address: int, pc: Optional[int] = None) -> int:
        self._check(address, 1, pc)
        return self._data[address]

    def write_byte(self, address: int, value: int, pc: Optional[int] = None) -> None:
        self._check(address, 1, pc)
        value &= 0xFF
        previous = self._data[address]
        self._data[address] = value
        self._write_log.append(
            MemoryAccessLog(address=address, value=value, previous=previous, pc=pc)
        )

    def read_word(self, address: int, pc: Optional[int] = None) -> int:
        """Read a big-endian 16-bit word."""
        self._check(address, 2, pc)
        return (self._data[address] << 8) | self._data[address + 1]

    def read_block(self, address: int, length: int, pc: Optional[int] = None) -> bytes:
        self._check(address, length, pc)
        return bytes(self._data[address : address + length])

    def write_block(self, address: int, data: bytes, pc: Optional[int] = None) -> None:
        self._check(address, len(data), pc)
        for offset, value in enumerate(data):
            self.write_byte(address + offset, value, pc)

    def load_program(self, data: bytes) -> None:
        """Copy a ROM image to ``PROGRAM_START``.

        Oversized images are rejected before any byte is written.
        """
        image = bytes(data)
        if len(image) > MAX_ROM_SIZE:
            raise RomTooLargeError(len(image), MAX_ROM_SIZE)
        self._data[PROGRAM_START : PROGRAM_START + len(image)] = image
        self.program_size = len(image)
        logger.info("Loaded %d byte program at 0x%03X", len(image), PROGRAM_START)

    def write_log(self) -> Tuple[MemoryAccessLog, ...]:
        return tuple(self._write_log)

    def clear_log(self) -> None:
        self._write_log.clear()

    def dump(self) -> bytes:
        """Return a copy of the full address space."""
        return bytes(self._data)


__all__ = ["Chip8Memory", "MemoryAccessLog"]
