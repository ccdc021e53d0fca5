"""Instruction word decoding."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Opcode:
    """One fetched 16-bit instruction split into its standard fields."""

    word: int
    address: int  # where it was fetched from

    @property
    def family(self) -> int:
        """Top nibble, selects the primary handler."""
        return (self.word >> 12) & 0xF

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF

    @property
    def nn(self) -> int:
        return self.word & 0x00FF

    @property
    def n(self) -> int:
        return self.word & 0x000F

    @property
    def x(self) -> int:
        return (self.word >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.word >> 4) & 0xF

    def __str__(self) -> str:
        return (
            f"{self.word:04X} (X: {self.x:X}, Y: {self.y:X}, N: {self.n:X}, "
            f"NN: {self.nn:02X}, NNN: {self.nnn:03X})"
        )


def decode(word: int, address: int = 0) -> Opcode:
    if not (0 <= word <= 0xFFFF):
        raise ValueError(f"Opcode must be a 16-bit word: {word!r}")
    return Opcode(word=word, address=address)


__all__ = ["Opcode", "decode"]
