"""Exception hierarchy for interpreter faults."""

from __future__ import annotations

from typing import Optional


class Chip8Error(Exception):
    """Base class for all interpreter faults."""


class MemoryAccessError(Chip8Error, IndexError):
    """Read or write outside the 4 KiB address space."""

    def __init__(self, address: int, *, length: int = 1, pc: Optional[int] = None):
        self.address = address
        self.length = length
        self.pc = pc
        where = f" (pc=0x{pc:03X})" if pc is not None else ""
        if length == 1:
            message = f"Memory access out of bounds: 0x{address:04X}{where}"
        else:
            message = (
                f"Memory access out of bounds: 0x{address:04X}+{length}{where}"
            )
        super().__init__(message)


class StackOverflowError(Chip8Error):
    """CALL with all 16 stack slots in use."""

    def __init__(self, pc: int, depth: int):
        self.pc = pc
        self.depth = depth
        super().__init__(f"Stack overflow at pc=0x{pc:03X} (depth {depth})")


class StackUnderflowError(Chip8Error):
    """RET with an empty stack."""

    def __init__(self, pc: int):
        self.pc = pc
        super().__init__(f"Stack underflow at pc=0x{pc:03X}")


class RomTooLargeError(Chip8Error, ValueError):
    """Program image does not fit between 0x200 and the end of RAM."""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"ROM is {size} bytes; only {capacity} bytes are available"
        )


__all__ = [
    "Chip8Error",
    "MemoryAccessError",
    "StackOverflowError",
    "StackUnderflowError",
    "RomTooLargeError",
]
