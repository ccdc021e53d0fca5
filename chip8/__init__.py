"""CHIP-8 interpreter package."""

from .config import MachineConfig, QuirkConfig
from .cpu import Chip8CPU
from .emulator import Chip8Emulator
from .errors import (
    Chip8Error,
    MemoryAccessError,
    RomTooLargeError,
    StackOverflowError,
    StackUnderflowError,
)
from .state_model import (
    CPUState,
    EmulatorState,
    FieldDiff,
    KeypadState,
    StateDiff,
    TimerState,
    capture_state,
    diff_states,
    empty_state_diff,
)

__all__ = [
    "Chip8Emulator",
    "Chip8CPU",
    "MachineConfig",
    "QuirkConfig",
    "Chip8Error",
    "MemoryAccessError",
    "RomTooLargeError",
    "StackOverflowError",
    "StackUnderflowError",
    "CPUState",
    "EmulatorState",
    "FieldDiff",
    "KeypadState",
    "StateDiff",
    "TimerState",
    "capture_state",
    "diff_states",
    "empty_state_diff",
]
