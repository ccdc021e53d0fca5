"""Canonical interpreter state snapshots and diff utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .display import FrameSnapshot
from .emulator import Chip8Emulator


@dataclass(frozen=True)
class CPUState:
    """Registers, stack and execution counters."""

    v: Tuple[int, ...]
    i: int
    pc: int
    sp: int
    stack: Tuple[int, ...]
    waiting_key_register: Optional[int]
    instruction_count: int


@dataclass(frozen=True)
class TimerState:
    delay: int
    sound: int


@dataclass(frozen=True)
class KeypadState:
    pressed_keys: Tuple[int, ...]


@dataclass(frozen=True)
class EmulatorState:
    """Composite immutable snapshot of interpreter subsystems."""

    cpu: CPUState
    timers: TimerState
    keypad: KeypadState
    memory: bytes
    display: FrameSnapshot


@dataclass(frozen=True)
class FieldDiff:
    """Difference for a single named field."""

    name: str
    before: object
    after: object


@dataclass(frozen=True)
class StateDiff:
    """Aggregated differences between two interpreter states."""

    cpu: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    timers: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    keypad: Tuple[FieldDiff, ...] = field(default_factory=tuple)
    memory_addresses: Tuple[int, ...] = field(default_factory=tuple)
    display_changed: bool = False

    def is_empty(self) -> bool:
        """Return True when no differences were recorded."""

        return (
            not self.cpu
            and not self.timers
            and not self.keypad
            and not self.memory_addresses
            and not self.display_changed
        )


def empty_state_diff() -> StateDiff:
    return StateDiff()


def capture_state(emulator: Chip8Emulator) -> EmulatorState:
    """Capture the current interpreter state as canonical snapshot."""

    cpu = emulator.cpu
    return EmulatorState(
        cpu=CPUState(
            v=tuple(cpu.V),
            i=cpu.i,
            pc=cpu.pc,
            sp=cpu.sp,
            stack=tuple(cpu.stack[: cpu.sp]),
            waiting_key_register=cpu.waiting_key_register,
            instruction_count=cpu.instruction_count,
        ),
        timers=TimerState(delay=emulator.timers.delay, sound=emulator.timers.sound),
        keypad=KeypadState(pressed_keys=emulator.keypad.pressed_keys()),
        memory=emulator.memory.dump(),
        display=emulator.frame(),
    )


def diff_states(before: Optional[EmulatorState], after: EmulatorState) -> StateDiff:
    """Compute structured differences between two interpreter states."""

    if before is None:
        return empty_state_diff()

    return StateDiff(
        cpu=_diff_cpu(before.cpu, after.cpu),
        timers=_diff_fields(
            "timers", before.timers, after.timers, ("delay", "sound")
        ),
        keypad=_diff_fields(
            "keypad", before.keypad, after.keypad, ("pressed_keys",)
        ),
        memory_addresses=tuple(
            addr
            for addr, (a, b) in enumerate(zip(before.memory, after.memory))
            if a != b
        ),
        display_changed=before.display.pixels != after.display.pixels,
    )


def _diff_cpu(before: CPUState, after: CPUState) -> Tuple[FieldDiff, ...]:
    diffs = list(
        _diff_fields(
            "cpu",
            before,
            after,
            ("i", "pc", "sp", "stack", "waiting_key_register", "instruction_count"),
        )
    )
    for index, (a, b) in enumerate(zip(before.v, after.v)):
        if a != b:
            diffs.append(FieldDiff(f"registers.v{index:X}", a, b))
    return tuple(diffs)


def _diff_fields(prefix, before, after, names) -> Tuple[FieldDiff, ...]:
    diffs = []
    for name in names:
        a = getattr(before, name)
        b = getattr(after, name)
        if a != b:
            diffs.append(FieldDiff(f"{prefix}.{name}", a, b))
    return tuple(diffs)


__all__ = [
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
