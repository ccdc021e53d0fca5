"""Shared pytest fixtures for CHIP-8 interpreter tests."""

from __future__ import annotations

from typing import Callable

import pytest

from chip8.config import MachineConfig
from chip8.cpu import Chip8CPU
from chip8.emulator import Chip8Emulator
from chip8.opcodes import decode


def words_to_bytes(*words: int) -> bytes:
    return b"".join(word.to_bytes(2, "big") for word in words)


@pytest.fixture
def emu() -> Chip8Emulator:
    return Chip8Emulator(MachineConfig(rng_seed=1234))


@pytest.fixture
def cpu(emu: Chip8Emulator) -> Chip8CPU:
    return emu.cpu


@pytest.fixture
def load_words(emu: Chip8Emulator) -> Callable[..., Chip8Emulator]:
    """Load big-endian instruction words at 0x200."""

    def _load(*words: int) -> Chip8Emulator:
        emu.load_rom(words_to_bytes(*words))
        return emu

    return _load


@pytest.fixture
def execute(cpu: Chip8CPU) -> Callable[[int], None]:
    """Execute one instruction word directly, bypassing fetch."""

    def _execute(word: int) -> None:
        op = decode(word, cpu.pc)
        cpu.pc += 2
        cpu.execute(op)

    return _execute
