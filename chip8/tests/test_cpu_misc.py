"""Index register, timers, memory block, random and draw opcodes."""

from __future__ import annotations

import random

import pytest

from chip8.config import MachineConfig, QuirkConfig
from chip8.cpu import Chip8CPU
from chip8.emulator import Chip8Emulator
from chip8.errors import MemoryAccessError
from chip8.font import glyph_address


def test_load_index(cpu, execute):
    execute(0xA123)
    assert cpu.i == 0x123


def test_add_index_wraps_sixteen_bits(cpu, execute):
    cpu.i = 0xFFFE
    cpu.V[4] = 3
    execute(0xF41E)
    assert cpu.i == 0x0001


@pytest.mark.parametrize("digit", [0x0, 0x7, 0xF])
def test_font_address(cpu, execute, digit):
    cpu.V[2] = digit
    execute(0xF229)
    assert cpu.i == glyph_address(digit) == digit * 5


@pytest.mark.parametrize(
    "value, digits", [(234, b"\x02\x03\x04"), (7, b"\x00\x00\x07"), (255, b"\x02\x05\x05")]
)
def test_binary_coded_decimal(emu, cpu, execute, value, digits):
    cpu.i = 0x300
    cpu.V[5] = value
    execute(0xF533)
    assert emu.memory.read_block(0x300, 3) == digits
    assert cpu.i == 0x300


@pytest.mark.parametrize("x", [0, 7, 15])
def test_store_then_load_round_trip_inclusive(emu, cpu, execute, x):
    values = bytes((17 * k + 3) & 0xFF for k in range(16))
    cpu.V[:] = values
    cpu.i = 0x400
    execute(0xF055 | (x << 8))
    assert emu.memory.read_block(0x400, x + 1) == values[: x + 1]
    assert emu.memory.read_byte(0x400 + x + 1) == 0

    cpu.V[:] = bytes(16)
    execute(0xF065 | (x << 8))
    assert bytes(cpu.V[: x + 1]) == values[: x + 1]
    assert bytes(cpu.V[x + 1 :]) == bytes(15 - x)
    assert cpu.i == 0x400


def test_store_load_quirk_advances_index():
    emu = Chip8Emulator(MachineConfig(quirks=QuirkConfig(load_store_increments_i=True)))
    emu.load_rom(bytes([0xF3, 0x55, 0xF1, 0x65]))
    emu.cpu.i = 0x400
    emu.step()
    assert emu.cpu.i == 0x404
    emu.step()
    assert emu.cpu.i == 0x406


def test_store_past_end_of_memory_faults(cpu, execute):
    cpu.i = 0xFFE
    with pytest.raises(MemoryAccessError):
        execute(0xF255)


def test_delay_and_sound_registers(emu, cpu, execute):
    cpu.V[1] = 30
    execute(0xF115)
    execute(0xF118)
    assert emu.timers.delay == 30
    assert emu.timers.sound == 30
    emu.tick_60hz()
    execute(0xF207)
    assert cpu.V[2] == 29


def test_random_is_masked_and_reproducible(emu):
    expected = random.Random(99).randrange(256) & 0x0F
    cpu = Chip8CPU(emu.memory, emu.framebuffer, emu.keypad, emu.timers, rng=random.Random(99))
    emu.memory.load_program(b"\xC3\x0F")
    cpu.step()
    assert cpu.V[3] == expected


def test_same_seed_same_sequence():
    results = []
    for _ in range(2):
        emu = Chip8Emulator(MachineConfig(rng_seed=42))
        emu.load_rom(bytes([0xC0, 0xFF] * 8))
        values = []
        for _ in range(8):
            emu.step()
            values.append(emu.cpu.V[0])
        results.append(values)
    assert results[0] == results[1]


def test_draw_font_glyph_sets_pixels_and_clears_flag(load_words):
    emu = load_words(0xA000, 0x6000, 0x6100, 0xD015)
    emu.cpu.V[0xF] = 1
    for _ in range(4):
        emu.step()
    fb = emu.framebuffer
    assert fb.pixel(0, 0) and fb.pixel(3, 0)
    assert fb.pixel(0, 1) and not fb.pixel(1, 1)
    assert fb.lit_count() == 14
    assert emu.cpu.V[0xF] == 0


def test_redraw_erases_and_sets_collision(load_words):
    emu = load_words(0xA000, 0xD015, 0xD015)
    for _ in range(3):
        emu.step()
    assert emu.framebuffer.lit_count() == 0
    assert emu.cpu.V[0xF] == 1


def test_draw_origin_read_before_flag_reset(load_words):
    emu = load_words(0xA000, 0xDF01)
    emu.cpu.V[0xF] = 10
    emu.cpu.V[0] = 2
    emu.step()
    emu.step()
    assert emu.framebuffer.pixel(10, 2)


def test_draw_with_index_past_memory_faults(load_words):
    emu = load_words(0xAFFE, 0xD005)
    emu.step()
    with pytest.raises(MemoryAccessError):
        emu.step()


def test_zero_height_sprite_draws_nothing(load_words):
    emu = load_words(0xA000, 0xD010)
    emu.cpu.V[0xF] = 1
    emu.step()
    emu.step()
    assert emu.framebuffer.lit_count() == 0
    assert emu.cpu.V[0xF] == 0


@pytest.mark.parametrize(
    "word, pressed, skipped",
    [
        (0xE59E, True, True),
        (0xE59E, False, False),
        (0xE5A1, True, False),
        (0xE5A1, False, True),
    ],
)
def test_key_skips(load_words, word, pressed, skipped):
    emu = load_words(word)
    emu.cpu.V[5] = 0xA
    if pressed:
        emu.key_down(0xA)
    emu.key_down(0x1)
    emu.step()
    assert emu.pc == (0x204 if skipped else 0x202)


def test_wait_key_blocks_without_advancing(load_words):
    emu = load_words(0xF30A, 0x6101)
    for _ in range(5):
        assert emu.step() is None
        assert emu.pc == 0x200
        assert emu.cpu.waiting_for_key
    assert emu.instruction_count == 0

    emu.key_down(0xB)
    emu.key_down(0x4)
    op = emu.step()
    assert op is not None and op.word == 0xF30A
    assert emu.cpu.V[3] == 0x4
    assert emu.pc == 0x202
    assert not emu.cpu.waiting_for_key
    assert emu.instruction_count == 1

    emu.step()
    assert emu.cpu.V[1] == 1


def test_wait_key_with_key_already_down_latches_immediately(load_words):
    emu = load_words(0xF70A)
    emu.key_down(0xE)
    emu.step()
    assert emu.cpu.V[7] == 0xE
    assert emu.pc == 0x202


def test_timers_keep_running_while_waiting_for_key(load_words):
    emu = load_words(0xF00A)
    emu.timers.delay = 5
    emu.run_frame(instructions=3)
    assert emu.timers.delay == 4
    assert emu.pc == 0x200
