"""Register and flag semantics of the 0x7 and 0x8 opcode families."""

from __future__ import annotations

import pytest

from chip8.config import QuirkConfig
from chip8.opcodes import decode

ADD = decode(0x8014)  # V0 += V1
SUB = decode(0x8015)  # V0 -= V1
SUBN = decode(0x8017)  # V1 = V1 - V0


def test_add_exhaustive(cpu):
    for a in range(256):
        for b in range(256):
            cpu.V[0], cpu.V[1] = a, b
            cpu.execute(ADD)
            assert cpu.V[0] == (a + b) & 0xFF
            assert cpu.V[0xF] == (1 if a + b > 255 else 0)


def test_sub_exhaustive(cpu):
    for a in range(256):
        for b in range(256):
            cpu.V[0], cpu.V[1] = a, b
            cpu.execute(SUB)
            assert cpu.V[0] == (a - b) & 0xFF
            assert cpu.V[0xF] == (1 if a > b else 0)


def test_subn_exhaustive(cpu):
    for a in range(256):
        for b in range(256):
            cpu.V[0], cpu.V[1] = a, b
            cpu.execute(SUBN)
            assert cpu.V[1] == (b - a) & 0xFF
            assert cpu.V[0] == a
            assert cpu.V[0xF] == (1 if b > a else 0)


def test_subn_quirk_writes_vx(cpu):
    cpu.quirks = QuirkConfig(subn_writes_vx=True)
    cpu.V[0], cpu.V[1] = 3, 10
    cpu.execute(SUBN)
    assert cpu.V[0] == 7
    assert cpu.V[1] == 10
    assert cpu.V[0xF] == 1


@pytest.mark.parametrize(
    "word, vx, vy, expected",
    [
        (0x8010, 0x12, 0x34, 0x34),
        (0x8011, 0b1100, 0b1010, 0b1110),
        (0x8012, 0b1100, 0b1010, 0b1000),
        (0x8013, 0b1100, 0b1010, 0b0110),
    ],
)
def test_logic_ops_leave_vf_alone(cpu, word, vx, vy, expected):
    cpu.V[0xF] = 0x42
    cpu.V[0], cpu.V[1] = vx, vy
    cpu.execute(decode(word))
    assert cpu.V[0] == expected
    assert cpu.V[1] == vy
    assert cpu.V[0xF] == 0x42


def test_add_immediate_wraps_without_flag(cpu):
    cpu.V[3] = 0xFF
    cpu.V[0xF] = 0
    cpu.execute(decode(0x7302))
    assert cpu.V[3] == 0x01
    assert cpu.V[0xF] == 0


@pytest.mark.parametrize(
    "value, result, flag",
    [(0b1000_0001, 0b0100_0000, 1), (0b0000_0010, 0b0000_0001, 0), (0, 0, 0)],
)
def test_shift_right_operates_on_vx(cpu, value, result, flag):
    cpu.V[2], cpu.V[3] = value, 0xAA
    cpu.execute(decode(0x8236))
    assert cpu.V[2] == result
    assert cpu.V[3] == 0xAA
    assert cpu.V[0xF] == flag


@pytest.mark.parametrize(
    "value, result, flag",
    [(0b1000_0001, 0b0000_0010, 1), (0b0100_0000, 0b1000_0000, 0)],
)
def test_shift_left_operates_on_vx(cpu, value, result, flag):
    cpu.V[2], cpu.V[3] = value, 0x55
    cpu.execute(decode(0x823E))
    assert cpu.V[2] == result
    assert cpu.V[0xF] == flag


def test_shift_quirk_uses_vy_as_source(cpu):
    cpu.quirks = QuirkConfig(shift_uses_vy=True)
    cpu.V[2], cpu.V[3] = 0, 0b0000_0011
    cpu.execute(decode(0x8236))
    assert cpu.V[2] == 0b0000_0001
    assert cpu.V[0xF] == 1
    cpu.V[3] = 0x80
    cpu.execute(decode(0x823E))
    assert cpu.V[2] == 0
    assert cpu.V[0xF] == 1


@pytest.mark.parametrize(
    "word, vf, vy, flag",
    [
        (0x8F14, 0xFF, 0x01, 1),  # add with carry
        (0x8F15, 0x01, 0x02, 0),  # sub with borrow
        (0x8F06, 0x00, 0x00, 0),  # shift right, VF=VX=0
        (0x8F0E, 0x80, 0x00, 1),  # shift left
    ],
)
def test_flag_wins_when_vx_is_vf(cpu, word, vf, vy, flag):
    cpu.V[0xF] = vf
    cpu.V[(word >> 4) & 0xF] = vy
    cpu.execute(decode(word))
    assert cpu.V[0xF] == flag


def test_unmapped_arithmetic_code_is_counted_noop(cpu):
    cpu.V[0], cpu.V[1] = 5, 6
    cpu.execute(decode(0x801F))
    assert (cpu.V[0], cpu.V[1]) == (5, 6)
    assert cpu.unknown_opcodes[0x801F] == 1
