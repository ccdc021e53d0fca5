"""CHIP-8 CPU: register file, call stack and the fetch-decode-execute loop.

Dispatch is two-level. The top nibble of every instruction indexes
``_primary`` (a list of 16 handlers). Families that need a second look
use their own tables: 0x0 on NNN, 0x8 on N, 0xE and 0xF on NN. Words
missing from a secondary table are counted in ``unknown_opcodes`` and
otherwise ignored.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable, Dict, List, Optional

from .config import QuirkConfig
from .constants import (
    FLAG_REGISTER,
    FONT_BASE,
    INDEX_MASK,
    INSTRUCTION_SIZE,
    NUM_REGISTERS,
    PROGRAM_START,
    STACK_DEPTH,
)
from .display import Framebuffer
from .errors import StackOverflowError, StackUnderflowError
from .font import GLYPH_HEIGHT
from .keypad import Keypad
from .memory import Chip8Memory
from .opcodes import Opcode, decode
from .timers import Timers
from .tracing import trace_dispatcher

logger = logging.getLogger(__name__)

Handler = Callable[[Opcode], None]


class Chip8CPU:
    """Interpreter core operating on externally owned peripherals."""

    def __init__(
        self,
        memory: Chip8Memory,
        framebuffer: Framebuffer,
        keypad: Keypad,
        timers: Timers,
        *,
        quirks: Optional[QuirkConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.memory = memory
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.timers = timers
        self.quirks = quirks or QuirkConfig()
        self.rng = rng or random.Random()

        self.V = bytearray(NUM_REGISTERS)
        self.i = 0
        self.pc = PROGRAM_START
        self.sp = 0
        self.stack: List[int] = [0] * STACK_DEPTH

        # Register index FX0A is waiting to fill, None when running.
        self.waiting_key_register: Optional[int] = None
        self._waiting_opcode: Optional[Opcode] = None

        self.instruction_count = 0
        self.unknown_opcodes: Counter = Counter()

        self._primary: List[Handler] = [
            self._op_system,  # 0x0
            self._op_jump,  # 0x1
            self._op_call,  # 0x2
            self._op_skip_eq_imm,  # 0x3
            self._op_skip_ne_imm,  # 0x4
            self._op_skip_eq_reg,  # 0x5
            self._op_load_imm,  # 0x6
            self._op_add_imm,  # 0x7
            self._op_arith,  # 0x8
            self._op_skip_ne_reg,  # 0x9
            self._op_load_index,  # 0xA
            self._op_jump_offset,  # 0xB
            self._op_random,  # 0xC
            self._op_draw,  # 0xD
            self._op_keys,  # 0xE
            self._op_misc,  # 0xF
        ]
        self._system: Dict[int, Handler] = {
            0x0E0: self._op_clear,
            0x0EE: self._op_return,
        }
        self._arith: Dict[int, Handler] = {
            0x0: self._op_mov,
            0x1: self._op_or,
            0x2: self._op_and,
            0x3: self._op_xor,
            0x4: self._op_add,
            0x5: self._op_sub,
            0x6: self._op_shr,
            0x7: self._op_subn,
            0xE: self._op_shl,
        }
        self._keys: Dict[int, Handler] = {
            0x9E: self._op_skip_key,
            0xA1: self._op_skip_not_key,
        }
        self._misc: Dict[int, Handler] = {
            0x07: self._op_get_delay,
            0x0A: self._op_wait_key,
            0x15: self._op_set_delay,
            0x18: self._op_set_sound,
            0x1E: self._op_add_index,
            0x29: self._op_font,
            0x33: self._op_bcd,
            0x55: self._op_store,
            0x65: self._op_load,
        }

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def reset(self) -> None:
        self.V[:] = bytes(NUM_REGISTERS)
        self.i = 0
        self.pc = PROGRAM_START
        self.sp = 0
        self.stack = [0] * STACK_DEPTH
        self.waiting_key_register = None
        self._waiting_opcode = None
        self.instruction_count = 0
        self.unknown_opcodes.clear()

    @property
    def waiting_for_key(self) -> bool:
        return self.waiting_key_register is not None

    # ------------------------------------------------------------------ #
    # Fetch / execute
    # ------------------------------------------------------------------ #

    def fetch(self) -> Opcode:
        """Read the big-endian word at PC without advancing it."""
        word = self.memory.read_word(self.pc, pc=self.pc)
        return decode(word, self.pc)

    def step(self) -> Optional[Opcode]:
        """Run one instruction cycle.

        Returns the executed opcode, or None while FX0A is still waiting
        for a key.
        """
        if self.waiting_key_register is not None:
            return self._resume_key_wait()

        opcode = self.fetch()
        self.pc += INSTRUCTION_SIZE
        self.execute(opcode)
        if self.waiting_key_register is None:
            self.instruction_count += 1
            return opcode
        return None

    def execute(self, opcode: Opcode) -> None:
        """Dispatch an already decoded opcode. PC must already point past it."""
        self._primary[opcode.family](opcode)

    def _dispatch(self, table: Dict[int, Handler], key: int, opcode: Opcode) -> None:
        handler = table.get(key)
        if handler is None:
            self._unmapped(opcode)
            return
        handler(opcode)

    def _unmapped(self, opcode: Opcode) -> None:
        first = opcode.word not in self.unknown_opcodes
        self.unknown_opcodes[opcode.word] += 1
        if first:
            logger.warning(
                "Ignoring unmapped opcode %04X at 0x%03X", opcode.word, opcode.address
            )
        else:
            logger.debug(
                "Ignoring unmapped opcode %04X at 0x%03X", opcode.word, opcode.address
            )
        trace_dispatcher.instant(
            "CPU",
            "unmapped_opcode",
            opcode=f"0x{opcode.word:04X}",
            pc=f"0x{opcode.address:03X}",
        )

    def _skip(self) -> None:
        self.pc += INSTRUCTION_SIZE

    def _set_flag(self, value: int) -> None:
        self.V[FLAG_REGISTER] = value

    # ------------------------------------------------------------------ #
    # Stack
    # ------------------------------------------------------------------ #

    def push(self, address: int, *, pc: Optional[int] = None) -> None:
        if self.sp >= STACK_DEPTH:
            raise StackOverflowError(self.pc if pc is None else pc, self.sp + 1)
        self.stack[self.sp] = address
        self.sp += 1

    def pop(self, *, pc: Optional[int] = None) -> int:
        if self.sp == 0:
            raise StackUnderflowError(self.pc if pc is None else pc)
        self.sp -= 1
        return self.stack[self.sp]

    # ------------------------------------------------------------------ #
    # 0x0 - 0x7
    # ------------------------------------------------------------------ #

    def _op_system(self, op: Opcode) -> None:
        self._dispatch(self._system, op.nnn, op)

    def _op_clear(self, op: Opcode) -> None:
        self.framebuffer.clear()

    def _op_return(self, op: Opcode) -> None:
        self.pc = self.pop(pc=op.address)
        trace_dispatcher.subroutine_return(op.address)

    def _op_jump(self, op: Opcode) -> None:
        self.pc = op.nnn

    def _op_call(self, op: Opcode) -> None:
        self.push(self.pc, pc=op.address)
        self.pc = op.nnn
        trace_dispatcher.subroutine_call(op.nnn, op.address)

    def _op_skip_eq_imm(self, op: Opcode) -> None:
        if self.V[op.x] == op.nn:
            self._skip()

    def _op_skip_ne_imm(self, op: Opcode) -> None:
        if self.V[op.x] != op.nn:
            self._skip()

    def _op_skip_eq_reg(self, op: Opcode) -> None:
        if self.V[op.x] == self.V[op.y]:
            self._skip()

    def _op_load_imm(self, op: Opcode) -> None:
        self.V[op.x] = op.nn

    def _op_add_imm(self, op: Opcode) -> None:
        # No carry flag for 7XNN.
        self.V[op.x] = (self.V[op.x] + op.nn) & 0xFF

    # ------------------------------------------------------------------ #
    # 0x8 arithmetic; VF is always written last
    # ------------------------------------------------------------------ #

    def _op_arith(self, op: Opcode) -> None:
        self._dispatch(self._arith, op.n, op)

    def _op_mov(self, op: Opcode) -> None:
        self.V[op.x] = self.V[op.y]

    def _op_or(self, op: Opcode) -> None:
        self.V[op.x] |= self.V[op.y]

    def _op_and(self, op: Opcode) -> None:
        self.V[op.x] &= self.V[op.y]

    def _op_xor(self, op: Opcode) -> None:
        self.V[op.x] ^= self.V[op.y]

    def _op_add(self, op: Opcode) -> None:
        total = self.V[op.x] + self.V[op.y]
        self.V[op.x] = total & 0xFF
        self._set_flag(1 if total > 0xFF else 0)

    def _op_sub(self, op: Opcode) -> None:
        vx, vy = self.V[op.x], self.V[op.y]
        self.V[op.x] = (vx - vy) & 0xFF
        self._set_flag(1 if vx > vy else 0)

    def _op_subn(self, op: Opcode) -> None:
        vx, vy = self.V[op.x], self.V[op.y]
        target = op.x if self.quirks.subn_writes_vx else op.y
        self.V[target] = (vy - vx) & 0xFF
        self._set_flag(1 if vy > vx else 0)

    def _shift_source(self, op: Opcode) -> int:
        return self.V[op.y] if self.quirks.shift_uses_vy else self.V[op.x]

    def _op_shr(self, op: Opcode) -> None:
        value = self._shift_source(op)
        self.V[op.x] = value >> 1
        self._set_flag(value & 1)

    def _op_shl(self, op: Opcode) -> None:
        value = self._shift_source(op)
        self.V[op.x] = (value << 1) & 0xFF
        self._set_flag((value >> 7) & 1)

    # ------------------------------------------------------------------ #
    # 0x9 - 0xD
    # ------------------------------------------------------------------ #

    def _op_skip_ne_reg(self, op: Opcode) -> None:
        if self.V[op.x] != self.V[op.y]:
            self._skip()

    def _op_load_index(self, op: Opcode) -> None:
        self.i = op.nnn

    def _op_jump_offset(self, op: Opcode) -> None:
        base = self.V[op.x] if self.quirks.jump_uses_vx else self.V[0]
        self.pc = op.nnn + base

    def _op_random(self, op: Opcode) -> None:
        self.V[op.x] = self.rng.randrange(256) & op.nn

    def _op_draw(self, op: Opcode) -> None:
        x, y = self.V[op.x], self.V[op.y]
        rows = self.memory.read_block(self.i, op.n, pc=op.address)
        self._set_flag(0)
        if self.framebuffer.draw_sprite(x, y, rows):
            self._set_flag(1)

    # ------------------------------------------------------------------ #
    # 0xE keypad
    # ------------------------------------------------------------------ #

    def _op_keys(self, op: Opcode) -> None:
        self._dispatch(self._keys, op.nn, op)

    def _op_skip_key(self, op: Opcode) -> None:
        if self.keypad.is_pressed(self.V[op.x]):
            self._skip()

    def _op_skip_not_key(self, op: Opcode) -> None:
        if not self.keypad.is_pressed(self.V[op.x]):
            self._skip()

    # ------------------------------------------------------------------ #
    # 0xF misc
    # ------------------------------------------------------------------ #

    def _op_misc(self, op: Opcode) -> None:
        self._dispatch(self._misc, op.nn, op)

    def _op_get_delay(self, op: Opcode) -> None:
        self.V[op.x] = self.timers.delay

    def _op_wait_key(self, op: Opcode) -> None:
        key = self.keypad.first_pressed()
        if key is not None:
            self.V[op.x] = key
            return
        # Hold PC on this instruction until a key shows up.
        self.pc = op.address
        self.waiting_key_register = op.x
        self._waiting_opcode = op
        trace_dispatcher.instant(
            "Input", "wait_key", register=f"V{op.x:X}", pc=f"0x{op.address:03X}"
        )

    def _resume_key_wait(self) -> Optional[Opcode]:
        key = self.keypad.first_pressed()
        if key is None:
            return None
        register = self.waiting_key_register
        opcode = self._waiting_opcode
        self.V[register] = key
        self.pc += INSTRUCTION_SIZE
        self.waiting_key_register = None
        self._waiting_opcode = None
        self.instruction_count += 1
        return opcode

    def _op_set_delay(self, op: Opcode) -> None:
        self.timers.delay = self.V[op.x]

    def _op_set_sound(self, op: Opcode) -> None:
        self.timers.sound = self.V[op.x]

    def _op_add_index(self, op: Opcode) -> None:
        self.i = (self.i + self.V[op.x]) & INDEX_MASK

    def _op_font(self, op: Opcode) -> None:
        self.i = FONT_BASE + self.V[op.x] * GLYPH_HEIGHT

    def _op_bcd(self, op: Opcode) -> None:
        value = self.V[op.x]
        digits = bytes((value // 100, (value // 10) % 10, value % 10))
        self.memory.write_block(self.i, digits, pc=op.address)

    def _op_store(self, op: Opcode) -> None:
        self.memory.write_block(self.i, bytes(self.V[: op.x + 1]), pc=op.address)
        if self.quirks.load_store_increments_i:
            self.i = (self.i + op.x + 1) & INDEX_MASK

    def _op_load(self, op: Opcode) -> None:
        self.V[: op.x + 1] = self.memory.read_block(self.i, op.x + 1, pc=op.address)
        if self.quirks.load_store_increments_i:
            self.i = (self.i + op.x + 1) & INDEX_MASK

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_state(self) -> Dict[str, object]:
        return {
            "pc": self.pc,
            "i": self.i,
            "sp": self.sp,
            "v": tuple(self.V),
            "stack": tuple(self.stack[: self.sp]),
            "waiting_key_register": self.waiting_key_register,
            "instruction_count": self.instruction_count,
        }


__all__ = ["Chip8CPU"]
