"""Shared machine constants for the CHIP-8 interpreter.

Everything here is fixed by the virtual machine definition; tunable
behaviour lives in ``chip8.config`` instead.
"""

# Total addressable RAM (12-bit address space).
MEMORY_SIZE = 0x1000

# The built-in hex font occupies the bottom of RAM.
FONT_BASE = 0x000

# Programs are loaded and start executing here.
PROGRAM_START = 0x200

# Largest ROM image that fits between PROGRAM_START and the end of RAM.
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

# Mask applied to 12-bit address operands (NNN).
ADDRESS_MASK = 0xFFF

# I is a 16-bit register even though only 12 bits address RAM.
INDEX_MASK = 0xFFFF

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF
STACK_DEPTH = 16
NUM_KEYS = 16

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32

# Every instruction is a big-endian 16-bit word.
INSTRUCTION_SIZE = 2

# Timer/display cadence in Hz.
TIMER_FREQUENCY = 60

# Host-loop default: instruction ticks issued per 60 Hz tick (~600 Hz).
INSTRUCTIONS_PER_FRAME = 10
