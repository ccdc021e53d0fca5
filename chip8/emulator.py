"""CHIP-8 interpreter combining CPU, memory, display, timers and keypad."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Callable, List, Optional, Union

from .config import MachineConfig
from .constants import INSTRUCTIONS_PER_FRAME
from .cpu import Chip8CPU
from .display import Framebuffer, FrameObserver, FramePipeline, FrameSnapshot
from .errors import Chip8Error
from .keypad import Keypad
from .memory import Chip8Memory
from .opcodes import Opcode
from .timers import TimerEventType, Timers
from .tracing import trace_dispatcher

logger = logging.getLogger(__name__)

BeepObserver = Callable[[int], None]


class Chip8Emulator:
    """Single-threaded interpreter driven by two tick entry points.

    The host calls :meth:`step` at its chosen instruction rate and
    :meth:`tick_60hz` at 60 Hz. Key transitions arrive through
    :meth:`key_down`/:meth:`key_up`; frames and beep requests leave
    through the subscribed observers.
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or MachineConfig()
        if rng is None:
            rng = random.Random(self.config.rng_seed)

        self.memory = Chip8Memory()
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()
        self.timers = Timers()
        self.cpu = Chip8CPU(
            self.memory,
            self.framebuffer,
            self.keypad,
            self.timers,
            quirks=self.config.quirks,
            rng=rng,
        )
        self._rng_state = rng.getstate()
        self.display = FramePipeline(self.framebuffer)
        self._beep_observers: List[BeepObserver] = []

        self.frame_count = 0
        self.halted: Optional[Chip8Error] = None
        self.rom_loaded = False

    # ------------------------------------------------------------------ #
    # Program loading
    # ------------------------------------------------------------------ #

    def load_rom(self, data: bytes) -> None:
        """Copy a ROM image to 0x200. Oversized images leave memory untouched."""
        self.memory.load_program(data)
        self.rom_loaded = True

    def load_rom_file(self, path: Union[str, Path]) -> None:
        self.load_rom(Path(path).read_bytes())

    def reset(self) -> None:
        """Return to power-on state. The ROM has to be loaded again.

        The random generator is rewound to its construction state, so a
        seeded run replays the same CXNN values after a reset.
        """
        self.memory.reset()
        self.framebuffer.clear()
        self.keypad.release_all()
        self.timers.reset()
        self.cpu.reset()
        self.cpu.rng.setstate(self._rng_state)
        self.display.reset()
        self.frame_count = 0
        self.halted = None
        self.rom_loaded = False

    # ------------------------------------------------------------------ #
    # Tick entry points
    # ------------------------------------------------------------------ #

    def step(self) -> Optional[Opcode]:
        """Instruction tick: execute exactly one opcode.

        Fatal faults propagate to the caller and latch ``halted``; further
        calls re-raise the same fault until :meth:`reset`.
        """
        if self.halted is not None:
            raise self.halted
        try:
            return self.cpu.step()
        except Chip8Error as exc:
            self.halted = exc
            raise

    def tick_60hz(self) -> FrameSnapshot:
        """Timer tick: decrement timers, forward beep events, publish a frame."""
        for event in self.timers.tick():
            if event.type == TimerEventType.BEEP_START:
                self._request_beep(event.duration)
            elif event.type == TimerEventType.BEEP_STOP:
                self._request_beep(0)
        self.frame_count += 1
        trace_dispatcher.counter("instructions", self.cpu.instruction_count)
        return self.display.publish(self.frame_count)

    def run_frame(self, instructions: int = INSTRUCTIONS_PER_FRAME) -> FrameSnapshot:
        """Run ``instructions`` instruction ticks followed by one 60 Hz tick."""
        for _ in range(instructions):
            self.step()
        return self.tick_60hz()

    def run(
        self, frames: int, instructions_per_frame: int = INSTRUCTIONS_PER_FRAME
    ) -> Optional[FrameSnapshot]:
        last = None
        for _ in range(frames):
            last = self.run_frame(instructions_per_frame)
        return last

    # ------------------------------------------------------------------ #
    # Input bridge
    # ------------------------------------------------------------------ #

    def key_down(self, code: int) -> bool:
        pressed = self.keypad.press(code)
        if pressed:
            trace_dispatcher.instant("Input", "key_down", key=f"{code:X}")
        return pressed

    def key_up(self, code: int) -> bool:
        released = self.keypad.release(code)
        if released:
            trace_dispatcher.instant("Input", "key_up", key=f"{code:X}")
        return released

    # ------------------------------------------------------------------ #
    # Render / audio bridges
    # ------------------------------------------------------------------ #

    def subscribe_frame(self, observer: FrameObserver) -> None:
        self.display.subscribe(observer)

    def unsubscribe_frame(self, observer: FrameObserver) -> None:
        self.display.unsubscribe(observer)

    def subscribe_beep(self, observer: BeepObserver) -> None:
        """Observer receives the beep length in 60 Hz ticks.

        A new length replaces the previous request; 0 means Sound reached
        zero and any playing tone should stop.
        """
        if observer not in self._beep_observers:
            self._beep_observers.append(observer)

    def unsubscribe_beep(self, observer: BeepObserver) -> None:
        if observer in self._beep_observers:
            self._beep_observers.remove(observer)

    def _request_beep(self, duration: int) -> None:
        if duration:
            logger.debug("Beep requested for %d ticks", duration)
            trace_dispatcher.instant("Sound", "beep", ticks=duration)
        else:
            trace_dispatcher.instant("Sound", "beep_stop")
        for observer in tuple(self._beep_observers):
            observer(duration)

    # ------------------------------------------------------------------ #
    # Convenience accessors
    # ------------------------------------------------------------------ #

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def instruction_count(self) -> int:
        return self.cpu.instruction_count

    @property
    def last_frame(self) -> Optional[FrameSnapshot]:
        return self.display.last_frame

    def frame(self) -> FrameSnapshot:
        """Snapshot of the framebuffer right now, without publishing it."""
        return self.framebuffer.snapshot(self.frame_count)


__all__ = ["BeepObserver", "Chip8Emulator"]
