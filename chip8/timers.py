"""Delay and sound counters driven by the 60 Hz tick."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


class TimerEventType(Enum):
    """Kinds of events produced by a 60 Hz tick."""

    BEEP_START = auto()
    BEEP_STOP = auto()


@dataclass(frozen=True)
class TimerEvent:
    type: TimerEventType
    duration: int = 0  # ticks, BEEP_START only


@dataclass
class Timers:
    """Delay/Sound counters, independent of the instruction rate.

    Sound is a plain counter. :meth:`tick` raises a beep request whenever
    the counter holds more ticks than the last request still covers, so
    reloading Sound mid-beep extends the request. ``BEEP_STOP`` follows
    on the tick that brings Sound to zero, including after FX18 cut it
    short. Requests never come from inside instruction execution.
    """

    delay: int = 0
    sound: int = 0

    def __post_init__(self) -> None:
        self._beep_remaining = 0
        self.tick_count = 0

    def __setattr__(self, name: str, value) -> None:
        if name in ("delay", "sound"):
            value = int(value) & 0xFF
        super().__setattr__(name, value)

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0
        self._beep_remaining = 0
        self.tick_count = 0

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def tick(self) -> List[TimerEvent]:
        """Advance one 60 Hz period and return the beep events it produced."""

        events: List[TimerEvent] = []

        if self.sound > self._beep_remaining:
            self._beep_remaining = self.sound
            events.append(TimerEvent(TimerEventType.BEEP_START, duration=self.sound))
        beeping = self._beep_remaining > 0

        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1
        if self._beep_remaining > 0:
            self._beep_remaining -= 1

        if beeping and self.sound == 0:
            self._beep_remaining = 0
            events.append(TimerEvent(TimerEventType.BEEP_STOP))

        self.tick_count += 1
        return events


__all__ = ["TimerEvent", "TimerEventType", "Timers"]
