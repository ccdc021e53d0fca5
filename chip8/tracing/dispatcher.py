"""Trace events raised by the interpreter and fanned out to observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union


class TraceEventType(Enum):
    START = "start"
    STOP = "stop"
    INSTANT = "instant"
    COUNTER = "counter"
    CALL = "call"  # 2NNN
    RETURN = "return"  # 00EE


@dataclass(frozen=True)
class TraceEvent:
    type: TraceEventType
    track: str = "CPU"
    name: str = ""
    args: Dict[str, Any] = field(default_factory=dict)


class TraceObserver(Protocol):
    def handle_event(self, event: TraceEvent) -> None: ...


class TraceDispatcher:
    """Forwards interpreter trace events to every registered observer.

    Tracks name the subsystem an event belongs to: ``CPU``, ``Display``,
    ``Input`` or ``Sound``. Subroutine calls and returns always land on
    ``CPU`` so a backend can render the call stack as nested slices.
    """

    def __init__(self) -> None:
        self._observers: List[TraceObserver] = []

    def register(self, observer: TraceObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister(self, observer: TraceObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def start_trace(self, output_path: Union[Path, str]) -> None:
        self._emit(
            TraceEvent(TraceEventType.START, args={"output_path": Path(output_path)})
        )

    def stop_trace(self) -> None:
        self._emit(TraceEvent(TraceEventType.STOP))

    def instant(self, track: str, name: str, **args: Any) -> None:
        self._emit(TraceEvent(TraceEventType.INSTANT, track, name, args))

    def counter(self, name: str, value: float) -> None:
        self._emit(TraceEvent(TraceEventType.COUNTER, name=name, args={"value": value}))

    def subroutine_call(self, target: int, caller: int) -> None:
        self._emit(
            TraceEvent(
                TraceEventType.CALL,
                name=f"sub_{target:03X}",
                args={"pc": target, "caller_pc": caller},
            )
        )

    def subroutine_return(self, pc: int) -> None:
        self._emit(TraceEvent(TraceEventType.RETURN, args={"pc": pc}))

    def _emit(self, event: TraceEvent) -> None:
        for observer in tuple(self._observers):
            observer.handle_event(event)


trace_dispatcher = TraceDispatcher()

__all__ = [
    "TraceDispatcher",
    "TraceEvent",
    "TraceEventType",
    "TraceObserver",
    "trace_dispatcher",
]
