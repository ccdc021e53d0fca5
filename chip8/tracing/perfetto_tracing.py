"""Perfetto trace writer fed by the interpreter's trace dispatcher."""

from __future__ import annotations

import atexit
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from retrobus_perfetto import PerfettoTraceBuilder

from .dispatcher import TraceEvent, TraceEventType, trace_dispatcher

logger = logging.getLogger(__name__)

DEFAULT_TRACE_PATH = "chip8.perfetto-trace"
TRACKS = ("CPU", "Display", "Input", "Sound")


class PerfettoTracer:
    """Record dispatcher events into a Perfetto protobuf trace.

    Timestamps are wall-clock nanoseconds since :meth:`start`. Subroutine
    calls are slices on the CPU track; slices still open when the trace
    stops are closed before the file is written. Disabled until started.
    """

    def __init__(self) -> None:
        self._builder: Optional[PerfettoTraceBuilder] = None
        self._path = DEFAULT_TRACE_PATH
        self._t0 = 0.0
        self._tracks: Dict[str, int] = {}
        self._counters: Dict[str, int] = {}
        self._call_depth = 0
        self._exit_hook = False

    @property
    def enabled(self) -> bool:
        return self._builder is not None

    @property
    def call_depth(self) -> int:
        return self._call_depth

    def start(self, path: Union[Path, str] = DEFAULT_TRACE_PATH) -> None:
        if self._builder is not None:
            return
        self._builder = PerfettoTraceBuilder("CHIP-8 Interpreter")
        self._path = str(path)
        self._t0 = time.perf_counter()
        self._tracks = {name: self._builder.add_thread(name) for name in TRACKS}
        self._counters = {}
        self._call_depth = 0
        if not self._exit_hook:
            atexit.register(self.stop)
            self._exit_hook = True
        logger.debug("Perfetto tracing started, output=%s", self._path)

    def stop(self) -> None:
        """Close open call slices and write the trace file."""
        builder = self._builder
        if builder is None:
            return
        cpu = self._track("CPU")
        for _ in range(self._call_depth):
            builder.end_slice(cpu, self._now())
        self._builder = None
        self._call_depth = 0
        builder.save(self._path)
        logger.info("Perfetto trace saved to %s", self._path)

    def _now(self) -> int:
        return int((time.perf_counter() - self._t0) * 1_000_000_000)

    def _track(self, name: str) -> int:
        if name not in self._tracks:
            self._tracks[name] = self._builder.add_thread(name)
        return self._tracks[name]

    # ---- Event APIs ----

    def instant(
        self, track: str, name: str, args: Optional[Dict[str, Any]] = None
    ) -> None:
        if self._builder is None:
            return
        event = self._builder.add_instant_event(self._track(track), name, self._now())
        if args:
            event.add_annotations(args)

    def counter(self, name: str, value: float) -> None:
        if self._builder is None:
            return
        if name not in self._counters:
            self._counters[name] = self._builder.add_counter_track(name, "count")
        self._builder.update_counter(self._counters[name], value, self._now())

    def begin_call(self, name: str, args: Optional[Dict[str, Any]] = None) -> None:
        if self._builder is None:
            return
        self._call_depth += 1
        event = self._builder.begin_slice(self._track("CPU"), name, self._now())
        if args:
            event.add_annotations(args)

    def end_call(self) -> None:
        # A return without a traced call happens when tracing began mid-subroutine.
        if self._builder is None or self._call_depth == 0:
            return
        self._call_depth -= 1
        self._builder.end_slice(self._track("CPU"), self._now())

    def handle_event(self, event: TraceEvent) -> None:
        if event.type == TraceEventType.START:
            self.start(event.args["output_path"])
        elif event.type == TraceEventType.STOP:
            self.stop()
        elif event.type == TraceEventType.INSTANT:
            self.instant(event.track, event.name, event.args)
        elif event.type == TraceEventType.COUNTER:
            self.counter(event.name, event.args["value"])
        elif event.type == TraceEventType.CALL:
            self.begin_call(event.name, event.args)
        elif event.type == TraceEventType.RETURN:
            self.end_call()


tracer = PerfettoTracer()
trace_dispatcher.register(tracer)
