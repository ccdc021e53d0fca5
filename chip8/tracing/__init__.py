"""Tracing utilities for the CHIP-8 interpreter."""

from .dispatcher import (
    TraceDispatcher,
    TraceEvent,
    TraceEventType,
    TraceObserver,
    trace_dispatcher,
)

# Registers the Perfetto writer with the dispatcher.
from . import perfetto_tracing  # noqa: F401

__all__ = [
    "TraceDispatcher",
    "TraceEvent",
    "TraceEventType",
    "TraceObserver",
    "trace_dispatcher",
]
