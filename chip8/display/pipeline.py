"""Frame publication to render-bridge observers."""

from __future__ import annotations

from typing import Callable, List, Optional

from .framebuffer import Framebuffer, FrameSnapshot

FrameObserver = Callable[[FrameSnapshot], None]


class FramePipeline:
    """Publish one framebuffer snapshot per 60 Hz tick."""

    def __init__(self, framebuffer: Framebuffer):
        self._framebuffer = framebuffer
        self._observers: List[FrameObserver] = []
        self._last: Optional[FrameSnapshot] = None

    @property
    def last_frame(self) -> Optional[FrameSnapshot]:
        return self._last

    def subscribe(self, observer: FrameObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: FrameObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def has_observers(self) -> bool:
        return bool(self._observers)

    def publish(self, frame_number: int) -> FrameSnapshot:
        snap = self._framebuffer.snapshot(frame_number)
        self._last = snap
        for observer in tuple(self._observers):
            observer(snap)
        return snap

    def reset(self) -> None:
        self._last = None


__all__ = ["FrameObserver", "FramePipeline"]
