"""64x32 monochrome framebuffer with XOR sprite compositing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..constants import DISPLAY_HEIGHT, DISPLAY_WIDTH

SPRITE_WIDTH = 8


@dataclass(frozen=True)
class FrameSnapshot:
    """Immutable copy of the display handed to render observers."""

    frame_number: int
    pixels: Tuple[Tuple[bool, ...], ...]

    @property
    def width(self) -> int:
        return len(self.pixels[0]) if self.pixels else 0

    @property
    def height(self) -> int:
        return len(self.pixels)

    def pixel(self, x: int, y: int) -> bool:
        return self.pixels[y][x]

    def as_array(self) -> np.ndarray:
        """Return a fresh ``(height, width)`` bool array."""
        return np.array(self.pixels, dtype=bool)

    def lit_count(self) -> int:
        return sum(sum(row) for row in self.pixels)


class Framebuffer:
    """Display buffer indexed ``[y, x]``.

    Only :meth:`clear` and :meth:`draw_sprite` mutate it; renderers read
    snapshots.
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width), dtype=bool)
        self.draw_count = 0

    def clear(self) -> None:
        self._pixels.fill(False)

    def pixel(self, x: int, y: int) -> bool:
        return bool(self._pixels[y, x])

    def lit_count(self) -> int:
        return int(np.count_nonzero(self._pixels))

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """XOR an 8-pixel-wide sprite onto the buffer.

        The origin is taken modulo the display size and every pixel wraps
        around the edges. Returns True when at least one lit pixel was
        turned off.
        """
        x0 = x % self.width
        y0 = y % self.height
        collision = False
        for r, row_bits in enumerate(rows):
            if not row_bits:
                continue
            py = (y0 + r) % self.height
            for b in range(SPRITE_WIDTH):
                if not (row_bits >> (7 - b)) & 1:
                    continue
                px = (x0 + b) % self.width
                if self._pixels[py, px]:
                    collision = True
                    self._pixels[py, px] = False
                else:
                    self._pixels[py, px] = True
        self.draw_count += 1
        return collision

    def get_display_buffer(self) -> np.ndarray:
        """Return a copy of the buffer as a ``uint8`` array of 0/1."""
        return self._pixels.astype(np.uint8)

    def snapshot(self, frame_number: int = 0) -> FrameSnapshot:
        return FrameSnapshot(
            frame_number=frame_number,
            pixels=tuple(tuple(bool(v) for v in row) for row in self._pixels),
        )


__all__ = ["Framebuffer", "FrameSnapshot", "SPRITE_WIDTH"]
