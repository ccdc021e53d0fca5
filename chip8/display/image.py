"""Debug renderings of frame snapshots (PIL images and ASCII)."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image

from .framebuffer import FrameSnapshot

Color = Tuple[int, int, int]

ON_COLOR: Color = (50, 255, 100)  # Green
OFF_COLOR: Color = (20, 30, 40)  # Dark blue/gray


def snapshot_to_image(
    snapshot: FrameSnapshot,
    zoom: int = 1,
    on_color: Color = ON_COLOR,
    off_color: Color = OFF_COLOR,
) -> Image.Image:
    """Convert a snapshot into an RGB image.

    Args:
        snapshot: Frame to render.
        zoom: Integer scale factor applied to both axes.
        on_color: RGB for lit pixels.
        off_color: RGB for dark pixels.

    Returns:
        PIL Image of size ``(width * zoom, height * zoom)``.
    """
    if zoom < 1:
        raise ValueError(f"zoom must be >= 1, got {zoom}")

    mask = snapshot.as_array()
    rgb = np.empty(mask.shape + (3,), dtype=np.uint8)
    rgb[...] = off_color
    rgb[mask] = on_color
    if zoom > 1:
        rgb = rgb.repeat(zoom, axis=0).repeat(zoom, axis=1)
    return Image.fromarray(rgb)


def save_snapshot_png(
    snapshot: FrameSnapshot, path: Union[str, Path], zoom: int = 4
) -> Path:
    out = Path(path)
    snapshot_to_image(snapshot, zoom=zoom).save(out)
    return out


def render_ascii(snapshot: FrameSnapshot, on: str = "#", off: str = ".") -> str:
    return "\n".join(
        "".join(on if lit else off for lit in row) for row in snapshot.pixels
    )


__all__ = [
    "OFF_COLOR",
    "ON_COLOR",
    "render_ascii",
    "save_snapshot_png",
    "snapshot_to_image",
]
