"""Display subsystem for the CHIP-8 interpreter."""

from .framebuffer import Framebuffer, FrameSnapshot, SPRITE_WIDTH
from .pipeline import FrameObserver, FramePipeline
from .image import render_ascii, save_snapshot_png, snapshot_to_image

__all__ = [
    # Framebuffer
    "Framebuffer",
    "FrameSnapshot",
    "SPRITE_WIDTH",
    # Publication
    "FrameObserver",
    "FramePipeline",
    # Debug rendering
    "render_ascii",
    "save_snapshot_png",
    "snapshot_to_image",
]
