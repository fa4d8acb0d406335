# this_file: kashida_render/compositor.py
"""
Shared RGBA canvas and the per-line compositor.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from .base import CanvasSizeError, Colored, Monochrome

if TYPE_CHECKING:
    from .document import RenderConfig

Color = tuple[int, int, int, int]


class Canvas:
    """
    Byte-per-channel RGBA pixel buffer, shape ``(height, width, 4)``.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            raise ValueError("Canvas pixels must be a (height, width, 4) uint8 array")
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int, background: Color) -> Canvas:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = background
        return cls(pixels)

    @classmethod
    def for_lines(cls, config: RenderConfig, line_count: int) -> Canvas:
        width, height = page_size(config, line_count)
        return cls.blank(width, height, config.background)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def check_fits(self, config: RenderConfig, line_count: int) -> None:
        expected = page_size(config, line_count)
        if (self.width, self.height) != expected:
            raise CanvasSizeError(
                f"Canvas is {self.width}x{self.height}, "
                f"{line_count} lines need {expected[0]}x{expected[1]}"
            )

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def save(self, output_path: Path | str) -> None:
        """Save the canvas; the format follows the file extension."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(output_path)


def page_size(config: RenderConfig, line_count: int) -> tuple[int, int]:
    return config.width, line_count * config.line_height + 2 * config.margin


def _clip(canvas: Canvas, x: int, y: int, w: int, h: int):
    """Intersect a ``w`` x ``h`` box at ``(x, y)`` with the canvas."""
    x1 = max(0, x)
    y1 = max(0, y)
    x2 = min(canvas.width, x + w)
    y2 = min(canvas.height, y + h)
    if x2 <= x1 or y2 <= y1:
        return None
    return (slice(y1, y2), slice(x1, x2)), (slice(y1 - y, y2 - y), slice(x1 - x, x2 - x))


class Compositor:
    """
    Draws monochrome glyphs immediately and color glyphs at line end.

    Within a line, color artwork always lands on top of every outline of
    that same line.
    """

    def __init__(self, canvas: Canvas, foreground: Color):
        self.canvas = canvas
        self.foreground = np.array(foreground, dtype=np.float32)
        self.queue: list[Colored] = []

    def begin_line(self) -> None:
        self.queue.clear()

    def draw_outline(self, glyph: Monochrome, x: int, y: int) -> None:
        """Blend the foreground color into the canvas, weighted by coverage."""
        h, w = glyph.mask.shape
        clipped = _clip(self.canvas, x, y, w, h)
        if clipped is None:
            return
        dst, src = clipped

        weight = np.clip(glyph.mask[src], 0.0, 1.0)[:, :, np.newaxis]
        existing = self.canvas.pixels[dst].astype(np.float32)
        blended = self.foreground * weight + existing * (1.0 - weight)
        self.canvas.pixels[dst] = np.rint(blended).astype(np.uint8)

    def queue_color(self, image: Colored, x: int, y: int) -> None:
        self.queue.append(Colored(image.bitmap, x, y))

    def end_line(self) -> None:
        """Overlay queued color images in insertion order, then forget them."""
        for image in self.queue:
            self._overlay(image)
        self.queue.clear()

    def _overlay(self, image: Colored) -> None:
        h, w = image.bitmap.shape[:2]
        clipped = _clip(self.canvas, image.x, image.y, w, h)
        if clipped is None:
            return
        dst, src = clipped

        top = image.bitmap[src].astype(np.float32) / 255.0
        bottom = self.canvas.pixels[dst].astype(np.float32) / 255.0
        top_a = top[:, :, 3:]
        bottom_a = bottom[:, :, 3:]

        # Source-over on straight (non-premultiplied) alpha
        out_a = top_a + bottom_a * (1.0 - top_a)
        out_rgb = top[:, :, :3] * top_a + bottom[:, :, :3] * bottom_a * (1.0 - top_a)
        out_rgb = np.divide(out_rgb, out_a, out=np.zeros_like(out_rgb), where=out_a > 0)

        out = np.concatenate([out_rgb, out_a], axis=2)
        self.canvas.pixels[dst] = np.rint(out * 255.0).astype(np.uint8)
