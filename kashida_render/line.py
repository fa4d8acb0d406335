# this_file: kashida_render/line.py
"""
Rendering of one justified line onto the shared canvas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import Colored, LineRangeError, Variation
from .compositor import Canvas, Compositor
from .constants import STRETCH_AXIS

if TYPE_CHECKING:
    from .document import FontResources, RenderConfig


@dataclass(frozen=True)
class LineInput:
    """
    A line as computed by the justification solver.

    ``start`` and ``end`` are UTF-8 byte offsets into the source text;
    ``stretch`` and ``spacing`` are the axis values that justify it.
    """

    start: int
    end: int
    stretch: float
    spacing: float


def line_variations(line: LineInput, stretch_tag: str = STRETCH_AXIS) -> list[Variation]:
    return [Variation.axis(stretch_tag, line.stretch), Variation.spacing(line.spacing)]


def _is_char_boundary(data: bytes, offset: int) -> bool:
    return offset == len(data) or (data[offset] & 0xC0) != 0x80


class LineRenderer:
    """
    Shapes a line in context and composites its glyphs.

    Args:
        text: Full source text the line records index into
        resources: Shaper and glyph source loaded from the same font
        config: Page layout and colors
    """

    def __init__(self, text: str, resources: FontResources, config: RenderConfig):
        self.text = text
        self.data = text.encode("utf-8")
        self.resources = resources
        self.config = config

    def byte_range(self, line: LineInput, is_last: bool) -> tuple[int, int]:
        """Validate the line's range; the last line loses its trailing whitespace."""
        start, end = line.start, line.end
        if not 0 <= start <= end <= len(self.data):
            raise LineRangeError(
                f"Line range [{start}, {end}) outside text of {len(self.data)} bytes"
            )
        if not (_is_char_boundary(self.data, start) and _is_char_boundary(self.data, end)):
            raise LineRangeError(f"Line range [{start}, {end}) splits a UTF-8 character")

        if is_last:
            kept = self.data[start:end].decode("utf-8").rstrip()
            end = start + len(kept.encode("utf-8"))
        return start, end

    def render(self, line: LineInput, index: int, is_last: bool, canvas: Canvas) -> None:
        """
        Draw line ``index`` into ``canvas``.

        Non-last lines are shaped with the whole text as context, so their
        first visual glyph is the separator carried over from the line
        break; its advance is trimmed so the ink starts at the margin.
        """
        shaper = self.resources.shaper
        glyphs = self.resources.glyphs
        config = self.config

        # Both engines must see the same instance
        variations = line_variations(line, config.stretch_tag)
        glyphs.set_variations(variations)

        start, end = self.byte_range(line, is_last)
        records = shaper.shape(self.text, variations, start=start, end=end)

        h_scale, v_scale = glyphs.scale_factor
        if is_last or not records:
            visual_trim = 0
        else:
            visual_trim = int(records[0].x_advance * h_scale)

        ascent = glyphs.ascent()
        left = config.margin - visual_trim
        top = config.margin + index * config.line_height

        compositor = Compositor(canvas, config.text_color)
        compositor.begin_line()

        caret = 0
        for record in records:
            x = (caret + record.x_offset) * h_scale
            y = ascent - record.y_offset * v_scale
            caret += record.x_advance

            resolved = glyphs.resolve(record.glyph_id, x, y)
            if resolved is None:
                # whitespace
                continue
            if isinstance(resolved, Colored):
                compositor.queue_color(resolved, resolved.x + left, resolved.y + top)
            else:
                bounds = resolved.bounds.shifted(left, top)
                compositor.draw_outline(resolved, bounds.left, bounds.top)

        compositor.end_line()


def render_line(
    line: LineInput,
    index: int,
    is_last: bool,
    canvas: Canvas,
    *,
    text: str,
    resources: FontResources,
    config: RenderConfig,
) -> None:
    """Render a single line; see ``LineRenderer.render``."""
    LineRenderer(text, resources, config).render(line, index, is_last, canvas)
