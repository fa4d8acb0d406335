# this_file: kashida_render/document.py
"""
Driver: renders every line of a justified document onto one canvas.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .base import BaseGlyphSource, BaseShaper, LineRangeError
from .compositor import Canvas, Color
from .constants import (
    BKG_COLOR,
    FONT_SIZE,
    IMG_WIDTH,
    LINE_HEIGHT,
    MARGIN,
    STRETCH_AXIS,
    TXT_COLOR,
)
from .freetypepy import FreeTypeGlyphSource
from .harfbuzzpy import HarfBuzzShaper
from .line import LineInput, LineRenderer

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    """Page layout, type size and colors for one document."""

    width: int = IMG_WIDTH
    line_height: int = LINE_HEIGHT
    margin: int = MARGIN
    font_size: float = FONT_SIZE
    text_color: Color = TXT_COLOR
    background: Color = BKG_COLOR
    stretch_tag: str = STRETCH_AXIS

    def scaled(self, factor: int) -> RenderConfig:
        """Multiply every pixel dimension and the font size by ``factor``."""
        return dataclasses.replace(
            self,
            width=self.width * factor,
            line_height=self.line_height * factor,
            margin=self.margin * factor,
            font_size=self.font_size * factor,
        )


@dataclass
class FontResources:
    """The two engines that must agree on every instance of the font."""

    shaper: BaseShaper
    glyphs: BaseGlyphSource

    @classmethod
    def from_bytes(
        cls,
        font_data: bytes,
        font_size: float = FONT_SIZE,
        shaper: type[BaseShaper] = HarfBuzzShaper,
    ) -> FontResources:
        """
        Load both engines from the same font bytes.

        Raises:
            FontLoadError: If either engine rejects the font
            MissingSpaceGlyphError: If the font cannot shape a space
        """
        return cls(shaper.load(font_data), FreeTypeGlyphSource(font_data, font_size=font_size))

    @classmethod
    def from_path(
        cls,
        font_path: Path | str,
        font_size: float = FONT_SIZE,
        shaper: type[BaseShaper] = HarfBuzzShaper,
    ) -> FontResources:
        with open(font_path, "rb") as f:
            font_data = f.read()
        return cls.from_bytes(font_data, font_size, shaper)


def load_lines(path: Path | str) -> list[LineInput]:
    """
    Read line records written by the justification solver.

    The file holds a JSON array of ``{"start", "end", "stretch", "spacing"}``
    objects, in page order.
    """
    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list):
        raise LineRangeError(f"{path}: expected a JSON array of line records")

    lines = []
    for i, record in enumerate(records):
        try:
            lines.append(
                LineInput(
                    start=int(record["start"]),
                    end=int(record["end"]),
                    stretch=float(record["stretch"]),
                    spacing=float(record["spacing"]),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise LineRangeError(f"{path}: line record {i} is malformed: {exc}") from exc
    return lines


def render_document(
    text: str,
    lines: Sequence[LineInput],
    resources: FontResources,
    config: RenderConfig | None = None,
    canvas: Canvas | None = None,
) -> Canvas:
    """
    Render ``lines`` in order onto a canvas sized for them.

    Args:
        text: Source text the line records index into
        lines: Line records, top to bottom
        resources: Font engines
        config: Layout; defaults to ``RenderConfig()``
        canvas: Existing canvas to draw on; must match the page size

    Returns:
        The canvas holding every line
    """
    config = config or RenderConfig()
    if canvas is None:
        canvas = Canvas.for_lines(config, len(lines))
    else:
        canvas.check_fits(config, len(lines))

    _LOGGER.info(
        "Rendering %d lines on a %dx%d canvas with %s/%s",
        len(lines),
        canvas.width,
        canvas.height,
        resources.shaper.engine,
        resources.glyphs.engine,
    )

    renderer = LineRenderer(text, resources, config)
    last = len(lines) - 1
    for index, line in enumerate(lines):
        renderer.render(line, index, index == last, canvas)

    _LOGGER.info("Rendered %d lines", len(lines))
    return canvas


def output_name(stem: str, base_stretch: float) -> str:
    return f"{stem}_{base_stretch:.0f}.png"
