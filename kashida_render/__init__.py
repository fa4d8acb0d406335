"""
Rendering of pre-justified Arabic calligraphic lines.

Each line is shaped with HarfBuzz at its own stretch (kashida) and spacing
values, rasterized with FreeType, and composited onto a shared RGBA
canvas. Glyphs with SVG color artwork are overlaid after the line's
outlines.
"""

from __future__ import annotations

from .base import (
    BaseGlyphSource,
    BaseShaper,
    CanvasSizeError,
    Colored,
    FontLoadError,
    GlyphRecord,
    LineRangeError,
    MissingSpaceGlyphError,
    Monochrome,
    PixelBounds,
    RenderError,
    Variation,
)
from .compositor import Canvas, Compositor
from .constants import BASE_STRETCH, FONT_SIZE, IMG_WIDTH, LINE_HEIGHT, MARGIN
from .document import FontResources, RenderConfig, load_lines, output_name, render_document
from .fixedpy import FixedShaper
from .freetypepy import FreeTypeGlyphSource
from .harfbuzzpy import HarfBuzzShaper
from .line import LineInput, LineRenderer, line_variations, render_line

__version__ = "0.1.0"

__all__ = [
    "BaseGlyphSource",
    "BaseShaper",
    "Canvas",
    "CanvasSizeError",
    "Colored",
    "Compositor",
    "FixedShaper",
    "FontLoadError",
    "FontResources",
    "FreeTypeGlyphSource",
    "GlyphRecord",
    "HarfBuzzShaper",
    "LineInput",
    "LineRangeError",
    "LineRenderer",
    "MissingSpaceGlyphError",
    "Monochrome",
    "PixelBounds",
    "RenderConfig",
    "RenderError",
    "Variation",
    "line_variations",
    "load_lines",
    "output_name",
    "render_document",
    "render_line",
    "BASE_STRETCH",
    "FONT_SIZE",
    "IMG_WIDTH",
    "LINE_HEIGHT",
    "MARGIN",
]
