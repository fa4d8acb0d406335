# this_file: kashida_render/base.py
"""
Base abstractions for shaping and glyph-resolution backends.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np


class RenderError(RuntimeError):
    """Base class for errors that abort a rendering run."""


class FontLoadError(RenderError):
    """Raised when font bytes cannot be parsed by one of the engines."""


class MissingSpaceGlyphError(RenderError):
    """Raised when the font has no nominal glyph for U+0020."""


class CanvasSizeError(RenderError):
    """Raised when the canvas does not match the computed page size."""


class LineRangeError(RenderError):
    """Raised when a line record points outside the source text."""


@dataclass(frozen=True)
class Variation:
    """
    One typographic control applied before shaping and outlining.

    A variation with a ``tag`` is a real font axis. Without one it is the
    virtual spacing control, which only shapers understand.
    """

    value: float
    tag: str | None = None

    @classmethod
    def axis(cls, tag: str, value: float) -> Variation:
        if len(tag) != 4:
            raise ValueError(f"Axis tag must be 4 characters, got {tag!r}")
        return cls(float(value), tag)

    @classmethod
    def spacing(cls, value: float) -> Variation:
        return cls(float(value))

    @property
    def is_spacing(self) -> bool:
        return self.tag is None


def axis_coords(variations: Iterable[Variation]) -> dict[str, float]:
    """Map axis tags to values, ignoring the virtual spacing control."""
    return {v.tag: v.value for v in variations if v.tag is not None}


def spacing_value(variations: Iterable[Variation]) -> float | None:
    for v in variations:
        if v.is_spacing:
            return v.value
    return None


@dataclass(frozen=True)
class GlyphRecord:
    """A shaped glyph in font design units, in visual order."""

    glyph_id: int
    cluster: int
    x_advance: int
    y_advance: int
    x_offset: int
    y_offset: int


@dataclass(frozen=True)
class PixelBounds:
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def shifted(self, dx: int, dy: int) -> PixelBounds:
        return dataclasses.replace(self, left=self.left + dx, top=self.top + dy)


@dataclass(frozen=True, eq=False)
class Monochrome:
    """Coverage mask (float weights, shape ``(height, width)``) with its pixel box."""

    mask: np.ndarray
    bounds: PixelBounds


@dataclass(frozen=True, eq=False)
class Colored:
    """Full-color RGBA bitmap (uint8, shape ``(height, width, 4)``) and its top-left origin."""

    bitmap: np.ndarray
    x: int
    y: int


class BaseShaper(ABC):
    """
    Abstract base class for shaping backends.
    """

    engine: str = "base"

    @classmethod
    @abstractmethod
    def load(cls, font_data: bytes) -> BaseShaper:
        """
        Build a shaper from raw font bytes.

        Raises:
            FontLoadError: If the font cannot be parsed
        """

    @abstractmethod
    def shape(
        self,
        text: str,
        variations: Sequence[Variation] = (),
        *,
        start: int = 0,
        end: int | None = None,
    ) -> list[GlyphRecord]:
        """
        Shape the UTF-8 byte range ``[start, end)`` of ``text``.

        The rest of ``text`` is context only: no glyphs are returned for it,
        but it decides joining forms at the range edges. Clusters are byte
        offsets into ``text``.
        """

    def _apply_spacing(
        self,
        records: list[GlyphRecord],
        space_id: int,
        space_advance: int,
        variations: Sequence[Variation],
    ) -> list[GlyphRecord]:
        """Replace the advance of every space glyph by the scaled nominal advance."""
        factor = spacing_value(variations)
        if factor is None:
            return records
        advance = int(round(space_advance * factor))
        return [
            dataclasses.replace(r, x_advance=advance) if r.glyph_id == space_id else r
            for r in records
        ]


class BaseGlyphSource(ABC):
    """
    Abstract base class for the outline/metrics engine.

    Positions passed to ``outline`` are in pixels relative to the line's
    top-left corner, y growing downwards.
    """

    engine: str = "base"

    @abstractmethod
    def set_variations(self, variations: Sequence[Variation]) -> None:
        """Instance the font at the given axes. Spacing entries are ignored."""

    @property
    @abstractmethod
    def scale_factor(self) -> tuple[float, float]:
        """Pixels per font unit, ``(horizontal, vertical)``."""

    @abstractmethod
    def ascent(self) -> float:
        """Ascent in pixels at the current instance."""

    @abstractmethod
    def outline(self, glyph_id: int, x: float, y: float) -> Monochrome | None:
        """Rasterize the glyph outline, or return None for an empty glyph."""

    def color_image(self, glyph_id: int, bounds: PixelBounds) -> Colored | None:
        """Return full-color artwork fitted to ``bounds``, if the font has any."""
        return None

    def resolve(self, glyph_id: int, x: float, y: float) -> Monochrome | Colored | None:
        """
        Decide once how a glyph is drawn.

        Color artwork wins when it can be produced; otherwise the outline is
        used. Glyphs without an outline are invisible and resolve to None.
        """
        outline = self.outline(glyph_id, x, y)
        if outline is None:
            return None
        colored = self.color_image(glyph_id, outline.bounds)
        return colored if colored is not None else outline
