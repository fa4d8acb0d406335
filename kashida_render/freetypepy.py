# this_file: kashida_render/freetypepy.py
"""
Glyph source using FreeType for outlines and metrics.

Color artwork comes from the font's SVG table (see ``svgglyphs``).
"""

from __future__ import annotations

import io
import math
from collections.abc import Sequence

import numpy as np

from .base import (
    BaseGlyphSource,
    Colored,
    FontLoadError,
    Monochrome,
    PixelBounds,
    RenderError,
    Variation,
    axis_coords,
)
from .constants import FONT_SIZE, PX_PER_PT
from .svgglyphs import SvgGlyphImages

try:
    from freetype import FT_LOAD_NO_BITMAP, FT_LOAD_NO_HINTING, FT_LOAD_RENDER, Face, FT_Exception
    from freetype.ft_structs import FT_Matrix, FT_Vector
    from freetype.raw import FT_Fixed, FT_Set_Var_Design_Coordinates
except ImportError as exc:  # pragma: no cover - raised by the constructor
    FT_IMPORT_ERROR: ImportError | None = exc
else:
    FT_IMPORT_ERROR = None

_IDENTITY = 0x10000


class FreeTypeGlyphSource(BaseGlyphSource):
    """
    Outline engine kept in lockstep with the shaper through ``set_variations``.
    """

    engine = "freetype"

    def __init__(self, font_data: bytes, *, font_size: float = FONT_SIZE):
        if FT_IMPORT_ERROR:
            raise FontLoadError(
                f"freetype glyph source unavailable: {FT_IMPORT_ERROR}"
            ) from FT_IMPORT_ERROR

        try:
            self.ft_face = Face(io.BytesIO(font_data))
        except FT_Exception as exc:
            raise FontLoadError(f"FreeType could not parse the font data: {exc}") from exc

        self.font_size = float(font_size)
        self.load_flags = FT_LOAD_RENDER | FT_LOAD_NO_HINTING | FT_LOAD_NO_BITMAP
        self.instance_coords: dict[str, float] = {}
        self._set_size()
        self.svg_images = SvgGlyphImages.from_font_data(font_data)

    def _set_size(self) -> None:
        # 96 dpi so that one point maps to PX_PER_PT pixels
        self.ft_face.set_char_size(0, int(round(self.font_size * 64)), 96, 96)

    def variation_axes(self) -> list[tuple[str, float, float, float]]:
        """List ``(tag, minimum, default, maximum)`` for every variation axis."""
        if not self.ft_face.has_multiple_masters:
            return []
        info = self.ft_face.get_variation_info()
        return [(axis.tag, axis.minimum, axis.default, axis.maximum) for axis in info.axes]

    def set_variations(self, variations: Sequence[Variation]) -> None:
        self.instance_coords = axis_coords(variations)
        self._apply_variations_to_freetype()
        # Size metrics are derived from the instance
        self._set_size()

    def _apply_variations_to_freetype(self) -> None:
        if not self.ft_face.has_multiple_masters:
            return
        variation_info = self.ft_face.get_variation_info()
        if not variation_info or not variation_info.axes:
            return

        # Coordinates in the font's axis order, 16.16 fixed point
        coords = []
        for axis in variation_info.axes:
            user_coord = self.instance_coords.get(axis.tag, axis.default)
            coords.append(FT_Fixed(int(round(user_coord * 65536))))

        ft_coords = (FT_Fixed * len(coords))(*coords)
        FT_Set_Var_Design_Coordinates(self.ft_face._FT_Face, len(ft_coords), ft_coords)

    @property
    def scale_factor(self) -> tuple[float, float]:
        scale = self.font_size * PX_PER_PT / self.ft_face.units_per_EM
        return scale, scale

    def ascent(self) -> float:
        return self.ft_face.ascender * self.scale_factor[1]

    def outline(self, glyph_id: int, x: float, y: float) -> Monochrome | None:
        """
        Rasterize a glyph with its origin at ``(x, y)``.

        The fractional part of the position is applied as a FreeType
        transform so sub-pixel placement survives rasterization.
        """
        ix = math.floor(x)
        iy = math.floor(y)
        # FreeType's y axis points up
        delta = FT_Vector(int(round((x - ix) * 64)), int(round((iy - y) * 64)))
        self.ft_face.set_transform(FT_Matrix(_IDENTITY, 0, 0, _IDENTITY), delta)

        try:
            self.ft_face.load_glyph(glyph_id, self.load_flags)
        except FT_Exception as exc:
            raise RenderError(f"Failed to load glyph {glyph_id}: {exc}") from exc

        glyph = self.ft_face.glyph
        bitmap = glyph.bitmap
        if not (bitmap.buffer and bitmap.width > 0 and bitmap.rows > 0):
            return None

        pitch = abs(bitmap.pitch)
        coverage = np.array(bitmap.buffer, dtype=np.uint8).reshape(bitmap.rows, pitch)
        mask = coverage[:, : bitmap.width].astype(np.float32) / 255.0

        bounds = PixelBounds(
            left=ix + glyph.bitmap_left,
            top=iy - glyph.bitmap_top,
            width=bitmap.width,
            height=bitmap.rows,
        )
        return Monochrome(mask, bounds)

    def color_image(self, glyph_id: int, bounds: PixelBounds) -> Colored | None:
        if self.svg_images is None:
            return None
        return self.svg_images.render(glyph_id, bounds)
