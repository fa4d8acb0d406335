# this_file: kashida_render/harfbuzzpy.py
"""
Shaper using HarfBuzz, with a virtual spacing control on the space glyph.
"""

from __future__ import annotations

from collections.abc import Sequence

from .base import (
    BaseShaper,
    FontLoadError,
    GlyphRecord,
    MissingSpaceGlyphError,
    Variation,
    axis_coords,
)

try:
    import uharfbuzz as hb
except ImportError as exc:  # pragma: no cover - raised by the constructor
    HB_IMPORT_ERROR: ImportError | None = exc
else:
    HB_IMPORT_ERROR = None


class HarfBuzzShaper(BaseShaper):
    """
    Production shaper. Advances are in font units (the font scale is set to upem).
    """

    engine = "harfbuzz"

    def __init__(self, font_data: bytes):
        if HB_IMPORT_ERROR:
            raise FontLoadError(
                f"harfbuzz shaper unavailable: {HB_IMPORT_ERROR}"
            ) from HB_IMPORT_ERROR

        self.hb_blob = hb.Blob(font_data)
        self.hb_face = hb.Face(self.hb_blob)
        # HarfBuzz accepts anything and yields an empty face
        if self.hb_face.glyph_count == 0:
            raise FontLoadError("HarfBuzz could not parse the font data")

        self.hb_font = hb.Font(self.hb_face)
        upem = self.hb_face.upem
        self.hb_font.scale = (upem, upem)
        self._space_metrics()

    @classmethod
    def load(cls, font_data: bytes) -> HarfBuzzShaper:
        return cls(font_data)

    def _space_metrics(self) -> tuple[int, int]:
        # Re-read every call: the stretch axis can change the space advance
        space = self.hb_font.get_nominal_glyph(ord(" "))
        if space is None:
            raise MissingSpaceGlyphError("Font has no nominal glyph for U+0020")
        return space, self.hb_font.get_glyph_h_advance(space)

    def shape(
        self,
        text: str,
        variations: Sequence[Variation] = (),
        *,
        start: int = 0,
        end: int | None = None,
    ) -> list[GlyphRecord]:
        """
        Shape a byte range of ``text`` with the whole text as context.

        Args:
            text: Full source text
            variations: Axis values and optional spacing factor
            start: First byte of the range
            end: End byte of the range (defaults to the end of the text)

        Returns:
            Glyph records in visual order
        """
        data = text.encode("utf-8")
        if end is None:
            end = len(data)

        self.hb_font.set_variations(axis_coords(variations))
        space, space_advance = self._space_metrics()

        if end <= start:
            return []

        buf = hb.Buffer()
        buf.add_utf8(data, item_offset=start, item_length=end - start)
        buf.guess_segment_properties()
        hb.shape(self.hb_font, buf)

        infos = buf.glyph_infos
        positions = buf.glyph_positions
        # HarfBuzz returns None for positions when the buffer is empty
        if not infos or positions is None:
            return []

        records = [
            GlyphRecord(
                glyph_id=info.codepoint,
                cluster=info.cluster,
                x_advance=pos.x_advance,
                y_advance=pos.y_advance,
                x_offset=pos.x_offset,
                y_offset=pos.y_offset,
            )
            for info, pos in zip(infos, positions)
            if start <= info.cluster < end
        ]
        return self._apply_spacing(records, space, space_advance, variations)
