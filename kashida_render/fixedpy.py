# this_file: kashida_render/fixedpy.py
"""
Deterministic shaper: one glyph per character, no contextual forms.

Useful to drive the compositor and line renderer without HarfBuzz. Axis
variations are accepted but do not change advances; the spacing control is
honored exactly like the HarfBuzz shaper does.
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence

from .base import BaseShaper, FontLoadError, GlyphRecord, MissingSpaceGlyphError, Variation


class FixedShaper(BaseShaper):
    engine = "fixed"

    def __init__(
        self,
        cmap: Mapping[int, int],
        advances: Mapping[int, int],
        *,
        rtl: bool = False,
    ):
        if ord(" ") not in cmap:
            raise MissingSpaceGlyphError("Font has no nominal glyph for U+0020")
        self.cmap = dict(cmap)
        self.advances = dict(advances)
        self.rtl = rtl

    @classmethod
    def load(cls, font_data: bytes, *, rtl: bool = False) -> FixedShaper:
        """Read the character map and horizontal metrics with fontTools."""
        from fontTools.ttLib import TTFont

        try:
            font = TTFont(io.BytesIO(font_data))
            best = font.getBestCmap() or {}
            metrics = font["hmtx"].metrics
        except Exception as exc:
            raise FontLoadError(f"fontTools could not parse the font data: {exc}") from exc

        cmap = {cp: font.getGlyphID(name) for cp, name in best.items()}
        advances = {font.getGlyphID(name): adv for name, (adv, _lsb) in metrics.items()}
        return cls(cmap, advances, rtl=rtl)

    def shape(
        self,
        text: str,
        variations: Sequence[Variation] = (),
        *,
        start: int = 0,
        end: int | None = None,
    ) -> list[GlyphRecord]:
        data = text.encode("utf-8")
        if end is None:
            end = len(data)
        if end <= start:
            return []

        records = []
        cluster = start
        for char in data[start:end].decode("utf-8"):
            glyph_id = self.cmap.get(ord(char), 0)
            records.append(
                GlyphRecord(
                    glyph_id=glyph_id,
                    cluster=cluster,
                    x_advance=self.advances.get(glyph_id, 0),
                    y_advance=0,
                    x_offset=0,
                    y_offset=0,
                )
            )
            cluster += len(char.encode("utf-8"))

        if self.rtl:
            records.reverse()

        space = self.cmap[ord(" ")]
        return self._apply_spacing(records, space, self.advances.get(space, 0), variations)
