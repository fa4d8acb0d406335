# this_file: tests/conftest.py

"""Shared fixtures: a fake glyph source and a deterministic shaper."""

import io
import math

import numpy as np
import pytest

from kashida_render import (
    BaseGlyphSource,
    Colored,
    FixedShaper,
    FontResources,
    Monochrome,
    PixelBounds,
    RenderConfig,
)

SPACE, ALEF, BEH = 1, 2, 3

FG = (255, 255, 255, 255)
BG = (0, 0, 0, 255)
RED = (255, 0, 0, 255)


class BoxGlyphSource(BaseGlyphSource):
    """
    Draws each glyph as a solid box standing on the baseline at the pen.

    Args:
        boxes: glyph id -> (width, height) in pixels; missing ids are empty
        colors: glyph id -> RGBA color for glyphs with color artwork
        scale: pixels per font unit
        ascent: baseline offset from the line top, in pixels
    """

    engine = "boxes"

    def __init__(self, boxes, colors=None, scale=1.0, ascent=40.0):
        self.boxes = dict(boxes)
        self.colors = dict(colors or {})
        self.scale = scale
        self._ascent = ascent
        self.variation_log = []
        self.color_requests = []

    def set_variations(self, variations):
        self.variation_log.append(list(variations))

    @property
    def scale_factor(self):
        return self.scale, self.scale

    def ascent(self):
        return self._ascent

    def outline(self, glyph_id, x, y):
        if glyph_id not in self.boxes:
            return None
        width, height = self.boxes[glyph_id]
        bounds = PixelBounds(math.floor(x), math.floor(y) - height, width, height)
        return Monochrome(np.ones((height, width), dtype=np.float32), bounds)

    def color_image(self, glyph_id, bounds):
        self.color_requests.append((glyph_id, bounds))
        if glyph_id not in self.colors:
            return None
        bitmap = np.empty((bounds.height, bounds.width, 4), dtype=np.uint8)
        bitmap[:, :] = self.colors[glyph_id]
        return Colored(bitmap, bounds.left, bounds.top)


@pytest.fixture
def shaper():
    """Right-to-left shaper: ' ' is 10 units wide, 'A' 20, 'B' 30."""
    return FixedShaper(
        {ord(" "): SPACE, ord("A"): ALEF, ord("B"): BEH},
        {SPACE: 10, ALEF: 20, BEH: 30},
        rtl=True,
    )


@pytest.fixture
def glyphs():
    return BoxGlyphSource({ALEF: (20, 30), BEH: (30, 20)})


@pytest.fixture
def resources(shaper, glyphs):
    return FontResources(shaper, glyphs)


@pytest.fixture
def config():
    return RenderConfig(
        width=200,
        line_height=50,
        margin=10,
        font_size=12.0,
        text_color=FG,
        background=BG,
    )


def ink_columns(canvas, top, bottom, background=BG):
    """Columns holding any non-background pixel within rows [top, bottom)."""
    rows = canvas.pixels[top:bottom]
    inked = np.any(rows != np.array(background, dtype=np.uint8), axis=2)
    return np.flatnonzero(inked.any(axis=0))


STRETCH_RANGE = (0.0, 100.0)


def _rect_glyph(x0, y0, x1, y1):
    from fontTools.pens.ttGlyphPen import TTGlyphPen

    pen = TTGlyphPen(None)
    pen.moveTo((x0, y0))
    pen.lineTo((x1, y0))
    pen.lineTo((x1, y1))
    pen.lineTo((x0, y1))
    pen.closePath()
    return pen.glyph()


def _font_builder():
    from fontTools.fontBuilder import FontBuilder
    from fontTools.pens.ttGlyphPen import TTGlyphPen

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "space", "A", "B"])
    fb.setupCharacterMap({0x20: "space", 0x41: "A", 0x42: "B"})
    fb.setupGlyf(
        {
            ".notdef": _rect_glyph(100, 0, 900, 800),
            "space": TTGlyphPen(None).glyph(),
            "A": _rect_glyph(0, 0, 400, 600),
            "B": _rect_glyph(0, 0, 500, 500),
        }
    )
    fb.setupHorizontalMetrics(
        {".notdef": (1000, 100), "space": (250, 0), "A": (500, 0), "B": (600, 0)}
    )
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupNameTable({"familyName": "Kashida Test", "styleName": "Regular"})
    fb.setupPost()
    fb.setupMaxp()
    return fb


def _save(fb):
    buf = io.BytesIO()
    fb.save(buf)
    return buf.getvalue()


def build_test_font(svg_glyphs=None):
    """
    Build a small TrueType font: space, 'A' and 'B' boxes, upem 1000.

    ``svg_glyphs`` maps glyph ids to SVG documents stored in the SVG table.
    """
    fb = _font_builder()

    if svg_glyphs:
        from fontTools.ttLib import newTable
        from fontTools.ttLib.tables.S_V_G_ import SVGDocument

        table = newTable("SVG ")
        table.docList = [
            SVGDocument(data, glyph_id, glyph_id, False)
            for glyph_id, data in sorted(svg_glyphs.items())
        ]
        fb.font["SVG "] = table

    return _save(fb)


def build_variable_font():
    """
    Build the test font with an ``MSHQ`` axis running from 0 (default) to 100.

    At 100 'A' is 800 units wide on a 900 advance, 'B' is 700 wide on 800 and
    the space advances 500. Intermediate values interpolate linearly.
    """
    from fontTools.ttLib.tables.TupleVariation import TupleVariation

    fb = _font_builder()
    low, high = STRETCH_RANGE
    fb.setupFvar(axes=[("MSHQ", low, low, high, "Stretch")], instances=[])

    def widen(dx, outline=True):
        # Rectangle corners from _rect_glyph, then the four phantom points;
        # the second phantom point carries the advance.
        points = [(0, 0), (dx, 0), (dx, 0), (0, 0)] if outline else []
        phantoms = [(0, 0), (dx, 0), (0, 0), (0, 0)]
        return [TupleVariation({"MSHQ": (0.0, 1.0, 1.0)}, points + phantoms)]

    fb.setupGvar(
        {
            ".notdef": [],
            "space": widen(250, outline=False),
            "A": widen(400),
            "B": widen(200),
        }
    )
    return _save(fb)
