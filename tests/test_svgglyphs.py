# this_file: tests/test_svgglyphs.py

"""Unit tests for SVG color glyph extraction."""

import xml.etree.ElementTree as ET

import pytest

from kashida_render import PixelBounds
from kashida_render import svgglyphs
from kashida_render.svgglyphs import SvgGlyphImages, isolate_node

SHARED_DOC = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    '<g id="glyph3"><rect x="0" y="-500" width="400" height="500" fill="#ff0000"/></g>'
    '<g id="glyph4"><rect x="0" y="-500" width="400" height="500" fill="#00ff00"/></g>'
    '<g id="glyph5"/>'
    "</svg>"
)

DEFS_DOC = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
    '<defs><rect id="box" x="0" y="-500" width="400" height="500" fill="#0000ff"/></defs>'
    '<rect x="-1500" y="-1500" width="100" height="100" fill="#00ff00"/>'
    '<g id="glyph3"><use xlink:href="#box"/></g>'
    "</svg>"
)

BOUNDS = PixelBounds(left=7, top=9, width=40, height=50)


@pytest.fixture
def images():
    return SvgGlyphImages([(SHARED_DOC, 3, 5), ("<svg", 10, 10)], upem=1000, probe_size=400)


@pytest.fixture
def cairo():
    if svgglyphs.CAIRO_IMPORT_ERROR:
        pytest.skip(f"cairosvg unusable: {svgglyphs.CAIRO_IMPORT_ERROR}")


class TestLookup:
    """Failures before rasterization resolve to None."""

    def test_document_ranges(self, images):
        assert images.document(4) == SHARED_DOC
        assert images.document(10) == "<svg"
        assert images.document(6) is None

    def test_no_document(self, images):
        assert images.render(6, BOUNDS) is None

    def test_unparseable_document(self, images):
        assert images.render(10, BOUNDS) is None

    def test_missing_node(self):
        images = SvgGlyphImages([(SHARED_DOC, 0, 9)], upem=1000)
        assert images.render(8, BOUNDS) is None

    def test_empty_target(self, images):
        assert images.render(3, PixelBounds(0, 0, 0, 10)) is None


class TestIsolateNode:
    """Test stripping sibling glyphs from a shared document."""

    def test_keeps_only_target(self):
        root = ET.fromstring(SHARED_DOC)
        assert isolate_node(root, "glyph4")
        ids = [el.get("id") for el in root.iter() if el.get("id")]
        assert ids == ["glyph4"]

    def test_keeps_nested_target(self):
        root = ET.fromstring(
            '<svg xmlns="http://www.w3.org/2000/svg">'
            '<g id="glyph1"><g id="glyph2"><rect width="1" height="1"/></g></g>'
            "</svg>"
        )
        assert isolate_node(root, "glyph2")
        ids = [el.get("id") for el in root.iter() if el.get("id")]
        assert ids == ["glyph1", "glyph2"]

    def test_drops_untagged_siblings(self):
        root = ET.fromstring(DEFS_DOC)
        assert isolate_node(root, "glyph3")
        tags = [child.tag.split("}")[-1] for child in root]
        assert tags == ["defs", "g"]
        assert root.find(".//{http://www.w3.org/2000/svg}defs/*").get("id") == "box"

    def test_drops_siblings_of_ancestors(self):
        root = ET.fromstring(
            '<svg xmlns="http://www.w3.org/2000/svg">'
            '<g id="layer"><circle r="5"/><g id="glyph2"><rect width="1" height="1"/></g></g>'
            '<rect width="9" height="9"/>'
            "</svg>"
        )
        assert isolate_node(root, "glyph2")
        tags = [el.tag.split("}")[-1] for el in root.iter()]
        assert tags == ["svg", "g", "g", "rect"]

    def test_unknown_node(self):
        root = ET.fromstring(SHARED_DOC)
        assert not isolate_node(root, "glyph9")


class TestRender:
    """Rasterization through cairosvg."""

    def test_fits_node_onto_bounds(self, images, cairo):
        colored = images.render(3, BOUNDS)
        assert colored is not None
        assert (colored.x, colored.y) == (BOUNDS.left, BOUNDS.top)
        assert colored.bitmap.shape == (50, 40, 4)
        assert tuple(colored.bitmap[25, 20]) == (255, 0, 0, 255)

    def test_picks_node_for_glyph(self, images, cairo):
        colored = images.render(4, BOUNDS)
        assert tuple(colored.bitmap[25, 20]) == (0, 255, 0, 255)

    def test_independent_axis_scales(self, images, cairo):
        colored = images.render(3, PixelBounds(0, 0, 80, 20))
        assert colored.bitmap.shape == (20, 80, 4)
        assert tuple(colored.bitmap[10, 40]) == (255, 0, 0, 255)
        assert tuple(colored.bitmap[5, 10]) == (255, 0, 0, 255)

    def test_degenerate_node(self, images, cairo):
        assert images.render(5, BOUNDS) is None

    def test_raster_failure_is_absorbed(self, images, cairo, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("raster failed")

        monkeypatch.setattr(svgglyphs.cairosvg, "svg2png", boom)
        assert images.render(3, BOUNDS) is None

    def test_untagged_content_left_out(self, cairo):
        images = SvgGlyphImages([(DEFS_DOC, 3, 3)], upem=1000, probe_size=400)
        colored = images.render(3, BOUNDS)
        # the stray green square would widen the ink box if it were drawn
        for row, col in [(2, 2), (25, 20), (47, 37)]:
            assert tuple(colored.bitmap[row, col]) == (0, 0, 255, 255)

    def test_serializes_default_namespaces(self, cairo, monkeypatch):
        documents = []
        svg2png = svgglyphs.cairosvg.svg2png

        def capture(*args, **kwargs):
            documents.append(kwargs["bytestring"].decode())
            return svg2png(*args, **kwargs)

        monkeypatch.setattr(svgglyphs.cairosvg, "svg2png", capture)
        SvgGlyphImages([(DEFS_DOC, 3, 3)], upem=1000, probe_size=400).render(3, BOUNDS)
        assert documents
        assert all("ns0:" not in doc and "xlink:href" in doc for doc in documents)


class TestNodeCache:
    """A glyph's document is parsed and measured once."""

    @pytest.fixture
    def calls(self, cairo, monkeypatch):
        calls = []
        svg2png = svgglyphs.cairosvg.svg2png

        def counting(*args, **kwargs):
            calls.append(kwargs["output_width"])
            return svg2png(*args, **kwargs)

        monkeypatch.setattr(svgglyphs.cairosvg, "svg2png", counting)
        return calls

    def test_ink_box_measured_once(self, images, calls):
        images.render(3, BOUNDS)
        images.render(3, PixelBounds(0, 0, 80, 20))
        # one measuring pass at probe_size, then one fit per render
        assert calls == [400, 40, 80]

    def test_each_glyph_measured(self, images, calls):
        images.render(3, BOUNDS)
        images.render(4, BOUNDS)
        assert calls == [400, 40, 400, 40]

    def test_failures_remembered(self, images, calls):
        assert images.render(5, BOUNDS) is None
        assert images.render(5, BOUNDS) is None
        assert calls == [400]

    def test_cached_render_matches(self, images, cairo):
        first = images.render(3, BOUNDS)
        second = images.render(3, BOUNDS)
        assert (first.bitmap == second.bitmap).all()
