# this_file: kashida_render/svgglyphs.py
"""
Full-color glyph artwork from the OpenType ``SVG `` table.

Every failure here is recoverable: the caller falls back to the outline.
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from collections.abc import Sequence

import numpy as np
from PIL import Image

from .base import Colored, FontLoadError, PixelBounds
from .constants import SVG_PROBE_SIZE

try:
    import cairosvg
except (ImportError, OSError) as exc:  # pragma: no cover - libcairo missing
    CAIRO_IMPORT_ERROR: Exception | None = exc
else:
    CAIRO_IMPORT_ERROR = None

_LOGGER = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

_UNRENDERED = frozenset({"defs", "style"})

Box = tuple[float, float, float, float]


class SvgGlyphImages:
    """
    Rasterizes SVG glyph documents onto the pixel box of the glyph outline.

    Args:
        documents: ``(svg_text, first_glyph_id, last_glyph_id)`` triples
        upem: Units per em; SVG glyph coordinates are in font units
        probe_size: Side of the grid used to measure a node's ink bounds
    """

    def __init__(
        self,
        documents: Sequence[tuple[str, int, int]],
        upem: int,
        *,
        probe_size: int = SVG_PROBE_SIZE,
    ):
        self.documents = list(documents)
        self.upem = upem
        self.probe_size = probe_size
        self._nodes: dict[int, tuple[ET.Element, Box] | None] = {}

    @classmethod
    def from_font_data(cls, font_data: bytes) -> SvgGlyphImages | None:
        """Read the SVG table, or return None if the font has none."""
        from fontTools.ttLib import TTFont

        try:
            font = TTFont(io.BytesIO(font_data), lazy=True)
            has_svg = "SVG " in font
            upem = font["head"].unitsPerEm
        except Exception as exc:
            raise FontLoadError(f"fontTools could not parse the font data: {exc}") from exc

        if not has_svg:
            return None
        if CAIRO_IMPORT_ERROR:
            _LOGGER.warning("SVG glyphs disabled, cairosvg unavailable: %s", CAIRO_IMPORT_ERROR)
            return None

        documents = [
            (doc.data, doc.startGlyphID, doc.endGlyphID) for doc in font["SVG "].docList
        ]
        _LOGGER.debug("Font carries %d SVG glyph documents", len(documents))
        return cls(documents, upem)

    def document(self, glyph_id: int) -> str | None:
        for data, first, last in self.documents:
            if first <= glyph_id <= last:
                return data
        return None

    def render(self, glyph_id: int, bounds: PixelBounds) -> Colored | None:
        """
        Fit the glyph's SVG node onto ``bounds``.

        The node's ink box is stretched independently along x and y so it
        covers ``bounds`` exactly; the bitmap origin is the box's corner.
        """
        if bounds.width <= 0 or bounds.height <= 0:
            return None

        node = self._node(glyph_id)
        if node is None:
            return None

        root, box = node
        try:
            bitmap = rasterize(root, box, bounds.width, bounds.height)
        except Exception as exc:
            _LOGGER.debug("glyph %d: SVG rasterization failed: %s", glyph_id, exc)
            return None

        return Colored(bitmap, bounds.left, bounds.top)

    def _node(self, glyph_id: int) -> tuple[ET.Element, Box] | None:
        # Parsed and probed once per glyph id
        if glyph_id not in self._nodes:
            self._nodes[glyph_id] = self._load_node(glyph_id)
        return self._nodes[glyph_id]

    def _load_node(self, glyph_id: int) -> tuple[ET.Element, Box] | None:
        data = self.document(glyph_id)
        if data is None:
            return None

        try:
            root = ET.fromstring(data)
        except (ET.ParseError, ValueError) as exc:
            _LOGGER.debug("glyph %d: SVG document does not parse: %s", glyph_id, exc)
            return None

        if not isolate_node(root, f"glyph{glyph_id}"):
            _LOGGER.debug("glyph %d: no node tagged glyph%d", glyph_id, glyph_id)
            return None

        try:
            box = self._ink_box(root)
        except Exception as exc:
            _LOGGER.debug("glyph %d: SVG probe rasterization failed: %s", glyph_id, exc)
            return None
        if box is None:
            _LOGGER.debug("glyph %d: SVG node has an empty bounding box", glyph_id)
            return None
        return root, box

    def _ink_box(self, root: ET.Element) -> Box | None:
        extent = 2.0 * self.upem
        span = 2.0 * extent
        probe = rasterize(root, (-extent, -extent, span, span), self.probe_size, self.probe_size)

        alpha = probe[:, :, 3]
        rows = np.flatnonzero(alpha.any(axis=1))
        cols = np.flatnonzero(alpha.any(axis=0))
        if rows.size == 0 or cols.size == 0:
            return None

        unit = span / self.probe_size
        x0 = -extent + cols[0] * unit
        y0 = -extent + rows[0] * unit
        x1 = -extent + (cols[-1] + 1) * unit
        y1 = -extent + (rows[-1] + 1) * unit
        return x0, y0, x1 - x0, y1 - y0


def isolate_node(root: ET.Element, node_id: str) -> bool:
    """
    Strip everything from a shared document except the node ``node_id``.

    The node's ancestors stay, as do ``<defs>`` and ``<style>`` blocks it
    may reference. Returns False if no element carries ``node_id``.
    """
    target = next((el for el in root.iter() if el.get("id") == node_id), None)
    if target is None:
        return False

    parents = {child: parent for parent in root.iter() for child in parent}
    path = [target]
    while path[-1] in parents:
        path.append(parents[path[-1]])

    for parent, keep in zip(path[1:], path):
        for child in list(parent):
            if child is not keep and _local_name(child.tag) not in _UNRENDERED:
                parent.remove(child)
    return True


def _local_name(tag) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def rasterize(root: ET.Element, box: Box, width: int, height: int) -> np.ndarray:
    """Render the viewport ``box`` (font units) of ``root`` to an RGBA array."""
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)

    root.set("viewBox", " ".join(f"{v:g}" for v in box))
    root.set("preserveAspectRatio", "none")
    root.set("width", str(width))
    root.set("height", str(height))

    png = cairosvg.svg2png(
        bytestring=ET.tostring(root),
        output_width=width,
        output_height=height,
    )
    with Image.open(io.BytesIO(png)) as image:
        return np.array(image.convert("RGBA"), dtype=np.uint8)
