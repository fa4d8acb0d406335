#!/usr/bin/env python3
# this_file: kashida_render/cli.py
"""Render justified Arabic text from the command line.

Usage:
    kashida-render render lines/noor.txt lines/noor.json fonts/Raqq.ttf
    kashida-render axes fonts/Raqq.ttf
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import fire

from .base import RenderError
from .constants import BASE_STRETCH
from .document import FontResources, RenderConfig, load_lines, output_name, render_document
from .freetypepy import FreeTypeGlyphSource


class Cli:
    """Render pre-justified lines of text into an image."""

    def render(
        self,
        text: str,
        lines: str,
        font: str,
        output: str | None = None,
        scale: int = 1,
        verbose: bool = False,
    ):
        """Render the lines in LINES (JSON) of the UTF-8 file TEXT with FONT.

        Args:
            text: Source text file
            lines: JSON line records from the justification solver
            font: Variable font with the stretch axis
            output: Output PNG path (defaults next to TEXT)
            scale: Multiplier for every pixel dimension and the font size
            verbose: Log per-glyph diagnostics
        """
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

        text_path = Path(text)
        if output is None:
            output = str(text_path.with_name(output_name(text_path.stem, BASE_STRETCH)))

        config = RenderConfig().scaled(scale)
        try:
            source = text_path.read_text(encoding="utf-8")
            records = load_lines(lines)
            resources = FontResources.from_path(font, config.font_size)
            canvas = render_document(source, records, resources, config)
            canvas.save(output)
        except (RenderError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"Saved {canvas.width}x{canvas.height} image to {output}")

    def axes(self, font: str):
        """List the variation axes of FONT."""
        try:
            glyphs = FreeTypeGlyphSource(Path(font).read_bytes())
        except (RenderError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        axes = glyphs.variation_axes()
        if not axes:
            print("Font has no variation axes")
            return

        print(f"{'Tag':<6} {'Min':>10} {'Default':>10} {'Max':>10}")
        for tag, minimum, default, maximum in axes:
            print(f"{tag:<6} {minimum:>10.2f} {default:>10.2f} {maximum:>10.2f}")


def main():
    fire.Fire(Cli)


if __name__ == "__main__":
    main()
