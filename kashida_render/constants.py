# this_file: kashida_render/constants.py
"""
Layout and typographic constants shared across the rendering pipeline.
"""

# Multiplier applied to every pixel dimension and to the font size
FACTOR = 1

# Page geometry (pixels)
MARGIN = FACTOR * 100
IMG_WIDTH = FACTOR * 2000
LINE_HEIGHT = FACTOR * 150

# Font size (points); pixels per em = FONT_SIZE * PX_PER_PT
FONT_SIZE = FACTOR * 80.0
PX_PER_PT = 96.0 / 72.0

# Stretch value the line breaker starts from; also used in output names
BASE_STRETCH = 53.0

# Variation axis tag of the stretch (kashida) axis
STRETCH_AXIS = "MSHQ"

# RGBA colors
WHITE = (0xFF, 0xFF, 0xFF, 0xFF)
BLACK = (0x0A, 0x0A, 0x0A, 0xFF)

OFF_WHITE = (0xFF, 0xFF, 0xF2, 0xFF)
OFF_BLACK = (0x20, 0x20, 0x20, 0xFF)

GOLD_ORNG = (0xB4, 0x89, 0x39, 0xFF)
NAVY_BLUE = (0x13, 0x2A, 0x4A, 0xFF)

TXT_COLOR = GOLD_ORNG
BKG_COLOR = NAVY_BLUE

# Side length (pixels) of the grid used to measure SVG glyph ink bounds
SVG_PROBE_SIZE = 1024
