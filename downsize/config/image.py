"""
Configuration settings related to image processing.

This module defines the GIF detection pattern, the watermark placement table
and the defaults used when writing images with Pillow.
"""
import re

# Sources matching this pattern are treated as GIFs: either routed to gifsicle
# (animated output) or reduced to their first frame.
GIF_FILE = re.compile(r"\.gif$", re.IGNORECASE)

# Suffix appended to a source reference to select its first frame.
FIRST_FRAME_SUFFIX = "[0]"

# Compression quality used when the options do not specify one.
DEFAULT_QUALITY = 90

# --- Watermark Placement ---
# Compass names (case-sensitive) accepted in `WatermarkOptions.position`,
# mapped to the anchor used when compositing the overlay.
ANCHOR_TOP_LEFT = "top-left"
ANCHOR_TOP_CENTER = "top-center"
ANCHOR_TOP_RIGHT = "top-right"
ANCHOR_CENTER_LEFT = "center-left"
ANCHOR_CENTER_RIGHT = "center-right"
ANCHOR_BOTTOM_LEFT = "bottom-left"
ANCHOR_BOTTOM_CENTER = "bottom-center"
ANCHOR_BOTTOM_RIGHT = "bottom-right"
ANCHOR_TILE = "tile"

WATERMARK_ANCHORS = {
    "NorthWest": ANCHOR_TOP_LEFT,
    "North": ANCHOR_TOP_CENTER,
    "NorthEast": ANCHOR_TOP_RIGHT,
    "West": ANCHOR_CENTER_LEFT,
    "East": ANCHOR_CENTER_RIGHT,
    "SouthWest": ANCHOR_BOTTOM_LEFT,
    "South": ANCHOR_BOTTOM_CENTER,
    "SouthEast": ANCHOR_BOTTOM_RIGHT,
    "Repeat": ANCHOR_TILE,
}
DEFAULT_WATERMARK_ANCHOR = ANCHOR_BOTTOM_RIGHT

# Horizontal and vertical position of each anchor as a fraction of the free
# space left around the overlay (0.0 = left/top, 1.0 = right/bottom).
ANCHOR_OFFSETS = {
    ANCHOR_TOP_LEFT: (0.0, 0.0),
    ANCHOR_TOP_CENTER: (0.5, 0.0),
    ANCHOR_TOP_RIGHT: (1.0, 0.0),
    ANCHOR_CENTER_LEFT: (0.0, 0.5),
    ANCHOR_CENTER_RIGHT: (1.0, 0.5),
    ANCHOR_BOTTOM_LEFT: (0.0, 1.0),
    ANCHOR_BOTTOM_CENTER: (0.5, 1.0),
    ANCHOR_BOTTOM_RIGHT: (1.0, 1.0),
}

# --- Output Settings ---
# Pillow formats that cannot store an alpha channel. Images are flattened onto
# `FLATTEN_BACKGROUND_RGBA` before being written in one of these formats.
FORMATS_WITHOUT_ALPHA = {"JPEG"}
FLATTEN_BACKGROUND_RGBA = (255, 255, 255, 255)

# Pillow formats whose writer accepts a `quality` parameter.
QUALITY_FORMATS = {"JPEG", "WEBP"}

# Output format names that differ from Pillow's format identifiers.
FORMAT_ALIASES = {"jpg": "JPEG", "jpeg": "JPEG", "tif": "TIFF"}
