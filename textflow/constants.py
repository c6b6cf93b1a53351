"""Constants and enumerations for the textflow layout engine."""

from enum import Enum


class LayoutConstants:
    """Central configuration constants for the layout engine."""

    # Marker for "no such line/offset/index"
    INDEX_NONE = -1

    # Separator placed between lines when the document is flattened to text
    LINE_TERMINATOR = "\n"

    # Layout defaults
    DEFAULT_SCALE = 1.0
    DEFAULT_LINE_HEIGHT_PERCENTAGE = 1.0
    MIN_WRAP_DRAW_WIDTH = 0.01  # Wrapping never collapses to a zero-width column


class Justification(Enum):
    """Horizontal alignment of each visual line."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextHitPoint(Enum):
    """Where a hit-tested point fell relative to the glyphs of a line."""

    WITHIN_TEXT = "within_text"
    LEFT_GUTTER = "left_gutter"    # Before the first glyph
    RIGHT_GUTTER = "right_gutter"  # After the last glyph
