"""Font styles for font-metric runs.

This module defines the named styles available to :class:`textflow.text_runs.FontRun`.
Every face referenced here is one of reportlab's standard Type 1 fonts, whose
metrics ship with reportlab and need no font files on disk.
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional


DEFAULT_POINT_SIZE = 12


@dataclass(frozen=True)
class FontStyle:
    """Styling for a run of text measured with font metrics.

    Attributes:
        name: Display name of the style
        font_name: Face name registered with reportlab's pdfmetrics
        point_size: Font size in points at scale 1.0
        tracking: Extra space inserted between adjacent characters, in points
    """
    name: str
    font_name: str
    point_size: float = DEFAULT_POINT_SIZE
    tracking: float = 0.0

    def with_size(self, point_size: float) -> 'FontStyle':
        """Return the same style at a different point size."""
        return replace(self, point_size=point_size)

    def with_tracking(self, tracking: float) -> 'FontStyle':
        """Return the same style with different letter spacing."""
        return replace(self, tracking=tracking)


# Pre-defined styles
FONT_STYLES: Dict[str, FontStyle] = {
    "Courier": FontStyle(name="Courier", font_name="Courier"),
    "Courier Bold": FontStyle(name="Courier Bold", font_name="Courier-Bold"),
    "Helvetica": FontStyle(name="Helvetica", font_name="Helvetica"),
    "Helvetica Bold": FontStyle(name="Helvetica Bold", font_name="Helvetica-Bold"),
    "Times": FontStyle(name="Times", font_name="Times-Roman"),
    "Times Italic": FontStyle(name="Times Italic", font_name="Times-Italic"),
}


def get_font_style(name: str) -> Optional[FontStyle]:
    """Get a font style by name.

    Args:
        name: Name of the style

    Returns:
        FontStyle if found, None otherwise
    """
    return FONT_STYLES.get(name)
