"""Concrete text runs.

MonospaceRun gives every character the same advance, like a terminal cell
grid. FontRun measures with reportlab's font metrics, so the widths match what
a PDF renderer will draw.
"""

import copy
from abc import abstractmethod
from bisect import bisect_right
from typing import Callable, Optional

from reportlab.pdfbase import pdfmetrics

from .constants import TextHitPoint
from .font_config import FontStyle
from .geometry import TextRange, Vector2D
from .run import LayoutBlock, Measurer, Run, RunRenderer, SharedText


class FontLoadError(Exception):
    """Exception raised when a font cannot be loaded."""


class TextRunBase(Run):
    """Run over a range of a shared text buffer.

    ``tracking`` adds a fixed gap between adjacent characters. The gap inside
    a range is part of ``measure``; the gap in front of a range is reported
    by ``get_kerning`` so that measuring a range in pieces adds up to the
    same width as measuring it whole.
    """

    def __init__(self, text: SharedText, text_range: Optional[TextRange] = None,
                 tracking: float = 0.0):
        self._text = text
        self._range = text_range if text_range is not None else TextRange(0, len(text.value))
        self.tracking = tracking

    @property
    def text(self) -> SharedText:
        return self._text

    def get_text(self) -> str:
        return self._text.value[self._range.begin:self._range.end]

    def get_text_range(self) -> TextRange:
        return self._range

    def set_text_range(self, value: TextRange) -> None:
        self._range = value

    def move(self, text: SharedText, value: TextRange) -> None:
        self._text = text
        self._range = value

    def clone(self) -> "TextRunBase":
        return copy.copy(self)

    @abstractmethod
    def _glyph_width(self, glyphs: str, scale: float) -> float:
        """Total advance of ``glyphs`` without tracking."""

    def measure(self, begin: int, end: int, scale: float) -> Vector2D:
        glyphs = self._text.value[begin:end]
        width = self._glyph_width(glyphs, scale)
        if len(glyphs) > 1:
            width += self.tracking * scale * (len(glyphs) - 1)
        return Vector2D(width, self.get_max_height(scale))

    def get_kerning(self, index: int, scale: float) -> float:
        if index <= 0:
            return 0.0
        return self.tracking * scale

    def create_block(self, begin: int, end: int, size: Vector2D,
                     renderer: Optional[RunRenderer]) -> LayoutBlock:
        return LayoutBlock(run=self, text_range=TextRange(begin, end), size=size, renderer=renderer)

    def get_text_index_at(self, block: LayoutBlock, location: Vector2D, scale: float,
                          measure: Optional[Measurer] = None) -> tuple[int, TextHitPoint]:
        measure = measure or self.measure
        block_range = block.text_range
        begin = block_range.begin
        x = location.x - block.offset.x
        if x < 0:
            return begin, TextHitPoint.LEFT_GUTTER
        if x >= block.size.x:
            return block_range.end, TextHitPoint.RIGHT_GUTTER

        # First character whose right edge lies past x
        right_edges = range(begin + 1, block_range.end + 1)
        index = begin + bisect_right(right_edges, x, key=lambda end: measure(begin, end, scale).x)
        if index >= block_range.end:
            return block_range.end, TextHitPoint.RIGHT_GUTTER

        # Snap to the nearest character boundary
        left = measure(begin, index, scale).x if index > begin else 0.0
        right = measure(begin, index + 1, scale).x
        if x < (left + right) / 2:
            return index, TextHitPoint.WITHIN_TEXT
        return index + 1, TextHitPoint.WITHIN_TEXT

    def get_location_at(self, block: LayoutBlock, offset: int, scale: float,
                        measure: Optional[Measurer] = None) -> Vector2D:
        measure = measure or self.measure
        block_range = block.text_range
        offset = min(max(offset, block_range.begin), block_range.end)
        x = block.offset.x + measure(block_range.begin, offset, scale).x
        if block_range.begin < offset < block_range.end:
            x += self.get_kerning(offset, scale)
        return Vector2D(x, block.offset.y)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_text()!r}, {self._range})"


class MonospaceRun(TextRunBase):
    """Fixed-pitch run: every character advances by ``char_width``."""

    def __init__(self, text: SharedText, text_range: Optional[TextRange] = None,
                 char_width: float = 1.0, line_height: int = 1, base_line: int = 0,
                 tracking: float = 0.0):
        super().__init__(text, text_range, tracking)
        self.char_width = char_width
        self.line_height = line_height
        self.base_line = base_line

    def _glyph_width(self, glyphs: str, scale: float) -> float:
        return len(glyphs) * self.char_width * scale

    def get_base_line(self, scale: float) -> int:
        return round(self.base_line * scale)

    def get_max_height(self, scale: float) -> int:
        return round(self.line_height * scale)


class FontRun(TextRunBase):
    """Run measured with reportlab font metrics.

    Raises:
        FontLoadError: If reportlab does not know the style's font face.
    """

    def __init__(self, text: SharedText, text_range: Optional[TextRange] = None,
                 style: Optional[FontStyle] = None):
        style = style or FontStyle(name="Helvetica", font_name="Helvetica")
        super().__init__(text, text_range, style.tracking)
        self.style = style
        try:
            pdfmetrics.getFont(style.font_name)
        except KeyError as e:
            raise FontLoadError(f"Unknown font: {style.font_name}") from e

    def _font_size(self, scale: float) -> float:
        return self.style.point_size * scale

    def _glyph_width(self, glyphs: str, scale: float) -> float:
        if not glyphs:
            return 0.0
        return pdfmetrics.stringWidth(glyphs, self.style.font_name, self._font_size(scale))

    def _ascent_descent(self, scale: float) -> tuple[float, float]:
        return pdfmetrics.getAscentDescent(self.style.font_name, self._font_size(scale))

    def get_base_line(self, scale: float) -> int:
        _, descent = self._ascent_descent(scale)
        return round(-descent)

    def get_max_height(self, scale: float) -> int:
        ascent, descent = self._ascent_descent(scale)
        return round(ascent - descent)


def make_line(text: str, run_factory: Callable[..., Run] = MonospaceRun,
              **run_options) -> tuple[SharedText, list[Run]]:
    """Create a text buffer and a single run covering all of it.

    The result can be passed straight to ``TextLayout.add_line``.
    """
    shared = SharedText(text)
    return shared, [run_factory(shared, TextRange(0, len(text)), **run_options)]
