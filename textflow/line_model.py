"""Logical lines, their wrap points, and the visual lines produced from them."""

from dataclasses import dataclass, field
from typing import Optional

from .geometry import TextRange, Vector2D
from .run import LayoutBlock, LineHighlighter, RunRenderer, SharedText
from .run_model import RunModel


@dataclass
class BreakCandidate:
    """A potential wrap point.

    ``actual_range``/``actual_size`` include trailing whitespace and are used
    for display and interaction; ``trimmed_range``/``trimmed_size`` exclude it
    and are used to decide whether the candidate fits.
    """
    actual_range: TextRange
    trimmed_range: TextRange
    actual_size: Vector2D
    trimmed_size: Vector2D
    max_above_baseline: int = 0
    max_below_baseline: int = 0
    kerning: float = 0.0  # Applied in front of the candidate when it follows another on a line
    debug_slice: Optional[str] = None


@dataclass(frozen=True)
class TextRunRenderer:
    line_index: int
    range: TextRange
    renderer: RunRenderer


@dataclass(frozen=True)
class TextLineHighlight:
    """A decoration over a range of one line; negative ``z_order`` draws under the text."""
    line_index: int
    range: TextRange
    z_order: int
    highlighter: LineHighlighter

    @property
    def is_underlay(self) -> bool:
        return self.z_order < 0


class LineModel:
    """One line of the document: text with no manual breaks, and its runs.

    The runs partition the text: sorted, contiguous, starting at 0 and ending
    at the text length.
    """

    def __init__(self, text: SharedText):
        self.text = text
        self.runs: list[RunModel] = []
        self.break_candidates: list[BreakCandidate] = []
        self.run_renderers: list[TextRunRenderer] = []
        self.line_highlights: list[TextLineHighlight] = []
        self.has_wrapping_information = False

    def invalidate(self) -> None:
        """Forget wrap points and measurements after the text or runs changed."""
        self.break_candidates = []
        self.has_wrapping_information = False
        for run_model in self.runs:
            run_model.clear_cache()

    def runs_partition_text(self) -> bool:
        expected_begin = 0
        for run_model in self.runs:
            run_range = run_model.get_text_range()
            if run_range.begin != expected_begin or run_range.end < run_range.begin:
                return False
            expected_begin = run_range.end
        return expected_begin == len(self.text.value)

    def prune_empty_runs(self) -> None:
        """Drop zero-length runs, keeping one if the line would otherwise have none."""
        kept = [r for r in self.runs if not r.get_text_range().is_empty]
        if not kept and self.runs:
            kept = self.runs[:1]
        self.runs = kept

    def __repr__(self) -> str:
        return f"LineModel({self.text.value!r}, runs={len(self.runs)})"


@dataclass
class LineViewHighlight:
    """A highlight positioned on a line view.

    ``offset_x`` is relative to the line view's offset; the highlight spans
    the line's height.
    """
    offset_x: float
    width: float
    highlighter: LineHighlighter


@dataclass(eq=False)
class LineView:
    """One visual line. Several views may come from one wrapped line model.

    ``size`` includes trailing whitespace and the line-height percentage;
    ``text_size`` is the trimmed text width and the unadjusted text height.
    """
    range: TextRange
    model_index: int
    offset: Vector2D = Vector2D()
    size: Vector2D = Vector2D()
    text_size: Vector2D = Vector2D()
    max_above_baseline: int = 0
    blocks: list[LayoutBlock] = field(default_factory=list)
    underlay_highlights: list[LineViewHighlight] = field(default_factory=list)
    overlay_highlights: list[LineViewHighlight] = field(default_factory=list)
