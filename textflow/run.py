"""The run capability consumed by the layout engine.

A run is a contiguous, uniformly styled span of a line's text. The engine
never looks inside a run: it asks the run to measure ranges, report kerning
and baseline metrics, create renderable blocks and resolve hit-tests. Concrete
runs live in :mod:`textflow.text_runs`; hosts may add their own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from .constants import TextHitPoint
from .geometry import TextRange, Vector2D

if TYPE_CHECKING:
    from .run_model import RunModel

# measure(begin, end, scale) -> size, usually a RunModel's cached measure
Measurer = Callable[[int, int, float], Vector2D]


class SharedText:
    """Mutable text buffer shared by a line model and the runs reading from it."""

    __slots__ = ("value",)

    def __init__(self, value: str = ""):
        self.value = value

    def insert(self, index: int, text: str) -> None:
        self.value = self.value[:index] + text + self.value[index:]

    def remove(self, index: int, count: int) -> None:
        self.value = self.value[:index] + self.value[index + count:]

    def truncate(self, length: int) -> None:
        self.value = self.value[:length]

    def append(self, text: str) -> None:
        self.value += text

    def __repr__(self) -> str:
        return f"SharedText({self.value!r})"


class RunRenderer(ABC):
    """Paints a block in place of its run's default rendering."""

    @abstractmethod
    def paint(self, block: "LayoutBlock", canvas: Any) -> None:
        """Paint ``block`` onto the host's ``canvas``."""


class LineHighlighter(ABC):
    """Paints a decoration (selection, caret, squiggle) behind or over a line."""

    @abstractmethod
    def paint(self, line_view: Any, highlight: Any, canvas: Any) -> None:
        """Paint ``highlight`` for ``line_view`` onto the host's ``canvas``."""


@dataclass
class BlockDefinition:
    """A range of a line view that becomes one block, with its optional renderer."""

    actual_range: TextRange
    renderer: Optional[RunRenderer] = None


@dataclass(eq=False)
class LayoutBlock:
    """A positioned, renderable piece of a single run.

    ``offset`` is in layout space and is assigned by the layout after flow
    and justification. ``run_model`` is the cache the block was measured
    through, set when the block comes from a RunModel.
    """

    run: "Run"
    text_range: TextRange
    size: Vector2D
    renderer: Optional[RunRenderer] = None
    offset: Vector2D = Vector2D()
    run_model: Optional["RunModel"] = field(default=None, repr=False)

    @property
    def right(self) -> float:
        return self.offset.x + self.size.x


class Run(ABC):
    """Capability contract for a styled span of text."""

    @abstractmethod
    def get_text_range(self) -> TextRange:
        """Range of the owning line's text covered by this run."""

    @abstractmethod
    def set_text_range(self, value: TextRange) -> None:
        """Move the run to a new range of the same text."""

    @abstractmethod
    def move(self, text: SharedText, value: TextRange) -> None:
        """Re-target the run to ``value`` within another text buffer."""

    @abstractmethod
    def clone(self) -> "Run":
        """Return an independent run with the same style and range."""

    @abstractmethod
    def get_base_line(self, scale: float) -> int:
        """Distance from the baseline to the bottom of the run."""

    @abstractmethod
    def get_max_height(self, scale: float) -> int:
        """Full height of the run."""

    @abstractmethod
    def measure(self, begin: int, end: int, scale: float) -> Vector2D:
        """Size of the text in ``[begin, end)``."""

    @abstractmethod
    def get_kerning(self, index: int, scale: float) -> float:
        """Advance adjustment applied before the character at ``index``."""

    @abstractmethod
    def create_block(self, begin: int, end: int, size: Vector2D,
                     renderer: Optional[RunRenderer]) -> LayoutBlock:
        """Create the renderable block for ``[begin, end)``."""

    @abstractmethod
    def get_text_index_at(self, block: LayoutBlock, location: Vector2D, scale: float,
                          measure: Optional[Measurer] = None) -> tuple[int, TextHitPoint]:
        """Resolve a layout-space point to a character index within ``block``.

        ``measure`` replaces the run's own ``measure`` so that callers can
        supply a cached one.
        """

    @abstractmethod
    def get_location_at(self, block: LayoutBlock, offset: int, scale: float,
                        measure: Optional[Measurer] = None) -> Vector2D:
        """Layout-space position of the caret before character ``offset``."""

    def begin_layout(self) -> None:
        """Called before the layout starts a new pass."""

    def end_layout(self) -> None:
        """Called once a layout pass has finished."""
