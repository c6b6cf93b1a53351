"""Per-run measurement cache."""

from bisect import bisect_left, bisect_right
from typing import Optional

from .constants import LayoutConstants, TextHitPoint
from .geometry import TextRange, Vector2D
from .run import BlockDefinition, LayoutBlock, Run


class RunModel:
    """Wraps a run and remembers the sizes it has already measured.

    Wrapping and hit-testing measure the same ranges over and over. Measured
    ranges are kept sorted by ``(begin, end)`` with at most one entry per
    range, and looked up with two binary searches: one over the begin indices
    and one over the end indices of the entries sharing that begin.
    """

    def __init__(self, run: Run):
        self._run = run
        self._measured_ranges: list[TextRange] = []
        self._measured_range_sizes: list[Vector2D] = []
        self._measured_scale: Optional[float] = None
        # Run this one was cloned from when its line was split, so joining
        # the lines again can put the two halves back together
        self.split_from: Optional[Run] = None

    @property
    def run(self) -> Run:
        return self._run

    def begin_layout(self) -> None:
        self._run.begin_layout()
        self.clear_cache()

    def end_layout(self) -> None:
        self._run.end_layout()

    def get_text_range(self) -> TextRange:
        return self._run.get_text_range()

    def set_text_range(self, value: TextRange) -> None:
        self._run.set_text_range(value)
        self.clear_cache()

    def get_base_line(self, scale: float) -> int:
        return self._run.get_base_line(scale)

    def get_max_height(self, scale: float) -> int:
        return self._run.get_max_height(scale)

    def get_kerning(self, index: int, scale: float) -> float:
        return self._run.get_kerning(index, scale)

    def get_above_base_line(self, scale: float) -> int:
        return self._run.get_max_height(scale) - self._run.get_base_line(scale)

    def measure(self, begin: int, end: int, scale: float) -> Vector2D:
        if scale != self._measured_scale:
            self.clear_cache()
            self._measured_scale = scale

        start = self.binary_search_for_begin_index(self._measured_ranges, begin)
        if start != LayoutConstants.INDEX_NONE:
            found = self.binary_search_for_end_index(self._measured_ranges, start, end)
            if found != LayoutConstants.INDEX_NONE:
                return self._measured_range_sizes[found]

        size = self._run.measure(begin, end, scale)
        measured = TextRange(begin, end)
        index = bisect_left(self._measured_ranges, measured)
        self._measured_ranges.insert(index, measured)
        self._measured_range_sizes.insert(index, size)
        return size

    @staticmethod
    def binary_search_for_begin_index(ranges: list[TextRange], begin_index: int) -> int:
        """Index of the first cached range starting at ``begin_index``, or INDEX_NONE."""
        index = bisect_left(ranges, begin_index, key=lambda r: r.begin)
        if index < len(ranges) and ranges[index].begin == begin_index:
            return index
        return LayoutConstants.INDEX_NONE

    @staticmethod
    def binary_search_for_end_index(ranges: list[TextRange], range_begin_index: int,
                                    end_index: int) -> int:
        """Search the entries sharing the begin of ``ranges[range_begin_index]`` for ``end_index``."""
        begin = ranges[range_begin_index].begin
        stop = bisect_right(ranges, begin, lo=range_begin_index, key=lambda r: r.begin)
        index = bisect_left(ranges, end_index, lo=range_begin_index, hi=stop, key=lambda r: r.end)
        if index < stop and ranges[index].end == end_index:
            return index
        return LayoutConstants.INDEX_NONE

    def create_block(self, definition: BlockDefinition, scale: float) -> LayoutBlock:
        block_range = definition.actual_range
        size = self.measure(block_range.begin, block_range.end, scale)
        block = self._run.create_block(block_range.begin, block_range.end, size, definition.renderer)
        block.run_model = self
        return block

    def get_text_index_at(self, block: LayoutBlock, location: Vector2D,
                          scale: float) -> tuple[int, TextHitPoint]:
        return self._run.get_text_index_at(block, location, scale, self.measure)

    def get_location_at(self, block: LayoutBlock, offset: int, scale: float) -> Vector2D:
        return self._run.get_location_at(block, offset, scale, self.measure)

    def clear_cache(self) -> None:
        self._measured_ranges.clear()
        self._measured_range_sizes.clear()
