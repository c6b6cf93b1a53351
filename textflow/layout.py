"""Reflowable rich-text layout.

TextLayout owns the line models of a document (text split at manual line
breaks, each line partitioned into styled runs) and turns them into line
views: visual lines wrapped to the wrapping width, justified, and carrying
positioned blocks and highlights for a renderer to draw.

Call ``update_if_needed`` after changing anything and before reading line
views or hit-testing; views are rebuilt from scratch by every layout pass.
"""

import logging
import re
from dataclasses import replace
from enum import Flag
from typing import Iterable, Optional, Sequence

from .constants import Justification, LayoutConstants, TextHitPoint
from .geometry import Margin, TextRange, Vector2D
from .line_model import (
    BreakCandidate,
    LineModel,
    LineView,
    LineViewHighlight,
    TextLineHighlight,
    TextRunRenderer,
)
from .location import TextLocation, TextSelection
from .offsets import TextOffsetLocations
from .profiles import ProfileStore, get_profile_store
from .run import BlockDefinition, Run, SharedText
from .run_model import RunModel
from .settings import LayoutSettings

logger = logging.getLogger(__name__)

# A word together with the whitespace after it (and, at the start of a line,
# the whitespace before it). Lines may wrap between any two of these.
BREAK_CANDIDATE_PATTERN = re.compile(r"\s*\S+\s*")
WORD_PATTERN = re.compile(r"\w+")


class DirtyState(Flag):
    """What the next update has to recompute."""
    NONE = 0
    LAYOUT = 1
    HIGHLIGHTS = 2


class TextLayout:
    def __init__(self, settings: Optional[LayoutSettings] = None):
        settings = settings or LayoutSettings()
        self._line_models: list[LineModel] = []
        self._line_views: list[LineView] = []
        self._dirty_flags = DirtyState.NONE
        self._wrapping_width = settings.wrapping_width
        self._scale = settings.scale
        self._margin = settings.margin
        self._justification = settings.justification
        self._line_height_percentage = settings.line_height_percentage
        self._debug_slices = settings.debug_slices
        self._draw_size = Vector2D()
        self._update_draw_size()

    # --- Read-only state ---

    @property
    def line_views(self) -> Sequence[LineView]:
        return tuple(self._line_views)

    @property
    def line_models(self) -> Sequence[LineModel]:
        return tuple(self._line_models)

    @property
    def dirty_flags(self) -> DirtyState:
        return self._dirty_flags

    def get_draw_size(self) -> Vector2D:
        """Bounding box of all line views plus margins, in scaled units."""
        return self._draw_size

    def get_size(self) -> Vector2D:
        """Bounding box of all line views plus margins, in unscaled units."""
        if not self._scale:
            return Vector2D()
        return self._draw_size.scaled(1.0 / self._scale)

    def _mark_dirty(self, flags: DirtyState) -> None:
        self._dirty_flags |= flags

    # --- Configuration ---

    @property
    def wrapping_width(self) -> float:
        """Width to wrap at, margins included. 0 or less disables wrapping."""
        return self._wrapping_width

    @wrapping_width.setter
    def wrapping_width(self, value: float) -> None:
        if value == self._wrapping_width:
            return
        self._wrapping_width = value
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def scale(self) -> float:
        return self._scale

    @scale.setter
    def scale(self, value: float) -> None:
        if value == self._scale:
            return
        self._scale = value
        # Break candidates hold measurements taken at the old scale
        self._clear_wrapping_cache()
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def margin(self) -> Margin:
        return self._margin

    @margin.setter
    def margin(self, value: Margin) -> None:
        if value == self._margin:
            return
        self._margin = value
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def justification(self) -> Justification:
        return self._justification

    @justification.setter
    def justification(self, value: Justification) -> None:
        if value == self._justification:
            return
        self._justification = value
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def line_height_percentage(self) -> float:
        return self._line_height_percentage

    @line_height_percentage.setter
    def line_height_percentage(self, value: float) -> None:
        if value == self._line_height_percentage:
            return
        self._line_height_percentage = value
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def debug_slices(self) -> bool:
        """Whether break candidates record the text they cover."""
        return self._debug_slices

    @debug_slices.setter
    def debug_slices(self, value: bool) -> None:
        value = bool(value)
        if value == self._debug_slices:
            return
        self._debug_slices = value
        self._clear_wrapping_cache()
        self._mark_dirty(DirtyState.LAYOUT)

    @property
    def settings(self) -> LayoutSettings:
        return LayoutSettings(
            wrapping_width=self._wrapping_width,
            scale=self._scale,
            margin=self._margin,
            justification=self._justification,
            line_height_percentage=self._line_height_percentage,
            debug_slices=self._debug_slices,
        )

    def apply_settings(self, settings: LayoutSettings) -> None:
        """Apply every value in ``settings``; unchanged values leave the layout clean."""
        self.wrapping_width = settings.wrapping_width
        self.scale = settings.scale
        self.margin = settings.margin
        self.justification = settings.justification
        self.line_height_percentage = settings.line_height_percentage
        self.debug_slices = settings.debug_slices

    def load_profile(self, name: str, store: Optional[ProfileStore] = None) -> bool:
        """Apply the settings saved under profile ``name``.

        Uses the process-wide store unless ``store`` is given. Returns False,
        leaving the layout untouched, if there is no such profile.
        """
        if store is None:
            store = get_profile_store()
        settings = store.get(name)
        if settings is None:
            logger.info(f"No layout profile named {name!r}")
            return False
        self.apply_settings(settings)
        return True

    def save_profile(self, name: str, store: Optional[ProfileStore] = None) -> bool:
        """Save the current settings as profile ``name``."""
        if store is None:
            store = get_profile_store()
        return store.put(name, self.settings)

    # --- Lines ---

    def clear_lines(self) -> None:
        self._line_models.clear()
        self._mark_dirty(DirtyState.LAYOUT)

    def add_line(self, text: SharedText, runs: Iterable[Run]) -> None:
        """Append a line whose ``runs`` read from ``text``.

        Raises:
            ValueError: If there are no runs, or the runs do not cover the
                text exactly, in order.
        """
        line = LineModel(text)
        line.runs = [RunModel(run) for run in runs]
        if not line.runs:
            raise ValueError(f"Line {text.value!r} needs at least one run")
        if not line.runs_partition_text():
            raise ValueError(f"Runs do not partition line text {text.value!r}")
        self._line_models.append(line)
        self._mark_dirty(DirtyState.LAYOUT)

    def is_empty(self) -> bool:
        if not self._line_models:
            return True
        return len(self._line_models) == 1 and not self._line_models[0].text.value

    def _get_line_model(self, line_index: int) -> Optional[LineModel]:
        if 0 <= line_index < len(self._line_models):
            return self._line_models[line_index]
        return None

    # --- Run renderers and line highlights ---

    def clear_run_renderers(self) -> None:
        for line in self._line_models:
            line.run_renderers = []
        self._mark_dirty(DirtyState.HIGHLIGHTS)

    def set_run_renderers(self, renderers: Iterable[TextRunRenderer]) -> None:
        self.clear_run_renderers()
        for renderer in renderers:
            self.add_run_renderer(renderer)

    def add_run_renderer(self, renderer: TextRunRenderer) -> None:
        line = self._get_line_model(renderer.line_index)
        if line is None:
            logger.debug(f"Ignoring run renderer for missing line {renderer.line_index}")
            return
        line.run_renderers.append(renderer)
        self._mark_dirty(DirtyState.HIGHLIGHTS)

    def clear_line_highlights(self) -> None:
        for line in self._line_models:
            line.line_highlights = []
        self._mark_dirty(DirtyState.HIGHLIGHTS)

    def set_line_highlights(self, highlights: Iterable[TextLineHighlight]) -> None:
        self.clear_line_highlights()
        for highlight in highlights:
            self.add_line_highlight(highlight)

    def add_line_highlight(self, highlight: TextLineHighlight) -> None:
        line = self._get_line_model(highlight.line_index)
        if line is None:
            logger.debug(f"Ignoring line highlight for missing line {highlight.line_index}")
            return
        line.line_highlights.append(highlight)
        self._mark_dirty(DirtyState.HIGHLIGHTS)

    # --- Updating ---

    def update_if_needed(self) -> None:
        """Bring line views up to date with the most recent changes."""
        if self._dirty_flags & DirtyState.LAYOUT:
            self.update_layout()
        elif self._dirty_flags & DirtyState.HIGHLIGHTS:
            self.update_highlights()

    def update_layout(self) -> None:
        self._clear_view()
        self._begin_layout()
        self._flow_layout()
        self._justify_layout()
        self._flow_highlights()
        self._end_layout()
        self._dirty_flags = DirtyState.NONE
        logger.debug(f"Laid out {len(self._line_models)} lines as {len(self._line_views)} line views")

    def update_highlights(self) -> None:
        """Re-apply run renderers and line highlights without re-wrapping."""
        if self._dirty_flags & DirtyState.LAYOUT:
            # Views no longer match the models; only a full pass can fix that
            self.update_layout()
            return
        for view in self._line_views:
            self._create_line_view_blocks(self._line_models[view.model_index], view)
        self._flow_highlights()
        self._dirty_flags &= ~DirtyState.HIGHLIGHTS

    def _clear_view(self) -> None:
        self._line_views = []
        self._draw_size = Vector2D()

    def _clear_wrapping_cache(self) -> None:
        for line in self._line_models:
            line.invalidate()

    def _begin_layout(self) -> None:
        for line in self._line_models:
            for run_model in line.runs:
                run_model.begin_layout()

    def _end_layout(self) -> None:
        for line in self._line_models:
            for run_model in line.runs:
                run_model.end_layout()

    def _get_wrap_draw_width(self) -> Optional[float]:
        if self._wrapping_width <= 0:
            return None
        return max(LayoutConstants.MIN_WRAP_DRAW_WIDTH,
                   (self._wrapping_width - self._margin.horizontal) * self._scale)

    # --- Flow ---

    def _create_wrapping_cache(self, line: LineModel) -> None:
        if line.has_wrapping_information:
            return
        text = line.text.value
        spans = [match.span() for match in BREAK_CANDIDATE_PATTERN.finditer(text)]
        if not spans:
            # Empty or all-whitespace line
            spans = [(0, len(text))]
        candidates = []
        run_index = 0
        for begin, end in spans:
            candidate, run_index = self._create_break_candidate(line, run_index, begin, end)
            candidates.append(candidate)
        line.break_candidates = candidates
        line.has_wrapping_information = True

    def _create_break_candidate(self, line: LineModel, run_index: int,
                                begin: int, end: int) -> tuple[BreakCandidate, int]:
        """Measure ``[begin, end)`` across the runs it spans.

        Returns the candidate and the index of the last run it touched, where
        the search for the next candidate starts.
        """
        scale = self._scale
        text = line.text.value
        trimmed_end = begin + len(text[begin:end].rstrip())
        actual_width = 0.0
        trimmed_width = 0.0
        max_above = 0
        max_below = 0
        kerning = 0.0
        first_segment = True
        last_run_index = run_index

        for index in range(run_index, len(line.runs)):
            run_model = line.runs[index]
            run_range = run_model.get_text_range()
            if begin < end:
                if run_range.begin >= end:
                    break
                segment = run_range.intersect(TextRange(begin, end))
                if segment.is_empty:
                    continue
            else:
                segment = TextRange(begin, end)
            last_run_index = index

            max_above = max(max_above, run_model.get_above_base_line(scale))
            max_below = max(max_below, run_model.get_base_line(scale))
            if segment.is_empty:
                # Empty line: the first run still sets the height
                break

            if first_segment:
                kerning = run_model.get_kerning(begin, scale) if begin > 0 else 0.0
                first_segment = False
            else:
                gap = run_model.get_kerning(segment.begin, scale)
                actual_width += gap
                if segment.begin < trimmed_end:
                    trimmed_width += gap

            actual_width += run_model.measure(segment.begin, segment.end, scale).x
            if segment.begin < trimmed_end:
                trimmed_width += run_model.measure(segment.begin, min(segment.end, trimmed_end), scale).x

        height = max_above + max_below
        candidate = BreakCandidate(
            actual_range=TextRange(begin, end),
            trimmed_range=TextRange(begin, trimmed_end),
            actual_size=Vector2D(actual_width, height),
            trimmed_size=Vector2D(trimmed_width, height),
            max_above_baseline=max_above,
            max_below_baseline=max_below,
            kerning=kerning,
            debug_slice=text[begin:end] if self._debug_slices else None,
        )
        return candidate, last_run_index

    @staticmethod
    def _pack_break_candidates(candidates: Sequence[BreakCandidate],
                               wrap_width: Optional[float]) -> list[tuple[int, int]]:
        """Greedily group candidates into visual lines.

        A candidate joins the current line while the line's trimmed width
        stays within ``wrap_width``. A candidate too wide on its own still
        gets a line to itself. Returns ``(first, last)`` index pairs.
        """
        if wrap_width is None:
            return [(0, len(candidates) - 1)]

        groups = []
        start = 0
        width = 0.0
        for index, candidate in enumerate(candidates):
            if index == start:
                width = candidate.actual_size.x
                continue
            if width + candidate.kerning + candidate.trimmed_size.x > wrap_width:
                groups.append((start, index - 1))
                start = index
                width = candidate.actual_size.x
            else:
                width = width + candidate.kerning + candidate.actual_size.x
        groups.append((start, len(candidates) - 1))
        return groups

    def _flow_layout(self) -> None:
        scale = self._scale
        wrap_width = self._get_wrap_draw_width()
        origin_x = self._margin.left * scale
        current_y = self._margin.top * scale

        for model_index, line in enumerate(self._line_models):
            self._create_wrapping_cache(line)
            candidates = line.break_candidates
            for first, last in self._pack_break_candidates(candidates, wrap_width):
                view = self._create_line_view(model_index, line, candidates[first:last + 1],
                                              Vector2D(origin_x, current_y))
                self._line_views.append(view)
                current_y += view.size.y

    def _create_line_view(self, model_index: int, line: LineModel,
                          candidates: Sequence[BreakCandidate], offset: Vector2D) -> LineView:
        width = 0.0
        trimmed_width = 0.0
        for index, candidate in enumerate(candidates):
            lead = width + candidate.kerning if index else width
            trimmed_width = lead + candidate.trimmed_size.x
            width = lead + candidate.actual_size.x

        max_above = max(c.max_above_baseline for c in candidates)
        max_below = max(c.max_below_baseline for c in candidates)
        text_height = max_above + max_below
        view = LineView(
            range=TextRange(candidates[0].actual_range.begin, candidates[-1].actual_range.end),
            model_index=model_index,
            offset=offset,
            size=Vector2D(width, text_height * self._line_height_percentage),
            text_size=Vector2D(trimmed_width, text_height),
            max_above_baseline=max_above,
        )
        self._create_line_view_blocks(line, view)
        return view

    def _get_block_definitions(self, line: LineModel,
                               view_range: TextRange) -> list[tuple[RunModel, BlockDefinition]]:
        """Cut a line view into blocks at run boundaries and run renderer boundaries."""
        definitions = []
        renderers = sorted(line.run_renderers, key=lambda r: r.range.begin)
        for run_model in line.runs:
            segment = run_model.get_text_range().intersect(view_range)
            if segment.is_empty:
                continue
            cursor = segment.begin
            for run_renderer in renderers:
                covered = run_renderer.range.intersect(TextRange(cursor, segment.end))
                if covered.is_empty:
                    continue
                if covered.begin > cursor:
                    definitions.append((run_model, BlockDefinition(TextRange(cursor, covered.begin))))
                definitions.append((run_model, BlockDefinition(covered, run_renderer.renderer)))
                cursor = covered.end
            if cursor < segment.end:
                definitions.append((run_model, BlockDefinition(TextRange(cursor, segment.end))))

        if not definitions and line.runs:
            # Empty line: a zero-width block still gives the caret somewhere to go
            definitions.append((line.runs[0], BlockDefinition(view_range)))
        return definitions

    def _create_line_view_blocks(self, line: LineModel, view: LineView) -> None:
        scale = self._scale
        blocks = []
        x = 0.0
        for index, (run_model, definition) in enumerate(self._get_block_definitions(line, view.range)):
            if index:
                x += run_model.get_kerning(definition.actual_range.begin, scale)
            block = run_model.create_block(definition, scale)
            # Align every block on the line's baseline
            baseline_drop = view.max_above_baseline - run_model.get_above_base_line(scale)
            block.offset = Vector2D(view.offset.x + x, view.offset.y + baseline_drop)
            blocks.append(block)
            x += block.size.x
        view.blocks = blocks

    # --- Justification ---

    def _justify_layout(self) -> None:
        if self._line_views and self._justification != Justification.LEFT:
            layout_width = max(view.text_size.x for view in self._line_views)
            wrap_width = self._get_wrap_draw_width()
            if wrap_width is not None:
                layout_width = max(layout_width, wrap_width)

            for view in self._line_views:
                extra_space = layout_width - view.text_size.x
                if self._justification == Justification.RIGHT:
                    self._shift_line_view(view, extra_space)
                else:
                    self._shift_line_view(view, extra_space / 2)
        self._update_draw_size()

    @staticmethod
    def _shift_line_view(view: LineView, delta_x: float) -> None:
        view.offset = Vector2D(view.offset.x + delta_x, view.offset.y)
        for block in view.blocks:
            block.offset = Vector2D(block.offset.x + delta_x, block.offset.y)

    def _update_draw_size(self) -> None:
        scale = self._scale
        right = self._margin.left * scale
        bottom = self._margin.top * scale
        for view in self._line_views:
            right = max(right, view.offset.x + view.size.x)
            bottom = max(bottom, view.offset.y + view.size.y)
        self._draw_size = Vector2D(right + self._margin.right * scale,
                                   bottom + self._margin.bottom * scale)

    # --- Highlights ---

    def _is_last_view_of_model(self, view_index: int) -> bool:
        views = self._line_views
        return (view_index + 1 == len(views)
                or views[view_index + 1].model_index != views[view_index].model_index)

    def _flow_highlights(self) -> None:
        for view_index, view in enumerate(self._line_views):
            view.underlay_highlights = []
            view.overlay_highlights = []
            line = self._line_models[view.model_index]
            for highlight in line.line_highlights:
                if highlight.range.is_empty:
                    # Zero-width highlights (carets) sit on the view that owns their position
                    position = highlight.range.begin
                    at_end = position == view.range.end and self._is_last_view_of_model(view_index)
                    if not (view.range.contains(position) or at_end):
                        continue
                    covered = TextRange(position, position)
                else:
                    covered = highlight.range.intersect(view.range)
                    if covered.is_empty:
                        continue

                begin_x = self._get_x_in_line_view(view, covered.begin)
                end_x = self._get_x_in_line_view(view, covered.end)
                entry = LineViewHighlight(offset_x=begin_x - view.offset.x, width=end_x - begin_x,
                                          highlighter=highlight.highlighter)
                if highlight.is_underlay:
                    view.underlay_highlights.append(entry)
                else:
                    view.overlay_highlights.append(entry)

    def _get_x_in_line_view(self, view: LineView, offset: int) -> float:
        if not view.blocks:
            return view.offset.x
        for block in view.blocks:
            if offset < block.text_range.end:
                return block.run_model.get_location_at(block, offset, self._scale).x
        last = view.blocks[-1]
        return last.run_model.get_location_at(last, offset, self._scale).x

    # --- Hit-testing ---

    def get_line_view_index_for_text_location(self, line_views: Sequence[LineView],
                                              location: TextLocation,
                                              inclusive_bounds: bool) -> int:
        """Index of the line view showing ``location``, or INDEX_NONE.

        An offset on the boundary between two wrapped views belongs to the
        later view, unless ``inclusive_bounds`` is set, in which case it
        belongs to the view that it ends. The end of a line always belongs to
        the last view of that line.
        """
        line_index = location.line_index
        offset = location.offset
        for index, view in enumerate(line_views):
            if view.model_index != line_index:
                continue
            if view.range.contains(offset):
                return index
            if offset == view.range.end:
                is_last = index + 1 == len(line_views) or line_views[index + 1].model_index != line_index
                if inclusive_bounds or is_last:
                    return index
        return LayoutConstants.INDEX_NONE

    def get_location_at(self, location: TextLocation, inclusive_bounds: bool = False) -> Vector2D:
        """Layout-space position of the caret at ``location`` (origin if not laid out)."""
        index = self.get_line_view_index_for_text_location(self._line_views, location, inclusive_bounds)
        if index == LayoutConstants.INDEX_NONE:
            return Vector2D()
        view = self._line_views[index]
        return Vector2D(self._get_x_in_line_view(view, location.offset), view.offset.y)

    def get_text_location_at(self, point: Vector2D) -> tuple[TextLocation, TextHitPoint]:
        """Resolve a layout-space point to the nearest text location.

        Points above the first line hit the first line, points below the last
        line hit the last line. A point on the edge between two lines or two
        blocks belongs to the later one.
        """
        if not self._line_views:
            return TextLocation.invalid(), TextHitPoint.WITHIN_TEXT
        chosen = self._line_views[-1]
        for view in self._line_views:
            if point.y < view.offset.y + view.size.y:
                chosen = view
                break
        return self.get_text_location_at_line_view(chosen, point)

    def get_text_location_at_line_view(self, view: LineView,
                                       point: Vector2D) -> tuple[TextLocation, TextHitPoint]:
        if not view.blocks:
            return TextLocation(view.model_index, view.range.begin), TextHitPoint.WITHIN_TEXT

        block_index = 0
        for index, block in enumerate(view.blocks):
            if block.offset.x > point.x:
                break
            block_index = index
        block = view.blocks[block_index]
        text_index, hit_point = block.run_model.get_text_index_at(block, point, self._scale)
        if hit_point == TextHitPoint.RIGHT_GUTTER and block_index < len(view.blocks) - 1:
            hit_point = TextHitPoint.WITHIN_TEXT
        return TextLocation(view.model_index, text_index), hit_point

    # --- Text extraction ---

    def get_as_text(self) -> str:
        text, _ = self.get_as_text_and_offsets()
        return text

    def get_text_offset_locations(self) -> TextOffsetLocations:
        _, offsets = self.get_as_text_and_offsets()
        return offsets

    def get_as_text_and_offsets(self) -> tuple[str, TextOffsetLocations]:
        """Flatten the document, with a line terminator between lines (not after the last)."""
        terminator = LayoutConstants.LINE_TERMINATOR
        parts = []
        offsets = TextOffsetLocations()
        flat_index = 0
        for line_index, line in enumerate(self._line_models):
            if line_index:
                parts.append(terminator)
                flat_index += len(terminator)
            text = line.text.value
            offsets.add_line(flat_index, len(text))
            parts.append(text)
            flat_index += len(text)
        return "".join(parts), offsets

    def get_selection_as_text(self, selection: TextSelection) -> str:
        if not selection.is_valid():
            return ""
        beginning = selection.beginning
        end = selection.end
        if beginning.line_index < 0 or end.line_index >= len(self._line_models):
            return ""

        parts = []
        for line_index in range(beginning.line_index, end.line_index + 1):
            text = self._line_models[line_index].text.value
            start = beginning.offset if line_index == beginning.line_index else 0
            stop = end.offset if line_index == end.line_index else len(text)
            parts.append(text[start:stop])
        return LayoutConstants.LINE_TERMINATOR.join(parts)

    def get_word_at(self, location: TextLocation) -> TextSelection:
        """Select the word touching ``location``.

        Returns a collapsed selection when the location is not next to a
        word, and an invalid selection when the location does not exist.
        """
        line = self._get_line_model(location.line_index)
        if line is None or not 0 <= location.offset <= len(line.text.value):
            return TextSelection()
        for match in WORD_PATTERN.finditer(line.text.value):
            if match.start() > location.offset:
                break
            if location.offset <= match.end():
                return TextSelection(TextLocation(location.line_index, match.start()),
                                     TextLocation(location.line_index, match.end()))
        return TextSelection(location, location)

    # --- Editing ---

    def insert_at(self, location: TextLocation, text: str) -> bool:
        """Insert ``text`` (one character or more) before ``location``.

        The inserted text takes the style of the run it lands in; at a run
        boundary, that is the run on the left.
        """
        line = self._get_line_model(location.line_index)
        offset = location.offset
        if line is None or not line.runs or not 0 <= offset <= len(line.text.value):
            logger.debug(f"Rejected insert at {location}")
            return False
        if not text:
            return True

        line.text.insert(offset, text)
        length = len(text)
        inserted = False
        for run_model in line.runs:
            run_range = run_model.get_text_range()
            if inserted:
                run_model.set_text_range(run_range.shifted(length))
            elif run_range.inclusive_contains(offset):
                run_model.set_text_range(TextRange(run_range.begin, run_range.end + length))
                inserted = True

        line.invalidate()
        self._mark_dirty(DirtyState.LAYOUT)
        return True

    def remove_at(self, location: TextLocation, count: int = 1) -> bool:
        line = self._get_line_model(location.line_index)
        offset = location.offset
        if line is None or count < 0 or offset < 0 or offset + count > len(line.text.value):
            logger.debug(f"Rejected removal of {count} characters at {location}")
            return False
        if count == 0:
            return True

        line.text.remove(offset, count)
        removed_end = offset + count

        def remap(index: int) -> int:
            if index <= offset:
                return index
            if index <= removed_end:
                return offset
            return index - count

        for run_model in line.runs:
            run_range = run_model.get_text_range()
            run_model.set_text_range(TextRange(remap(run_range.begin), remap(run_range.end)))
        line.prune_empty_runs()
        line.invalidate()
        self._mark_dirty(DirtyState.LAYOUT)
        return True

    def split_line_at(self, location: TextLocation) -> bool:
        """Move everything at and after ``location`` onto a new line below it."""
        line = self._get_line_model(location.line_index)
        offset = location.offset
        if line is None or not 0 <= offset <= len(line.text.value):
            logger.debug(f"Rejected split at {location}")
            return False

        new_line = LineModel(SharedText(line.text.value[offset:]))
        line.text.truncate(offset)

        kept = []
        split_done = False
        for run_model in line.runs:
            run = run_model.run
            run_range = run_model.get_text_range()
            if run_range.end < offset:
                kept.append(run_model)
            elif not split_done and run_range.begin <= offset:
                tail = run.clone()
                tail.move(new_line.text, TextRange(0, run_range.end - offset))
                tail_model = RunModel(tail)
                tail_model.split_from = run
                new_line.runs.append(tail_model)
                run_model.set_text_range(TextRange(run_range.begin, offset))
                kept.append(run_model)
                split_done = True
            else:
                run.move(new_line.text, run_range.shifted(-offset))
                new_line.runs.append(RunModel(run))
        line.runs = kept
        line.prune_empty_runs()
        new_line.prune_empty_runs()

        new_index = location.line_index + 1
        line.run_renderers, new_line.run_renderers = self._split_decorations(
            line.run_renderers, offset, new_index)
        line.line_highlights, new_line.line_highlights = self._split_decorations(
            line.line_highlights, offset, new_index)

        line.invalidate()
        self._line_models.insert(new_index, new_line)
        self._renumber_decorations(new_index + 1)
        self._mark_dirty(DirtyState.LAYOUT)
        return True

    def join_line_with_next_line(self, line_index: int) -> bool:
        """Append the next line's text and runs to ``line_index`` and remove the next line."""
        if not 0 <= line_index < len(self._line_models) - 1:
            logger.debug(f"Rejected join of line {line_index}")
            return False

        line = self._line_models[line_index]
        next_line = self._line_models[line_index + 1]
        offset = len(line.text.value)
        line.text.append(next_line.text.value)

        next_runs = list(next_line.runs)
        if next_runs and line.runs and next_runs[0].split_from is line.runs[-1].run:
            # Rejoin a run that split_line_at cut in two
            last = line.runs[-1]
            last_range = last.get_text_range()
            last.set_text_range(TextRange(last_range.begin, last_range.end + next_runs[0].get_text_range().length))
            next_runs = next_runs[1:]
        for run_model in next_runs:
            run = run_model.run
            run.move(line.text, run_model.get_text_range().shifted(offset))
            line.runs.append(RunModel(run))
        line.prune_empty_runs()

        line.run_renderers.extend(
            replace(r, line_index=line_index, range=r.range.shifted(offset)) for r in next_line.run_renderers)
        line.line_highlights.extend(
            replace(h, line_index=line_index, range=h.range.shifted(offset)) for h in next_line.line_highlights)

        del self._line_models[line_index + 1]
        line.invalidate()
        self._renumber_decorations(line_index + 1)
        self._mark_dirty(DirtyState.LAYOUT)
        return True

    def remove_line(self, line_index: int) -> bool:
        if self._get_line_model(line_index) is None:
            logger.debug(f"Rejected removal of line {line_index}")
            return False
        del self._line_models[line_index]
        self._renumber_decorations(line_index)
        self._mark_dirty(DirtyState.LAYOUT)
        return True

    @staticmethod
    def _split_decorations(items, offset: int, new_line_index: int):
        """Divide decorations of a line being split at ``offset``."""
        kept, moved = [], []
        for item in items:
            item_range = item.range
            if item_range.begin >= offset:
                moved.append(replace(item, line_index=new_line_index, range=item_range.shifted(-offset)))
            elif item_range.end <= offset:
                kept.append(item)
            else:
                kept.append(replace(item, range=TextRange(item_range.begin, offset)))
                moved.append(replace(item, line_index=new_line_index,
                                     range=TextRange(0, item_range.end - offset)))
        return kept, moved

    def _renumber_decorations(self, start: int) -> None:
        for line_index in range(start, len(self._line_models)):
            line = self._line_models[line_index]
            line.run_renderers = [replace(r, line_index=line_index) for r in line.run_renderers]
            line.line_highlights = [replace(h, line_index=line_index) for h in line.line_highlights]
