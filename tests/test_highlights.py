"""Tests for run renderers and line highlights."""

import unittest
from unittest.mock import Mock

from textflow import (
    DirtyState,
    LayoutSettings,
    Margin,
    MonospaceRun,
    TextLayout,
    TextLineHighlight,
    TextRange,
    TextRunRenderer,
    make_line,
)


class TestLineHighlights(unittest.TestCase):
    """Test that highlights are positioned on the views they cover."""

    def setUp(self):
        self.layout = TextLayout(LayoutSettings(wrapping_width=80))
        self.layout.add_line(*make_line("The quick fox", MonospaceRun, char_width=8))
        self.layout.update_if_needed()
        self.highlighter = Mock()

    def _highlight(self, begin, end, z_order=1, line_index=0):
        return TextLineHighlight(line_index, TextRange(begin, end), z_order, self.highlighter)

    def test_highlight_within_one_view(self):
        self.layout.add_line_highlight(self._highlight(4, 9))
        self.layout.update_if_needed()
        first, second = self.layout.line_views

        self.assertEqual(len(first.overlay_highlights), 1)
        highlight = first.overlay_highlights[0]
        self.assertEqual(highlight.offset_x, 32.0)
        self.assertEqual(highlight.width, 40.0)
        self.assertIs(highlight.highlighter, self.highlighter)
        self.assertEqual(second.overlay_highlights, [])

    def test_negative_z_order_is_underlay(self):
        self.layout.add_line_highlight(self._highlight(0, 3, z_order=-1))
        self.layout.update_if_needed()
        first = self.layout.line_views[0]

        self.assertEqual(len(first.underlay_highlights), 1)
        self.assertEqual(first.overlay_highlights, [])

    def test_highlight_spanning_a_wrap_is_split(self):
        self.layout.add_line_highlight(self._highlight(2, 12))
        self.layout.update_if_needed()
        first, second = self.layout.line_views

        self.assertEqual((first.overlay_highlights[0].offset_x, first.overlay_highlights[0].width),
                         (16.0, 64.0))
        self.assertEqual((second.overlay_highlights[0].offset_x, second.overlay_highlights[0].width),
                         (0.0, 16.0))

    def test_caret_at_wrap_point_goes_to_next_view(self):
        self.layout.add_line_highlight(self._highlight(10, 10))
        self.layout.update_if_needed()
        first, second = self.layout.line_views

        self.assertEqual(first.overlay_highlights, [])
        self.assertEqual(len(second.overlay_highlights), 1)
        self.assertEqual(second.overlay_highlights[0].width, 0.0)

    def test_caret_at_end_of_line(self):
        self.layout.add_line_highlight(self._highlight(13, 13))
        self.layout.update_if_needed()
        second = self.layout.line_views[1]

        self.assertEqual(len(second.overlay_highlights), 1)
        self.assertEqual(second.overlay_highlights[0].offset_x, 24.0)

    def test_highlight_offsets_are_relative_to_view(self):
        self.layout.margin = Margin(left=10)
        self.layout.wrapping_width = 90
        self.layout.add_line_highlight(self._highlight(4, 9))
        self.layout.update_if_needed()

        self.assertEqual(self.layout.line_views[0].overlay_highlights[0].offset_x, 32.0)

    def test_highlight_for_missing_line_is_ignored(self):
        self.layout.add_line_highlight(self._highlight(0, 1, line_index=3))
        self.assertEqual(self.layout.dirty_flags, DirtyState.NONE)

    def test_highlight_change_does_not_reflow(self):
        views = self.layout.line_views
        self.layout.set_line_highlights([self._highlight(0, 3)])
        self.assertEqual(self.layout.dirty_flags, DirtyState.HIGHLIGHTS)

        self.layout.update_if_needed()
        self.assertIs(self.layout.line_views[0], views[0])
        self.assertEqual(len(views[0].overlay_highlights), 1)
        self.assertEqual(self.layout.dirty_flags, DirtyState.NONE)

    def test_clear_line_highlights(self):
        self.layout.add_line_highlight(self._highlight(0, 3))
        self.layout.update_if_needed()
        self.layout.clear_line_highlights()
        self.layout.update_if_needed()

        self.assertEqual(self.layout.line_views[0].overlay_highlights, [])


class TestRunRenderers(unittest.TestCase):
    """Test that run renderers cut blocks out of line views."""

    def setUp(self):
        self.layout = TextLayout(LayoutSettings(wrapping_width=80))
        self.layout.add_line(*make_line("The quick fox", MonospaceRun, char_width=8))
        self.layout.update_if_needed()
        self.renderer = Mock()

    def test_renderer_gets_its_own_block(self):
        self.layout.add_run_renderer(TextRunRenderer(0, TextRange(4, 9), self.renderer))
        self.layout.update_if_needed()
        blocks = self.layout.line_views[0].blocks

        self.assertEqual([b.text_range for b in blocks],
                         [TextRange(0, 4), TextRange(4, 9), TextRange(9, 10)])
        self.assertEqual([b.renderer for b in blocks], [None, self.renderer, None])
        self.assertEqual([b.offset.x for b in blocks], [0.0, 32.0, 72.0])

    def test_renderer_spanning_a_wrap(self):
        self.layout.set_run_renderers([TextRunRenderer(0, TextRange(8, 12), self.renderer)])
        self.layout.update_if_needed()
        first, second = self.layout.line_views

        self.assertEqual([b.text_range for b in first.blocks], [TextRange(0, 8), TextRange(8, 10)])
        self.assertEqual([b.text_range for b in second.blocks], [TextRange(10, 12), TextRange(12, 13)])
        self.assertIs(second.blocks[0].renderer, self.renderer)

    def test_clearing_renderers_merges_blocks(self):
        self.layout.add_run_renderer(TextRunRenderer(0, TextRange(4, 9), self.renderer))
        self.layout.update_if_needed()
        self.layout.clear_run_renderers()
        self.layout.update_if_needed()

        self.assertEqual(len(self.layout.line_views[0].blocks), 1)

    def test_renderer_for_missing_line_is_ignored(self):
        self.layout.add_run_renderer(TextRunRenderer(7, TextRange(0, 1), self.renderer))
        self.assertEqual(self.layout.dirty_flags, DirtyState.NONE)


if __name__ == '__main__':
    unittest.main()
