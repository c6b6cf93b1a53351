"""Tests for mapping between points and text locations."""

import unittest
from unittest.mock import patch

from textflow import (
    LayoutConstants,
    LayoutSettings,
    MonospaceRun,
    TextHitPoint,
    TextLayout,
    TextLocation,
    TextRange,
    Vector2D,
    make_line,
)


class TestHitTesting(unittest.TestCase):
    """Test point to location resolution on a wrapped line."""

    def setUp(self):
        # Views: 'The quick ' at y 0-10 and 'fox' at y 10-20
        self.layout = TextLayout(LayoutSettings(wrapping_width=80))
        self.layout.add_line(*make_line("The quick fox", MonospaceRun, char_width=8, line_height=10))
        self.layout.update_if_needed()

    def test_snaps_to_nearest_character_boundary(self):
        self.assertEqual(self.layout.get_text_location_at(Vector2D(17, 5)),
                         (TextLocation(0, 2), TextHitPoint.WITHIN_TEXT))
        self.assertEqual(self.layout.get_text_location_at(Vector2D(23, 5)),
                         (TextLocation(0, 3), TextHitPoint.WITHIN_TEXT))

    def test_point_on_second_view(self):
        location, hit_point = self.layout.get_text_location_at(Vector2D(9, 15))
        self.assertEqual(location, TextLocation(0, 11))
        self.assertEqual(hit_point, TextHitPoint.WITHIN_TEXT)

    def test_right_of_text(self):
        self.assertEqual(self.layout.get_text_location_at(Vector2D(100, 5)),
                         (TextLocation(0, 10), TextHitPoint.RIGHT_GUTTER))

    def test_left_of_text(self):
        self.assertEqual(self.layout.get_text_location_at(Vector2D(-5, 15)),
                         (TextLocation(0, 10), TextHitPoint.LEFT_GUTTER))

    def test_boundary_between_views_goes_to_lower_view(self):
        location, _ = self.layout.get_text_location_at(Vector2D(0, 10))
        self.assertEqual(location, TextLocation(0, 10))

    def test_points_outside_vertical_extent_clamp(self):
        above, _ = self.layout.get_text_location_at(Vector2D(0, -50))
        below, _ = self.layout.get_text_location_at(Vector2D(0, 500))

        self.assertEqual(above, TextLocation(0, 0))
        self.assertEqual(below, TextLocation(0, 10))

    def test_empty_layout_returns_invalid_location(self):
        location, _ = TextLayout().get_text_location_at(Vector2D(0, 0))
        self.assertFalse(location.is_valid())

    def test_location_of_offset(self):
        self.assertEqual(self.layout.get_location_at(TextLocation(0, 4)), Vector2D(32.0, 0.0))
        self.assertEqual(self.layout.get_location_at(TextLocation(0, 13)), Vector2D(24.0, 10.0))

    def test_wrap_point_location_depends_on_inclusive_bounds(self):
        self.assertEqual(self.layout.get_location_at(TextLocation(0, 10)), Vector2D(0.0, 10.0))
        self.assertEqual(self.layout.get_location_at(TextLocation(0, 10), inclusive_bounds=True),
                         Vector2D(80.0, 0.0))

    def test_location_of_missing_line(self):
        self.assertEqual(self.layout.get_location_at(TextLocation(4, 0)), Vector2D())

    def test_line_view_index_for_location(self):
        views = self.layout.line_views
        find = self.layout.get_line_view_index_for_text_location

        self.assertEqual(find(views, TextLocation(0, 0), False), 0)
        self.assertEqual(find(views, TextLocation(0, 10), False), 1)
        self.assertEqual(find(views, TextLocation(0, 10), True), 0)
        self.assertEqual(find(views, TextLocation(0, 13), False), 1)
        self.assertEqual(find(views, TextLocation(0, 14), False), LayoutConstants.INDEX_NONE)
        self.assertEqual(find(views, TextLocation(1, 0), False), LayoutConstants.INDEX_NONE)

    def test_location_round_trip(self):
        """Test that every location hit-tests back to itself."""
        for offset in range(14):
            location = TextLocation(0, offset)
            point = self.layout.get_location_at(location)
            hit, _ = self.layout.get_text_location_at(Vector2D(point.x, point.y + 1))
            self.assertEqual(hit, location)

    def test_repeated_queries_use_measurement_cache(self):
        run = self.layout.line_models[0].runs[0].run
        self.layout.get_text_location_at(Vector2D(17, 5))
        self.layout.get_location_at(TextLocation(0, 4))

        with patch.object(run, "measure", wraps=run.measure) as measure:
            self.layout.get_text_location_at(Vector2D(180, 0))
            self.layout.get_text_location_at(Vector2D(180, 0))
            self.layout.get_text_location_at(Vector2D(17, 5))
            self.layout.get_location_at(TextLocation(0, 4))
            self.layout.get_location_at(TextLocation(0, 13))

        self.assertEqual(measure.call_count, 0)

    def test_hit_test_measures_logarithmically(self):
        layout = TextLayout()
        layout.add_line(*make_line("x" * 256, MonospaceRun, char_width=8, line_height=10))
        layout.update_if_needed()
        run = layout.line_models[0].runs[0].run

        with patch.object(run, "measure", wraps=run.measure) as measure:
            location, _ = layout.get_text_location_at(Vector2D(1001, 5))

        self.assertEqual(location, TextLocation(0, 125))
        self.assertLessEqual(measure.call_count, 12)


class TestHitTestingAcrossBlocks(unittest.TestCase):
    """Test hit-testing where a line is made of several blocks."""

    def setUp(self):
        # Two runs with letter spacing: 'ab' is 18 wide, 'cd' starts at 20
        self.layout = TextLayout()
        text, runs = make_line("abcd", MonospaceRun, char_width=8, tracking=2, line_height=10)
        runs[0].set_text_range(TextRange(0, 2))
        runs.append(MonospaceRun(text, TextRange(2, 4), char_width=8, tracking=2, line_height=10))
        self.layout.add_line(text, runs)
        self.layout.update_if_needed()

    def test_blocks_are_positioned_with_kerning(self):
        blocks = self.layout.line_views[0].blocks
        self.assertEqual([b.offset.x for b in blocks], [0.0, 20.0])

    def test_gap_between_blocks_is_within_text(self):
        """Test that the right gutter of an inner block is not reported."""
        self.assertEqual(self.layout.get_text_location_at(Vector2D(19, 5)),
                         (TextLocation(0, 2), TextHitPoint.WITHIN_TEXT))

    def test_point_on_block_boundary_uses_right_block(self):
        self.assertEqual(self.layout.get_text_location_at(Vector2D(20, 5)),
                         (TextLocation(0, 2), TextHitPoint.WITHIN_TEXT))
        self.assertEqual(self.layout.get_text_location_at(Vector2D(27, 5)),
                         (TextLocation(0, 3), TextHitPoint.WITHIN_TEXT))

    def test_right_gutter_of_last_block(self):
        self.assertEqual(self.layout.get_text_location_at(Vector2D(60, 5)),
                         (TextLocation(0, 4), TextHitPoint.RIGHT_GUTTER))

    def test_location_at_block_boundary_is_start_of_right_block(self):
        self.assertEqual(self.layout.get_location_at(TextLocation(0, 2)), Vector2D(20.0, 0.0))


if __name__ == '__main__':
    unittest.main()
