"""Tests for horizontal justification of line views."""

import pytest

from textflow import Justification, LayoutSettings, Margin, MonospaceRun, TextLayout, make_line


def _layout(*paragraphs, **settings):
    layout = TextLayout(LayoutSettings(**settings))
    for paragraph in paragraphs:
        layout.add_line(*make_line(paragraph, MonospaceRun, char_width=8))
    layout.update_if_needed()
    return layout


def test_left_justification_leaves_views_at_the_margin():
    layout = _layout("The quick fox", wrapping_width=80, margin=Margin(left=3))
    assert [view.offset.x for view in layout.line_views] == [3.0, 3.0]


def test_right_justification_aligns_trimmed_text_to_wrap_width():
    layout = _layout("The quick fox", wrapping_width=80, justification=Justification.RIGHT)
    first, second = layout.line_views

    # Trailing whitespace of the first view hangs past the edge
    assert first.offset.x == 8.0
    assert second.offset.x == 56.0
    assert first.offset.x + first.text_size.x == 80.0
    assert second.offset.x + second.text_size.x == 80.0


def test_center_justification_splits_the_extra_space():
    layout = _layout("The quick fox", wrapping_width=80, justification=Justification.CENTER)
    first, second = layout.line_views

    assert first.offset.x == 4.0
    assert second.offset.x == 28.0


def test_blocks_move_with_their_view():
    layout = _layout("The quick fox", wrapping_width=80, justification=Justification.RIGHT)

    for view in layout.line_views:
        assert view.blocks[0].offset.x == view.offset.x


def test_without_wrapping_justifies_against_widest_line():
    layout = _layout("abcd", "ab", justification=Justification.CENTER)
    first, second = layout.line_views

    assert first.offset.x == 0.0
    assert second.offset.x == 8.0


def test_right_justification_with_margins():
    layout = _layout("ab", wrapping_width=50, margin=Margin(left=5, right=5),
                     justification=Justification.RIGHT)
    view, = layout.line_views

    # Wrap draw width is 40, starting at the left margin
    assert view.offset.x == 5.0 + 40.0 - 16.0


def test_draw_size_includes_justification_shift():
    layout = _layout("The quick fox", wrapping_width=80, justification=Justification.RIGHT)

    # The first view's trailing space ends 8 units past the wrap width
    assert layout.get_draw_size().x == 88.0


@pytest.mark.parametrize("justification", list(Justification))
def test_changing_justification_relayouts(justification):
    layout = _layout("abcd", "ab")
    layout.justification = justification
    layout.update_if_needed()

    assert layout.justification == justification
    assert layout.line_views[0].offset.x == 0.0
