#!/usr/bin/env python3
"""Demo script showing text reflowing at different wrapping widths."""

from textflow import Justification, LayoutSettings, Margin, MonospaceRun, TextLayout, make_line


PARAGRAPHS = [
    "Welcome to Textflow - a reflowable text layout engine!",
    "",
    "Lines are broken between words so that each visual line fits the wrapping width. "
    "A word that is too wide on its own still gets a line to itself.",
]


def render(layout):
    """Print each line view as a row of characters, one cell per unit of width."""
    layout.update_if_needed()
    for view in layout.line_views:
        line = layout.line_models[view.model_index]
        text = line.text.value[view.range.begin:view.range.end].rstrip()
        print(" " * int(view.offset.x) + text)


def main():
    layout = TextLayout(LayoutSettings(wrapping_width=40, margin=Margin(left=2, right=2)))
    for paragraph in PARAGRAPHS:
        layout.add_line(*make_line(paragraph, MonospaceRun))

    for justification in Justification:
        layout.justification = justification
        print(f"--- {justification.value} ---")
        render(layout)
        print()

    layout.wrapping_width = 0
    print("--- no wrapping ---")
    render(layout)


if __name__ == "__main__":
    main()
