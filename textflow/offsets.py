"""Mapping between flat-text offsets and structured text locations."""

from bisect import bisect_right
from typing import NamedTuple

from .constants import LayoutConstants
from .location import TextLocation


class OffsetEntry(NamedTuple):
    flat_string_index: int    # Where the line starts in the flat string
    document_line_length: int  # Line length, not counting the line terminator


class TextOffsetLocations:
    """Index of where each line starts in the text returned by ``TextLayout.get_as_text``.

    This is a snapshot: it is not updated when the layout is edited, so build
    a new one after any change.
    """

    def __init__(self, entries=None):
        self._entries: list[OffsetEntry] = list(entries or [])

    def add_line(self, flat_string_index: int, document_line_length: int) -> None:
        self._entries.append(OffsetEntry(flat_string_index, document_line_length))

    @property
    def entries(self) -> tuple[OffsetEntry, ...]:
        return tuple(self._entries)

    def text_location_to_offset(self, location: TextLocation) -> int:
        line_index = location.line_index
        if not 0 <= line_index < len(self._entries) or location.offset < 0:
            return LayoutConstants.INDEX_NONE
        entry = self._entries[line_index]
        return entry.flat_string_index + min(location.offset, entry.document_line_length)

    def offset_to_text_location(self, offset: int) -> TextLocation:
        if not self._entries or not 0 <= offset <= self.get_text_length():
            return TextLocation.invalid()
        line_index = bisect_right(self._entries, offset, key=lambda e: e.flat_string_index) - 1
        entry = self._entries[line_index]
        line_offset = min(offset - entry.flat_string_index, entry.document_line_length)
        return TextLocation(line_index, line_offset)

    def get_text_length(self) -> int:
        if not self._entries:
            return 0
        last = self._entries[-1]
        return last.flat_string_index + last.document_line_length
