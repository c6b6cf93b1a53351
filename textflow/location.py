"""Structured positions within a laid-out document."""

from dataclasses import dataclass, field

from .constants import LayoutConstants


@dataclass(frozen=True, order=True)
class TextLocation:
    """A character position: ``offset`` within line model ``line_index``.

    Locations order by line first, then by offset.
    """

    line_index: int = 0
    offset: int = 0

    @classmethod
    def invalid(cls) -> "TextLocation":
        return cls(LayoutConstants.INDEX_NONE, LayoutConstants.INDEX_NONE)

    def is_valid(self) -> bool:
        return (self.line_index != LayoutConstants.INDEX_NONE
                and self.offset != LayoutConstants.INDEX_NONE)

    def offset_by(self, delta: int) -> "TextLocation":
        """Return a location on the same line moved by ``delta`` characters (never below 0)."""
        return TextLocation(self.line_index, max(self.offset + delta, 0))


@dataclass(frozen=True)
class TextSelection:
    """An unordered pair of locations; ``anchor`` is where the selection started."""

    anchor: TextLocation = field(default_factory=TextLocation.invalid)
    active: TextLocation = field(default_factory=TextLocation.invalid)

    @property
    def beginning(self) -> TextLocation:
        return self.active if self.active < self.anchor else self.anchor

    @property
    def end(self) -> TextLocation:
        return self.anchor if self.active < self.anchor else self.active

    def is_valid(self) -> bool:
        return self.anchor.is_valid() and self.active.is_valid()

    def is_collapsed(self) -> bool:
        return self.anchor == self.active
