"""Geometry primitives: vectors, character ranges and margins."""

from dataclasses import dataclass
from typing import NamedTuple


class Vector2D(NamedTuple):
    x: float = 0.0
    y: float = 0.0

    def scaled(self, factor: float) -> "Vector2D":
        return Vector2D(self.x * factor, self.y * factor)


@dataclass(frozen=True, order=True)
class TextRange:
    """Half-open range ``[begin, end)`` of character indices within a line."""

    begin: int = 0
    end: int = 0

    @property
    def length(self) -> int:
        return self.end - self.begin

    @property
    def is_empty(self) -> bool:
        return self.end <= self.begin

    def contains(self, index: int) -> bool:
        return self.begin <= index < self.end

    def inclusive_contains(self, index: int) -> bool:
        return self.begin <= index <= self.end

    def intersect(self, other: "TextRange") -> "TextRange":
        """Return the overlap of two ranges.

        Disjoint ranges produce an empty range positioned at the larger begin.
        """
        begin = max(self.begin, other.begin)
        end = max(begin, min(self.end, other.end))
        return TextRange(begin, end)

    def shifted(self, amount: int) -> "TextRange":
        return TextRange(self.begin + amount, self.end + amount)


@dataclass(frozen=True)
class Margin:
    """Unscaled space kept around the laid-out text."""

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> "Margin":
        return cls(value, value, value, value)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom
