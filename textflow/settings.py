"""Layout configuration values and their validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from .constants import Justification, LayoutConstants
from .geometry import Margin

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class LayoutSettings:
    """Every configuration value of a TextLayout.

    Attributes:
        wrapping_width: Width to wrap at, including margins; 0 or less disables wrapping
        scale: Factor applied to all measurements and margins
        margin: Unscaled space around the text
        justification: Horizontal alignment of each visual line
        line_height_percentage: Multiplier applied to each line's height
        debug_slices: Record the text of every break candidate
    """
    wrapping_width: float = 0.0
    scale: float = LayoutConstants.DEFAULT_SCALE
    margin: Margin = field(default_factory=Margin)
    justification: Justification = Justification.LEFT
    line_height_percentage: float = LayoutConstants.DEFAULT_LINE_HEIGHT_PERCENTAGE
    debug_slices: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-compatible values."""
        margin = self.margin
        return {
            "wrapping_width": self.wrapping_width,
            "scale": self.scale,
            "margin": [margin.left, margin.top, margin.right, margin.bottom],
            "justification": self.justification.value,
            "line_height_percentage": self.line_height_percentage,
            "debug_slices": self.debug_slices,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LayoutSettings:
        """Build settings from stored values.

        Unknown keys, ``None`` values and invalid values are skipped, so the
        default is used for them.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in SETTING_KEYS:
                logger.warning(f"Ignoring unknown layout setting: {key}")
                continue
            if value is None:
                continue
            if not validate_setting(key, value):
                logger.warning(f"Ignoring invalid value for {key}: {value!r}")
                continue
            values[key] = _decode_setting(key, value)
        return cls(**values)


SETTING_KEYS = (
    "wrapping_width",
    "scale",
    "margin",
    "justification",
    "line_height_percentage",
    "debug_slices",
)


def validate_setting(key: str, value: Any) -> bool:
    """Validate a stored setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if setting is valid, False otherwise.
    """
    if value is None:
        return True  # None is valid (means "not set")

    if key == "wrapping_width":
        return _is_number(value)

    if key in ("scale", "line_height_percentage"):
        return _is_number(value) and value > 0

    if key == "margin":
        if _is_number(value):
            return value >= 0
        if not isinstance(value, (list, tuple)) or len(value) != 4:
            return False
        return all(_is_number(v) and v >= 0 for v in value)

    if key == "justification":
        return value in [j.value for j in Justification]

    if key == "debug_slices":
        return isinstance(value, bool)

    # Unknown settings are considered valid (forward compatibility)
    return True


def _decode_setting(key: str, value: Any) -> Any:
    if key == "margin":
        if _is_number(value):
            return Margin.uniform(float(value))
        return Margin(*(float(v) for v in value))
    if key == "justification":
        return Justification(value)
    if key in ("wrapping_width", "scale", "line_height_percentage"):
        return float(value)
    return value
