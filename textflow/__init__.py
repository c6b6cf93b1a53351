"""Textflow - A reflowable rich-text layout library."""

from .constants import Justification, LayoutConstants, TextHitPoint
from .geometry import Margin, TextRange, Vector2D
from .layout import DirtyState, TextLayout
from .line_model import LineView, TextLineHighlight, TextRunRenderer
from .location import TextLocation, TextSelection
from .offsets import TextOffsetLocations
from .profiles import ProfileStore, get_profile_store
from .run import LayoutBlock, LineHighlighter, Run, RunRenderer, SharedText
from .settings import LayoutSettings
from .text_runs import FontLoadError, FontRun, MonospaceRun, make_line

__all__ = [
    'TextLayout',
    'DirtyState',
    'LayoutSettings',
    'ProfileStore',
    'get_profile_store',
    'Justification',
    'LayoutConstants',
    'TextHitPoint',
    'Margin',
    'TextRange',
    'Vector2D',
    'LineView',
    'TextLineHighlight',
    'TextRunRenderer',
    'TextLocation',
    'TextSelection',
    'TextOffsetLocations',
    'LayoutBlock',
    'LineHighlighter',
    'Run',
    'RunRenderer',
    'SharedText',
    'FontLoadError',
    'FontRun',
    'MonospaceRun',
    'make_line',
]
