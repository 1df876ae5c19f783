"""Layout engine: geometry, cursor, color state and text layout."""

from .color_state import ColorState, normalize_color
from .cursor import Cursor
from .geometry import Margins, Orientation, PageFormat, Unit
from .text_layout import TextLayoutEngine

__all__ = [
    "ColorState",
    "Cursor",
    "Margins",
    "Orientation",
    "PageFormat",
    "TextLayoutEngine",
    "Unit",
    "normalize_color",
]
