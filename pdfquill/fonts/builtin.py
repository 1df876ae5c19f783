"""Built-in (standard 14) font names and glyph widths.

The width tables come from ReportLab's bundled AFM data for the standard
Type1 fonts, laid out by byte value in each font's native encoding
(WinAnsi for the text fonts, the font-specific encoding for Symbol and
ZapfDingbats).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional, Tuple

from reportlab.pdfbase import pdfmetrics  # type: ignore

BUILTIN_FONTS: Dict[str, str] = {
    "courier": "Courier",
    "courierB": "Courier-Bold",
    "courierBI": "Courier-BoldOblique",
    "courierI": "Courier-Oblique",
    "helvetica": "Helvetica",
    "helveticaB": "Helvetica-Bold",
    "helveticaBI": "Helvetica-BoldOblique",
    "helveticaI": "Helvetica-Oblique",
    "symbol": "Symbol",
    "times": "Times-Roman",
    "timesB": "Times-Bold",
    "timesBI": "Times-BoldItalic",
    "timesI": "Times-Italic",
    "zapfdingbats": "ZapfDingbats",
}

SYMBOLIC_FONTS = frozenset({"symbol", "zapfdingbats"})

FAMILY_ALIASES: Dict[str, str] = {
    "arial": "helvetica",
}

# Underline position and thickness for the standard fonts, in 1/1000 em.
UNDERLINE_POSITION = -100
UNDERLINE_THICKNESS = 50


def base_font_name(key: str) -> Optional[str]:
    return BUILTIN_FONTS.get(key)


@lru_cache(maxsize=None)
def builtin_widths(key: str) -> Tuple[int, ...]:
    """Return the 256-entry width table for a built-in font key.

    Raises:
        KeyError: If ``key`` is not a built-in font
    """
    font = pdfmetrics.getFont(BUILTIN_FONTS[key])
    return tuple(int(round(width)) for width in font.widths)
