"""Content streams and pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .utils import escape_pdf_string

RECT_STYLES = {"f": "f", "d": "S", "df": "B", "fd": "B"}


@dataclass
class PdfStream:
    """Represents a PDF content stream (operators for drawing)."""

    commands: List[str] = field(default_factory=list)

    def extend(self, other: "PdfStream") -> None:
        self.commands.extend(other.commands)

    def add_text(self, x: float, y: float, text: str) -> None:
        self.commands.append("BT %.3f %.3f Td (%s) Tj ET" % (x, y, escape_pdf_string(text)))

    def add_rect(self, x: float, y: float, width: float, height: float, style: str = "d") -> None:
        """Add a rectangle; ``style`` is ``d`` (stroke), ``f`` (fill) or ``df`` (both)."""
        operator = RECT_STYLES.get(style.lower(), "S")
        self.commands.append("%.3f %.3f %.3f %.3f re %s" % (x, y, width, height, operator))

    def add_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.commands.append("%.3f %.3f m %.3f %.3f l S" % (x1, y1, x2, y2))

    def add_image(self, index: int, x: float, y: float, width: float, height: float) -> None:
        """Paint image XObject ``/I<index>`` scaled into the given box."""
        self.commands.append("q %.3f 0 0 %.3f %.3f %.3f cm /I%d Do Q" % (width, height, x, y, index))

    def set_font(self, index: int, size: float) -> None:
        self.commands.append("BT /F%d %.3f Tf ET" % (index, size))

    def set_line_width(self, width: float) -> None:
        self.commands.append("%.3f w" % width)

    def set_stroke_color(self, color: str) -> None:
        self.commands.append(f"{color} {'RG' if ' ' in color else 'G'}")

    def set_fill_color(self, color: str) -> None:
        self.commands.append(f"{color} {'rg' if ' ' in color else 'g'}")

    def get_content(self) -> str:
        """Get stream content as string."""
        return "\n".join(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


@dataclass
class PdfPage:
    """Represents a single PDF page.

    ``media_box`` is set only for pages whose orientation differs from the
    document's; other pages inherit the page tree's box.
    """

    page_number: int
    stream: PdfStream = field(default_factory=PdfStream)
    media_box: Optional[Tuple[float, float]] = None

    @property
    def flipped(self) -> bool:
        return self.media_box is not None
