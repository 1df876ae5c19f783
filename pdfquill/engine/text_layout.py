"""Text layout: printing, wrapping, centering, indentation and tables.

The engine works on the document it is bound to: it reads the active font,
size and line height from it, writes operators into its current content
stream and moves its cursor. Positions handed in by callers are in user
units measured from the top-left corner; everything stored is in points.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Sequence

from ..exceptions import UnsupportedLayoutError

if TYPE_CHECKING:
    from ..document import Document

logger = logging.getLogger(__name__)

TAB_EXPANSION = " " * 5

_LINE_SPLIT = re.compile(r"[ \t]*\n")
_WORDS = re.compile(r"(\s*)(\S+)")


def split_lines(text: str) -> List[str]:
    """Split on newlines (eating trailing blanks), dropping trailing empty lines."""
    lines = _LINE_SPLIT.split(text)
    while lines and lines[-1] == "":
        lines.pop()
    return lines


class TextLayoutEngine:
    """Layout operations for one document."""

    def __init__(self, document: "Document"):
        self.document = document

    @property
    def cursor(self):
        return self.document.cursor

    def width(self, text: str) -> float:
        """Width of ``text`` in points using the active font and size."""
        return self.document.current_font.width(text, self.document.font_size)

    # -- printing -------------------------------------------------------

    def print(self, text: str, eols: int = 0) -> None:
        """Print ``text`` at the cursor.

        A page break happens first when the cursor has reached the bottom
        margin. With ``eols`` > 0 the cursor moves down that many lines and
        back to the left margin; otherwise it advances by the text width.
        """
        document = self.document
        if self.cursor.at_bottom:
            document.page()

        wide = self.width(text)
        if text:
            stream = document.content()
            colors = document.color_state
            color = colors.stroke_change()
            if color is not None:
                stream.set_stroke_color(color)
            color = colors.fill_change("font")
            if color is not None:
                stream.set_fill_color(color)

            x, y = self.cursor.x, self.cursor.y
            stream.add_text(x, y, text)
            if document.underline:
                font = document.current_font
                size = document.font_size
                stream.add_rect(
                    x,
                    y + font.underline_position / 1000.0 * size,
                    wide,
                    -font.underline_thickness / 1000.0 * size,
                    "f",
                )

        if eols > 0:
            self.cursor.newline(document.line_height, eols)
        else:
            self.cursor.advance(wide)

    def println(self, text: str = "", eols: int = 1) -> None:
        self.print(text, eols)

    def text(self, x: Optional[float] = None, y: Optional[float] = None, text: str = "", eols: int = 0) -> None:
        """Print ``text`` after moving the cursor to (``x``, ``y``) when given."""
        if x is not None or y is not None:
            self.cursor.goto(x, y)
        self.print(text, eols)

    def center(
        self,
        text: str,
        left: Optional[float] = None,
        right: Optional[float] = None,
        eols: int = 0,
    ) -> None:
        """Center each line of ``text`` between ``left`` and ``right`` (user units).

        The bounds default to the current left and right margins.
        """
        cursor = self.cursor
        lo = cursor.margins.left if left is None else left * cursor.scale
        hi = cursor.right_edge if right is None else right * cursor.scale
        rows = text.split("\n")
        last = len(rows) - 1
        for i, row in enumerate(rows):
            cursor.x = (lo + hi - self.width(row)) / 2.0
            self.print(row, eols if i == last else 1)

    def wrap(self, text: str, eols: int = 1) -> None:
        """Print ``text`` with greedy word wrapping at the right margin.

        Raises:
            UnsupportedLayoutError: If a single word is wider than the line
        """
        side = self.cursor.right_edge
        lines = split_lines(text)
        if not lines:
            self.print("", eols)
            return

        last = len(lines) - 1
        for i, line in enumerate(lines):
            line = line.replace("\t", TAB_EXPANSION)
            line_eols = eols if i == last else 1

            if self.cursor.x + self.width(line) <= side:
                self.print(line, line_eols)
                continue

            position = self.cursor.x
            show = ""
            for match in _WORDS.finditer(line):
                fill, word = match.groups()
                lead = self.width(fill)
                wide = self.width(word)
                if position + lead + wide <= side:
                    position += lead + wide
                    show += fill + word
                    continue

                self.print(show, 1)
                position = self.cursor.x
                if position + wide > side:
                    raise UnsupportedLayoutError(
                        "word is wider than the available line width",
                        f"{word!r} needs {wide:.3f}pt, {side - position:.3f}pt available",
                    )
                position += wide
                show = word
            if show:
                self.print(show, line_eols)

    # -- tables ---------------------------------------------------------

    def table(self, y: float, columns: Sequence[Any], cells: Sequence[Any]) -> None:
        """Lay out ``cells`` row by row at the given column positions.

        ``columns`` holds one x position per column (user units); a column
        wrapped in a one-element list or tuple is printed in bold. Rows start
        at ``y`` (user units from the top) and advance by the line height.
        Blank cells are skipped.
        """
        document = self.document
        cursor = self.cursor
        bold = [isinstance(column, (list, tuple)) for column in columns]
        positions = [column[0] if flag else column for column, flag in zip(columns, bold)]
        count = len(positions)
        if count == 0:
            return

        last = None
        for row, start in enumerate(range(0, len(cells), count)):
            values = cells[start:start + count]
            top = y * cursor.scale + row * document.line_height
            for i, value in enumerate(values):
                item = "" if value is None else str(value)
                if not item.strip():
                    continue
                if last != bold[i]:
                    document.font(style="B" if bold[i] else "")
                    last = bold[i]
                cursor.x = cursor.to_points_x(positions[i])
                cursor.y = cursor.height - top
                self.print(item)
        document.font(style="")

    # -- indentation ----------------------------------------------------

    def indent(
        self,
        points: Optional[float] = None,
        *,
        tabs: Optional[float] = None,
        at: Optional[float] = None,
        here: bool = False,
    ) -> float:
        """Push a new left margin and move the cursor to it.

        Exactly one way of giving the amount is used, checked in this order:
        ``here`` (the current cursor x), ``at`` (absolute position in user
        units), ``points`` (user units relative to the current margin) or
        ``tabs`` (multiples of the tab width). With no arguments one tab is
        used.

        Returns:
            The new left margin in points
        """
        cursor = self.cursor
        base = cursor.indents[-1]
        if here:
            offset = cursor.x - base
        elif at is not None:
            offset = at * cursor.scale - base
        elif points is not None:
            offset = points * cursor.scale
        else:
            offset = (1 if tabs is None else tabs) * self.document.tab
        return cursor.push_indent(offset)

    def undent(self, count: int = 1) -> float:
        return self.cursor.pop_indent(count)

    @contextmanager
    def indented(self, *args: Any, **kwargs: Any) -> Iterator[float]:
        """Indent for the duration of a ``with`` block.

        On exit (normal or by exception) the indentation stack is unwound to
        the depth it had before the block, including levels pushed inside it.
        """
        depth = self.cursor.indent_depth
        margin = self.indent(*args, **kwargs)
        try:
            yield margin
        finally:
            extra = self.cursor.indent_depth - depth
            if extra > 0:
                self.cursor.pop_indent(extra)
