"""Cursor model: page geometry, write position and indentation stack.

Positions are kept in points in the document coordinate space (origin at the
bottom-left corner). User-facing coordinates are top-down and in user units;
``to_points_x``/``to_points_y`` convert between the two.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..exceptions import StructuralInvariantViolation
from .geometry import Margins

logger = logging.getLogger(__name__)


class Cursor:
    """Current write position and left-margin stack for one document."""

    def __init__(self, width: float, height: float, margins: Margins, scale: float = 1.0):
        self.width = width
        self.height = height
        self.margins = margins
        self.scale = scale
        self.x = margins.left
        self.y = height - margins.top
        self.indents: List[float] = [self.x]

    # -- geometry -------------------------------------------------------

    @property
    def right_edge(self) -> float:
        """X position of the right margin."""
        return self.width - self.margins.right

    @property
    def top_edge(self) -> float:
        """Y position of the top margin."""
        return self.height - self.margins.top

    @property
    def at_bottom(self) -> bool:
        """True when the cursor is within one cell margin of the bottom margin."""
        return self.y <= self.margins.bottom + self.margins.cell

    def resize(self, width: float, height: float) -> None:
        """Switch page geometry (used for pages with their own orientation)."""
        self.width = width
        self.height = height

    def to_points_x(self, x: float) -> float:
        """Convert a user-unit x; negative values measure from the right edge."""
        points = x * self.scale
        return self.width + points if x < 0 else points

    def to_points_y(self, y: float) -> float:
        """Convert a top-down user-unit y; negative values measure from the bottom edge."""
        points = y * self.scale
        return -points if y < 0 else self.height - points

    def from_top(self) -> float:
        """Distance of the cursor from the top edge, in user units."""
        return (self.height - self.y) / self.scale

    # -- movement -------------------------------------------------------

    def reset(self) -> None:
        """Move to the top-left corner of the text area."""
        self.x = self.margins.left
        self.y = self.top_edge

    def goto(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        if x is not None:
            self.x = self.to_points_x(x)
        if y is not None:
            self.y = self.to_points_y(y)

    def home(self) -> None:
        self.x = self.margins.left

    def advance(self, amount: float) -> None:
        self.x += amount

    def newline(self, line_height: float, count: int = 1) -> None:
        self.y -= line_height * count
        self.x = self.margins.left

    # -- indentation ----------------------------------------------------

    def push_indent(self, offset: float) -> float:
        """Push a new left margin ``offset`` points from the current one."""
        self.x = self.margins.left = self.indents[-1] + offset
        self.indents.append(self.x)
        logger.debug(f"Indent pushed: left margin {self.x:.3f}pt (depth {len(self.indents) - 1})")
        return self.x

    def pop_indent(self, count: int = 1) -> float:
        """Pop ``count`` indentation levels and restore the previous left margin.

        Raises:
            StructuralInvariantViolation: If fewer than ``count`` levels were pushed
        """
        if count < 1 or count > len(self.indents) - 1:
            raise StructuralInvariantViolation(
                "too many undents",
                f"requested {count}, depth {len(self.indents) - 1}",
            )
        del self.indents[-count:]
        self.x = self.margins.left = self.indents[-1]
        return self.x

    @property
    def indent_depth(self) -> int:
        return len(self.indents) - 1
