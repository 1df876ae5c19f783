"""Geometry primitives: units, page formats and margins."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

from ..exceptions import ConfigurationError


POINTS_PER_INCH = 72.0


class Unit(Enum):
    """User unit; the value is the number of points per unit."""

    PT = 1.0
    MM = POINTS_PER_INCH / 25.4
    CM = POINTS_PER_INCH / 2.54
    IN = POINTS_PER_INCH

    @property
    def scale(self) -> float:
        return self.value


class Orientation(Enum):
    PORTRAIT = "P"
    LANDSCAPE = "L"


class PageFormat(Enum):
    """Standard page formats, portrait size in points."""

    A3 = (841.89, 1190.55)
    A4 = (595.28, 841.89)
    A5 = (420.94, 595.28)
    LETTER = (612.0, 792.0)
    LEGAL = (612.0, 1008.0)

    @property
    def size(self) -> Tuple[float, float]:
        return self.value


@dataclass(slots=True)
class Margins:
    """Page margins plus the cell padding, all in points."""

    top: float = 36.0
    right: float = 36.0
    bottom: float = 36.0
    left: float = 36.0
    cell: float = 1.5

    @classmethod
    def from_values(cls, values: Sequence[float], scale: float = 1.0,
                    base: "Margins | None" = None) -> "Margins":
        """Build margins from 1-5 user-unit values.

        Args:
            values: 1 (all sides), 2 (vertical, horizontal), 3 (+ cell),
                4 (top, right, bottom, left) or 5 (+ cell) values
            scale: Points per user unit
            base: Margins supplying the cell padding when it is not given

        Returns:
            New Margins in points

        Raises:
            ConfigurationError: If the number of values is not 1-5 or a value is not numeric
        """
        try:
            points = [float(value) * scale for value in values]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("invalid margins specified", repr(values)) from exc

        cell = base.cell if base is not None else cls().cell
        count = len(points)
        if count == 1:
            return cls(points[0], points[0], points[0], points[0], cell)
        if count in (2, 3):
            vertical, horizontal = points[0], points[1]
            return cls(vertical, horizontal, vertical, horizontal, points[2] if count == 3 else cell)
        if count in (4, 5):
            top, right, bottom, left = points[:4]
            return cls(top, right, bottom, left, points[4] if count == 5 else cell)
        raise ConfigurationError("invalid margins specified", repr(values))
