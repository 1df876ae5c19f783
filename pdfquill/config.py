"""Document configuration.

Construction options are collected in a typed ``DocumentConfig``. Callers
either build one directly or go through ``DocumentConfig.from_options``,
which accepts the string spellings used on the command line and in
templates ("a4", "landscape", "mm", ...) and rejects anything it does not
recognise.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Type, TypeVar, Union

from .engine.geometry import Margins, Orientation, PageFormat, Unit
from .exceptions import ConfigurationError


BUNDLED_FONTS_DIR = Path(__file__).resolve().parent / "fonts"

E = TypeVar("E", bound=Enum)


class ZoomMode(Enum):
    """Initial zoom applied by viewers when the document is opened."""

    FULLPAGE = "/Fit"
    FULLWIDTH = "/FitH null"
    REAL = "/XYZ null null 1"


class PageLayout(Enum):
    """Page layout used by viewers."""

    SINGLE = "/SinglePage"
    CONTINUOUS = "/OneColumn"
    TWO = "/TwoColumnLeft"


_ORIENTATION_ALIASES = {
    "p": Orientation.PORTRAIT,
    "portrait": Orientation.PORTRAIT,
    "l": Orientation.LANDSCAPE,
    "landscape": Orientation.LANDSCAPE,
}


def _parse_enum(enum_type: Type[E], value: Any, option: str) -> E:
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        try:
            return enum_type[value.strip().upper()]
        except KeyError:
            pass
    raise ConfigurationError(f"invalid value for {option!r}", repr(value))


def _parse_number(value: Any, option: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"invalid value for {option!r}", repr(value))
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid value for {option!r}", repr(value)) from exc


@dataclass
class DocumentConfig:
    """Typed construction options for a Document.

    Lengths (``page_size``, ``margins``, ``thickness``, ``tab``) are given in
    user units (see ``unit``); ``None`` selects the default, which is defined
    in points.
    """

    orientation: Orientation = Orientation.PORTRAIT
    unit: Unit = Unit.IN
    page_format: PageFormat = PageFormat.LETTER
    page_size: Optional[Tuple[float, float]] = None
    margins: Optional[Sequence[float]] = None
    compress: bool = False
    zoom: Union[ZoomMode, float] = ZoomMode.FULLWIDTH
    page_layout: PageLayout = PageLayout.CONTINUOUS
    spacing: float = 1.0
    thickness: Optional[float] = None
    dpi: float = 300.0
    tab: Optional[float] = None
    font_family: str = "helvetica"
    font_style: str = ""
    font_size: float = 12.0
    font_path: Path = BUNDLED_FONTS_DIR
    colors: Dict[str, Any] = field(default_factory=dict)
    title: Optional[str] = None
    subject: Optional[str] = None
    author: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    creation_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.orientation = self._parse_orientation(self.orientation)
        self.unit = _parse_enum(Unit, self.unit, "unit")
        self.page_format = _parse_enum(PageFormat, self.page_format, "page_format")
        self.page_layout = _parse_enum(PageLayout, self.page_layout, "page_layout")
        if isinstance(self.zoom, (int, float)) and not isinstance(self.zoom, bool):
            self.zoom = float(self.zoom)
        else:
            self.zoom = _parse_enum(ZoomMode, self.zoom, "zoom")
        if not isinstance(self.compress, bool):
            raise ConfigurationError("invalid value for 'compress'", repr(self.compress))
        if self.page_size is not None:
            if len(self.page_size) != 2:
                raise ConfigurationError("invalid value for 'page_size'", repr(self.page_size))
            self.page_size = tuple(_parse_number(v, "page_size") for v in self.page_size)
        if self.margins is not None and isinstance(self.margins, (int, float)):
            self.margins = (self.margins,)
        self.spacing = _parse_number(self.spacing, "spacing")
        self.dpi = _parse_number(self.dpi, "dpi")
        self.font_size = _parse_number(self.font_size, "font_size")
        if self.thickness is not None:
            self.thickness = _parse_number(self.thickness, "thickness")
        if self.tab is not None:
            self.tab = _parse_number(self.tab, "tab")
        if self.dpi <= 0:
            raise ConfigurationError("invalid value for 'dpi'", repr(self.dpi))
        self.font_path = Path(self.font_path)

    @staticmethod
    def _parse_orientation(value: Any) -> Orientation:
        if isinstance(value, Orientation):
            return value
        if isinstance(value, str) and value.strip().lower() in _ORIENTATION_ALIASES:
            return _ORIENTATION_ALIASES[value.strip().lower()]
        raise ConfigurationError("invalid value for 'orientation'", repr(value))

    @classmethod
    def from_options(cls, **options: Any) -> "DocumentConfig":
        """Build a configuration from keyword options.

        Raises:
            ConfigurationError: If an option is unknown or its value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError("invalid option", ", ".join(unknown))
        return cls(**options)

    # -- derived values -------------------------------------------------

    @property
    def scale(self) -> float:
        """Points per user unit."""
        return self.unit.scale

    @property
    def page_dimensions(self) -> Tuple[float, float]:
        """Page width and height in points, oriented."""
        if self.page_size is not None:
            width, height = (value * self.scale for value in self.page_size)
        else:
            width, height = self.page_format.size
        if self.orientation is Orientation.LANDSCAPE:
            return height, width
        return width, height

    def margins_in_points(self) -> Margins:
        if self.margins is None:
            return Margins()
        return Margins.from_values(self.margins, self.scale)

    @property
    def thickness_points(self) -> float:
        return 1.0 if self.thickness is None else self.thickness * self.scale

    @property
    def tab_points(self) -> float:
        return 18.0 if self.tab is None else self.tab * self.scale
