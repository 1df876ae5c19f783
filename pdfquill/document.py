"""
Document facade.

``Document`` ties together the cursor, color tracker, font and image
registries and the text layout engine, routes content-stream output to the
right buffer and drives the lifecycle::

    BUILDING --page()--> IN_PAGE --finalize()--> FINALIZING --> FINALIZED

Output produced before the first page goes to a preamble stream that becomes
the beginning of page 1.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from .config import DocumentConfig
from .engine.color_state import ColorState
from .engine.cursor import Cursor
from .engine.geometry import Margins, Orientation
from .engine.text_layout import TextLayoutEngine
from .exceptions import ConfigurationError, DocumentStateError
from .pdfcompiler.objects import PdfPage, PdfStream
from .pdfcompiler.resources import FontKey, FontRecord, PdfFontRegistry, PdfImageRegistry
from .pdfcompiler.writer import PdfWriter

logger = logging.getLogger(__name__)

_STYLE_LETTERS = frozenset("BIU")


class DocumentState(Enum):
    BUILDING = "building"
    IN_PAGE = "in_page"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"


class Document:
    """
    In-memory PDF document.

    Build with keyword options (``Document(unit="mm", page_format="a4")``) or
    a prepared ``DocumentConfig``. Coordinates passed to layout methods are
    in the configured unit, measured from the top-left corner of the page.
    """

    def __init__(self, config: Optional[DocumentConfig] = None,
                 header: Optional[Callable[[], None]] = None, **options: Any):
        if config is not None and options:
            raise ConfigurationError("pass either a config or options", ", ".join(sorted(options)))
        self.config = config if config is not None else DocumentConfig.from_options(**options)
        config = self.config

        self.state = DocumentState.BUILDING
        self.orientation = config.orientation
        self.page_width, self.page_height = config.page_dimensions
        self.scale = config.scale
        self.compress = config.compress
        self.thickness = config.thickness_points
        self.tab = config.tab_points
        self.dpi = config.dpi

        self.title = config.title
        self.subject = config.subject
        self.author = config.author
        self.keywords = config.keywords
        self.creator = config.creator
        self.creation_date = config.creation_date

        self.pages: List[PdfPage] = []
        self.preamble = PdfStream()
        self.fonts = PdfFontRegistry(config.font_path)
        self.images = PdfImageRegistry()
        self.color_state = ColorState()
        self.color_state.reset_emitted()
        self.color_state.update(config.colors)
        self.cursor = Cursor(self.page_width, self.page_height, config.margins_in_points(), self.scale)
        self.layout = TextLayoutEngine(self)

        self._header_hook = header
        self._spacing = config.spacing
        self._emitted_font: Optional[Tuple[int, float]] = None
        self._buffer: Optional[bytes] = None

        self.current_font: Optional[FontRecord] = None
        self.font_size = config.font_size
        self.line_height = self.font_size * self._spacing * 1.2
        self.underline = False
        self.font(config.font_family, config.font_style, config.font_size)

        logger.debug(
            f"Document created: {self.page_width:.2f}x{self.page_height:.2f}pt, "
            f"unit {config.unit.name}, orientation {self.orientation.name}"
        )

    # -- state ----------------------------------------------------------

    @property
    def finalized(self) -> bool:
        return self.state is DocumentState.FINALIZED

    def _ensure_open(self) -> None:
        if self.state in (DocumentState.FINALIZING, DocumentState.FINALIZED):
            raise DocumentStateError("document is no longer accepting layout calls", self.state.value)

    def content(self) -> PdfStream:
        """Stream that receives layout output: the current page, or the preamble."""
        if self.state is DocumentState.IN_PAGE:
            return self.pages[-1].stream
        self._sync_font(self.preamble)
        return self.preamble

    def _sync_font(self, stream: PdfStream) -> None:
        selection = (self.current_font.index, self.font_size)
        if selection != self._emitted_font:
            stream.set_font(*selection)
            self._emitted_font = selection

    # -- pages ----------------------------------------------------------

    def page(self, orientation: Optional[Union[Orientation, str]] = None) -> PdfPage:
        """Start a new page.

        Args:
            orientation: Orientation of this page; a value different from the
                document's gives the page its own media box

        Returns:
            The new page
        """
        self._ensure_open()
        if orientation is not None:
            orientation = DocumentConfig._parse_orientation(orientation)
        flipped = orientation is not None and orientation is not self.orientation
        width, height = (self.page_height, self.page_width) if flipped else (self.page_width, self.page_height)

        page = PdfPage(len(self.pages) + 1, media_box=(width, height) if flipped else None)
        if self.thickness != 1.0:
            page.stream.set_line_width(self.thickness)

        flushed = not self.pages and len(self.preamble) > 0
        if flushed:
            page.stream.extend(self.preamble)
            self.preamble = PdfStream()
        else:
            self.color_state.reset_emitted()
            self._emitted_font = None

        self.pages.append(page)
        self.state = DocumentState.IN_PAGE
        self.cursor.resize(width, height)
        self.cursor.reset()
        self._sync_font(page.stream)
        logger.debug(f"Started page {page.page_number}{' (flipped)' if flipped else ''}")

        self.header()
        return page

    def header(self) -> None:
        """Page-header hook, called after every page break.

        Calls the ``header`` callable given at construction; subclasses may
        override it instead.
        """
        if self._header_hook is not None:
            self._header_hook()

    # -- fonts ----------------------------------------------------------

    def font(self, name: Optional[str] = None, style: Optional[str] = None,
             size: Optional[float] = None, path: Optional[Union[str, Path]] = None,
             color: Any = None) -> FontRecord:
        """
        Select the active font.

        Args:
            name: Font family (built-in name or font-definition key); keeps the current family if omitted
            style: Letters ``b``, ``i`` and ``u``; ``""`` resets to plain, ``None`` keeps the current style
            size: Font size in points (also resets the line height)
            path: Explicit font-definition file
            color: Text color

        Returns:
            The active font record

        Raises:
            ConfigurationError: For an unknown style letter or an unresolvable font
        """
        self._ensure_open()
        current = self.current_font.key if self.current_font is not None else None
        family = name if name is not None else current.family
        if style is None:
            letters = (current.style if current is not None else "") + ("U" if self.underline else "")
        else:
            letters = style.upper()
            if not set(letters) <= _STYLE_LETTERS:
                raise ConfigurationError("invalid font style", repr(style))

        record = self.fonts.resolve(FontKey.create(family, letters), path)
        self.current_font = record
        self.underline = "U" in letters
        if size is not None:
            self.font_size = float(size)
            self.spacing(self._spacing)
        if color is not None:
            self.color_state.set("font", color)
        if self.state is DocumentState.IN_PAGE:
            self._sync_font(self.pages[-1].stream)
        return record

    def bold(self, name: Optional[str] = None, size: Optional[float] = None, **kwargs: Any) -> FontRecord:
        return self.font(name, "B", size, **kwargs)

    @contextmanager
    def font_scope(self, *args: Any, **kwargs: Any) -> Iterator[FontRecord]:
        """Switch font inside a ``with`` block and restore the previous one on exit."""
        saved = (self.current_font, self.font_size, self.underline, self.line_height)
        record = self.font(*args, **kwargs)
        try:
            yield record
        finally:
            self.current_font, self.font_size, self.underline, self.line_height = saved
            if self.state is DocumentState.IN_PAGE:
                self._sync_font(self.pages[-1].stream)

    def width(self, text: str) -> float:
        """Width of ``text`` in points with the active font."""
        return self.layout.width(text)

    def height(self, value: Optional[float] = None) -> float:
        """Get or set the line height in points."""
        if value is not None:
            self.line_height = float(value)
        return self.line_height

    def spacing(self, value: Optional[float] = None) -> float:
        """Get or set line spacing; setting it recomputes the line height."""
        if value is not None:
            self._spacing = float(value)
            self.height(self.font_size * self._spacing * 1.2)
        return self._spacing

    # -- colors ---------------------------------------------------------

    def colors(self, *args: Any, **kwargs: Any) -> None:
        """Set channel colors: ``colors("draw", "f00", "fill", 0.5, font=[0, 0, 255])``."""
        self.color_state.update(*args, **kwargs)

    def drawcolor(self, value: Any) -> str:
        return self.color_state.set("draw", value)

    def fillcolor(self, value: Any) -> str:
        return self.color_state.set("fill", value)

    def fontcolor(self, value: Any) -> str:
        return self.color_state.set("font", value)

    # -- geometry and cursor --------------------------------------------

    def margins(self, *values: float) -> Margins:
        """Get the margins (in points) or set them from 1-5 user-unit values.

        Setting margins resets the indentation stack to the new left margin.
        """
        if not values:
            return self.cursor.margins
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        margins = Margins.from_values(values, self.scale, base=self.cursor.margins)
        self.cursor.margins = margins
        self.cursor.indents = [margins.left]
        return margins

    def goto(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        """Move the cursor; negative values measure from the right or bottom edge."""
        self._ensure_open()
        self.cursor.goto(x, y)

    def home(self) -> None:
        """Return to the left margin."""
        self.cursor.home()

    def drop(self) -> None:
        """Move the cursor down by the font size."""
        self.cursor.y -= self.font_size

    @property
    def x(self) -> float:
        """Cursor x position in user units."""
        return self.cursor.x / self.scale

    @x.setter
    def x(self, value: float) -> None:
        self.cursor.x = value * self.scale

    @property
    def y(self) -> float:
        """Cursor y position in user units, from the top of the page."""
        return self.cursor.from_top()

    @y.setter
    def y(self, value: float) -> None:
        self.cursor.y = self.cursor.height - value * self.scale

    # -- shapes ---------------------------------------------------------

    def _stroke(self, stream: PdfStream) -> None:
        color = self.color_state.stroke_change()
        if color is not None:
            stream.set_stroke_color(color)

    def fill(self, x: Optional[float], y: Optional[float], w: float, h: float) -> None:
        """Filled rectangle in the fill color; ``None`` coordinates mean the cursor."""
        self._ensure_open()
        left = self.cursor.x if x is None else x * self.scale
        top = self.cursor.y if y is None else self.cursor.height - y * self.scale
        stream = self.content()
        color = self.color_state.fill_change("fill")
        if color is not None:
            stream.set_fill_color(color)
        stream.add_rect(left, top, w * self.scale, -h * self.scale, "f")

    def draw(self, x: Optional[float], y: Optional[float], w: float, h: float) -> None:
        """Stroked rectangle kept inside its box by half the line thickness."""
        self._ensure_open()
        line = self.thickness
        half = 0.5 * line
        left = (self.cursor.x if x is None else x * self.scale) + half
        top = (self.cursor.y if y is None else self.cursor.height - y * self.scale) - half
        stream = self.content()
        self._stroke(stream)
        stream.add_rect(left, top, w * self.scale - line, -(h * self.scale - line), "d")

    def line(self, *args: float) -> None:
        """
        Draw a rule.

        ``line()`` spans the margins at the cursor, ``line(w)`` runs ``w``
        units from the cursor (a negative ``w`` ends at the right margin)
        and ``line(x1, y1, x2, y2)`` draws an explicit segment.
        """
        self._ensure_open()
        line = self.thickness
        half = 0.5 * line
        cursor = self.cursor
        if len(args) == 0:
            x1 = cursor.margins.left + half
            x2 = cursor.right_edge - half
            y1 = y2 = cursor.y - half
        elif len(args) == 1:
            w = args[0] * self.scale
            if w < 0:
                x2 = cursor.right_edge - half
                x1 = x2 + w + line
            else:
                x1 = cursor.x + half
                x2 = x1 + w - line
            y1 = y2 = cursor.y - half
        elif len(args) == 4:
            x1, y1, x2, y2 = (value * self.scale for value in args)
            y1 = cursor.height - y1
            y2 = cursor.height - y2
        else:
            raise ConfigurationError("invalid line arguments", repr(args))
        stream = self.content()
        self._stroke(stream)
        stream.add_line(x1, y1, x2, y2)

    # -- images ---------------------------------------------------------

    def image(self, path: Union[str, Path], x: Optional[float] = None, y: Optional[float] = None,
              w: float = 0, h: float = 0) -> None:
        """
        Place a JPEG or PNG image.

        Without ``w`` and ``h`` the size follows from the pixel size and the
        configured DPI; with one of them the other keeps the aspect ratio.
        ``x``/``y`` default to the cursor (``y`` is the image's bottom edge);
        an explicit non-positive ``x`` right-aligns the image that far from
        the right page edge, a non-positive ``y`` top-aligns it that far from
        the top edge. The cursor does not move.

        Raises:
            ParseError: If the image cannot be parsed
            ConfigurationError: If the image type cannot be determined
        """
        self._ensure_open()
        record = self.images.load(path)
        if not w and not h:
            w = record.width / self.dpi * 72.0 / self.scale
            h = record.height / self.dpi * 72.0 / self.scale
        elif not w:
            w = h * record.width / record.height
        elif not h:
            h = w * record.height / record.width

        if x is None:
            left = self.cursor.x
        elif x <= 0:
            left = self.cursor.width + (x - w) * self.scale
        else:
            left = x * self.scale

        if y is None:
            bottom = self.cursor.y
        elif y <= 0:
            bottom = self.cursor.height - (h - y) * self.scale
        else:
            bottom = self.cursor.height - y * self.scale

        self.content().add_image(record.index, left, bottom, w * self.scale, h * self.scale)

    # -- text -----------------------------------------------------------

    def print(self, text: str, eols: int = 0) -> None:
        self._ensure_open()
        self.layout.print(text, eols)

    def println(self, text: str = "", eols: int = 1) -> None:
        self._ensure_open()
        self.layout.println(text, eols)

    def text(self, x: Optional[float] = None, y: Optional[float] = None, text: str = "", eols: int = 0) -> None:
        self._ensure_open()
        self.layout.text(x, y, text, eols)

    def center(self, text: str, left: Optional[float] = None, right: Optional[float] = None,
               eols: int = 0) -> None:
        self._ensure_open()
        self.layout.center(text, left, right, eols)

    def wrap(self, text: str, eols: int = 1) -> None:
        self._ensure_open()
        self.layout.wrap(text, eols)

    def table(self, y: float, columns: Sequence[Any], cells: Sequence[Any]) -> None:
        self._ensure_open()
        self.layout.table(y, columns, cells)

    def indent(self, points: Optional[float] = None, **kwargs: Any) -> float:
        self._ensure_open()
        return self.layout.indent(points, **kwargs)

    def undent(self, count: int = 1) -> float:
        self._ensure_open()
        return self.layout.undent(count)

    def indented(self, points: Optional[float] = None, **kwargs: Any):
        """Context manager form of ``indent``; always restores the margin."""
        self._ensure_open()
        return self.layout.indented(points, **kwargs)

    # -- output ---------------------------------------------------------

    def finalize(self) -> bytes:
        """
        Serialize the document.

        Returns the existing bytes when already finalized.

        Raises:
            DocumentStateError: If called while finalization is in progress
        """
        if self.state is DocumentState.FINALIZED:
            return self._buffer
        if self.state is DocumentState.FINALIZING:
            raise DocumentStateError("finalize already in progress")

        previous = self.state
        self.state = DocumentState.FINALIZING
        if not self.pages and len(self.preamble) > 0:
            logger.warning(f"Discarding {len(self.preamble)} content operators written before any page")

        writer = PdfWriter(compress=self.compress)
        try:
            self._buffer = writer.write(
                pages=self.pages,
                fonts=self.fonts.records(),
                images=self.images.records(),
                width=self.page_width,
                height=self.page_height,
                info={
                    "Title": self.title,
                    "Subject": self.subject,
                    "Author": self.author,
                    "Keywords": self.keywords,
                    "Creator": self.creator,
                },
                zoom=self.config.zoom,
                page_layout=self.config.page_layout,
                creation_date=self.creation_date,
            )
        except Exception:
            self.state = previous
            raise
        self.state = DocumentState.FINALIZED
        logger.info(f"Finalized PDF: {len(self.pages)} pages, {len(self._buffer)} bytes")
        return self._buffer

    def to_bytes(self) -> bytes:
        return self.finalize()

    def save(self, path: Union[str, Path]) -> Union[str, Path]:
        """Finalize if needed and write the PDF to ``path``; returns ``path``."""
        data = self.finalize()
        with open(path, "wb") as handle:
            handle.write(data)
        logger.debug(f"Saved PDF to {path}")
        return path
