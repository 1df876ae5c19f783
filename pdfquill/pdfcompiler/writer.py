"""PDF file writer - generates objects, xref, trailer and final PDF structure.

Objects are numbered purely by emission order. The order is fixed so that
forward references can be computed up front:

1. info
2. catalog
3. page tree
4 .. 3 + 2n. page / content stream pairs
then one cluster per font (1 object built-in, 4 embedded), one or two
objects per image (image, palette) and finally the resources dictionary.
"""

from __future__ import annotations

import logging
import zlib
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..config import PageLayout, ZoomMode
from ..exceptions import ConfigurationError, EncodingError, StructuralInvariantViolation
from .objects import PdfPage
from .resources import FontRecord, ImageRecord
from .utils import (
    TEXT_ENCODING,
    format_pdf_date,
    format_pdf_value,
    format_zoom,
    pdf_string,
    pdf_text_string,
)

logger = logging.getLogger(__name__)

PDF_HEADER = "%PDF-1.3"
PRODUCER = "PdfQuill 1.0"
INFO_FIELDS = ("Title", "Subject", "Author", "Keywords", "Creator")
FONT_FILE_KEYS = {"Type1": "FontFile", "TrueType": "FontFile2"}

Line = Union[str, bytes]


def resources_object_number(
    page_count: int,
    fonts: Iterable[FontRecord],
    images: Iterable[ImageRecord],
) -> int:
    """Object number of the resources dictionary for the given content."""
    number = 4 + 2 * page_count
    number += sum(font.object_count for font in fonts)
    number += sum(image.object_count for image in images)
    return number


class PdfWriter:
    """Serializes a document into an in-memory PDF byte buffer."""

    def __init__(self, compress: bool = False):
        self.compress = compress
        self.buffer = bytearray()
        self.offsets: List[int] = []
        self.xref_offset: Optional[int] = None

    # -- low level ------------------------------------------------------

    def out(self, line: Line) -> None:
        """Append one line to the buffer.

        Raises:
            EncodingError: If a text line is not representable in WinAnsiEncoding
        """
        if isinstance(line, str):
            try:
                line = line.encode(TEXT_ENCODING)
            except UnicodeEncodeError as exc:
                raise EncodingError("PDF line is not representable in WinAnsiEncoding", repr(line)) from exc
        self.buffer += line
        self.buffer += b"\n"

    def begin_object(self) -> int:
        """Record the offset of the next object and write its header."""
        self.offsets.append(len(self.buffer))
        number = len(self.offsets)
        self.out(f"{number} 0 obj")
        return number

    def end_object(self) -> None:
        self.out("endobj")

    def out_stream(self, data: bytes) -> None:
        self.out("stream")
        self.out(data)
        self.out("endstream")

    def _deflate(self, data: bytes) -> bytes:
        return zlib.compress(data) if self.compress else data

    # -- document -------------------------------------------------------

    def write(
        self,
        *,
        pages: Sequence[PdfPage],
        fonts: Sequence[FontRecord],
        images: Sequence[ImageRecord],
        width: float,
        height: float,
        info: Dict[str, Optional[str]],
        zoom: Union[ZoomMode, float] = ZoomMode.FULLWIDTH,
        page_layout: PageLayout = PageLayout.CONTINUOUS,
        creation_date: Optional[datetime] = None,
    ) -> bytes:
        """Serialize the complete document and return the PDF bytes.

        Args:
            pages: Pages in order, each with its content stream
            fonts: Fonts sorted by index
            images: Images sorted by index
            width: Default page width in points
            height: Default page height in points
            info: Document information entries keyed by PDF name (``Title``...)
            zoom: Initial zoom mode or percentage
            page_layout: Initial page layout
            creation_date: Creation timestamp (defaults to now)

        Raises:
            ConfigurationError: If a font has an unsupported subtype
            StructuralInvariantViolation: If object numbering or offsets are inconsistent
        """
        if self.offsets:
            raise StructuralInvariantViolation("writer already used", f"{len(self.offsets)} objects written")

        resources = resources_object_number(len(pages), fonts, images)

        self.out(PDF_HEADER)
        self._write_info(info, creation_date)
        self._write_catalog(bool(pages), zoom, page_layout)
        self._write_pages(pages, resources, width, height)
        self._write_fonts(fonts)
        self._write_images(images)
        number = self._write_resources(fonts, images)
        if number != resources:
            raise StructuralInvariantViolation(
                "resources object number mismatch", f"expected {resources}, wrote {number}"
            )
        self._write_xref()
        self._write_trailer()
        self.verify_offsets()

        logger.debug(
            f"PDF serialized: {len(pages)} pages, {len(fonts)} fonts, {len(images)} images, "
            f"{len(self.offsets)} objects, {len(self.buffer)} bytes"
        )
        return bytes(self.buffer)

    def _write_info(self, info: Dict[str, Optional[str]], creation_date: Optional[datetime]) -> None:
        self.begin_object()
        self.out("<<")
        self.out(f"/Producer {pdf_string(PRODUCER)}")
        for key in INFO_FIELDS:
            value = info.get(key)
            if value:
                self.out(f"/{key} {pdf_text_string(value)}")
        self.out(f"/CreationDate {pdf_string(format_pdf_date(creation_date))}")
        self.out(">>")
        self.end_object()

    def _write_catalog(self, has_pages: bool, zoom: Union[ZoomMode, float], page_layout: PageLayout) -> None:
        self.begin_object()
        self.out("<<")
        self.out("/Type /Catalog")
        self.out("/Pages 3 0 R")
        if has_pages:
            if isinstance(zoom, ZoomMode):
                self.out(f"/OpenAction [4 0 R {zoom.value}]")
            else:
                self.out(f"/OpenAction [4 0 R /XYZ null null {format_zoom(zoom)}]")
        self.out(f"/PageLayout {page_layout.value}")
        self.out(">>")
        self.end_object()

    def _write_pages(self, pages: Sequence[PdfPage], resources: int, width: float, height: float) -> None:
        self.begin_object()
        self.out("<<")
        self.out("/Type /Pages")
        kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages)))
        self.out(f"/Kids [{kids}]")
        self.out(f"/Count {len(pages)}")
        self.out(f"/Resources {resources} 0 R")
        self.out("/MediaBox [0 0 %.2f %.2f]" % (width, height))
        self.out(">>")
        self.end_object()

        for page in pages:
            number = self.begin_object()
            self.out("<<")
            self.out("/Type /Page")
            self.out("/Parent 3 0 R")
            if page.media_box is not None:
                self.out("/MediaBox [0 0 %.2f %.2f]" % page.media_box)
            self.out(f"/Contents {number + 1} 0 R")
            self.out(">>")
            self.end_object()

            data = self._deflate(page.stream.get_content().encode(TEXT_ENCODING))
            self.begin_object()
            self.out("<<")
            if self.compress:
                self.out("/Filter /FlateDecode")
            self.out(f"/Length {len(data)}")
            self.out(">>")
            self.out_stream(data)
            self.end_object()

    def _write_fonts(self, fonts: Sequence[FontRecord]) -> None:
        for font in fonts:
            if font.subtype not in FONT_FILE_KEYS:
                raise ConfigurationError(f"invalid font type {font.subtype!r}", font.name)

            font.object_num = number = self.begin_object()
            self.out("<<")
            self.out("/Type /Font")
            self.out(f"/BaseFont /{font.name}")
            self.out(f"/Subtype /{font.subtype}")
            if not font.symbolic:
                self.out("/Encoding /WinAnsiEncoding")
            if not font.embedded:
                self.out(">>")
                self.end_object()
                continue
            self.out("/FirstChar 32 /LastChar 255")
            self.out(f"/FontDescriptor {number + 1} 0 R")
            self.out(f"/Widths {number + 2} 0 R")
            self.out(">>")
            self.end_object()

            self.begin_object()
            self.out("<<")
            self.out("/Type /FontDescriptor")
            self.out(f"/FontName /{font.name}")
            self.out(f"/{FONT_FILE_KEYS[font.subtype]} {number + 3} 0 R")
            for key, value in sorted(font.descriptor.items()):
                self.out(f"/{key} {format_pdf_value(value)}")
            self.out(">>")
            self.end_object()

            self.begin_object()
            self.out("[ " + " ".join(str(width) for width in font.widths[32:256]) + " ]")
            self.end_object()

            self.begin_object()
            self.out("<<")
            if font.compressed:
                self.out("/Filter /FlateDecode")
            self.out(f"/Length {len(font.program)}")
            self.out(f"/Length1 {font.length1}")
            if font.length2 is not None:
                self.out(f"/Length2 {font.length2} /Length3 0")
            self.out(">>")
            self.out_stream(font.program)
            self.end_object()

    def _write_images(self, images: Sequence[ImageRecord]) -> None:
        for image in images:
            info = image.info
            image.object_num = number = self.begin_object()
            self.out("<<")
            self.out("/Type /XObject")
            self.out("/Subtype /Image")
            self.out(f"/Width {info.width}")
            self.out(f"/Height {info.height}")
            if info.color_space == "Indexed":
                self.out(f"/ColorSpace [/Indexed /DeviceRGB {len(info.palette) // 3 - 1} {number + 1} 0 R]")
            else:
                self.out(f"/ColorSpace /{info.color_space}")
                if info.color_space == "DeviceCMYK":
                    self.out("/Decode [1 0 1 0 1 0 1 0]")
            self.out(f"/BitsPerComponent {info.bits_per_component}")
            if info.image_type == "jpg":
                self.out("/Filter /DCTDecode")
            else:
                self.out("/Filter /FlateDecode")
                self.out("/DecodeParms")
                self.out("<<")
                self.out("/Predictor 15")
                self.out(f"/Colors {info.colors}")
                self.out(f"/BitsPerComponent {info.bits_per_component}")
                self.out(f"/Columns {info.width}")
                self.out(">>")
            self.out(f"/Length {len(info.data)}")
            self.out(">>")
            self.out_stream(info.data)
            self.end_object()

            if info.palette is None:
                continue
            palette = self._deflate(info.palette)
            self.begin_object()
            self.out("<<")
            if self.compress:
                self.out("/Filter /FlateDecode")
            self.out(f"/Length {len(palette)}")
            self.out(">>")
            self.out_stream(palette)
            self.end_object()

    def _write_resources(self, fonts: Sequence[FontRecord], images: Sequence[ImageRecord]) -> int:
        number = self.begin_object()
        self.out("<<")
        self.out("/ProcSet [/PDF /Text /ImageB /ImageC /ImageI]")
        if fonts:
            self.out("/Font")
            self.out("<<")
            for font in fonts:
                self.out(f"{font.alias} {font.object_num} 0 R")
            self.out(">>")
        if images:
            self.out("/XObject")
            self.out("<<")
            for image in images:
                self.out(f"{image.alias} {image.object_num} 0 R")
            self.out(">>")
        self.out(">>")
        self.end_object()
        return number

    def _write_xref(self) -> None:
        self.xref_offset = len(self.buffer)
        self.out("xref")
        self.out(f"0 {len(self.offsets) + 1}")
        self.out("0000000000 65535 f ")
        for offset in self.offsets:
            self.out("%010d 00000 n " % offset)

    def _write_trailer(self) -> None:
        if self.xref_offset is None:
            raise StructuralInvariantViolation("trailer written before xref table")
        self.out("trailer")
        self.out("<<")
        self.out("/Info 1 0 R")
        self.out("/Root 2 0 R")
        self.out(f"/Size {len(self.offsets) + 1}")
        self.out(">>")
        self.out("startxref")
        self.out(str(self.xref_offset))
        self.out("%%EOF")

    def verify_offsets(self) -> None:
        """Check that every recorded offset lands on its object header.

        Raises:
            StructuralInvariantViolation: On the first mismatching object
        """
        for number, offset in enumerate(self.offsets, start=1):
            header = f"{number} 0 obj".encode("ascii")
            if self.buffer[offset:offset + len(header)] != header:
                raise StructuralInvariantViolation(
                    "xref offset mismatch", f"object {number} at offset {offset}"
                )
