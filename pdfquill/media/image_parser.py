"""JPEG and PNG header parsing.

Only the metadata needed for embedding is extracted; pixel data is never
decoded. JPEG files are embedded verbatim (DCTDecode); PNG image data is the
concatenation of the IDAT chunks, which is already a Flate stream with PNG
predictors.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..exceptions import ConfigurationError, ParseError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SOI = 0xD8
JPEG_EOI = 0xD9
JPEG_SOS = 0xDA
JPEG_SOF_MARKERS = frozenset(
    list(range(0xC0, 0xC4)) + list(range(0xC5, 0xC8)) + list(range(0xC9, 0xCC)) + list(range(0xCD, 0xD0))
)

JPEG_COLOR_SPACES = {1: "DeviceGray", 3: "DeviceRGB", 4: "DeviceCMYK"}
PNG_COLOR_SPACES = {0: "DeviceGray", 2: "DeviceRGB", 3: "Indexed"}


@dataclass
class ImageInfo:
    """Embeddable image metadata and payload."""

    width: int
    height: int
    bits_per_component: int
    color_space: str
    image_type: str
    data: bytes
    palette: Optional[bytes] = None
    transparency: Optional[List[Optional[int]]] = None

    @property
    def colors(self) -> int:
        """Number of color components per pixel in the decoded stream."""
        return 3 if self.color_space == "DeviceRGB" else 1


class _Reader:
    """Sequential big-endian reader over an in-memory file."""

    def __init__(self, data: bytes, source: str):
        self.data = data
        self.source = source
        self.pos = 0

    def read(self, size: int) -> bytes:
        if size < 0 or self.pos + size > len(self.data):
            raise ParseError("unexpected end of file", self.source)
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def skip(self, size: int) -> None:
        self.read(size)

    def byte(self) -> int:
        return self.read(1)[0]

    def uint16(self) -> int:
        return struct.unpack(">H", self.read(2))[0]

    def uint32(self) -> int:
        return struct.unpack(">I", self.read(4))[0]

    def marker(self) -> int:
        """Advance to the next JPEG marker and return its code."""
        while self.byte() != 0xFF:
            pass
        code = self.byte()
        while code == 0 or code == 0xFF:
            code = self.byte()
        return code


def _read_file(path: str) -> bytes:
    with open(path, "rb") as handle:
        return handle.read()


def parse_jpeg(path: str) -> ImageInfo:
    """Parse a JPEG file.

    Raises:
        ParseError: If the start-of-image marker or frame header is missing or malformed
    """
    data = _read_file(path)
    reader = _Reader(data, path)
    if data[:2] != bytes((0xFF, JPEG_SOI)):
        raise ParseError("invalid JPEG file", path)
    reader.skip(2)

    frame = None
    while True:
        code = reader.marker()
        if code in (JPEG_EOI, JPEG_SOS):
            break
        size = reader.uint16()
        if size < 2:
            raise ParseError("invalid JPEG segment length", path)
        if code in JPEG_SOF_MARKERS and frame is None:
            if size < 8:
                raise ParseError("invalid JPEG frame header", path)
            bits = reader.byte()
            height = reader.uint16()
            width = reader.uint16()
            components = reader.byte()
            if components not in JPEG_COLOR_SPACES or width == 0 or height == 0:
                raise ParseError("invalid JPEG frame header", f"{path}: {components} components")
            frame = (bits, height, width, JPEG_COLOR_SPACES[components])
            reader.skip(size - 8)
        else:
            reader.skip(size - 2)

    if frame is None:
        raise ParseError("missing JPEG frame header", path)

    bits, height, width, color_space = frame
    return ImageInfo(
        width=width,
        height=height,
        bits_per_component=bits,
        color_space=color_space,
        image_type="jpg",
        data=data,
    )


def parse_png(path: str) -> ImageInfo:
    """Parse a PNG file.

    Raises:
        ParseError: For a bad signature, alpha channels, >8-bit samples,
            unknown compression/filter methods, interlacing, or a missing palette
    """
    reader = _Reader(_read_file(path), path)
    if reader.read(8) != PNG_SIGNATURE:
        raise ParseError("invalid PNG file", path)
    reader.skip(4)
    if reader.read(4) != b"IHDR":
        raise ParseError("invalid PNG file", path)

    width = reader.uint32()
    height = reader.uint32()
    bits = reader.byte()
    color_type = reader.byte()
    if color_type not in PNG_COLOR_SPACES:
        raise ParseError("unable to support PNG alpha channels", path)
    if bits > 8:
        raise ParseError(f"unable to support {bits}-bit color", path)
    if reader.byte() != 0:
        raise ParseError("unknown compression method", path)
    if reader.byte() != 0:
        raise ParseError("unknown filter method", path)
    if reader.byte() != 0:
        raise ParseError("unable to support interlacing", path)
    reader.skip(4)

    palette = None
    transparency = None
    chunks: List[bytes] = []
    while True:
        size = reader.uint32()
        chunk_type = reader.read(4)
        if chunk_type == b"IEND":
            break
        if chunk_type == b"PLTE":
            palette = reader.read(size)
        elif chunk_type == b"tRNS":
            transparency = _transparency_key(reader.read(size), color_type, path)
        elif chunk_type == b"IDAT":
            chunks.append(reader.read(size))
        else:
            reader.skip(size)
        reader.skip(4)

    color_space = PNG_COLOR_SPACES[color_type]
    if color_space == "Indexed" and palette is None:
        raise ParseError("missing palette", path)
    if not chunks:
        raise ParseError("missing image data", path)

    return ImageInfo(
        width=width,
        height=height,
        bits_per_component=bits,
        color_space=color_space,
        image_type="png",
        data=b"".join(chunks),
        palette=palette,
        transparency=transparency,
    )


def _transparency_key(chunk: bytes, color_type: int, source: str) -> List[Optional[int]]:
    if color_type in (0, 2) and len(chunk) < (2 if color_type == 0 else 6):
        raise ParseError("truncated tRNS chunk", source)
    if color_type == 0:
        return [chunk[1]]
    if color_type == 2:
        return [chunk[1], chunk[3], chunk[5]]
    # Indexed: first fully transparent palette entry.
    index = chunk.find(b"\x00")
    return [index if index >= 0 else None]


def detect_image_type(path: str) -> str:
    """Determine ``jpg`` or ``png`` from the extension, then from magic bytes.

    Raises:
        ConfigurationError: If the type cannot be determined
    """
    ext = Path(path).suffix.lower()
    if ext in (".jpg", ".jpeg"):
        return "jpg"
    if ext == ".png":
        return "png"

    with open(path, "rb") as handle:
        head = handle.read(8)
    if head[:2] == b"\xff\xd8":
        return "jpg"
    if head == PNG_SIGNATURE:
        return "png"
    raise ConfigurationError("unable to determine image type", path)


def parse_image(path: str) -> ImageInfo:
    image_type = detect_image_type(path)
    logger.debug(f"Parsing {image_type} image {path}")
    if image_type == "jpg":
        return parse_jpeg(path)
    return parse_png(path)
