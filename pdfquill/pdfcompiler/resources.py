"""Resource management for PDF (fonts and images)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import EncodingError
from ..fonts.builtin import (
    FAMILY_ALIASES,
    SYMBOLIC_FONTS,
    UNDERLINE_POSITION,
    UNDERLINE_THICKNESS,
    base_font_name,
    builtin_widths,
)
from ..fonts.definition import FIRST_CHAR, LAST_CHAR, load_font_definition
from ..media.image_parser import ImageInfo, parse_image
from .utils import TEXT_ENCODING

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontKey:
    """Normalized font cache key: lower-case family plus sorted style letters."""

    family: str
    style: str = ""

    @classmethod
    def create(cls, family: str, style: str = "") -> "FontKey":
        family = family.lower().replace(" ", "")
        family = FAMILY_ALIASES.get(family, family)
        letters = sorted({char for char in style.upper() if char in "BI"})
        return cls(family, "".join(letters))

    def __str__(self) -> str:
        return f"{self.family}{self.style}"


@dataclass
class FontRecord:
    """A resolved font: built-in (name only) or embedded (program + descriptor)."""

    index: int
    key: FontKey
    name: str
    subtype: str
    underline_position: int
    underline_thickness: int
    widths: Tuple[int, ...]
    program: Optional[bytes] = None
    program_path: Optional[Path] = None
    length1: Optional[int] = None
    length2: Optional[int] = None
    encoding: Optional[str] = None
    descriptor: Dict[str, Any] = field(default_factory=dict)
    object_num: Optional[int] = None

    @property
    def embedded(self) -> bool:
        return self.program is not None

    @property
    def compressed(self) -> bool:
        return self.program_path is not None and self.program_path.name.endswith(".z")

    @property
    def alias(self) -> str:
        return f"/F{self.index}"

    @property
    def symbolic(self) -> bool:
        return str(self.key) in SYMBOLIC_FONTS

    @property
    def object_count(self) -> int:
        """Objects this font contributes: font, descriptor, widths, program."""
        return 4 if self.embedded else 1

    def width(self, text: str, size: float) -> float:
        """Width of ``text`` in points at ``size``.

        Raises:
            EncodingError: If a character is not representable or has no width entry
        """
        total = 0
        for byte in encode_text(text):
            if byte < FIRST_CHAR or byte > LAST_CHAR:
                raise EncodingError(
                    f"character code {byte} outside font range", f"{self.name}: {text!r}"
                )
            total += self.widths[byte]
        return total * size / 1000.0


def encode_text(text: str) -> bytes:
    try:
        return text.encode(TEXT_ENCODING)
    except UnicodeEncodeError as exc:
        raise EncodingError("text is not representable in WinAnsiEncoding", repr(text)) from exc


class PdfFontRegistry:
    """Registry for managing PDF fonts."""

    def __init__(self, font_path: Path):
        self.font_path = Path(font_path)
        self._fonts: Dict[FontKey, FontRecord] = {}

    def resolve(self, key: FontKey, path: Optional[str | Path] = None) -> FontRecord:
        """Resolve a font key to a record, creating it on first use.

        Resolution order: already-resolved key, built-in font, font-definition
        resource (``path`` or ``<font_path>/<key>.json``).

        Raises:
            ConfigurationError: If the key is neither built-in nor loadable
        """
        record = self._fonts.get(key)
        if record is not None:
            return record

        index = len(self._fonts) + 1
        name = base_font_name(str(key))
        if name is not None:
            record = FontRecord(
                index=index,
                key=key,
                name=name,
                subtype="Type1",
                underline_position=UNDERLINE_POSITION,
                underline_thickness=UNDERLINE_THICKNESS,
                widths=builtin_widths(str(key)),
            )
        else:
            source = Path(path) if path else self.font_path / f"{str(key).lower()}.json"
            definition = load_font_definition(source)
            record = FontRecord(
                index=index,
                key=key,
                name=definition.name,
                subtype=definition.subtype,
                underline_position=definition.underline_position,
                underline_thickness=definition.underline_thickness,
                widths=definition.widths,
                program=definition.program,
                program_path=definition.program_path,
                length1=definition.length1,
                length2=definition.length2,
                encoding=definition.encoding,
                descriptor=dict(definition.descriptor),
            )

        self._fonts[key] = record
        logger.debug(f"Registered font {record.alias} -> {record.name} ({record.subtype})")
        return record

    def records(self) -> List[FontRecord]:
        """All fonts, ordered by assigned index."""
        return sorted(self._fonts.values(), key=lambda font: font.index)

    def __len__(self) -> int:
        return len(self._fonts)


@dataclass
class ImageRecord:
    """A parsed image ready for embedding."""

    index: int
    path: str
    info: ImageInfo
    object_num: Optional[int] = None

    @property
    def alias(self) -> str:
        return f"/I{self.index}"

    @property
    def width(self) -> int:
        return self.info.width

    @property
    def height(self) -> int:
        return self.info.height

    @property
    def object_count(self) -> int:
        """Objects this image contributes: the image plus its palette, if any."""
        return 2 if self.info.palette is not None else 1


class PdfImageRegistry:
    """Registry for managing PDF images, cached by source path."""

    def __init__(self):
        self._images: Dict[str, ImageRecord] = {}

    def load(self, path: str | Path) -> ImageRecord:
        """Return the image for ``path``, parsing it on first reference.

        Raises:
            ParseError: If the file is not a supported JPEG/PNG
            ConfigurationError: If the image type cannot be determined
        """
        key = str(path)
        record = self._images.get(key)
        if record is not None:
            logger.debug(f"Image cache hit: {key}")
            return record

        info = parse_image(key)
        record = ImageRecord(index=len(self._images) + 1, path=key, info=info)
        self._images[key] = record
        logger.debug(
            f"Registered image {record.alias} -> {key} "
            f"({info.width}x{info.height} {info.color_space} {info.bits_per_component}bpc)"
        )
        return record

    def get_image(self, path: str | Path) -> Optional[ImageRecord]:
        return self._images.get(str(path))

    def records(self) -> List[ImageRecord]:
        """All images, ordered by assigned index."""
        return sorted(self._images.values(), key=lambda image: image.index)

    def __len__(self) -> int:
        return len(self._images)
