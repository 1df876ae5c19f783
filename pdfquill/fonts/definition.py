"""Font-definition resources for embedded fonts.

A font definition is a JSON document describing one embeddable font: its
PostScript name, subtype, underline metrics, glyph widths, descriptor
entries and the name of the font-program file that sits next to it. It is
pure data; loading one never executes code.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_SUBTYPES = ("Type1", "TrueType")
FIRST_CHAR = 32
LAST_CHAR = 255


@dataclass
class FontDefinition:
    """Deserialized font-definition resource."""

    name: str
    subtype: str
    underline_position: int
    underline_thickness: int
    widths: Tuple[int, ...]
    program_path: Path
    program: bytes
    length1: int
    length2: Optional[int] = None
    encoding: Optional[str] = None
    descriptor: Dict[str, Any] = field(default_factory=dict)

    @property
    def compressed(self) -> bool:
        """Program files named ``*.z`` hold a zlib-compressed font program."""
        return self.program_path.name.endswith(".z")


def _require(data: Dict[str, Any], key: str, source: Path) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ConfigurationError(f"font definition is missing {key!r}", str(source)) from None


def _parse_widths(raw: Any, source: Path) -> Tuple[int, ...]:
    widths: List[int] = [0] * 256
    try:
        if isinstance(raw, dict):
            for code, width in raw.items():
                widths[int(code)] = int(width)
            covered = all(str(code) in raw or code in raw for code in range(FIRST_CHAR, LAST_CHAR + 1))
        elif isinstance(raw, list) and len(raw) == 256:
            widths = [int(width) for width in raw]
            covered = True
        else:
            covered = False
    except (TypeError, ValueError, IndexError) as exc:
        raise ConfigurationError("invalid width table in font definition", str(source)) from exc
    if not covered:
        raise ConfigurationError(
            f"width table must cover codes {FIRST_CHAR}-{LAST_CHAR}", str(source)
        )
    return tuple(widths)


def load_font_definition(path: Path) -> FontDefinition:
    """Load a font definition and its program file.

    Args:
        path: Path to the JSON definition

    Returns:
        FontDefinition with the font program read into memory

    Raises:
        ConfigurationError: If the definition or program file is missing or invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        raise ConfigurationError("font definition not found", str(path)) from None
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError("unable to read font definition", f"{path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("font definition must be a JSON object", str(path))

    subtype = _require(data, "type", path)
    if subtype not in SUPPORTED_SUBTYPES:
        raise ConfigurationError(f"invalid font type {subtype!r}", str(path))

    try:
        if subtype == "TrueType":
            length1 = int(_require(data, "original_size", path))
            length2 = None
        else:
            length1 = int(_require(data, "size1", path))
            length2 = int(_require(data, "size2", path))
        underline = (int(data.get("up", -100)), int(data.get("ut", 50)))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("invalid metric in font definition", f"{path}: {exc}") from exc

    program_path = path.parent / _require(data, "file", path)
    try:
        with open(program_path, "rb") as handle:
            program = handle.read()
    except OSError as exc:
        raise ConfigurationError("unable to read font program", f"{program_path}: {exc}") from exc

    descriptor = data.get("desc") or {}
    if not isinstance(descriptor, dict):
        raise ConfigurationError("font descriptor must be a JSON object", str(path))

    definition = FontDefinition(
        name=str(_require(data, "name", path)),
        subtype=subtype,
        underline_position=underline[0],
        underline_thickness=underline[1],
        widths=_parse_widths(_require(data, "widths", path), path),
        program_path=program_path,
        program=program,
        length1=length1,
        length2=length2,
        encoding=data.get("enc"),
        descriptor=descriptor,
    )
    logger.debug(f"Loaded font definition {definition.name} ({subtype}) from {path}")
    return definition
