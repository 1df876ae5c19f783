"""Color normalization and per-channel color state.

Requested colors live on three channels (``draw`` for strokes, ``fill`` for
shapes, ``font`` for text). Two further channels remember what was last
emitted into the content stream: ``line`` (stroking color) and ``area``
(non-stroking color). An operator is only written when the requested value
differs from the emitted one.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional

from ..exceptions import ConfigurationError

CHANNELS = ("draw", "fill", "font")

_HEX6 = re.compile(r"^[0-9a-f]{6}$", re.IGNORECASE)
_HEX3 = re.compile(r"^[0-9a-f]{3}$", re.IGNORECASE)


def normalize_color(value: Any, fmt: str = "%.3f") -> str:
    """Normalize a color specification to its content-stream operand string.

    Accepts a gray level (0-1 fraction or 1-255 channel value), a sequence of
    three such values, or a 3/6 digit hex string. Channel values divisible by
    16 are divided by 256, all others by 255.

    Raises:
        ConfigurationError: If the value cannot be interpreted as a color
    """
    if isinstance(value, bool):
        raise ConfigurationError("unable to parse color value", repr(value))
    if isinstance(value, (int, float)):
        if value == 0:
            return "0"
        if value in (1, 255):
            return "1"
        if 1 <= value <= 255:
            return fmt % (value / (256.0 if value % 16 == 0 else 255.0))
        if 0 < value < 1:
            return fmt % value
        raise ConfigurationError("unable to parse color value", repr(value))
    if isinstance(value, str):
        if _HEX6.match(value):
            parts = [int(value[i:i + 2], 16) for i in range(0, 6, 2)]
        elif _HEX3.match(value):
            parts = [int(char * 2, 16) for char in value]
        else:
            raise ConfigurationError("unable to parse color value", repr(value))
        return " ".join(normalize_color(part, fmt) for part in parts)
    if isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise ConfigurationError("unable to parse color value", repr(value))
        if all(not isinstance(part, bool) and part == 0 for part in value):
            return "0"
        return " ".join(normalize_color(part, fmt) for part in value)
    raise ConfigurationError("unable to parse color value", repr(value))


class ColorState:
    """Tracks requested and emitted colors for one document."""

    def __init__(self) -> None:
        self.requested: Dict[str, Optional[str]] = {channel: None for channel in CHANNELS}
        self.line: Optional[str] = None
        self.area: Optional[str] = None

    def set(self, channel: str, value: Any) -> str:
        if channel not in CHANNELS:
            raise ConfigurationError("unknown color channel", repr(channel))
        color = normalize_color(value)
        self.requested[channel] = color
        return color

    def update(self, *args: Any, **kwargs: Any) -> None:
        """Apply a tagged stream of channel names and color values.

        ``update("draw", "f00", "fill", 128, font=[0, 0, 255])``. Values
        before any channel name apply to the ``font`` channel; mappings are
        flattened in place.
        """
        channel = "font"
        for arg in self._flatten(args):
            if isinstance(arg, str) and arg in CHANNELS:
                channel = arg
            else:
                self.set(channel, arg)
        for name, value in kwargs.items():
            self.set(name, value)

    @staticmethod
    def _flatten(args: Iterable[Any]):
        for arg in args:
            if isinstance(arg, dict):
                for key, value in arg.items():
                    yield key
                    yield value
            else:
                yield arg

    def reset_emitted(self) -> None:
        """Forget emitted state; a fresh page starts with black stroke and fill."""
        self.line = "0"
        self.area = "0"

    def stroke_change(self) -> Optional[str]:
        """Return the draw color if it must be emitted, recording it as emitted."""
        draw = self.requested["draw"]
        if draw is not None and draw != self.line:
            self.line = draw
            return draw
        return None

    def fill_change(self, channel: str) -> Optional[str]:
        """Return the ``fill`` or ``font`` color if it must be emitted."""
        color = self.requested[channel]
        if color is not None and color != self.area:
            self.area = color
            return color
        return None

