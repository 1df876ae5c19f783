"""Utility functions for PDF generation."""

from datetime import datetime
from typing import Any, Optional

TEXT_ENCODING = "cp1252"


def escape_pdf_string(text: str) -> str:
    """Escape special characters in PDF literal strings.

    Args:
        text: Input string (will be converted to str if not already)

    Returns:
        Escaped string for PDF
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    replacements = {
        "\\": "\\\\",
        "(": "\\(",
        ")": "\\)",
        "\n": "\\n",
        "\r": "\\r",
        "\t": "\\t",
    }

    result = text
    for char, escaped in replacements.items():
        result = result.replace(char, escaped)

    return result


def pdf_string(text: str) -> str:
    """Wrap text as a PDF literal string."""
    return f"({escape_pdf_string(text)})"


def format_pdf_date(value: Optional[datetime] = None) -> str:
    """Format a timestamp as a PDF date string (``D:YYYYMMDDHHmmSS``)."""
    value = value or datetime.now()
    return value.strftime("D:%Y%m%d%H%M%S")


def format_zoom(percent: float) -> str:
    """Format a numeric zoom percentage as a scale factor."""
    return f"{percent / 100:.3f}".rstrip("0").rstrip(".")


def pdf_text_string(text: str) -> str:
    """Text string for the info dictionary.

    WinAnsi-representable text is written as a literal string; anything else
    as a UTF-16BE hex string with a byte order mark.
    """
    try:
        text.encode(TEXT_ENCODING)
    except UnicodeEncodeError:
        return "<FEFF" + text.encode("utf-16-be").hex().upper() + ">"
    return pdf_string(text)


def format_pdf_value(value: Any) -> str:
    """Format a descriptor value: lists as PDF arrays, booleans as keywords."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(format_pdf_value(item) for item in value) + "]"
    return str(value)
