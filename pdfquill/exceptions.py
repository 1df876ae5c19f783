"""Custom exceptions for PdfQuill."""

from typing import Optional


class PdfQuillError(Exception):
    """Base exception for PdfQuill errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(PdfQuillError):
    """Exception raised for invalid options, colors, margins or font resources."""

    pass


class EncodingError(ConfigurationError):
    """Exception raised when text cannot be measured or encoded with the active font."""

    pass


class ParseError(PdfQuillError):
    """Exception raised when an image header cannot be parsed."""

    pass


class StructuralInvariantViolation(PdfQuillError):
    """Exception raised when the engine's own bookkeeping is inconsistent."""

    pass


class DocumentStateError(StructuralInvariantViolation):
    """Exception raised for calls that are invalid in the current lifecycle state."""

    pass


class UnsupportedLayoutError(PdfQuillError):
    """Exception raised for layouts the engine does not handle (e.g. over-wide words)."""

    pass
