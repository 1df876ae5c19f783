"""
PdfQuill - in-memory PDF generation.

Build a document page by page with a cursor-driven layout API, then
serialize it to PDF 1.3 bytes or a file:

    from pdfquill import Document

    doc = Document(unit="pt", page_format="a4")
    doc.page()
    doc.font("helvetica", size=12)
    doc.wrap("Hello")
    doc.save("hello.pdf")

Main Components:
- Document: facade and lifecycle state machine
- DocumentConfig: typed construction options
- engine: cursor, colors and text layout
- pdfcompiler: content streams, resource registries and the writer
- fonts / media: font metrics and definitions, image header parsing
"""

from .config import DocumentConfig, PageLayout, ZoomMode
from .document import Document, DocumentState
from .engine.geometry import Margins, Orientation, PageFormat, Unit
from .exceptions import (
    ConfigurationError,
    DocumentStateError,
    EncodingError,
    ParseError,
    PdfQuillError,
    StructuralInvariantViolation,
    UnsupportedLayoutError,
)
from .utils.logger import configure_logging, get_logger

__version__ = "1.0.0"

__all__ = [
    "Document",
    "DocumentState",
    "DocumentConfig",
    "Margins",
    "Orientation",
    "PageFormat",
    "PageLayout",
    "Unit",
    "ZoomMode",
    "PdfQuillError",
    "ConfigurationError",
    "EncodingError",
    "ParseError",
    "StructuralInvariantViolation",
    "DocumentStateError",
    "UnsupportedLayoutError",
    "configure_logging",
    "get_logger",
]
