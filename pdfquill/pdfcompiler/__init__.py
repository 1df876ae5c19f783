"""
PDF compiler - content streams, resources and file serialization.
"""

from .objects import PdfPage, PdfStream
from .resources import FontKey, FontRecord, ImageRecord, PdfFontRegistry, PdfImageRegistry
from .writer import PdfWriter, resources_object_number

__all__ = [
    "FontKey",
    "FontRecord",
    "ImageRecord",
    "PdfFontRegistry",
    "PdfImageRegistry",
    "PdfPage",
    "PdfStream",
    "PdfWriter",
    "resources_object_number",
]
