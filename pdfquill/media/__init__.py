"""Image header parsing."""

from .image_parser import ImageInfo, detect_image_type, parse_image

__all__ = ["ImageInfo", "detect_image_type", "parse_image"]
