"""
Pytest configuration for PdfQuill
"""

import json
import logging
import struct
import sys
import zlib
from pathlib import Path

import pytest
from PIL import Image

from pdfquill import Document, DocumentConfig


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    import tempfile
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def pt_document():
    """Letter-size document measured in points with a pinned creation date."""
    from datetime import datetime

    def factory(**options):
        options.setdefault("unit", "pt")
        options.setdefault("creation_date", datetime(2020, 1, 2, 3, 4, 5))
        return Document(config=DocumentConfig(**options))

    return factory


@pytest.fixture
def make_jpeg(temp_dir):
    """Write a small JPEG with Pillow; mode L, RGB or CMYK."""
    def factory(name="image.jpg", mode="RGB", size=(30, 20)):
        path = temp_dir / name
        Image.new(mode, size).save(path, "JPEG")
        return path

    return factory


@pytest.fixture
def make_png(temp_dir):
    """Write a small PNG with Pillow; mode L, RGB, RGBA or P."""
    def factory(name="image.png", mode="RGB", size=(30, 20), **save_options):
        path = temp_dir / name
        image = Image.new(mode, size)
        if mode == "P":
            image.putpalette([0, 0, 0, 255, 0, 0, 0, 255, 0, 0, 0, 255] * 64)
        image.save(path, "PNG", **save_options)
        return path

    return factory


def _png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", crc)


@pytest.fixture
def build_png(temp_dir):
    """Assemble a PNG from raw header fields, for layouts Pillow will not write."""
    def factory(name="raw.png", width=2, height=2, bit_depth=8, color_type=2,
                interlace=0, palette=None, idat_parts=(b"\x78\x9c\x63\x00\x00\x00\x01\x00\x01",),
                extra=()):
        header = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, interlace)
        data = b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", header)
        if palette is not None:
            data += _png_chunk(b"PLTE", palette)
        for chunk_type, payload in extra:
            data += _png_chunk(chunk_type, payload)
        for part in idat_parts:
            data += _png_chunk(b"IDAT", part)
        data += _png_chunk(b"IEND", b"")
        path = temp_dir / name
        path.write_bytes(data)
        return path

    return factory


@pytest.fixture
def font_definition(temp_dir):
    """Write an embeddable font definition plus its program file."""
    def factory(key="demo", subtype="TrueType", program=b"\x00\x01\x00\x00fake-font-program",
                program_name=None, width=500, **overrides):
        program_name = program_name or f"{key}.ttf"
        (temp_dir / program_name).write_bytes(program)
        definition = {
            "name": "DemoSans",
            "type": subtype,
            "up": -75,
            "ut": 60,
            "widths": [width] * 256,
            "file": program_name,
            "enc": "cp1252",
            "desc": {"Ascent": 900, "Descent": -200, "Flags": 32, "FontBBox": "[-100 -200 1000 900]"},
        }
        if subtype == "TrueType":
            definition["original_size"] = len(program)
        else:
            definition["size1"] = 10
            definition["size2"] = max(len(program) - 10, 0)
        definition.update(overrides)
        path = temp_dir / f"{key}.json"
        path.write_text(json.dumps(definition), encoding="utf-8")
        return path

    return factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    # Ignore logging errors during tests
    logging.raiseExceptions = False
