"""Tests for object numbering, xref integrity and object contents."""

import re
import zlib
from datetime import datetime

import pytest

from pdfquill import DocumentState
from pdfquill.config import PageLayout, ZoomMode
from pdfquill.exceptions import ConfigurationError, EncodingError, StructuralInvariantViolation
from pdfquill.pdfcompiler.objects import PdfPage
from pdfquill.pdfcompiler.resources import FontKey, FontRecord
from pdfquill.pdfcompiler.utils import format_pdf_value, pdf_text_string
from pdfquill.pdfcompiler.writer import PdfWriter, resources_object_number
from tests.pdf_helpers import object_bytes, object_count, page_content, stream_data, trailer, xref_offsets


def build(pt_document, make_png, make_jpeg, font_definition, pages=1, builtin=("helvetica",),
          embedded=0, plain_images=0, indexed_images=0, compress=False):
    """Document with the requested mix of pages, fonts and images."""
    doc = pt_document(compress=compress)
    for number in range(pages):
        doc.page()
        doc.println(f"page {number + 1}")
    for family in builtin[1:]:
        doc.font(family)
        doc.print("x")
    for number in range(embedded):
        path = font_definition(key=f"embedded{number}")
        doc.font(f"embedded{number}", path=path)
        doc.print("y")
    for number in range(plain_images):
        doc.image(make_jpeg(name=f"plain{number}.jpg"), 10, 10)
    for number in range(indexed_images):
        doc.image(make_png(name=f"indexed{number}.png", mode="P"), 10, 10)
    return doc


MIXES = [
    dict(pages=0),
    dict(pages=1),
    dict(pages=3, builtin=("helvetica", "times", "courier")),
    dict(pages=1, embedded=1),
    dict(pages=2, builtin=("helvetica", "symbol"), embedded=2),
    dict(pages=1, plain_images=2),
    dict(pages=1, indexed_images=2),
    dict(pages=2, builtin=("helvetica", "courier"), embedded=1, plain_images=1, indexed_images=1),
    dict(pages=2, embedded=1, plain_images=1, indexed_images=1, compress=True),
]


@pytest.mark.integration
@pytest.mark.parametrize("mix", MIXES)
def test_offset_integrity(pt_document, make_png, make_jpeg, font_definition, mix):
    doc = build(pt_document, make_png, make_jpeg, font_definition, **mix)
    data = doc.finalize()
    offsets = xref_offsets(data)
    for number, offset in enumerate(offsets, start=1):
        assert data[offset:].startswith(f"{number} 0 obj\n".encode())
    assert trailer(data)["size"] == len(offsets) + 1
    assert data.startswith(b"%PDF-1.3\n")
    assert data.endswith(b"%%EOF\n")


@pytest.mark.integration
@pytest.mark.parametrize("mix", MIXES)
def test_resources_object_is_last_and_matches_formula(pt_document, make_png, make_jpeg,
                                                      font_definition, mix):
    doc = build(pt_document, make_png, make_jpeg, font_definition, **mix)
    data = doc.finalize()
    expected = resources_object_number(len(doc.pages), doc.fonts.records(), doc.images.records())
    embedded = mix.get("embedded", 0)
    indexed = mix.get("indexed_images", 0)
    fonts = len(mix.get("builtin", ("helvetica",))) + embedded
    images = mix.get("plain_images", 0) + indexed
    assert expected == 4 + 2 * mix["pages"] + fonts + 3 * embedded + images + indexed
    assert object_count(data) == expected
    assert b"/ProcSet [/PDF /Text /ImageB /ImageC /ImageI]" in object_bytes(data, expected)
    assert f"/Resources {expected} 0 R".encode() in object_bytes(data, 3)


@pytest.mark.unit
@pytest.mark.parametrize("pages,fonts,images,expected", [
    (0, [], [], 4),
    (1, [1], [], 7),
    (2, [1, 4], [1, 2], 4 + 4 + 5 + 3),
    (5, [4, 4, 1], [2], 4 + 10 + 9 + 2),
])
def test_resources_formula(pages, fonts, images, expected):
    class Counted:
        def __init__(self, count):
            self.object_count = count

    assert resources_object_number(pages, map(Counted, fonts), map(Counted, images)) == expected


@pytest.mark.unit
class TestWriterGuards:
    """Structural checks inside the writer."""

    def write(self, writer, **overrides):
        options = dict(pages=[], fonts=[], images=[], width=612, height=792, info={})
        options.update(overrides)
        return writer.write(**options)

    def test_corrupted_offset_detected(self):
        writer = PdfWriter()
        self.write(writer)
        writer.offsets[1] += 1
        with pytest.raises(StructuralInvariantViolation, match="offset mismatch"):
            writer.verify_offsets()

    def test_trailer_requires_xref(self):
        with pytest.raises(StructuralInvariantViolation, match="before xref"):
            PdfWriter()._write_trailer()

    def test_writer_is_single_use(self):
        writer = PdfWriter()
        self.write(writer)
        with pytest.raises(StructuralInvariantViolation):
            self.write(writer)

    def test_unsupported_font_subtype(self):
        font = FontRecord(index=1, key=FontKey.create("odd"), name="Odd", subtype="OpenType",
                          underline_position=-100, underline_thickness=50, widths=(0,) * 256)
        with pytest.raises(ConfigurationError, match="invalid font type"):
            self.write(PdfWriter(), fonts=[font])

    def test_empty_document_structure(self):
        data = self.write(PdfWriter(), creation_date=datetime(2021, 5, 6, 7, 8, 9))
        assert object_count(data) == 4
        assert b"/OpenAction" not in object_bytes(data, 2)
        assert b"/Kids []" in object_bytes(data, 3)
        assert b"/Count 0" in object_bytes(data, 3)
        assert b"/CreationDate (D:20210506070809)" in object_bytes(data, 1)

    def test_xref_line_format(self):
        data = self.write(PdfWriter())
        start = int(data.rsplit(b"startxref\n", 1)[1].split(b"\n")[0])
        lines = data[start:].split(b"\n")
        assert lines[:3] == [b"xref", b"0 5", b"0000000000 65535 f "]
        assert all(len(line) == 19 and line.endswith(b" 00000 n ") for line in lines[3:7])


@pytest.mark.unit
class TestCatalog:
    """Viewer preferences."""

    @pytest.mark.parametrize("zoom,expected", [
        (ZoomMode.FULLPAGE, b"/OpenAction [4 0 R /Fit]"),
        (ZoomMode.FULLWIDTH, b"/OpenAction [4 0 R /FitH null]"),
        (ZoomMode.REAL, b"/OpenAction [4 0 R /XYZ null null 1]"),
        (150, b"/OpenAction [4 0 R /XYZ null null 1.5]"),
    ])
    def test_zoom(self, pt_document, zoom, expected):
        doc = pt_document(zoom=zoom)
        doc.page()
        assert expected in object_bytes(doc.finalize(), 2)

    def test_layout(self, pt_document):
        doc = pt_document(page_layout=PageLayout.TWO)
        assert b"/PageLayout /TwoColumnLeft" in object_bytes(doc.finalize(), 2)


@pytest.mark.integration
class TestObjectContents:
    """Page, font and image dictionaries."""

    def test_info_dictionary(self, pt_document):
        doc = pt_document(title="Report (draft)", author="A. Writer")
        doc.subject = "Numbers"
        info = object_bytes(doc.finalize(), 1)
        assert b"/Producer (PdfQuill 1.0)" in info
        assert b"/Title (Report \\(draft\\))" in info
        assert b"/Author (A. Writer)" in info
        assert b"/Subject (Numbers)" in info
        assert b"/Keywords" not in info
        assert b"/CreationDate (D:20200102030405)" in info

    def test_info_outside_winansi_written_as_utf16(self, pt_document):
        title = "Отчёт 報告"
        doc = pt_document(title=title, author="Zoë")
        doc.page()
        info = object_bytes(doc.finalize(), 1)
        expected = "/Title <FEFF" + title.encode("utf-16-be").hex().upper() + ">"
        assert expected.encode("ascii") in info
        assert "/Author (Zoë)".encode("cp1252") in info
        assert doc.finalized

    def test_page_tree_and_media_box(self, pt_document):
        doc = pt_document(page_format="a4")
        doc.page()
        doc.page("landscape")
        data = doc.finalize()
        tree = object_bytes(data, 3)
        assert b"/Kids [4 0 R 6 0 R]" in tree
        assert b"/MediaBox [0 0 595.28 841.89]" in tree
        assert b"/MediaBox" not in object_bytes(data, 4)
        flipped = object_bytes(data, 6)
        assert b"/MediaBox [0 0 841.89 595.28]" in flipped
        assert b"/Parent 3 0 R" in flipped
        assert b"/Contents 7 0 R" in flipped

    def test_compressed_content(self, pt_document):
        doc = pt_document(compress=True)
        doc.page()
        doc.print("Squeeze")
        data = doc.finalize()
        assert b"/Filter /FlateDecode" in object_bytes(data, 5)
        assert "(Squeeze) Tj" in page_content(data, compressed=True)

    def test_builtin_font_objects(self, pt_document):
        doc = pt_document()
        doc.page()
        doc.font("symbol")
        doc.print("a")
        data = doc.finalize()
        helvetica, symbol = object_bytes(data, 6), object_bytes(data, 7)
        assert b"/BaseFont /Helvetica" in helvetica
        assert b"/Subtype /Type1" in helvetica
        assert b"/Encoding /WinAnsiEncoding" in helvetica
        assert b"/BaseFont /Symbol" in symbol
        assert b"/Encoding" not in symbol
        resources = object_bytes(data, 8)
        assert b"/F1 6 0 R" in resources
        assert b"/F2 7 0 R" in resources
        assert b"/XObject" not in resources

    def test_embedded_truetype_cluster(self, pt_document, font_definition):
        path = font_definition(program=b"TRUETYPEDATA")
        doc = pt_document(font_family="demo", font_path=path.parent)
        doc.page()
        doc.print("Hi")
        data = doc.finalize()
        font = object_bytes(data, 6)
        assert b"/BaseFont /DemoSans" in font
        assert b"/Subtype /TrueType" in font
        assert b"/FirstChar 32 /LastChar 255" in font
        assert b"/FontDescriptor 7 0 R" in font
        assert b"/Widths 8 0 R" in font
        descriptor = object_bytes(data, 7)
        assert b"/FontFile2 9 0 R" in descriptor
        assert descriptor.index(b"/Ascent") < descriptor.index(b"/Descent") < descriptor.index(b"/Flags")
        widths = object_bytes(data, 8)
        assert len(re.search(rb"\[ (.*) \]", widths).group(1).split()) == 224
        program = object_bytes(data, 9)
        assert b"/Length1 12" in program
        assert b"/Filter" not in program
        assert stream_data(data, 9) == b"TRUETYPEDATA"

    def test_embedded_type1_compressed_program(self, pt_document, font_definition):
        payload = zlib.compress(b"type1 program bytes")
        path = font_definition(key="demo", subtype="Type1", program=payload, program_name="demo.z")
        doc = pt_document(font_family="demo", font_path=path.parent)
        doc.page()
        data = doc.finalize()
        assert b"/FontFile 9 0 R" in object_bytes(data, 7)
        program = object_bytes(data, 9)
        assert b"/Filter /FlateDecode" in program
        assert f"/Length2 {len(payload) - 10} /Length3 0".encode() in program

    def test_descriptor_arrays_and_booleans(self, pt_document, font_definition):
        path = font_definition(desc={"FontBBox": [-100, -200, 1000, 900], "Fixed": True, "StemV": 80})
        doc = pt_document(font_family="demo", font_path=path.parent)
        doc.page()
        descriptor = object_bytes(doc.finalize(), 7)
        assert b"/FontBBox [-100 -200 1000 900]" in descriptor
        assert b"/Fixed true" in descriptor
        assert b"/StemV 80" in descriptor
        assert b"," not in descriptor

    def test_unencodable_descriptor_keeps_document_open(self, pt_document, font_definition):
        path = font_definition(desc={"Style": "報"})
        doc = pt_document(font_family="demo", font_path=path.parent)
        doc.page()
        with pytest.raises(EncodingError):
            doc.finalize()
        assert doc.state is DocumentState.IN_PAGE
        with pytest.raises(EncodingError):
            doc.finalize()

    def test_jpeg_objects(self, pt_document, make_jpeg):
        doc = pt_document()
        doc.page()
        doc.image(make_jpeg(mode="CMYK", size=(8, 6)), 10, 10)
        data = doc.finalize()
        image = object_bytes(data, 7)
        assert b"/Subtype /Image" in image
        assert b"/Width 8" in image and b"/Height 6" in image
        assert b"/ColorSpace /DeviceCMYK" in image
        assert b"/Decode [1 0 1 0 1 0 1 0]" in image
        assert b"/Filter /DCTDecode" in image
        assert b"/I1 7 0 R" in object_bytes(data, 8)

    def test_indexed_png_objects(self, pt_document, make_png):
        doc = pt_document(compress=True)
        doc.page()
        record_path = make_png(mode="P", size=(5, 4))
        doc.image(record_path, 10, 10)
        data = doc.finalize()
        record = doc.images.get_image(record_path)
        image = object_bytes(data, 7)
        colors = len(record.info.palette) // 3
        assert f"/ColorSpace [/Indexed /DeviceRGB {colors - 1} 8 0 R]".encode() in image
        assert b"/DecodeParms" in image
        assert b"/Predictor 15 " in image or b"/Predictor 15\n" in image
        assert b"/Colors 1" in image
        assert b"/Columns 5" in image
        assert stream_data(data, 7) == record.info.data
        assert zlib.decompress(stream_data(data, 8)) == record.info.palette
        assert object_count(data) == 9


@pytest.mark.unit
def test_page_flag():
    assert PdfPage(1, media_box=(792, 612)).flipped
    assert not PdfPage(2).flipped


@pytest.mark.unit
class TestValueFormatting:
    """Info strings and descriptor values."""

    def test_winansi_text_stays_literal(self):
        assert pdf_text_string("Café (v2)") == "(Café \\(v2\\))"

    def test_other_text_becomes_utf16_hex(self):
        assert pdf_text_string("Ω") == "<FEFF03A9>"

    @pytest.mark.parametrize("value, expected", [
        ([-100, -200, 1000, 900], "[-100 -200 1000 900]"),
        ((1, [2, 3]), "[1 [2 3]]"),
        (True, "true"),
        (False, "false"),
        (32, "32"),
        ("[0 0 1 1]", "[0 0 1 1]"),
    ])
    def test_descriptor_values(self, value, expected):
        assert format_pdf_value(value) == expected
