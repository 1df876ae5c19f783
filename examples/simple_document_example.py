#!/usr/bin/env python3
"""
Simple document example.

Builds a two-page invoice-style document with headings, wrapped text, an
indented block, a table and a rule, then saves it.
"""

import sys
from pathlib import Path

from pdfquill import Document, configure_logging

BODY = (
    "PdfQuill lays out text with a cursor: print advances it, wrap breaks "
    "long paragraphs at the right margin, and indent pushes a new left "
    "margin that applies until it is popped again."
)


def main():
    """Build and save the example document."""
    configure_logging("INFO")
    output = Path(sys.argv[1] if len(sys.argv) > 1 else "output/simple_document_example.pdf")
    output.parent.mkdir(parents=True, exist_ok=True)

    doc = Document(unit="in", page_format="letter", compress=True, title="Example", author="PdfQuill")
    doc.page()

    with doc.font_scope("helvetica", "B", 18):
        doc.center("Quarterly Summary", eols=2)

    doc.wrap(BODY, eols=2)

    with doc.indented(tabs=2):
        doc.fontcolor("336699")
        doc.wrap("Indented note in blue.\nSecond line of the note.")
        doc.fontcolor(0)

    doc.println()
    doc.line()
    doc.println()

    doc.table(doc.y, [1, [3.5], 5.5], [
        "Item", "Qty", "Price",
        "Widgets", "4", "12.00",
        "Gadgets", "10", "3.50",
    ])

    doc.page()
    doc.font("times", "i", 11)
    doc.wrap("Second page, set in Times Italic.")

    print(f"PDF saved: {doc.save(output)}")


if __name__ == "__main__":
    main()
