# =============================================================================
# TESTS - Text extraction
# =============================================================================

import io

import fitz
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from docx import Document as DocxDocument
from pptx import Presentation
from pptx.util import Inches

from trivia.exceptions import UnsupportedFormat, ValidationError
from trivia.services.extraction import (
    DOCX_MIME,
    PDF_MIME,
    PPTX_MIME,
    TEXT_MIME,
    clean_text,
    extract_text,
    resolve_mime_type,
)


def make_pdf(text):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(paragraphs):
    doc = DocxDocument()
    for paragraph in paragraphs:
        doc.add_paragraph(paragraph)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def make_pptx(lines):
    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[6])
    for n, line in enumerate(lines):
        box = slide.shapes.add_textbox(Inches(1), Inches(1 + n), Inches(4), Inches(1))
        box.text_frame.text = line
    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


class TestCleanText:

    def test_collapses_whitespace(self):
        assert clean_text("  one\n\n two\tthree  ") == "one two three"


class TestResolveMimeType:

    def test_declared_type_wins(self):
        assert resolve_mime_type("notes.bin", "text/plain; charset=utf-8") == TEXT_MIME

    def test_generic_type_falls_back_to_extension(self):
        assert resolve_mime_type("deck.PPTX", "application/octet-stream") == PPTX_MIME
        assert resolve_mime_type("paper.docx", "") == DOCX_MIME

    def test_unknown_extension_stays_generic(self):
        assert resolve_mime_type("image.png", "application/octet-stream") == "application/octet-stream"


class TestExtractText:
    """Tests for format dispatch."""

    def test_plain_text(self):
        upload = SimpleUploadedFile("notes.txt", "Café facts".encode("utf-8"), content_type=TEXT_MIME)

        text, mime_type = extract_text(upload)

        assert text == "Café facts"
        assert mime_type == TEXT_MIME

    def test_invalid_utf8_text(self):
        upload = SimpleUploadedFile("notes.txt", b"\xff\xfe\xfa", content_type=TEXT_MIME)

        with pytest.raises(ValidationError):
            extract_text(upload)

    def test_pdf(self):
        upload = SimpleUploadedFile("doc.pdf", make_pdf("Espresso is concentrated"), content_type=PDF_MIME)

        text, mime_type = extract_text(upload)

        assert "Espresso is concentrated" in text
        assert mime_type == PDF_MIME

    def test_corrupted_pdf(self):
        upload = SimpleUploadedFile("doc.pdf", b"not really a pdf", content_type=PDF_MIME)

        with pytest.raises(ValidationError):
            extract_text(upload)

    def test_docx(self):
        data = make_docx(["Latte has milk.", "", "Mocha has chocolate."])
        upload = SimpleUploadedFile("doc.docx", data, content_type=DOCX_MIME)

        text, mime_type = extract_text(upload)

        assert text == "Latte has milk.\nMocha has chocolate."
        assert mime_type == DOCX_MIME

    def test_pptx_with_generic_content_type(self):
        data = make_pptx(["Cold brew", "Steeped for hours"])
        upload = SimpleUploadedFile("deck.pptx", data, content_type="application/octet-stream")

        text, mime_type = extract_text(upload)

        assert "Cold brew" in text
        assert "Steeped for hours" in text
        assert mime_type == PPTX_MIME

    def test_unsupported_type(self):
        upload = SimpleUploadedFile("image.png", b"\x89PNG", content_type="image/png")

        with pytest.raises(UnsupportedFormat, match="image/png"):
            extract_text(upload)
