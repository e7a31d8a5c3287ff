"""
Text extraction for uploaded documents.

    Uploaded file → MIME dispatch → Extractor → Raw text

Supported formats: PDF (PyMuPDF), DOCX (python-docx), PPTX (python-pptx)
and plain text. Anything else raises UnsupportedFormat.
"""

import io
import logging
import os
import re
from typing import Callable, Dict, List, Tuple

import fitz  # PyMuPDF
from docx import Document as DocxDocument
from pptx import Presentation

from trivia.exceptions import UnsupportedFormat, ValidationError


logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
TEXT_MIME = "text/plain"

# Browsers often send a generic type for Office files
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

EXTENSION_MIME_TYPES = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".pptx": PPTX_MIME,
    ".txt": TEXT_MIME,
}


def clean_text(raw_text: str) -> str:
    """
    Collapse runs of whitespace into single spaces and strip the ends.

    Args:
        raw_text: Text extracted directly from a document.

    Returns:
        Cleaned text.
    """
    return re.sub(r'\s+', ' ', raw_text).strip()


def resolve_mime_type(file_name: str, content_type: str) -> str:
    """
    Pick the MIME type used for dispatch.

    The declared content type wins unless it is generic, in which case the
    file extension decides.
    """
    mime_type = (content_type or "").split(";")[0].strip().lower()
    if mime_type in GENERIC_MIME_TYPES:
        extension = os.path.splitext(file_name or "")[1].lower()
        return EXTENSION_MIME_TYPES.get(extension, mime_type)
    return mime_type


def extract_text_from_pdf(data: bytes) -> str:
    try:
        pdf_doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise ValidationError(f"Failed to open PDF: {e}") from e

    try:
        if pdf_doc.page_count == 0:
            raise ValidationError("PDF has no pages")
        pages = [page.get_text() for page in pdf_doc]
    finally:
        pdf_doc.close()

    logger.debug(f"Extracted {len(pages)} PDF pages")
    return "\n".join(pages)


def extract_text_from_docx(data: bytes) -> str:
    """
    Extract paragraph and table text from a DOCX file.

    Raises:
        ValidationError: If the file cannot be opened or is corrupted.
    """
    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise ValidationError(f"Failed to extract text from DOCX: {e}") from e

    paragraphs = [para.text for para in doc.paragraphs if para.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text.strip():
                    paragraphs.append(cell.text)

    return "\n".join(paragraphs)


def _extract_text_from_shape(shape) -> List[str]:
    """Recursively extract text from a shape, including tables and groups."""
    text_parts = []

    if getattr(shape, "has_text_frame", False) and shape.text_frame:
        for paragraph in shape.text_frame.paragraphs:
            para_text = paragraph.text.strip()
            if para_text:
                text_parts.append(para_text)

    if getattr(shape, "has_table", False) and shape.has_table:
        for row in shape.table.rows:
            for cell in row.cells:
                cell_text = cell.text.strip()
                if cell_text:
                    text_parts.append(cell_text)

    # Group shapes
    if hasattr(shape, "shapes"):
        for sub_shape in shape.shapes:
            text_parts.extend(_extract_text_from_shape(sub_shape))

    return text_parts


def extract_text_from_pptx(data: bytes) -> str:
    """
    Extract the text of every slide in a PPTX file.

    A shape that fails to parse is skipped with a warning; the rest of the
    slide is still used.

    Raises:
        ValidationError: If the presentation cannot be opened.
    """
    try:
        prs = Presentation(io.BytesIO(data))
    except Exception as e:
        raise ValidationError(f"Failed to extract text from PPTX: {e}") from e

    slides = []
    for slide_num, slide in enumerate(prs.slides, start=1):
        parts = []
        for shape_idx, shape in enumerate(slide.shapes):
            try:
                parts.extend(_extract_text_from_shape(shape))
            except Exception as e:
                logger.warning(
                    f"Error extracting text from shape {shape_idx} on slide {slide_num}: {e}"
                )
        if parts:
            slides.append("\n".join(parts))

    logger.debug(f"PPTX extraction complete: {len(slides)} slides with text")
    return "\n\n".join(slides)


def extract_text_from_plain(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(f"Text file is not valid UTF-8: {e}") from e


EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    PDF_MIME: extract_text_from_pdf,
    DOCX_MIME: extract_text_from_docx,
    PPTX_MIME: extract_text_from_pptx,
    TEXT_MIME: extract_text_from_plain,
}


def extract_text(uploaded_file) -> Tuple[str, str]:
    """
    Extract text from an uploaded file.

    Args:
        uploaded_file: A Django UploadedFile (anything with `name`,
            `content_type` and `read()`).

    Returns:
        Tuple of (text, mime_type).

    Raises:
        UnsupportedFormat: If the MIME type has no extractor.
        ValidationError: If the file is corrupted.
    """
    file_name = getattr(uploaded_file, "name", "") or ""
    mime_type = resolve_mime_type(file_name, getattr(uploaded_file, "content_type", ""))

    extractor = EXTRACTORS.get(mime_type)
    if extractor is None:
        raise UnsupportedFormat(f"Unsupported file type: {mime_type or 'unknown'}")

    if hasattr(uploaded_file, "seek"):
        uploaded_file.seek(0)
    data = uploaded_file.read()

    logger.info(f"Extracting text from {file_name} ({mime_type}, {len(data)} bytes)")
    text = extractor(data)
    return text, mime_type
