from __future__ import annotations

import logging
from contextlib import contextmanager
from io import BytesIO
from typing import Callable, Iterator

import pytesseract
from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader

from app.core.config import settings

from .models import (
    DOCX_MEDIA_TYPE,
    IMAGE_MEDIA_TYPES,
    PDF_MEDIA_TYPE,
    TEXT_MEDIA_TYPE,
    ExtractedDocument,
    ExtractionError,
)

logger = logging.getLogger(__name__)


def _normalize_media_type(media_type: str | None) -> str:
    return (media_type or "").split(";")[0].strip().lower()


def _extract_pdf(content: bytes) -> tuple[str, int]:
    try:
        reader = PdfReader(BytesIO(content))
        page_count = len(reader.pages)
    except Exception as exc:
        raise ExtractionError("pdf-open", str(exc) or "Unknown error") from exc

    page_texts: list[str] = []
    for number in range(1, page_count + 1):
        items: list[str] = []

        def collect(text, _cm, _tm, _font_dict, _font_size):
            fragment = (text or "").strip("\r\n")
            if fragment.strip():
                items.append(fragment)

        try:
            reader.pages[number - 1].extract_text(visitor_text=collect)
        except Exception as exc:
            raise ExtractionError(f"pdf-page-{number}", str(exc) or "Unknown error") from exc
        page_texts.append(" ".join(items))

    return "\n".join(page_texts), page_count


def _docx_lines(parent, element) -> Iterator[str]:
    # Body children in document order; tables row by row, cell by cell.
    for child in element.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, parent).text
        elif child.tag == qn("w:tbl"):
            for row in Table(child, parent).rows:
                seen = set()
                for cell in row.cells:
                    # Merged cells repeat across the span.
                    if cell._tc in seen:
                        continue
                    seen.add(cell._tc)
                    yield from _docx_lines(cell, cell._tc)


def _extract_docx(content: bytes) -> str:
    try:
        document = Document(BytesIO(content))
    except Exception as exc:
        raise ExtractionError("docx", str(exc) or "Unknown error") from exc
    return "\n".join(_docx_lines(document, document.element.body))


@contextmanager
def ocr_session(content: bytes, language: str) -> Iterator[Callable[[], str]]:
    """Scoped OCR engine: probe tesseract, open the image, always close it."""
    try:
        pytesseract.get_tesseract_version()
    except Exception as exc:
        raise ExtractionError("ocr", f"OCR engine unavailable: {exc}") from exc

    try:
        image = Image.open(BytesIO(content))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ExtractionError("ocr", f"Unreadable image: {exc}") from exc

    def recognize() -> str:
        if image.mode in {"RGB", "L"}:
            return pytesseract.image_to_string(image, lang=language)
        converted = image.convert("RGB")
        try:
            return pytesseract.image_to_string(converted, lang=language)
        finally:
            converted.close()

    try:
        yield recognize
    finally:
        image.close()


def _extract_image(content: bytes, language: str) -> str:
    with ocr_session(content, language) as recognize:
        try:
            return recognize()
        except Exception as exc:
            raise ExtractionError("ocr", str(exc) or "Unknown error") from exc


def extract_document(
    file_name: str,
    media_type: str | None,
    content: bytes,
    *,
    ocr_language: str | None = None,
) -> ExtractedDocument:
    """Turn an uploaded file into plain text, dispatching on the declared media type.

    Media types without a strategy produce an empty ``unsupported`` document
    rather than an error.
    """
    declared = _normalize_media_type(media_type)
    pages: int | None = None

    if declared == PDF_MEDIA_TYPE:
        doc_format = "pdf"
        text, pages = _extract_pdf(content)
    elif declared == DOCX_MEDIA_TYPE:
        doc_format = "docx"
        text = _extract_docx(content)
    elif declared in IMAGE_MEDIA_TYPES:
        doc_format = "image"
        text = _extract_image(content, ocr_language or settings.ocr_language)
    elif declared == TEXT_MEDIA_TYPE:
        doc_format = "text"
        text = content.decode("utf-8", errors="replace")
    else:
        doc_format = "unsupported"
        text = ""
        logger.info("extraction_skipped media_type=%s file=%s", declared or "unknown", file_name)

    return ExtractedDocument(
        file_name=file_name,
        media_type=declared,
        format=doc_format,
        text=text,
        pages=pages,
    )
