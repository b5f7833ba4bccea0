from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DocumentFormat = Literal["pdf", "docx", "image", "text", "unsupported"]

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MEDIA_TYPE = "text/plain"
IMAGE_MEDIA_TYPES = frozenset({"image/jpeg", "image/png"})


class ExtractionError(ValueError):
    """Extraction failed at a known stage (``pdf-open``, ``pdf-page-2``, ``docx``, ``ocr``...)."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"Error processing {stage}: {message}")
        self.stage = stage
        self.reason = message


class ExtractedDocument(BaseModel):
    file_name: str
    media_type: str = ""
    format: DocumentFormat
    text: str = ""
    pages: int | None = Field(default=None, ge=0)

    @field_validator("media_type")
    @classmethod
    def _normalize_media_type(cls, value: str) -> str:
        return value.split(";")[0].strip().lower()

    @property
    def characters(self) -> int:
        return len(self.text)
