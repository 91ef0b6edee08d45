"""Common data models for document extraction."""

from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    """Verdict of the content type resolver."""

    DOCUMENT = "document"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


class ImageClassification(str, Enum):
    """Label assigned to an image extracted from a PDF."""

    LOGO = "logo"
    SCANNED_DOCUMENT = "scanned_document"


class SourceDocument(BaseModel):
    """Raw payload read from blob storage."""

    model_config = ConfigDict(frozen=True)

    key: str
    data: bytes
    media_type: str


class ExtractedImage(BaseModel):
    """An embedded PDF image re-encoded as JPEG."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    width: int
    height: int
    page_index: int
    object_index: int
    classification: ImageClassification

    @property
    def position(self) -> tuple[int, int]:
        return (self.page_index, self.object_index)


class ExtractionResult(BaseModel):
    """Raw model answer plus the flattened attribute record."""

    source_key: str
    raw_text: str
    route: str
    attributes: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "ContentKind",
    "ExtractedImage",
    "ExtractionResult",
    "ImageClassification",
    "SourceDocument",
]
