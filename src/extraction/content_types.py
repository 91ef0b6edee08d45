"""Declared media type resolution."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict

from .models import ContentKind

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """Document formats accepted by the inference service."""

    PDF = "pdf"
    CSV = "csv"
    DOC = "doc"
    DOCX = "docx"
    XLS = "xls"
    XLSX = "xlsx"
    HTML = "html"
    TXT = "txt"
    MD = "md"


class ImageFormat(str, Enum):
    """Raster formats accepted by the inference service."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    WEBP = "webp"


DEFAULT_DOCUMENT_FORMAT = DocumentFormat.PDF
DEFAULT_IMAGE_FORMAT = ImageFormat.JPEG

_KNOWN_DOCUMENT_MEDIA_TYPES: Dict[str, DocumentFormat] = {
    "application/pdf": DocumentFormat.PDF,
    "text/csv": DocumentFormat.CSV,
    "application/msword": DocumentFormat.DOC,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
    "application/vnd.ms-excel": DocumentFormat.XLS,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": DocumentFormat.XLSX,
    "text/html": DocumentFormat.HTML,
    "text/plain": DocumentFormat.TXT,
    "text/markdown": DocumentFormat.MD,
}


def _normalize(media_type: str | None) -> str:
    return (media_type or "").strip().lower()


def _matches_document(media_type: str) -> bool:
    return any(fmt.value in media_type for fmt in DocumentFormat)


def _matches_image(media_type: str) -> bool:
    return any(fmt.value in media_type for fmt in ImageFormat)


def resolve_content_type(media_type: str | None) -> ContentKind:
    """Map a declared media type to document, image or unsupported.

    Matching is case-insensitive substring containment against the known
    format names; a type matching both families is treated as a document.
    """

    normalized = _normalize(media_type)
    if not normalized:
        return ContentKind.UNSUPPORTED
    if _matches_document(normalized):
        return ContentKind.DOCUMENT
    if _matches_image(normalized):
        return ContentKind.IMAGE
    return ContentKind.UNSUPPORTED


def is_pdf(media_type: str | None) -> bool:
    return DocumentFormat.PDF.value in _normalize(media_type)


def detect_image_format(media_type: str | None) -> ImageFormat:
    normalized = _normalize(media_type)
    for fmt in ImageFormat:
        if fmt.value in normalized:
            return fmt
    return DEFAULT_IMAGE_FORMAT


def detect_document_format(media_type: str | None) -> DocumentFormat:
    normalized = _normalize(media_type).split(";")[0].strip()
    known = _KNOWN_DOCUMENT_MEDIA_TYPES.get(normalized)
    if known is not None:
        return known

    # Longest name first so "docx" is not reported as "doc".
    for fmt in sorted(DocumentFormat, key=lambda item: len(item.value), reverse=True):
        if fmt.value in normalized:
            return fmt
    logger.debug("No document format matched %r; using %s", media_type, DEFAULT_DOCUMENT_FORMAT.value)
    return DEFAULT_DOCUMENT_FORMAT


__all__ = [
    "DEFAULT_DOCUMENT_FORMAT",
    "DEFAULT_IMAGE_FORMAT",
    "DocumentFormat",
    "ImageFormat",
    "detect_document_format",
    "detect_image_format",
    "is_pdf",
    "resolve_content_type",
]
