from __future__ import annotations

import pytest
from src.extraction.content_types import (
    DocumentFormat,
    ImageFormat,
    detect_document_format,
    detect_image_format,
    is_pdf,
    resolve_content_type,
)
from src.extraction.detector import DEFAULT_MEDIA_TYPE, detect_media_type
from src.extraction.models import ContentKind
from tests.stubs import render_pdf, render_png


@pytest.mark.parametrize(
    ("media_type", "expected"),
    [
        ("application/pdf", ContentKind.DOCUMENT),
        ("APPLICATION/PDF", ContentKind.DOCUMENT),
        ("text/csv", ContentKind.DOCUMENT),
        ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ContentKind.DOCUMENT),
        ("image/png", ContentKind.IMAGE),
        ("image/jpeg", ContentKind.IMAGE),
        ("image/webp", ContentKind.IMAGE),
        ("application/zip", ContentKind.UNSUPPORTED),
        ("", ContentKind.UNSUPPORTED),
        (None, ContentKind.UNSUPPORTED),
    ],
)
def test_resolve_content_type(media_type: str | None, expected: ContentKind) -> None:
    assert resolve_content_type(media_type) is expected


def test_document_wins_when_both_families_match() -> None:
    assert resolve_content_type("image/png+pdf") is ContentKind.DOCUMENT


def test_is_pdf_is_case_insensitive() -> None:
    assert is_pdf("Application/PDF")
    assert not is_pdf("image/png")
    assert not is_pdf(None)


def test_detect_formats() -> None:
    assert detect_image_format("image/png") is ImageFormat.PNG
    assert detect_image_format("image/unknown") is ImageFormat.JPEG
    assert detect_document_format("application/pdf") is DocumentFormat.PDF
    assert detect_document_format("text/csv; charset=utf-8") is DocumentFormat.CSV
    assert (
        detect_document_format("application/vnd.openxmlformats-officedocument.wordprocessingml.document")
        is DocumentFormat.DOCX
    )
    assert detect_document_format("application/x-docx") is DocumentFormat.DOCX


def test_detect_media_type_from_magic_bytes() -> None:
    assert detect_media_type(render_png((10, 10))) == "image/png"
    assert detect_media_type(render_pdf([(20, 20)])) == "application/pdf"


def test_detect_media_type_falls_back_to_name() -> None:
    assert detect_media_type(b"a,b\n1,2\n", "notes.csv") == "text/csv"
    assert detect_media_type(b"\x00\x01\x02", "blob") == DEFAULT_MEDIA_TYPE
    assert detect_media_type(b"", "") == DEFAULT_MEDIA_TYPE
