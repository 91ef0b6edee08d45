from __future__ import annotations

import pytest
from pydantic import ValidationError
from src.extraction.content_types import DocumentFormat, ImageFormat
from src.extraction.errors import UnsupportedContentType
from src.extraction.models import ExtractedImage, ImageClassification
from src.extraction.request_builder import (
    DEFAULT_USER_PROMPT,
    DocumentBlock,
    ImageBlock,
    InferenceRequest,
    InferenceRequestBuilder,
    TextBlock,
    resolve_prompt,
    sanitize_document_name,
)
from src.extraction.routes import (
    MultiImageInference,
    SingleImageInference,
    Unsupported,
    WholeDocumentInference,
)


def _scanned(page: int, data: bytes) -> ExtractedImage:
    return ExtractedImage(
        data=data,
        width=800,
        height=600,
        page_index=page,
        object_index=0,
        classification=ImageClassification.SCANNED_DOCUMENT,
    )


def test_whole_document_request() -> None:
    builder = InferenceRequestBuilder(max_tokens=1024)
    route = WholeDocumentInference(document=b"%PDF-1.4", document_format=DocumentFormat.PDF)

    request = builder.build(route, "Extract totals", source_key="uploads/Invoice #42 (final).pdf")

    assert request.blocks[0] == TextBlock(text="Extract totals")
    document = request.blocks[1]
    assert isinstance(document, DocumentBlock)
    assert document.name == "Invoice 42 (final)"
    assert document.format is DocumentFormat.PDF
    assert document.data == b"%PDF-1.4"
    assert request.generation.max_tokens == 1024
    assert request.generation.temperature == 0
    assert request.generation.top_p == 0


def test_multi_image_request_keeps_page_order() -> None:
    route = MultiImageInference(images=[_scanned(0, b"first"), _scanned(3, b"second")])

    request = InferenceRequestBuilder(max_tokens=10).build(route, "prompt")

    assert isinstance(request.blocks[0], TextBlock)
    assert [block.data for block in request.blocks[1:]] == [b"first", b"second"]
    assert all(
        isinstance(block, ImageBlock) and block.format is ImageFormat.JPEG
        for block in request.blocks[1:]
    )


def test_single_image_request_uses_declared_format() -> None:
    route = SingleImageInference(image=b"png-bytes", image_format=ImageFormat.PNG)

    request = InferenceRequestBuilder(max_tokens=10).build(route, "prompt")

    assert request.blocks[1] == ImageBlock(format=ImageFormat.PNG, data=b"png-bytes")


def test_build_is_reproducible() -> None:
    builder = InferenceRequestBuilder(max_tokens=64)
    route = WholeDocumentInference(document=b"doc")

    assert builder.build(route, "p", source_key="a.pdf") == builder.build(route, "p", source_key="a.pdf")


def test_unsupported_route_cannot_be_built() -> None:
    with pytest.raises(UnsupportedContentType):
        InferenceRequestBuilder(max_tokens=10).build(Unsupported(), "prompt")


def test_token_budget_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        InferenceRequestBuilder(max_tokens=0)


def test_request_requires_instruction_first() -> None:
    with pytest.raises(ValidationError):
        InferenceRequest(
            blocks=[ImageBlock(format=ImageFormat.PNG, data=b"x")],
            system_prompt="",
            generation={"max_tokens": 1},
        )


@pytest.mark.parametrize(
    ("parameter", "environment", "expected"),
    [
        ("from parameter", "from env", "from parameter"),
        ("", "from env", "from env"),
        ("   ", None, DEFAULT_USER_PROMPT),
        (None, None, DEFAULT_USER_PROMPT),
    ],
)
def test_resolve_prompt_precedence(parameter, environment, expected) -> None:
    assert resolve_prompt(parameter, environment) == expected


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("reports/Q1 summary.pdf", "Q1 summary"),
        ("weird_name!!.pdf", "weirdname"),
        ("%%%.pdf", "document"),
        ("", "document"),
    ],
)
def test_sanitize_document_name(key: str, expected: str) -> None:
    assert sanitize_document_name(key) == expected
