from __future__ import annotations

from typing import List

from src.extraction.content_types import DocumentFormat, ImageFormat
from src.extraction.models import SourceDocument
from src.extraction.routes import (
    MultiImageInference,
    SingleImageInference,
    Unsupported,
    WholeDocumentInference,
)
from src.extraction.request_builder import InferenceRequestBuilder
from src.routing import ContentRouter, RouterConfig, RoutingState
from tests.stubs import corrupt_first_image, render_blank_pdf, render_pdf, render_png


def _pdf_source(sizes, key: str = "invoice.pdf") -> SourceDocument:
    return SourceDocument(key=key, data=render_pdf(sizes), media_type="application/pdf")


def test_pdf_without_scanned_pages_goes_whole() -> None:
    decision = ContentRouter().route(_pdf_source([(50, 50), (120, 80)]))

    assert isinstance(decision.route, WholeDocumentInference)
    assert decision.route.document_format is DocumentFormat.PDF
    assert decision.is_pdf
    assert decision.logo_count == 2
    assert decision.scanned_count == 0


def test_scanned_pages_are_sent_as_images_without_logos() -> None:
    decision = ContentRouter().route(_pdf_source([(800, 600), (50, 50), (600, 800)]))

    assert isinstance(decision.route, MultiImageInference)
    assert [image.position for image in decision.route.images] == [(0, 0), (2, 0)]
    assert decision.logo_count == 1
    assert decision.scanned_count == 2
    assert decision.used_extracted_images


def test_too_many_scanned_pages_fall_back_to_whole_document() -> None:
    source = _pdf_source([(800, 600), (800, 600), (800, 600)])

    decision = ContentRouter().route(source, RouterConfig(max_images_per_request=2))

    assert isinstance(decision.route, WholeDocumentInference)
    assert decision.scanned_count == 3
    assert "exceed the limit" in decision.steps[-1].detail


def test_unreadable_pdf_is_sent_whole() -> None:
    source = SourceDocument(key="broken.pdf", data=b"%PDF-garbage", media_type="application/pdf")

    decision = ContentRouter().route(source)

    assert isinstance(decision.route, WholeDocumentInference)
    assert decision.route.document == b"%PDF-garbage"
    assert decision.extracted_images == []


def test_valid_pdf_without_images_goes_whole() -> None:
    pdf = render_blank_pdf()
    source = SourceDocument(key="letter.pdf", data=pdf, media_type="application/pdf")

    decision = ContentRouter().route(source)

    assert isinstance(decision.route, WholeDocumentInference)
    assert decision.route.document == pdf
    assert decision.is_pdf
    assert decision.extracted_images == []
    assert not decision.used_extracted_images


def test_undecodable_scan_is_dropped_from_the_image_route() -> None:
    pdf = corrupt_first_image(render_pdf([(800, 600), (600, 800), (800, 600)]))
    source = SourceDocument(key="scans.pdf", data=pdf, media_type="application/pdf")

    decision = ContentRouter().route(source)

    assert isinstance(decision.route, MultiImageInference)
    assert [image.position for image in decision.route.images] == [(1, 0), (2, 0)]
    assert decision.scanned_count == 2


def test_parallel_decoding_builds_identical_requests() -> None:
    sizes = [(800 + index * 10, 600) for index in range(6)]
    source = _pdf_source(sizes, key="batch.pdf")
    config = RouterConfig(decode_workers=3)
    builder = InferenceRequestBuilder(max_tokens=256)

    first = ContentRouter().route(source, config)
    second = ContentRouter().route(source, config)
    sequential = ContentRouter().route(source, RouterConfig(decode_workers=1))

    requests = [
        builder.build(decision.route, "Extract the totals", source_key="batch.pdf")
        for decision in (first, second, sequential)
    ]
    assert requests[0].blocks == requests[1].blocks == requests[2].blocks
    assert requests[0].generation == requests[1].generation
    assert [image.position for image in first.route.images] == [(index, 0) for index in range(6)]


def test_non_pdf_document_skips_extraction() -> None:
    calls: List[str] = []

    def factory(config: RouterConfig):
        calls.append("extractor")
        raise AssertionError("extractor must not be built for non-PDF documents")

    source = SourceDocument(key="table.csv", data=b"a,b\n1,2\n", media_type="text/csv")
    decision = ContentRouter(extractor_factory=factory).route(source)

    assert isinstance(decision.route, WholeDocumentInference)
    assert decision.route.document_format is DocumentFormat.CSV
    assert not decision.is_pdf
    assert calls == []


def test_image_upload_goes_single_image() -> None:
    data = render_png((640, 480))
    decision = ContentRouter().route(SourceDocument(key="receipt.png", data=data, media_type="image/png"))

    assert isinstance(decision.route, SingleImageInference)
    assert decision.route.image == data
    assert decision.route.image_format is ImageFormat.PNG


def test_unknown_type_is_rejected() -> None:
    source = SourceDocument(key="archive.zip", data=b"PK\x03\x04", media_type="application/zip")

    decision = ContentRouter().route(source)

    assert isinstance(decision.route, Unsupported)
    assert [step.label for step in decision.steps] == ["content_type", "reject"]


def test_on_step_callback_sees_every_transition() -> None:
    seen: List[str] = []

    ContentRouter().route(_pdf_source([(800, 600)]), on_step=lambda label, _state: seen.append(label))

    assert seen == ["content_type", "extract_images", "select_route"]


def test_state_round_trip() -> None:
    source = _pdf_source([(50, 50)])
    state = RoutingState(source=source, config=RouterConfig(max_images_per_request=3))

    restored = RoutingState.from_graph_state(state.to_graph_state())

    assert restored.source == source
    assert restored.config.max_images_per_request == 3
    assert restored.route is None
