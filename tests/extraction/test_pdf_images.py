from __future__ import annotations

from src.extraction.models import ImageClassification
from src.extraction.pdf_images import PdfImageExtractor
from tests.stubs import corrupt_first_image, render_blank_pdf, render_pdf


def test_extracts_images_in_page_order() -> None:
    pdf = render_pdf([(800, 600), (50, 50), (600, 800)])

    images = PdfImageExtractor().extract(pdf)

    assert [image.position for image in images] == [(0, 0), (1, 0), (2, 0)]
    assert [(image.width, image.height) for image in images] == [(800, 600), (50, 50), (600, 800)]
    assert [image.classification for image in images] == [
        ImageClassification.SCANNED_DOCUMENT,
        ImageClassification.LOGO,
        ImageClassification.SCANNED_DOCUMENT,
    ]


def test_images_are_reencoded_as_jpeg() -> None:
    images = PdfImageExtractor().extract(render_pdf([(120, 90)]))

    assert len(images) == 1
    assert images[0].data.startswith(b"\xff\xd8\xff")


def test_parallel_decoding_keeps_order() -> None:
    sizes = [(700 + index * 10, 500) for index in range(5)]
    pdf = render_pdf(sizes)

    sequential = PdfImageExtractor().extract(pdf)
    parallel = PdfImageExtractor(decode_workers=4).extract(pdf)

    assert [image.position for image in parallel] == [image.position for image in sequential]
    assert [image.width for image in parallel] == [size[0] for size in sizes]


def test_corrupt_pdf_yields_no_images() -> None:
    assert PdfImageExtractor().extract(b"%PDF-1.7\nthis is not really a pdf") == []
    assert PdfImageExtractor().extract(b"") == []


def test_undecodable_image_is_skipped_but_siblings_survive() -> None:
    pdf = corrupt_first_image(render_pdf([(800, 600), (50, 50), (600, 800)]))

    images = PdfImageExtractor().extract(pdf)

    assert [image.position for image in images] == [(1, 0), (2, 0)]
    assert [image.classification for image in images] == [
        ImageClassification.LOGO,
        ImageClassification.SCANNED_DOCUMENT,
    ]


def test_pdf_without_images_yields_nothing() -> None:
    assert PdfImageExtractor().extract(render_blank_pdf(2)) == []
