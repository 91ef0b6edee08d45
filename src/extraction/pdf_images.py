"""Embedded image extraction for PDF documents."""

from __future__ import annotations

import io
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from PIL import Image
from pypdf import PdfReader

from .classifier import DEFAULT_THRESHOLDS, ClassifierThresholds, classify_image
from .errors import ImageDecodeError, PdfParseError
from .models import ExtractedImage

logger = logging.getLogger(__name__)

CANONICAL_IMAGE_FORMAT = "JPEG"
JPEG_QUALITY = 90

_DecodedImage = Tuple[int, int, Image.Image]


def _open_reader(pdf_bytes: bytes) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        if reader.is_encrypted:
            reader.decrypt("")
        # Touch the page tree so structural damage surfaces here.
        len(reader.pages)
    except Exception as exc:
        raise PdfParseError(f"Unable to parse PDF: {exc}") from exc
    return reader


def _page_image_count(page: Any, page_index: int) -> int:
    try:
        return len(page.images)
    except Exception as exc:
        logger.debug("Could not list images on page %s: %s", page_index, exc)
        return 0


def _decode_image(page: Any, page_index: int, object_index: int) -> Image.Image:
    try:
        image = page.images[object_index].image
    except Exception as exc:
        raise ImageDecodeError(
            f"Image {object_index} on page {page_index} could not be decoded: {exc}"
        ) from exc
    if image is None or image.width <= 0 or image.height <= 0:
        raise ImageDecodeError(f"Image {object_index} on page {page_index} is empty")
    return image


def _encode_jpeg(image: Image.Image) -> bytes:
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format=CANONICAL_IMAGE_FORMAT, quality=JPEG_QUALITY)
    return buffer.getvalue()


@dataclass
class PdfImageExtractor:
    """Walks a PDF's pages and returns every decodable embedded image.

    Images are reported in (page, object-table position) order whatever the
    number of ``decode_workers`` used for re-encoding.
    """

    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
    decode_workers: int = 1

    def extract(self, pdf_bytes: bytes) -> List[ExtractedImage]:
        """Return classified images, or an empty list when the PDF is unreadable."""

        try:
            reader = _open_reader(pdf_bytes)
        except PdfParseError as exc:
            logger.warning("%s; treating as a PDF without images", exc)
            return []

        decoded = self._decode_all(reader)
        if not decoded:
            return []

        if self.decode_workers > 1 and len(decoded) > 1:
            with ThreadPoolExecutor(max_workers=self.decode_workers) as pool:
                converted = list(pool.map(self._convert, decoded))
        else:
            converted = [self._convert(item) for item in decoded]

        images = [image for image in converted if image is not None]
        images.sort(key=lambda item: item.position)
        logger.info("Extracted %s image(s) from PDF", len(images))
        return images

    def _decode_all(self, reader: PdfReader) -> List[_DecodedImage]:
        decoded: List[_DecodedImage] = []
        for page_index, page in enumerate(reader.pages):
            for object_index in range(_page_image_count(page, page_index)):
                try:
                    image = _decode_image(page, page_index, object_index)
                except ImageDecodeError as exc:
                    logger.debug("Skipping image: %s", exc)
                    continue
                decoded.append((page_index, object_index, image))
        return decoded

    def _convert(self, item: _DecodedImage) -> Optional[ExtractedImage]:
        page_index, object_index, image = item
        try:
            data = _encode_jpeg(image)
        except (OSError, ValueError) as exc:
            logger.debug(
                "Skipping image %s on page %s; re-encoding failed: %s",
                object_index,
                page_index,
                exc,
            )
            return None

        return ExtractedImage(
            data=data,
            width=image.width,
            height=image.height,
            page_index=page_index,
            object_index=object_index,
            classification=classify_image(image.width, image.height, self.thresholds),
        )


__all__ = ["CANONICAL_IMAGE_FORMAT", "PdfImageExtractor"]
