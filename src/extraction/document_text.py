"""Document-to-text conversion using Docling."""

from __future__ import annotations

import io
import logging
from typing import Optional

from docling.datamodel.base_models import DocumentStream
from docling.document_converter import DocumentConverter

from .content_types import DocumentFormat
from .errors import DocumentConversionError

logger = logging.getLogger(__name__)

# Legacy binary Office formats have no Docling backend.
_UNCONVERTIBLE_FORMATS = {DocumentFormat.DOC, DocumentFormat.XLS}


class DocumentTextExtractor:
    """Flattens document bytes to markdown text the chat model can read.

    PDFs go through Docling's OCR-enabled pipeline, so image-only pages
    still yield text. An empty result is an error: the model would
    otherwise be asked to extract fields from nothing.
    """

    def __init__(self, converter: Optional[DocumentConverter] = None) -> None:
        self._converter = converter or DocumentConverter()

    def extract(self, name: str, document_format: DocumentFormat, data: bytes) -> str:
        if document_format in _UNCONVERTIBLE_FORMATS:
            raise DocumentConversionError(
                f"Document {name!r} uses the legacy {document_format.value!r} format, which cannot be converted"
            )

        if document_format is DocumentFormat.TXT:
            text = data.decode("utf-8", errors="replace")
        else:
            text = self._convert(name, document_format, data)

        if not text.strip():
            raise DocumentConversionError(f"Document {name!r} produced no text")
        return text

    def _convert(self, name: str, document_format: DocumentFormat, data: bytes) -> str:
        source = DocumentStream(name=f"{name}.{document_format.value}", stream=io.BytesIO(data))
        try:
            result = self._converter.convert(source)
        except Exception as exc:  # Docling backends raise their own parser errors
            raise DocumentConversionError(f"Document {name!r} could not be converted: {exc}") from exc

        # Pictures without OCR text would otherwise count as content.
        markdown = result.document.export_to_markdown(image_placeholder="")
        logger.info(
            "Converted %s (%s) to %s characters of markdown",
            name,
            document_format.value,
            len(markdown),
        )
        return markdown


__all__ = ["DocumentTextExtractor"]
