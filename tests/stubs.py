"""Test doubles and fixture builders shared by the test modules."""

from __future__ import annotations

import io
from types import SimpleNamespace
from typing import Dict, List, Sequence, Tuple

from PIL import Image
from pypdf import PdfWriter
from src.extraction.request_builder import InferenceRequest

Size = Tuple[int, int]


def render_png(size: Size, color: str = "white") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def render_pdf(page_images: Sequence[Size]) -> bytes:
    """Return a PDF with one embedded RGB image per page, in the given order."""

    colors = ["white", "gray", "black", "red", "blue"]
    images = [
        Image.new("RGB", size, colors[index % len(colors)])
        for index, size in enumerate(page_images)
    ]
    buffer = io.BytesIO()
    images[0].save(buffer, format="PDF", save_all=True, append_images=images[1:])
    return buffer.getvalue()


class StubBlobStore:
    def __init__(self, objects: Dict[str, Tuple[bytes, str]]) -> None:
        self.objects = objects
        self.writes: List[Tuple[str, bytes, str]] = []

    def read(self, key: str) -> Tuple[bytes, str]:
        return self.objects[key]

    def write(self, key: str, data: bytes, content_type: str) -> None:
        self.writes.append((key, data, content_type))


class StubParameterStore:
    def __init__(self, prompt: str = "") -> None:
        self.prompt = prompt
        self.calls = 0

    def get_prompt(self) -> str:
        self.calls += 1
        return self.prompt


class StubRecordStore:
    def __init__(self) -> None:
        self.records: Dict[str, Dict[str, str]] = {}

    def put(self, key: str, attributes: Dict[str, str]) -> None:
        self.records[key] = dict(attributes)


class StubInferenceClient:
    def __init__(self, answer: str = "{}", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.requests: List[InferenceRequest] = []

    def invoke(self, request: InferenceRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.answer


class StubTextExtractor:
    def __init__(self, text: str = "flattened text") -> None:
        self.text = text
        self.calls: List[Tuple[str, str]] = []

    def extract(self, name: str, document_format, data: bytes) -> str:
        self.calls.append((name, document_format.value))
        return self.text


class StubDocumentConverter:
    """Stands in for docling's ``DocumentConverter`` with fixed markdown output."""

    def __init__(self, markdown: str = "", error: Exception | None = None) -> None:
        self.markdown = markdown
        self.error = error
        self.sources: List[str] = []

    def convert(self, source):
        self.sources.append(source.name)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(document=SimpleNamespace(export_to_markdown=self._export))

    def _export(self, **_: object) -> str:
        return self.markdown


def render_blank_pdf(pages: int = 1) -> bytes:
    """Return a valid PDF whose pages carry no images at all."""

    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def corrupt_first_image(pdf: bytes) -> bytes:
    """Blank out the header of the first embedded JPEG so it cannot be decoded."""

    start = pdf.index(b"\xff\xd8\xff")
    return pdf[:start] + bytes(16) + pdf[start + 16 :]
