"""Interfaces of the collaborators the pipeline talks to."""

from __future__ import annotations

from typing import Dict, Protocol, Tuple

from .request_builder import InferenceRequest


class BlobStore(Protocol):
    def read(self, key: str) -> Tuple[bytes, str]:
        """Return the object bytes and its declared media type."""

    def write(self, key: str, data: bytes, content_type: str) -> None:
        ...


class ParameterStore(Protocol):
    def get_prompt(self) -> str:
        """Return the stored extraction prompt, or an empty string."""


class RecordStore(Protocol):
    def put(self, key: str, attributes: Dict[str, str]) -> None:
        """Create or overwrite the record stored under ``key``."""


class InferenceClient(Protocol):
    def invoke(self, request: InferenceRequest) -> str:
        """Send one request and return the model's text answer."""


__all__ = ["BlobStore", "InferenceClient", "ParameterStore", "RecordStore"]
