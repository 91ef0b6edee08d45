"""Construction of inference requests for each processing route."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .content_types import DocumentFormat, ImageFormat
from .errors import UnsupportedContentType
from .routes import (
    MultiImageInference,
    ProcessingRoute,
    SingleImageInference,
    WholeDocumentInference,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_PROMPT = (
    "Extract the fields as JSON document, no other filler words, "
    "newline character are required in the output"
)
SYSTEM_PROMPT = (
    "Your response should be in JSON format.\n"
    "Do not include any explanations, only provide a RFC8259 compliant JSON response "
    "without deviation.\n"
    "Do not include markdown code blocks in your response.\n"
)
DEFAULT_DOCUMENT_NAME = "document"


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class DocumentBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["document"] = "document"
    name: str
    format: DocumentFormat
    data: bytes


class ImageBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    format: ImageFormat
    data: bytes


ContentBlock = Annotated[Union[TextBlock, DocumentBlock, ImageBlock], Field(discriminator="type")]


class GenerationConfig(BaseModel):
    """Deterministic decoding settings sent with every request."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(gt=0)
    temperature: float = 0.0
    top_p: float = 0.0


class InferenceRequest(BaseModel):
    """Ordered content blocks plus system instruction and decoding settings."""

    model_config = ConfigDict(frozen=True)

    blocks: List[ContentBlock]
    system_prompt: str
    generation: GenerationConfig

    @field_validator("blocks")
    @classmethod
    def validate_instruction_first(cls, value: List[ContentBlock]) -> List[ContentBlock]:
        if not value or not isinstance(value[0], TextBlock):
            raise ValueError("The first content block must be the text extraction instruction")
        return value


def resolve_prompt(
    parameter_prompt: Optional[str],
    environment_prompt: Optional[str],
    default_prompt: str = DEFAULT_USER_PROMPT,
) -> str:
    """Return the first non-empty prompt: parameter store, environment, built-in."""

    for candidate, source in (
        (parameter_prompt, "parameter store"),
        (environment_prompt, "environment"),
    ):
        if candidate and candidate.strip():
            logger.info("Using extraction prompt from the %s", source)
            return candidate
    logger.info("Using the default extraction prompt")
    return default_prompt


def sanitize_document_name(source_key: str) -> str:
    """Reduce an object key to a document name the inference service accepts."""

    stem = PurePosixPath(source_key).stem if source_key else ""
    cleaned = re.sub(r"[^a-zA-Z0-9\s\-()\[\]]", "", stem)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned or DEFAULT_DOCUMENT_NAME


class InferenceRequestBuilder:
    """Builds ``[text(prompt), <route content>]`` requests."""

    def __init__(self, max_tokens: int, system_prompt: str = SYSTEM_PROMPT) -> None:
        self._generation = GenerationConfig(max_tokens=max_tokens)
        self._system_prompt = system_prompt

    def build(self, route: ProcessingRoute, prompt: str, *, source_key: str = "") -> InferenceRequest:
        blocks: List[ContentBlock] = [TextBlock(text=prompt)]

        if isinstance(route, WholeDocumentInference):
            blocks.append(
                DocumentBlock(
                    name=sanitize_document_name(source_key),
                    format=route.document_format,
                    data=route.document,
                )
            )
        elif isinstance(route, MultiImageInference):
            blocks.extend(ImageBlock(format=ImageFormat.JPEG, data=image.data) for image in route.images)
        elif isinstance(route, SingleImageInference):
            blocks.append(ImageBlock(format=route.image_format, data=route.image))
        else:
            raise UnsupportedContentType(f"No inference request can be built for route {route.kind!r}")

        logger.debug("Built %s request with %s content block(s)", route.kind, len(blocks))
        return InferenceRequest(
            blocks=blocks,
            system_prompt=self._system_prompt,
            generation=self._generation,
        )


__all__ = [
    "ContentBlock",
    "DEFAULT_USER_PROMPT",
    "DocumentBlock",
    "GenerationConfig",
    "ImageBlock",
    "InferenceRequest",
    "InferenceRequestBuilder",
    "SYSTEM_PROMPT",
    "TextBlock",
    "resolve_prompt",
    "sanitize_document_name",
]
