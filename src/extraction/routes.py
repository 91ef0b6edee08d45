"""Processing routes chosen for a source document."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .content_types import DocumentFormat, ImageFormat
from .models import ExtractedImage, ImageClassification


class WholeDocumentInference(BaseModel):
    """Send the original document bytes as a single document block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["whole_document"] = "whole_document"
    document: bytes
    document_format: DocumentFormat = DocumentFormat.PDF


class MultiImageInference(BaseModel):
    """Send the scanned-page images extracted from a PDF."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["multi_image"] = "multi_image"
    images: List[ExtractedImage]


class SingleImageInference(BaseModel):
    """Send a raster upload as one image block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single_image"] = "single_image"
    image: bytes
    image_format: ImageFormat = ImageFormat.JPEG


class Unsupported(BaseModel):
    """Terminal route; nothing is sent to the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unsupported"] = "unsupported"


ProcessingRoute = Annotated[
    Union[WholeDocumentInference, MultiImageInference, SingleImageInference, Unsupported],
    Field(discriminator="kind"),
]


class RoutingStep(BaseModel):
    """One transition of the content router."""

    label: str
    detail: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class RoutingDecision(BaseModel):
    """The route for one source document plus the facts it was based on."""

    model_config = ConfigDict(frozen=True)

    source_key: str
    route: ProcessingRoute
    is_pdf: bool = False
    extracted_images: List[ExtractedImage] = Field(default_factory=list)
    steps: List[RoutingStep] = Field(default_factory=list)

    @property
    def route_kind(self) -> str:
        return self.route.kind

    @property
    def logo_count(self) -> int:
        return sum(1 for image in self.extracted_images if image.classification is ImageClassification.LOGO)

    @property
    def scanned_count(self) -> int:
        return sum(
            1
            for image in self.extracted_images
            if image.classification is ImageClassification.SCANNED_DOCUMENT
        )

    @property
    def used_extracted_images(self) -> bool:
        return isinstance(self.route, MultiImageInference)


__all__ = [
    "MultiImageInference",
    "ProcessingRoute",
    "RoutingDecision",
    "RoutingStep",
    "SingleImageInference",
    "Unsupported",
    "WholeDocumentInference",
]
