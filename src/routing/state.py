"""Pydantic models and helpers for the LangGraph content router state."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel, Field

from src.extraction.classifier import DEFAULT_THRESHOLDS, ClassifierThresholds
from src.extraction.models import ContentKind, ExtractedImage, ImageClassification, SourceDocument
from src.extraction.routes import ProcessingRoute, RoutingDecision, RoutingStep

DEFAULT_MAX_IMAGES_PER_REQUEST = 20


class RouterConfig(BaseModel):
    """Configuration for the content router graph."""

    max_images_per_request: int = DEFAULT_MAX_IMAGES_PER_REQUEST
    decode_workers: int = 1
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS


class RoutingState(BaseModel):
    """State shared across router nodes."""

    source: SourceDocument
    content_kind: Optional[ContentKind] = None
    is_pdf: bool = False
    extracted_images: List[ExtractedImage] = Field(default_factory=list)
    route: Optional[ProcessingRoute] = None
    steps: List[RoutingStep] = Field(default_factory=list)
    config: RouterConfig = Field(default_factory=RouterConfig)

    @property
    def documents_only(self) -> List[ExtractedImage]:
        return [
            image
            for image in self.extracted_images
            if image.classification is ImageClassification.SCANNED_DOCUMENT
        ]

    def to_graph_state(self) -> "RoutingGraphState":
        """Return a LangGraph compatible dictionary."""

        return {
            "source": self.source.model_dump(),
            "content_kind": self.content_kind.value if self.content_kind else None,
            "is_pdf": self.is_pdf,
            "extracted_images": [image.model_dump() for image in self.extracted_images],
            "route": self.route.model_dump() if self.route is not None else None,
            "steps": [step.model_dump() for step in self.steps],
            "config": self.config.model_dump(),
        }

    @classmethod
    def from_graph_state(cls, state: "RoutingGraphState") -> "RoutingState":
        """Instantiate from a LangGraph state payload."""

        return cls.model_validate(
            {
                "source": state.get("source"),
                "content_kind": state.get("content_kind"),
                "is_pdf": bool(state.get("is_pdf", False)),
                "extracted_images": list(state.get("extracted_images", [])),
                "route": state.get("route"),
                "steps": list(state.get("steps", [])),
                "config": state.get("config", {}),
            }
        )

    def to_decision(self) -> RoutingDecision:
        if self.route is None:
            raise RuntimeError(f"Router finished without a route for {self.source.key!r}")
        return RoutingDecision(
            source_key=self.source.key,
            route=self.route,
            is_pdf=self.is_pdf,
            extracted_images=list(self.extracted_images),
            steps=list(self.steps),
        )


class RoutingGraphState(TypedDict, total=False):
    """TypedDict representation consumed by LangGraph."""

    source: Dict[str, Any]
    content_kind: Optional[str]
    is_pdf: bool
    extracted_images: List[Dict[str, Any]]
    route: Optional[Dict[str, Any]]
    steps: List[Dict[str, Any]]
    config: Dict[str, Any]


__all__ = [
    "DEFAULT_MAX_IMAGES_PER_REQUEST",
    "RouterConfig",
    "RoutingGraphState",
    "RoutingState",
]
