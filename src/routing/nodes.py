"""LangGraph node implementations for the content router."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from src.extraction.content_types import (
    detect_document_format,
    detect_image_format,
    is_pdf,
    resolve_content_type,
)
from src.extraction.models import ContentKind
from src.extraction.pdf_images import PdfImageExtractor
from src.extraction.routes import (
    MultiImageInference,
    RoutingStep,
    SingleImageInference,
    Unsupported,
    WholeDocumentInference,
)

from .state import RouterConfig, RoutingGraphState, RoutingState

logger = logging.getLogger(__name__)


@dataclass
class NodeDependencies:
    """Factories shared across nodes."""

    extractor_factory: Callable[[RouterConfig], PdfImageExtractor]
    on_step: Optional[Callable[[str, RoutingState], None]] = None


def _notify_step(deps: NodeDependencies, label: str, router_state: RoutingState) -> None:
    if deps.on_step is not None:
        deps.on_step(label, router_state)


def build_content_classifier(deps: NodeDependencies) -> Callable[[RoutingGraphState], RoutingGraphState]:
    def _node(state: RoutingGraphState) -> RoutingGraphState:
        router_state = RoutingState.from_graph_state(state)
        media_type = router_state.source.media_type
        kind = resolve_content_type(media_type)

        router_state.content_kind = kind
        router_state.is_pdf = kind is ContentKind.DOCUMENT and is_pdf(media_type)
        router_state.steps.append(
            RoutingStep(
                label="content_type",
                detail=f"Declared type {media_type!r} resolved to {kind.value}.",
                metadata={"media_type": media_type, "content_kind": kind.value, "is_pdf": router_state.is_pdf},
            )
        )
        logger.info("Content type for %s: %s (%s)", router_state.source.key, kind.value, media_type)
        _notify_step(deps, "content_type", router_state)
        return router_state.to_graph_state()

    return _node


def build_image_extractor(deps: NodeDependencies) -> Callable[[RoutingGraphState], RoutingGraphState]:
    def _node(state: RoutingGraphState) -> RoutingGraphState:
        router_state = RoutingState.from_graph_state(state)
        if not router_state.is_pdf:
            router_state.steps.append(
                RoutingStep(
                    label="extract_images",
                    detail="Document is not a PDF; image extraction skipped.",
                    metadata={},
                )
            )
            _notify_step(deps, "extract_images", router_state)
            return router_state.to_graph_state()

        extractor = deps.extractor_factory(router_state.config)
        images = extractor.extract(router_state.source.data)
        router_state.extracted_images = images
        scanned = len(router_state.documents_only)
        router_state.steps.append(
            RoutingStep(
                label="extract_images",
                detail=f"Found {len(images)} embedded image(s), {scanned} classified as scanned documents.",
                metadata={
                    "image_count": len(images),
                    "scanned_count": scanned,
                    "logo_count": len(images) - scanned,
                },
            )
        )
        _notify_step(deps, "extract_images", router_state)
        return router_state.to_graph_state()

    return _node


def build_document_route_selector(deps: NodeDependencies) -> Callable[[RoutingGraphState], RoutingGraphState]:
    def _node(state: RoutingGraphState) -> RoutingGraphState:
        router_state = RoutingState.from_graph_state(state)
        documents_only = router_state.documents_only
        limit = router_state.config.max_images_per_request

        if documents_only and len(documents_only) <= limit:
            router_state.route = MultiImageInference(images=documents_only)
            detail = f"Sending {len(documents_only)} scanned page image(s)."
        else:
            router_state.route = WholeDocumentInference(
                document=router_state.source.data,
                document_format=detect_document_format(router_state.source.media_type),
            )
            if documents_only:
                detail = (
                    f"{len(documents_only)} scanned image(s) exceed the limit of {limit}; "
                    "sending the whole document instead."
                )
            else:
                detail = "No scanned page images; sending the whole document."

        router_state.steps.append(
            RoutingStep(
                label="select_route",
                detail=detail,
                metadata={"route": router_state.route.kind, "max_images_per_request": limit},
            )
        )
        _notify_step(deps, "select_route", router_state)
        return router_state.to_graph_state()

    return _node


def build_image_route_selector(deps: NodeDependencies) -> Callable[[RoutingGraphState], RoutingGraphState]:
    def _node(state: RoutingGraphState) -> RoutingGraphState:
        router_state = RoutingState.from_graph_state(state)
        image_format = detect_image_format(router_state.source.media_type)
        router_state.route = SingleImageInference(image=router_state.source.data, image_format=image_format)
        router_state.steps.append(
            RoutingStep(
                label="select_route",
                detail=f"Sending the upload as a single {image_format.value} image.",
                metadata={"route": router_state.route.kind, "image_format": image_format.value},
            )
        )
        _notify_step(deps, "select_route", router_state)
        return router_state.to_graph_state()

    return _node


def build_rejector(deps: NodeDependencies) -> Callable[[RoutingGraphState], RoutingGraphState]:
    def _node(state: RoutingGraphState) -> RoutingGraphState:
        router_state = RoutingState.from_graph_state(state)
        router_state.route = Unsupported()
        router_state.steps.append(
            RoutingStep(
                label="reject",
                detail=f"Unsupported content type {router_state.source.media_type!r}.",
                metadata={"route": router_state.route.kind},
            )
        )
        _notify_step(deps, "reject", router_state)
        return router_state.to_graph_state()

    return _node


__all__ = [
    "NodeDependencies",
    "build_content_classifier",
    "build_document_route_selector",
    "build_image_extractor",
    "build_image_route_selector",
    "build_rejector",
]
