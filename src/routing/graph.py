"""LangGraph orchestration for the content router."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from langgraph.graph import END, START, StateGraph

from src.extraction.models import ContentKind, SourceDocument
from src.extraction.pdf_images import PdfImageExtractor
from src.extraction.routes import RoutingDecision

from .nodes import (
    NodeDependencies,
    build_content_classifier,
    build_document_route_selector,
    build_image_extractor,
    build_image_route_selector,
    build_rejector,
)
from .state import RouterConfig, RoutingGraphState, RoutingState

logger = logging.getLogger(__name__)


def _default_extractor_factory(config: RouterConfig) -> PdfImageExtractor:
    return PdfImageExtractor(thresholds=config.thresholds, decode_workers=max(config.decode_workers, 1))


class ContentRouter:
    """Decides, once per source document, how it is presented to the model.

    ``unclassified -> {document, image, unsupported}``; documents then split
    into whole-document or multi-image inference depending on the scanned
    pages found inside the PDF.
    """

    def __init__(
        self,
        extractor_factory: Callable[[RouterConfig], PdfImageExtractor] = _default_extractor_factory,
    ) -> None:
        self._extractor_factory = extractor_factory

    def _build_graph(self, *, on_step: Optional[Callable[[str, RoutingState], None]] = None):
        deps = NodeDependencies(extractor_factory=self._extractor_factory, on_step=on_step)

        graph_builder = StateGraph(RoutingGraphState)
        graph_builder.add_node("classify_content", build_content_classifier(deps))
        graph_builder.add_node("extract_images", build_image_extractor(deps))
        graph_builder.add_node("document_route", build_document_route_selector(deps))
        graph_builder.add_node("image_route", build_image_route_selector(deps))
        graph_builder.add_node("reject", build_rejector(deps))
        graph_builder.add_edge(START, "classify_content")

        def _route(state: RoutingGraphState) -> str:
            kind = state.get("content_kind")
            if kind == ContentKind.DOCUMENT.value:
                return "extract_images"
            if kind == ContentKind.IMAGE.value:
                return "image_route"
            return "reject"

        graph_builder.add_conditional_edges(
            "classify_content",
            _route,
            {
                "extract_images": "extract_images",
                "image_route": "image_route",
                "reject": "reject",
            },
        )
        graph_builder.add_edge("extract_images", "document_route")
        graph_builder.add_edge("document_route", END)
        graph_builder.add_edge("image_route", END)
        graph_builder.add_edge("reject", END)
        return graph_builder.compile()

    def route(
        self,
        source: SourceDocument,
        config: Optional[RouterConfig] = None,
        on_step: Optional[Callable[[str, RoutingState], None]] = None,
    ) -> RoutingDecision:
        router_config = config or RouterConfig()
        initial_state = RoutingState(source=source, config=router_config)

        graph = self._build_graph(on_step=on_step)
        result_state = graph.invoke(initial_state.to_graph_state())
        decision = RoutingState.from_graph_state(result_state).to_decision()
        logger.info("Route for %s: %s", source.key, decision.route_kind)
        return decision
