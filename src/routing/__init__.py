"""LangGraph-backed content router."""

from .graph import ContentRouter
from .state import (
    DEFAULT_MAX_IMAGES_PER_REQUEST,
    RouterConfig,
    RoutingGraphState,
    RoutingState,
)

__all__ = [
    "ContentRouter",
    "DEFAULT_MAX_IMAGES_PER_REQUEST",
    "RouterConfig",
    "RoutingGraphState",
    "RoutingState",
]
