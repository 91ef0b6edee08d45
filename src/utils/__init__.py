"""Utility helpers for the IDP0 CLI."""

from __future__ import annotations

from .cli import (
    build_main_cli_parser,
    build_response_view,
    temporal_ui_url,
    workflow_history_url,
)

__all__ = [
    "build_main_cli_parser",
    "build_response_view",
    "temporal_ui_url",
    "workflow_history_url",
]
