"""CLI helper utilities shared across the IDP0 commands."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from rich import box
from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RECORDS_DIR,
    DEFAULT_SOURCE_DIR,
    DEFAULT_TEMPORAL_ADDRESS,
    DEFAULT_TEMPORAL_NAMESPACE,
    DEFAULT_TEMPORAL_TASK_QUEUE,
)

_CONSOLE: Optional[Console] = None


@dataclass(frozen=True)
class CLITheme:
    """Palette for the Rich result panels."""

    response_fg: str = "#f9fafb"
    success: str = "#22c55e"
    warning: str = "#facc15"
    error: str = "#f87171"
    accent: str = "#38bdf8"
    highlight: str = "#a855f7"


DEFAULT_THEME = CLITheme()


@dataclass
class ResponseView:
    """Renderable summary of a command result."""

    status: str
    command: str
    title: str
    body: RenderableType
    metadata: Dict[str, Any] = field(default_factory=dict)


def get_console() -> Console:
    """Return a singleton Rich Console configured for the CLI."""

    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(highlight=False)
    return _CONSOLE


def _render_text(message: str, style: str) -> Text:
    return Text(message, style=style)


def _json_renderable(data: Any) -> RenderableType:
    text = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)
    return Markdown(f"```json\n{text}\n```")


def _response_renderable(response: str, theme: CLITheme) -> RenderableType:
    try:
        parsed = json.loads(response)
    except ValueError:
        return _render_text(response, theme.response_fg)
    return _json_renderable(parsed)


def _route_label_style(label: str, theme: CLITheme) -> str:
    normalized = label.lower()
    if normalized == "reject":
        return theme.error
    if normalized == "select_route":
        return theme.success
    if normalized == "extract_images":
        return theme.highlight
    return theme.accent


def _build_steps_table(steps: Iterable[Dict[str, Any]], theme: CLITheme) -> Optional[Table]:
    rows: List[Dict[str, Any]] = [step for step in steps if isinstance(step, dict)]
    if not rows:
        return None

    table = Table(box=box.SIMPLE, show_header=True, header_style=f"bold {theme.accent}")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Detail")
    for index, step in enumerate(rows, start=1):
        label = str(step.get("label", "") or "step")
        table.add_row(
            str(index),
            Text(label.replace("_", " ").title(), style=f"bold {_route_label_style(label, theme)}"),
            str(step.get("detail", "")),
        )
    return table


def _build_route_view(payload: Dict[str, Any], theme: CLITheme) -> ResponseView:
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style=f"bold {theme.accent}")
    summary.add_column()
    for label, key in (
        ("Source", "source_key"),
        ("Route", "route"),
        ("PDF", "is_pdf"),
        ("Images", "image_count"),
        ("Scanned", "scanned_count"),
        ("Logos", "logo_count"),
    ):
        summary.add_row(label, str(payload.get(key, "")))

    renderables: List[RenderableType] = [summary]
    steps_table = _build_steps_table(payload.get("steps") or [], theme)
    if steps_table is not None:
        renderables.append(steps_table)

    status = "warn" if payload.get("route") == "unsupported" else "success"
    return ResponseView(
        status=status,
        command="route",
        title="Routing Decision",
        body=Panel(Group(*renderables), title="Route", border_style=theme.accent),
        metadata={key: value for key, value in payload.items() if key != "steps"},
    )


def build_response_view(result: Dict[str, Any], theme: CLITheme = DEFAULT_THEME) -> ResponseView:
    """Create a ResponseView for a command result payload."""

    status = (result.get("status") or "ok").lower()
    command = (result.get("command") or "result").lower()
    payload = result.get("result") or {}

    if status == "error":
        message = result.get("message") or "Command failed."
        error_type = result.get("error_type")
        title = f"Error: {error_type}" if error_type else "Error"
        return ResponseView(
            status="error",
            command=command,
            title=title,
            body=Panel(_render_text(message, f"bold {theme.error}"), title=title, border_style=theme.error),
            metadata={"message": message, "error_type": error_type},
        )

    if command == "route":
        return _build_route_view(payload, theme)

    if command == "extract":
        if payload.get("status") == "unsupported":
            message = str(payload.get("response") or "Unsupported Content Type")
            return ResponseView(
                status="warn",
                command=command,
                title="Unsupported",
                body=Panel(_render_text(message, f"bold {theme.warning}"), border_style=theme.warning),
                metadata={"message": message},
            )
        response = str(payload.get("response") or "")
        return ResponseView(
            status="success",
            command=command,
            title="Extraction Result",
            body=Panel(
                _response_renderable(response, theme),
                title=f"[bold]{payload.get('source_key', '')}[/]",
                border_style=theme.success,
            ),
            metadata={key: value for key, value in payload.items() if key != "response"},
        )

    if command == "classify":
        label = str(payload.get("classification", ""))
        return ResponseView(
            status="success",
            command=command,
            title="Classification",
            body=_render_text(
                f"{payload.get('width')}x{payload.get('height')} -> {label}",
                f"bold {theme.highlight}",
            ),
            metadata=payload,
        )

    body: RenderableType = _json_renderable(payload) if payload else _render_text("No data returned.", theme.response_fg)
    return ResponseView(
        status="success",
        command=command,
        title=command.title() or "Result",
        body=body,
        metadata=payload,
    )


def build_main_cli_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the IDP0 command-line interface."""

    parser = argparse.ArgumentParser(description="IDP0 document field extraction")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--source-dir", default=None, help=f"Source object directory (default {DEFAULT_SOURCE_DIR})")
    parser.add_argument("--output-dir", default=None, help=f"Response output directory (default {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--records-dir", default=None, help=f"Attribute record directory (default {DEFAULT_RECORDS_DIR})")
    parser.add_argument("--max-response-tokens", type=int, default=None, help="Maximum output tokens per request")
    parser.add_argument("--ollama-model", default=None, help="Ollama vision model identifier")
    parser.add_argument("--ollama-base-url", default=None, help="Base URL for the Ollama server")

    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract fields from a stored object")
    extract.add_argument("key", help="Object key relative to the source directory")
    extract.add_argument(
        "--temporal",
        action="store_true",
        help="Run through the Temporal ExtractionWorkflow instead of in-process",
    )
    extract.add_argument("--address", default=DEFAULT_TEMPORAL_ADDRESS)
    extract.add_argument("--namespace", default=DEFAULT_TEMPORAL_NAMESPACE)
    extract.add_argument("--task-queue", default=DEFAULT_TEMPORAL_TASK_QUEUE)
    extract.add_argument("--workflow-id-prefix", default="extract")

    route = subparsers.add_parser("route", help="Show the routing decision without calling the model")
    route.add_argument("key", help="Object key relative to the source directory")

    classify = subparsers.add_parser("classify", help="Classify an image by its dimensions")
    classify.add_argument("width", type=int)
    classify.add_argument("height", type=int)
    return parser


def temporal_ui_url(address: str, namespace: str) -> Optional[str]:
    """Return the Temporal UI base URL for a given address/namespace."""

    if not address:
        return None

    if "://" in address:
        host = urlparse(address).hostname or ""
    else:
        host = address.split(":")[0]

    if not host:
        return None

    return f"http://{host}:8233/namespaces/{namespace}/workflows"


def workflow_history_url(base_url: str, workflow_id: str, run_id: Optional[str] = None) -> str:
    """Compose a Temporal history view URL for the workflow/run pair."""

    url = f"{base_url}/{workflow_id}"
    if run_id:
        url += f"/{run_id}/history"
    return url


__all__ = [
    "CLITheme",
    "DEFAULT_THEME",
    "ResponseView",
    "build_main_cli_parser",
    "build_response_view",
    "get_console",
    "temporal_ui_url",
    "workflow_history_url",
]
