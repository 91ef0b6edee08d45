"""Command-line interface for the IDP0 extraction service."""

from __future__ import annotations

import argparse
import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from temporalio.client import Client, WorkflowFailureError
from temporalio.exceptions import ApplicationError

from .config import ExtractionConfig
from .extraction.classifier import classify_image
from .extraction.errors import ExtractionError
from .extraction.pipeline import UNSUPPORTED_CONTENT_TYPE, ExtractionPipeline, describe_source
from .utils.cli import (
    build_main_cli_parser,
    build_response_view,
    get_console,
    temporal_ui_url,
    workflow_history_url,
)
from .workflows import ExtractionWorkflow, ExtractionWorkflowInput

logger = logging.getLogger(__name__)


def _config_from_args(args: argparse.Namespace, *, require_token_budget: bool = True) -> ExtractionConfig:
    overrides = {
        "source_dir": args.source_dir,
        "output_dir": args.output_dir,
        "records_dir": args.records_dir,
        "max_response_tokens": args.max_response_tokens,
        "ollama_model": args.ollama_model,
        "ollama_base_url": args.ollama_base_url,
    }
    if args.command == "extract":
        overrides.update(
            address=args.address,
            namespace=args.namespace,
            task_queue=args.task_queue,
        )
    return ExtractionConfig.from_env(require_token_budget=require_token_budget, **overrides)


async def _extract_via_temporal(cfg: ExtractionConfig, key: str, prefix: str) -> Dict[str, Any]:
    """Start ExtractionWorkflow for ``key`` and wait for its result."""

    client = await Client.connect(cfg.address, namespace=cfg.namespace)
    wf_id = f"{prefix}-{uuid.uuid4().hex}"
    handle = await client.start_workflow(
        ExtractionWorkflow.run,
        ExtractionWorkflowInput(event={"Key": key}, config=cfg.to_activity_payload()),
        id=wf_id,
        task_queue=cfg.task_queue,
    )

    ui_url = temporal_ui_url(cfg.address, cfg.namespace)
    if ui_url:
        get_console().print(f"[dim]Workflow:[/] {workflow_history_url(ui_url, wf_id, handle.result_run_id)}")
    return await handle.result()


def _failure_cause(exc: WorkflowFailureError) -> BaseException:
    """Return the innermost application failure behind a failed workflow."""

    cause: Optional[BaseException] = exc.cause
    while cause is not None:
        if isinstance(cause, ApplicationError):
            return cause
        cause = getattr(cause, "cause", None) or cause.__cause__
    return exc.cause or exc


def _error_result(command: str, message: str, error_type: str) -> Dict[str, Any]:
    return {
        "command": command,
        "status": "error",
        "message": message,
        "error_type": error_type,
    }


def _extract_in_process(cfg: ExtractionConfig, key: str) -> Dict[str, Any]:
    pipeline = ExtractionPipeline.from_config(cfg)
    response = pipeline.run(key)
    return {
        "source_key": key,
        "status": "unsupported" if response == UNSUPPORTED_CONTENT_TYPE else "ok",
        "response": response,
    }


def run_command(args: argparse.Namespace) -> Dict[str, Any]:
    """Execute one parsed command and return a result payload for rendering."""

    try:
        if args.command == "classify":
            label = classify_image(args.width, args.height)
            return {
                "command": "classify",
                "status": "ok",
                "result": {"width": args.width, "height": args.height, "classification": label.value},
            }

        if args.command == "route":
            cfg = _config_from_args(args, require_token_budget=False)
            return {"command": "route", "status": "ok", "result": describe_source(cfg, args.key)}

        cfg = _config_from_args(args)
        if args.temporal:
            try:
                result = asyncio.run(_extract_via_temporal(cfg, args.key, args.workflow_id_prefix))
            except WorkflowFailureError as exc:
                cause = _failure_cause(exc)
                error_type = cause.type if isinstance(cause, ApplicationError) and cause.type else type(cause).__name__
                logger.debug("Workflow for %s failed", args.key, exc_info=True)
                return _error_result("extract", str(cause), error_type)
            except RuntimeError as exc:
                # Client.connect reports an unreachable server as RuntimeError.
                logger.debug("Temporal call failed", exc_info=True)
                return _error_result("extract", f"Temporal unavailable at {cfg.address}: {exc}", type(exc).__name__)
        else:
            result = _extract_in_process(cfg, args.key)
        return {"command": "extract", "status": "ok", "result": result}
    except (ExtractionError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        return _error_result(args.command, str(exc), type(exc).__name__)


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    parser = build_main_cli_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    result = run_command(args)
    view = build_response_view(result)
    console = get_console()
    console.print(view.body)
    return 1 if view.status == "error" else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
