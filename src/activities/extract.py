"""Activity that runs the extraction pipeline for one source object."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from pydantic import ValidationError
from temporalio import activity
from temporalio.exceptions import ApplicationError

from ..config import ExtractionConfig
from ..extraction.errors import ConfigurationMissing, ExtractionError
from ..extraction.pipeline import UNSUPPORTED_CONTENT_TYPE, ExtractionPipeline, source_key_from_event

logger = logging.getLogger(__name__)


def _to_application_error(exc: ExtractionError) -> ApplicationError:
    return ApplicationError(
        str(exc),
        type=type(exc).__name__,
        non_retryable=not exc.retryable,
    )


def _build_pipeline(config: Dict[str, Any]) -> ExtractionPipeline:
    try:
        extraction_config = ExtractionConfig(**config)
    except ValidationError as exc:
        raise ConfigurationMissing(f"Invalid extraction configuration: {exc}") from exc
    return ExtractionPipeline.from_config(extraction_config)


@activity.defn
async def extract_document_activity(
    event: Dict[str, Any],
    config: Dict[str, Any],
) -> Dict[str, Any]:
    """Route, infer, map and persist the object named by ``event``."""

    try:
        source_key = source_key_from_event(event)
        pipeline = _build_pipeline(config)
        response = await asyncio.to_thread(pipeline.run, source_key)
    except ExtractionError as exc:
        logger.warning(
            "Extraction failed (attempt %s): %s: %s",
            activity.info().attempt,
            type(exc).__name__,
            exc,
        )
        raise _to_application_error(exc) from exc

    return {
        "source_key": source_key,
        "status": "unsupported" if response == UNSUPPORTED_CONTENT_TYPE else "ok",
        "response": response,
    }


__all__ = ["extract_document_activity"]
