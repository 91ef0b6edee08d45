"""Temporal workflow that extracts fields from one source object."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from ..extraction.errors import NON_RETRYABLE_ERROR_TYPES

EXTRACT_DOCUMENT_ACTIVITY = "extract_document_activity"
DEFAULT_INVOCATION_TIMEOUT_SECONDS = 300.0


@dataclass
class ExtractionWorkflowInput:
    """Input payload for the extraction workflow."""

    event: Dict[str, Any]
    config: Dict[str, Any] = field(default_factory=dict)
    maximum_attempts: int = 3
    initial_retry_seconds: float = 2.0
    maximum_retry_seconds: float = 60.0

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            initial_interval=workflow.timedelta(seconds=self.initial_retry_seconds),
            backoff_coefficient=2.0,
            maximum_interval=workflow.timedelta(seconds=self.maximum_retry_seconds),
            maximum_attempts=self.maximum_attempts,
            non_retryable_error_types=list(NON_RETRYABLE_ERROR_TYPES),
        )


@workflow.defn
class ExtractionWorkflow:
    """Workflow that runs the extraction activity with bounded retries."""

    @workflow.run
    async def run(self, payload: ExtractionWorkflowInput) -> Dict[str, Any]:
        timeout_seconds = float(
            payload.config.get("invocation_timeout_seconds") or DEFAULT_INVOCATION_TIMEOUT_SECONDS
        )
        return await workflow.execute_activity(
            EXTRACT_DOCUMENT_ACTIVITY,
            args=(payload.event, payload.config),
            start_to_close_timeout=workflow.timedelta(seconds=timeout_seconds),
            retry_policy=payload.retry_policy(),
        )


__all__ = ["ExtractionWorkflow", "ExtractionWorkflowInput"]
