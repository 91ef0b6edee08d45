"""Workflow package exposing public Temporal workflows."""

from .extraction_workflow import ExtractionWorkflow, ExtractionWorkflowInput

__all__ = ["ExtractionWorkflow", "ExtractionWorkflowInput"]
