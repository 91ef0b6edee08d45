"""Temporal activity package for the IDP0 project."""

from .extract import extract_document_activity

__all__ = ["extract_document_activity"]
