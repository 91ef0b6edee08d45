"""Flattening of model answers into attribute records."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from .errors import MalformedInferenceResponse
from .models import ExtractionResult
from .pdf_images import CANONICAL_IMAGE_FORMAT
from .routes import RoutingDecision

logger = logging.getLogger(__name__)

NO_DATA = "no data"
SOURCE_KEY_ATTRIBUTE = "fileName"


def stringify_value(value: Any) -> str:
    if value is None:
        return NO_DATA
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def provenance_attributes(decision: RoutingDecision) -> Dict[str, str]:
    """Describe how the document was presented to the model."""

    attributes: Dict[str, str] = {
        SOURCE_KEY_ATTRIBUTE: decision.source_key.strip(),
        "isPdf": stringify_value(decision.is_pdf),
        "containsImages": stringify_value(decision.scanned_count > 0),
        "usedExtractedImages": stringify_value(decision.used_extracted_images),
        "imageCount": str(len(decision.extracted_images)),
        "logoImageCount": str(decision.logo_count),
        "scannedImageCount": str(decision.scanned_count),
        "processingRoute": decision.route_kind,
    }
    if decision.used_extracted_images:
        attributes["imageFormat"] = CANONICAL_IMAGE_FORMAT
    return attributes


class ResponseFieldMapper:
    """Parses the model's JSON answer and flattens it for the record store."""

    def map(self, raw_text: str, decision: RoutingDecision) -> ExtractionResult:
        try:
            parsed = json.loads(raw_text)
        except (TypeError, ValueError) as exc:
            raise MalformedInferenceResponse(
                f"Model response for {decision.source_key!r} is not valid JSON: {exc}"
            ) from exc

        if not isinstance(parsed, dict):
            raise MalformedInferenceResponse(
                f"Model response for {decision.source_key!r} is a JSON {type(parsed).__name__}, "
                "expected an object"
            )

        attributes = {str(key): stringify_value(value) for key, value in parsed.items()}
        attributes.update(provenance_attributes(decision))
        logger.info(
            "Mapped %s model field(s) for %s",
            len(parsed),
            decision.source_key,
        )
        return ExtractionResult(
            source_key=decision.source_key,
            raw_text=raw_text,
            route=decision.route_kind,
            attributes=attributes,
        )


__all__ = [
    "NO_DATA",
    "ResponseFieldMapper",
    "SOURCE_KEY_ATTRIBUTE",
    "provenance_attributes",
    "stringify_value",
]
