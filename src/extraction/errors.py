"""Error taxonomy for the extraction pipeline."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for failures raised by the extraction pipeline.

    ``retryable`` tells the orchestrator whether another attempt can succeed.
    """

    retryable: bool = False


class UnsupportedContentType(ExtractionError):
    """Raised when a content type has no processing route."""


class ImageDecodeError(ExtractionError):
    """Raised when an embedded PDF image cannot be decoded."""


class PdfParseError(ExtractionError):
    """Raised when a PDF cannot be opened at all."""


class InferenceServiceError(ExtractionError):
    """Raised when the inference call fails at the network or service level."""

    retryable = True


class InferenceTimeoutError(InferenceServiceError):
    """Raised when the inference call exceeds its connect or read timeout."""


class MalformedInferenceResponse(ExtractionError):
    """Raised when the model answer is not a JSON object."""


class ConfigurationMissing(ExtractionError):
    """Raised when required configuration is absent or invalid."""


class InvalidEvent(ExtractionError):
    """Raised when an invocation event does not name a usable source object."""


class SourceNotFound(ExtractionError):
    """Raised when the named source object does not exist."""


class DocumentConversionError(ExtractionError):
    """Raised when a document cannot be flattened to text for the model."""


NON_RETRYABLE_ERROR_TYPES = [
    UnsupportedContentType.__name__,
    ImageDecodeError.__name__,
    PdfParseError.__name__,
    MalformedInferenceResponse.__name__,
    ConfigurationMissing.__name__,
    InvalidEvent.__name__,
    SourceNotFound.__name__,
    DocumentConversionError.__name__,
]


__all__ = [
    "ConfigurationMissing",
    "DocumentConversionError",
    "ExtractionError",
    "ImageDecodeError",
    "InferenceServiceError",
    "InferenceTimeoutError",
    "InvalidEvent",
    "MalformedInferenceResponse",
    "NON_RETRYABLE_ERROR_TYPES",
    "PdfParseError",
    "SourceNotFound",
    "UnsupportedContentType",
]
