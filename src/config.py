"""Application configuration dataclasses."""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from pydantic.dataclasses import dataclass

from .extraction.classifier import ClassifierThresholds
from .extraction.errors import ConfigurationMissing

DEFAULT_SOURCE_DIR = "data/source"
DEFAULT_OUTPUT_DIR = "data/output"
DEFAULT_RECORDS_DIR = "data/records"
DEFAULT_PROMPT_PARAMETER_PATH = "config/extraction_prompt.txt"
DEFAULT_TEMPORAL_ADDRESS = "127.0.0.1:7233"
DEFAULT_TEMPORAL_NAMESPACE = "default"
DEFAULT_TEMPORAL_TASK_QUEUE = "idp0"
DEFAULT_OLLAMA_MODEL = "qwen2.5vl:7b"
DEFAULT_OLLAMA_BASE_URL = "http://127.0.0.1:11434"
DEFAULT_CONNECT_TIMEOUT_SECONDS = 30.0
DEFAULT_READ_TIMEOUT_SECONDS = 240.0
DEFAULT_INVOCATION_TIMEOUT_SECONDS = 300.0
DEFAULT_MAX_IMAGES_PER_REQUEST = 20
DEFAULT_DECODE_WORKERS = 1

ENV_PREFIX = "IDP0_"


def _env(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = environ.get(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return default
    return value.strip()


def _parse_number(raw: Optional[str], name: str, cast: Any, default: Any) -> Any:
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationMissing(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


@dataclass
class ExtractionConfig:
    """Typed, immutable-by-convention configuration for one extraction run."""

    max_response_tokens: Optional[int] = None
    extraction_prompt: Optional[str] = None
    source_dir: str = DEFAULT_SOURCE_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    records_dir: str = DEFAULT_RECORDS_DIR
    prompt_parameter_path: Optional[str] = DEFAULT_PROMPT_PARAMETER_PATH
    ollama_model: str = DEFAULT_OLLAMA_MODEL
    ollama_base_url: str = DEFAULT_OLLAMA_BASE_URL
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    invocation_timeout_seconds: float = DEFAULT_INVOCATION_TIMEOUT_SECONDS
    max_images_per_request: int = DEFAULT_MAX_IMAGES_PER_REQUEST
    decode_workers: int = DEFAULT_DECODE_WORKERS
    small_pixels: int = ClassifierThresholds.small_pixels
    large_pixels: int = ClassifierThresholds.large_pixels
    fallback_pixels: int = ClassifierThresholds.fallback_pixels
    address: str = DEFAULT_TEMPORAL_ADDRESS
    namespace: str = DEFAULT_TEMPORAL_NAMESPACE
    task_queue: str = DEFAULT_TEMPORAL_TASK_QUEUE

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        require_token_budget: bool = True,
        **overrides: Any,
    ) -> "ExtractionConfig":
        """Build a validated configuration from ``IDP0_*`` environment variables.

        ``require_token_budget=False`` suits commands that never call the model.
        """

        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {
            "max_response_tokens": _parse_number(_env(env, "MAX_RESPONSE_TOKENS"), "MAX_RESPONSE_TOKENS", int, None),
            "extraction_prompt": _env(env, "EXTRACTION_PROMPT"),
            "source_dir": _env(env, "SOURCE_DIR", DEFAULT_SOURCE_DIR),
            "output_dir": _env(env, "OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            "records_dir": _env(env, "RECORDS_DIR", DEFAULT_RECORDS_DIR),
            "prompt_parameter_path": _env(env, "PROMPT_PARAMETER_PATH", DEFAULT_PROMPT_PARAMETER_PATH),
            "ollama_model": _env(env, "OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL),
            "ollama_base_url": _env(env, "OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL),
            "connect_timeout_seconds": _parse_number(
                _env(env, "CONNECT_TIMEOUT_SECONDS"), "CONNECT_TIMEOUT_SECONDS", float, DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            "read_timeout_seconds": _parse_number(
                _env(env, "READ_TIMEOUT_SECONDS"), "READ_TIMEOUT_SECONDS", float, DEFAULT_READ_TIMEOUT_SECONDS
            ),
            "invocation_timeout_seconds": _parse_number(
                _env(env, "INVOCATION_TIMEOUT_SECONDS"),
                "INVOCATION_TIMEOUT_SECONDS",
                float,
                DEFAULT_INVOCATION_TIMEOUT_SECONDS,
            ),
            "max_images_per_request": _parse_number(
                _env(env, "MAX_IMAGES_PER_REQUEST"), "MAX_IMAGES_PER_REQUEST", int, DEFAULT_MAX_IMAGES_PER_REQUEST
            ),
            "decode_workers": _parse_number(
                _env(env, "DECODE_WORKERS"), "DECODE_WORKERS", int, DEFAULT_DECODE_WORKERS
            ),
            "address": _env(env, "TEMPORAL_ADDRESS", DEFAULT_TEMPORAL_ADDRESS),
            "namespace": _env(env, "TEMPORAL_NAMESPACE", DEFAULT_TEMPORAL_NAMESPACE),
            "task_queue": _env(env, "TEMPORAL_TASK_QUEUE", DEFAULT_TEMPORAL_TASK_QUEUE),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        config = cls(**values)
        config.validate(require_token_budget=require_token_budget)
        return config

    def validate(self, *, require_token_budget: bool = True) -> "ExtractionConfig":
        """Fail fast on configuration that would only break mid-invocation."""

        if self.max_response_tokens is None:
            if require_token_budget:
                raise ConfigurationMissing(f"{ENV_PREFIX}MAX_RESPONSE_TOKENS is required")
        elif self.max_response_tokens <= 0:
            raise ConfigurationMissing(
                f"{ENV_PREFIX}MAX_RESPONSE_TOKENS must be positive, got {self.max_response_tokens}"
            )
        if self.connect_timeout_seconds + self.read_timeout_seconds >= self.invocation_timeout_seconds:
            raise ConfigurationMissing(
                "Inference connect + read timeouts must be shorter than the invocation budget "
                f"({self.connect_timeout_seconds} + {self.read_timeout_seconds} >= "
                f"{self.invocation_timeout_seconds})"
            )
        if self.max_images_per_request <= 0:
            raise ConfigurationMissing("max_images_per_request must be positive")
        return self

    @property
    def thresholds(self) -> ClassifierThresholds:
        return ClassifierThresholds(
            small_pixels=self.small_pixels,
            large_pixels=self.large_pixels,
            fallback_pixels=self.fallback_pixels,
        )

    def to_activity_payload(self) -> Dict[str, Any]:
        """Return a dict compatible with activity execution."""

        return {name: getattr(self, name) for name in self.__dataclass_fields__}

    def copy(self, **updates: Any) -> "ExtractionConfig":
        """Return a shallow copy with optional overrides."""

        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update(updates)
        return ExtractionConfig(**values)


__all__ = ["ENV_PREFIX", "ExtractionConfig"]
