"""Single-document extraction pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import unquote_plus

from src.config import ExtractionConfig
from src.routing import ContentRouter, RouterConfig, RoutingState

from .errors import InvalidEvent
from .inference import ChatModelInferenceClient, ollama_chat_model_factory
from .models import ExtractionResult, SourceDocument
from .ports import BlobStore, InferenceClient, ParameterStore, RecordStore
from .request_builder import InferenceRequestBuilder, resolve_prompt
from .response_mapper import ResponseFieldMapper
from .routes import RoutingDecision, Unsupported
from .storage import FileParameterStore, JsonRecordStore, LocalBlobStore

logger = logging.getLogger(__name__)

UNSUPPORTED_CONTENT_TYPE = "Unsupported Content Type"
RESPONSE_SUFFIX = "-Response.json"
RESPONSE_CONTENT_TYPE = "application/json"


def source_key_from_event(event: Mapping[str, Any]) -> str:
    """Return the URL-decoded object key from an S3 notification or ``{"Key": ...}`` event."""

    records = event.get("Records")
    if records:
        raw_key = ((records[0].get("s3") or {}).get("object") or {}).get("key")
    else:
        raw_key = event.get("Key")
    if not raw_key:
        raise InvalidEvent("Event does not contain an object key")
    return unquote_plus(str(raw_key))


def router_config_for(config: ExtractionConfig) -> RouterConfig:
    return RouterConfig(
        max_images_per_request=config.max_images_per_request,
        decode_workers=config.decode_workers,
        thresholds=config.thresholds,
    )


def load_source(blob_store: BlobStore, key: str) -> SourceDocument:
    data, media_type = blob_store.read(key)
    return SourceDocument(key=key, data=data, media_type=(media_type or "").lower())


def summarize_decision(decision: RoutingDecision) -> Dict[str, Any]:
    """Return a JSON-friendly summary of a routing decision."""

    return {
        "source_key": decision.source_key,
        "route": decision.route_kind,
        "is_pdf": decision.is_pdf,
        "image_count": len(decision.extracted_images),
        "logo_count": decision.logo_count,
        "scanned_count": decision.scanned_count,
        "steps": [step.model_dump() for step in decision.steps],
    }


def describe_source(
    config: ExtractionConfig,
    key: str,
    *,
    blob_store: Optional[BlobStore] = None,
    router: Optional[ContentRouter] = None,
) -> Dict[str, Any]:
    """Route ``key`` and summarize the decision without any inference wiring.

    The token budget is not required here since the model is never called.
    """

    config.validate(require_token_budget=False)
    store = blob_store or LocalBlobStore(Path(config.source_dir), Path(config.output_dir))
    decision = (router or ContentRouter()).route(load_source(store, key), router_config_for(config))
    return summarize_decision(decision)


class ExtractionPipeline:
    """Runs one source document from blob read to record write."""

    def __init__(
        self,
        config: ExtractionConfig,
        *,
        blob_store: BlobStore,
        parameter_store: ParameterStore,
        record_store: RecordStore,
        inference_client: InferenceClient,
        router: Optional[ContentRouter] = None,
        mapper: Optional[ResponseFieldMapper] = None,
    ) -> None:
        self._config = config.validate()
        self._blob_store = blob_store
        self._parameter_store = parameter_store
        self._record_store = record_store
        self._inference_client = inference_client
        self._router = router or ContentRouter()
        self._mapper = mapper or ResponseFieldMapper()
        self._builder = InferenceRequestBuilder(max_tokens=int(config.max_response_tokens or 0))

    @classmethod
    def from_config(cls, config: ExtractionConfig) -> "ExtractionPipeline":
        """Wire the filesystem stores and the Ollama chat model."""

        config.validate()
        factory = ollama_chat_model_factory(
            config.ollama_model,
            config.ollama_base_url,
            connect_timeout=config.connect_timeout_seconds,
            read_timeout=config.read_timeout_seconds,
        )
        return cls(
            config,
            blob_store=LocalBlobStore(Path(config.source_dir), Path(config.output_dir)),
            parameter_store=FileParameterStore(
                Path(config.prompt_parameter_path) if config.prompt_parameter_path else None
            ),
            record_store=JsonRecordStore(Path(config.records_dir)),
            inference_client=ChatModelInferenceClient(factory),
        )

    @property
    def router_config(self) -> RouterConfig:
        return router_config_for(self._config)

    def load_source(self, key: str) -> SourceDocument:
        return load_source(self._blob_store, key)

    def decide(
        self,
        source: SourceDocument,
        on_step: Optional[Callable[[str, RoutingState], None]] = None,
    ) -> RoutingDecision:
        return self._router.route(source, self.router_config, on_step=on_step)

    def process(self, source: SourceDocument) -> Optional[ExtractionResult]:
        """Route, infer and map one document; ``None`` means unsupported."""

        decision = self.decide(source)
        if isinstance(decision.route, Unsupported):
            logger.info("Unsupported content type %r for %s", source.media_type, source.key)
            return None

        prompt = resolve_prompt(self._parameter_store.get_prompt(), self._config.extraction_prompt)
        request = self._builder.build(decision.route, prompt, source_key=source.key)

        logger.info(
            "Invoking model for %s via %s with %s content block(s)",
            source.key,
            decision.route_kind,
            len(request.blocks),
        )
        raw_text = self._inference_client.invoke(request)
        return self._mapper.map(raw_text, decision)

    def persist(self, result: ExtractionResult) -> None:
        self._blob_store.write(
            f"{result.source_key}{RESPONSE_SUFFIX}",
            result.raw_text.encode("utf-8"),
            RESPONSE_CONTENT_TYPE,
        )
        self._record_store.put(result.source_key, result.attributes)

    def run(self, key: str) -> str:
        """Process the object stored under ``key`` and return the raw model answer."""

        source = self.load_source(key)
        result = self.process(source)
        if result is None:
            return UNSUPPORTED_CONTENT_TYPE
        self.persist(result)
        return result.raw_text

    def run_event(self, event: Mapping[str, Any]) -> str:
        return self.run(source_key_from_event(event))

    def describe(self, key: str) -> Dict[str, Any]:
        """Return the routing decision for ``key`` without calling the model."""

        return summarize_decision(self.decide(self.load_source(key)))


__all__ = [
    "ExtractionPipeline",
    "RESPONSE_SUFFIX",
    "UNSUPPORTED_CONTENT_TYPE",
    "describe_source",
    "load_source",
    "router_config_for",
    "source_key_from_event",
    "summarize_decision",
]
