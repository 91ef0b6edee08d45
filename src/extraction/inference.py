"""LangChain chat-model client for the multimodal inference call."""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from ollama import ResponseError

from .document_text import DocumentTextExtractor
from .errors import InferenceServiceError, InferenceTimeoutError
from .request_builder import (
    ContentBlock,
    GenerationConfig,
    ImageBlock,
    InferenceRequest,
    TextBlock,
)

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[GenerationConfig], BaseChatModel]


def ollama_chat_model_factory(
    model: str,
    base_url: str,
    *,
    connect_timeout: float,
    read_timeout: float,
) -> ChatModelFactory:
    """Return a factory creating deterministic ``ChatOllama`` instances."""

    def _factory(generation: GenerationConfig) -> BaseChatModel:
        return ChatOllama(
            model=model,
            base_url=base_url,
            temperature=generation.temperature,
            top_p=generation.top_p,
            num_predict=generation.max_tokens,
            format="json",
            client_kwargs={"timeout": httpx.Timeout(read_timeout, connect=connect_timeout)},
        )

    return _factory


class ChatModelInferenceClient:
    """Sends an :class:`InferenceRequest` through a LangChain chat model.

    Ollama accepts text and images only, so document blocks are flattened
    to markdown by a :class:`DocumentTextExtractor` before the call.
    """

    def __init__(
        self,
        chat_model_factory: ChatModelFactory,
        text_extractor: Optional[DocumentTextExtractor] = None,
    ) -> None:
        self._chat_model_factory = chat_model_factory
        self._text_extractor = text_extractor or DocumentTextExtractor()

    def _convert_block(self, block: ContentBlock) -> Dict[str, Any]:
        if isinstance(block, TextBlock):
            return {"type": "text", "text": block.text}

        if isinstance(block, ImageBlock):
            encoded = base64.b64encode(block.data).decode("ascii")
            return {
                "type": "image_url",
                "image_url": {"url": f"data:image/{block.format.value};base64,{encoded}"},
            }

        text = self._text_extractor.extract(block.name, block.format, block.data)
        return {"type": "text", "text": f"Document: {block.name}\n\n{text}"}

    def to_messages(self, request: InferenceRequest) -> List[Any]:
        content = [self._convert_block(block) for block in request.blocks]
        return [
            SystemMessage(content=request.system_prompt),
            HumanMessage(content=content),
        ]

    def invoke(self, request: InferenceRequest) -> str:
        messages = self.to_messages(request)
        chat_model = self._chat_model_factory(request.generation)
        try:
            result = chat_model.invoke(messages)
        except httpx.TimeoutException as exc:
            raise InferenceTimeoutError(f"Inference call timed out: {exc}") from exc
        except (httpx.HTTPError, ResponseError, ConnectionError) as exc:
            raise InferenceServiceError(f"Inference call failed: {exc}") from exc

        content = result.content
        if isinstance(content, str):
            return content
        return "".join(
            part if isinstance(part, str) else str(part.get("text", ""))
            for part in content
            if isinstance(part, (str, dict))
        )


__all__ = [
    "ChatModelFactory",
    "ChatModelInferenceClient",
    "ollama_chat_model_factory",
]
