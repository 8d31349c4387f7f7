"""OpenAI vision provider built on the official SDK."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import openai

from gridspot.errors import InvalidInputError, ProviderError
from gridspot.providers.base import ImagePart, ModelProvider, Part, TextPart, validate_parts


logger = logging.getLogger(__name__)


class OpenAIProvider(ModelProvider):
    """Chat Completions with inline base64 images."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        max_tokens: int = 1000,
        timeout_s: float = 60.0,
        detail: str = "high",
        client: Any = None,
    ):
        self._model = model or "gpt-4o-mini"
        self._max_tokens = int(max_tokens)
        self._detail = detail
        if client is None:
            try:
                client = openai.OpenAI(api_key=api_key, timeout=float(timeout_s))
            except openai.OpenAIError as exc:
                raise InvalidInputError(f"OpenAI client could not be created: {exc}", "api_key") from exc
        self._client = client

    def identifier(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, parts: Sequence[Part]) -> str:
        messages = [{"role": "user", "content": self._content(parts)}]
        return await asyncio.to_thread(self._complete, messages)

    def _content(self, parts: Sequence[Part]) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in validate_parts(parts):
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.value})
            elif isinstance(part, ImagePart):
                content.append({
                    "type": "image_url",
                    "image_url": {"url": part.to_data_url(), "detail": self._detail},
                })
        return content

    def _complete(self, messages: List[Dict[str, Any]]) -> str:
        logger.debug("OpenAI request to model %s", self._model)
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=self._max_tokens,
            )
        except openai.APIStatusError as exc:
            raise ProviderError(
                f"OpenAI API error {exc.status_code}: {exc.message}",
                provider="openai",
                status_code=int(exc.status_code),
            ) from exc
        except openai.OpenAIError as exc:
            raise ProviderError(f"OpenAI request failed: {exc}", provider="openai") from exc

        choices = getattr(response, "choices", None)
        if not choices or getattr(choices[0], "message", None) is None:
            raise ProviderError("OpenAI response has no choices", provider="openai")
        return str(choices[0].message.content or "")
