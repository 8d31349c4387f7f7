"""
Providers that talk to vendor REST endpoints with ``requests``.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from gridspot.errors import InvalidInputError, ProviderError
from gridspot.providers.base import ImagePart, ModelProvider, Part, TextPart, validate_parts


logger = logging.getLogger(__name__)


class _HTTPProvider(ModelProvider):
    name = "http"
    default_model = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        max_tokens: int = 1000,
        timeout_s: float = 60.0,
        session: Any = None,
    ):
        if not api_key:
            raise InvalidInputError(f"{self.name} API key is required", "api_key")
        self._api_key = api_key
        self._model = model or self.default_model
        self._max_tokens = int(max_tokens)
        self._timeout_s = float(timeout_s)
        self._session = session or requests.Session()

    def identifier(self) -> str:
        return self.name

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, parts: Sequence[Part]) -> str:
        payload = self._payload(validate_parts(parts))
        data = await asyncio.to_thread(self._post, payload)
        return self._extract_text(data)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url, params, headers = self._endpoint()
        logger.debug("%s request to model %s", self.name, self._model)
        try:
            resp = self._session.post(
                url,
                params=params,
                headers=headers,
                json=payload,
                timeout=float(max(self._timeout_s, 10.0)),
            )
        except requests.RequestException as exc:
            raise ProviderError(f"{self.name} request failed: {exc}", provider=self.name) from exc

        if int(resp.status_code) != 200:
            raise ProviderError(
                f"{self.name} API error {resp.status_code}: {resp.text}",
                provider=self.name,
                status_code=int(resp.status_code),
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"{self.name} API returned non-JSON response", provider=self.name) from exc
        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} API returned non-JSON response", provider=self.name)
        return data

    @abc.abstractmethod
    def _endpoint(self):
        """(url, query params or None, headers) for one request."""

    @abc.abstractmethod
    def _payload(self, parts: List[Part]) -> Dict[str, Any]:
        """Vendor request body for the validated parts."""

    @abc.abstractmethod
    def _extract_text(self, data: Dict[str, Any]) -> str:
        """
        Answer text from a decoded response body.

        Raises:
            ProviderError: If the envelope carries no text.
        """


class AnthropicProvider(_HTTPProvider):
    """Anthropic Messages API."""

    name = "anthropic"
    default_model = "claude-3-7-sonnet-latest"
    url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"

    def _endpoint(self):
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": self.api_version,
        }
        return self.url, None, headers

    def _payload(self, parts: List[Part]) -> Dict[str, Any]:
        content: List[Dict[str, Any]] = []
        for part in parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.value})
            elif isinstance(part, ImagePart):
                content.append({
                    "type": "image",
                    "source": {"type": "base64", "media_type": part.mime_type, "data": part.to_base64()},
                })
        return {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": content}],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        blocks = data.get("content")
        if not isinstance(blocks, list) or not blocks:
            raise ProviderError("Anthropic response has no content", provider=self.name)
        texts = [str(b.get("text") or "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"]
        return "".join(texts)


class GoogleProvider(_HTTPProvider):
    """Gemini generateContent with inline image data."""

    name = "google"
    default_model = "gemini-2.5-flash"
    base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    def _endpoint(self):
        url = f"{self.base_url}/{self._model}:generateContent"
        return url, {"key": self._api_key}, {"Content-Type": "application/json"}

    def _payload(self, parts: List[Part]) -> Dict[str, Any]:
        out: List[Dict[str, Any]] = []
        for part in parts:
            if isinstance(part, TextPart):
                out.append({"text": part.value})
            elif isinstance(part, ImagePart):
                out.append({"inlineData": {"mimeType": part.mime_type, "data": part.to_base64()}})
        return {
            "contents": [{"parts": out}],
            "generationConfig": {"maxOutputTokens": self._max_tokens},
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise ProviderError("Gemini response has no candidates", provider=self.name)
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts:
            raise ProviderError("Gemini candidate has no content", provider=self.name)
        return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))
