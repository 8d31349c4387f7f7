"""Provider lookup by vendor id, alias or custom factory."""

from __future__ import annotations

from typing import Any, Callable, Dict, Union

from gridspot.config import api_key_from_env
from gridspot.errors import InvalidInputError
from gridspot.providers.base import ModelProvider
from gridspot.providers.http_providers import AnthropicProvider, GoogleProvider
from gridspot.providers.openai_provider import OpenAIProvider


PROVIDERS: Dict[str, type] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
}

_ALIASES = {
    "gpt": "openai",
    "claude": "anthropic",
    "gemini": "google",
}

ProviderFactory = Callable[[Dict[str, Any]], ModelProvider]


def create_provider(provider_id: Union[str, ProviderFactory], **cfg: Any) -> ModelProvider:
    """
    Build a provider from a vendor id or a custom factory.

    Args:
        provider_id: "openai", "anthropic", "google" (or an alias), or a
            callable receiving ``cfg`` as a dict.
        **cfg: ``api_key``, ``model``, ``max_tokens``, ``timeout_s`` and any
            vendor-specific keyword (``client``, ``session``). ``api_key``
            defaults to the vendor's environment variable.

    Raises:
        InvalidInputError: If the id is unknown or the factory returns
            something without ``generate``.
    """
    if callable(provider_id):
        provider = provider_id(dict(cfg))
        if not callable(getattr(provider, "generate", None)):
            raise InvalidInputError("Provider factory returned an object without generate()", "provider")
        return provider

    key = str(provider_id or "").strip().lower()
    key = _ALIASES.get(key, key)
    cls = PROVIDERS.get(key)
    if cls is None:
        raise InvalidInputError(
            f"Unknown provider {provider_id!r}. Known: {', '.join(sorted(PROVIDERS))}",
            "provider",
        )

    kwargs = {k: v for k, v in cfg.items() if v is not None}
    api_key = kwargs.pop("api_key", None) or api_key_from_env(key)
    return cls(api_key, **kwargs)
