"""
Model providers: one capability interface, one variant per vendor.
"""

from gridspot.providers.base import ImagePart, ModelProvider, Part, TextPart, validate_parts
from gridspot.providers.http_providers import AnthropicProvider, GoogleProvider
from gridspot.providers.openai_provider import OpenAIProvider
from gridspot.providers.registry import PROVIDERS, create_provider

__all__ = [
    "AnthropicProvider",
    "GoogleProvider",
    "ImagePart",
    "ModelProvider",
    "OpenAIProvider",
    "PROVIDERS",
    "Part",
    "TextPart",
    "create_provider",
    "validate_parts",
]
