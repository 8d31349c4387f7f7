"""
Model provider interface.

A provider turns an ordered list of text and image parts into the model's
text answer. Vendor request/response envelopes stay inside each variant; the
orchestrator only sees ``identifier()`` and ``generate()``.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import List, Sequence, Union

from gridspot.common.image_io import to_base64
from gridspot.errors import InvalidInputError


@dataclass(frozen=True)
class TextPart:
    value: str
    kind: str = "text"


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    mime_type: str = "image/jpeg"
    kind: str = "image"

    def to_base64(self) -> str:
        return to_base64(self.data)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


Part = Union[TextPart, ImagePart]


class ModelProvider(abc.ABC):
    """Text-and-image in, text out."""

    @abc.abstractmethod
    def identifier(self) -> str:
        """Short vendor name reported in analysis results."""

    @abc.abstractmethod
    async def generate(self, parts: Sequence[Part]) -> str:
        """
        Run one model round trip.

        Raises:
            ProviderError: On transport failure, non-success status or an
                unexpected response envelope.
        """


def validate_parts(parts: Sequence[Part]) -> List[Part]:
    """Validate a part list, rejecting image parts without data."""
    out: List[Part] = []
    for part in parts:
        if isinstance(part, ImagePart):
            if not part.data:
                raise InvalidInputError("Image part has no data", "parts")
        elif not isinstance(part, TextPart):
            raise InvalidInputError(f"Unsupported part type: {type(part).__name__}", "parts")
        out.append(part)
    return out
