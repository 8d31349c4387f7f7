"""Shared fixtures: synthetic images and a scripted model provider."""

from __future__ import annotations

import io
from typing import Any, List, Optional

import numpy as np
import pytest
from PIL import Image


class StubProvider:
    """Returns a canned answer (or raises) and records every call."""

    def __init__(self, answer: str = "", *, error: Optional[BaseException] = None, name: str = "stub") -> None:
        self.answer = answer
        self.error = error
        self.name = name
        self.calls: List[List[Any]] = []

    def identifier(self) -> str:
        return self.name

    async def generate(self, parts):
        self.calls.append(list(parts))
        if self.error is not None:
            raise self.error
        return self.answer


def make_image(width: int, height: int, color=(255, 255, 255)) -> Image.Image:
    return Image.new("RGB", (width, height), color)


def gradient_image(width: int, height: int) -> Image.Image:
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    r = np.tile(xs, (height, 1))
    g = np.tile(ys[:, None], (1, width))
    b = np.full((height, width), 128, dtype=np.float32)
    return Image.fromarray(np.stack([r, g, b], axis=-1).astype(np.uint8))


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def white_png() -> bytes:
    return png_bytes(make_image(1200, 1200))


@pytest.fixture
def wide_png() -> bytes:
    return png_bytes(gradient_image(2800, 1400))
