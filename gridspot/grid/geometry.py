"""
Value objects shared by the grid composer, reconstructor and renderer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from gridspot.errors import InvalidInputError


@dataclass(frozen=True)
class GridSpec:
    """How an image is turned into an addressable surface."""

    rows: int = 12
    cols: int = 12
    margin: int = 48
    max_side: int = 1400

    def __post_init__(self):
        if int(self.rows) <= 0:
            raise InvalidInputError(f"rows must be > 0, got {self.rows}", "rows")
        if int(self.cols) <= 0:
            raise InvalidInputError(f"cols must be > 0, got {self.cols}", "cols")
        if int(self.margin) < 0:
            raise InvalidInputError(f"margin must be >= 0, got {self.margin}", "margin")
        if int(self.max_side) <= 0:
            raise InvalidInputError(f"max_side must be > 0, got {self.max_side}", "max_side")

    def resampled_size(self, width: int, height: int) -> Tuple[int, int]:
        """
        Size of a ``width x height`` image after fitting it within ``max_side``.

        Images are only ever downscaled, uniformly, with sides rounded to whole
        pixels and never below one pixel.
        """
        w, h = int(width), int(height)
        m = max(w, h)
        if m <= int(self.max_side):
            return w, h
        scale = float(self.max_side) / float(m)
        nw = max(1, min(int(self.max_side), int(round(w * scale))))
        nh = max(1, min(int(self.max_side), int(round(h * scale))))
        return nw, nh


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in the pixel units of one coordinate space."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def scaled(self, sx: float, sy: float) -> "Rect":
        return Rect(x=self.x * sx, y=self.y * sy, w=self.w * sx, h=self.h * sy)

    def to_dict(self) -> Dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "w": float(self.w), "h": float(self.h)}


@dataclass(frozen=True)
class GridGeometry:
    """
    Pixel geometry of one composed grid image.

    ``resampled_w``/``resampled_h`` describe the image region inside the margin;
    cells partition that region exactly. ``original_w``/``original_h`` are the
    decoded source dimensions before any downscale.
    """

    resampled_w: int
    resampled_h: int
    original_w: int
    original_h: int
    margin: int
    rows: int
    cols: int

    @property
    def cell_w(self) -> float:
        return float(self.resampled_w) / float(self.cols)

    @property
    def cell_h(self) -> float:
        return float(self.resampled_h) / float(self.rows)

    @property
    def output_w(self) -> int:
        return int(self.resampled_w) + 2 * int(self.margin)

    @property
    def output_h(self) -> int:
        return int(self.resampled_h) + 2 * int(self.margin)

    @property
    def scale_x(self) -> float:
        """Factor mapping grid-space x to original-image x."""
        return float(self.original_w) / float(self.resampled_w)

    @property
    def scale_y(self) -> float:
        return float(self.original_h) / float(self.resampled_h)

    def cell_rect(self, row: int, col: int) -> Rect:
        """Grid-space rectangle of the zero-based cell (excludes the margin)."""
        return Rect(x=col * self.cell_w, y=row * self.cell_h, w=self.cell_w, h=self.cell_h)

    def to_original(self, rect: Rect) -> Rect:
        """Map a grid-space rectangle onto the original image."""
        return rect.scaled(self.scale_x, self.scale_y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resampled_w": int(self.resampled_w),
            "resampled_h": int(self.resampled_h),
            "original_w": int(self.original_w),
            "original_h": int(self.original_h),
            "margin": int(self.margin),
            "rows": int(self.rows),
            "cols": int(self.cols),
            "cell_w": float(self.cell_w),
            "cell_h": float(self.cell_h),
        }


@dataclass(frozen=True)
class Area:
    """A model-reported detection expressed as grid cells."""

    cells: Tuple[str, ...]
    label: str = ""
    score: Optional[float] = None
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cells": list(self.cells),
            "label": self.label,
            "score": self.score,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Box:
    """A renderable detection in original-image pixel space."""

    rect: Rect
    label: str = ""
    score: Optional[float] = None
    contiguous: bool = True

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = self.rect.to_dict()
        out.update({"label": self.label, "score": self.score, "contiguous": bool(self.contiguous)})
        return out
