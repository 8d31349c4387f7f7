"""
A mutable 2D drawing target backed by a PIL image.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from gridspot.grid.geometry import Rect


Color = Tuple[int, ...]


class Surface:
    """
    Presentation surface for annotations.

    Drawing mutates the surface in place, including its size on ``reset``, so
    a surface must not be shared between concurrent renders. Colors with an
    alpha channel are blended onto the existing pixels.

    Example:
        >>> surface = Surface()
        >>> surface.reset(image)
        >>> surface.stroke_rect(Rect(10, 10, 50, 40), (255, 0, 0), width=3)
        >>> surface.save("out.png")
    """

    def __init__(self, width: int = 1, height: int = 1, background: Color = (255, 255, 255)):
        self._background = tuple(background[:3])
        self._image = Image.new("RGB", (max(1, int(width)), max(1, int(height))), self._background)
        self._draw = ImageDraw.Draw(self._image, "RGBA")

    @property
    def width(self) -> int:
        return int(self._image.width)

    @property
    def height(self) -> int:
        return int(self._image.height)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int) -> None:
        """Resize and clear the surface."""
        self._image = Image.new("RGB", (max(1, int(width)), max(1, int(height))), self._background)
        self._draw = ImageDraw.Draw(self._image, "RGBA")

    def reset(self, image: Image.Image) -> None:
        """Match the image's native size, clear, and draw the image at the origin."""
        self.resize(*image.size)
        self.draw_image(image, 0, 0)

    def draw_image(self, image: Image.Image, x: int = 0, y: int = 0) -> None:
        src = image if image.mode in ("RGB", "RGBA") else image.convert("RGB")
        if src.mode == "RGBA":
            self._image.paste(src, (int(x), int(y)), mask=src)
        else:
            self._image.paste(src, (int(x), int(y)))

    def fill_rect(self, rect: Rect, color: Color) -> None:
        box = _box(rect)
        if box is None:
            return
        self._draw.rectangle(box, fill=tuple(color))

    def stroke_rect(self, rect: Rect, color: Color, *, width: int = 1) -> None:
        box = _box(rect)
        if box is None:
            return
        self._draw.rectangle(box, outline=tuple(color), width=max(1, int(width)))

    def draw_text(
        self,
        xy: Tuple[float, float],
        text: str,
        *,
        color: Color,
        font: Any,
        anchor: str = "la",
        stroke_width: int = 0,
        stroke_color: Optional[Color] = None,
    ) -> None:
        self._draw.text(
            (float(xy[0]), float(xy[1])),
            str(text),
            fill=tuple(color),
            font=font,
            anchor=anchor,
            stroke_width=int(stroke_width),
            stroke_fill=tuple(stroke_color) if stroke_color is not None else None,
        )

    def to_image(self) -> Image.Image:
        """Copy of the current contents."""
        return self._image.copy()

    def to_array(self) -> np.ndarray:
        return np.array(self._image, dtype=np.uint8)

    def save(self, path: Any, **kwargs: Any) -> None:
        self._image.save(path, **kwargs)


def _box(rect: Rect) -> Optional[Tuple[float, float, float, float]]:
    # PIL rectangles include both corners
    if rect.w <= 0 or rect.h <= 0:
        return None
    x0, y0 = float(rect.x), float(rect.y)
    return (x0, y0, max(x0, x0 + float(rect.w) - 1.0), max(y0, y0 + float(rect.h) - 1.0))
