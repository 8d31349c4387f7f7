"""
Font loading for grid labels and annotations.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from PIL import ImageFont


_REGULAR_FONTS = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")
_BOLD_FONTS = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")


@lru_cache(maxsize=32)
def load_font(size: int, bold: bool = False) -> Any:
    """
    Load a TrueType font of ``size`` pixels, falling back to Pillow's bundled font.

    Args:
        size: Font size in pixels.
        bold: Prefer a bold face when one is installed.

    Returns:
        A PIL font object usable with ``ImageDraw.text``.
    """
    size = max(1, int(size))
    names = (_BOLD_FONTS + _REGULAR_FONTS) if bold else _REGULAR_FONTS
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)
