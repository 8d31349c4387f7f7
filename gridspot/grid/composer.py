"""
Grid composition.

Turns an arbitrary image into an addressable surface: the image is fitted
within ``max_side``, framed by a white margin, partitioned by translucent grid
lines and every cell is labeled at its center ("A1", "B7", ...). The returned
GridGeometry is the only thing needed to map model answers back to pixels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from PIL import Image, ImageDraw

from gridspot.common.fonts import load_font
from gridspot.common.image_io import encode_image, load_image, to_base64, to_data_url
from gridspot.grid.addressing import format_cell_label
from gridspot.grid.geometry import GridGeometry, GridSpec


logger = logging.getLogger(__name__)

Color = Tuple[int, ...]


@dataclass(frozen=True)
class GridStyle:
    """Drawing and serialization parameters for composed grids."""

    line_color: Color = (0, 0, 0, 89)
    line_width: int = 1
    label_fill: Color = (255, 255, 255, 247)
    label_stroke: Color = (0, 0, 0, 230)
    label_size: int = 12
    label_stroke_width: int = 2
    background: Color = (255, 255, 255)
    format: str = "JPEG"
    jpeg_quality: int = 92

    @classmethod
    def from_config(cls, grid_cfg: Dict[str, Any]) -> "GridStyle":
        d = cls()
        return cls(
            line_color=tuple(grid_cfg.get("line_color", d.line_color)),
            line_width=int(grid_cfg.get("line_width", d.line_width)),
            label_fill=tuple(grid_cfg.get("label_fill", d.label_fill)),
            label_stroke=tuple(grid_cfg.get("label_stroke", d.label_stroke)),
            label_size=int(grid_cfg.get("label_size", d.label_size)),
            label_stroke_width=int(grid_cfg.get("label_stroke_width", d.label_stroke_width)),
            format=str(grid_cfg.get("format", d.format)),
            jpeg_quality=int(grid_cfg.get("jpeg_quality", d.jpeg_quality)),
        )


DEFAULT_STYLE = GridStyle()


@dataclass(frozen=True)
class GridImage:
    """A composed grid raster, its serialized form and its geometry."""

    image: Image.Image
    data: bytes
    mime_type: str
    geometry: GridGeometry

    def to_base64(self) -> str:
        return to_base64(self.data)

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)


def compose_grid(source: Any, spec: Optional[GridSpec] = None, *, style: Optional[GridStyle] = None) -> GridImage:
    """
    Overlay a labeled rows x cols grid on an image.

    Args:
        source: Any image source accepted by ``load_image``.
        spec: Grid dimensions, margin and maximum side length.
        style: Colors, font size and output format.

    Returns:
        GridImage with the composed raster and its geometry.

    Raises:
        DecodeError: If the source cannot be decoded.
    """
    spec = spec or GridSpec()
    style = style or DEFAULT_STYLE

    img = load_image(source)
    orig_w, orig_h = img.size
    w, h = spec.resampled_size(orig_w, orig_h)
    if (w, h) != (orig_w, orig_h):
        img = img.resize((w, h), resample=Image.Resampling.LANCZOS)

    geometry = GridGeometry(
        resampled_w=int(w),
        resampled_h=int(h),
        original_w=int(orig_w),
        original_h=int(orig_h),
        margin=int(spec.margin),
        rows=int(spec.rows),
        cols=int(spec.cols),
    )

    canvas = Image.new("RGB", (geometry.output_w, geometry.output_h), tuple(style.background[:3]))
    canvas.paste(img, (geometry.margin, geometry.margin))

    draw = ImageDraw.Draw(canvas, "RGBA")
    _draw_grid_lines(draw, geometry, style)
    _draw_cell_labels(draw, geometry, style)

    data, mime = encode_image(canvas, fmt=style.format, quality=style.jpeg_quality)
    logger.debug(
        "Composed %dx%d grid on %dx%d image (resampled %dx%d, %d bytes)",
        geometry.rows, geometry.cols, orig_w, orig_h, w, h, len(data),
    )
    return GridImage(image=canvas, data=data, mime_type=mime, geometry=geometry)


def _draw_grid_lines(draw: ImageDraw.ImageDraw, geometry: GridGeometry, style: GridStyle) -> None:
    off_x = off_y = geometry.margin
    w, h = geometry.resampled_w, geometry.resampled_h
    color = tuple(style.line_color)
    width = int(style.line_width)

    # closing lines sit on the last image pixel, not the first margin pixel
    right = off_x + w - 1
    bottom = off_y + h - 1

    for c in range(geometry.cols + 1):
        x = min(off_x + c * geometry.cell_w, right)
        draw.line([(x, off_y), (x, bottom)], fill=color, width=width)

    for r in range(geometry.rows + 1):
        y = min(off_y + r * geometry.cell_h, bottom)
        draw.line([(off_x, y), (right, y)], fill=color, width=width)


def _draw_cell_labels(draw: ImageDraw.ImageDraw, geometry: GridGeometry, style: GridStyle) -> None:
    font = load_font(style.label_size, bold=True)
    for r in range(geometry.rows):
        for c in range(geometry.cols):
            cell = geometry.cell_rect(r, c)
            cx = geometry.margin + cell.x + cell.w / 2.0
            cy = geometry.margin + cell.y + cell.h / 2.0
            # stroke_fill paints the outline under the glyph fill
            draw.text(
                (cx, cy),
                format_cell_label(r, c),
                font=font,
                anchor="mm",
                fill=tuple(style.label_fill),
                stroke_width=int(style.label_stroke_width),
                stroke_fill=tuple(style.label_stroke),
            )
