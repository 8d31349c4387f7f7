"""Detection annotations: numbered boxes and highlighted grid cells drawn over the source image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from PIL import Image

from gridspot.common.fonts import load_font
from gridspot.common.image_io import load_image
from gridspot.common.math_utils import score_percent
from gridspot.grid.addressing import parse_cell_label
from gridspot.grid.geometry import Box, Rect
from gridspot.visualization.surface import Surface


Color = Tuple[int, ...]

DEFAULT_BOX_COLORS: Tuple[Color, ...] = (
    (30, 136, 229),
    (229, 57, 53),
    (67, 160, 71),
    (255, 152, 0),
    (156, 39, 176),
)


@dataclass(frozen=True)
class BoxStyle:
    colors: Tuple[Color, ...] = DEFAULT_BOX_COLORS
    line_width: int = 3
    font_size: int = 16
    badge_size: int = 28
    badge_text_color: Color = (255, 255, 255)
    label_offset: int = 20


@dataclass(frozen=True)
class CellStyle:
    highlight_color: Color = (255, 0, 0, 77)
    border_color: Color = (255, 0, 0)
    border_width: int = 2
    font_size: int = 14


def box_style_from_config(render_cfg: Dict[str, Any]) -> BoxStyle:
    d = BoxStyle()
    colors = render_cfg.get("box_colors")
    return BoxStyle(
        colors=tuple(tuple(c) for c in colors) if colors else d.colors,
        line_width=int(render_cfg.get("line_width", d.line_width)),
        font_size=int(render_cfg.get("font_size", d.font_size)),
        badge_size=int(render_cfg.get("badge_size", d.badge_size)),
    )


def cell_style_from_config(render_cfg: Dict[str, Any]) -> CellStyle:
    d = CellStyle()
    return CellStyle(
        highlight_color=tuple(render_cfg.get("highlight_color", d.highlight_color)),
        border_color=tuple(render_cfg.get("border_color", d.border_color)),
        border_width=int(render_cfg.get("border_width", d.border_width)),
        font_size=int(render_cfg.get("cell_font_size", d.font_size)),
    )


def draw_boxes(
    surface: Surface,
    image: Any,
    boxes: Sequence[Box],
    *,
    style: Optional[BoxStyle] = None,
) -> Surface:
    """
    Draw numbered detection boxes over ``image``.

    The surface is reset to the image first, so calling this repeatedly with
    the same inputs always produces the same pixels.
    """
    style = style or BoxStyle()
    if not style.colors:
        raise ValueError("BoxStyle.colors must not be empty")

    _reset(surface, image)

    badge = int(style.badge_size)
    badge_font = load_font(style.font_size, bold=True)
    label_font = load_font(style.font_size)

    for i, box in enumerate(boxes):
        color = tuple(style.colors[i % len(style.colors)])
        r = box.rect

        surface.stroke_rect(r, color, width=style.line_width)

        surface.fill_rect(Rect(x=r.x, y=r.y - badge, w=badge, h=badge), color)
        surface.draw_text(
            (r.x + badge / 2.0, r.y - badge / 2.0),
            str(i + 1),
            color=style.badge_text_color,
            font=badge_font,
            anchor="mm",
        )

        if box.label:
            text = box.label
            if box.score is not None:
                text += f" ({score_percent(box.score)}%)"
            surface.draw_text(
                (r.x, r.y + r.h + style.label_offset),
                text,
                color=color,
                font=label_font,
                anchor="ls",
            )

    return surface


def highlight_cells(
    surface: Surface,
    image: Any,
    cells: Sequence[str],
    rows: int,
    cols: int,
    *,
    style: Optional[CellStyle] = None,
) -> Surface:
    """
    Highlight grid cells over ``image``.

    Cell size is derived from the surface after it has been reset to the
    image, independent of any composed grid; labels that do not fit a
    rows x cols grid are skipped. Duplicate labels are drawn again.
    """
    if int(rows) <= 0 or int(cols) <= 0:
        raise ValueError(f"grid must be at least 1x1, got {rows}x{cols}")
    style = style or CellStyle()
    _reset(surface, image)

    cell_w = surface.width / float(cols)
    cell_h = surface.height / float(rows)
    font = load_font(style.font_size, bold=True)

    for label in cells:
        addr = parse_cell_label(label, rows, cols)
        if addr is None:
            continue
        rect = Rect(x=addr.col * cell_w, y=addr.row * cell_h, w=cell_w, h=cell_h)
        surface.fill_rect(rect, style.highlight_color)
        surface.stroke_rect(rect, style.border_color, width=style.border_width)
        surface.draw_text(
            (rect.x + cell_w / 2.0, rect.y + cell_h / 2.0),
            label,
            color=style.border_color,
            font=font,
            anchor="mm",
        )

    return surface


def _reset(surface: Surface, image: Any) -> None:
    img = image if isinstance(image, Image.Image) else load_image(image)
    surface.reset(img)
