from gridspot.visualization.annotations import (
    BoxStyle,
    CellStyle,
    box_style_from_config,
    cell_style_from_config,
    draw_boxes,
    highlight_cells,
)
from gridspot.visualization.surface import Surface

__all__ = [
    "BoxStyle",
    "CellStyle",
    "Surface",
    "box_style_from_config",
    "cell_style_from_config",
    "draw_boxes",
    "highlight_cells",
]
