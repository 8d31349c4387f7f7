"""
Grid addressing, composition and region reconstruction.
"""

from gridspot.grid.addressing import (
    CellAddress,
    format_cell_label,
    letters_to_number,
    number_to_letters,
    parse_cell_label,
)
from gridspot.grid.composer import GridImage, GridStyle, compose_grid
from gridspot.grid.geometry import Area, Box, GridGeometry, GridSpec, Rect
from gridspot.grid.reconstruct import apply_padding, cells_to_rect, is_contiguous, parse_cells

__all__ = [
    # Addressing
    "CellAddress",
    "format_cell_label",
    "letters_to_number",
    "number_to_letters",
    "parse_cell_label",
    # Composition
    "GridImage",
    "GridStyle",
    "compose_grid",
    # Value objects
    "Area",
    "Box",
    "GridGeometry",
    "GridSpec",
    "Rect",
    # Reconstruction
    "apply_padding",
    "cells_to_rect",
    "is_contiguous",
    "parse_cells",
]
