"""
gridspot: grid-prompted visual grounding.

Overlay a labeled grid on an image, ask a vision model which cells contain
the objects of interest, and map the answer back to pixel boxes.
"""

from gridspot.config import DEFAULT_CONFIG, load_config
from gridspot.engine import AnalysisOptions, AnalysisResult, DisplayMode, analyze_with_grid
from gridspot.errors import (
    DecodeError,
    GridspotError,
    InvalidInputError,
    OutOfRangeCellError,
    ProviderError,
    UnparsableResponseError,
)
from gridspot.grid import (
    Area,
    Box,
    GridGeometry,
    GridImage,
    GridSpec,
    GridStyle,
    Rect,
    apply_padding,
    cells_to_rect,
    compose_grid,
    number_to_letters,
    parse_cell_label,
)
from gridspot.parsing import ParsedResponse, parse_model_response
from gridspot.providers import ImagePart, ModelProvider, TextPart, create_provider
from gridspot.visualization import Surface, draw_boxes, highlight_cells

__version__ = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "Area",
    "Box",
    "DEFAULT_CONFIG",
    "DecodeError",
    "DisplayMode",
    "GridGeometry",
    "GridImage",
    "GridSpec",
    "GridStyle",
    "GridspotError",
    "ImagePart",
    "InvalidInputError",
    "ModelProvider",
    "OutOfRangeCellError",
    "ParsedResponse",
    "ProviderError",
    "Rect",
    "Surface",
    "TextPart",
    "UnparsableResponseError",
    "analyze_with_grid",
    "apply_padding",
    "cells_to_rect",
    "compose_grid",
    "create_provider",
    "draw_boxes",
    "highlight_cells",
    "load_config",
    "number_to_letters",
    "parse_cell_label",
    "parse_model_response",
]
