"""
Grid-prompted visual grounding.

``analyze_with_grid`` overlays a labeled grid on an image, asks a vision model
which cells contain the objects of interest, and maps the answer back to
pixel boxes (or highlighted cells) on the original image:

    start -> compose-grid -> build-prompt -> call-model -> parse-response
          -> {no-detections | render-areas} -> done

Invalid input raises InvalidInputError before any work; every later failure is
reported on the returned AnalysisResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from gridspot.common.image_io import load_image
from gridspot.errors import GridspotError, InvalidInputError, UnparsableResponseError
from gridspot.grid.composer import GridImage, GridStyle, compose_grid
from gridspot.grid.geometry import Area, Box, GridGeometry, GridSpec
from gridspot.grid.reconstruct import apply_padding, cells_to_rect, is_contiguous
from gridspot.parsing.response_parser import parse_model_response
from gridspot.prompts import build_prompt
from gridspot.providers.base import ImagePart, TextPart
from gridspot.security.validation import RequestValidator, validate_analysis_inputs
from gridspot.visualization.annotations import BoxStyle, CellStyle, draw_boxes, highlight_cells


logger = logging.getLogger(__name__)

ENGINE_VERSION = "gridspot_v1"


class DisplayMode(str, Enum):
    BBOX = "bbox"
    CELLS = "cells"

    @classmethod
    def parse(cls, value: Any) -> "DisplayMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError as exc:
            raise InvalidInputError(
                f"display_mode must be one of {', '.join(m.value for m in cls)}, got {value!r}",
                "display_mode",
            ) from exc


@dataclass(frozen=True)
class AnalysisOptions:
    """Per-call knobs for ``analyze_with_grid``."""

    objects: str = "objects of interest"
    rows: int = 12
    cols: int = 12
    margin: int = 48
    max_side: int = 1400
    max_areas: int = 2
    pad_ratio: float = 0.02
    display_mode: DisplayMode = DisplayMode.BBOX
    language: str = "en"
    grid_preview: bool = False

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], **overrides: Any) -> "AnalysisOptions":
        """
        Build options from a ``load_config`` dict.

        ``overrides`` win over the file; None values are ignored so CLI flags
        that were not given fall through to the config.
        """
        grid = cfg.get("grid") or {}
        analysis = cfg.get("analysis") or {}
        d = cls()
        values: Dict[str, Any] = {
            "objects": str(analysis.get("objects", d.objects)),
            "rows": int(grid.get("rows", d.rows)),
            "cols": int(grid.get("cols", d.cols)),
            "margin": int(grid.get("margin", d.margin)),
            "max_side": int(grid.get("max_side", d.max_side)),
            "max_areas": int(analysis.get("max_areas", d.max_areas)),
            "pad_ratio": float(analysis.get("pad_ratio", d.pad_ratio)),
            "display_mode": analysis.get("display_mode", d.display_mode),
            "language": str(analysis.get("language", d.language)),
            "grid_preview": bool(analysis.get("grid_preview", d.grid_preview)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["display_mode"] = DisplayMode.parse(values["display_mode"])
        return cls(**values)

    def grid_spec(self) -> GridSpec:
        return GridSpec(rows=self.rows, cols=self.cols, margin=self.margin, max_side=self.max_side)


@dataclass
class AnalysisResult:
    """Outcome of one analysis; exactly one of error/unparsable/no_detections/areas applies."""

    provider: str
    display_mode: DisplayMode = DisplayMode.BBOX
    raw: Optional[str] = None
    error: Optional[str] = None
    unparsable: bool = False
    no_detections: bool = False
    reason: Optional[str] = None
    areas: List[Area] = field(default_factory=list)
    boxes: List[Box] = field(default_factory=list)
    cells: List[str] = field(default_factory=list)
    geometry: Optional[GridGeometry] = None
    grid: Optional[GridImage] = None
    exception: Optional[BaseException] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.unparsable

    def raise_for_error(self) -> "AnalysisResult":
        """Re-raise a captured failure; returns self when the analysis succeeded."""
        if self.exception is not None:
            raise self.exception
        if self.error is not None:
            raise GridspotError(self.error)
        if self.unparsable:
            raise UnparsableResponseError("Model response could not be parsed", raw=self.raw or "")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": ENGINE_VERSION,
            "provider": self.provider,
            "ok": self.ok,
            "display_mode": self.display_mode.value,
            "error": self.error,
            "unparsable": bool(self.unparsable),
            "no_detections": bool(self.no_detections),
            "reason": self.reason,
            "areas": [a.to_dict() for a in self.areas],
            "boxes": [b.to_dict() for b in self.boxes],
            "cells": list(self.cells),
            "geometry": self.geometry.to_dict() if self.geometry is not None else None,
            "grid_preview": self.grid.to_data_url() if self.grid is not None else None,
            "raw": self.raw,
        }


async def analyze_with_grid(
    provider: Any,
    source: Any,
    *,
    options: Optional[AnalysisOptions] = None,
    surface: Any = None,
    grid_style: Optional[GridStyle] = None,
    box_style: Optional[BoxStyle] = None,
    cell_style: Optional[CellStyle] = None,
) -> AnalysisResult:
    """
    Locate ``options.objects`` in an image with a grid-prompted vision model.

    Args:
        provider: A ModelProvider (anything with ``async generate(parts)``).
        source: Any image source accepted by ``load_image``.
        options: Grid, prompt and post-processing settings.
        surface: Optional Surface to render onto; results are computed either way.
        grid_style: Styling of the composed grid sent to the model.
        box_style: Styling of box-mode annotations.
        cell_style: Styling of cell-mode annotations.

    Returns:
        AnalysisResult. Boxes are in original-image pixels.

    Raises:
        InvalidInputError: Missing provider or source, or invalid options.
    """
    options = options or AnalysisOptions()
    mode = DisplayMode.parse(options.display_mode)
    spec, objects = _validate(provider, source, options)
    name = _provider_name(provider)
    result = AnalysisResult(provider=name, display_mode=mode)

    logger.debug("Composing %dx%d grid", spec.rows, spec.cols)
    try:
        image = load_image(source)
        grid = compose_grid(image, spec, style=grid_style)
    except Exception as exc:
        logger.warning("Grid composition failed: %s", exc)
        return _failed(result, exc)

    result.geometry = grid.geometry
    if options.grid_preview:
        result.grid = grid

    prompt = build_prompt(
        objects=objects,
        rows=spec.rows,
        cols=spec.cols,
        max_areas=options.max_areas,
        language=options.language,
    )

    logger.debug("Calling provider %s", name)
    try:
        raw = await provider.generate([TextPart(prompt), ImagePart(grid.data, grid.mime_type)])
    except Exception as exc:
        logger.warning("Provider %s failed: %s", name, exc)
        return _failed(result, exc)
    result.raw = raw

    parsed = parse_model_response(raw)
    if parsed is None:
        logger.warning("Unparsable response from provider %s", name)
        result.unparsable = True
        return result

    if parsed.no_detections:
        logger.debug("No detections: %s", parsed.reason)
        result.no_detections = True
        result.reason = parsed.reason
        return result

    areas = parsed.areas[: max(0, int(options.max_areas))]
    result.areas = areas
    result.reason = parsed.reason
    result.boxes = _boxes(areas, grid.geometry, options.pad_ratio)
    result.cells = [c for a in areas for c in a.cells]
    logger.debug("%d areas, %d boxes, %d cells", len(areas), len(result.boxes), len(result.cells))

    if surface is not None:
        try:
            if mode is DisplayMode.CELLS:
                highlight_cells(surface, image, result.cells, spec.rows, spec.cols, style=cell_style)
            else:
                draw_boxes(surface, image, result.boxes, style=box_style)
        except Exception as exc:
            logger.warning("Rendering failed: %s", exc)
            return _failed(result, exc)

    return result


def _validate(provider: Any, source: Any, options: AnalysisOptions):
    validate_analysis_inputs(provider, source, rows=options.rows, cols=options.cols)
    objects = RequestValidator().validate_objects(options.objects)
    if float(options.pad_ratio) < 0:
        raise InvalidInputError(f"pad_ratio must be >= 0, got {options.pad_ratio}", "pad_ratio")
    if int(options.max_areas) < 1:
        raise InvalidInputError(f"max_areas must be >= 1, got {options.max_areas}", "max_areas")
    return options.grid_spec(), objects


def _boxes(areas: List[Area], geometry: GridGeometry, pad_ratio: float) -> List[Box]:
    out: List[Box] = []
    for area in areas:
        rect = cells_to_rect(area.cells, geometry)
        if rect is None:
            logger.debug("Area %r has no valid cells", area.label)
            continue
        rect = apply_padding(geometry.to_original(rect), pad_ratio, geometry.original_w, geometry.original_h)
        out.append(Box(
            rect=rect,
            label=area.label,
            score=area.score,
            contiguous=is_contiguous(area.cells, geometry.rows, geometry.cols),
        ))
    return out


def _provider_name(provider: Any) -> str:
    ident = getattr(provider, "identifier", None)
    if callable(ident):
        return str(ident())
    return type(provider).__name__


def _failed(result: AnalysisResult, exc: BaseException) -> AnalysisResult:
    result.error = str(exc) or type(exc).__name__
    result.exception = exc
    return result
