"""
Tolerant parsing of model answers.

Vision models wrap JSON in Markdown fences, add prose around it, or use
legacy field names. ``parse_model_response`` recovers the object when it can
and returns None when it cannot; it never raises.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gridspot.common.math_utils import to_float
from gridspot.grid.geometry import Area


logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")

_TRUE_STRINGS = {"true", "yes", "1"}


@dataclass(frozen=True)
class ParsedResponse:
    """Normalized detections decoded from a model answer."""

    areas: List[Area] = field(default_factory=list)
    no_detections: bool = False
    reason: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


def parse_model_response(raw: Any) -> Optional[ParsedResponse]:
    """
    Extract the detections object from a raw model answer.

    Steps: strip code fences, decode the first ``{`` .. last ``}`` span, fall
    back to decoding the whole cleaned text, then normalize legacy fields.

    Returns:
        ParsedResponse, or None when no JSON object can be recovered.
    """
    if not isinstance(raw, str):
        return None

    cleaned = strip_code_fences(raw)
    data = _decode_object(cleaned)
    if data is None:
        logger.debug("Model response is not parsable JSON: %.200r", raw)
        return None
    return _normalize(data)


def strip_code_fences(text: str) -> str:
    """Remove Markdown fence delimiters, with or without a language tag."""
    return _FENCE_RE.sub("", text)


def _decode_object(cleaned: str) -> Optional[Dict[str, Any]]:
    m = _JSON_SPAN_RE.search(cleaned)
    if m is not None:
        out = _loads(m.group(0))
        if isinstance(out, dict):
            return out

    out = _loads(cleaned.strip())
    if isinstance(out, dict):
        return out
    return None


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _normalize(data: Dict[str, Any]) -> ParsedResponse:
    if "no_anomalies" in data and "no_detections" not in data:
        data["no_detections"] = data["no_anomalies"]

    raw_areas = data.get("areas")
    if not isinstance(raw_areas, list):
        raw_areas = []
        data["areas"] = raw_areas

    areas: List[Area] = []
    for item in raw_areas:
        area = _coerce_area(item)
        if area is not None:
            areas.append(area)

    return ParsedResponse(
        areas=areas,
        no_detections=_as_bool(data.get("no_detections", False)),
        reason=_reason(data),
        data=data,
    )


def _coerce_area(item: Any) -> Optional[Area]:
    if not isinstance(item, dict):
        return None
    cells_raw = item.get("cells")
    if isinstance(cells_raw, str):
        cells_raw = [cells_raw]
    if not isinstance(cells_raw, list):
        return None
    cells = tuple(c.strip() for c in cells_raw if isinstance(c, str) and c.strip())
    if not cells:
        return None

    label = item.get("label")
    explanation = item.get("explanation")
    return Area(
        cells=cells,
        label=str(label) if label is not None else "",
        score=to_float(item.get("score")),
        explanation=str(explanation) if explanation is not None else "",
    )


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _reason(data: Dict[str, Any]) -> Optional[str]:
    reason = data.get("reason")
    if isinstance(reason, str) and reason:
        return reason
    # localized variants such as "reason_it"
    for key, value in data.items():
        if isinstance(key, str) and key.startswith("reason_") and isinstance(value, str) and value:
            return value
    return None
