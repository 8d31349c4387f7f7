"""Layered configuration: built-in defaults deep-merged with a YAML or JSON file."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gridspot.errors import InvalidInputError


DEFAULT_CONFIG: Dict[str, Any] = {
    "grid": {
        "rows": 12,
        "cols": 12,
        "margin": 48,
        "max_side": 1400,
        "line_color": [0, 0, 0, 89],
        "line_width": 1,
        "label_fill": [255, 255, 255, 247],
        "label_stroke": [0, 0, 0, 230],
        "label_size": 12,
        "label_stroke_width": 2,
        "format": "JPEG",
        "jpeg_quality": 92,
    },
    "analysis": {
        "objects": "objects of interest",
        "max_areas": 2,
        "pad_ratio": 0.02,
        "display_mode": "bbox",
        "language": "en",
        "grid_preview": False,
    },
    "provider": {
        "name": "openai",
        "model": None,
        "max_tokens": 1000,
        "timeout_s": 60,
    },
    "render": {
        "box_colors": [
            [30, 136, 229],
            [229, 57, 53],
            [67, 160, 71],
            [255, 152, 0],
            [156, 39, 176],
        ],
        "line_width": 3,
        "font_size": 16,
        "badge_size": 28,
        "highlight_color": [255, 0, 0, 77],
        "border_color": [255, 0, 0],
        "border_width": 2,
        "cell_font_size": 14,
    },
}


API_KEY_ENV = {
    "openai": ("OPENAI_API_KEY",),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "google": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
}


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """
    Defaults deep-merged with an optional YAML or JSON file.

    A missing or empty path returns a fresh copy of ``DEFAULT_CONFIG``.

    Raises:
        InvalidInputError: If the file cannot be read or parsed.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    p = str(path or "").strip()
    if not p:
        return cfg

    file_path = Path(p).expanduser().resolve()
    if not file_path.exists():
        return cfg

    try:
        text = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() == ".json":
            loaded = json.loads(text)
        else:
            loaded = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
        raise InvalidInputError(f"Cannot load config {file_path}: {exc}", "config") from exc

    if isinstance(loaded, dict):
        _deep_update(cfg, loaded)
    return cfg


def _deep_update(dst: Dict[str, Any], src: Dict[str, Any]) -> None:
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _deep_update(dst[k], v)
        else:
            dst[k] = v


def api_key_from_env(provider: str) -> Optional[str]:
    """First non-empty API key environment variable for a vendor."""
    for name in API_KEY_ENV.get(str(provider or "").lower(), ()):
        value = os.getenv(name)
        if value:
            return value
    return None
