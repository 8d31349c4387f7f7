"""
Numeric helpers shared by the reconstructor and the renderer.
"""

from __future__ import annotations

from typing import Any, Optional


def clamp01(x: float) -> float:
    """
    Clamp a value to the [0, 1] range.

    Args:
        x: Input value.

    Returns:
        Value clamped between 0.0 and 1.0.
    """
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return float(x)


def to_float(value: Any) -> Optional[float]:
    """
    Coerce an untrusted value to a finite float.

    Booleans, non-numeric strings, NaN and infinities yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if v != v or v in (float("inf"), float("-inf")):
        return None
    return v


def score_percent(score: float) -> int:
    """Rounded percentage for a model score, clamped to [0, 100]."""
    return int(round(clamp01(float(score)) * 100.0))
