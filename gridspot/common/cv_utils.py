"""
OpenCV helpers.

OpenCV is an optional accelerator: PIL handles decoding, and cv2 is only tried
for payloads PIL refuses.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np


def maybe_cv2() -> Optional[Any]:
    """
    Attempt to import OpenCV. Returns None if unavailable.

    Returns:
        cv2 module if available, None otherwise.
    """
    try:
        import cv2  # type: ignore

        return cv2
    except Exception:
        return None


def cv2_decode_rgb(image_bytes: bytes) -> Optional[np.ndarray]:
    """
    Decode bytes with OpenCV into an ``HxWx3`` uint8 RGB array.

    Returns None when OpenCV is missing or cannot decode the payload.
    """
    cv2 = maybe_cv2()
    if cv2 is None:
        return None
    arr = np.frombuffer(image_bytes, dtype=np.uint8)
    if arr.size == 0:
        return None
    bgr = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if bgr is None:
        return None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
