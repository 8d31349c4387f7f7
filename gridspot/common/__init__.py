"""
Common utilities shared across gridspot modules.
"""

from gridspot.common.cv_utils import cv2_decode_rgb, maybe_cv2
from gridspot.common.fonts import load_font
from gridspot.common.image_io import encode_image, load_image, parse_data_url, to_base64, to_data_url
from gridspot.common.math_utils import clamp01, score_percent, to_float

__all__ = [
    # CV utilities
    "cv2_decode_rgb",
    "maybe_cv2",
    # Fonts
    "load_font",
    # Image I/O
    "encode_image",
    "load_image",
    "parse_data_url",
    "to_base64",
    "to_data_url",
    # Math utilities
    "clamp01",
    "score_percent",
    "to_float",
]
