"""
Input validation for gridspot.

Rejects empty or oversized image payloads, disallowed formats, missing
providers or sources and unusable grids before any work is attempted.
"""

from gridspot.security.validation import (
    ImageValidator,
    RequestValidator,
    ValidationConfig,
    validate_analysis_inputs,
    validate_image_bytes,
)

__all__ = [
    "ImageValidator",
    "RequestValidator",
    "ValidationConfig",
    "validate_analysis_inputs",
    "validate_image_bytes",
]
