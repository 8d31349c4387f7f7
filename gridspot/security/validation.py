"""
Input validation for gridspot.

Validates image payloads and analysis inputs before any work is attempted:
- Oversized or empty uploads
- Unknown image containers
- Missing image source or model provider
- Non-positive grid dimensions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Set, Tuple

from gridspot.errors import DecodeError, InvalidInputError


@dataclass
class ValidationConfig:
    """Configuration for input validation."""

    # Image limits
    max_image_bytes: int = 20 * 1024 * 1024  # 20MB
    max_dimension: int = 16384
    min_dimension: int = 1
    allowed_formats: Set[str] = None  # Set in __post_init__

    # Prompt limits
    max_objects_length: int = 2000

    # Grid limits
    max_grid_cells: int = 64 * 64

    def __post_init__(self):
        if self.allowed_formats is None:
            self.allowed_formats = {"png", "jpg", "webp", "gif", "bmp", "tiff"}


# Default configuration
DEFAULT_CONFIG = ValidationConfig()


class ImageValidator:
    """
    Validates raw image payloads.

    Checks:
    - Payload size limits
    - Container format from magic bytes
    - Decoded dimensions
    """

    # Magic bytes for common image formats
    MAGIC_BYTES = {
        b'\x89PNG\r\n\x1a\n': 'png',
        b'\xff\xd8\xff': 'jpg',
        b'GIF87a': 'gif',
        b'GIF89a': 'gif',
        b'BM': 'bmp',
        b'II*\x00': 'tiff',
        b'MM\x00*': 'tiff',
    }

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def validate_payload(self, image_bytes: bytes) -> str:
        """
        Validate raw bytes before decoding and return the detected format.

        Raises:
            DecodeError: If the payload is empty or not a recognized image
                container (unless "unknown" is an allowed format).
            InvalidInputError: If the payload is too large or of a disallowed format.
        """
        if not image_bytes:
            raise DecodeError("Image data is empty")

        size = len(image_bytes)
        if size > self.config.max_image_bytes:
            max_mb = self.config.max_image_bytes / (1024 * 1024)
            raise InvalidInputError(f"Image exceeds maximum size of {max_mb:.1f}MB", "image")

        detected_format = self.detect_format(image_bytes)
        if detected_format not in self.config.allowed_formats:
            if detected_format == 'unknown':
                raise DecodeError("Unrecognized image format")
            raise InvalidInputError(
                f"Image format '{detected_format}' not allowed. "
                f"Allowed: {', '.join(sorted(self.config.allowed_formats))}",
                "image",
            )
        return detected_format

    def validate_dimensions(self, width: int, height: int) -> Tuple[int, int]:
        """Check decoded dimensions against configured bounds."""
        if width < self.config.min_dimension or height < self.config.min_dimension:
            raise DecodeError(
                f"Image too small ({width}x{height}). "
                f"Minimum: {self.config.min_dimension}x{self.config.min_dimension}"
            )
        if width > self.config.max_dimension or height > self.config.max_dimension:
            raise InvalidInputError(
                f"Image too large ({width}x{height}). "
                f"Maximum: {self.config.max_dimension}x{self.config.max_dimension}",
                "image",
            )
        return int(width), int(height)

    def detect_format(self, data: bytes) -> str:
        """Detect image format from magic bytes."""
        if len(data) >= 12 and data[:4] == b'RIFF' and data[8:12] == b'WEBP':
            return 'webp'
        for magic, fmt in self.MAGIC_BYTES.items():
            if data.startswith(magic):
                return fmt
        return 'unknown'


class RequestValidator:
    """Validates analysis parameters."""

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def validate_provider(self, provider: Any) -> Any:
        """
        Ensure a model provider exposes a callable ``generate``.

        Raises:
            InvalidInputError: If the provider is missing or incomplete.
        """
        if provider is None:
            raise InvalidInputError("A model provider is required", "provider")
        if not callable(getattr(provider, "generate", None)):
            raise InvalidInputError("Provider does not implement generate()", "provider")
        return provider

    def validate_source(self, source: Any) -> Any:
        if source is None:
            raise InvalidInputError("An image source is required", "source")
        if isinstance(source, (str, bytes, bytearray)) and not source:
            raise InvalidInputError("Image source is empty", "source")
        return source

    def validate_grid(self, rows: int, cols: int) -> Tuple[int, int]:
        """Check that a grid is positive and not absurdly fine."""
        if int(rows) <= 0 or int(cols) <= 0:
            raise InvalidInputError(f"Grid must be at least 1x1, got {rows}x{cols}", "grid")
        if int(rows) * int(cols) > self.config.max_grid_cells:
            raise InvalidInputError(
                f"Grid {rows}x{cols} exceeds {self.config.max_grid_cells} cells",
                "grid",
            )
        return int(rows), int(cols)

    def validate_objects(self, objects: str) -> str:
        """
        Normalize the objects-of-interest text.

        Returns:
            The text with whitespace collapsed.
        """
        text = " ".join(str(objects or "").split())
        if not text:
            raise InvalidInputError("Objects of interest cannot be empty", "objects")
        if len(text) > self.config.max_objects_length:
            raise InvalidInputError(
                f"Objects of interest too long (max {self.config.max_objects_length} chars)",
                "objects",
            )
        return text


def validate_image_bytes(image_bytes: bytes) -> str:
    """
    Convenience function to validate an image payload.

    Returns:
        Detected format name.
    """
    validator = ImageValidator()
    return validator.validate_payload(image_bytes)


def validate_analysis_inputs(provider: Any, source: Any, *, rows: int, cols: int) -> None:
    """Fail fast on a missing provider/source or an invalid grid."""
    validator = RequestValidator()
    validator.validate_provider(provider)
    validator.validate_source(source)
    validator.validate_grid(rows, cols)
