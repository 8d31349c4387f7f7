"""
Error taxonomy for gridspot.

Hard failures (decode, invalid input, provider) are raised by the component
that detects them. The orchestrator converts decode and provider failures into
an ``AnalysisResult`` carrying the message; invalid input is raised to the
caller before any work starts. Soft failures (unparsable response,
out-of-range cell) are normally absorbed and only exist as classes so callers
can opt into raising them.
"""

from __future__ import annotations

from typing import Optional


class GridspotError(Exception):
    """Base class for all gridspot errors."""


class DecodeError(GridspotError):
    """Raised when an image source cannot be interpreted as a raster."""


class InvalidInputError(GridspotError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, field: str = "unknown"):
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}")


class ProviderError(GridspotError):
    """Raised when a model provider call fails or returns a non-success status."""

    def __init__(self, message: str, *, provider: str = "unknown", status_code: Optional[int] = None):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class UnparsableResponseError(GridspotError):
    """The model's answer could not be coerced into the expected JSON shape."""

    def __init__(self, message: str, raw: str = ""):
        self.message = message
        self.raw = raw
        super().__init__(message)


class OutOfRangeCellError(GridspotError):
    """A cell label failed format or bounds validation."""

    def __init__(self, label: str, rows: int, cols: int):
        self.label = label
        self.rows = rows
        self.cols = cols
        super().__init__(f"cell {label!r} is not valid for a {rows}x{cols} grid")
