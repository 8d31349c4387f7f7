"""
Image source loading and serialization.

Accepted sources: raw bytes, PIL images, numpy arrays, ``data:`` URLs,
``http(s)`` URLs and filesystem paths. Everything is decoded to an RGB PIL
image; anything that cannot be interpreted raises DecodeError.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Any, Optional, Tuple

import numpy as np
import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from gridspot.common.cv_utils import cv2_decode_rgb
from gridspot.errors import DecodeError
from gridspot.security.validation import ImageValidator


logger = logging.getLogger(__name__)

_MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


def load_image(
    source: Any,
    *,
    validator: Optional[ImageValidator] = None,
    timeout_s: float = 30.0,
) -> Image.Image:
    """
    Decode any supported image source into an RGB PIL image.

    Args:
        source: Bytes, PIL image, numpy array, data URL, http(s) URL or path.
        validator: Payload validator (defaults to the module defaults).
        timeout_s: Timeout for remote fetches.

    Returns:
        A new RGB image; the caller's object is never mutated.

    Raises:
        DecodeError: If the source cannot be interpreted as an image.
    """
    validator = validator or ImageValidator()

    if isinstance(source, Image.Image):
        img = source.copy()
    elif isinstance(source, np.ndarray):
        img = _image_from_array(source)
    elif isinstance(source, (bytes, bytearray, memoryview)):
        img = _decode_image_bytes(bytes(source), validator=validator)
    elif isinstance(source, Path):
        img = _decode_image_bytes(_read_path(source), validator=validator)
    elif isinstance(source, str):
        img = _decode_image_bytes(_read_string_source(source, timeout_s=timeout_s), validator=validator)
    else:
        raise DecodeError(f"Unsupported image source type: {type(source).__name__}")

    if img.mode != "RGB":
        img = _to_rgb(img)
    validator.validate_dimensions(*img.size)
    return img


def encode_image(image: Image.Image, *, fmt: str = "JPEG", quality: int = 92) -> Tuple[bytes, str]:
    """
    Serialize an image.

    Returns:
        Tuple of (payload bytes, mime type).
    """
    fmt_u = str(fmt or "JPEG").upper()
    if fmt_u == "JPG":
        fmt_u = "JPEG"
    out = io.BytesIO()
    if fmt_u == "JPEG":
        image.convert("RGB").save(out, format="JPEG", quality=int(quality))
    else:
        image.save(out, format=fmt_u)
    return out.getvalue(), _MIME_BY_FORMAT.get(fmt_u, f"image/{fmt_u.lower()}")


def to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{to_base64(data)}"


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """
    Split a base64 ``data:`` URL into (mime type, payload).

    Raises:
        DecodeError: If the URL is not a base64 data URL.
    """
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:"):
        raise DecodeError("Malformed data URL")
    meta = header[len("data:"):]
    parts = meta.split(";")
    if "base64" not in parts[1:]:
        raise DecodeError("Only base64 data URLs are supported")
    mime = parts[0] or "application/octet-stream"
    try:
        return mime, base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload in data URL: {exc}") from exc


def _read_string_source(source: str, *, timeout_s: float) -> bytes:
    s = source.strip()
    if s.startswith("data:"):
        return parse_data_url(s)[1]
    if s.startswith(("http://", "https://")):
        return _fetch_url(s, timeout_s=timeout_s)
    return _read_path(Path(s).expanduser())


def _fetch_url(url: str, *, timeout_s: float) -> bytes:
    try:
        resp = requests.get(url, timeout=float(max(timeout_s, 1.0)))
    except requests.RequestException as exc:
        raise DecodeError(f"Failed to fetch image from {url}: {exc}") from exc
    if int(resp.status_code) != 200:
        raise DecodeError(f"Failed to fetch image from {url}: HTTP {resp.status_code}")
    return resp.content


def _read_path(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Cannot read image file {path}: {exc}") from exc


def _decode_image_bytes(image_bytes: bytes, *, validator: ImageValidator) -> Image.Image:
    validator.validate_payload(image_bytes)

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img = ImageOps.exif_transpose(img)
            img.load()
            return _to_rgb(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.debug("PIL could not decode image (%s), trying OpenCV", exc)

    rgb = cv2_decode_rgb(image_bytes)
    if rgb is None:
        raise DecodeError("Failed to decode image bytes")
    return Image.fromarray(rgb)


def _image_from_array(arr: np.ndarray) -> Image.Image:
    if arr.ndim == 2 or (arr.ndim == 3 and arr.shape[2] in (3, 4)):
        if arr.size == 0:
            raise DecodeError("Image array is empty")
        try:
            a = arr
            if a.dtype != np.uint8:
                a = np.clip(a.astype(np.float32), 0.0, 255.0).astype(np.uint8)
            return _to_rgb(Image.fromarray(a))
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Image array of dtype {arr.dtype} cannot be read as pixels: {exc}") from exc
    raise DecodeError(f"Image array must be HxW, HxWx3 or HxWx4, got shape {arr.shape}")


def _to_rgb(img: Image.Image) -> Image.Image:
    if img.mode == "RGB":
        return img.copy()
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        bg = Image.new("RGB", rgba.size, (255, 255, 255))
        bg.paste(rgba, mask=rgba.split()[3])
        return bg
    return img.convert("RGB")
