from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from productstamp.constants import HEIF_EXTENSIONS, SUPPORTED_EXTENSIONS
from productstamp.errors import DecodeFailure

_HEIF_REGISTERED = False


def _register_heif_opener() -> bool:
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return True
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return False
    register_heif_opener()
    _HEIF_REGISTERED = True
    return True


def decode_image_bytes(data: bytes, label: str = "image") -> Image.Image:
    """Decode to an owned RGBA image; alpha from a cutout is kept."""
    if not data:
        raise DecodeFailure(f"{label} is empty")
    _register_heif_opener()
    try:
        with Image.open(io.BytesIO(data)) as image:
            if getattr(image, "is_animated", False):
                image.seek(0)
            decoded = ImageOps.exif_transpose(image).convert("RGBA")
            decoded.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeFailure(f"cannot decode {label}: {exc}") from exc
    if decoded.width <= 0 or decoded.height <= 0:
        raise DecodeFailure(f"{label} has no pixels")
    return decoded


def read_image_file(path: Path) -> bytes:
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise RuntimeError(f"unsupported image format: {path.suffix}")
    if ext in HEIF_EXTENSIONS and not _register_heif_opener():
        raise RuntimeError("pillow-heif is required to decode HEIF/HEIC/HIF")
    return path.read_bytes()
