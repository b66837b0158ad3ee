from __future__ import annotations

import io

from PIL import Image

from productstamp.constants import EXPORT_QUALITY
from productstamp.errors import EncodeFailure
from productstamp.render.surface import Surface


def quality_percent(quality: float) -> int:
    """Map a 0..1 quality fraction onto Pillow's 1..100 JPEG scale."""
    return max(1, min(100, int(round(quality * 100))))


def encode_image(image: Image.Image, quality: float = EXPORT_QUALITY) -> bytes:
    buffer = io.BytesIO()
    try:
        image.convert("RGB").save(
            buffer,
            format="JPEG",
            quality=quality_percent(quality),
            optimize=True,
            progressive=True,
        )
    except (OSError, ValueError) as exc:
        raise EncodeFailure(f"JPEG encode failed: {exc}") from exc
    data = buffer.getvalue()
    if not data:
        raise EncodeFailure("JPEG encode produced no bytes")
    return data


def encode_surface(surface: Surface, quality: float = EXPORT_QUALITY) -> bytes:
    return encode_image(surface.image, quality=quality)
