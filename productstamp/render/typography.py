from __future__ import annotations

import logging
import platform
from functools import lru_cache
from pathlib import Path

from PIL import ImageDraw, ImageFont

LOGGER = logging.getLogger(__name__)


def _system_font_candidates(bold: bool) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        names = ["arialbd.ttf", "seguisb.ttf"] if bold else ["arial.ttf", "segoeui.ttf"]
        return [Path(r"C:\Windows\Fonts") / name for name in names]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Supplemental/Arial Bold.ttf" if bold else "/System/Library/Fonts/Supplemental/Arial.ttf"),
            Path("/System/Library/Fonts/Helvetica.ttc"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    suffix = "-Bold" if bold else ""
    return [
        Path(f"/usr/share/fonts/truetype/dejavu/DejaVuSans{suffix}.ttf"),
        Path(f"/usr/share/fonts/dejavu/DejaVuSans{suffix}.ttf"),
        Path(f"/usr/share/fonts/truetype/liberation/LiberationSans{suffix}.ttf"),
        Path(f"/usr/share/fonts/truetype/noto/NotoSans{suffix}.ttf"),
    ]


@lru_cache(maxsize=16)
def load_font(font_path: Path | None, size: int, bold: bool = True) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(bold))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                LOGGER.debug("font %s could not be loaded", candidate)
                continue
    return ImageFont.load_default(size=size)


def text_width(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont) -> float:
    """Advance width of ``text`` in pixels."""
    return float(draw.textlength(text, font=font))
