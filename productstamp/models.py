from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from PIL import ImageColor

from productstamp import constants as C


@dataclass(frozen=True, slots=True)
class CornerPosition:
    """Overlay anchored by its padded corner."""

    corner: str

    def __post_init__(self) -> None:
        if self.corner not in C.VALID_CORNERS:
            raise ValueError(f"unknown corner: {self.corner!r}")


@dataclass(frozen=True, slots=True)
class CustomPosition:
    """Overlay anchored by its center, given in percent of the canvas side."""

    x_percent: float
    y_percent: float

    def __post_init__(self) -> None:
        for value in (self.x_percent, self.y_percent):
            if not 0.0 <= float(value) <= 100.0:
                raise ValueError(f"custom position must be within 0..100 percent, got: {value!r}")


PositionSpec = Union[CornerPosition, CustomPosition]

_CUSTOM_POINT = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*[,x;]\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")


def parse_position(value: Any) -> PositionSpec:
    """Accept a PositionSpec, a corner name or an ``"x,y"`` percent point."""
    if isinstance(value, (CornerPosition, CustomPosition)):
        return value
    if isinstance(value, dict):
        return CustomPosition(float(value["x"]), float(value["y"]))
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return CustomPosition(float(value[0]), float(value[1]))
    text = str(value or "").strip().lower()
    match = _CUSTOM_POINT.match(text)
    if match:
        return CustomPosition(float(match.group(1)), float(match.group(2)))
    return CornerPosition(re.sub(r"[\s_]+", "-", text))


def _check_color(value: str) -> str:
    ImageColor.getrgb(value)
    return value


@dataclass(slots=True)
class OverlayTransform:
    scale: float = 1.0
    rotation_degrees: float = 0.0
    position: PositionSpec = field(default_factory=lambda: CornerPosition(C.DEFAULT_PRICE_POSITION))

    def __post_init__(self) -> None:
        self.position = parse_position(self.position)
        if self.scale <= 0:
            raise ValueError(f"overlay scale must be positive, got: {self.scale!r}")


@dataclass(slots=True)
class PriceSpec:
    raw_text: str
    text_color: str = C.DEFAULT_PRICE_TEXT_COLOR
    background_color: str = C.DEFAULT_PRICE_BACKGROUND_COLOR


@dataclass(slots=True)
class CompositeOptions:
    """Per-invocation overlay options; every default lives here."""

    logo_image: bytes | None = None
    logo_position: PositionSpec = field(default_factory=lambda: CornerPosition(C.DEFAULT_LOGO_POSITION))
    logo_scale: float = 1.0
    logo_rotation_degrees: float = 0.0
    price_text: str | None = None
    price_position: PositionSpec = field(default_factory=lambda: CornerPosition(C.DEFAULT_PRICE_POSITION))
    price_text_color: str = C.DEFAULT_PRICE_TEXT_COLOR
    price_background_color: str = C.DEFAULT_PRICE_BACKGROUND_COLOR
    price_scale: float = 1.0
    price_rotation_degrees: float = 0.0

    def __post_init__(self) -> None:
        # None means "use the default corner", same as omitting the argument
        if self.logo_position is None:
            self.logo_position = CornerPosition(C.DEFAULT_LOGO_POSITION)
        if self.price_position is None:
            self.price_position = CornerPosition(C.DEFAULT_PRICE_POSITION)
        self.logo_position = parse_position(self.logo_position)
        self.price_position = parse_position(self.price_position)
        self.price_text_color = _check_color(self.price_text_color)
        self.price_background_color = _check_color(self.price_background_color)
        if self.logo_scale <= 0 or self.price_scale <= 0:
            raise ValueError("overlay scale must be positive")

    @property
    def logo_transform(self) -> OverlayTransform:
        return OverlayTransform(self.logo_scale, self.logo_rotation_degrees, self.logo_position)

    @property
    def price_transform(self) -> OverlayTransform:
        return OverlayTransform(self.price_scale, self.price_rotation_degrees, self.price_position)

    @property
    def price(self) -> PriceSpec | None:
        if not self.price_text:
            return None
        return PriceSpec(self.price_text, self.price_text_color, self.price_background_color)


@dataclass(slots=True)
class Shadow:
    blur: float = C.SHADOW_BLUR
    offset_y: float = C.SHADOW_OFFSET_Y
    opacity: float = C.SHADOW_OPACITY


@dataclass(slots=True)
class RenderSettings:
    canvas_size: int = C.CANVAS_SIZE
    background: str = C.CANVAS_BACKGROUND
    subject_fit_ratio: float = C.SUBJECT_FIT_RATIO
    corner_padding: int = C.CORNER_PADDING
    logo_max_size: int = C.LOGO_MAX_SIZE
    price_font_size: int = C.PRICE_FONT_SIZE
    price_padding: int = C.PRICE_PADDING
    price_corner_radius: int = C.PRICE_CORNER_RADIUS
    shadow: Shadow = field(default_factory=Shadow)
    export_quality: float = C.EXPORT_QUALITY
    font_path: Path | None = None

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "RenderSettings":
        shadow_cfg = cfg.get("shadow") or {}
        font_path = cfg.get("font_path")
        quality = float(cfg.get("export_quality", C.EXPORT_QUALITY))
        if not 0.0 < quality <= 1.0:
            raise ValueError(f"export_quality must be within (0, 1], got: {quality!r}")
        return cls(
            canvas_size=max(1, int(cfg.get("canvas_size", C.CANVAS_SIZE))),
            background=_check_color(str(cfg.get("background", C.CANVAS_BACKGROUND))),
            subject_fit_ratio=float(cfg.get("subject_fit_ratio", C.SUBJECT_FIT_RATIO)),
            corner_padding=int(cfg.get("corner_padding", C.CORNER_PADDING)),
            logo_max_size=max(1, int(cfg.get("logo_max_size", C.LOGO_MAX_SIZE))),
            price_font_size=max(1, int(cfg.get("price_font_size", C.PRICE_FONT_SIZE))),
            price_padding=max(0, int(cfg.get("price_padding", C.PRICE_PADDING))),
            price_corner_radius=max(0, int(cfg.get("price_corner_radius", C.PRICE_CORNER_RADIUS))),
            shadow=Shadow(
                blur=float(shadow_cfg.get("blur", C.SHADOW_BLUR)),
                offset_y=float(shadow_cfg.get("offset_y", C.SHADOW_OFFSET_Y)),
                opacity=float(shadow_cfg.get("opacity", C.SHADOW_OPACITY)),
            ),
            export_quality=quality,
            font_path=Path(font_path) if font_path else None,
        )


class Fidelity(str, enum.Enum):
    ADVANCED = "advanced"
    MINIMAL = "minimal"


@dataclass(slots=True)
class CompositeResult:
    data: bytes
    fidelity: Fidelity
    image_format: str = "jpeg"
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.fidelity is Fidelity.MINIMAL

    @property
    def extension(self) -> str:
        fmt = self.image_format.lower()
        return "jpg" if fmt in {"jpeg", "jpg"} else fmt
