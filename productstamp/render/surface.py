from __future__ import annotations

import logging
from typing import Callable

from PIL import Image, ImageColor

from productstamp.errors import SurfaceAcquisitionFailure
from productstamp.models import RenderSettings
from productstamp.render.layout import fit_subject
from productstamp.render.transform import Affine, TransformStack

LOGGER = logging.getLogger(__name__)


class Surface:
    """Fixed-size RGBA drawing surface with an explicit transform stack.

    Every draw call maps the layer through the current transform, so overlay
    code never touches Pillow coordinates directly.
    """

    def __init__(self, size: int, background: str = "#FFFFFF") -> None:
        if size <= 0:
            raise SurfaceAcquisitionFailure(f"surface size must be positive, got: {size}")
        try:
            fill = ImageColor.getcolor(background, "RGBA")
            self._image = Image.new("RGBA", (size, size), fill)
        except (ValueError, MemoryError) as exc:
            raise SurfaceAcquisitionFailure(f"cannot allocate {size}x{size} surface: {exc}") from exc
        self.size = size
        self.transforms = TransformStack()

    @property
    def image(self) -> Image.Image:
        return self._image

    def transformed(self, center: tuple[float, float], rotation_degrees: float = 0.0, scale: float = 1.0):
        return self.transforms.pivot(center, rotation_degrees, scale)

    def with_transform(
        self,
        draw: Callable[[], None],
        center: tuple[float, float],
        rotation_degrees: float = 0.0,
        scale: float = 1.0,
    ) -> None:
        with self.transformed(center, rotation_degrees, scale):
            draw()

    def draw_image(
        self,
        layer: Image.Image,
        x: float,
        y: float,
        width: float | None = None,
        height: float | None = None,
    ) -> None:
        """Draw ``layer`` with its top-left at ``(x, y)`` in the current transform."""
        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        if width is not None and height is not None:
            target = (max(1, int(round(width))), max(1, int(round(height))))
            if target != layer.size:
                layer = layer.resize(target, Image.Resampling.LANCZOS)

        matrix = self.transforms.current @ Affine.translation(x, y)
        if self._is_pixel_aligned(matrix, layer.size):
            self._image.alpha_composite(layer, (int(matrix.c), int(matrix.f)))
            return

        warped = layer.transform(
            self._image.size,
            Image.Transform.AFFINE,
            tuple(matrix.inverse()),
            resample=Image.Resampling.BICUBIC,
        )
        self._image.alpha_composite(warped)

    def _is_pixel_aligned(self, matrix: Affine, layer_size: tuple[int, int]) -> bool:
        """Plain integer offset that keeps the whole layer on the surface."""
        linear = (Affine.translation(-matrix.c, -matrix.f) @ matrix).is_identity
        if not linear or not float(matrix.c).is_integer() or not float(matrix.f).is_integer():
            return False
        return (
            0 <= matrix.c
            and 0 <= matrix.f
            and matrix.c + layer_size[0] <= self.size
            and matrix.f + layer_size[1] <= self.size
        )

    def to_rgb(self) -> Image.Image:
        return self._image.convert("RGB")


def compose_subject(subject: Image.Image, settings: RenderSettings | None = None) -> Surface:
    """Allocate the canvas, fill the background and center-fit the subject."""
    settings = settings or RenderSettings()
    surface = Surface(settings.canvas_size, settings.background)
    x, y, width, height = fit_subject(
        subject.width,
        subject.height,
        canvas_size=settings.canvas_size,
        fit_ratio=settings.subject_fit_ratio,
    )
    LOGGER.debug(
        "subject %sx%s -> %.1fx%.1f at (%.1f, %.1f)",
        subject.width,
        subject.height,
        width,
        height,
        x,
        y,
    )
    surface.draw_image(subject, x, y, width, height)
    return surface
