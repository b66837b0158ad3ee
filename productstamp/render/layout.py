from __future__ import annotations

from productstamp import constants as C
from productstamp.models import CornerPosition, CustomPosition, PositionSpec


def resolve_top_left(
    box_width: float,
    box_height: float,
    spec: PositionSpec,
    *,
    canvas_size: int = C.CANVAS_SIZE,
    padding: float = C.CORNER_PADDING,
) -> tuple[float, float]:
    """Return the top-left draw point for a box placed by ``spec``.

    Corners keep ``padding`` from both adjacent edges. Custom points place the
    box center at the given percentage of the canvas side and are not clamped,
    so the box may extend past the canvas.
    """
    if isinstance(spec, CustomPosition):
        center_x = spec.x_percent / 100.0 * canvas_size
        center_y = spec.y_percent / 100.0 * canvas_size
        return (center_x - box_width / 2.0, center_y - box_height / 2.0)

    if not isinstance(spec, CornerPosition):
        raise TypeError(f"unsupported position spec: {spec!r}")

    right = canvas_size - box_width - padding
    bottom = canvas_size - box_height - padding
    if spec.corner == C.CORNER_TOP_LEFT:
        return (padding, padding)
    if spec.corner == C.CORNER_TOP_RIGHT:
        return (right, padding)
    if spec.corner == C.CORNER_BOTTOM_LEFT:
        return (padding, bottom)
    return (right, bottom)


def box_center(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    return (x + width / 2.0, y + height / 2.0)


def fit_subject(
    width: int,
    height: int,
    *,
    canvas_size: int = C.CANVAS_SIZE,
    fit_ratio: float = C.SUBJECT_FIT_RATIO,
) -> tuple[float, float, float, float]:
    """Center a subject on the canvas, longest side at ``fit_ratio`` of the side.

    The factor is applied to every subject, so inputs already smaller than
    the bound are scaled up to it.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"subject has empty size: {width}x{height}")
    bound = canvas_size * fit_ratio
    scale = min(bound / float(width), bound / float(height))
    scaled_width = width * scale
    scaled_height = height * scale
    x = (canvas_size - scaled_width) / 2.0
    y = (canvas_size - scaled_height) / 2.0
    return (x, y, scaled_width, scaled_height)


def fit_within(width: int, height: int, max_side: float) -> tuple[float, float]:
    """Shrink to fit a ``max_side`` square, never enlarging."""
    if width <= 0 or height <= 0:
        raise ValueError(f"image has empty size: {width}x{height}")
    scale = min(1.0, max_side / float(width), max_side / float(height))
    return (width * scale, height * scale)
