from __future__ import annotations

import logging
import math

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from productstamp.models import OverlayTransform, PriceSpec, RenderSettings, Shadow
from productstamp.render.layout import box_center, fit_within, resolve_top_left
from productstamp.render.price import format_price, has_price_digits
from productstamp.render.surface import Surface
from productstamp.render.typography import load_font, text_width

LOGGER = logging.getLogger(__name__)


def draw_logo(
    surface: Surface,
    logo: Image.Image,
    transform: OverlayTransform,
    settings: RenderSettings,
) -> tuple[float, float, float, float]:
    """Draw the logo and return its untransformed box ``(x, y, w, h)``."""
    width, height = fit_within(logo.width, logo.height, settings.logo_max_size)
    x, y = resolve_top_left(
        width,
        height,
        transform.position,
        canvas_size=surface.size,
        padding=settings.corner_padding,
    )
    center = box_center(x, y, width, height)
    with surface.transformed(center, transform.rotation_degrees, transform.scale):
        surface.draw_image(logo, x, y, width, height)
    return (x, y, width, height)


def _shadow_layer(size: tuple[int, int], box: tuple[int, int, int, int], radius: int, shadow: Shadow) -> Image.Image:
    alpha = max(0, min(255, int(round(shadow.opacity * 255))))
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    left, top, right, bottom = box
    offset = int(round(shadow.offset_y))
    ImageDraw.Draw(layer).rounded_rectangle(
        [(left, top + offset), (right, bottom + offset)],
        radius=radius,
        fill=(0, 0, 0, alpha),
    )
    if shadow.blur > 0:
        # blur is expressed as twice the gaussian sigma
        layer = layer.filter(ImageFilter.GaussianBlur(radius=shadow.blur / 2.0))
    return layer


def render_price_tag(text: str, price: PriceSpec, settings: RenderSettings) -> tuple[Image.Image, int, int, int]:
    """Render the tag on its own layer.

    Returns ``(layer, margin, box_width, box_height)``; the box sits at
    ``(margin, margin)`` inside the layer, leaving room for the shadow.
    """
    font = load_font(settings.font_path, settings.price_font_size, bold=True)
    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    pad = settings.price_padding
    box_width = int(math.ceil(text_width(measure, text, font))) + pad * 2
    box_height = settings.price_font_size + pad * 2

    shadow = settings.shadow
    margin = int(math.ceil(shadow.blur * 2 + abs(shadow.offset_y)))
    size = (box_width + margin * 2, box_height + margin * 2)
    box = (margin, margin, margin + box_width - 1, margin + box_height - 1)

    layer = _shadow_layer(size, box, settings.price_corner_radius, shadow)
    draw = ImageDraw.Draw(layer)
    draw.rounded_rectangle(
        [box[:2], box[2:]],
        radius=settings.price_corner_radius,
        fill=ImageColor.getcolor(price.background_color, "RGBA"),
    )
    # text is drawn after the shadow pass so it casts none
    draw.text(
        (margin + pad, margin + pad),
        text,
        font=font,
        fill=ImageColor.getcolor(price.text_color, "RGBA"),
    )
    return layer, margin, box_width, box_height


def draw_price_tag(
    surface: Surface,
    price: PriceSpec,
    transform: OverlayTransform,
    settings: RenderSettings,
) -> tuple[float, float, float, float] | None:
    """Draw the price tag; returns its box, or ``None`` when nothing was drawn."""
    if not has_price_digits(price.raw_text):
        LOGGER.debug("price text %r has no digits, tag skipped", price.raw_text)
        return None
    text = format_price(price.raw_text)

    layer, margin, width, height = render_price_tag(text, price, settings)
    x, y = resolve_top_left(
        width,
        height,
        transform.position,
        canvas_size=surface.size,
        padding=settings.corner_padding,
    )
    center = box_center(x, y, width, height)
    with surface.transformed(center, transform.rotation_degrees, transform.scale):
        surface.draw_image(layer, x - margin, y - margin)
    return (x, y, float(width), float(height))
