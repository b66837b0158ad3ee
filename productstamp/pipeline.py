"""Compositing pipeline with a two-state fallback.

``composite`` first removes the background, then tries the advanced path
(white canvas, centered subject, logo, price tag, JPEG). Any failure in the
advanced path degrades to the minimal result: the raw cutout bytes, with no
background fill, no overlays and the cutout's own size. Cutout failures are
fatal since there is nothing left to fall back on.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from productstamp.cutout import CutoutConfig, CutoutEngine, remove_background, run_cutout
from productstamp.decoders.image_decoder import decode_image_bytes
from productstamp.models import CompositeOptions, CompositeResult, Fidelity, RenderSettings
from productstamp.render.export import encode_surface
from productstamp.render.overlays import draw_logo, draw_price_tag
from productstamp.render.surface import compose_subject

LOGGER = logging.getLogger(__name__)


def render_composite(
    cutout_image: bytes,
    options: CompositeOptions,
    settings: RenderSettings | None = None,
) -> bytes:
    """Advanced path: returns the encoded composite or raises."""
    settings = settings or RenderSettings()
    subject = decode_image_bytes(cutout_image, label="subject")
    surface = compose_subject(subject, settings)

    if options.logo_image:
        logo = decode_image_bytes(options.logo_image, label="logo")
        draw_logo(surface, logo, options.logo_transform, settings)

    price = options.price
    if price is not None:
        draw_price_tag(surface, price, options.price_transform, settings)

    return encode_surface(surface, quality=settings.export_quality)


def _minimal_result(cutout_image: bytes, config: CutoutConfig, exc: BaseException) -> CompositeResult:
    return CompositeResult(
        data=cutout_image,
        fidelity=Fidelity.MINIMAL,
        image_format=config.output_format,
        error=f"{type(exc).__name__}: {exc}",
    )


async def composite(
    subject_image: bytes,
    options: CompositeOptions | None = None,
    *,
    settings: RenderSettings | None = None,
    cutout_config: CutoutConfig | None = None,
    cutout: CutoutEngine | None = None,
    timeout: float | None = None,
) -> CompositeResult:
    """Run one composite; cancel the awaiting task to abort it.

    ``timeout`` bounds the cutout step and is reported as ``CutoutFailure``.
    """
    options = options or CompositeOptions()
    settings = settings or RenderSettings()
    cutout_config = cutout_config or CutoutConfig()
    engine = cutout or remove_background

    cutout_image = await run_cutout(engine, subject_image, cutout_config, timeout=timeout)

    try:
        data = await asyncio.to_thread(render_composite, cutout_image, options, settings)
    except Exception as exc:
        LOGGER.warning("Advanced compositing failed, returning cutout only: %s", exc, exc_info=True)
        return _minimal_result(cutout_image, cutout_config, exc)
    return CompositeResult(data=data, fidelity=Fidelity.ADVANCED, image_format="jpeg")


def composite_sync(subject_image: bytes, options: CompositeOptions | None = None, **kwargs: Any) -> CompositeResult:
    return asyncio.run(composite(subject_image, options, **kwargs))
