from __future__ import annotations

import asyncio
import io
import logging
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from PIL import Image

from productstamp.constants import DEFAULT_CUTOUT_MODEL
from productstamp.errors import CutoutFailure

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CutoutConfig:
    """Passed through to the background-removal engine untouched."""

    model: str = DEFAULT_CUTOUT_MODEL
    output_format: str = "png"
    quality: float = 0.8

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "CutoutConfig":
        section = cfg.get("cutout") or {}
        return cls(
            model=str(section.get("model") or DEFAULT_CUTOUT_MODEL),
            output_format=str(section.get("format") or "png").lower(),
            quality=float(section.get("quality", 0.8)),
        )


CutoutEngine = Callable[[bytes, CutoutConfig], Awaitable[bytes]]

_SESSIONS: dict[str, Any] = {}
_SESSIONS_LOCK = threading.Lock()


def _import_rembg():
    try:
        import rembg
    except ImportError as exc:
        raise CutoutFailure(
            "rembg is not installed. Install the cutout extra (`pip install productstamp[cutout]`)."
        ) from exc
    return rembg


def _get_session(model: str):
    with _SESSIONS_LOCK:
        session = _SESSIONS.get(model)
        if session is None:
            rembg = _import_rembg()
            LOGGER.info("Loading cutout model %s", model)
            session = rembg.new_session(model)
            _SESSIONS[model] = session
        return session


def _encode_output(png_bytes: bytes, config: CutoutConfig) -> bytes:
    fmt = config.output_format.lower()
    if fmt == "png":
        return png_bytes
    with Image.open(io.BytesIO(png_bytes)) as image:
        buffer = io.BytesIO()
        quality = max(1, min(100, int(round(config.quality * 100))))
        if fmt in {"jpeg", "jpg"}:
            image.convert("RGB").save(buffer, format="JPEG", quality=quality)
        else:
            image.save(buffer, format=fmt.upper(), quality=quality)
    return buffer.getvalue()


def _remove_background_blocking(image: bytes, config: CutoutConfig) -> bytes:
    session = _get_session(config.model)
    rembg = _import_rembg()
    try:
        result = rembg.remove(image, session=session)
    except Exception as exc:
        raise CutoutFailure(f"background removal failed: {exc}") from exc
    if not isinstance(result, (bytes, bytearray)) or not result:
        raise CutoutFailure("background removal returned no image data")
    return _encode_output(bytes(result), config)


async def remove_background(image: bytes, config: CutoutConfig | None = None) -> bytes:
    """Default cutout engine backed by rembg; inference runs in a worker thread."""
    config = config or CutoutConfig()
    return await asyncio.to_thread(_remove_background_blocking, image, config)


async def run_cutout(
    engine: CutoutEngine,
    image: bytes,
    config: CutoutConfig,
    timeout: float | None = None,
) -> bytes:
    """Await ``engine`` and fold every failure into :class:`CutoutFailure`."""
    try:
        if timeout is not None:
            result = await asyncio.wait_for(engine(image, config), timeout=timeout)
        else:
            result = await engine(image, config)
    except CutoutFailure:
        raise
    except asyncio.TimeoutError as exc:
        raise CutoutFailure(f"background removal timed out after {timeout}s") from exc
    except Exception as exc:
        raise CutoutFailure(f"background removal failed: {exc}") from exc
    if not result:
        raise CutoutFailure("background removal returned no image data")
    return bytes(result)


def preload_model(config: CutoutConfig | None = None) -> bool:
    """Load the model session ahead of the first request."""
    config = config or CutoutConfig()
    try:
        LOGGER.info("Preloading cutout model %s...", config.model)
        _get_session(config.model)
    except Exception as exc:
        LOGGER.error("Preloading failed: %s", exc)
        return False
    LOGGER.info("Cutout model %s preloaded.", config.model)
    return True
