from __future__ import annotations

import copy
import os
import platform
import sys
from pathlib import Path
from typing import Any

import yaml

from productstamp import constants as C

DEFAULT_CONFIG: dict[str, Any] = {
    "canvas_size": C.CANVAS_SIZE,
    "background": C.CANVAS_BACKGROUND,
    "subject_fit_ratio": C.SUBJECT_FIT_RATIO,
    "corner_padding": C.CORNER_PADDING,
    "logo_max_size": C.LOGO_MAX_SIZE,
    "logo_position": C.DEFAULT_LOGO_POSITION,
    "price_position": C.DEFAULT_PRICE_POSITION,
    "price_font_size": C.PRICE_FONT_SIZE,
    "price_padding": C.PRICE_PADDING,
    "price_corner_radius": C.PRICE_CORNER_RADIUS,
    "price_text_color": C.DEFAULT_PRICE_TEXT_COLOR,
    "price_background_color": C.DEFAULT_PRICE_BACKGROUND_COLOR,
    "shadow": {
        "blur": C.SHADOW_BLUR,
        "offset_y": C.SHADOW_OFFSET_Y,
        "opacity": C.SHADOW_OPACITY,
    },
    "export_quality": C.EXPORT_QUALITY,
    "font_path": None,
    "cutout": {
        "model": C.DEFAULT_CUTOUT_MODEL,
        "format": "png",
        "quality": 0.8,
        "timeout": None,
    },
    "name_template": "{stem}__post.{ext}",
}


def get_app_dir() -> Path:
    """Return the application root directory.

    - Frozen: directory containing the executable.
    - Development: project root (one level up from the package).
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent.parent


def _is_source_checkout(app_dir: Path) -> bool:
    return (app_dir / "pyproject.toml").is_file()


def get_user_data_dir() -> Path:
    """Writable per-user data directory.

    A source checkout (``pyproject.toml`` beside the package) keeps it in the
    project root; an installed package uses the platform config directory.
    """
    if not getattr(sys, "frozen", False) and _is_source_checkout(get_app_dir()):
        return get_app_dir()

    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "ProductStamp"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "ProductStamp"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "ProductStamp"
    return Path.home() / ".config" / "ProductStamp"


def get_config_path() -> Path:
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(
        yaml.safe_dump(copy.deepcopy(DEFAULT_CONFIG), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return cfg_path
