from __future__ import annotations

from pathlib import Path

from productstamp.constants import SUPPORTED_EXTENSIONS


def discover_inputs(
    input_path: Path,
    recursive: bool = False,
    exclude: Path | None = None,
) -> list[Path]:
    """Supported image files under ``input_path``, skipping anything inside ``exclude``."""
    if input_path.is_file():
        return [input_path] if input_path.suffix.lower() in SUPPORTED_EXTENSIONS else []
    if not input_path.exists():
        return []
    candidates = input_path.rglob("*") if recursive else input_path.iterdir()
    files = [p for p in candidates if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS]
    if exclude is not None:
        exclude = exclude.resolve(strict=False)
        files = [p for p in files if exclude not in p.resolve(strict=False).parents]
    return sorted(files)
