from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    text = (value or "").strip()
    if not text:
        text = fallback
    text = INVALID_FILENAME_CHARS.sub("_", text)
    text = re.sub(r"\s+", "_", text)
    text = text.strip(" ._")
    return text or fallback


def sanitize_filename(value: str, fallback: str = "output") -> str:
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_output_name(
    name_template: str,
    source: Path,
    extension: str,
    *,
    fidelity: str = "advanced",
    when: datetime | None = None,
) -> str:
    ext = extension.lower().lstrip(".")
    moment = when or datetime.now()
    values = {
        "stem": sanitize_token(source.stem, fallback="image"),
        "date": moment.strftime("%Y%m%d_%H%M%S"),
        "timestamp": str(int(moment.timestamp() * 1000)),
        "fidelity": sanitize_token(fidelity),
        "ext": ext,
    }
    try:
        rendered = name_template.format(**values)
    except KeyError as exc:
        missing = str(exc).strip("'")
        raise ValueError(f"name template contains unknown key: {missing}") from exc
    except (IndexError, AttributeError) as exc:
        raise ValueError(f"name template is malformed: {name_template!r}") from exc

    rendered = sanitize_filename(rendered, fallback=f"{values['stem']}__post.{ext}")
    if not Path(rendered).suffix:
        rendered = f"{rendered}.{ext}"
    return rendered
