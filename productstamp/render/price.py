from __future__ import annotations

import re

PRICE_MARKER = "rs"
PRICE_SUFFIX = "/="

_NON_NUMERIC = re.compile(r"[^0-9.]")


def extract_numeric(text: str) -> str:
    return _NON_NUMERIC.sub("", text or "")


def has_price_digits(text: str | None) -> bool:
    """True when the text carries at least one digit worth drawing as a price."""
    return any(ch.isdigit() for ch in extract_numeric(text or ""))


def format_price(raw: str | None) -> str:
    """Normalize free-form price input into ``Rs {amount}/=``.

    Text that already names the currency is kept as typed and only gets the
    ``/=`` suffix appended. Input without digits comes back trimmed and
    untouched. Formatting is idempotent.
    """
    text = (raw or "").strip()
    numeric = extract_numeric(text)
    if not any(ch.isdigit() for ch in numeric):
        return text

    lowered = text.lower()
    if PRICE_MARKER not in lowered:
        return f"Rs {numeric}{PRICE_SUFFIX}"
    if lowered.startswith(PRICE_MARKER) and not text.endswith(PRICE_SUFFIX):
        return f"{text}{PRICE_SUFFIX}"
    return text
