"""Utility helpers for the ReelShelf service."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

from .sections import CONTENT_TYPE_ALIASES


# Characters left untouched by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def slugify(value: str) -> str:
    """Return a URL-friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower() or "content"


def normalize_content_type(value: str) -> str:
    """Map a feed's type label onto the canonical type value."""

    lowered = " ".join(value.strip().lower().split())
    try:
        return CONTENT_TYPE_ALIASES[lowered]
    except KeyError as exc:
        raise ValueError(f"Unsupported content type: {value!r}") from exc


def encode_uri_component(value: str) -> str:
    """Percent-encode a query value the way browsers encode URI components."""

    return quote(value, safe=_URI_COMPONENT_SAFE)


def ensure_content_id(raw_id: object, title: str, year: int) -> str:
    """Return the item identifier, deriving a stable one from title and year."""

    if raw_id is not None:
        text = str(raw_id).strip()
        if text:
            return text
    return f"{slugify(title)}-{year}"
