"""Filesystem- and header-safe download names.

Event titles go straight into ``Content-Disposition``, so they are reduced to
ASCII letters, digits, ``_`` and ``-`` first. Case is kept; "Summer Fest" stays
readable as "Summer_Fest".
"""

from __future__ import annotations

import re
import unicodedata


_WHITESPACE_RE = re.compile(r"\s+")
_ALLOWED_RE = re.compile(r"[^A-Za-z0-9_-]+")
_UNDERSCORE_RUN_RE = re.compile(r"_+")
_DASH_RUN_RE = re.compile(r"-+")


def strip_diacritics(value: str) -> str:
    """Remove diacritics, e.g. "Märzen" -> "Marzen"."""
    normalized = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def slugify_filename(value: str | None, *, fallback: str = "Event", max_len: int = 80) -> str:
    """Return a safe filename stem (no extension)."""
    value = strip_diacritics((value or "").strip())
    value = _WHITESPACE_RE.sub("_", value)
    value = _ALLOWED_RE.sub("_", value)
    value = _UNDERSCORE_RUN_RE.sub("_", value)
    value = _DASH_RUN_RE.sub("-", value)
    value = value.strip("_-")

    if max_len and len(value) > max_len:
        value = value[:max_len].rstrip("_-")

    return value or fallback


def event_form_filename(title: str | None) -> str:
    return f"{slugify_filename(title)}_Form.pdf"
