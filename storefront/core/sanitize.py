"""Normalization helpers for data coming from the spreadsheet and the form."""
from __future__ import annotations

import re
from typing import Any


def clean_text(value: Any) -> str:
    """Return ``value`` as a stripped string; ``None`` becomes empty.

    Example:
        >>> clean_text("  Иван ")
        'Иван'
    """
    if value is None:
        return ""
    return str(value).strip()


def clean_optional_text(value: Any) -> str | None:
    """Like :func:`clean_text` but blank values become ``None``."""
    text = clean_text(value)
    return text or None


def normalize_image_path(value: Any) -> str | None:
    """Turn an image cell from the sheet into a path the Mini App can load.

    Example:
        >>> normalize_image_path("public/images/milk.jpg")
        '/images/milk.jpg'
        >>> normalize_image_path("https://cdn.example.com/milk.jpg")
        'https://cdn.example.com/milk.jpg'
        >>> normalize_image_path("milk.jpg")
        '/milk.jpg'
    """
    path = clean_text(value)
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    if path.startswith("/"):
        return path
    if path.startswith("public/"):
        return "/" + re.sub(r"^public/", "", path)
    return "/" + path
