"""Filesystem-safe names for per-city report files."""

from __future__ import annotations

import hashlib
import re

DEFAULT_SLUG_MAX_LENGTH = 50


def slugify(value: str, max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """Generate a URL-safe slug from free text.

    Falls back to ``unnamed`` when nothing alphanumeric remains.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:max_length] or "unnamed"


def city_slug(city: str, max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """Slug plus a short content hash so "Austin" and "austin" never collide."""
    suffix = hashlib.sha256(city.encode()).hexdigest()[:6]
    return f"{slugify(city, max_length)}_{suffix}"
