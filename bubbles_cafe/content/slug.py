"""Deterministic slug helpers for filesystem-safe story identifiers.

Responsibilities:
- Normalize WordPress slugs (which may be percent-encoded) into stable ASCII.
- Keep slug behavior locale-independent for reproducible export filenames.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import unquote


def slugify_story_slug(value: str, fallback: str = "story") -> str:
    """Return a deterministic filesystem-safe ASCII slug for a story.

    Slugs with no ASCII-representable characters (Cyrillic, CJK) reduce to
    `fallback`, so callers exporting many stories should pass a unique one.
    """

    normalized = unicodedata.normalize("NFKD", unquote(value))
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    lowered = ascii_only.lower().strip()
    collapsed = re.sub(r"[^a-z0-9]+", "-", lowered)
    slug = collapsed.strip("-")
    return slug or fallback
