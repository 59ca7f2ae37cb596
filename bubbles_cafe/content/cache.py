"""Bounded cache for normalized story HTML.

Responsibilities:
- Key entries by a hash of the paragraph class and the raw content.
- Evict least recently used entries once the bound is reached.
- Track hit/miss counters for sync diagnostics.

The cache belongs to its caller; `ContentNormalizer` itself keeps no state.
"""

from __future__ import annotations

from collections import OrderedDict
from hashlib import sha256
from typing import Any

from .normalizer import ContentNormalizer, extract_rendered_html


class NormalizationCache:
    """LRU cache of normalized HTML keyed by content hash."""

    def __init__(self, max_entries: int = 256) -> None:
        """Initialize an empty cache holding at most `max_entries` entries."""

        if max_entries <= 0:
            raise ValueError("`max_entries` must be a positive integer.")
        self.max_entries = max_entries
        self.entries: OrderedDict[str, str] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(content: str, paragraph_class: str) -> str:
        """Build a deterministic cache key for raw content and class marker."""

        digest = sha256(f"{paragraph_class}\n{content}".encode("utf-8")).hexdigest()
        return f"normalized:{digest}"

    def get_or_normalize(self, content: Any, normalizer: ContentNormalizer) -> str:
        """Return cached normalized HTML, normalizing and storing on a miss."""

        raw = extract_rendered_html(content)
        key = self.make_key(raw, normalizer.paragraph_class)
        if key in self.entries:
            self.hits += 1
            self.entries.move_to_end(key)
            return self.entries[key]

        self.misses += 1
        normalized = normalizer.normalize(raw)
        self.entries[key] = normalized
        if len(self.entries) > self.max_entries:
            self.entries.popitem(last=False)
        return normalized

    def __len__(self) -> int:
        return len(self.entries)

    def hit_rate(self) -> float:
        """Return cache hit rate for the current cache lifecycle."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)
