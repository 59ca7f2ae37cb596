"""Story content normalization components.

This package turns upstream WordPress HTML into canonical, reader-safe story
markup and derives plain-text excerpts from it.
"""

from .cache import NormalizationCache
from .normalizer import (
    DEFAULT_PARAGRAPH_CLASS,
    ContentNormalizer,
    NormalizerSettings,
    normalize_content,
)
from .plain_text import (
    estimate_reading_time,
    extract_excerpt,
    extract_plain_text,
    preserve_emphasis_only,
)
from .wordpress_markup import strip_wordpress_markup

__all__ = [
    "ContentNormalizer",
    "NormalizerSettings",
    "NormalizationCache",
    "DEFAULT_PARAGRAPH_CLASS",
    "normalize_content",
    "extract_plain_text",
    "preserve_emphasis_only",
    "extract_excerpt",
    "estimate_reading_time",
    "strip_wordpress_markup",
]
