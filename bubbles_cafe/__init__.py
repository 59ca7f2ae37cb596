"""Top-level package for Bubbles Cafe content tooling.

This package normalizes upstream WordPress story HTML into canonical,
reader-safe markup and mirrors WordPress posts into local story records. The
main entry points are `ContentNormalizer` and `StorySync`.
"""

from .content import ContentNormalizer, normalize_content
from .sync import StorySync

__all__ = ["ContentNormalizer", "StorySync", "normalize_content", "__version__"]

__version__ = "0.1.0"
