"""WordPress upstream integration: REST client and post conversion."""

from .client import WordPressAPIError, WordPressClient
from .converter import convert_post

__all__ = ["WordPressAPIError", "WordPressClient", "convert_post"]
