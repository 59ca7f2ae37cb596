"""Input/output adapters for exported story records."""

from .storage import StoryStore

__all__ = ["StoryStore"]
