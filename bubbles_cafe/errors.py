"""Domain exceptions for sync and CLI diagnostics."""

from __future__ import annotations


class SyncStageError(RuntimeError):
    """Raised when a specific sync stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped sync error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class StoryConversionError(ValueError):
    """Raised when a WordPress post payload cannot be converted into a story."""
