"""Core datatypes shared across Bubbles Cafe modules.

Responsibilities:
- Represent immutable records exchanged between sync stages.
- Provide explicit JSON-ready serialization for exported story records.

Key types:
- `Story`, `SyncSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Story:
    """A story mirrored from a WordPress post.

    Attributes:
        wordpress_id: Upstream WordPress post id.
        slug: URL slug, also used as the export filename stem.
        title: Plain-text title.
        content: Normalized story HTML.
        excerpt: Plain-text excerpt for listings.
        reading_time_minutes: Estimated reading time in whole minutes.
        published_at: Upstream publication date string.
        categories: Resolved category names.
        word_count: Word count of the normalized content.
        metadata: Additional string metadata (import source, upstream status).
    """

    wordpress_id: int
    slug: str
    title: str
    content: str
    excerpt: str
    reading_time_minutes: int
    published_at: str
    categories: tuple[str, ...] = field(default_factory=tuple)
    word_count: int = 0
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable mapping of this story."""

        return {
            "wordpress_id": self.wordpress_id,
            "slug": self.slug,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "reading_time_minutes": self.reading_time_minutes,
            "published_at": self.published_at,
            "categories": list(self.categories),
            "word_count": self.word_count,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True, slots=True)
class SyncSummary:
    """Outcome counters for one sync run.

    Attributes:
        sync_id: Identifier of the run.
        started_at: ISO-8601 UTC start timestamp.
        finished_at: ISO-8601 UTC finish timestamp.
        total_processed: Number of upstream posts seen.
        created: Stories written for the first time.
        updated: Stories overwritten.
        failed: Posts that could not be converted.
        duration_seconds: Wall-clock duration of the run.
        cache_hit_rate: Normalization cache hit rate for the run.
    """

    sync_id: str
    started_at: str
    finished_at: str
    total_processed: int
    created: int
    updated: int
    failed: int
    duration_seconds: float
    cache_hit_rate: float = 0.0

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable mapping of this summary."""

        return {
            "sync_id": self.sync_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "total_processed": self.total_processed,
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 3),
            "cache_hit_rate": round(self.cache_hit_rate, 4),
        }
