"""WordPress to local story export sync.

Responsibilities:
- Paginate WordPress posts and convert each into a `Story`.
- Write story JSON records and a run summary through `StoryStore`.
- Map client and storage failures to stage-scoped `SyncStageError`s.

Key public types:
- `StorySync`: orchestrates one full or single-post sync run.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from .config import AppConfig
from .content.cache import NormalizationCache
from .content.normalizer import ContentNormalizer
from .errors import StoryConversionError, SyncStageError
from .io.storage import StoryStore
from .models.datatypes import Story, SyncSummary
from .telemetry.logger import RunLogger
from .wordpress.client import WordPressAPIError, WordPressClient
from .wordpress.converter import convert_post

_StageResult = TypeVar("_StageResult")

_FETCH_HINT = "Verify `WORDPRESS_API_URL` and network access, then rerun."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorySync:
    """Mirror WordPress posts into exported story JSON records."""

    def __init__(
        self,
        config: AppConfig,
        *,
        client: WordPressClient | None = None,
        store: StoryStore | None = None,
        normalizer: ContentNormalizer | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize collaborators, building defaults from `config` when omitted."""

        config.validate()
        self.config = config
        self.client = client or WordPressClient(
            base_url=config.wordpress_api_url,
            timeout_seconds=config.request_timeout_seconds,
            per_page=config.per_page,
        )
        self.store = store or StoryStore(config.output_dir)
        self.normalizer = normalizer or ContentNormalizer(config.normalizer_settings())
        self.cache = NormalizationCache(max_entries=config.cache_max_entries)
        self._run_logger = run_logger
        self._clock = clock

    def run(self) -> SyncSummary:
        """Sync every upstream post and return the run summary."""

        started_at = self._clock()
        sync_id = f"sync-{started_at.strftime('%Y%m%dT%H%M%SZ')}"
        category_names = self._run_stage("categories", self._fetch_categories)

        total_processed = created = updated = failed = 0
        page = 1
        while True:
            posts = self._run_stage("fetch", lambda: self._fetch_page(page))
            if not posts:
                break
            total_processed += len(posts)
            for post in posts:
                story = self._convert(post, category_names, import_source="wordpress-api")
                if story is None:
                    failed += 1
                    continue
                if self._export(story):
                    created += 1
                else:
                    updated += 1
            if len(posts) < self.client.per_page:
                break
            page += 1

        finished_at = self._clock()
        summary = SyncSummary(
            sync_id=sync_id,
            started_at=started_at.isoformat(),
            finished_at=finished_at.isoformat(),
            total_processed=total_processed,
            created=created,
            updated=updated,
            failed=failed,
            duration_seconds=(finished_at - started_at).total_seconds(),
            cache_hit_rate=self.cache.hit_rate(),
        )
        self._run_stage("summary", lambda: self.store.save_summary(summary))
        return summary

    def sync_one(self, post_id: int) -> tuple[Story, bool]:
        """Sync one post by WordPress id and return the story and its created flag."""

        category_names = self._run_stage("categories", self._fetch_categories)
        post = self._run_stage("fetch", lambda: self._fetch_single(post_id))
        try:
            story = convert_post(
                post,
                normalize=self._normalize,
                category_names=category_names,
                excerpt_length=self.config.excerpt_length,
                words_per_minute=self.config.words_per_minute,
                import_source="wordpress-api-single",
            )
        except StoryConversionError as exc:
            raise SyncStageError(
                stage="convert",
                detail=f"Failed to convert WordPress post `{post_id}`: {exc}",
                hint="Check that the post is published and exposes `id` and `slug`.",
            ) from exc
        return story, self._export(story)

    def _normalize(self, content: str) -> str:
        """Normalize content through the run-scoped cache."""

        return self.cache.get_or_normalize(content, self.normalizer)

    def _fetch_categories(self) -> dict[int, str]:
        """Fetch category names, degrading to an empty mapping on failure."""

        if not self.config.include_categories:
            return {}
        try:
            return self.client.fetch_categories()
        except WordPressAPIError as exc:
            self._log_warning("categories", "degraded", failure_kind=exc.failure_kind)
            return {}

    def _fetch_page(self, page: int) -> list[dict[str, Any]]:
        """Fetch one page of posts, mapping client failures to stage errors."""

        try:
            posts = self.client.fetch_posts(page)
        except WordPressAPIError as exc:
            raise SyncStageError(
                stage="fetch",
                detail=f"Failed to fetch WordPress posts page {page}: {exc}",
                hint=_FETCH_HINT,
            ) from exc
        self._log_event("fetch", "page", page=page, posts=len(posts))
        return posts

    def _fetch_single(self, post_id: int) -> dict[str, Any]:
        """Fetch one post, mapping client failures to stage errors."""

        try:
            return self.client.fetch_post(post_id)
        except WordPressAPIError as exc:
            raise SyncStageError(
                stage="fetch",
                detail=f"Failed to fetch WordPress post `{post_id}`: {exc}",
                hint=_FETCH_HINT,
            ) from exc

    def _convert(
        self,
        post: dict[str, Any],
        category_names: dict[int, str],
        *,
        import_source: str,
    ) -> Story | None:
        """Convert one post, logging and skipping malformed payloads."""

        try:
            return convert_post(
                post,
                normalize=self._normalize,
                category_names=category_names,
                excerpt_length=self.config.excerpt_length,
                words_per_minute=self.config.words_per_minute,
                import_source=import_source,
            )
        except StoryConversionError as exc:
            self._log_warning("convert", "skipped", error_type=type(exc).__name__)
            return None

    def _export(self, story: Story) -> bool:
        """Write one story record, mapping filesystem failures to stage errors."""

        try:
            created = self.store.save_story(story)
        except OSError as exc:
            raise SyncStageError(
                stage="export",
                detail=f"Failed to write story `{story.slug}`: {exc}",
                hint="Verify the output directory is writable.",
            ) from exc
        self._log_event(
            "export", "created" if created else "updated", slug=story.slug
        )
        return created

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)
        return result

    def _log_event(self, stage: str, event: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event(stage, event, **context)

    def _log_warning(self, stage: str, event: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_warning(stage, event, **context)
