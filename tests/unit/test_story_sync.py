"""Unit tests for WordPress story sync orchestration."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from io import StringIO
import json
from pathlib import Path
from typing import Any

import pytest

from bubbles_cafe.config import AppConfig
from bubbles_cafe.errors import SyncStageError
from bubbles_cafe.io.storage import StoryStore
from bubbles_cafe.sync import StorySync
from bubbles_cafe.telemetry.logger import RunLogger
from bubbles_cafe.wordpress.client import WordPressAPIError


def _post(post_id: int, slug: str, body: str = "<p>Hello</p>") -> dict[str, Any]:
    return {
        "id": post_id,
        "slug": slug,
        "title": {"rendered": slug.title()},
        "content": {"rendered": body},
        "excerpt": {"rendered": ""},
        "categories": [1],
    }


class _FakeWordPressClient:
    """WordPress client test double serving fixed pages."""

    def __init__(
        self,
        pages: list[list[dict[str, Any]]],
        *,
        per_page: int = 2,
        categories: dict[int, str] | None = None,
        categories_error: bool = False,
        fail_on_page: int | None = None,
    ) -> None:
        """Initialize canned pages and failure switches."""

        self.pages = pages
        self.per_page = per_page
        self.categories = categories if categories is not None else {1: "Horror"}
        self.categories_error = categories_error
        self.fail_on_page = fail_on_page
        self.requested_pages: list[int] = []

    def fetch_posts(self, page: int) -> list[dict[str, Any]]:
        """Return the canned page or `[]` past the end."""

        self.requested_pages.append(page)
        if page == self.fail_on_page:
            raise WordPressAPIError("boom", failure_kind="transport")
        if page > len(self.pages):
            return []
        return self.pages[page - 1]

    def fetch_post(self, post_id: int) -> dict[str, Any]:
        """Return the canned post with `post_id`."""

        for page in self.pages:
            for post in page:
                if post.get("id") == post_id:
                    return post
        raise WordPressAPIError(f"HTTP 404 for `/posts/{post_id}`.", failure_kind="http", status_code=404)

    def fetch_categories(self) -> dict[int, str]:
        """Return canned categories or fail when configured to."""

        if self.categories_error:
            raise WordPressAPIError("categories down", failure_kind="timeout")
        return self.categories


class _StepClock:
    """Deterministic clock advancing two seconds per call."""

    def __init__(self) -> None:
        """Initialize at a fixed UTC instant."""

        self.current = datetime(2024, 10, 31, 23, 59, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        """Return the current instant and advance."""

        value = self.current
        self.current += timedelta(seconds=2)
        return value


def _sync(tmp_path: Path, client: _FakeWordPressClient, sink: StringIO | None = None) -> StorySync:
    return StorySync(
        AppConfig(output_dir=tmp_path),
        client=client,  # type: ignore[arg-type]
        run_logger=RunLogger(sink=sink or StringIO()),
        clock=_StepClock(),
    )


def test_run_exports_every_page_and_writes_summary(tmp_path: Path) -> None:
    """A full run should page until a short page and export every story."""

    client = _FakeWordPressClient(
        [
            [_post(1, "first"), _post(2, "second")],
            [_post(3, "third")],
        ]
    )

    summary = _sync(tmp_path, client).run()

    assert client.requested_pages == [1, 2]
    assert summary.sync_id == "sync-20241031T235900Z"
    assert summary.total_processed == 3
    assert summary.created == 3
    assert summary.updated == 0
    assert summary.failed == 0
    assert summary.duration_seconds == 2.0

    store = StoryStore(tmp_path)
    first = store.load_story_payload("first")
    assert first["content"] == '<p class="story-paragraph">Hello</p>'
    assert first["categories"] == ["Horror"]
    assert first["excerpt"] == "Hello"
    saved_summary = json.loads((tmp_path / "sync_summary.json").read_text(encoding="utf-8"))
    assert saved_summary["total_processed"] == 3


def test_run_reports_updates_on_rerun_and_reuses_cache(tmp_path: Path) -> None:
    """A second run over the same posts should classify every write as an update."""

    client = _FakeWordPressClient([[_post(1, "first"), _post(2, "second", "<p>Hello</p>")]])
    _sync(tmp_path, client).run()

    summary = _sync(tmp_path, client).run()

    assert summary.created == 0
    assert summary.updated == 2
    assert summary.cache_hit_rate == 0.5


def test_run_stops_on_empty_page_when_last_page_is_full(tmp_path: Path) -> None:
    """A full final page should trigger one more request that ends pagination."""

    client = _FakeWordPressClient([[_post(1, "first"), _post(2, "second")]])

    summary = _sync(tmp_path, client).run()

    assert client.requested_pages == [1, 2]
    assert summary.total_processed == 2


def test_run_counts_unconvertible_posts_as_failed(tmp_path: Path) -> None:
    """Posts without a slug should be skipped, counted, and logged."""

    sink = StringIO()
    broken = _post(2, "second")
    broken["slug"] = ""
    client = _FakeWordPressClient([[_post(1, "first"), broken]], per_page=10)

    summary = _sync(tmp_path, client, sink).run()

    assert summary.total_processed == 2
    assert summary.created == 1
    assert summary.failed == 1
    assert "stage=convert event=skipped error_type=StoryConversionError" in sink.getvalue()


def test_run_degrades_when_categories_fail(tmp_path: Path) -> None:
    """Category lookup failures should log a warning and export without categories."""

    sink = StringIO()
    client = _FakeWordPressClient([[_post(1, "first")]], categories_error=True)

    _sync(tmp_path, client, sink).run()

    assert StoryStore(tmp_path).load_story_payload("first")["categories"] == []
    assert "level=WARNING stage=categories event=degraded failure_kind=timeout" in sink.getvalue()


def test_run_maps_fetch_failures_to_stage_error(tmp_path: Path) -> None:
    """Client failures while paging should stop the run at the `fetch` stage."""

    sink = StringIO()
    client = _FakeWordPressClient([[_post(1, "first"), _post(2, "second")]], fail_on_page=2)

    with pytest.raises(SyncStageError) as exc_info:
        _sync(tmp_path, client, sink).run()

    assert exc_info.value.stage == "fetch"
    assert "page 2" in exc_info.value.detail
    assert exc_info.value.hint is not None
    assert "stage=fetch event=failure error_type=SyncStageError" in sink.getvalue()
    assert not (tmp_path / "sync_summary.json").exists()


def test_sync_one_exports_single_post(tmp_path: Path) -> None:
    """Single-post sync should export the story and report creation state."""

    client = _FakeWordPressClient([[_post(7, "lucky")]])
    sync = _sync(tmp_path, client)

    story, created = sync.sync_one(7)
    _, created_again = sync.sync_one(7)

    assert story.slug == "lucky"
    assert story.metadata["import_source"] == "wordpress-api-single"
    assert created is True
    assert created_again is False


def test_sync_one_maps_missing_and_malformed_posts(tmp_path: Path) -> None:
    """Unknown ids fail at `fetch`; unconvertible payloads fail at `convert`."""

    broken = _post(8, "broken")
    broken["slug"] = None
    client = _FakeWordPressClient([[broken]])
    sync = _sync(tmp_path, client)

    with pytest.raises(SyncStageError) as missing:
        sync.sync_one(404)
    with pytest.raises(SyncStageError) as malformed:
        sync.sync_one(8)

    assert missing.value.stage == "fetch"
    assert malformed.value.stage == "convert"
