"""CLI tests for WordPress sync commands and their diagnostics."""

from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from bubbles_cafe.cli import app
from bubbles_cafe.errors import SyncStageError
from bubbles_cafe.models.datatypes import Story, SyncSummary


def _summary() -> SyncSummary:
    return SyncSummary(
        sync_id="sync-20241031T235900Z",
        started_at="2024-10-31T23:59:00+00:00",
        finished_at="2024-10-31T23:59:02+00:00",
        total_processed=4,
        created=3,
        updated=0,
        failed=1,
        duration_seconds=2.0,
        cache_hit_rate=0.25,
    )


def test_sync_command_prints_summary(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """`sync` should print run counters and the story export directory."""

    seen: dict[str, object] = {}

    def _fake_run(self: object) -> SyncSummary:
        """Record the resolved config and return a canned summary."""

        seen["config"] = getattr(self, "config")
        return _summary()

    monkeypatch.setattr("bubbles_cafe.cli.StorySync.run", _fake_run)
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["sync", "--out", str(tmp_path / "out"), "--api-url", "https://example.test/wp/v2/"],
    )

    assert result.exit_code == 0
    assert "Sync id: sync-20241031T235900Z" in result.output
    assert "Posts processed: 4" in result.output
    assert "Stories created: 3" in result.output
    assert "Posts skipped: 1" in result.output
    assert f"Stories: {tmp_path / 'out' / 'stories'}" in result.output
    config = seen["config"]
    assert getattr(config, "wordpress_api_url") == "https://example.test/wp/v2"
    assert getattr(config, "output_dir") == tmp_path / "out"


def test_sync_command_reports_missing_config_file(tmp_path: Path) -> None:
    """A missing `--config` path should fail at the `config` stage with a hint."""

    runner = CliRunner()

    result = runner.invoke(app, ["sync", "--config", str(tmp_path / "missing.yml")])

    assert result.exit_code == 1
    assert "sync failed at stage `config`" in result.output
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in result.output


def test_sync_command_reports_invalid_config_values(tmp_path: Path) -> None:
    """Invalid YAML values should be reported as config-stage failures."""

    config_path = tmp_path / "bubbles.yml"
    config_path.write_text("per_page: 0\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["sync", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "sync failed at stage `config`" in result.output
    assert "`per_page` must be a positive integer" in result.output


def test_sync_command_rejects_non_http_api_url() -> None:
    """`--api-url` overrides should be validated like configured URLs."""

    runner = CliRunner()

    result = runner.invoke(app, ["sync", "--api-url", "ftp://example.test"])

    assert result.exit_code == 1
    assert "sync failed at stage `config`" in result.output
    assert "http(s) URL" in result.output


def test_sync_command_reports_stage_error_with_hint(monkeypatch: MonkeyPatch) -> None:
    """Sync failures should print stage-aware diagnostics and exit with code 1."""

    def _failing_run(*_: object, **__: object) -> None:
        """Raise a stage-specific error to simulate an unreachable API."""

        raise SyncStageError(
            stage="fetch",
            detail="Failed to fetch WordPress posts page 1: connection refused",
            hint="Verify `WORDPRESS_API_URL` and network access, then rerun.",
        )

    monkeypatch.setattr("bubbles_cafe.cli.StorySync.run", _failing_run)
    runner = CliRunner()

    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 1
    assert "sync failed at stage `fetch`" in result.output
    assert "Hint: Verify `WORDPRESS_API_URL` and network access, then rerun." in result.output


def test_sync_post_command_prints_story_result(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """`sync-post` should report the story slug and whether it was created."""

    def _fake_sync_one(self: object, post_id: int) -> tuple[Story, bool]:
        """Return a canned story for the requested id."""

        _ = self
        story = Story(
            wordpress_id=post_id,
            slug="night-shift",
            title="Night Shift",
            content='<p class="story-paragraph">Boo.</p>',
            excerpt="Boo.",
            reading_time_minutes=4,
            published_at="2024-10-31T23:00:00",
        )
        return story, False

    monkeypatch.setattr("bubbles_cafe.cli.StorySync.sync_one", _fake_sync_one)
    runner = CliRunner()

    result = runner.invoke(app, ["sync-post", "12", "--out", str(tmp_path)])

    assert result.exit_code == 0
    assert "Story updated: night-shift (WordPress id 12)" in result.output
    assert "Reading time (min): 4" in result.output


def test_sync_post_command_reports_non_stage_error(monkeypatch: MonkeyPatch) -> None:
    """Unexpected exceptions should still be reported with exit code 1."""

    def _broken_sync_one(*_: object, **__: object) -> None:
        """Raise a plain runtime error."""

        raise RuntimeError("disk on fire")

    monkeypatch.setattr("bubbles_cafe.cli.StorySync.sync_one", _broken_sync_one)
    runner = CliRunner()

    result = runner.invoke(app, ["sync-post", "3"])

    assert result.exit_code == 1
    assert "sync-post failed: disk on fire" in result.output
