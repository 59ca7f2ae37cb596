"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
sync summaries, and single-story sync results.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import SyncStageError
from .models.datatypes import Story, SyncSummary


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, SyncStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_sync_summary(summary: SyncSummary) -> None:
    """Print run-level sync counters."""

    typer.echo(f"Sync id: {summary.sync_id}")
    typer.echo(f"Posts processed: {summary.total_processed}")
    typer.echo(f"Stories created: {summary.created}")
    typer.echo(f"Stories updated: {summary.updated}")
    typer.echo(f"Posts skipped: {summary.failed}")
    typer.echo(f"Duration (s): {summary.duration_seconds:.3f}")


def echo_story_result(story: Story, created: bool) -> None:
    """Print the outcome of a single-story sync."""

    action = "created" if created else "updated"
    typer.echo(f"Story {action}: {story.slug} (WordPress id {story.wordpress_id})")
    typer.echo(f"Reading time (min): {story.reading_time_minutes}")
