"""Command-line interface for Bubbles Cafe content tooling.

Responsibilities:
- Expose story HTML normalization helpers for files or stdin.
- Convert CLI arguments into `AppConfig` and run WordPress syncs.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_story_result, echo_sync_summary, exit_with_command_error
from .config import AppConfig, ConfigLoader
from .content.normalizer import ContentNormalizer, NormalizerSettings
from .content.plain_text import (
    estimate_reading_time,
    extract_excerpt,
    extract_plain_text,
    preserve_emphasis_only,
)
from .errors import SyncStageError
from .parsing import normalize_optional_string
from .sync import StorySync
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="bubbles-cafe",
    no_args_is_help=True,
    help="Bubbles Cafe story content CLI.",
)

InputFileArgument = Annotated[
    Path | None,
    typer.Argument(
        exists=True,
        dir_okay=False,
        readable=True,
        help="HTML input file. Reads stdin when omitted.",
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML config file."),
]
OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output directory for exported stories."),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", help="WordPress `wp/v2` base URL."),
]


def _read_input(input_file: Path | None) -> str:
    """Read HTML from a file or stdin."""

    if input_file is None:
        return sys.stdin.read()
    return input_file.read_text(encoding="utf-8")


def _load_config(
    config_file: Path | None,
    out: Path | None,
    api_url: str | None,
) -> AppConfig:
    """Resolve effective config from YAML or environment plus CLI overrides."""

    try:
        if config_file is not None:
            config = ConfigLoader.from_yaml(config_file)
        else:
            config = ConfigLoader.from_env()
    except FileNotFoundError as exc:
        raise SyncStageError(
            stage="config",
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise SyncStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config file or `BUBBLES_*` environment values and rerun.",
        ) from exc

    if out is not None:
        config = replace(config, output_dir=out)
    resolved_api_url = normalize_optional_string(api_url)
    if resolved_api_url is not None:
        config = replace(config, wordpress_api_url=resolved_api_url.rstrip("/"))
        try:
            config.validate()
        except ValueError as exc:
            raise SyncStageError(
                stage="config", detail=f"Invalid configuration: {exc}"
            ) from exc
    return config


@app.command("normalize")
def normalize_command(
    input_file: InputFileArgument = None,
    paragraph_class: Annotated[
        str | None,
        typer.Option("--paragraph-class", help="Override the canonical paragraph class."),
    ] = None,
) -> None:
    """Print normalized, reader-safe story HTML."""

    settings = NormalizerSettings()
    if paragraph_class is not None:
        try:
            settings = NormalizerSettings(paragraph_class=paragraph_class)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--paragraph-class") from exc
    normalizer = ContentNormalizer(settings)
    typer.echo(normalizer.normalize(_read_input(input_file)))


@app.command("plain-text")
def plain_text_command(input_file: InputFileArgument = None) -> None:
    """Print the plain text of story HTML."""

    typer.echo(extract_plain_text(_read_input(input_file)))


@app.command("emphasis")
def emphasis_command(input_file: InputFileArgument = None) -> None:
    """Print story text keeping only emphasis markup."""

    typer.echo(preserve_emphasis_only(_read_input(input_file)))


@app.command("excerpt")
def excerpt_command(
    input_file: InputFileArgument = None,
    max_length: Annotated[
        int,
        typer.Option("--max-length", min=1, help="Maximum excerpt length in characters."),
    ] = 200,
    words_per_minute: Annotated[
        int,
        typer.Option("--wpm", min=1, help="Reading speed in words per minute."),
    ] = 200,
) -> None:
    """Print a listing excerpt and reading-time estimate."""

    html = _read_input(input_file)
    typer.echo(extract_excerpt(html, max_length=max_length))
    typer.echo(f"Reading time (min): {estimate_reading_time(html, words_per_minute)}")


@app.command("sync")
def sync_command(
    config_file: ConfigOption = None,
    out: OutOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Mirror all WordPress posts into exported story JSON records."""

    try:
        config = _load_config(config_file, out, api_url)
        summary = StorySync(config, run_logger=RunLogger()).run()
    except Exception as exc:
        exit_with_command_error("sync", exc)

    echo_sync_summary(summary)
    typer.echo(f"Stories: {config.output_dir / 'stories'}")


@app.command("sync-post")
def sync_post_command(
    post_id: Annotated[int, typer.Argument(min=1, help="WordPress post id.")],
    config_file: ConfigOption = None,
    out: OutOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """Mirror one WordPress post by id."""

    try:
        config = _load_config(config_file, out, api_url)
        story, created = StorySync(config, run_logger=RunLogger()).sync_one(post_id)
    except Exception as exc:
        exit_with_command_error("sync-post", exc)

    echo_story_result(story, created)


def main() -> None:
    """Run the Bubbles Cafe CLI."""

    app()
