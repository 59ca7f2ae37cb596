"""Configuration model and loaders for Bubbles Cafe.

Responsibilities:
- Define sync and normalization settings as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `AppConfig`: normalized runtime settings for normalization and sync runs.
- `ConfigLoader`: static construction helpers for `AppConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .content.normalizer import DEFAULT_PARAGRAPH_CLASS, NormalizerSettings
from .parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_positive_float,
    parse_positive_int,
)


DEFAULT_WORDPRESS_API_URL = (
    "https://public-api.wordpress.com/wp/v2/sites/bubbleteameimei.wordpress.com"
)
_MAX_WORDPRESS_PER_PAGE = 100


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration for normalization and sync runs.

    Attributes:
        output_dir: Directory receiving exported story JSON files.
        wordpress_api_url: Base URL of the WordPress REST API (`.../wp/v2/...`).
        per_page: Posts requested per page (WordPress caps this at 100).
        request_timeout_seconds: Per-request HTTP timeout.
        paragraph_class: Canonical CSS class applied to story paragraphs.
        excerpt_length: Maximum excerpt length in characters.
        words_per_minute: Reading speed used for reading-time estimates.
        cache_max_entries: Bound of the normalization cache used during sync.
        include_categories: Whether to resolve category names during sync.
        extra: Additional metadata for future extensions.
    """

    output_dir: Path = Path("out")
    wordpress_api_url: str = DEFAULT_WORDPRESS_API_URL
    per_page: int = 20
    request_timeout_seconds: float = 20.0
    paragraph_class: str = DEFAULT_PARAGRAPH_CLASS
    excerpt_length: int = 200
    words_per_minute: int = 200
    cache_max_entries: int = 256
    include_categories: bool = True
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values before use."""

        if not self.wordpress_api_url.startswith(("http://", "https://")):
            raise ValueError("`wordpress_api_url` must be an http(s) URL.")
        if not 0 < self.per_page <= _MAX_WORDPRESS_PER_PAGE:
            raise ValueError(
                f"`per_page` must be between 1 and {_MAX_WORDPRESS_PER_PAGE}."
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be a positive number.")
        self.normalizer_settings()
        for field_name in ("excerpt_length", "words_per_minute", "cache_max_entries"):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"`{field_name}` must be a positive integer.")

    def normalizer_settings(self) -> NormalizerSettings:
        """Return normalizer settings derived from this config."""

        return NormalizerSettings(paragraph_class=self.paragraph_class)


class ConfigLoader:
    """Factory methods for creating `AppConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "output_dir",
            "wordpress_api_url",
            "per_page",
            "request_timeout_seconds",
            "paragraph_class",
            "excerpt_length",
            "words_per_minute",
            "cache_max_entries",
            "include_categories",
            "extra",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> AppConfig:
        """Create a validated config from a YAML file."""

        raw_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` could not be parsed: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a mapping at top level.")

        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> AppConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        defaults = AppConfig()

        output_dir = ConfigLoader._optional_env_string(env_map, "BUBBLES_OUTPUT_DIR")
        api_url = ConfigLoader._optional_env_string(env_map, "WORDPRESS_API_URL")
        per_page = ConfigLoader._optional_env_value(
            env_map, "BUBBLES_PER_PAGE", parse_positive_int
        )
        timeout = ConfigLoader._optional_env_value(
            env_map, "BUBBLES_REQUEST_TIMEOUT_SECONDS", parse_positive_float
        )
        paragraph_class = ConfigLoader._optional_env_string(env_map, "BUBBLES_PARAGRAPH_CLASS")
        excerpt_length = ConfigLoader._optional_env_value(
            env_map, "BUBBLES_EXCERPT_LENGTH", parse_positive_int
        )
        words_per_minute = ConfigLoader._optional_env_value(
            env_map, "BUBBLES_WORDS_PER_MINUTE", parse_positive_int
        )
        cache_max_entries = ConfigLoader._optional_env_value(
            env_map, "BUBBLES_CACHE_MAX_ENTRIES", parse_positive_int
        )
        include_categories = ConfigLoader._optional_env_boolean(
            env_map, "BUBBLES_INCLUDE_CATEGORIES"
        )

        config = AppConfig(
            output_dir=Path(output_dir) if output_dir is not None else defaults.output_dir,
            wordpress_api_url=(api_url or defaults.wordpress_api_url).rstrip("/"),
            per_page=per_page or defaults.per_page,
            request_timeout_seconds=timeout or defaults.request_timeout_seconds,
            paragraph_class=paragraph_class or defaults.paragraph_class,
            excerpt_length=excerpt_length or defaults.excerpt_length,
            words_per_minute=words_per_minute or defaults.words_per_minute,
            cache_max_entries=cache_max_entries or defaults.cache_max_entries,
            include_categories=(
                include_categories
                if include_categories is not None
                else defaults.include_categories
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> AppConfig:
        """Build and validate `AppConfig` from a parsed mapping payload."""

        unknown = sorted(
            set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS), key=str
        )
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        defaults = AppConfig()
        output_dir = normalize_optional_string(payload.get("output_dir"))
        api_url = normalize_optional_string(payload.get("wordpress_api_url"))
        paragraph_class = normalize_optional_string(payload.get("paragraph_class"))

        config = AppConfig(
            output_dir=Path(output_dir) if output_dir is not None else defaults.output_dir,
            wordpress_api_url=(api_url or defaults.wordpress_api_url).rstrip("/"),
            per_page=ConfigLoader._optional_typed(
                payload, "per_page", source_label, parse_positive_int, defaults.per_page
            ),
            request_timeout_seconds=ConfigLoader._optional_typed(
                payload,
                "request_timeout_seconds",
                source_label,
                parse_positive_float,
                defaults.request_timeout_seconds,
            ),
            paragraph_class=paragraph_class or defaults.paragraph_class,
            excerpt_length=ConfigLoader._optional_typed(
                payload, "excerpt_length", source_label, parse_positive_int,
                defaults.excerpt_length,
            ),
            words_per_minute=ConfigLoader._optional_typed(
                payload, "words_per_minute", source_label, parse_positive_int,
                defaults.words_per_minute,
            ),
            cache_max_entries=ConfigLoader._optional_typed(
                payload, "cache_max_entries", source_label, parse_positive_int,
                defaults.cache_max_entries,
            ),
            include_categories=ConfigLoader._optional_boolean(
                payload, "include_categories", source_label, defaults.include_categories
            ),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _optional_typed(
        payload: Mapping[str, Any],
        key: str,
        source_label: str,
        parser: Any,
        default: Any,
    ) -> Any:
        """Parse an optional typed field, keeping the default for absent/blank values."""

        if key not in payload or normalize_optional_string(payload[key]) is None:
            return default
        try:
            return parser(payload[key], key)
        except ValueError as exc:
            raise ValueError(f"{source_label} field {exc}") from exc

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default

        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))

    @staticmethod
    def _optional_env_value(env: Mapping[str, str], key: str, parser: Any) -> Any:
        """Read an optional typed environment value, naming the variable on failure."""

        raw_value = ConfigLoader._optional_env_string(env, key)
        if raw_value is None:
            return None
        try:
            return parser(raw_value, key)
        except ValueError as exc:
            raise ValueError(f"Environment variable {exc}") from exc

    @staticmethod
    def _optional_env_boolean(env: Mapping[str, str], key: str) -> bool | None:
        """Read an optional boolean from environment mapping."""

        if key not in env:
            return None
        parsed = parse_permissive_boolean(env.get(key))
        if parsed is None:
            raise ValueError(
                f"Environment variable `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
