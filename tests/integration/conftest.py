"""Integration-test fixtures for deterministic, offline CLI behavior."""

from __future__ import annotations

import pytest

_CONFIG_ENV_VARS = (
    "BUBBLES_OUTPUT_DIR",
    "WORDPRESS_API_URL",
    "BUBBLES_PER_PAGE",
    "BUBBLES_REQUEST_TIMEOUT_SECONDS",
    "BUBBLES_PARAGRAPH_CLASS",
    "BUBBLES_EXCERPT_LENGTH",
    "BUBBLES_WORDS_PER_MINUTE",
    "BUBBLES_CACHE_MAX_ENTRIES",
    "BUBBLES_INCLUDE_CATEGORIES",
)


@pytest.fixture(autouse=True)
def _isolate_config_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear config environment variables so CLI runs use defaults."""

    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _block_wordpress_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail loudly if an integration test reaches the real WordPress API."""

    def _unexpected_get(*args: object, **kwargs: object) -> None:
        """Reject unmocked HTTP requests."""

        _ = kwargs
        raise AssertionError(f"Unexpected WordPress request: {args!r}")

    monkeypatch.setattr("bubbles_cafe.wordpress.client.requests.get", _unexpected_get)
