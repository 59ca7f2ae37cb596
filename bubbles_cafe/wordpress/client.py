"""WordPress REST API client for story sync.

Responsibilities:
- Fetch paginated posts, single posts, and category names from `wp/v2`.
- Treat HTTP 400 on a page request as the end of pagination.
- Raise actionable client exceptions for sync-level error mapping.
"""

from __future__ import annotations

import json
import socket
from typing import Any

import requests

from ..parsing import coerce_int, normalize_optional_string

POST_FIELDS = "id,date,modified,status,title,content,excerpt,slug,categories"


class WordPressAPIError(RuntimeError):
    """Raised when a WordPress request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        """Initialize client error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code


class WordPressClient:
    """Minimal `requests`-based client for the WordPress `wp/v2` REST API."""

    _MAX_MESSAGE_CHARS = 180
    _HEADERS = {"Accept": "application/json"}

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 20.0,
        per_page: int = 20,
    ) -> None:
        """Initialize client settings."""

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.per_page = per_page

    def fetch_posts(self, page: int) -> list[dict[str, Any]]:
        """Return one page of posts, or `[]` once pagination is exhausted."""

        params = {"page": page, "per_page": self.per_page, "_fields": POST_FIELDS}
        payload = self._get_json("/posts", params=params, end_of_pages_status=400)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise WordPressAPIError(
                "WordPress posts response is not a JSON list.",
                failure_kind="invalid_payload",
            )
        return [item for item in payload if isinstance(item, dict)]

    def fetch_post(self, post_id: int) -> dict[str, Any]:
        """Return one post by WordPress id."""

        payload = self._get_json(f"/posts/{post_id}", params={"_fields": POST_FIELDS})
        if not isinstance(payload, dict):
            raise WordPressAPIError(
                f"WordPress post `{post_id}` response is not a JSON object.",
                failure_kind="invalid_payload",
            )
        return payload

    def fetch_categories(self) -> dict[int, str]:
        """Return a category id to name mapping.

        Raises:
            WordPressAPIError: On transport, HTTP, or payload failures. Sync
                treats this as a degraded, non-fatal condition.
        """

        payload = self._get_json("/categories", params={"per_page": 100})
        if not isinstance(payload, list):
            raise WordPressAPIError(
                "WordPress categories response is not a JSON list.",
                failure_kind="invalid_payload",
            )
        categories: dict[int, str] = {}
        for item in payload:
            if not isinstance(item, dict):
                continue
            category_id = coerce_int(item.get("id"))
            name = normalize_optional_string(item.get("name"))
            if category_id is not None and name is not None:
                categories[category_id] = name
        return categories

    def _get_json(
        self,
        endpoint_path: str,
        *,
        params: dict[str, Any],
        end_of_pages_status: int | None = None,
    ) -> Any:
        """Execute a GET request and decode its JSON body, mapping failures consistently.

        Returns `None` when the response status equals `end_of_pages_status`.
        """

        endpoint = f"{self.base_url}{endpoint_path}"
        try:
            response = requests.get(
                endpoint,
                params=params,
                headers=self._HEADERS,
                timeout=self.timeout_seconds,
            )
            if end_of_pages_status is not None and response.status_code == end_of_pages_status:
                return None
            response.raise_for_status()
            body = response.content
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise WordPressAPIError(
                f"WordPress API error: HTTP {status_code} for `{endpoint_path}`.",
                failure_kind="http",
                status_code=status_code,
            ) from exc
        except requests.Timeout as exc:
            raise WordPressAPIError(
                f"WordPress request timed out after {self.timeout_seconds:g} seconds.",
                failure_kind="timeout",
            ) from exc
        except requests.RequestException as exc:
            raise WordPressAPIError(
                f"WordPress request transport error: {self._short_message(str(exc))}",
                failure_kind="transport",
            ) from exc
        except (TimeoutError, socket.timeout) as exc:
            raise WordPressAPIError(
                f"WordPress request timed out after {self.timeout_seconds:g} seconds.",
                failure_kind="timeout",
            ) from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise WordPressAPIError(
                f"WordPress response for `{endpoint_path}` is not valid JSON.",
                failure_kind="invalid_payload",
            ) from exc

    @classmethod
    def _short_message(cls, message: str) -> str:
        """Collapse and truncate a diagnostic message for single-line output."""

        compact = " ".join(message.split())
        if len(compact) <= cls._MAX_MESSAGE_CHARS:
            return compact
        return compact[: cls._MAX_MESSAGE_CHARS - 3] + "..."
