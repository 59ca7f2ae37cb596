"""Plain-text derivations of story HTML.

Responsibilities:
- Strip markup for search snippets and excerpts.
- Keep only emphasis markup for compact previews.
- Estimate excerpt text and reading time for story listings.
"""

from __future__ import annotations

import html as html_entities
import math
import re

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_EMPHASIS_START = "\ue000"
_EMPHASIS_END = "\ue001"
_EMPHASIS_SPAN_RES = (
    re.compile(r"<em\b[^>]*>(.*?)</em\s*>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<i\b[^>]*>(.*?)</i\s*>", re.IGNORECASE | re.DOTALL),
)
_EMPHASIS_PLACEHOLDER_RE = re.compile(f"{_EMPHASIS_START}(.*?){_EMPHASIS_END}", re.DOTALL)

DEFAULT_EXCERPT_LENGTH = 200
DEFAULT_WORDS_PER_MINUTE = 200


def _collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_plain_text(html: str) -> str:
    """Return `html` with all tags removed and whitespace collapsed."""

    if not isinstance(html, str):
        return ""
    return _collapse_whitespace(_TAG_RE.sub(" ", html))


def preserve_emphasis_only(html: str) -> str:
    """Strip all markup except emphasis, re-emitted as canonical `<em>` spans.

    Both `<em>` and `<i>` spans are swapped for placeholder markers before the
    tag strip so their text survives, then restored as `<em>...</em>`.
    """

    if not isinstance(html, str):
        return ""
    marked = html
    for pattern in _EMPHASIS_SPAN_RES:
        marked = pattern.sub(f"{_EMPHASIS_START}\\1{_EMPHASIS_END}", marked)
    stripped = _TAG_RE.sub(" ", marked)
    restored = _EMPHASIS_PLACEHOLDER_RE.sub(r"<em>\1</em>", stripped)
    restored = restored.replace(_EMPHASIS_START, "").replace(_EMPHASIS_END, "")
    return _collapse_whitespace(restored)


def extract_excerpt(html: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Return a plain-text excerpt of at most `max_length` characters plus ellipsis.

    Text longer than the limit is cut at the last space inside the limit, or
    hard-cut when the limit falls inside a single word.
    """

    if max_length <= 0:
        raise ValueError("`max_length` must be a positive integer.")

    text = html_entities.unescape(extract_plain_text(html))
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated.rstrip() + "..."


def count_words(html: str) -> int:
    """Return the number of whitespace-delimited words in the plain text of `html`."""

    text = extract_plain_text(html)
    if not text:
        return 0
    return len(text.split(" "))


def estimate_reading_time(
    html: str, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE
) -> int:
    """Return estimated whole reading minutes, at least 1 for non-empty text."""

    if words_per_minute <= 0:
        raise ValueError("`words_per_minute` must be a positive integer.")

    words = count_words(html)
    if words == 0:
        return 0
    return max(1, math.ceil(words / words_per_minute))
