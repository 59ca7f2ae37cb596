"""Conversion of WordPress post payloads into story records."""

from __future__ import annotations

import html as html_entities
from typing import Any, Callable, Mapping

from ..content.normalizer import ContentNormalizer, extract_rendered_html
from ..content.plain_text import (
    DEFAULT_EXCERPT_LENGTH,
    DEFAULT_WORDS_PER_MINUTE,
    count_words,
    estimate_reading_time,
    extract_excerpt,
    extract_plain_text,
)
from ..content.wordpress_markup import strip_wordpress_markup
from ..errors import StoryConversionError
from ..models.datatypes import Story
from ..parsing import coerce_int, normalize_optional_string

NormalizeFn = Callable[[str], str]


def convert_post(
    payload: Mapping[str, Any],
    *,
    normalizer: ContentNormalizer | None = None,
    normalize: NormalizeFn | None = None,
    category_names: Mapping[int, str] | None = None,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    words_per_minute: int = DEFAULT_WORDS_PER_MINUTE,
    import_source: str = "wordpress-api",
) -> Story:
    """Convert one WordPress post payload into a `Story`.

    Args:
        payload: Decoded `wp/v2/posts` item.
        normalizer: Normalizer used when `normalize` is not given.
        normalize: Optional normalization callable, e.g. a cache-backed one.
        category_names: Category id to name mapping; unknown ids are dropped.
        excerpt_length: Maximum excerpt length in characters.
        words_per_minute: Reading speed for the reading-time estimate.
        import_source: Value recorded under `metadata["import_source"]`.

    Raises:
        StoryConversionError: If the payload lacks a usable id or slug.
    """

    wordpress_id = coerce_int(payload.get("id"))
    if wordpress_id is None:
        raise StoryConversionError("WordPress post payload has no integer `id`.")
    slug = normalize_optional_string(payload.get("slug"))
    if slug is None:
        raise StoryConversionError(f"WordPress post `{wordpress_id}` has no `slug`.")

    if normalize is None:
        normalize = (normalizer or ContentNormalizer()).normalize

    raw_content = strip_wordpress_markup(extract_rendered_html(payload.get("content")))
    content = normalize(raw_content)

    title = html_entities.unescape(extract_plain_text(extract_rendered_html(payload.get("title"))))
    upstream_excerpt = strip_wordpress_markup(extract_rendered_html(payload.get("excerpt")))
    excerpt_source = upstream_excerpt if extract_plain_text(upstream_excerpt) else content
    excerpt = extract_excerpt(excerpt_source, max_length=excerpt_length)

    categories = _resolve_categories(payload.get("categories"), category_names or {})

    metadata = {"wordpress_id": str(wordpress_id), "import_source": import_source}
    for key in ("modified", "status"):
        value = normalize_optional_string(payload.get(key))
        if value is not None:
            metadata[key] = value

    return Story(
        wordpress_id=wordpress_id,
        slug=slug,
        title=title or slug,
        content=content,
        excerpt=excerpt,
        reading_time_minutes=estimate_reading_time(content, words_per_minute),
        published_at=normalize_optional_string(payload.get("date")) or "",
        categories=categories,
        word_count=count_words(content),
        metadata=metadata,
    )


def _resolve_categories(raw_ids: Any, category_names: Mapping[int, str]) -> tuple[str, ...]:
    """Map upstream category ids to names, keeping upstream order."""

    if not isinstance(raw_ids, list):
        return ()
    names: list[str] = []
    for raw_id in raw_ids:
        category_id = coerce_int(raw_id)
        if category_id is None:
            continue
        name = category_names.get(category_id)
        if name and name not in names:
            names.append(name)
    return tuple(names)
