"""Story HTML normalization.

Responsibilities:
- Accept raw upstream HTML, either as a string or a `{"rendered": str}` envelope.
- Repair unclosed emphasis tags, strip scripts and inline event handlers.
- Produce canonical, classed paragraph structure for the story reader.

Key public API:
- `ContentNormalizer`: configurable normalizer instance.
- `normalize_content`: module-level shortcut using default settings.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Mapping

from .tokens import HtmlToken, render, tokenize

DEFAULT_PARAGRAPH_CLASS = "story-paragraph"

_BLOCK_OPENING_TAGS = frozenset(
    {"div", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "blockquote"}
)

_SCRIPT_BLOCK_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STRAY_SCRIPT_TAG_RE = re.compile(r"</?script\b[^>]*>", re.IGNORECASE)
_QUOTED_TAG_RE = re.compile(r"""<[A-Za-z](?:"[^"]*"|'[^']*'|[^'">])*>""")
# Quoted values match first so `on...=` text inside them is skipped.
_EVENT_HANDLER_RE = re.compile(
    r"""("[^"]*"|'[^']*')"""
    r"""|(?:[\s/]+|(?<=["']))on\w+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*)""",
    re.IGNORECASE,
)

_BR_RUN_RE = re.compile(r"(?:<br\s*/?>\s*){2,}", re.IGNORECASE)
_EMPTY_PARAGRAPH_RE = re.compile(r"<p(?=[\s/>])[^>]*>\s*</p>\n?", re.IGNORECASE)
_PARAGRAPH_OPEN_RE = re.compile(r"<p(?=[\s/>])[^>]*>", re.IGNORECASE)
_PARAGRAPH_CLOSE_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(
    r"""("[^"]*"|'[^']*')|(?<![\w-])class\s*=\s*(["'])(?P<value>.*?)\2""",
    re.IGNORECASE | re.DOTALL,
)
_ADJACENT_PARAGRAPHS_RE = re.compile(r"</p>\s*<p(?=[\s/>])", re.IGNORECASE)
_NESTED_OPENS_RE = re.compile(
    r"<p(?=[\s/>])[^>]*>(?:\s*<p(?=[\s/>])[^>]*>)+", re.IGNORECASE
)
_DOUBLED_CLOSES_RE = re.compile(r"</p>(?:\s*</p>)+", re.IGNORECASE)
_LEADING_TEXT_RE = re.compile(r"^([^<]+)")
_PARAGRAPH_CLASS_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@dataclass(frozen=True, slots=True)
class NormalizerSettings:
    """Settings for story HTML normalization.

    Attributes:
        paragraph_class: CSS class marker applied to every paragraph tag.
    """

    paragraph_class: str = DEFAULT_PARAGRAPH_CLASS

    def __post_init__(self) -> None:
        if not _PARAGRAPH_CLASS_RE.fullmatch(self.paragraph_class):
            raise ValueError(
                "`paragraph_class` must be a single CSS class name "
                "(letters, digits, `-` and `_`)."
            )


def extract_rendered_html(content: Any) -> str:
    """Return the HTML string carried by `content`, or `""` for unsupported inputs."""

    if isinstance(content, str):
        return content
    if isinstance(content, Mapping):
        rendered = content.get("rendered")
    else:
        rendered = getattr(content, "rendered", None)
    return rendered if isinstance(rendered, str) else ""


def _is_block_boundary(token: HtmlToken) -> bool:
    """Return whether a token is an insertion point for closing inline tags."""

    if token.kind == "close":
        return token.name == "p"
    if token.kind == "open":
        return token.name in _BLOCK_OPENING_TAGS
    return False


def balance_inline_tag(html: str, tag_name: str = "em") -> str:
    """Insert missing closing tags for `tag_name` before following block boundaries.

    Content with balanced counts or with more closing than opening tags is
    returned unchanged. Each missing closer is placed before the next block
    boundary that follows a still-open tag; closers that find no boundary are
    appended at the end.
    """

    tokens = tokenize(html)
    openings = sum(1 for token in tokens if token.kind == "open" and token.name == tag_name)
    closings = sum(1 for token in tokens if token.kind == "close" and token.name == tag_name)
    deficit = openings - closings
    if deficit <= 0:
        return html

    closer = HtmlToken(kind="close", raw=f"</{tag_name}>", name=tag_name)
    repaired: list[HtmlToken] = []
    open_depth = 0
    for token in tokens:
        if deficit and open_depth and _is_block_boundary(token):
            repaired.append(closer)
            open_depth -= 1
            deficit -= 1
        if token.is_tag(tag_name):
            if token.kind == "open":
                open_depth += 1
            elif open_depth:
                open_depth -= 1
        repaired.append(token)
    repaired.extend([closer] * deficit)
    return render(repaired)


def strip_unsafe_markup(html: str) -> str:
    """Remove script blocks and inline event-handler attributes.

    Passes repeat until nothing changes, since a removal can splice the
    surrounding fragments into a new `<script` tag or `on...=` attribute.
    """

    while True:
        stripped = _SCRIPT_BLOCK_RE.sub("", html)
        stripped = _STRAY_SCRIPT_TAG_RE.sub("", stripped)
        stripped = _QUOTED_TAG_RE.sub(_strip_event_handlers, stripped)
        if stripped == html:
            return stripped
        html = stripped


def _strip_event_handlers(match: re.Match[str]) -> str:
    """Drop `on...=` attributes from one tag, keeping quoted values intact."""

    return _EVENT_HANDLER_RE.sub(lambda attr: attr.group(1) or "", match.group(0))


class ContentNormalizer:
    """Normalize upstream story HTML into canonical paragraph markup."""

    def __init__(self, settings: NormalizerSettings | None = None) -> None:
        """Initialize with explicit settings or defaults."""

        self.settings = settings or NormalizerSettings()
        self._opening_tag = f'<p class="{self.settings.paragraph_class}">'

    @property
    def paragraph_class(self) -> str:
        """Return the canonical paragraph class marker."""

        return self.settings.paragraph_class

    def normalize(self, content: Any) -> str:
        """Return sanitized, paragraph-normalized HTML for `content`.

        Never raises: unsupported or empty inputs yield `""`.
        """

        html = extract_rendered_html(content).strip()
        if not html:
            return ""

        html = balance_inline_tag(html, "em")
        html = strip_unsafe_markup(html)
        return self.normalize_paragraphs(html)

    def normalize_paragraphs(self, html: str) -> str:
        """Apply the ordered paragraph normalization passes."""

        html = html.strip()
        if not html:
            return ""

        html = _BR_RUN_RE.sub("</p><p>", html)
        html = _EMPTY_PARAGRAPH_RE.sub("", html)
        html = _PARAGRAPH_OPEN_RE.sub(self._mark_paragraph, html)

        trimmed = html.strip()
        if not _PARAGRAPH_OPEN_RE.match(trimmed):
            html = self._opening_tag + html
        if not trimmed.lower().endswith("</p>"):
            html = html + "</p>"

        html = _ADJACENT_PARAGRAPHS_RE.sub("</p>\n<p", html)
        html = self._collapse_nested(html)
        html = self._wrap_loose_lines(html)
        html = self._collapse_nested(html)

        # Wrapping and <br> runs at the edges can leave classed empty paragraphs.
        html = _EMPTY_PARAGRAPH_RE.sub("", html)
        return html.strip()

    def _mark_paragraph(self, match: re.Match[str]) -> str:
        """Add the canonical class marker to one `<p ...>` tag."""

        tag = match.group(0)
        class_match = next(
            (
                candidate
                for candidate in _CLASS_ATTR_RE.finditer(tag)
                if candidate.group("value") is not None
            ),
            None,
        )
        if class_match is None:
            return f'<p class="{self.paragraph_class}"{tag[2:]}'
        classes = class_match.group("value").split()
        if self.paragraph_class in classes:
            return tag
        merged = " ".join([self.paragraph_class, *classes])
        return tag[: class_match.start("value")] + merged + tag[class_match.end("value") :]

    def _collapse_nested(self, html: str) -> str:
        """Merge runs of paragraph opens and runs of paragraph closes."""

        html = _NESTED_OPENS_RE.sub(self._opening_tag, html)
        return _DOUBLED_CLOSES_RE.sub("</p>", html)

    def _wrap_loose_lines(self, html: str) -> str:
        """Wrap line-leading text that sits outside any open paragraph."""

        lines = html.split("\n")
        depth = 0
        wrapped: list[str] = []
        for line in lines:
            if depth == 0:
                match = _LEADING_TEXT_RE.match(line)
                if match is not None and match.group(1).strip():
                    line = f"{self._opening_tag}{match.group(1)}</p>{line[match.end():]}"
            opened = len(_PARAGRAPH_OPEN_RE.findall(line))
            closed = len(_PARAGRAPH_CLOSE_RE.findall(line))
            depth = max(0, depth + opened - closed)
            wrapped.append(line)
        return "\n".join(wrapped)


_DEFAULT_NORMALIZER = ContentNormalizer()


def normalize_content(content: Any) -> str:
    """Normalize `content` with default settings."""

    return _DEFAULT_NORMALIZER.normalize(content)
