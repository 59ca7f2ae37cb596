"""Lightweight HTML tag tokenizer.

Responsibilities:
- Split HTML strings into open-tag, close-tag, and text tokens.
- Re-serialize token streams losslessly so callers can splice in new tags.

This is not an HTML parser: comments, doctypes, and stray `<` characters are
kept as opaque text tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal

TokenKind = Literal["text", "open", "close"]

_TAG_RE = re.compile(r"<(/?)([A-Za-z][A-Za-z0-9]*)\b[^>]*>")


@dataclass(frozen=True, slots=True)
class HtmlToken:
    """One token of an HTML string.

    Attributes:
        kind: `text`, `open`, or `close`.
        raw: Exact source text of the token.
        name: Lower-cased tag name for tag tokens, empty for text.
    """

    kind: TokenKind
    raw: str
    name: str = ""

    def is_tag(self, name: str) -> bool:
        """Return whether this token is an open or close tag with `name`."""

        return self.kind != "text" and self.name == name


def tokenize(html: str) -> list[HtmlToken]:
    """Split `html` into a flat token stream."""

    tokens: list[HtmlToken] = []
    position = 0
    for match in _TAG_RE.finditer(html):
        if match.start() > position:
            tokens.append(HtmlToken(kind="text", raw=html[position : match.start()]))
        kind: TokenKind = "close" if match.group(1) else "open"
        tokens.append(HtmlToken(kind=kind, raw=match.group(0), name=match.group(2).lower()))
        position = match.end()
    if position < len(html):
        tokens.append(HtmlToken(kind="text", raw=html[position:]))
    return tokens


def render(tokens: list[HtmlToken]) -> str:
    """Serialize a token stream back into HTML text."""

    return "".join(token.raw for token in tokens)
