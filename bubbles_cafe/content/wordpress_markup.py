"""WordPress-specific markup cleanup applied before normalization."""

from __future__ import annotations

import re

_BLOCK_COMMENT_RE = re.compile(r"<!--\s*/?wp:[^>]*?-->")
_WIDGET_BLOCK_RE = re.compile(
    r"""<(ul|div)\s+class=["']wp-block[^>]*>.*?</\1\s*>""", re.IGNORECASE | re.DOTALL
)
_SHORTCODE_BLOCK_RE = re.compile(
    r"\[(caption|gallery|embed)\b[^\]]*\].*?\[/\1\]", re.IGNORECASE | re.DOTALL
)
_SHORTCODE_TOKEN_RE = re.compile(r"\[/?[A-Za-z][\w-]*(?:\s[^\]]*)?\]")
_SPACER_PARAGRAPH_RE = re.compile(r"<p>(?:\s|&nbsp;|&#160;)*</p>", re.IGNORECASE)


def strip_wordpress_markup(html: str) -> str:
    """Remove Gutenberg block comments, widget blocks, shortcodes, and spacers.

    Block comment delimiters are dropped while the block body is kept.
    `<ul>`/`<div>` elements classed `wp-block...` (social links, buttons,
    galleries) are dropped whole.
    """

    html = _BLOCK_COMMENT_RE.sub("", html)
    html = _WIDGET_BLOCK_RE.sub("", html)
    html = _SHORTCODE_BLOCK_RE.sub("", html)
    html = _SHORTCODE_TOKEN_RE.sub("", html)
    return _SPACER_PARAGRAPH_RE.sub("", html)
