"""HTML flattening for paragraph bodies stored with inline markup.

Paragraph text normally arrives clean from the authoring side; older rows
and bulk imports may still carry tags and entities.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup  # type: ignore[import-untyped]

_WHITESPACE = re.compile(r"\s+")


def looks_like_html(text: str) -> bool:
    return "<" in text or "&" in text


def html_to_text(html: str) -> str:
    """Return visible text with entities decoded and whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    text = soup.get_text(" ", strip=True)
    return _WHITESPACE.sub(" ", text).strip()


def to_plain_text(text: str) -> str:
    """Flatten `text` only when it contains markup; otherwise return it unchanged."""
    if text and looks_like_html(text):
        return html_to_text(text)
    return text or ""
