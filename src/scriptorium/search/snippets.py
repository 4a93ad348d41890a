"""Result fragments and query suggestions."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

from .query import ParsedQuery

CONTEXT_BEFORE = 50
_WORD_SPLIT = re.compile(r"\s+")


def _needles(query: ParsedQuery) -> List[str]:
    needles = [*query.exact_phrases, *query.required_terms, *query.normal_terms]
    return [n.lower() for n in needles if len(n) >= 2]


def fragment(text: str, query: ParsedQuery, *, max_length: int = 200) -> str:
    """Cut a window of `text` around the earliest occurrence of a query term.

    The window starts `CONTEXT_BEFORE` characters ahead of the match; `...`
    marks truncation on either side. Without a match the leading text is used.
    """
    if not text:
        return ""
    lowered = text.lower()
    positions = [lowered.find(n) for n in _needles(query)]
    positions = [p for p in positions if p >= 0]

    if not positions:
        if len(text) <= max_length:
            return text
        return text[:max_length] + "..."

    start = max(0, min(positions) - CONTEXT_BEFORE)
    end = min(len(text), start + max_length)
    out = text[start:end]
    if start > 0:
        out = "..." + out
    if end < len(text):
        out = out + "..."
    return out


def suggest_words(texts: Iterable[str], query: str, *, limit: int = 5) -> List[str]:
    """Corpus words (longer than 2 chars) starting with the last word of `query`."""
    words = query.lower().split()
    if not words or limit <= 0:
        return []
    prefix = words[-1]
    if len(prefix) < 2:
        return []

    found: Dict[str, None] = {}
    for text in texts:
        for word in _WORD_SPLIT.split(text.lower()):
            if len(word) > 2 and word.startswith(prefix) and word not in found:
                found[word] = None
                if len(found) >= limit:
                    return list(found)
    return list(found)
