"""Parser for the search box query language.

Syntax:
  "exact phrase"   phrase match (case-insensitive substring)
  +term            required term
  -term            excluded term
  /pattern/        regular expression
  term             plain term

Parsing is total: malformed input degrades to plain terms, never an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

_QUOTED = re.compile(r'"([^"]+)"')
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ParsedQuery:
    """Structured form of a raw query string.

    `required_terms` and `excluded_terms` have set semantics; they are kept as
    de-duplicated tuples in first-seen order so parsing stays deterministic.
    """

    original_query: str
    exact_phrases: Tuple[str, ...] = ()
    required_terms: Tuple[str, ...] = ()
    excluded_terms: Tuple[str, ...] = ()
    normal_terms: Tuple[str, ...] = ()
    regex_patterns: Tuple[str, ...] = ()
    has_advanced_syntax: bool = field(init=False)

    def __post_init__(self) -> None:
        advanced = bool(
            self.exact_phrases or self.required_terms or self.excluded_terms or self.regex_patterns
        )
        object.__setattr__(self, "has_advanced_syntax", advanced)


def normalize_phrase(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def _is_regex_literal(token: str) -> bool:
    return len(token) > 2 and token.startswith("/") and token.endswith("/")


def parse_query(raw: str) -> ParsedQuery:
    """Parse `raw` into phrases, required/excluded/plain terms and regex literals."""
    text = raw or ""
    phrases: List[str] = []

    def _take_phrase(match: re.Match[str]) -> str:
        phrase = normalize_phrase(match.group(1))
        if phrase:
            phrases.append(phrase)
        # a space keeps the tokens on either side of the phrase apart
        return " "

    remainder = _QUOTED.sub(_take_phrase, text)

    required: Dict[str, None] = {}
    excluded: Dict[str, None] = {}
    normal: List[str] = []
    patterns: List[str] = []

    for token in remainder.split():
        if token.startswith("+") and len(token) > 1:
            required.setdefault(token[1:], None)
        elif token.startswith("-") and len(token) > 1:
            excluded.setdefault(token[1:], None)
        elif _is_regex_literal(token):
            patterns.append(token[1:-1])
        else:
            normal.append(token)

    return ParsedQuery(
        original_query=text.strip(),
        exact_phrases=tuple(phrases),
        required_terms=tuple(required),
        excluded_terms=tuple(excluded),
        normal_terms=tuple(normal),
        regex_patterns=tuple(patterns),
    )
