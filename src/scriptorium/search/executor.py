"""Query execution: native ranked lookup or heuristic filter-and-score.

Plain queries go straight to the inverted index. Queries using phrases,
required/excluded terms or regex literals are answered by a linear scan over
the documents with a fixed additive scoring scheme.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Pattern, Sequence, Tuple, Union

from .documents import SearchDocument
from .index import InvertedIndex
from .query import ParsedQuery, normalize_phrase

logger = logging.getLogger(__name__)

PHRASE_SCORE = 10
PHRASE_TITLE_BONUS = 5
REQUIRED_SCORE = 3
REQUIRED_TITLE_BONUS = 2
NORMAL_SCORE = 1
NORMAL_TITLE_BONUS = 1


@dataclass(frozen=True, slots=True)
class NativeHit:
    """Hit ranked by the inverted index; carries the matched (field, term) pairs."""

    strategy: ClassVar[str] = "native"

    document_id: str
    score: float
    matched_terms: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class HeuristicHit:
    """Hit scored by the filter-and-score scan; no position data is available."""

    strategy: ClassVar[str] = "heuristic"

    document_id: str
    score: float


RankedHit = Union[NativeHit, HeuristicHit]


def _compile_patterns(patterns: Sequence[str]) -> List[Pattern[str]]:
    compiled: List[Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.warning("Ignoring invalid regex /%s/ in query: %s", pattern, exc)
    return compiled


def _native(query: ParsedQuery, index: Optional[InvertedIndex]) -> List[RankedHit]:
    if index is None:
        return []
    return [
        NativeHit(document_id=m.document_id, score=m.score, matched_terms=m.matched_terms)
        for m in index.search(query.normal_terms)
    ]


def _heuristic(query: ParsedQuery, documents: Sequence[SearchDocument]) -> List[RankedHit]:
    phrases = [normalize_phrase(p).lower() for p in query.exact_phrases]
    required = [t.lower() for t in query.required_terms]
    excluded = [t.lower() for t in query.excluded_terms]
    normal = [t.lower() for t in query.normal_terms]
    patterns = _compile_patterns(query.regex_patterns)

    scored: List[Tuple[float, int, str]] = []
    for position, doc in enumerate(documents):
        text = doc.searchable_text().lower()
        # whitespace runs collapse within each field, never across field boundaries
        phrase_text = " ".join(
            normalize_phrase(part) for part in (doc.title, doc.author, doc.section or "", doc.text)
        ).lower()

        if not all(p in phrase_text for p in phrases):
            continue
        if not all(t in text for t in required):
            continue
        if any(t in text for t in excluded):
            continue
        if not all(rx.search(text) for rx in patterns):
            continue

        title = doc.title.lower()
        phrase_title = normalize_phrase(doc.title).lower()
        score = 0
        for phrase in phrases:
            score += PHRASE_SCORE
            if phrase in phrase_title:
                score += PHRASE_TITLE_BONUS
        for term in required:
            score += REQUIRED_SCORE
            if term in title:
                score += REQUIRED_TITLE_BONUS
        for term in normal:
            if term in text:
                score += NORMAL_SCORE
                if term in title:
                    score += NORMAL_TITLE_BONUS

        if score > 0:
            scored.append((score, position, doc.id))

    # Descending score; corpus order on ties
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [HeuristicHit(document_id=doc_id, score=float(score)) for score, _, doc_id in scored]


def execute(
    query: ParsedQuery,
    documents: Sequence[SearchDocument],
    index: Optional[InvertedIndex],
) -> List[RankedHit]:
    """Run `query` and return hits ordered by descending score.

    Without advanced syntax the index answers directly (an absent index yields
    no hits). With advanced syntax every document is scanned, index or not.
    """
    if query.has_advanced_syntax:
        return _heuristic(query, documents)
    return _native(query, index)
