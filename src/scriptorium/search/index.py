"""In-memory ranked inverted index over SearchDocuments using Whoosh.

Builds a RAM-only index with per-field boosts and BM25F weighting. The index
is never updated in place; any content change means building a new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from whoosh import scoring
from whoosh.fields import ID, TEXT, Schema
from whoosh.filedb.filestore import RamStorage
from whoosh.index import Index
from whoosh.query import Or, Term

from scriptorium.config import BoostConfig

from .analysis import analyze, make_analyzer
from .documents import SearchDocument

logger = logging.getLogger(__name__)

SEARCH_FIELDS: Tuple[str, ...] = ("title", "author", "section", "text")


@dataclass(frozen=True, slots=True)
class IndexMatch:
    """A ranked lookup result with the (field, term) pairs that matched."""

    document_id: str
    score: float
    matched_terms: Tuple[Tuple[str, str], ...] = ()


def _make_schema(boosts: BoostConfig) -> Schema:
    analyzer = make_analyzer()
    return Schema(
        id=ID(stored=True, unique=True),
        title=TEXT(analyzer=analyzer, field_boost=boosts.title),
        author=TEXT(analyzer=analyzer, field_boost=boosts.author),
        section=TEXT(analyzer=analyzer, field_boost=boosts.section),
        text=TEXT(analyzer=analyzer, field_boost=boosts.text),
    )


def _term_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class InvertedIndex:
    """A built Whoosh index plus the analyzer used to build it."""

    def __init__(self, index: Index, size: int) -> None:
        self._index = index
        self._analyzer = make_analyzer()
        self.size = size

    @property
    def fields(self) -> Tuple[str, ...]:
        return SEARCH_FIELDS

    def query_terms(self, raw_terms: Sequence[str]) -> List[str]:
        """Analyze raw query terms the same way document fields were analyzed."""
        seen: Dict[str, None] = {}
        for raw in raw_terms:
            for token in analyze(self._analyzer, raw):
                seen.setdefault(token, None)
        return list(seen)

    def search(self, raw_terms: Sequence[str], *, limit: Optional[int] = None) -> List[IndexMatch]:
        """Rank documents matching any of `raw_terms` in any boosted field.

        Results are ordered by descending score; Whoosh breaks ties by
        document order.
        """
        terms = self.query_terms(raw_terms)
        if not terms or self.size == 0:
            return []
        query = Or([Term(fieldname, term) for term in terms for fieldname in SEARCH_FIELDS])

        out: List[IndexMatch] = []
        with self._index.searcher(weighting=scoring.BM25F()) as searcher:
            results = searcher.search(query, limit=limit, terms=True)
            for hit in results:
                matched: List[Tuple[str, str]] = []
                if results.has_matched_terms():
                    matched = sorted((f, _term_text(t)) for f, t in hit.matched_terms())
                out.append(
                    IndexMatch(
                        document_id=hit["id"],
                        score=float(hit.score or 0.0),
                        matched_terms=tuple(matched),
                    )
                )
        return out


def build_index(
    documents: Sequence[SearchDocument], boosts: Optional[BoostConfig] = None
) -> InvertedIndex:
    """Build a fresh in-RAM index over `documents`."""
    schema = _make_schema(boosts or BoostConfig())
    storage = RamStorage()
    idx = storage.create_index(schema)

    writer = idx.writer(limitmb=64)
    try:
        for doc in documents:
            writer.add_document(
                id=doc.id,
                title=doc.title,
                author=doc.author,
                section=doc.section or "",
                text=doc.text,
            )
    except Exception:
        writer.cancel()
        raise
    writer.commit()

    logger.debug("Built search index over %d documents", len(documents))
    return InvertedIndex(idx, len(documents))
