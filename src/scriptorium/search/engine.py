"""Search engine facade over one immutable document set.

A `SearchEngine` owns the documents and the index built from them. Engines are
plain objects handed to whoever needs them; a new document set means a new
engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from scriptorium.config import BoostConfig

from .documents import DOCUMENT_KINDS, SearchDocument
from .executor import RankedHit, execute
from .index import InvertedIndex, build_index
from .query import ParsedQuery, parse_query
from .snippets import fragment, suggest_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A ranked hit joined back to its document for display."""

    document: SearchDocument
    hit: RankedHit
    fragment: str

    @property
    def score(self) -> float:
        return self.hit.score

    def to_dict(self) -> Dict[str, Any]:
        out = self.document.to_dict()
        out.pop("text", None)
        out["fragment"] = self.fragment
        out["score"] = self.hit.score
        out["strategy"] = self.hit.strategy
        return out


class SearchEngine:
    """Documents plus the inverted index built over them."""

    def __init__(
        self,
        documents: Sequence[SearchDocument],
        index: Optional[InvertedIndex],
        *,
        fragment_length: int = 200,
    ) -> None:
        self._documents: List[SearchDocument] = list(documents)
        self._by_id: Dict[str, SearchDocument] = {d.id: d for d in self._documents}
        self._index = index
        self._fragment_length = fragment_length

    @classmethod
    def build(
        cls,
        documents: Sequence[SearchDocument],
        boosts: Optional[BoostConfig] = None,
        *,
        fragment_length: int = 200,
    ) -> SearchEngine:
        index = build_index(documents, boosts)
        counts = {kind: 0 for kind in DOCUMENT_KINDS}
        for doc in documents:
            counts[doc.kind] += 1
        logger.info(
            "Search index built with %d documents (titles: %d, sections: %d, paragraphs: %d)",
            len(documents),
            counts["title"],
            counts["section"],
            counts["paragraph"],
        )
        return cls(documents, index, fragment_length=fragment_length)

    @classmethod
    def empty(cls) -> SearchEngine:
        """An engine with no index; every query returns nothing."""
        return cls([], None)

    @property
    def documents(self) -> List[SearchDocument]:
        return list(self._documents)

    @property
    def index(self) -> Optional[InvertedIndex]:
        return self._index

    def get_document(self, document_id: str) -> Optional[SearchDocument]:
        return self._by_id.get(document_id)

    def rank(self, query: ParsedQuery) -> List[RankedHit]:
        return execute(query, self._documents, self._index)

    def search(self, raw_query: str, *, limit: Optional[int] = None) -> List[SearchResult]:
        """Parse, execute and join hits to their documents, best first."""
        results, _ = self.search_page(raw_query, limit=limit)
        return results

    def search_page(
        self, raw_query: str, *, limit: Optional[int] = None
    ) -> Tuple[List[SearchResult], int]:
        """Like `search`, also returning the number of hits before `limit` applied."""
        query = parse_query(raw_query)
        hits = self.rank(query)
        total = len(hits)
        if limit is not None:
            hits = hits[: max(0, int(limit))]
        out: List[SearchResult] = []
        for hit in hits:
            doc = self._by_id.get(hit.document_id)
            if doc is None:
                continue
            out.append(
                SearchResult(
                    document=doc,
                    hit=hit,
                    fragment=fragment(doc.text, query, max_length=self._fragment_length),
                )
            )
        return out, total

    def suggest(self, raw_query: str, *, limit: int = 5) -> List[str]:
        if self._index is None:
            return []
        return suggest_words(
            (d.searchable_text() for d in self._documents), raw_query, limit=limit
        )

    def stats(self) -> Dict[str, Any]:
        fields = list(self._index.fields) if self._index is not None else []
        return {"documents": len(self._documents), "fields": fields}
