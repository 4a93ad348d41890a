"""Search service: snapshot lifecycle plus query serving.

The persisted snapshot is the synchronization point between processes. The
service keeps an engine built from the newest snapshot it has seen and
rebuilds that engine whenever the probed snapshot version changes.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from scriptorium.config import SearchConfig
from scriptorium.corpus import Corpus
from scriptorium.exceptions import IndexBuildError

from .engine import SearchEngine, SearchResult
from .extractor import extract_documents
from .scheduler import RebuildScheduler
from .store import IndexSnapshot, IndexStore, IndexVersion

logger = logging.getLogger(__name__)

CorpusLoader = Callable[[], Corpus]


@dataclass(frozen=True, slots=True)
class IndexPayload:
    """Result of a conditional index fetch.

    `snapshot` is None when the caller's token still matches (`unchanged`).
    """

    etag: str
    snapshot: Optional[IndexSnapshot] = None

    @property
    def unchanged(self) -> bool:
        return self.snapshot is None

    def to_dict(self) -> Dict[str, Any]:
        if self.snapshot is None:
            return {"unchanged": True, "etag": self.etag}
        out = self.snapshot.to_dict()
        out["unchanged"] = False
        return out


class SearchService:
    """Builds, persists and serves the search index for one corpus."""

    def __init__(
        self,
        store: IndexStore,
        load_corpus: CorpusLoader,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self._store = store
        self._load_corpus = load_corpus
        self._config = config or SearchConfig()
        self._engine: Optional[SearchEngine] = None
        self._engine_version: Optional[IndexVersion] = None
        self._engine_lock = threading.Lock()
        self.scheduler = RebuildScheduler(
            self._rebuild_in_background,
            debounce=timedelta(seconds=self._config.rebuild_debounce_seconds),
        )

    # ----- Lifecycle -----

    def get_or_build(self, force: bool = False) -> IndexSnapshot:
        """Return the stored snapshot, building one if absent or if `force` is set.

        Raises `IndexBuildError` when extraction, indexing or persistence
        fails; the previous snapshot is left untouched in that case.
        """
        if not force:
            snapshot = self._store.load()
            if snapshot is not None:
                return snapshot
        return self._rebuild()

    def _rebuild(self) -> IndexSnapshot:
        try:
            documents = extract_documents(
                self._load_corpus(), paragraph_limit=self._config.paragraph_limit
            )
            engine = SearchEngine.build(
                documents,
                self._config.boosts,
                fragment_length=self._config.fragment_length,
            )
            snapshot = self._store.save(documents)
        except Exception as exc:
            raise IndexBuildError(f"Search index rebuild failed: {exc}") from exc
        self._install(engine, snapshot.index_version)
        return snapshot

    def _rebuild_in_background(self) -> None:
        snapshot = self._rebuild()
        logger.info("Background rebuild finished with %d documents", snapshot.count)

    def trigger_rebuild_async(self) -> None:
        """Schedule a rebuild without waiting for it; failures are only logged."""
        try:
            self.scheduler.trigger()
        except Exception:
            logger.exception("Could not schedule search index rebuild")

    def shutdown(self, *, wait: bool = True) -> None:
        self.scheduler.shutdown(wait=wait)

    # ----- Versions -----

    def probe_version(self) -> Optional[IndexVersion]:
        """Cheap staleness check: `last_updated` and `count` only."""
        return self._store.probe()

    def fetch_index(self, force: bool = False, if_none_match: Optional[str] = None) -> IndexPayload:
        """Full snapshot payload, or an `unchanged` marker if `if_none_match` is current."""
        if not force and if_none_match:
            current = self._store.probe()
            if current is not None and current.token == if_none_match:
                return IndexPayload(etag=current.token)
        snapshot = self.get_or_build(force=force)
        return IndexPayload(etag=snapshot.index_version.token, snapshot=snapshot)

    # ----- Queries -----

    def _install(self, engine: SearchEngine, version: IndexVersion) -> None:
        with self._engine_lock:
            self._engine = engine
            self._engine_version = version

    def current_engine(self) -> SearchEngine:
        """Engine for the newest persisted snapshot; empty if none exists yet."""
        version = self._store.probe()
        if version is None:
            return SearchEngine.empty()
        with self._engine_lock:
            if self._engine is not None and self._engine_version == version:
                return self._engine

        snapshot = self._store.load()
        if snapshot is None:
            return SearchEngine.empty()
        engine = SearchEngine.build(
            snapshot.documents,
            self._config.boosts,
            fragment_length=self._config.fragment_length,
        )
        self._install(engine, snapshot.index_version)
        return engine

    def search(self, raw_query: str, *, limit: Optional[int] = None) -> List[SearchResult]:
        results, _ = self.search_page(raw_query, limit=limit)
        return results

    def search_page(
        self, raw_query: str, *, limit: Optional[int] = None
    ) -> Tuple[List[SearchResult], int]:
        if limit is None:
            limit = self._config.result_limit
        return self.current_engine().search_page(raw_query, limit=limit)

    def suggest(self, raw_query: str, *, limit: Optional[int] = None) -> List[str]:
        if limit is None:
            limit = self._config.suggestion_limit
        return self.current_engine().suggest(raw_query, limit=limit)
