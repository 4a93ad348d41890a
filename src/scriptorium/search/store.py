"""Persistence of search index snapshots.

A snapshot is the full document set of the last successful build plus its
metadata. It is written as a single upsert keyed by the snapshot version, so
readers see either the previous snapshot or the new one, never a mix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from scriptorium.exceptions import StorageError
from scriptorium.storage.database import session_scope
from scriptorium.storage.models import SearchIndexRecord

from .documents import SearchDocument

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on round trip
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class IndexVersion:
    """Cheap staleness marker for a snapshot."""

    last_updated: datetime
    count: int

    @property
    def token(self) -> str:
        """Opaque validation token (ETag form) derived from timestamp and count."""
        millis = int(self.last_updated.timestamp() * 1000)
        return f'"{millis:x}-{self.count:x}"'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_updated": self.last_updated.isoformat(),
            "count": self.count,
            "etag": self.token,
        }


@dataclass(frozen=True, slots=True)
class IndexSnapshot:
    """Immutable capture of an extracted document set and its build metadata."""

    version: str
    documents: Tuple[SearchDocument, ...]
    last_updated: datetime
    count: int
    title_count: int
    section_count: int
    paragraph_count: int

    @property
    def index_version(self) -> IndexVersion:
        return IndexVersion(last_updated=self.last_updated, count=self.count)

    def to_dict(self, *, include_documents: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "version": self.version,
            "last_updated": self.last_updated.isoformat(),
            "count": self.count,
            "title_count": self.title_count,
            "section_count": self.section_count,
            "paragraph_count": self.paragraph_count,
            "etag": self.index_version.token,
        }
        if include_documents:
            out["documents"] = [d.to_dict() for d in self.documents]
        return out


def _to_snapshot(row: SearchIndexRecord) -> IndexSnapshot:
    return IndexSnapshot(
        version=row.version,
        documents=tuple(SearchDocument.from_dict(d) for d in (row.documents or [])),
        last_updated=_as_utc(row.last_updated),
        count=row.count,
        title_count=row.title_count,
        section_count=row.section_count,
        paragraph_count=row.paragraph_count,
    )


class IndexStore:
    """Reads and replaces the snapshot row for one snapshot version."""

    def __init__(self, session_factory: sessionmaker[Session], *, version: str = "1.0") -> None:
        self._factory = session_factory
        self.version = version

    def load(self) -> Optional[IndexSnapshot]:
        """Return the current snapshot, or None if no build has been persisted."""
        try:
            with session_scope(self._factory) as session:
                row = session.scalars(
                    select(SearchIndexRecord).where(SearchIndexRecord.version == self.version)
                ).first()
                return _to_snapshot(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load search index snapshot: {exc}") from exc

    def probe(self) -> Optional[IndexVersion]:
        """Return only `last_updated` and `count`, without the documents."""
        try:
            with session_scope(self._factory) as session:
                row = session.execute(
                    select(SearchIndexRecord.last_updated, SearchIndexRecord.count).where(
                        SearchIndexRecord.version == self.version
                    )
                ).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to probe search index version: {exc}") from exc
        if row is None or row.last_updated is None:
            return None
        return IndexVersion(last_updated=_as_utc(row.last_updated), count=row.count or 0)

    def save(self, documents: Sequence[SearchDocument]) -> IndexSnapshot:
        """Replace the snapshot for this version with `documents` in one transaction."""
        counts = {"title": 0, "section": 0, "paragraph": 0}
        for doc in documents:
            counts[doc.kind] += 1
        now = datetime.now(timezone.utc)
        payload = [d.to_dict() for d in documents]

        try:
            with session_scope(self._factory) as session:
                row = session.scalars(
                    select(SearchIndexRecord).where(SearchIndexRecord.version == self.version)
                ).first()
                if row is None:
                    row = SearchIndexRecord(version=self.version)
                    session.add(row)
                row.documents = payload
                row.last_updated = now
                row.count = len(payload)
                row.title_count = counts["title"]
                row.section_count = counts["section"]
                row.paragraph_count = counts["paragraph"]
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to persist search index snapshot: {exc}") from exc

        logger.info("Search index snapshot %s saved with %d documents", self.version, len(payload))
        return IndexSnapshot(
            version=self.version,
            documents=tuple(documents),
            last_updated=now,
            count=len(payload),
            title_count=counts["title"],
            section_count=counts["section"],
            paragraph_count=counts["paragraph"],
        )
