"""Content store backed by SQLAlchemy.

Reads works, sections and paragraphs for the search extractor, and performs
the content mutations that must be followed by a search index rebuild. The
`on_change` hook runs after the mutation's transaction has committed; a
failing hook is logged and never undoes or fails the mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from scriptorium.corpus import AuthorRecord, Corpus, ParagraphRecord, SectionRecord, WorkRecord
from scriptorium.exceptions import StorageError

from .database import session_scope
from .models import Author, Paragraph, Section, Work

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SectionImport:
    """A section and its paragraphs in a bulk import."""

    title: str
    level: int = 1
    paragraphs: List[str] = field(default_factory=list)


@dataclass(slots=True)
class WorkImport:
    """A work to create in a bulk import; paragraphs are numbered in order from 1."""

    title: str
    slug: str
    author_slug: str
    description: Optional[str] = None
    is_public: bool = False
    paragraphs: List[str] = field(default_factory=list)
    sections: List[SectionImport] = field(default_factory=list)


class ContentStore:
    """Reads and mutates works, sections and paragraphs."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._factory = session_factory
        self._on_change = on_change

    def set_on_change(self, hook: Optional[Callable[[], None]]) -> None:
        self._on_change = hook

    def _changed(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change()
        except Exception:
            logger.exception("Content change hook failed; search index may be stale")

    # ----- Reads -----

    def load_corpus(self) -> Corpus:
        """Load every work (with visibility flags) and all active sections and paragraphs."""
        try:
            with session_scope(self._factory) as session:
                works = session.scalars(
                    select(Work).options(selectinload(Work.author)).order_by(Work.order, Work.id)
                ).all()
                sections = session.scalars(
                    select(Section)
                    .where(Section.active.is_(True))
                    .order_by(Section.work_id, Section.order, Section.id)
                ).all()
                paragraphs = session.scalars(
                    select(Paragraph)
                    .where(Paragraph.active.is_(True))
                    .order_by(Paragraph.work_id, Paragraph.order, Paragraph.number, Paragraph.id)
                ).all()
                return Corpus(
                    works=[_work_record(w) for w in works],
                    sections=[
                        SectionRecord(
                            id=s.id,
                            work_id=s.work_id,
                            title=s.title,
                            level=s.level,
                            parent_id=s.parent_id,
                            active=s.active,
                        )
                        for s in sections
                    ],
                    paragraphs=[
                        ParagraphRecord(
                            id=p.id,
                            work_id=p.work_id,
                            number=p.number,
                            text=p.text,
                            section_id=p.section_id,
                            active=p.active,
                        )
                        for p in paragraphs
                    ],
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load content for indexing: {exc}") from exc

    # ----- Mutations -----

    def create_author(self, *, name: str, slug: str, order: int = 0) -> int:
        with session_scope(self._factory) as session:
            author = Author(name=name, slug=slug, order=order)
            session.add(author)
            session.flush()
            author_id = author.id
        self._changed()
        return author_id

    def create_work(
        self,
        *,
        title: str,
        slug: str,
        author_id: int,
        description: Optional[str] = None,
        is_public: bool = False,
        order: int = 0,
    ) -> int:
        with session_scope(self._factory) as session:
            work = Work(
                title=title,
                slug=slug,
                author_id=author_id,
                description=description,
                is_public=is_public,
                order=order,
            )
            session.add(work)
            session.flush()
            work_id = work.id
        self._changed()
        return work_id

    def update_work(self, work_id: int, **fields: Any) -> None:
        """Update simple columns of a work (title, slug, description, order, active...)."""
        allowed = {"title", "slug", "description", "order", "active", "author_id", "is_public"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unsupported work fields: {', '.join(sorted(unknown))}")
        with session_scope(self._factory) as session:
            work = self._get_work(session, work_id)
            for key, value in fields.items():
                setattr(work, key, value)
        self._changed()

    def delete_work(self, work_id: int) -> None:
        with session_scope(self._factory) as session:
            session.delete(self._get_work(session, work_id))
        self._changed()

    def publish_work(self, work_id: int) -> None:
        self._set_public(work_id, True)

    def unpublish_work(self, work_id: int) -> None:
        self._set_public(work_id, False)

    def _set_public(self, work_id: int, is_public: bool) -> None:
        with session_scope(self._factory) as session:
            self._get_work(session, work_id).is_public = is_public
        self._changed()

    def add_section(
        self,
        work_id: int,
        *,
        title: str,
        level: int = 1,
        parent_id: Optional[int] = None,
        order: int = 0,
    ) -> int:
        with session_scope(self._factory) as session:
            self._get_work(session, work_id)
            section = Section(
                work_id=work_id, title=title, level=level, parent_id=parent_id, order=order
            )
            session.add(section)
            session.flush()
            section_id = section.id
        self._changed()
        return section_id

    def add_paragraph(
        self,
        work_id: int,
        *,
        number: int,
        text: str,
        section_id: Optional[int] = None,
        order: Optional[int] = None,
    ) -> int:
        with session_scope(self._factory) as session:
            self._get_work(session, work_id)
            paragraph = Paragraph(
                work_id=work_id,
                number=number,
                text=text,
                section_id=section_id,
                order=number if order is None else order,
            )
            session.add(paragraph)
            session.flush()
            paragraph_id = paragraph.id
        self._changed()
        return paragraph_id

    def import_works(self, works: Iterable[WorkImport]) -> List[int]:
        """Create several works with their content in one transaction; one rebuild follows."""
        created: List[int] = []
        with session_scope(self._factory) as session:
            for item in works:
                author = session.scalars(
                    select(Author).where(Author.slug == item.author_slug)
                ).first()
                if author is None:
                    raise ValueError(f"Unknown author slug '{item.author_slug}'")
                work = Work(
                    title=item.title,
                    slug=item.slug,
                    author=author,
                    description=item.description,
                    is_public=item.is_public,
                )
                session.add(work)
                session.flush()

                number = 0
                for text in item.paragraphs:
                    number += 1
                    session.add(Paragraph(work_id=work.id, number=number, text=text, order=number))
                for position, sec in enumerate(item.sections):
                    section = Section(
                        work_id=work.id, title=sec.title, level=sec.level, order=position
                    )
                    session.add(section)
                    session.flush()
                    for text in sec.paragraphs:
                        number += 1
                        session.add(
                            Paragraph(
                                work_id=work.id,
                                section_id=section.id,
                                number=number,
                                text=text,
                                order=number,
                            )
                        )
                created.append(work.id)
        self._changed()
        return created

    @staticmethod
    def _get_work(session: Session, work_id: int) -> Work:
        work = session.get(Work, work_id)
        if work is None:
            raise LookupError(f"Work {work_id} not found")
        return work


def _work_record(work: Work) -> WorkRecord:
    author = work.author
    return WorkRecord(
        id=work.id,
        title=work.title,
        slug=work.slug,
        description=work.description,
        is_public=work.is_public,
        active=work.active,
        author=AuthorRecord(id=author.id, name=author.name, slug=author.slug)
        if author is not None
        else None,
    )
