"""SQLAlchemy models for Scriptorium storage.

Defines the content entities (Author, Work, Section, Paragraph) read by the
search extractor, and the persisted search index snapshot.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class Author(Base):
    """An author owning one or more works."""

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    order: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    works: Mapped[list[Work]] = relationship(back_populates="author")


class Work(Base):
    """A published or draft work; only public and active works are searchable."""

    __tablename__ = "works"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("authors.id", ondelete="SET NULL"), default=None
    )
    title: Mapped[str] = mapped_column(String(512))
    slug: Mapped[str] = mapped_column(String(255), unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    author: Mapped[Optional[Author]] = relationship(back_populates="works")
    sections: Mapped[list[Section]] = relationship(
        back_populates="work", cascade="all, delete-orphan"
    )
    paragraphs: Mapped[list[Paragraph]] = relationship(
        back_populates="work", cascade="all, delete-orphan"
    )


class Section(Base):
    """A heading within a work; sections nest through `parent_id`."""

    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_id: Mapped[int] = mapped_column(ForeignKey("works.id", ondelete="CASCADE"))
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("sections.id", ondelete="SET NULL"), default=None
    )

    title: Mapped[str] = mapped_column(String(512))
    level: Mapped[int] = mapped_column(Integer, default=1)
    order: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    work: Mapped[Work] = relationship(back_populates="sections")


class Paragraph(Base):
    """A numbered paragraph of a work, optionally inside a section."""

    __tablename__ = "paragraphs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    work_id: Mapped[int] = mapped_column(ForeignKey("works.id", ondelete="CASCADE"))
    section_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("sections.id", ondelete="SET NULL"), default=None
    )

    number: Mapped[int] = mapped_column(Integer)
    text: Mapped[str] = mapped_column(Text)
    order: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    work: Mapped[Work] = relationship(back_populates="paragraphs")


class SearchIndexRecord(Base):
    """Persisted search index snapshot, one row per snapshot version."""

    __tablename__ = "search_index"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version: Mapped[str] = mapped_column(String(32), unique=True)
    documents: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    count: Mapped[int] = mapped_column(Integer, default=0)
    title_count: Mapped[int] = mapped_column(Integer, default=0)
    section_count: Mapped[int] = mapped_column(Integer, default=0)
    paragraph_count: Mapped[int] = mapped_column(Integer, default=0)
