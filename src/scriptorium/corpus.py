"""Plain records describing the content handed to the search extractor.

The content store converts its ORM rows into these records so the extractor
can stay a pure transformation that is testable without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class AuthorRecord:
    """Display name and routing slug of an author."""

    id: int
    name: str
    slug: str


@dataclass(slots=True)
class WorkRecord:
    """A work and its owning author.

    Attributes
    ----------
    author: AuthorRecord | None
        None when the author reference is dangling.
    is_public / active:
        Both must be true for the work to be publicly visible.
    """

    id: int
    title: str
    slug: str
    author: Optional[AuthorRecord]
    description: Optional[str] = None
    is_public: bool = True
    active: bool = True

    @property
    def visible(self) -> bool:
        return self.is_public and self.active


@dataclass(slots=True)
class SectionRecord:
    """A section heading inside a work."""

    id: int
    work_id: int
    title: str
    level: int = 1
    parent_id: Optional[int] = None
    active: bool = True


@dataclass(slots=True)
class ParagraphRecord:
    """A paragraph body, possibly still carrying inline markup."""

    id: int
    work_id: int
    number: int
    text: str
    section_id: Optional[int] = None
    active: bool = True


@dataclass(slots=True)
class Corpus:
    """Everything the extractor needs, in display order."""

    works: List[WorkRecord] = field(default_factory=list)
    sections: List[SectionRecord] = field(default_factory=list)
    paragraphs: List[ParagraphRecord] = field(default_factory=list)
