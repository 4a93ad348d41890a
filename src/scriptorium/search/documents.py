"""Search documents: the flat, retrievable units the index is built from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional

DocumentKind = Literal["title", "section", "paragraph"]
DOCUMENT_KINDS: tuple[DocumentKind, ...] = ("title", "section", "paragraph")


@dataclass(frozen=True, slots=True)
class SearchDocument:
    """One retrievable unit with denormalized display context.

    `id` encodes the origin kind and source record id, e.g. `title-12`,
    `section-40`, `paragraph-913`. `title` and `author` always carry the owning
    work's title and author name, whatever the kind.
    """

    id: str
    kind: DocumentKind
    title: str
    author: str
    work_slug: str
    author_slug: str
    text: str
    section: Optional[str] = None
    number: Optional[int] = None

    def searchable_text(self) -> str:
        """Concatenated title, author, section and body used by the heuristic matcher."""
        return f"{self.title} {self.author} {self.section or ''} {self.text}".strip()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "title": self.title,
            "author": self.author,
            "work_slug": self.work_slug,
            "author_slug": self.author_slug,
            "text": self.text,
        }
        if self.section is not None:
            out["section"] = self.section
        if self.number is not None:
            out["number"] = self.number
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchDocument:
        number = data.get("number")
        return cls(
            id=str(data["id"]),
            kind=data["kind"],
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            work_slug=str(data.get("work_slug") or ""),
            author_slug=str(data.get("author_slug") or ""),
            text=str(data.get("text") or ""),
            section=data.get("section"),
            number=int(number) if number is not None else None,
        )


def title_document_id(work_id: Any) -> str:
    return f"title-{work_id}"


def section_document_id(section_id: Any) -> str:
    return f"section-{section_id}"


def paragraph_document_id(paragraph_id: Any) -> str:
    return f"paragraph-{paragraph_id}"
