"""Flatten works, sections and paragraphs into SearchDocuments.

Only content of publicly visible works is emitted. Records pointing at a
missing work, or at a work without an author, are skipped with a warning so a
single bad row never aborts the extraction.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from scriptorium.corpus import Corpus, SectionRecord, WorkRecord
from scriptorium.parsers.html_parser import to_plain_text

from .documents import (
    SearchDocument,
    paragraph_document_id,
    section_document_id,
    title_document_id,
)

logger = logging.getLogger(__name__)


def _owning_work(
    kind: str, record_id: int, work_id: int, works: Dict[int, WorkRecord]
) -> Optional[WorkRecord]:
    work = works.get(work_id)
    if work is None:
        logger.warning("Skipping %s %s: work %s does not exist", kind, record_id, work_id)
        return None
    if not work.visible:
        logger.debug("Skipping %s %s: work %s is not public", kind, record_id, work_id)
        return None
    if work.author is None:
        logger.warning("Skipping %s %s: work %s has no author", kind, record_id, work_id)
        return None
    return work


def extract_documents(corpus: Corpus, *, paragraph_limit: Optional[int] = None) -> List[SearchDocument]:
    """Return title documents, then section documents, then paragraph documents.

    The corpus is not modified. `paragraph_limit` caps the number of paragraph
    documents emitted (None means unlimited).
    """
    works: Dict[int, WorkRecord] = {w.id: w for w in corpus.works}
    sections: Dict[int, SectionRecord] = {s.id: s for s in corpus.sections}
    documents: List[SearchDocument] = []

    for work in corpus.works:
        if not work.visible:
            continue
        if work.author is None:
            logger.warning("Skipping work %s (%s): author is missing", work.id, work.slug)
            continue
        documents.append(
            SearchDocument(
                id=title_document_id(work.id),
                kind="title",
                title=work.title,
                author=work.author.name,
                work_slug=work.slug,
                author_slug=work.author.slug,
                text=f"{work.title} {work.description or ''}".strip(),
            )
        )

    for section in corpus.sections:
        if not section.active:
            continue
        owner = _owning_work("section", section.id, section.work_id, works)
        if owner is None or owner.author is None:
            continue
        documents.append(
            SearchDocument(
                id=section_document_id(section.id),
                kind="section",
                title=owner.title,
                author=owner.author.name,
                work_slug=owner.slug,
                author_slug=owner.author.slug,
                section=section.title,
                text=section.title,
            )
        )

    emitted = 0
    for paragraph in corpus.paragraphs:
        if paragraph_limit is not None and emitted >= paragraph_limit:
            logger.warning(
                "Paragraph limit of %d reached; remaining paragraphs are not indexed",
                paragraph_limit,
            )
            break
        if not paragraph.active:
            continue
        owner = _owning_work("paragraph", paragraph.id, paragraph.work_id, works)
        if owner is None or owner.author is None:
            continue
        section_title: Optional[str] = None
        if paragraph.section_id is not None:
            parent = sections.get(paragraph.section_id)
            if parent is None:
                logger.debug(
                    "Paragraph %s references missing section %s",
                    paragraph.id,
                    paragraph.section_id,
                )
            else:
                section_title = parent.title
        documents.append(
            SearchDocument(
                id=paragraph_document_id(paragraph.id),
                kind="paragraph",
                title=owner.title,
                author=owner.author.name,
                work_slug=owner.slug,
                author_slug=owner.author.slug,
                section=section_title,
                text=to_plain_text(paragraph.text),
                number=paragraph.number,
            )
        )
        emitted += 1

    return documents
