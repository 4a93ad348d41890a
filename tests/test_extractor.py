import copy
import logging
from typing import List

import pytest

from scriptorium.corpus import Corpus, ParagraphRecord, WorkRecord
from scriptorium.search.documents import SearchDocument
from scriptorium.search.extractor import extract_documents


def test_extracts_titles_sections_then_paragraphs(documents: List[SearchDocument]) -> None:
    assert [d.id for d in documents] == [
        "title-1",
        "title-2",
        "section-1",
        "section-2",
        "paragraph-1",
        "paragraph-2",
        "paragraph-3",
        "paragraph-4",
    ]


def test_title_document_carries_title_and_description(documents: List[SearchDocument]) -> None:
    doc = documents[0]
    assert doc.kind == "title"
    assert doc.text == "El Kitab-i-Iqan El Libro de la Certeza"
    assert doc.author == "Bahá'u'lláh"
    assert doc.work_slug == "kitab-i-iqan"
    assert doc.author_slug == "bahaullah"
    assert doc.section is None
    assert doc.number is None


def test_section_and_paragraph_context(documents: List[SearchDocument]) -> None:
    by_id = {d.id: d for d in documents}
    section = by_id["section-2"]
    assert section.kind == "section"
    assert section.section == section.text == "La revelación progresiva"
    assert section.title == "Casa Universal de Justicia"

    paragraph = by_id["paragraph-3"]
    assert paragraph.kind == "paragraph"
    assert paragraph.section == "La revelación progresiva"
    assert paragraph.number == 1
    assert paragraph.author == "'Abdu'l-Bahá"


def test_markup_is_flattened(documents: List[SearchDocument]) -> None:
    by_id = {d.id: d for d in documents}
    assert by_id["paragraph-4"].text == "La unidad de la humanidad & la paz"
    assert by_id["paragraph-4"].section is None


def test_hidden_inactive_and_orphaned_content_is_skipped(documents: List[SearchDocument]) -> None:
    ids = {d.id for d in documents}
    assert "title-3" not in ids  # unpublished work
    assert "paragraph-5" not in ids  # paragraph of unpublished work
    assert "section-3" not in ids  # section of missing work
    assert "paragraph-6" not in ids  # paragraph of missing work
    assert "paragraph-7" not in ids  # inactive paragraph
    assert all("oculto" not in d.text for d in documents)


def test_orphans_are_logged_not_fatal(corpus: Corpus, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="scriptorium.search.extractor"):
        extract_documents(corpus)
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "section 3" in messages
    assert "paragraph 6" in messages


def test_work_without_author_is_skipped_with_its_content() -> None:
    corpus = Corpus(
        works=[WorkRecord(id=1, title="Sin autor", slug="sin-autor", author=None)],
        paragraphs=[ParagraphRecord(id=1, work_id=1, number=1, text="texto")],
    )
    assert extract_documents(corpus) == []


def test_paragraph_limit_caps_paragraph_documents(corpus: Corpus) -> None:
    docs = extract_documents(corpus, paragraph_limit=2)
    assert [d.id for d in docs if d.kind == "paragraph"] == ["paragraph-1", "paragraph-2"]
    assert len([d for d in docs if d.kind == "title"]) == 2


def test_extraction_does_not_mutate_input(corpus: Corpus) -> None:
    before = copy.deepcopy(corpus)
    extract_documents(corpus)
    assert corpus == before


def test_document_dict_round_trip_keeps_optional_fields(documents: List[SearchDocument]) -> None:
    paragraph = next(d for d in documents if d.id == "paragraph-3")
    data = paragraph.to_dict()
    assert data["number"] == 1 and data["section"] == "La revelación progresiva"
    assert "number" not in documents[0].to_dict()
    assert SearchDocument.from_dict(data) == paragraph
