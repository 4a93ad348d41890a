from typing import List

from scriptorium.config import BoostConfig
from scriptorium.search.documents import SearchDocument
from scriptorium.search.index import build_index


def make_doc(doc_id: str, *, title: str = "", author: str = "", section: str = "", text: str = "") -> SearchDocument:
    return SearchDocument(
        id=doc_id,
        kind="paragraph",
        title=title,
        author=author,
        work_slug="obra",
        author_slug="autor",
        section=section or None,
        text=text,
        number=1,
    )


def test_ranked_lookup_finds_every_field(documents: List[SearchDocument]) -> None:
    index = build_index(documents)
    matches = index.search(["justicia"])
    ids = [m.document_id for m in matches]
    assert set(ids) == {"title-2", "section-2", "paragraph-3", "paragraph-4"}
    assert ids[0] in {"title-2", "paragraph-3"}
    scores = [m.score for m in matches]
    assert scores == sorted(scores, reverse=True)
    assert all(s > 0 for s in scores)


def test_matches_report_matched_terms(documents: List[SearchDocument]) -> None:
    index = build_index(documents)
    top = {m.document_id: m for m in index.search(["justicia"])}
    assert ("title", "justicia") in top["section-2"].matched_terms
    assert ("text", "justicia") in top["paragraph-3"].matched_terms


def test_query_terms_are_stemmed_and_case_folded(documents: List[SearchDocument]) -> None:
    index = build_index(documents)
    ids = {m.document_id for m in index.search(["REVELACIÓN"])}
    assert ids == {"section-2", "paragraph-2", "paragraph-3"}


def test_stemming_joins_derived_forms() -> None:
    index = build_index([make_doc("a", text="el amado"), make_doc("b", text="la paz")])
    assert [m.document_id for m in index.search(["amando"])] == ["a"]


def test_title_boost_outranks_body() -> None:
    docs = [
        make_doc("in-text", title="Otra obra", text="justicia"),
        make_doc("in-title", title="Justicia", text="otra cosa"),
    ]
    ids = [m.document_id for m in build_index(docs).search(["justicia"])]
    assert ids == ["in-title", "in-text"]


def test_custom_boosts_change_ranking() -> None:
    docs = [
        make_doc("in-text", title="Otra obra", text="justicia"),
        make_doc("in-title", title="Justicia", text="otra cosa"),
    ]
    boosts = BoostConfig(title=0.1, author=1.0, section=1.0, text=5.0)
    ids = [m.document_id for m in build_index(docs, boosts).search(["justicia"])]
    assert ids == ["in-text", "in-title"]


def test_multi_term_queries_are_disjunctive(documents: List[SearchDocument]) -> None:
    index = build_index(documents)
    ids = {m.document_id for m in index.search(["compasivo", "unidad"])}
    assert ids == {"paragraph-1", "paragraph-4"}


def test_rebuilding_is_deterministic(documents: List[SearchDocument]) -> None:
    first = build_index(documents).search(["dios", "justicia", "revelación"])
    second = build_index(documents).search(["dios", "justicia", "revelación"])
    assert first == second


def test_empty_index_and_empty_terms() -> None:
    assert build_index([]).search(["dios"]) == []
    index = build_index([make_doc("a", text="dios")])
    assert index.search([]) == []
    assert index.search(["...", "+"]) == []
    assert index.size == 1
