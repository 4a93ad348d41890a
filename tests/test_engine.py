from typing import List

from scriptorium.search.documents import SearchDocument
from scriptorium.search.engine import SearchEngine
from scriptorium.search.query import parse_query
from scriptorium.search.snippets import fragment, suggest_words


def test_search_joins_hits_to_documents(documents: List[SearchDocument]) -> None:
    engine = SearchEngine.build(documents)
    results = engine.search("compasivo")
    assert len(results) == 1
    result = results[0]
    assert result.document.id == "paragraph-1"
    assert result.document.work_slug == "kitab-i-iqan"
    assert result.document.number == 1
    assert result.score == result.hit.score > 0

    data = result.to_dict()
    assert data["strategy"] == "native"
    assert data["section"] == "Primera parte"
    assert "text" not in data
    assert "Compasivo" in data["fragment"]


def test_search_page_reports_total_before_limit(documents: List[SearchDocument]) -> None:
    engine = SearchEngine.build(documents)
    results, total = engine.search_page("justicia", limit=2)
    assert total == 4
    assert len(results) == 2


def test_empty_engine_returns_nothing() -> None:
    engine = SearchEngine.empty()
    assert engine.search("Dios") == []
    assert engine.search("+Dios") == []
    assert engine.suggest("di") == []
    assert engine.stats() == {"documents": 0, "fields": []}


def test_stats_and_lookup(documents: List[SearchDocument]) -> None:
    engine = SearchEngine.build(documents)
    assert engine.stats() == {
        "documents": len(documents),
        "fields": ["title", "author", "section", "text"],
    }
    assert engine.get_document("title-2").title == "Casa Universal de Justicia"
    assert engine.get_document("missing") is None


def test_suggestions_complete_last_word(documents: List[SearchDocument]) -> None:
    engine = SearchEngine.build(documents)
    assert engine.suggest("la revel") == ["revelación"]
    assert engine.suggest("x") == []


def test_suggest_words_respects_limit_and_order() -> None:
    texts = ["pa paz pazguato", "pazos pazguato"]
    assert suggest_words(texts, "la PAZ", limit=2) == ["paz", "pazguato"]
    assert suggest_words(texts, "paz", limit=5) == ["paz", "pazguato", "pazos"]
    assert suggest_words(texts, "p", limit=5) == []


def test_fragment_windows_around_first_match() -> None:
    text = "a" * 120 + " justicia " + "b" * 300
    out = fragment(text, parse_query("justicia"), max_length=100)
    assert out.startswith("...")
    assert out.endswith("...")
    assert "justicia" in out
    assert len(out) == 100 + 6


def test_fragment_without_match_uses_leading_text() -> None:
    assert fragment("corto", parse_query("nada")) == "corto"
    long_text = "x" * 250
    assert fragment(long_text, parse_query("nada"), max_length=200) == "x" * 200 + "..."
