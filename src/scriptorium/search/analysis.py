"""Text analysis for the search index.

A Whoosh analyzer chain: regex tokenizer, lowercase filter and a small
rule-based stemmer for common Spanish derivational endings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from whoosh.analysis import LowercaseFilter, RegexTokenizer, StemFilter

if TYPE_CHECKING:
    from whoosh.analysis.analyzers import CompositeAnalyzer

# Words, keeping inner apostrophes so "Bahá'u'lláh" stays a single token
TOKEN_PATTERN = r"\w+(?:['’]\w+)*"

# Checked in order; the first matching suffix wins and at most one rule applies
SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("ción", "cion"),
    ("sión", "sion"),
    ("mente", ""),
    ("ando", ""),
    ("iendo", ""),
    ("ado", ""),
    ("ido", ""),
)


def spanish_stem(word: str) -> str:
    """Strip one common Spanish suffix.

    Approximate on purpose: "revelación" -> "revelacion", "claramente" ->
    "clara", "amado" -> "am". Words without a known suffix are returned as is.
    """
    for suffix, replacement in SUFFIX_RULES:
        if word.endswith(suffix):
            # a bare suffix ("ado") is kept rather than stemmed to nothing
            return word[: -len(suffix)] + replacement or word
    return word


def make_analyzer() -> CompositeAnalyzer:
    return RegexTokenizer(TOKEN_PATTERN) | LowercaseFilter() | StemFilter(stemfn=spanish_stem)


def analyze(analyzer: CompositeAnalyzer, text: str) -> List[str]:
    """Run `text` through `analyzer` and return the non-empty token texts."""
    # Whoosh reuses one Token object across the stream; copy the text out
    return [t.text for t in analyzer(text) if t.text]
