"""
src/search/keyword.py
─────────────────────
Deterministic keyword search. Always available: no network, no locale.

Each query token is matched as a substring against weighted fields:

    name 3.0 > description 2.0 > keywords 1.5 > taxonomy 1.0

A field contributes ``weight × (tokens found / tokens)``. A full-phrase hit
in the name adds a bonus of 1.0.

A token with no substring hit in a field can still count as a near-miss
("calfrsh" → "calfresh"): its best ``SequenceMatcher`` ratio against the
field's words, if at least 0.8, counts for half of that ratio. A misspelled
token therefore always scores below the correctly spelled one.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from difflib import SequenceMatcher
from functools import lru_cache

from config.taxonomy import taxonomy_label
from src.data.models import Program, ScoredProgram
from src.search.base import SearchMode, SearchStrategy, rank

FIELD_WEIGHTS: dict[str, float] = {
    "name": 3.0,
    "description": 2.0,
    "keywords": 1.5,
    "taxonomy": 1.0,
}
NAME_PHRASE_BONUS = 1.0

FUZZY_THRESHOLD = 0.8
FUZZY_WEIGHT = 0.5
MIN_FUZZY_LENGTH = 6

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "any", "are", "can", "for", "get", "help", "i", "in", "is",
        "me", "my", "need", "of", "on", "or", "some", "the", "to", "want", "what", "where",
        "with",
    }
)

_TOKEN = re.compile(r"\w+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens with stop words removed, unless that would remove every token."""
    tokens = _TOKEN.findall(text.casefold())
    content = [tok for tok in tokens if tok not in STOP_WORDS]
    return content or tokens


@lru_cache(maxsize=4096)
def _field_texts(program: Program) -> dict[str, str]:
    taxonomy = [
        *program.categories,
        *(taxonomy_label("category", c) for c in program.categories),
        *program.groups,
        *(taxonomy_label("group", g) for g in program.groups),
        *program.areas,
    ]
    return {
        "name": program.name.casefold(),
        "description": program.description.casefold(),
        "keywords": " ".join(program.keywords).casefold(),
        "taxonomy": " ".join(taxonomy).casefold(),
    }


@lru_cache(maxsize=4096)
def _field_words(program: Program) -> dict[str, frozenset[str]]:
    return {field: frozenset(_TOKEN.findall(text)) for field, text in _field_texts(program).items()}


def fuzzy_ratio(token: str, words: frozenset[str]) -> float:
    """Best similarity of ``token`` to any word, or 0.0 below the threshold."""
    if len(token) < MIN_FUZZY_LENGTH:
        return 0.0
    best = 0.0
    matcher = SequenceMatcher(None, "", token)
    for word in words:
        matcher.set_seq1(word)
        if matcher.real_quick_ratio() < FUZZY_THRESHOLD or matcher.quick_ratio() < FUZZY_THRESHOLD:
            continue
        best = max(best, matcher.ratio())
    return best if best >= FUZZY_THRESHOLD else 0.0


def _token_hit(token: str, text: str, words: frozenset[str]) -> float:
    if token in text:
        return 1.0
    return FUZZY_WEIGHT * fuzzy_ratio(token, words)


def score_program(tokens: Sequence[str], program: Program) -> float:
    if not tokens:
        return 0.0
    texts = _field_texts(program)
    words = _field_words(program)
    score = 0.0
    for field, weight in FIELD_WEIGHTS.items():
        hits = sum(_token_hit(tok, texts[field], words[field]) for tok in tokens)
        score += weight * hits / len(tokens)
    if " ".join(tokens) in texts["name"]:
        score += NAME_PHRASE_BONUS
    return score


def keyword_scores(query: str, candidates: Sequence[Program]) -> dict[str, float]:
    """Raw score for every candidate, zeros included."""
    tokens = tokenize(query)
    return {p.slug: score_program(tokens, p) for p in candidates}


class KeywordStrategy(SearchStrategy):
    mode = SearchMode.KEYWORD

    def search(self, query: str, candidates: Sequence[Program], locale: str = "en") -> list[ScoredProgram]:
        """
        Matching candidates, best first (score desc, slug asc).

        An empty query returns every candidate in catalog order with score 0.
        """
        if not tokenize(query):
            return [ScoredProgram(program=p, score=0.0) for p in candidates]
        return rank(keyword_scores(query, candidates), candidates)
