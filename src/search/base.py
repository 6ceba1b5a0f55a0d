"""
src/search/base.py
──────────────────
Search modes and the strategy interface shared by keyword and smart search.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum

from src.data.models import Program, ScoredProgram


class SearchMode(str, Enum):
    KEYWORD = "keyword"
    SMART = "smart"


class SearchStrategy(ABC):
    """Ranks a candidate set for a query. Candidates are already filtered."""

    mode: SearchMode

    @abstractmethod
    def search(self, query: str, candidates: Sequence[Program], locale: str = "en") -> list[ScoredProgram]:
        """Scored programs, best first."""


def rank(scored: dict[str, float], candidates: Sequence[Program]) -> list[ScoredProgram]:
    """Positive scores only, ordered by score descending then slug ascending."""
    by_slug = {p.slug: p for p in candidates}
    ordered = sorted(
        ((slug, score) for slug, score in scored.items() if score > 0),
        key=lambda item: (-item[1], item[0]),
    )
    return [ScoredProgram(program=by_slug[slug], score=round(score, 6)) for slug, score in ordered]
