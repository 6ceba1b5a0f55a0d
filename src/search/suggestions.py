"""
src/search/suggestions.py
─────────────────────────
Search-box suggestions and the "can't find what you need?" fallbacks.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable

from src.data.models import Program, Suggestion
from src.i18n.translator import LocaleResolver

MAX_RECENT = 5
MAX_SUGGESTIONS = 5
MIN_QUERY_LENGTH = 2

# (id, title key, description key, href)
FALLBACKS: tuple[tuple[str, str, str, str], ...] = (
    ("call211", "fallback.call211", "fallback.call211Desc", "tel:211"),
    ("legal-aid", "fallback.legalAid", "fallback.legalAidDesc", "https://www.lawhelpca.org"),
    ("calfresh", "fallback.calfresh", "fallback.calfreshDesc", "https://www.getcalfresh.org"),
    ("benefitscal", "fallback.benefitsCal", "fallback.benefitsCalDesc", "https://benefitscal.com"),
)


class RecentSearches:
    """Most-recent-first query history, deduplicated case-insensitively. In memory only."""

    def __init__(self, limit: int = MAX_RECENT):
        self.limit = limit
        self._items: list[str] = []
        self._lock = threading.Lock()

    def add(self, query: str) -> None:
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return
        with self._lock:
            folded = query.casefold()
            self._items = [query] + [q for q in self._items if q.casefold() != folded]
            del self._items[self.limit:]

    def items(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


def suggest(query: str, programs: Iterable[Program], recent: RecentSearches | None = None) -> list[str]:
    """Up to five program names containing ``query``; recent searches when it is empty."""
    query = query.strip().casefold()
    if not query:
        return recent.items() if recent is not None else []
    names = []
    for program in programs:
        if query in program.name.casefold() and program.name not in names:
            names.append(program.name)
            if len(names) == MAX_SUGGESTIONS:
                break
    return names


def fallback_suggestions(resolver: LocaleResolver, locale: str) -> list[Suggestion]:
    return [
        Suggestion(
            id=sid,
            title=resolver.t(title_key, locale),
            description=resolver.t(desc_key, locale),
            href=href,
        )
        for sid, title_key, desc_key, href in FALLBACKS
    ]
