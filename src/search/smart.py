"""
src/search/smart.py
───────────────────
Opt-in natural-language search backed by a remote ranking service.

The service only advises: keyword scores are always computed, and each slug
the service ranks gets a bounded boost on top. Slugs outside the filtered
candidate set are ignored, so the service can never widen a filter.

Timeouts are enforced by the caller (see ``SearchSession``); the client only
maps transport failures onto SearchUnavailable / SearchTimeout.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from config.settings import settings
from src.data.models import Program, ScoredProgram
from src.errors import SearchTimeout, SearchUnavailable
from src.search.base import SearchMode, SearchStrategy, rank
from src.search.keyword import KeywordStrategy, keyword_scores, tokenize

logger = logging.getLogger(__name__)

SMART_BOOST = 1.0
REDACTED = "[REDACTED]"

# Order matters: longer digit runs first so a card number is not eaten as a phone
_PII_PATTERNS = [
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),                                  # SSN
    re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{1,7}\b"),           # card
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),     # email
    re.compile(r"\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),                           # (415) 555-0100
    re.compile(r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"),                       # phone
    re.compile(r"\b\d{8,17}\b"),                                            # SSN without dashes, accounts
]

_SLUG_KEYS = ("rankedSlugs", "ranked_slugs", "slugs")
_PROGRAM_KEYS = ("programs", "results")
_USED_AI_KEYS = ("usedAi", "usedAI", "used_ai")


def sanitize_query(text: str) -> str:
    """Replace SSNs, card numbers, emails, phone and account numbers with [REDACTED]."""
    for pattern in _PII_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


@dataclass(frozen=True)
class SmartResponse:
    ranked_slugs: tuple[str, ...]
    used_ai: bool = True

    @classmethod
    def from_payload(cls, payload: Any) -> SmartResponse:
        """
        Accepts ``{"rankedSlugs": [...]}``, ``{"slugs": [...]}`` or
        ``{"programs": [{"id"|"slug": ...}, ...]}``.

        Raises:
            SearchUnavailable: payload has none of the known shapes.
        """
        if not isinstance(payload, dict):
            raise SearchUnavailable("smart search returned a non-object payload")
        used_ai = True
        for key in _USED_AI_KEYS:
            if key in payload:
                used_ai = bool(payload[key])
                break
        for key in _SLUG_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return cls(ranked_slugs=_unique(str(s) for s in value if isinstance(s, str)), used_ai=used_ai)
        for key in _PROGRAM_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                slugs = (
                    item.get("id") or item.get("slug")
                    for item in value
                    if isinstance(item, dict)
                )
                return cls(ranked_slugs=_unique(str(s) for s in slugs if s), used_ai=used_ai)
        raise SearchUnavailable("smart search response has no ranked programs")


def _unique(values) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


class SmartClient(Protocol):
    def query(self, text: str, locale: str) -> SmartResponse: ...


class SmartSearchClient:
    """JSON-over-HTTP client for the ranking service."""

    def __init__(self, url: str | None = None, client: httpx.Client | None = None):
        self.url = settings.SMART_SEARCH_URL if url is None else url
        self._client = client or httpx.Client(timeout=settings.SMART_SEARCH_TIMEOUT_S)

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def query(self, text: str, locale: str) -> SmartResponse:
        if not self.url:
            raise SearchUnavailable("smart search URL is not configured")
        payload = {"message": sanitize_query(text), "locale": locale}
        try:
            resp = self._client.post(self.url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as exc:
            raise SearchTimeout(f"smart search timed out: {exc}") from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise SearchUnavailable(f"smart search failed: {exc}") from exc
        return SmartResponse.from_payload(data)

    def close(self) -> None:
        self._client.close()


def smart_boosts(ranked_slugs: Sequence[str], candidates: Sequence[Program]) -> dict[str, float]:
    """``SMART_BOOST × (n − rank) / n`` for each ranked slug inside the candidate set."""
    allowed = {p.slug for p in candidates}
    ranked = [slug for slug in dict.fromkeys(ranked_slugs) if slug in allowed]
    n = len(ranked)
    return {slug: SMART_BOOST * (n - i) / n for i, slug in enumerate(ranked)}


class SmartStrategy(SearchStrategy):
    mode = SearchMode.SMART

    def __init__(self, client: SmartClient, keyword: KeywordStrategy | None = None):
        self.client = client
        self.keyword = keyword or KeywordStrategy()

    @property
    def available(self) -> bool:
        return getattr(self.client, "configured", True)

    def search(self, query: str, candidates: Sequence[Program], locale: str = "en") -> list[ScoredProgram]:
        return self.ranked(query, candidates, locale)[0]

    def ranked(
        self,
        query: str,
        candidates: Sequence[Program],
        locale: str = "en",
    ) -> tuple[list[ScoredProgram], bool]:
        """
        Keyword scores plus the service's advisory boosts.

        Returns:
            (results, used_ai) where used_ai echoes the service's ``usedAi`` flag.

        Raises:
            SearchUnavailable / SearchTimeout: the service failed.
        """
        if not tokenize(query):
            return self.keyword.search(query, candidates, locale), False
        response = self.client.query(query, locale)
        scores = keyword_scores(query, candidates)
        boosts = smart_boosts(response.ranked_slugs, candidates)
        for slug, boost in boosts.items():
            scores[slug] = scores.get(slug, 0.0) + boost
        logger.debug(
            "Smart search ranked %d slugs, %d inside the candidate set",
            len(response.ranked_slugs),
            len(boosts),
        )
        return rank(scores, candidates), response.used_ai
