"""
src/errors.py
─────────────
Failure taxonomy for the directory core.

Every error here has a defined local recovery; none of them is meant to reach
the page. ``NoResults`` is deliberately absent: an empty result set is a
normal outcome (see ``DirectoryView.empty``).
"""
from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory core errors."""


class TranslationMissing(DirectoryError, LookupError):
    """A key is absent from one locale catalog. Recovered by the fallback chain."""

    def __init__(self, locale: str, key: str):
        super().__init__(f"{key!r} missing from locale {locale!r}")
        self.locale = locale
        self.key = key


class CatalogMalformed(DirectoryError, ValueError):
    """A snapshot record failed validation. The record is skipped."""

    def __init__(self, slug: str, reason: str):
        super().__init__(f"program {slug!r} skipped: {reason}")
        self.slug = slug
        self.reason = reason


class SearchUnavailable(DirectoryError):
    """The smart-search service could not answer. Keyword search takes over."""


class SearchTimeout(SearchUnavailable):
    """The smart-search service did not answer within the timeout."""


class CacheUnavailable(DirectoryError):
    """Durable storage cannot be opened or written. Falls back to memory only."""
