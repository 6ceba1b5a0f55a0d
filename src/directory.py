"""
src/directory.py
────────────────
DirectoryService: the one entry point the UI calls.

    query + filters ──▶ apply_filter(current snapshot)
                    ──▶ SearchSession.run (keyword or smart)
                    ──▶ LocaleResolver.localize_program
                    ──▶ DirectoryView

Each call binds one CatalogIndex for its whole duration.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

from config.locales import LOCALES
from config.settings import settings
from src.data.cache import OfflineCacheManager
from src.data.catalog import CatalogIndex, sort_programs
from src.data.models import Facets, FilterSelection, LocalizedProgram, Metadata, Suggestion
from src.i18n.translator import LocaleResolver, TranslationCatalog, default_catalog, normalize_locale
from src.search.base import SearchMode
from src.search.engine import DegradeReason, SearchEngine, SearchOutcome, SearchSession
from src.search.filters import apply_filter
from src.search.smart import SmartSearchClient, SmartStrategy
from src.search.suggestions import RecentSearches, fallback_suggestions, suggest

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"


@dataclass(frozen=True)
class DirectoryView:
    locale: str
    results: tuple[LocalizedProgram, ...]
    facets: Facets
    count_label: str
    smart_requested: bool = False
    smart_used: bool = False
    used_ai: bool = False
    smart_label: str | None = None
    degraded: DegradeReason | None = None
    fallbacks: tuple[Suggestion, ...] = ()
    notices: tuple[str, ...] = ()
    metadata: Metadata = field(default_factory=Metadata)
    generation: int = 0
    sequence: int = 0
    superseded: bool = False
    rtl: bool = False

    @property
    def empty(self) -> bool:
        return not self.results

    @property
    def total(self) -> int:
        return len(self.results)


class DirectoryService:
    def __init__(
        self,
        cache: OfflineCacheManager,
        resolver: LocaleResolver | None = None,
        engine: SearchEngine | None = None,
        smart_timeout: float | None = None,
        session_limit: int | None = None,
    ):
        self.cache = cache
        self.resolver = resolver or LocaleResolver(default_catalog())
        self.engine = engine or SearchEngine()
        self.smart_timeout = smart_timeout
        self.session_limit = max(1, settings.SESSION_LIMIT if session_limit is None else session_limit)
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="smart-search")
        self._lock = threading.Lock()
        # Least recently used first
        self._sessions: OrderedDict[str, SearchSession] = OrderedDict()
        self._recent: OrderedDict[str, RecentSearches] = OrderedDict()

    @classmethod
    def from_settings(cls) -> DirectoryService:
        """
        Wire the service from config/settings.py and load the catalog.

        Starts from the stored translations (or the bundled ones) and fetches
        fresh documents in the background, so startup never waits on the network.
        """
        cache = OfflineCacheManager()
        cache.load()

        catalog = cache.load_translations() or default_catalog()

        smart = None
        if settings.SMART_SEARCH_ENABLED and settings.SMART_SEARCH_URL:
            smart = SmartStrategy(SmartSearchClient())
        elif settings.SMART_SEARCH_ENABLED:
            logger.warning("SMART_SEARCH_ENABLED is set but SMART_SEARCH_URL is empty; smart search disabled")
        service = cls(cache, resolver=LocaleResolver(catalog), engine=SearchEngine(smart=smart))
        service.refresh_translations_in_background()
        return service

    def refresh_translations_in_background(self) -> Future | None:
        """Fetch every supported locale on the cache worker and swap the resolver when done."""
        future = self.cache.refresh_translations_in_background(LOCALES)
        if future is not None:
            future.add_done_callback(self._install_translations)
        return future

    def _install_translations(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Translation refresh failed: %s", exc)
            return
        catalog: TranslationCatalog | None = future.result()
        if catalog is None:
            return
        self.resolver = LocaleResolver(catalog)
        logger.info("Installed translations for %d locales", len(catalog.locales))

    # ── Sessions ──────────────────────────────────────────────────────────────

    def session(self, session_id: str = DEFAULT_SESSION) -> SearchSession:
        with self._lock:
            return self._lru(self._sessions, session_id, self._new_session)

    def recent(self, session_id: str = DEFAULT_SESSION) -> RecentSearches:
        with self._lock:
            return self._lru(self._recent, session_id, RecentSearches)

    def _new_session(self) -> SearchSession:
        return SearchSession(self.engine, self._executor, self.smart_timeout)

    def _lru(self, entries: OrderedDict, session_id: str, factory):
        if session_id in entries:
            entries.move_to_end(session_id)
            return entries[session_id]
        entries[session_id] = value = factory()
        while len(entries) > self.session_limit:
            evicted, _ = entries.popitem(last=False)
            logger.debug("Evicted idle session %r", evicted)
        return value

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    @property
    def index(self) -> CatalogIndex:
        return self.cache.holder.current()

    @property
    def smart_available(self) -> bool:
        return self.engine.smart_available

    # ── Queries ───────────────────────────────────────────────────────────────

    def query(
        self,
        text: str = "",
        selection: FilterSelection | None = None,
        locale: str | None = None,
        smart: bool = False,
        online: bool = True,
        sort: str = "relevance",
        session_id: str = DEFAULT_SESSION,
        now: datetime | None = None,
    ) -> DirectoryView:
        index = self.index
        locale = normalize_locale(locale or settings.DEFAULT_LANG)
        selection = selection or FilterSelection()

        candidates = apply_filter(index.programs, selection)
        outcome = self.session(session_id).run(
            text, candidates, smart=smart, online=online, locale=locale, generation=index.generation
        )
        if outcome.superseded:
            logger.debug("Discarding superseded search %d", outcome.sequence)
            return DirectoryView(
                locale=locale,
                results=(),
                facets=Facets(),
                count_label="",
                sequence=outcome.sequence,
                generation=outcome.generation,
                superseded=True,
            )
        if outcome.results:
            self.recent(session_id).add(text)

        scores = {r.program.slug: r.score for r in outcome.results}
        ordered = sort_programs(outcome.programs, sort)
        results = tuple(
            self.resolver.localize_program(p, locale, now=now, score=scores.get(p.slug, 0.0)) for p in ordered
        )
        return DirectoryView(
            locale=locale,
            results=results,
            facets=index.facets(candidates),
            count_label=self.resolver.t("results.count", locale, count=len(results)),
            smart_requested=smart,
            smart_used=outcome.mode_used is SearchMode.SMART,
            used_ai=outcome.used_ai,
            smart_label=self._smart_label(outcome, locale),
            degraded=outcome.degraded,
            fallbacks=tuple(fallback_suggestions(self.resolver, locale)) if not results else (),
            notices=self._notices(online, locale),
            metadata=index.metadata,
            generation=index.generation,
            sequence=outcome.sequence,
            rtl=self.is_rtl(locale),
        )

    def program(self, slug: str, locale: str | None = None, now: datetime | None = None) -> LocalizedProgram | None:
        program = self.index.get(slug)
        if program is None:
            return None
        return self.resolver.localize_program(program, locale or settings.DEFAULT_LANG, now=now)

    def programs(self, slugs: Iterable[str], locale: str | None = None) -> list[LocalizedProgram]:
        """Localized programs for a slug list (e.g. saved favorites), unknown slugs dropped."""
        return [
            self.resolver.localize_program(p, locale or settings.DEFAULT_LANG) for p in self.index.get_many(slugs)
        ]

    def suggestions(self, text: str, session_id: str = DEFAULT_SESSION) -> list[str]:
        return suggest(text, self.index.programs, self.recent(session_id))

    def metadata(self) -> Metadata:
        return self.cache.get_metadata()

    def label(self, key: str, locale: str | None = None, **params) -> str:
        return self.resolver.t(key, locale or settings.DEFAULT_LANG, **params)

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _smart_label(self, outcome: SearchOutcome, locale: str) -> str | None:
        if outcome.mode_used is SearchMode.SMART:
            return self.resolver.t("search.aiPowered" if outcome.used_ai else "search.keywordOnly", locale)
        if not outcome.smart_requested or outcome.degraded is None:
            return None
        if outcome.degraded is DegradeReason.OFFLINE:
            return self.resolver.t("offline.smartSearchDisabled", locale)
        return self.resolver.t("search.degraded", locale)

    def _notices(self, online: bool, locale: str) -> tuple[str, ...]:
        notices = []
        if not online:
            notices.append(
                f"{self.resolver.t('offline.youreOffline', locale)}. {self.resolver.t('offline.offlineMessage', locale)}"
            )
        if not self.cache.offline_enabled:
            notices.append(self.resolver.t("offline.disabled", locale))
        return tuple(notices)

    def is_rtl(self, locale: str) -> bool:
        chain = self.resolver.chain(locale, include_source=False)
        code = chain[0] if chain else locale.split("-")[0]
        info = LOCALES.get(code) or LOCALES.get(code.split("-")[0])
        return bool(info and info.rtl)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.cache.shutdown()
