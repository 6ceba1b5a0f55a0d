"""
src/data/cache.py
─────────────────
Offline cache manager: keeps the catalog and translations usable without a
network.

Startup (``load``):
  1. Durable snapshot present and readable → install it at once, schedule one
     background refresh, never wait on the network
  2. Otherwise fetch from the snapshot source
  3. Otherwise fall back to the bundled seed snapshot
  4. Otherwise run with an empty catalog

The durable snapshot has no expiry; it stays authoritative until a strictly
newer one is fetched. If the SQLite cache cannot be opened or written the
manager keeps working in memory and ``offline_enabled`` turns False.
"""
from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

import httpx

from config.settings import settings
from src.data.catalog import CatalogHolder, CatalogIndex, Snapshot, parse_snapshot
from src.data.models import Metadata
from src.data.source import SnapshotSource
from src.data.store import OfflineStore
from src.errors import CacheUnavailable, CatalogMalformed
from src.i18n.translator import TranslationCatalog

logger = logging.getLogger(__name__)

_UNSET = object()


class OfflineCacheManager:
    def __init__(
        self,
        holder: CatalogHolder | None = None,
        store: OfflineStore | None | object = _UNSET,
        source: SnapshotSource | None = None,
        seed_path: str | Path | None = None,
        cache_path: str | None = None,
    ):
        self.holder = holder or CatalogHolder()
        self.source = source or SnapshotSource()
        self.seed_path = Path(settings.SEED_SNAPSHOT_PATH if seed_path is None else seed_path)
        if store is _UNSET:
            try:
                store = OfflineStore(cache_path)
            except CacheUnavailable as exc:
                logger.warning("Offline cache disabled: %s", exc)
                store = None
        self._store: OfflineStore | None = store
        self._lock = threading.Lock()
        self._refresh_scheduled = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="catalog-refresh")

    @property
    def offline_enabled(self) -> bool:
        return self._store is not None

    # ── Startup ───────────────────────────────────────────────────────────────

    def load(self) -> CatalogIndex:
        """Install the best available snapshot and return the current index. Never raises."""
        durable = self._durable_snapshot()
        if durable is not None:
            self.holder.swap(CatalogIndex(durable))
            logger.info("Loaded %d programs from the offline cache", len(durable.programs))
            self._schedule_refresh_once()
            return self.holder.current()

        snapshot = self._fetch() or self._seed()
        if snapshot is None:
            logger.warning("No catalog available from network, cache or seed; starting empty")
            return self.holder.current()
        self._install(snapshot)
        return self.holder.current()

    def _read_durable(self) -> dict | None:
        if self._store is None:
            return None
        try:
            return self._store.load_snapshot()
        except CacheUnavailable as exc:
            self._disable(exc)
            return None

    def _durable_snapshot(self) -> Snapshot | None:
        document = self._read_durable()
        if document is None:
            return None
        try:
            snapshot, _ = parse_snapshot(document)
        except CatalogMalformed as exc:
            logger.warning("Ignoring unreadable offline snapshot: %s", exc)
            return None
        return snapshot

    def _fetch(self) -> Snapshot | None:
        if not self.source.configured:
            return None
        try:
            document = self.source.fetch_snapshot()
            if document is None:
                return None
            snapshot, _ = parse_snapshot(document)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("Snapshot fetch failed: %s", exc)
            return None
        return snapshot

    def _seed(self) -> Snapshot | None:
        try:
            with open(self.seed_path, encoding="utf-8") as f:
                document = json.load(f)
            snapshot, _ = parse_snapshot(document)
        except (OSError, ValueError) as exc:
            logger.warning("Seed snapshot unavailable at %s: %s", self.seed_path, exc)
            return None
        logger.info("Loaded %d programs from the bundled seed", len(snapshot.programs))
        return snapshot

    # ── Refresh ───────────────────────────────────────────────────────────────

    def refresh(self, document: dict | Snapshot) -> bool:
        """
        Install a fetched snapshot if it is newer than the current one.

        The durable copy is replaced only when the swap happens.

        Returns:
            True when the catalog was swapped.
        """
        snapshot = document if isinstance(document, Snapshot) else parse_snapshot(document)[0]
        return self._install(snapshot)

    def refresh_in_background(self) -> Future | None:
        """Fetch and refresh on the worker thread. None when no source is configured."""
        if not self.source.configured:
            return None
        return self._executor.submit(self._refresh_from_source)

    def _schedule_refresh_once(self) -> Future | None:
        with self._lock:
            if self._refresh_scheduled:
                return None
            self._refresh_scheduled = True
        return self.refresh_in_background()

    def _refresh_from_source(self) -> bool:
        try:
            document = self.source.fetch_snapshot()
            if document is None:
                return False
            return self.refresh(document)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("Background refresh failed, keeping cached catalog: %s", exc)
            return False

    def _install(self, snapshot: Snapshot) -> bool:
        swapped = self.holder.swap(CatalogIndex(snapshot))
        if swapped and self._store is not None:
            try:
                self._store.save_snapshot(snapshot)
            except CacheUnavailable as exc:
                self._disable(exc)
        return swapped

    def _disable(self, exc: CacheUnavailable) -> None:
        logger.warning("Offline cache disabled for this session: %s", exc)
        self._store = None

    # ── Metadata / translations ───────────────────────────────────────────────

    def get_metadata(self) -> Metadata:
        return self.holder.current().metadata

    def save_translations(self, catalog: TranslationCatalog, locales: Iterable[str]) -> list[str]:
        """Persist the given locales plus the source locale. Returns the locales written."""
        if self._store is None:
            return []
        subset = catalog.subset(locales)
        written = []
        try:
            for locale in subset.locales:
                self._store.save_translations(locale, subset.to_document(locale))
                written.append(locale)
        except CacheUnavailable as exc:
            self._disable(exc)
        return written

    def load_translations(self) -> TranslationCatalog | None:
        """Catalog of the stored locale documents, or None when nothing is stored."""
        if self._store is None:
            return None
        try:
            documents = self._store.load_translations()
        except CacheUnavailable as exc:
            self._disable(exc)
            return None
        if not documents:
            return None
        return TranslationCatalog(documents, source_locale=settings.SOURCE_LANG)

    def refresh_translations(self, locales: Iterable[str]) -> TranslationCatalog | None:
        """
        Fetch locale documents (plus the source locale) from the source and persist them.

        Falls back to the stored documents when the fetch fails.
        """
        wanted = dict.fromkeys([settings.SOURCE_LANG, *locales])
        documents = {}
        try:
            for locale in wanted:
                documents[locale] = self.source.fetch_translations(locale)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("Translation fetch failed, using stored translations: %s", exc)
            return self.load_translations()
        catalog = TranslationCatalog(documents, source_locale=settings.SOURCE_LANG)
        self.save_translations(catalog, catalog.locales)
        return catalog

    def refresh_translations_in_background(self, locales: Iterable[str]) -> Future | None:
        """Run ``refresh_translations`` on the worker thread. None when no translations URL is set."""
        if not self.source.translations_url:
            return None
        return self._executor.submit(self.refresh_translations, list(locales))

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
