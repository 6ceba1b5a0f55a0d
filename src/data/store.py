"""
src/data/store.py
─────────────────
SQLite durable storage for the offline cache.

Provides:
  - OfflineStore.save_snapshot()     : Replace the last-known-good snapshot row
  - OfflineStore.load_snapshot()     : Snapshot document, or None on first run
  - OfflineStore.snapshot_info()     : Version / generatedAt / count without the payload
  - OfflineStore.save_translations() : Upsert one locale document
  - OfflineStore.load_translations() : All stored locale documents

Thread safety: uses check_same_thread=False + a per-store lock. Any sqlite
failure surfaces as CacheUnavailable.
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import UTC, datetime

from config.settings import settings
from src.data.catalog import Snapshot
from src.errors import CacheUnavailable

logger = logging.getLogger(__name__)


# ── Schema ────────────────────────────────────────────────────────────────────

_CREATE_SNAPSHOT = """
CREATE TABLE IF NOT EXISTS snapshot (
    id             INTEGER PRIMARY KEY CHECK (id = 1),
    version        TEXT NOT NULL,
    generated_at   TEXT NOT NULL,
    program_count  INTEGER NOT NULL,
    payload        TEXT NOT NULL,
    stored_at      TEXT NOT NULL
);
"""

_CREATE_TRANSLATIONS = """
CREATE TABLE IF NOT EXISTS translations (
    locale     TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    stored_at  TEXT NOT NULL
);
"""


def _create_tables(conn: sqlite3.Connection) -> None:
    with conn:
        conn.executescript(_CREATE_SNAPSHOT + _CREATE_TRANSLATIONS)


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


# ── Store ─────────────────────────────────────────────────────────────────────

class OfflineStore:
    """Single-file SQLite cache (``:memory:`` for tests)."""

    def __init__(self, path: str | None = None):
        self.path = settings.CACHE_PATH if path is None else path
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            _create_tables(self._conn)
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot open cache at {self.path!r}: {exc}") from exc

    def save_snapshot(self, snapshot: Snapshot) -> None:
        meta = snapshot.metadata
        row = (
            meta.version,
            meta.generated_at.isoformat(),
            meta.program_count,
            json.dumps(snapshot.to_document(), ensure_ascii=False),
            _now(),
        )
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    """INSERT OR REPLACE INTO snapshot
                       (id, version, generated_at, program_count, payload, stored_at)
                       VALUES (1,?,?,?,?,?)""",
                    row,
                )
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot write snapshot: {exc}") from exc

    def load_snapshot(self) -> dict | None:
        try:
            with self._lock:
                row = self._conn.execute("SELECT payload FROM snapshot WHERE id = 1").fetchone()
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot read snapshot: {exc}") from exc
        if row is None:
            return None
        try:
            return json.loads(row["payload"])
        except ValueError:
            logger.warning("Stored snapshot payload is corrupt; ignoring it")
            return None

    def snapshot_info(self) -> dict | None:
        """Row metadata of the stored snapshot, without the payload."""
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT version, generated_at, program_count, stored_at FROM snapshot WHERE id = 1"
                ).fetchone()
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot read snapshot: {exc}") from exc
        return dict(row) if row else None

    def save_translations(self, locale: str, document: dict) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO translations (locale, payload, stored_at) VALUES (?,?,?)",
                    (locale, json.dumps(document, ensure_ascii=False), _now()),
                )
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot write translations for {locale!r}: {exc}") from exc

    def load_translations(self) -> dict[str, dict]:
        try:
            with self._lock:
                rows = self._conn.execute("SELECT locale, payload FROM translations ORDER BY locale").fetchall()
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot read translations: {exc}") from exc
        documents: dict[str, dict] = {}
        for row in rows:
            try:
                documents[row["locale"]] = json.loads(row["payload"])
            except ValueError:
                logger.warning("Stored translations for %s are corrupt; ignoring them", row["locale"])
        return documents

    def clear(self) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute("DELETE FROM snapshot")
                self._conn.execute("DELETE FROM translations")
        except sqlite3.Error as exc:
            raise CacheUnavailable(f"cannot clear cache: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()
