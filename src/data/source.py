"""
src/data/source.py
──────────────────
HTTP source for catalog snapshots and locale documents.

The snapshot endpoint is polled with ``If-None-Match``; a 304 means the
published catalog has not changed and ``fetch_snapshot`` returns None.
"""
from __future__ import annotations

import logging

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)

UA = "BayNavigator-Directory/1.0"


class SnapshotSource:
    """Fetches published snapshot and translation documents."""

    def __init__(
        self,
        snapshot_url: str | None = None,
        translations_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ):
        self.snapshot_url = settings.SNAPSHOT_URL if snapshot_url is None else snapshot_url
        self.translations_url = (settings.TRANSLATIONS_URL if translations_url is None else translations_url).rstrip("/")
        self._client = client or httpx.Client(
            timeout=settings.HTTP_TIMEOUT_S if timeout is None else timeout,
            headers={"User-Agent": UA, "Accept": "application/json"},
            follow_redirects=True,
        )
        self._etag: str | None = None

    @property
    def configured(self) -> bool:
        return bool(self.snapshot_url)

    @property
    def etag(self) -> str | None:
        return self._etag

    def fetch_snapshot(self) -> dict | None:
        """
        Fetch the snapshot document.

        Returns:
            The decoded document, or None when the server answered 304.

        Raises:
            httpx.HTTPError: network failure or non-2xx status.
            ValueError: no URL configured, or body is not a JSON object.
        """
        if not self.snapshot_url:
            raise ValueError("SNAPSHOT_URL is not configured")
        headers = {"If-None-Match": self._etag} if self._etag else {}
        resp = self._client.get(self.snapshot_url, headers=headers)
        if resp.status_code == 304:
            logger.debug("Snapshot unchanged (etag %s)", self._etag)
            return None
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("snapshot response is not a JSON object")
        self._etag = resp.headers.get("ETag") or self._etag
        return data

    def fetch_translations(self, locale: str) -> dict:
        """Nested locale document from ``{TRANSLATIONS_URL}/{locale}.json``."""
        if not self.translations_url:
            raise ValueError("TRANSLATIONS_URL is not configured")
        resp = self._client.get(f"{self.translations_url}/{locale}.json")
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"translations for {locale!r} are not a JSON object")
        return data

    def close(self) -> None:
        self._client.close()
