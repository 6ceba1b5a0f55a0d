"""
config/settings.py
──────────────────
Application configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass
from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    # Server
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    PORT: int = int(os.getenv("PORT", "8050"))
    HOST: str = os.getenv("HOST", "0.0.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Offline cache (SQLite path, ":memory:" for tests)
    CACHE_PATH: str = os.getenv("CACHE_PATH", "directory_cache.db")

    # Catalog sources
    SNAPSHOT_URL: str = os.getenv("SNAPSHOT_URL", "")
    TRANSLATIONS_URL: str = os.getenv("TRANSLATIONS_URL", "")
    SEED_SNAPSHOT_PATH: str = os.getenv(
        "SEED_SNAPSHOT_PATH", str(_ROOT / "src" / "data" / "seed" / "snapshot.json")
    )
    HTTP_TIMEOUT_S: float = float(os.getenv("HTTP_TIMEOUT_S", "10"))

    # i18n
    DEFAULT_LANG: str = os.getenv("DEFAULT_LANG", "en")
    SOURCE_LANG: str = os.getenv("SOURCE_LANG", "en")

    # Smart search
    SMART_SEARCH_URL: str = os.getenv("SMART_SEARCH_URL", "")
    SMART_SEARCH_ENABLED: bool = os.getenv("SMART_SEARCH_ENABLED", "false").lower() == "true"
    SMART_SEARCH_TIMEOUT_S: float = float(os.getenv("SMART_SEARCH_TIMEOUT_S", "4"))

    # Per-client search sessions kept in memory (least recently used evicted)
    SESSION_LIMIT: int = int(os.getenv("SESSION_LIMIT", "1000"))


settings = Settings()
