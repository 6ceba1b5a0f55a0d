"""
app.py
──────
Bay Navigator program directory: Application Entry Point.

Startup sequence:
  1. Configure logging from LOG_LEVEL
  2. Load the catalog (offline cache → network → bundled seed) and translations
  3. Create Dash app with FLATLY bootstrap theme
  4. Register all callbacks
  5. Run dev server (or expose `server` for gunicorn in production)
"""
import logging

import dash
import dash_bootstrap_components as dbc

from config.settings import settings
from src.directory import DirectoryService
from src.layout.main import create_layout

# ── 1. Logging ────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
)
logger = logging.getLogger("app")

# ── 2. Catalog ────────────────────────────────────────────────────────────────
logger.info("Loading program catalog...")
service = DirectoryService.from_settings()
meta = service.metadata()
logger.info(
    "Catalog ready: %d programs, version %s (offline cache %s)",
    meta.program_count,
    meta.version,
    "enabled" if service.cache.offline_enabled else "disabled",
)

# ── 3. Dash app ───────────────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.FLATLY],
    suppress_callback_exceptions=True,
    meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    title="Bay Navigator",
)

server = app.server  # gunicorn / Render entry point
app.layout = create_layout

# ── 4. Register callbacks ─────────────────────────────────────────────────────
from src.callbacks import directory, navigation

navigation.register(app, service)
directory.register(app, service)

# ── 5. Run ────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app.run(
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT,
    )
