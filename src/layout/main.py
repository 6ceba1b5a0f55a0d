"""
src/layout/main.py
───────────────────
Main application layout composition.

Contains:
  - dcc.Store for shared client-side state (locale, session id, connectivity)
  - dcc.Interval polling navigator.onLine
  - Navbar + directory page + footer
"""
import uuid

from dash import dcc, html

from config.settings import settings
from src.layout.navbar import create_navbar
from src.pages import directory


def create_layout() -> html.Div:
    """Assemble the root application layout. Called per page load."""
    return html.Div(
        [
            # ── Client-side state stores ──────────────────────────────────────
            dcc.Store(id="store-lang", data=settings.DEFAULT_LANG),
            dcc.Store(id="store-session", data=uuid.uuid4().hex),
            dcc.Store(id="store-online", data=True),

            # ── Connectivity probe ────────────────────────────────────────────
            dcc.Interval(
                id="interval-online",
                interval=15_000,   # 15 seconds
                n_intervals=0,
            ),

            # ── Navigation bar ────────────────────────────────────────────────
            create_navbar(settings.DEFAULT_LANG),

            # ── Page content ──────────────────────────────────────────────────
            html.Div(
                directory.layout(settings.DEFAULT_LANG),
                id="page-content",
                style={"minHeight": "calc(100vh - 60px)"},
            ),

            # ── Footer ────────────────────────────────────────────────────────
            html.Footer(
                id="footer-meta",
                style={
                    "textAlign": "center",
                    "padding": ".7rem",
                    "fontSize": ".72rem",
                    "color": "#6c757d",
                    "borderTop": "1px solid #dee2e6",
                    "marginTop": "2rem",
                },
            ),
        ],
        id="app-root",
        style={"minHeight": "100vh"},
    )
