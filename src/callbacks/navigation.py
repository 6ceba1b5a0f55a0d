"""
src/callbacks/navigation.py — Navbar, locale and connectivity callbacks.
"""
from __future__ import annotations

from dash import Input, Output, State

from src.directory import DirectoryService
from src.pages.directory import area_options, category_options, group_options, sort_options

# navigator.onLine is only visible in the browser
_ONLINE_PROBE = """
function(n_intervals) {
    return window.navigator.onLine;
}
"""


def register(app, service: DirectoryService) -> None:
    """Register navbar, locale and connectivity callbacks."""

    # ── Navbar collapse ───────────────────────────────────────────────────────
    @app.callback(
        Output("navbar-collapse", "is_open"),
        Input("navbar-toggler", "n_clicks"),
        State("navbar-collapse", "is_open"),
        prevent_initial_call=True,
    )
    def toggle_navbar(n_clicks: int, is_open: bool) -> bool:
        return not is_open

    # ── Locale selector ───────────────────────────────────────────────────────
    @app.callback(
        Output("store-lang", "data"),
        Input("locale-select", "value"),
    )
    def update_lang(value: str) -> str:
        return value

    # ── Connectivity ──────────────────────────────────────────────────────────
    app.clientside_callback(
        _ONLINE_PROBE,
        Output("store-online", "data"),
        Input("interval-online", "n_intervals"),
    )

    # ── Static labels ─────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("brand-name", "children"),
            Output("page-tagline", "children"),
            Output("search-input", "placeholder"),
            Output("smart-switch", "label"),
            Output("smart-tooltip", "children"),
            Output("filters-title", "children"),
            Output("filters-category-title", "children"),
            Output("filters-groups-title", "children"),
            Output("filters-areas-title", "children"),
            Output("filter-auth", "label"),
            Output("filters-clear", "children"),
            Output("filter-category", "options"),
            Output("filter-groups", "options"),
            Output("filter-areas", "options"),
            Output("sort-select", "options"),
            Output("app-root", "dir"),
        ],
        Input("store-lang", "data"),
    )
    def relabel(lang: str):
        def translate(key: str) -> str:
            return service.label(key, lang)

        view_dir = "rtl" if service.is_rtl(lang) else "ltr"
        return (
            translate("common.appName"),
            translate("common.tagline"),
            translate("search.placeholder"),
            translate("search.smartSearch"),
            translate("search.smartSearchTooltip"),
            translate("filters.title"),
            translate("filters.category"),
            translate("filters.groups"),
            translate("filters.areas"),
            translate("filters.authenticatedOnly"),
            translate("filters.clearAll"),
            category_options(translate),
            group_options(translate),
            area_options(translate),
            sort_options(translate),
            view_dir,
        )

    # ── Clear filters ─────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("filter-category", "value"),
            Output("filter-groups", "value"),
            Output("filter-areas", "value"),
            Output("filter-auth", "value"),
        ],
        Input("filters-clear", "n_clicks"),
        prevent_initial_call=True,
    )
    def clear_filters(n_clicks: int):
        return "all", [], [], False
