"""
src/callbacks/directory.py
───────────────────────────
Directory page callbacks.
Runs the search on any query, filter, locale or connectivity change.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import Input, Output, State, html
from dash.exceptions import PreventUpdate

from src.data.models import FilterSelection
from src.directory import DEFAULT_SESSION, DirectoryService
from src.layout.components.facet_chart import facet_chart
from src.layout.components.fallback_panel import fallback_panel
from src.layout.components.program_card import program_card
from src.search.engine import DegradeReason

MUTED = "#6c757d"

_SMART_BADGE = {
    None: "info",
    DegradeReason.TIMEOUT: "warning",
    DegradeReason.ERROR: "warning",
    DegradeReason.UNAVAILABLE: "secondary",
    DegradeReason.OFFLINE: "secondary",
}


def register(app, service: DirectoryService) -> None:

    @app.callback(
        [
            Output("results-list", "children"),
            Output("results-count", "children"),
            Output("smart-indicator", "children"),
            Output("notices", "children"),
            Output("facet-chart", "children"),
            Output("fallback-panel", "children"),
            Output("footer-meta", "children"),
        ],
        [
            Input("search-input", "value"),
            Input("filter-category", "value"),
            Input("filter-groups", "value"),
            Input("filter-areas", "value"),
            Input("filter-auth", "value"),
            Input("smart-switch", "value"),
            Input("sort-select", "value"),
            Input("store-lang", "data"),
            Input("store-online", "data"),
        ],
        State("store-session", "data"),
    )
    def update_results(text, category, groups, areas, auth_only, smart, sort, lang, online, session_id):
        selection = FilterSelection(
            category=category,
            groups=frozenset(groups or ()),
            areas=frozenset(areas or ()),
            authenticated_only=bool(auth_only),
        )
        view = service.query(
            text or "",
            selection,
            locale=lang,
            smart=bool(smart),
            online=online is not False,
            sort=sort or "relevance",
            session_id=session_id or DEFAULT_SESSION,
        )
        if view.superseded:
            raise PreventUpdate

        labels = {
            "whatTheyOffer": service.label("program.whatTheyOffer", lang),
            "howToGetIt": service.label("program.howToGetIt", lang),
            "timeframe": service.label("program.timeframe", lang),
        }
        cards = [program_card(p, labels) for p in view.results]
        if view.empty:
            cards = [html.Div(service.label("search.noResults", lang), style={"color": MUTED, "padding": "12px"})]

        indicator = None
        if view.smart_label:
            color = _SMART_BADGE.get(view.degraded, "info")
            if view.smart_used and not view.used_ai:
                color = "secondary"
            indicator = dbc.Badge(view.smart_label, color=color, pill=True)

        notices = [dbc.Alert(text, color="warning", className="py-2") for text in view.notices]

        footer = service.label(
            "offline.lastUpdated",
            lang,
            date=view.metadata.generated_at.strftime("%Y-%m-%d"),
        )
        return (
            cards,
            view.count_label,
            indicator,
            notices,
            facet_chart(view.facets, lambda key: service.label(key, lang), title=service.label("filters.category", lang)),
            fallback_panel(service.label("fallback.cantFind", lang), view.fallbacks),
            f"{footer} · {view.metadata.version}",
        )

    @app.callback(
        Output("search-suggestions", "children"),
        Input("search-input", "value"),
        State("store-session", "data"),
    )
    def update_suggestions(text, session_id):
        return [html.Option(value=name) for name in service.suggestions(text or "", session_id or DEFAULT_SESSION)]
