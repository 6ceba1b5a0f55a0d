"""
src/pages/directory.py
───────────────────────
Program directory page: search box, filters, results.

Static structure; results, counts and facet chart injected via callbacks.
"""
from collections.abc import Callable

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.taxonomy import AREA_TYPES, CATEGORIES, GROUPS, area_label_key
from src.data.catalog import SORT_ORDERS
from src.i18n.translator import t

CARD_BG = "#ffffff"
BORDER = "#dee2e6"
MUTED = "#6c757d"

Translate = Callable[[str], str]


def category_options(translate: Translate) -> list[dict]:
    options = [{"label": translate("filters.allCategories"), "value": "all"}]
    options += [
        {"label": f"{entry.icon} {translate(entry.label_key)}", "value": cid} for cid, entry in CATEGORIES.items()
    ]
    return options


def group_options(translate: Translate) -> list[dict]:
    return [{"label": translate(entry.label_key), "value": gid} for gid, entry in GROUPS.items()]


def area_options(translate: Translate) -> list[dict]:
    return [{"label": translate(area_label_key(name)), "value": name} for name in AREA_TYPES]


def sort_options(translate: Translate) -> list[dict]:
    return [{"label": translate(f"results.sort.{order}"), "value": order} for order in SORT_ORDERS]


def _section_title(text: str, element_id: str) -> html.Div:
    return html.Div(
        text,
        id=element_id,
        style={
            "fontSize": ".68rem",
            "color": MUTED,
            "textTransform": "uppercase",
            "letterSpacing": ".08em",
            "margin": "12px 0 6px",
        },
    )


def filter_panel(lang: str) -> html.Div:
    def translate(key: str) -> str:
        return t(key, lang)

    return html.Div(
        [
            html.H5(translate("filters.title"), id="filters-title"),
            _section_title(translate("filters.category"), "filters-category-title"),
            dcc.Dropdown(
                id="filter-category",
                options=category_options(translate),
                value="all",
                clearable=False,
            ),
            _section_title(translate("filters.groups"), "filters-groups-title"),
            dbc.Checklist(id="filter-groups", options=group_options(translate), value=[]),
            _section_title(translate("filters.areas"), "filters-areas-title"),
            dbc.Checklist(id="filter-areas", options=area_options(translate), value=[]),
            html.Hr(),
            dbc.Switch(id="filter-auth", label=translate("filters.authenticatedOnly"), value=False),
            dbc.Button(
                translate("filters.clearAll"),
                id="filters-clear",
                color="link",
                size="sm",
                n_clicks=0,
                style={"paddingLeft": 0},
            ),
        ],
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {BORDER}",
            "borderRadius": "8px",
            "padding": "14px",
        },
    )


def layout(lang: str) -> html.Div:
    return html.Div(
        [
            # ── Page header ───────────────────────────────────────────────────
            html.Div(
                [
                    html.H2(t("common.appName", lang), className="page-title"),
                    html.P(t("common.tagline", lang), id="page-tagline", className="page-subtitle"),
                ],
                className="page-header mb-3",
            ),
            # ── Search box ────────────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        [
                            dcc.Input(
                                id="search-input",
                                type="search",
                                placeholder=t("search.placeholder", lang),
                                debounce=True,
                                list="search-suggestions",
                                className="form-control form-control-lg",
                            ),
                            html.Datalist(id="search-suggestions"),
                        ],
                        md=9,
                    ),
                    dbc.Col(
                        dcc.Dropdown(
                            id="sort-select",
                            options=sort_options(lambda key: t(key, lang)),
                            value="relevance",
                            clearable=False,
                        ),
                        md=3,
                    ),
                ],
                className="g-2 mb-3",
            ),
            html.Div(id="notices"),
            dbc.Row(
                [
                    # ── Filters ───────────────────────────────────────────────
                    dbc.Col(filter_panel(lang), md=3),
                    # ── Results ───────────────────────────────────────────────
                    dbc.Col(
                        [
                            html.Div(
                                [
                                    html.Span(id="results-count", style={"fontWeight": "600"}),
                                    html.Span(id="smart-indicator", style={"marginLeft": "10px"}),
                                ],
                                className="mb-2",
                            ),
                            dcc.Loading(html.Div(id="results-list")),
                            html.Div(id="fallback-panel"),
                        ],
                        md=6,
                    ),
                    # ── Facet counts ──────────────────────────────────────────
                    dbc.Col(html.Div(id="facet-chart"), md=3),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
