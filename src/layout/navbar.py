"""
src/layout/navbar.py
─────────────────────
Navigation bar with locale selector and smart-search switch.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.locales import LOCALES
from src.i18n.translator import t

NAV_BG = "#0b3d5c"
ACCENT = "#ffd166"


def locale_options() -> list[dict]:
    return [{"label": info.native_name, "value": code} for code, info in LOCALES.items()]


def create_navbar(lang: str) -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container(
            [
                # Brand
                dbc.NavbarBrand(
                    [
                        html.Span("🧭", style={"marginRight": "8px", "fontSize": "1.1rem"}),
                        html.Span(
                            t("common.appName", lang),
                            id="brand-name",
                            style={"fontWeight": "700", "letterSpacing": ".04em"},
                        ),
                    ],
                    href="/",
                    style={"color": ACCENT, "textDecoration": "none"},
                ),
                dbc.NavbarToggler(id="navbar-toggler", n_clicks=0),
                dbc.Collapse(
                    dbc.Nav(
                        [
                            # Smart search toggle
                            dbc.NavItem(
                                dbc.Switch(
                                    id="smart-switch",
                                    label=t("search.smartSearch", lang),
                                    value=False,
                                    style={"color": "#fff", "marginTop": "6px"},
                                )
                            ),
                            dbc.Tooltip(
                                t("search.smartSearchTooltip", lang),
                                id="smart-tooltip",
                                target="smart-switch",
                            ),
                            # Locale selector
                            dbc.NavItem(
                                dcc.Dropdown(
                                    id="locale-select",
                                    options=locale_options(),
                                    value=lang,
                                    clearable=False,
                                    searchable=False,
                                    persistence=True,
                                    persistence_type="local",
                                    style={"minWidth": "160px", "marginLeft": "12px"},
                                )
                            ),
                        ],
                        className="ms-auto align-items-center",
                        navbar=True,
                    ),
                    id="navbar-collapse",
                    navbar=True,
                    is_open=False,
                ),
            ],
            fluid=True,
        ),
        color=NAV_BG,
        dark=True,
        sticky="top",
        style={"padding": ".5rem 1rem"},
    )
