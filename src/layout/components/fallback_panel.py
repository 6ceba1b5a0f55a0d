"""
src/layout/components/fallback_panel.py
────────────────────────────────────────
"Can't find what you need?" panel shown on empty results.
"""
import dash_bootstrap_components as dbc
from dash import html

from src.data.models import Suggestion


def fallback_panel(title: str, suggestions: tuple[Suggestion, ...]) -> dbc.Card | None:
    if not suggestions:
        return None
    return dbc.Card(
        dbc.CardBody(
            [
                html.H5(title, className="card-title"),
                dbc.ListGroup(
                    [
                        dbc.ListGroupItem(
                            [
                                html.Div(s.title, style={"fontWeight": "600"}),
                                html.Small(s.description, className="text-muted"),
                            ],
                            href=s.href,
                            action=True,
                            external_link=True,
                        )
                        for s in suggestions
                    ],
                    flush=True,
                ),
            ]
        ),
        className="mt-3",
    )
