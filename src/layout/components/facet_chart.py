"""
src/layout/components/facet_chart.py
─────────────────────────────────────
Category facet counts as a horizontal Plotly bar chart.
"""
from __future__ import annotations

from collections.abc import Callable

import plotly.graph_objects as go
from dash import dcc

from src.data.models import Facets

CARD_BG = "#ffffff"
BAR = "#0b3d5c"


def facet_chart(
    facets: Facets,
    translate: Callable[[str], str],
    title: str = "",
    height: int = 320,
) -> dcc.Graph:
    """
    Bar per category with at least one program in the filtered set.

    Args:
        facets: Facet counts over the filtered programs
        translate: Label-key → display label
        title: Chart title
        height: Figure height in px
    """
    shown = [c for c in facets.categories if c.program_count > 0]
    fig = go.Figure(
        go.Bar(
            x=[c.program_count for c in shown],
            y=[translate(c.label_key) for c in shown],
            orientation="h",
            marker={"color": BAR},
            hovertemplate="%{y}: %{x}<extra></extra>",
        )
    )
    fig.update_layout(
        paper_bgcolor=CARD_BG,
        plot_bgcolor=CARD_BG,
        margin=dict(l=10, r=10, t=30, b=10),
        height=height,
        title={"text": title, "font": {"size": 12, "color": "#6c757d"}},
        yaxis={"autorange": "reversed"},
        xaxis={"dtick": 1},
    )
    return dcc.Graph(
        figure=fig,
        config={"displayModeBar": False},
        style={"height": f"{height}px"},
    )
