"""
src/layout/components/program_card.py
──────────────────────────────────────
Result card for one localized program.
"""
from dash import html

from src.data.models import LocalizedProgram

CARD_BG = "#ffffff"
BORDER = "#dee2e6"
MUTED = "#6c757d"
ACCENT = "#0b3d5c"


def tag(label: str, color: str = ACCENT) -> html.Span:
    """Inline taxonomy badge."""
    return html.Span(
        label,
        style={
            "fontSize": ".65rem",
            "fontWeight": "600",
            "color": color,
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "1px 7px",
            "marginRight": "4px",
            "whiteSpace": "nowrap",
        },
    )


def _list_section(title: str, items: tuple[str, ...], ordered: bool = False) -> html.Div | None:
    if not items:
        return None
    element = html.Ol if ordered else html.Ul
    return html.Div(
        [
            html.Div(title, style={"fontSize": ".7rem", "color": MUTED, "textTransform": "uppercase"}),
            element([html.Li(item) for item in items], style={"marginBottom": "6px", "fontSize": ".85rem"}),
        ]
    )


def program_card(program: LocalizedProgram, labels: dict[str, str]) -> html.Div:
    """
    Program result card.

    Args:
        program: Localized program text
        labels: Section headings keyed "whatTheyOffer", "howToGetIt", "timeframe"
    """
    children = [
        html.Div(program.name, style={"fontWeight": "700", "fontSize": "1rem", "color": ACCENT}),
        html.Div(
            [tag(label) for label in program.category_labels]
            + [tag(label, MUTED) for label in program.group_labels + program.area_labels],
            style={"margin": "6px 0"},
        ),
        html.P(program.description, style={"fontSize": ".88rem", "marginBottom": "6px"}),
    ]
    for section in (
        _list_section(labels["whatTheyOffer"], program.what_they_offer),
        _list_section(labels["howToGetIt"], program.how_to_get_it, ordered=True),
    ):
        if section is not None:
            children.append(section)

    footer = [
        html.Span(f"{labels['timeframe']}: {program.timeframe}", style={"marginRight": "12px"}),
        html.Span(program.verified_label),
    ]
    if program.link:
        footer.append(
            html.A(
                program.link_text,
                href=program.link,
                target="_blank",
                rel="noopener noreferrer",
                style={"marginLeft": "auto", "fontWeight": "600"},
            )
        )
    children.append(
        html.Div(footer, style={"display": "flex", "fontSize": ".72rem", "color": MUTED, "alignItems": "center"})
    )

    return html.Div(
        children,
        id={"type": "program-card", "slug": program.slug},
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {BORDER}",
            "borderRadius": "8px",
            "padding": "14px 16px",
            "marginBottom": "10px",
        },
    )
