"""
tests/test_layout.py
─────────────────────
Smoke tests for layout components and callback registration.
"""
import dash
import pytest

from src.data.cache import OfflineCacheManager
from src.data.models import Category, Facets, LocalizedProgram, Suggestion
from src.data.source import SnapshotSource
from src.data.store import OfflineStore
from src.directory import DirectoryService
from src.layout.components.facet_chart import facet_chart
from src.layout.components.fallback_panel import fallback_panel
from src.layout.components.program_card import program_card
from src.layout.main import create_layout
from src.pages.directory import category_options, sort_options

LABELS = {"whatTheyOffer": "What they offer", "howToGetIt": "How to get it", "timeframe": "Timeframe"}


@pytest.fixture
def localized():
    return LocalizedProgram(
        slug="caleitc",
        locale="en",
        name="California Earned Income Tax Credit",
        description="Cash back at tax time.",
        what_they_offer=("Refundable credit",),
        how_to_get_it=("File a return", "Claim the credit"),
        timeframe="Tax season",
        link_text="Learn more",
        link="https://www.ftb.ca.gov/caleitc",
        category_labels=("Finance",),
        verified_label="Verified 3 days ago",
    )


class TestComponents:
    def test_layout_ids(self):
        root = create_layout()
        assert root.id == "app-root"
        ids = {getattr(child, "id", None) for child in root.children}
        assert {"store-lang", "store-session", "store-online", "page-content", "footer-meta"} <= ids

    def test_program_card(self, localized):
        card = program_card(localized, LABELS)
        assert card.id == {"type": "program-card", "slug": "caleitc"}
        assert card.children[0].children == "California Earned Income Tax Credit"

    def test_fallback_panel(self):
        suggestion = Suggestion(id="call211", title="Call 211", description="Help", href="tel:211")
        assert fallback_panel("Can't find it?", ()) is None
        assert fallback_panel("Can't find it?", (suggestion,)) is not None

    def test_facet_chart_skips_empty(self):
        facets = Facets(
            categories=(
                Category(id="food", label_key="categories.food", program_count=3),
                Category(id="legal", label_key="categories.legal", program_count=0),
            )
        )
        graph = facet_chart(facets, lambda key: key.split(".")[-1])
        assert list(graph.figure.data[0].y) == ["food"]

    def test_options(self):
        options = category_options(lambda key: key)
        assert options[0] == {"label": "filters.allCategories", "value": "all"}
        assert [o["value"] for o in sort_options(lambda key: key)][0] == "relevance"


class TestCallbacks:
    def test_register(self, seed_path):
        from src.callbacks import directory, navigation

        cache = OfflineCacheManager(
            store=OfflineStore(":memory:"),
            source=SnapshotSource(snapshot_url="", translations_url=""),
            seed_path=seed_path,
        )
        cache.load()
        service = DirectoryService(cache)
        app = dash.Dash(__name__, suppress_callback_exceptions=True)
        app.layout = create_layout
        navigation.register(app, service)
        directory.register(app, service)
        assert len(app.callback_map) >= 6
        service.shutdown()
