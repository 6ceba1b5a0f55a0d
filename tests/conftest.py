"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the directory test suite.
"""
import json
import os
from datetime import datetime, timezone

import pytest

# Use in-memory SQLite and no network sources for tests
os.environ.setdefault("CACHE_PATH", ":memory:")
os.environ.setdefault("SNAPSHOT_URL", "")
os.environ.setdefault("TRANSLATIONS_URL", "")
os.environ.setdefault("SMART_SEARCH_ENABLED", "false")
os.environ.setdefault("DEBUG", "true")

SEED_PATH = os.path.join(os.path.dirname(__file__), "..", "src", "data", "seed", "snapshot.json")


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 1, 20, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_program():
    """Factory for Program records with sensible defaults."""
    from src.data.models import Program

    def _make(slug: str, **overrides):
        data = {
            "slug": slug,
            "name": slug.replace("-", " ").title(),
            "description": f"Description of {slug}",
            "areas": ["Statewide"],
        }
        data.update(overrides)
        return Program.model_validate(data)

    return _make


@pytest.fixture
def programs(make_program):
    """Small catalog covering every filter dimension."""
    return [
        make_program(
            "calfresh-online",
            name="CalFresh Online Purchasing",
            description="Use EBT to buy groceries online.",
            categories=["food"],
            groups=["income-eligible", "families"],
            areas=["Statewide"],
            keywords=["ebt", "groceries"],
        ),
        make_program(
            "senior-meals",
            name="Senior Meals on Wheels",
            description="Hot meals delivered to older adults.",
            categories=["food"],
            groups=["seniors"],
            areas=["San Francisco"],
        ),
        make_program(
            "family-pantry",
            name="Neighborhood Pantry",
            description="Free groceries for families.",
            categories=["food"],
            groups=["families"],
            areas=["Alameda County"],
        ),
        make_program(
            "clipper-start",
            name="Clipper START",
            description="Discounted transit fares.",
            categories=["transportation"],
            groups=["income-eligible"],
            areas=["Bay Area"],
            authenticated=True,
        ),
        make_program(
            "va-healthcare",
            name="VA Health Care",
            description="Medical care for veterans.",
            categories=["health"],
            groups=["veterans"],
            areas=["Nationwide"],
        ),
    ]


@pytest.fixture
def index(programs):
    from src.data.catalog import CatalogIndex, Snapshot
    from src.data.models import Metadata

    return CatalogIndex(Snapshot(programs=tuple(programs), metadata=Metadata(version="test")))


@pytest.fixture
def seed_path() -> str:
    return SEED_PATH


@pytest.fixture
def seed_document(seed_path) -> dict:
    with open(seed_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def translation_documents() -> dict:
    return {
        "en": {
            "results": {"count": "{count} program{s} found"},
            "program": {
                "verifiedDaysAgo": "Verified {days} day{s} ago",
                "verifiedMonthsAgo": "Verified {months} month{s} ago",
                "verifiedStale": "Not verified in over a year",
                "verificationUnknown": "Verification date unknown",
                "verifiedBy": "Verified by {source}",
                "timeframeUnknown": "Timeframe not listed",
                "learnMore": "Learn more",
            },
            "search": {"smartSearch": "Smart search", "noResults": "No programs"},
            "categories": {"food": "Food"},
            "groups": {"seniors": "Seniors", "families": "Families"},
            "areas": {"Statewide": "Statewide"},
        },
        "es": {
            "results": {"count": "{count} programa{s} encontrado{s}"},
            "search": {"smartSearch": "Búsqueda inteligente", "noResults": ""},
            "categories": {"food": "Comida"},
            "programs": {
                "calfresh-online": {
                    "name": "CalFresh en línea",
                    "what_they_offer": "- Compras con EBT - Entrega a domicilio",
                }
            },
        },
        "es-MX": {"search": {"smartSearch": "Búsqueda lista"}},
        "zh-Hant": {"results": {"count": "找到 {count} 個項目{s}"}, "categories": {"food": "食品"}},
    }


@pytest.fixture
def catalog(translation_documents):
    from src.i18n.translator import TranslationCatalog

    return TranslationCatalog(translation_documents, source_locale="en")


@pytest.fixture
def resolver(catalog):
    from src.i18n.translator import LocaleResolver

    return LocaleResolver(catalog, debug=True)
