"""
config/taxonomy.py
──────────────────
Category, eligibility group and geographic area definitions.

Display names are translation keys (resolved through the Locale Resolver);
the English labels here only feed keyword matching, so search stays
locale-independent.
"""
from dataclasses import dataclass
from enum import Enum


class AreaType(str, Enum):
    COUNTY = "county"
    REGION = "region"
    STATE = "state"
    NATIONWIDE = "nationwide"


@dataclass(frozen=True)
class TaxonomyEntry:
    id: str
    label: str       # English label, used for keyword matching
    label_key: str   # dotted translation key
    icon: str = ""


def _entries(namespace: str, labels: dict[str, tuple[str, str]]) -> dict[str, TaxonomyEntry]:
    return {
        entry_id: TaxonomyEntry(id=entry_id, label=label, label_key=f"{namespace}.{entry_id}", icon=icon)
        for entry_id, (label, icon) in labels.items()
    }


# ── Categories ────────────────────────────────────────────────────────────────
CATEGORIES: dict[str, TaxonomyEntry] = _entries(
    "categories",
    {
        "community": ("Community", "🏘️"),
        "education": ("Education", "📚"),
        "equipment": ("Equipment", "🔧"),
        "finance": ("Finance", "💰"),
        "food": ("Food", "🍎"),
        "health": ("Health", "💊"),
        "housing": ("Housing", "🏠"),
        "legal": ("Legal", "⚖️"),
        "library_resources": ("Library Resources", "📖"),
        "pet_resources": ("Pet Resources", "🐾"),
        "recreation": ("Recreation", "⚽"),
        "technology": ("Technology", "💻"),
        "transportation": ("Transportation", "🚌"),
        "utilities": ("Utilities", "💡"),
    },
)

# ── Eligibility groups ────────────────────────────────────────────────────────
GROUPS: dict[str, TaxonomyEntry] = _entries(
    "groups",
    {
        "income-eligible": ("Income-Eligible", "💳"),
        "seniors": ("Seniors", "👵"),
        "youth": ("Youth", "🧒"),
        "college-students": ("College Students", "🎓"),
        "veterans": ("Veterans", "🎖️"),
        "families": ("Families", "👨‍👩‍👧"),
        "disability": ("People with Disabilities", "🧑‍🦽"),
        "lgbtq": ("LGBTQ+", "🌈"),
        "first-responders": ("First Responders", "🚒"),
        "teachers": ("Teachers", "👩‍🏫"),
        "unemployed": ("Job Seekers", "💼"),
        "immigrants": ("Immigrants", "🌍"),
        "unhoused": ("Unhoused", "🏠"),
        "pregnant": ("Pregnant", "🤰"),
        "caregivers": ("Caregivers", "🤲"),
        "foster-youth": ("Foster Youth", "🏡"),
        "reentry": ("Formerly Incarcerated", "🔓"),
        "nonprofits": ("Nonprofits", "🤝"),
        "everyone": ("Everyone", "🌎"),
    },
)

# ── Areas ─────────────────────────────────────────────────────────────────────
AREA_TYPES: dict[str, AreaType] = {
    "San Francisco": AreaType.COUNTY,
    "Alameda County": AreaType.COUNTY,
    "Contra Costa County": AreaType.COUNTY,
    "Marin County": AreaType.COUNTY,
    "Napa County": AreaType.COUNTY,
    "San Mateo County": AreaType.COUNTY,
    "Santa Clara County": AreaType.COUNTY,
    "Solano County": AreaType.COUNTY,
    "Sonoma County": AreaType.COUNTY,
    "Bay Area": AreaType.REGION,
    "Statewide": AreaType.STATE,
    "Nationwide": AreaType.NATIONWIDE,
}

# Programs tagged with one of these apply to every county
BROAD_AREAS: frozenset[str] = frozenset(
    name for name, kind in AREA_TYPES.items() if kind is not AreaType.COUNTY
)


def area_type(name: str) -> AreaType:
    """Unknown areas are treated as counties."""
    return AREA_TYPES.get(name, AreaType.COUNTY)


def area_label_key(name: str) -> str:
    return "areas." + "".join(ch for ch in name.title() if ch.isalnum())


def taxonomy_label(kind: str, entry_id: str) -> str:
    """English label for a category/group id, or the id itself."""
    table = CATEGORIES if kind == "category" else GROUPS
    entry = table.get(entry_id)
    return entry.label if entry else entry_id
