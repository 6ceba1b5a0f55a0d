"""
src/data/models.py
──────────────────
Pydantic v2 data models for programs, snapshot metadata, facets and filters.

Snapshot records arrive in more than one shape (camelCase API output, legacy
snake_case fields, single strings where lists are expected); the validators
below normalise them so nothing downstream has to.
"""
from __future__ import annotations

import re
from datetime import UTC, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from config.taxonomy import AreaType

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_BULLET_SPLIT = re.compile(r"(?:^|\s)[-•*]\s+")
_STEP_SPLIT = re.compile(r"(?:^|\s)(?:step\s+)?\d+[.)]\s+", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"^\s*(?:step\s+\d+[.):]?|\d+[.):])\s+", re.IGNORECASE)


def _dedupe(values) -> tuple[str, ...]:
    if isinstance(values, (dict, int, float)) or not hasattr(values, "__iter__"):
        raise ValueError("expected a string or a list of strings")
    seen: dict[str, None] = {}
    for value in values:
        text = str(value).strip()
        if text and text not in seen:
            seen[text] = None
    return tuple(seen)


def _split_tags(value, separator: str | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return _dedupe(value.split(separator))
    return _dedupe(value)


def split_offer_lines(value) -> tuple[str, ...]:
    """Hyphen-delimited prose becomes one line per offer."""
    if value is None:
        return ()
    if isinstance(value, str):
        return _dedupe(part for line in value.splitlines() for part in _BULLET_SPLIT.split(line))
    return _dedupe(value)


def split_steps(value) -> tuple[str, ...]:
    """Free text or a list; embedded "1." / "Step 2)" numbering is stripped."""
    if value is None:
        return ()
    if isinstance(value, str):
        chunks = [part for line in value.splitlines() for part in _STEP_SPLIT.split(line)]
    else:
        chunks = [str(item) for item in value]
    return tuple(step for step in (_LEADING_NUMBER.sub("", chunk).strip() for chunk in chunks) if step)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


class Program(BaseModel):
    """One assistance program. Immutable once published."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    slug: str = Field(pattern=SLUG_PATTERN)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    what_they_offer: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("whatTheyOffer", "what_they_offer")
    )
    how_to_get_it: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("howToGetIt", "how_to_get_it")
    )
    timeframe: str | None = None
    link_text: str | None = Field(default=None, validation_alias=AliasChoices("linkText", "link_text"))
    link: str | None = Field(default=None, validation_alias=AliasChoices("link", "website"))
    categories: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("categories", "category"))
    groups: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("eligibilityGroups", "groups", "eligibility")
    )
    areas: tuple[str, ...] = Field(min_length=1, validation_alias=AliasChoices("areas", "area"))
    keywords: tuple[str, ...] = ()
    verified_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("verifiedAt", "lastUpdated", "verifiedDate", "verified_at"),
    )
    verified_by: str | None = Field(default=None, validation_alias=AliasChoices("verifiedBy", "verified_by"))
    authenticated: bool = False

    @field_validator("what_they_offer", mode="before")
    @classmethod
    def _offer_lines(cls, value):
        return split_offer_lines(value)

    @field_validator("how_to_get_it", mode="before")
    @classmethod
    def _steps(cls, value):
        return split_steps(value)

    @field_validator("categories", mode="before")
    @classmethod
    def _categories(cls, value):
        return _split_tags(value, ",")

    @field_validator("groups", "keywords", mode="before")
    @classmethod
    def _word_tags(cls, value):
        if isinstance(value, str):
            value = value.replace(",", " ")
        return _split_tags(value, None)

    @field_validator("areas", mode="before")
    @classmethod
    def _areas(cls, value):
        return _split_tags(value, ",")

    @field_validator("timeframe", "link_text", "link", "verified_by", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("verified_at", mode="before")
    @classmethod
    def _date_only(cls, value):
        if isinstance(value, str):
            value = value.strip() or None
            if value and len(value) == 10:
                value = f"{value}T00:00:00"
        return value

    @field_validator("verified_at")
    @classmethod
    def _verified_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value) if value is not None else None


class Metadata(BaseModel):
    """Cache-busting/staleness signal of one catalog snapshot."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime = Field(
        default=EPOCH, validation_alias=AliasChoices("generatedAt", "generated_at")
    )
    program_count: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("programCount", "totalPrograms", "program_count")
    )
    version: str = "unknown"

    @field_validator("generated_at")
    @classmethod
    def _generated_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


# ── Facets ────────────────────────────────────────────────────────────────────

class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label_key: str
    program_count: int = 0


class Group(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label_key: str
    program_count: int = 0


class Area(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label_key: str
    area_type: AreaType = AreaType.COUNTY
    program_count: int = 0


class Facets(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...] = ()
    groups: tuple[Group, ...] = ()
    areas: tuple[Area, ...] = ()


# ── Filter / search state ─────────────────────────────────────────────────────

class FilterSelection(BaseModel):
    """Active filter state. The empty selection matches every program."""

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    groups: frozenset[str] = frozenset()
    areas: frozenset[str] = frozenset()
    authenticated_only: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def _all_is_none(cls, value):
        if value in ("", "all"):
            return None
        return value

    @field_validator("groups", "areas", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return frozenset() if value is None else value

    @property
    def is_empty(self) -> bool:
        return self.category is None and not self.groups and not self.areas and not self.authenticated_only


class ScoredProgram(BaseModel):
    model_config = ConfigDict(frozen=True)

    program: Program
    score: float = 0.0


# ── Rendering ─────────────────────────────────────────────────────────────────

class LocalizedProgram(BaseModel):
    """Program text resolved for one locale, ready to render."""

    model_config = ConfigDict(frozen=True)

    slug: str
    locale: str
    name: str
    description: str
    what_they_offer: tuple[str, ...] = ()
    how_to_get_it: tuple[str, ...] = ()
    timeframe: str
    link_text: str
    link: str | None = None
    category_labels: tuple[str, ...] = ()
    group_labels: tuple[str, ...] = ()
    area_labels: tuple[str, ...] = ()
    verified_label: str
    score: float = 0.0


class Suggestion(BaseModel):
    """A "can't find what you need" pointer rendered on empty results."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    href: str
