"""
src/search/filters.py
─────────────────────
Filter engine: narrows a program collection by the active FilterSelection.

Within a field values combine with OR, across fields with AND. Selecting a
county also matches programs tagged Bay Area, Statewide or Nationwide, since
those apply to everyone living in that county.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable

from config.taxonomy import BROAD_AREAS, AreaType, area_type
from src.data.models import FilterSelection, Program

Predicate = Callable[[Program], bool]


def _match_all(_: Program) -> bool:
    return True


def expand_areas(selected: Iterable[str]) -> frozenset[str]:
    """Area tags that satisfy a selection (counties pull in the broad areas)."""
    expanded = set(selected)
    if any(area_type(name) is AreaType.COUNTY for name in expanded):
        expanded |= BROAD_AREAS
    return frozenset(expanded)


def category_predicate(category: str | None) -> Predicate:
    if not category or category == "all":
        return _match_all
    return lambda p: category in p.categories


def groups_predicate(groups: frozenset[str]) -> Predicate:
    if not groups:
        return _match_all
    return lambda p: not groups.isdisjoint(p.groups)


def areas_predicate(areas: frozenset[str]) -> Predicate:
    if not areas:
        return _match_all
    accepted = expand_areas(areas)
    return lambda p: not accepted.isdisjoint(p.areas)


def authenticated_predicate(authenticated_only: bool) -> Predicate:
    if not authenticated_only:
        return _match_all
    return lambda p: p.authenticated


def build_filter(selection: FilterSelection) -> Predicate:
    """Single predicate for the whole selection. The empty selection is the identity filter."""
    if selection.is_empty:
        return _match_all
    predicates = [
        pred
        for pred in (
            category_predicate(selection.category),
            groups_predicate(selection.groups),
            areas_predicate(selection.areas),
            authenticated_predicate(selection.authenticated_only),
        )
        if pred is not _match_all
    ]
    return lambda p: all(pred(p) for pred in predicates)


def apply_filter(programs: Iterable[Program], selection: FilterSelection) -> list[Program]:
    """Matching programs in input order."""
    keep = build_filter(selection)
    return [p for p in programs if keep(p)]
