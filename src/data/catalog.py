"""
src/data/catalog.py
───────────────────
In-memory program catalog.

Provides:
  - parse_snapshot()  : Validate a snapshot document into a Snapshot, skipping bad records
  - CatalogIndex      : Immutable view of one snapshot (lookup by slug, facet counts)
  - CatalogHolder     : Current index; swapped atomically when a newer snapshot lands
  - sort_programs()   : Display orderings for result lists

A search pass calls ``holder.current()`` once and works on that index for its
whole duration, so a background swap never mixes two catalog versions.
"""
from __future__ import annotations

import itertools
import json
import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import pandas as pd
from pydantic import ValidationError

from config.taxonomy import AREA_TYPES, CATEGORIES, GROUPS, area_label_key, area_type
from src.data.models import Area, Category, Facets, Group, Metadata, Program
from src.errors import CatalogMalformed

logger = logging.getLogger(__name__)

_generations = itertools.count(1)

SORT_ORDERS = ("relevance", "name-asc", "name-desc", "category", "area", "recently-verified")


# ── Snapshot ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Snapshot:
    programs: tuple[Program, ...]
    metadata: Metadata
    generation: int = field(default_factory=lambda: next(_generations))

    @classmethod
    def empty(cls) -> Snapshot:
        return cls(programs=(), metadata=Metadata(), generation=0)

    def to_document(self) -> dict:
        """JSON-ready document that ``parse_snapshot`` reads back."""
        return {
            "metadata": {
                "generatedAt": self.metadata.generated_at.isoformat(),
                "programCount": self.metadata.program_count,
                "version": self.metadata.version,
            },
            "programs": [p.model_dump(mode="json") for p in self.programs],
        }


def _reason(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}" for err in exc.errors()
        )
    return str(exc)


def _records(programs) -> Iterable[tuple[str | None, object]]:
    if isinstance(programs, Mapping):
        return ((str(slug), record) for slug, record in programs.items())
    if isinstance(programs, list):
        return ((None, record) for record in programs)
    raise CatalogMalformed("*", "'programs' must be a list or an object keyed by slug")


def _parse_metadata(document: Mapping, valid_count: int) -> Metadata:
    raw = document.get("metadata")
    if not isinstance(raw, Mapping):
        raw = {k: document[k] for k in ("generatedAt", "programCount", "version") if k in document}
    raw = dict(raw)
    if not any(k in raw for k in ("programCount", "totalPrograms", "program_count")):
        raw["programCount"] = valid_count
    try:
        return Metadata.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Snapshot metadata invalid, using defaults: %s", _reason(exc))
        return Metadata(program_count=valid_count)


def parse_snapshot(document: Mapping | str | bytes) -> tuple[Snapshot, list[CatalogMalformed]]:
    """
    Validate a snapshot document.

    ``programs`` may be a list of records carrying ``id``/``slug`` or an
    object keyed by slug. Malformed records are skipped and returned; the
    snapshot is built from whatever validated. Never raises for bad records.

    Returns:
        (snapshot, skipped)
    """
    if isinstance(document, (str, bytes)):
        document = json.loads(document)
    if not isinstance(document, Mapping):
        raise CatalogMalformed("*", "snapshot document must be a JSON object")

    programs: dict[str, Program] = {}
    skipped: list[CatalogMalformed] = []
    for key, record in _records(document.get("programs", [])):
        if not isinstance(record, Mapping):
            skipped.append(CatalogMalformed(key or "?", "record is not an object"))
            continue
        slug = record.get("slug") or record.get("id") or key
        if not slug:
            skipped.append(CatalogMalformed("?", "missing slug"))
            continue
        try:
            program = Program.model_validate({**record, "slug": slug})
        except (ValidationError, ValueError, TypeError) as exc:
            skipped.append(CatalogMalformed(str(slug), _reason(exc)))
            continue
        if program.slug in programs:
            logger.warning("Duplicate program slug %r, keeping the first record", program.slug)
            continue
        programs[program.slug] = program

    for error in skipped:
        logger.warning("%s", error)

    snapshot = Snapshot(
        programs=tuple(programs.values()),
        metadata=_parse_metadata(document, len(programs)),
    )
    return snapshot, skipped


# ── Index ─────────────────────────────────────────────────────────────────────

class CatalogIndex:
    """Read-only view of one snapshot."""

    def __init__(self, snapshot: Snapshot):
        self._snapshot = snapshot
        self._by_slug = {p.slug: p for p in snapshot.programs}

    @classmethod
    def empty(cls) -> CatalogIndex:
        return cls(Snapshot.empty())

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def programs(self) -> tuple[Program, ...]:
        return self._snapshot.programs

    @property
    def metadata(self) -> Metadata:
        return self._snapshot.metadata

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    @property
    def is_placeholder(self) -> bool:
        return self._snapshot.generation == 0

    def __len__(self) -> int:
        return len(self._snapshot.programs)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def get(self, slug: str) -> Program | None:
        return self._by_slug.get(slug)

    def get_many(self, slugs: Iterable[str]) -> list[Program]:
        """Programs for the given slugs, in the given order. Unknown slugs are dropped."""
        return [self._by_slug[s] for s in slugs if s in self._by_slug]

    def facets(self, programs: Iterable[Program] | None = None) -> Facets:
        """
        Category, group and area counts over ``programs`` (default: whole catalog).

        Every known taxonomy entry is listed, with a zero count when nothing in
        the subset carries it; unknown ids found in the data follow, sorted.
        """
        programs = list(self.programs if programs is None else programs)
        frame = pd.DataFrame(
            {
                "slug": [p.slug for p in programs],
                "categories": [list(p.categories) for p in programs],
                "groups": [list(p.groups) for p in programs],
                "areas": [list(p.areas) for p in programs],
            }
        )
        categories = _counts(frame, "categories")
        groups = _counts(frame, "groups")
        areas = _counts(frame, "areas")

        return Facets(
            categories=tuple(
                Category(
                    id=cid,
                    label_key=CATEGORIES[cid].label_key if cid in CATEGORIES else f"categories.{cid}",
                    program_count=categories.get(cid, 0),
                )
                for cid in _ordered(CATEGORIES, categories)
            ),
            groups=tuple(
                Group(
                    id=gid,
                    label_key=GROUPS[gid].label_key if gid in GROUPS else f"groups.{gid}",
                    program_count=groups.get(gid, 0),
                )
                for gid in _ordered(GROUPS, groups)
            ),
            areas=tuple(
                Area(
                    id=name,
                    label_key=area_label_key(name),
                    area_type=area_type(name),
                    program_count=areas.get(name, 0),
                )
                for name in _ordered(AREA_TYPES, areas)
            ),
        )


def _counts(frame: pd.DataFrame, column: str) -> dict[str, int]:
    if frame.empty:
        return {}
    counts = frame[["slug", column]].explode(column).dropna().drop_duplicates()[column].value_counts()
    return {str(k): int(v) for k, v in counts.items()}


def _ordered(known: Mapping[str, object], counts: Mapping[str, int]) -> list[str]:
    return list(known) + sorted(k for k in counts if k not in known)


# ── Holder ────────────────────────────────────────────────────────────────────

class CatalogHolder:
    """The current catalog index. ``swap`` is the only mutation point."""

    def __init__(self, index: CatalogIndex | None = None):
        self._lock = threading.Lock()
        self._index = index or CatalogIndex.empty()

    def current(self) -> CatalogIndex:
        return self._index

    def swap(self, index: CatalogIndex) -> bool:
        """Install ``index`` if its snapshot is newer. Returns whether it was installed."""
        with self._lock:
            current = self._index
            if not current.is_placeholder and index.metadata.generated_at <= current.metadata.generated_at:
                logger.info(
                    "Ignoring snapshot %s (generated %s): not newer than %s",
                    index.metadata.version,
                    index.metadata.generated_at.isoformat(),
                    current.metadata.generated_at.isoformat(),
                )
                return False
            self._index = index
        logger.info(
            "Catalog swapped to version %s (%d programs, generation %d)",
            index.metadata.version,
            len(index),
            index.generation,
        )
        return True


# ── Sorting ───────────────────────────────────────────────────────────────────

def sort_programs(programs: Iterable[Program], order: str = "relevance") -> list[Program]:
    """
    Reorder programs for display. ``relevance`` keeps the incoming order.

    Sorting is stable; records without a verification date sort last under
    ``recently-verified``.
    """
    programs = list(programs)
    if order == "relevance":
        return programs
    if order == "name-asc":
        return sorted(programs, key=lambda p: p.name.casefold())
    if order == "name-desc":
        return sorted(programs, key=lambda p: p.name.casefold(), reverse=True)
    if order == "category":
        return sorted(programs, key=lambda p: (not p.categories, p.categories[:1], p.name.casefold()))
    if order == "area":
        return sorted(programs, key=lambda p: (p.areas[0], p.name.casefold()))
    if order == "recently-verified":
        return sorted(
            programs,
            key=lambda p: (p.verified_at is None, -p.verified_at.timestamp() if p.verified_at else 0.0),
        )
    raise ValueError(f"Unknown sort order {order!r}; expected one of {', '.join(SORT_ORDERS)}")
