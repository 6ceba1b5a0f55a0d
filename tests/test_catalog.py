"""
tests/test_catalog.py
──────────────────────
Tests for snapshot parsing, the catalog index, atomic swap and sort orders.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest

from src.data.catalog import CatalogHolder, CatalogIndex, Snapshot, parse_snapshot, sort_programs
from src.data.models import EPOCH, Metadata
from src.errors import CatalogMalformed


def _record(slug, **extra):
    return {"id": slug, "name": slug.title(), "description": f"About {slug}", "areas": ["Statewide"], **extra}


def _index(generated_at, *slugs, version="v"):
    snapshot, _ = parse_snapshot(
        {
            "metadata": {"generatedAt": generated_at.isoformat(), "version": version},
            "programs": [_record(s) for s in slugs],
        }
    )
    return CatalogIndex(snapshot)


class TestParseSnapshot:
    def test_seed_snapshot(self, seed_document):
        snapshot, skipped = parse_snapshot(seed_document)
        assert skipped == []
        assert len(snapshot.programs) == 12
        assert snapshot.metadata.version == "seed-2025.01"
        assert snapshot.programs[0].slug == "calfresh-online"

    def test_single_string_area(self, seed_document):
        snapshot, _ = parse_snapshot(seed_document)
        pantry = next(p for p in snapshot.programs if p.slug == "alameda-food-bank")
        assert pantry.areas == ("Alameda County",)

    def test_mapping_keyed_by_slug(self):
        doc = {"programs": {"pantry": {"name": "Pantry", "description": "Food", "areas": "Statewide"}}}
        snapshot, skipped = parse_snapshot(doc)
        assert [p.slug for p in snapshot.programs] == ["pantry"]
        assert skipped == []

    def test_json_text(self):
        snapshot, _ = parse_snapshot(json.dumps({"programs": [_record("text-input")]}))
        assert snapshot.programs[0].slug == "text-input"

    def test_malformed_records_skipped(self):
        doc = {
            "programs": [
                _record("good"),
                {"id": "no-areas", "name": "No areas", "description": "x"},
                "not an object",
                {"name": "No slug", "description": "x", "areas": ["Statewide"]},
                _record("Bad Slug"),
            ]
        }
        snapshot, skipped = parse_snapshot(doc)
        assert [p.slug for p in snapshot.programs] == ["good"]
        assert len(skipped) == 4
        assert all(isinstance(err, CatalogMalformed) for err in skipped)
        assert skipped[0].slug == "no-areas"
        assert "areas" in skipped[0].reason

    def test_duplicate_keeps_first(self):
        doc = {"programs": [_record("twin", name="First"), _record("twin", name="Second")]}
        snapshot, skipped = parse_snapshot(doc)
        assert len(snapshot.programs) == 1
        assert snapshot.programs[0].name == "First"
        assert skipped == []

    def test_metadata_defaults(self):
        snapshot, _ = parse_snapshot({"programs": [_record("a"), _record("b")]})
        assert snapshot.metadata.generated_at == EPOCH
        assert snapshot.metadata.program_count == 2
        assert snapshot.metadata.version == "unknown"

    def test_top_level_metadata_keys(self):
        snapshot, _ = parse_snapshot({"generatedAt": "2025-02-01T00:00:00Z", "version": "flat", "programs": []})
        assert snapshot.metadata.version == "flat"
        assert snapshot.metadata.generated_at == datetime(2025, 2, 1, tzinfo=timezone.utc)

    def test_invalid_metadata_falls_back(self):
        snapshot, _ = parse_snapshot({"metadata": {"generatedAt": "not a date"}, "programs": [_record("a")]})
        assert snapshot.metadata.generated_at == EPOCH
        assert snapshot.metadata.program_count == 1

    def test_non_object_document(self):
        with pytest.raises(CatalogMalformed):
            parse_snapshot([_record("a")])

    def test_programs_wrong_type(self):
        with pytest.raises(CatalogMalformed):
            parse_snapshot({"programs": "everything"})

    def test_to_document_reads_back(self, seed_document):
        snapshot, _ = parse_snapshot(seed_document)
        again, skipped = parse_snapshot(snapshot.to_document())
        assert skipped == []
        assert again.programs == snapshot.programs
        assert again.metadata == snapshot.metadata
        assert again.generation != snapshot.generation


class TestCatalogIndex:
    def test_lookup(self, index):
        assert len(index) == 5
        assert "clipper-start" in index
        assert index.get("clipper-start").authenticated
        assert index.get("missing") is None

    def test_get_many_keeps_order(self, index):
        slugs = [p.slug for p in index.get_many(["va-healthcare", "missing", "senior-meals"])]
        assert slugs == ["va-healthcare", "senior-meals"]

    def test_empty_is_placeholder(self):
        empty = CatalogIndex.empty()
        assert empty.is_placeholder
        assert len(empty) == 0
        assert empty.generation == 0

    def test_generations_increase(self):
        first = Snapshot(programs=(), metadata=Metadata())
        second = Snapshot(programs=(), metadata=Metadata())
        assert second.generation > first.generation > 0


class TestFacets:
    def test_counts(self, index):
        facets = index.facets()
        categories = {c.id: c.program_count for c in facets.categories}
        assert categories["food"] == 3
        assert categories["transportation"] == 1
        assert categories["health"] == 1
        assert categories["education"] == 0
        groups = {g.id: g.program_count for g in facets.groups}
        assert groups["families"] == 2
        assert groups["income-eligible"] == 2
        areas = {a.id: a.program_count for a in facets.areas}
        assert areas["San Francisco"] == 1
        assert areas["Marin County"] == 0

    def test_label_keys(self, index):
        facets = index.facets()
        food = next(c for c in facets.categories if c.id == "food")
        assert food.label_key == "categories.food"
        bay = next(a for a in facets.areas if a.id == "Bay Area")
        assert bay.label_key == "areas.BayArea"

    def test_subset(self, index):
        food_only = [p for p in index.programs if "food" in p.categories]
        categories = {c.id: c.program_count for c in index.facets(food_only).categories}
        assert categories["food"] == 3
        assert categories["transportation"] == 0

    def test_unknown_ids_follow_known(self, make_program):
        snapshot = Snapshot(
            programs=(make_program("odd", categories=["zeta", "alpha-x"], areas=["Yolo County"]),),
            metadata=Metadata(),
        )
        facets = CatalogIndex(snapshot).facets()
        assert [c.id for c in facets.categories][-2:] == ["alpha-x", "zeta"]
        assert facets.areas[-1].id == "Yolo County"
        assert facets.areas[-1].program_count == 1

    def test_empty_catalog(self):
        facets = CatalogIndex.empty().facets()
        assert all(c.program_count == 0 for c in facets.categories)


class TestCatalogHolder:
    def test_starts_with_placeholder(self):
        assert CatalogHolder().current().is_placeholder

    def test_placeholder_accepts_any(self):
        holder = CatalogHolder()
        assert holder.swap(_index(EPOCH, "a"))
        assert len(holder.current()) == 1

    def test_newer_swaps(self):
        t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        holder = CatalogHolder(_index(t0, "a", version="old"))
        assert holder.swap(_index(t0 + timedelta(days=1), "a", "b", version="new"))
        assert holder.current().metadata.version == "new"

    def test_older_or_equal_ignored(self):
        t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        holder = CatalogHolder(_index(t0, "a", version="current"))
        assert not holder.swap(_index(t0, "b", version="same"))
        assert not holder.swap(_index(t0 - timedelta(days=1), "c", version="older"))
        assert holder.current().metadata.version == "current"


class TestSortPrograms:
    def test_relevance_keeps_order(self, programs):
        assert sort_programs(programs, "relevance") == programs

    def test_name_orders(self, programs):
        names = [p.name for p in sort_programs(programs, "name-asc")]
        assert names == sorted(names, key=str.casefold)
        assert sort_programs(programs, "name-desc") == sort_programs(programs, "name-asc")[::-1]

    def test_category(self, programs, make_program):
        ordered = sort_programs(programs + [make_program("untagged")], "category")
        assert ordered[0].categories == ("food",)
        assert ordered[-1].slug == "untagged"

    def test_recently_verified(self, make_program, now):
        old = make_program("old", verified_at=now - timedelta(days=300))
        fresh = make_program("fresh", verified_at=now - timedelta(days=1))
        unknown = make_program("unknown")
        assert [p.slug for p in sort_programs([unknown, old, fresh], "recently-verified")] == [
            "fresh",
            "old",
            "unknown",
        ]

    def test_unknown_order(self, programs):
        with pytest.raises(ValueError):
            sort_programs(programs, "random")
