"""
tests/test_models.py
─────────────────────
Tests for Pydantic v2 data models.
"""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from src.data.models import EPOCH, FilterSelection, Metadata, Program, split_offer_lines, split_steps


class TestProgram:
    def test_valid_program(self, make_program):
        p = make_program("calfresh-online", categories=["food"], groups=["families"])
        assert p.slug == "calfresh-online"
        assert p.categories == ("food",)
        assert p.areas == ("Statewide",)
        assert p.authenticated is False

    def test_camel_case_aliases(self):
        p = Program.model_validate(
            {
                "slug": "pge-care",
                "name": "PG&E CARE",
                "description": "Discount on energy bills.",
                "whatTheyOffer": "- 20% off gas - 30% off electric",
                "howToGetIt": "1. Check eligibility 2. Apply online",
                "linkText": "Apply",
                "category": "utilities, finance",
                "eligibilityGroups": "income-eligible, seniors",
                "area": "Bay Area",
                "lastUpdated": "2024-07-22",
                "verifiedBy": "CPUC",
            }
        )
        assert p.what_they_offer == ("20% off gas", "30% off electric")
        assert p.how_to_get_it == ("Check eligibility", "Apply online")
        assert p.link_text == "Apply"
        assert p.categories == ("utilities", "finance")
        assert p.groups == ("income-eligible", "seniors")
        assert p.areas == ("Bay Area",)
        assert p.verified_at == datetime(2024, 7, 22, tzinfo=timezone.utc)
        assert p.verified_by == "CPUC"

    def test_missing_areas_rejected(self):
        with pytest.raises(ValidationError):
            Program(slug="no-area", name="No area", description="Nowhere")

    def test_empty_areas_rejected(self, make_program):
        with pytest.raises(ValidationError):
            make_program("no-area", areas=[])

    def test_bad_slug_rejected(self, make_program):
        with pytest.raises(ValidationError):
            make_program("Not A Slug")

    def test_tag_object_rejected(self, make_program):
        with pytest.raises(ValidationError):
            make_program("odd-tags", keywords={"ebt": 1})

    def test_blank_optional_text_is_none(self, make_program):
        p = make_program("blank-link", link="  ", timeframe="")
        assert p.link is None
        assert p.timeframe is None

    def test_duplicate_tags_collapsed(self, make_program):
        p = make_program("dupes", keywords="ebt, snap ebt", areas=["Statewide", "Statewide"])
        assert p.keywords == ("ebt", "snap")
        assert p.areas == ("Statewide",)

    def test_frozen(self, make_program):
        p = make_program("frozen")
        with pytest.raises(ValidationError):
            p.name = "changed"

    def test_model_dump(self, make_program):
        data = make_program("dumped", categories=["food"]).model_dump(mode="json")
        assert data["slug"] == "dumped"
        assert data["categories"] == ["food"]
        assert data["verified_at"] is None


class TestTextSplitting:
    def test_offer_bullets(self):
        assert split_offer_lines("- Free meals • Delivery") == ("Free meals", "Delivery")

    def test_offer_list_passthrough(self):
        assert split_offer_lines(["A", "B", "A"]) == ("A", "B")

    def test_steps_with_prefixes(self):
        assert split_steps("Step 1) Call 2. Visit the office") == ("Call", "Visit the office")

    def test_steps_list(self):
        assert split_steps(["1. Call", "2: Visit", ""]) == ("Call", "Visit")

    def test_quantities_kept(self):
        assert split_steps(["Bring 2 forms of ID", "3 recent pay stubs"]) == (
            "Bring 2 forms of ID",
            "3 recent pay stubs",
        )

    def test_bare_step_label_stripped(self):
        assert split_steps(["Step 3 Bring ID"]) == ("Bring ID",)

    def test_none(self):
        assert split_offer_lines(None) == ()
        assert split_steps(None) == ()


class TestMetadata:
    def test_defaults(self):
        m = Metadata()
        assert m.generated_at == EPOCH
        assert m.program_count == 0
        assert m.version == "unknown"

    def test_aliases_and_utc(self):
        m = Metadata.model_validate({"generatedAt": "2025-01-15T08:00:00", "totalPrograms": 4})
        assert m.generated_at == datetime(2025, 1, 15, 8, tzinfo=timezone.utc)
        assert m.program_count == 4

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            Metadata(program_count=-1)


class TestFilterSelection:
    def test_empty(self):
        assert FilterSelection().is_empty

    def test_all_category_is_none(self):
        selection = FilterSelection(category="all")
        assert selection.category is None
        assert selection.is_empty

    def test_none_groups(self):
        assert FilterSelection(groups=None).groups == frozenset()

    def test_auth_only_not_empty(self):
        assert not FilterSelection(authenticated_only=True).is_empty
