"""
Tests for the terminology store.

These tests verify:
1. Domain table wins over the general table
2. Degraded loading falls back to the built-in seed set
3. Both on-disk dictionary formats
4. Copy-on-write additions
5. Queries used by the glossary and the CLI
"""

import json

import pytest

from medtrans.core.models import TableSelector
from medtrans.terminology.store import (
    SEED_TERMS,
    TermTable,
    TerminologyStore,
    load_general_records,
    normalize_term,
)


class TestLookup:
    """Test case-insensitive, prioritized lookup."""

    def test_normalize_term(self):
        """Test that queries are lowercased and stripped of non-letters."""
        assert normalize_term("Fever,") == "fever"
        assert normalize_term("X-Ray") == "xray"
        assert normalize_term("120/80") == ""
        assert normalize_term("") == ""

    def test_lookup_single_table(self, store):
        """Test exact lookup in one table."""
        assert store.lookup("FEVER!", TableSelector.DOMAIN) == "حمى"
        assert store.lookup("pressure", TableSelector.GENERAL) == "ضغط"
        assert store.lookup("pressure", TableSelector.DOMAIN) is None
        assert store.lookup("unknown", TableSelector.GENERAL) is None

    def test_domain_table_wins(self, store):
        """Test that a term in both tables resolves to the domain entry."""
        match = store.lookup_prioritized("Test")

        assert match.table is TableSelector.DOMAIN
        assert match.translation == "اختبار طبي"

    def test_general_table_is_second(self, store):
        """Test fallback to the general table."""
        match = store.lookup_prioritized("water")

        assert match.table is TableSelector.GENERAL
        assert match.translation == "ماء"

    def test_no_match(self, store):
        """Test that unknown and empty words return None."""
        assert store.lookup_prioritized("stethoscope") is None
        assert store.lookup_prioritized("42") is None

    def test_translate_word(self, store):
        """Test single-word translation with pass-through."""
        assert store.translate_word("Headache.") == "صداع"
        assert store.translate_word("explode") == "explode"

    def test_contains(self, store):
        """Test membership across both tables."""
        assert "fever" in store
        assert "Water" in store
        assert "stethoscope" not in store


class TestLoading:
    """Test loading from disk and degraded mode."""

    def test_bundled_dictionaries(self):
        """Test that the bundled dictionaries load cleanly."""
        store = TerminologyStore.load()

        assert not store.is_degraded
        assert store.lookup("fever", TableSelector.DOMAIN) == "حمى"
        assert store.lookup_prioritized("and") is not None

    def test_missing_files_use_seed_set(self, tmp_path):
        """Test that missing files degrade instead of raising."""
        store = TerminologyStore.load(tmp_path / "missing.json", tmp_path / "missing.txt")

        assert store.is_degraded
        assert [e.table for e in store.load_errors] == ["domain", "general"]
        assert len(store.table(TableSelector.DOMAIN)) == len(SEED_TERMS)
        assert len(store.table(TableSelector.GENERAL)) == 0
        assert store.lookup("fever", TableSelector.DOMAIN) == "حمى"

    def test_corrupt_json_uses_seed_set(self, tmp_path):
        """Test that invalid JSON degrades the domain table only."""
        medical = tmp_path / "medical.json"
        medical.write_text("{not json", encoding="utf-8")
        general = tmp_path / "general.txt"
        general.write_text("water = ماء\n", encoding="utf-8")

        store = TerminologyStore.load(medical, general)

        assert store.is_degraded
        assert len(store.load_errors) == 1
        assert store.load_errors[0].recoverable
        assert store.lookup("water", TableSelector.GENERAL) == "ماء"

    def test_empty_terms_list_is_degraded(self, tmp_path):
        """Test that a dictionary without usable terms counts as a failed load."""
        medical = tmp_path / "medical.json"
        medical.write_text(json.dumps({"terms": []}), encoding="utf-8")

        store = TerminologyStore.load(medical, tmp_path / "missing.txt")

        assert store.load_errors[0].table == "domain"
        assert len(store.table(TableSelector.DOMAIN)) == len(SEED_TERMS)

    def test_status(self, tmp_path):
        """Test the degraded-mode status query."""
        store = TerminologyStore.load(tmp_path / "missing.json", tmp_path / "missing.txt")
        status = store.get_status()

        assert status["degraded"] is True
        assert status["domain_terms"] == len(SEED_TERMS)
        assert status["errors"][0]["error_type"] == "TerminologyLoadDegraded"

    def test_general_text_format(self, tmp_path):
        """Test parsing of 'english = arabic' lines."""
        path = tmp_path / "general.txt"
        path.write_text(
            "# comment\n\nheart = قلب\nno separator here\n = missing\nwater=ماء\n",
            encoding="utf-8"
        )

        records = load_general_records(path)

        assert records == [
            {"english": "heart", "arabic": "قلب"},
            {"english": "water", "arabic": "ماء"},
        ]

    def test_bare_list_json(self, tmp_path):
        """Test a medical dictionary stored as a bare list."""
        medical = tmp_path / "medical.json"
        medical.write_text(
            json.dumps([{"english": "Lung", "arabic": "رئة", "category": "anatomy"}]),
            encoding="utf-8"
        )

        store = TerminologyStore.load(medical, tmp_path / "missing.txt")

        assert store.lookup("lung", TableSelector.DOMAIN) == "رئة"
        assert [e.table for e in store.load_errors] == ["general"]


class TestMutation:
    """Test copy-on-write additions."""

    def test_add_returns_new_table(self, store):
        """Test that add swaps in a new table and leaves the old one intact."""
        old = store.table(TableSelector.DOMAIN)

        new = store.add("Fever", "سخونة", category="symptoms")

        assert new is store.table(TableSelector.DOMAIN)
        assert new is not old
        assert old.get_entry("fever").target_term == "حمى"
        assert store.lookup("fever", TableSelector.DOMAIN) == "سخونة"
        assert len(new) == len(old)

    def test_add_to_general_table(self, store):
        """Test adding to the general table."""
        store.add("bread", "خبز", table=TableSelector.GENERAL)

        assert store.lookup_prioritized("bread").table is TableSelector.GENERAL

    def test_add_rejects_non_alphabetic_term(self, store):
        """Test that a term without letters is rejected."""
        with pytest.raises(ValueError):
            store.add("123", "رقم")

    @pytest.mark.parametrize("translation", ["قيمة]غريبة", "[حمى", "   "])
    def test_add_rejects_unusable_translation(self, store, translation):
        """Test that empty translations and marker brackets are rejected."""
        with pytest.raises(ValueError):
            store.add("fever", translation)

        assert store.lookup("fever", TableSelector.DOMAIN) == "حمى"

    def test_from_records_skips_bracketed_translation(self):
        """Test that a loaded value with a marker bracket is dropped."""
        table = TermTable.from_records("domain", [
            {"english": "fever", "arabic": "قيمة]غريبة"},
            {"english": "cough", "arabic": "سعال"},
        ])

        assert list(table) == ["cough"]

    def test_table_is_read_only(self, store):
        """Test that tables cannot be mutated in place."""
        table = store.table(TableSelector.DOMAIN)

        with pytest.raises(TypeError):
            table["fever"] = None

    def test_from_records_skips_empty_keys(self):
        """Test that records without letters are dropped."""
        table = TermTable.from_records("domain", [
            {"english": "!!", "arabic": "x"},
            {"english": "Cough", "arabic": " سعال "},
        ])

        assert list(table) == ["cough"]
        assert table["cough"].target_term == "سعال"


class TestQueries:
    """Test queries over the domain table."""

    def test_find_terms_in_text(self, store):
        """Test first-seen, de-duplicated term discovery."""
        entries = store.find_terms_in_text("Fever, headache and fever again.")

        assert [e.source_term for e in entries] == ["fever", "headache"]

    def test_find_terms_in_general_table(self, store):
        """Test discovery in the general table."""
        entries = store.find_terms_in_text("water and fever", TableSelector.GENERAL)

        assert [e.source_term for e in entries] == ["water", "and"]

    def test_categories_and_statistics(self, store):
        """Test category listing and counts."""
        assert store.get_categories() == [
            "anatomy", "diseases", "medical_staff", "symptoms", "treatment"
        ]
        assert store.get_statistics() == {
            "total_words": 12,
            "medical_terms": 7,
            "normal_terms": 5,
            "categories": 5,
            "degraded": False,
        }
        assert [e.source_term for e in store.get_terms_by_category("symptoms")] == [
            "fever", "headache"
        ]

    def test_export_round_trip(self, store, tmp_path):
        """Test that an exported table loads back unchanged."""
        path = tmp_path / "export" / "medical.json"
        store.export_to_file(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["total_terms"] == 7

        reloaded = TerminologyStore.load(path, tmp_path / "missing.txt")
        assert reloaded.table(TableSelector.DOMAIN) == store.table(TableSelector.DOMAIN)
        assert reloaded.lookup_entry("heart", TableSelector.DOMAIN).definition == "Pumps blood"
