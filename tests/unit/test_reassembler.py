"""Tests for document reassembly and glossary extraction."""

import pytest

from medtrans.core.models import OutputDocumentPlan, PageTranslationResult, PageUnit, UnitKind
from medtrans.core.reassembler import DocumentReassembler, build_glossary_lines, placeholder_text


def make_result(index, text=None):
    return PageTranslationResult(index, text or f"ترجمة {index}", succeeded=True)


@pytest.fixture
def reassembler():
    return DocumentReassembler()


class TestAssemble:
    """Test the alternating page plan."""

    def test_alternating_units(self, reassembler):
        """Test that each original page is followed by its translation."""
        results = [make_result(2), make_result(0), make_result(1)]

        plan = reassembler.assemble(3, results, source_path="in.pdf")

        assert plan.page_count == 6
        assert [u.kind for u in plan.units] == [UnitKind.ORIGINAL, UnitKind.TRANSLATED] * 3
        assert [u.source_page_index for u in plan.units] == [0, 0, 1, 1, 2, 2]
        assert plan.units[1].content == "ترجمة 0"
        assert plan.units[1].direction == "rtl"
        assert plan.units[0].content.source_path == "in.pdf"
        assert plan.validate() == []

    def test_glossary_unit(self, reassembler):
        """Test the trailing glossary page."""
        plan = reassembler.assemble(2, [make_result(0), make_result(1)], ["fever — حمى"])

        assert plan.page_count == 5
        assert plan.has_glossary
        assert plan.glossary_unit.direction == "ltr"
        assert plan.glossary_unit.content == "fever — حمى"
        assert plan.validate() == []

    def test_empty_glossary_adds_no_page(self, reassembler):
        """Test that an empty glossary is omitted."""
        plan = reassembler.assemble(1, [make_result(0)], [])

        assert plan.page_count == 2
        assert not plan.has_glossary

    def test_missing_pages_get_placeholders(self, reassembler):
        """Test the error placeholder for pages without results."""
        plan = reassembler.assemble(3, [make_result(0), make_result(2)])

        assert plan.page_count == 6
        assert plan.placeholder_pages == [1]
        assert plan.units[3].content == placeholder_text(1)
        assert plan.units[3].content == "[Translation unavailable for page 2]"
        assert plan.validate() == []

    def test_no_results(self, reassembler):
        """Test a fully cancelled document."""
        plan = reassembler.assemble(2, [])

        assert plan.page_count == 4
        assert plan.placeholder_pages == [0, 1]

    def test_out_of_range_results_ignored(self, reassembler):
        """Test that results beyond the page count are dropped."""
        plan = reassembler.assemble(1, [make_result(0), make_result(5)])

        assert plan.page_count == 2
        assert plan.validate() == []

    def test_duplicate_results_last_wins(self, reassembler):
        """Test that the last result for a page index is used."""
        plan = reassembler.assemble(1, [make_result(0, "أول"), make_result(0, "ثاني")])

        assert plan.units[1].content == "ثاني"

    def test_fallback_pages_are_kept(self, reassembler):
        """Test that degraded pages still appear in the plan."""
        fallback = PageTranslationResult(0, "حمى", succeeded=False, used_fallback=True, error="boom")

        plan = reassembler.assemble(1, [fallback])

        assert plan.units[1].content == "حمى"
        assert plan.placeholder_pages == []

    def test_zero_pages(self, reassembler):
        """Test an empty document."""
        plan = reassembler.assemble(0, [])

        assert plan.page_count == 0
        assert plan.validate() == []

    def test_negative_page_count(self, reassembler):
        """Test that a negative page count is rejected."""
        with pytest.raises(ValueError):
            reassembler.assemble(-1, [])


class TestPlanValidation:
    """Test the plan invariant check."""

    def test_detects_wrong_order(self):
        """Test that a plan starting with a translation is reported."""
        plan = OutputDocumentPlan(
            units=[
                PageUnit(UnitKind.TRANSLATED, "x", 0, "rtl"),
                PageUnit(UnitKind.TRANSLATED, "y", 0, "rtl"),
            ],
            original_page_count=1
        )

        assert plan.validate() == ["unit 0 is not ORIGINAL page 0"]

    def test_detects_missing_units(self):
        """Test that a short plan is reported."""
        plan = OutputDocumentPlan(units=[], original_page_count=1)

        assert plan.validate() == ["expected 2 page units, found 0"]


class TestGlossaryLines:
    """Test glossary line extraction."""

    def test_first_seen_order_and_limit(self, store):
        """Test de-duplicated, ordered and bounded glossary lines."""
        pages = ["Fever and headache.", "fever again, heart"]

        assert build_glossary_lines(store, pages, max_terms=2) == [
            "fever — حمى", "headache — صداع"
        ]

    def test_only_domain_terms(self, store):
        """Test that general vocabulary is not listed."""
        assert build_glossary_lines(store, ["water and pressure"]) == []

    def test_all_terms(self, store):
        """Test terms collected across pages."""
        lines = build_glossary_lines(store, ["fever", "Heart."])

        assert lines == ["fever — حمى", "heart — قلب"]

    @pytest.mark.parametrize("max_terms,expected", [
        (0, []),
        (-1, []),
        (1, ["fever — حمى"]),
    ])
    def test_limit_boundaries(self, store, max_terms, expected):
        """Test that the limit holds at zero and one."""
        assert build_glossary_lines(store, ["fever and headache"], max_terms=max_terms) == expected
