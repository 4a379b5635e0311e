"""Tests for core models and exceptions."""

import pytest

from medtrans.core.exceptions import (
    AnnotationCleanupError,
    ExtractionFailed,
    MedTransError,
    PageProcessingFailed,
    RuleApplicationFailed,
)
from medtrans.core.models import (
    AnnotatedToken,
    DocumentState,
    DocumentTranslationSummary,
    MarkerKind,
    PageTranslationResult,
)


class TestPageTranslationResult:
    """Test page result validation."""

    def test_negative_index_rejected(self):
        """Test that page indices start at zero."""
        with pytest.raises(ValueError):
            PageTranslationResult(-1, "x", succeeded=True)

    def test_to_dict(self):
        """Test serialization."""
        result = PageTranslationResult(2, "حمى", succeeded=False, used_fallback=True, error="boom")

        assert result.to_dict() == {
            "page_index": 2,
            "text": "حمى",
            "succeeded": False,
            "used_fallback": True,
            "error": "boom",
        }


class TestAnnotatedToken:
    """Test marker invariants."""

    def test_unmarked_token_has_no_translation(self):
        """Test that a NONE token cannot carry a translation."""
        with pytest.raises(ValueError):
            AnnotatedToken("fever", MarkerKind.NONE, "حمى")

    def test_marked_token_needs_translation(self):
        """Test that a marked token requires a translation."""
        with pytest.raises(ValueError):
            AnnotatedToken("fever", MarkerKind.DOMAIN)

    def test_render(self):
        """Test marker rendering for both kinds."""
        assert AnnotatedToken("fever", MarkerKind.DOMAIN, "حمى").render() == "fever [MED:حمى]"
        assert AnnotatedToken("and", MarkerKind.GENERAL, "و").render() == "and [NORM:و]"
        assert AnnotatedToken("xyz").render() == "xyz"


class TestDocumentSummary:
    """Test document outcome derivation."""

    def test_succeeded(self):
        """Test a complete, clean document."""
        summary = DocumentTranslationSummary(total_pages=2, processed_pages=2)

        assert summary.outcome is DocumentState.SUCCEEDED
        assert summary.to_dict()["outcome"] == "SUCCEEDED"

    def test_degraded_by_failed_page(self):
        """Test that any degraded page degrades the document."""
        summary = DocumentTranslationSummary(total_pages=2, processed_pages=2, failed_pages=[1])

        assert summary.outcome is DocumentState.DEGRADED

    def test_degraded_by_missing_pages(self):
        """Test that unprocessed pages degrade the document."""
        summary = DocumentTranslationSummary(total_pages=2, processed_pages=1)

        assert summary.outcome is DocumentState.DEGRADED


class TestExceptions:
    """Test the error hierarchy."""

    def test_page_processing_failed(self):
        """Test message, details and recoverability."""
        error = PageProcessingFailed(0, "normalization", ValueError("bad"))

        assert isinstance(error, MedTransError)
        assert error.recoverable
        assert error.message == "Page 1 failed during normalization: bad"
        assert error.to_dict()["details"]["stage"] == "normalization"

    def test_cleanup_error_is_rule_failure(self):
        """Test that a cleanup error is a kind of rule failure."""
        error = AnnotationCleanupError(3, 2)

        assert isinstance(error, RuleApplicationFailed)
        assert str(error) == "Annotation cleanup did not converge after 3 passes (2 markers remaining)"
        assert error.details["remaining_markers"] == 2

    def test_extraction_failed_is_fatal(self):
        """Test that extraction failures are not recoverable and carry a suggestion."""
        error = ExtractionFailed("doc.pdf", FileNotFoundError("file not found"))

        assert not error.recoverable
        assert "Suggestion:" in str(error)
