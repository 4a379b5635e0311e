"""
Exception hierarchy for MedTrans.

Most of these errors never reach the caller: the pipeline records them,
logs them and degrades the affected page or table instead. Only
ExtractionFailed (and invalid configuration) surfaces at document level.
"""

from __future__ import annotations
from typing import Optional, Dict, Any


class MedTransError(Exception):
    """Base exception for all MedTrans errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether the pipeline can continue after this error
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class TerminologyLoadDegraded(MedTransError):
    """Recorded when a terminology source could not be loaded."""

    def __init__(
        self,
        table: str,
        source: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        message = f"Terminology table '{table}' could not be loaded"
        if source:
            message += f" from {source}"
        details = {
            "table": table,
            "source": source,
            "original_error": str(original_error) if original_error else None
        }
        suggestion = "Check that the dictionary file exists and is valid JSON or 'english = arabic' lines"
        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.table = table
        self.source = source
        self.original_error = original_error


class RuleApplicationFailed(MedTransError):
    """Raised or recorded when a single substitution rule fails."""

    def __init__(
        self,
        description: str,
        cascade: str,
        original_error: Optional[Exception] = None
    ):
        message = f"Rule '{description}' in {cascade} cascade failed"
        if original_error:
            message += f": {original_error}"
        details = {
            "rule": description,
            "cascade": cascade,
            "original_error": str(original_error) if original_error else None
        }
        super().__init__(message, details, recoverable=True)
        self.description = description
        self.cascade = cascade
        self.original_error = original_error


class AnnotationCleanupError(RuleApplicationFailed):
    """Raised when marker cleanup does not reach a fixed point in time."""

    def __init__(self, iterations: int, remaining: int):
        super().__init__(
            description="annotation cleanup",
            cascade="cleanup",
            original_error=None
        )
        self.message = (
            f"Annotation cleanup did not converge after {iterations} passes "
            f"({remaining} markers remaining)"
        )
        self.args = (self.message,)
        self.details.update({"iterations": iterations, "remaining_markers": remaining})
        self.iterations = iterations
        self.remaining = remaining


class PageProcessingFailed(MedTransError):
    """Recorded when a page falls back to word-for-word translation."""

    def __init__(self, page_index: int, stage: str, original_error: Optional[Exception] = None):
        message = f"Page {page_index + 1} failed during {stage}"
        if original_error:
            message += f": {original_error}"
        details = {
            "page_index": page_index,
            "stage": stage,
            "original_error": str(original_error) if original_error else None
        }
        super().__init__(message, details, recoverable=True)
        self.page_index = page_index
        self.stage = stage
        self.original_error = original_error


class ExtractionFailed(MedTransError):
    """Raised when no page text can be extracted from the document."""

    def __init__(self, source: str, original_error: Optional[Exception] = None):
        message = f"Could not extract text from {source}"
        if original_error:
            message += f": {original_error}"
        details = {
            "source": source,
            "original_error": str(original_error) if original_error else None
        }
        suggestion = (
            "Try:\n"
            "1. Verify the file is a readable, unencrypted PDF\n"
            "2. Scanned documents need OCR before translation"
        )
        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.source = source
        self.original_error = original_error


class RenderingFailed(MedTransError):
    """Recorded when a single output page cannot be rendered."""

    def __init__(
        self,
        message: str,
        page: Optional[int] = None,
        unit_kind: Optional[str] = None
    ):
        details = {
            "page": page,
            "unit_kind": unit_kind
        }
        suggestion = "Check the Arabic font path and that the source PDF is not corrupted"
        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.page = page
        self.unit_kind = unit_kind


class ConfigurationError(MedTransError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None
    ):
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value
        }
        suggestion = f"Check configuration for '{config_key}'" if config_key else None
        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value


class RuleDefinitionError(ConfigurationError):
    """Raised when a runtime-supplied rule pattern does not compile."""

    def __init__(self, pattern: str, original_error: Optional[Exception] = None):
        message = f"Invalid rule pattern {pattern!r}"
        if original_error:
            message += f": {original_error}"
        super().__init__(message, config_key="pattern", invalid_value=pattern)
        self.pattern = pattern
        self.original_error = original_error


class PipelineBusyError(MedTransError):
    """Raised when a document is submitted while another one is running."""

    def __init__(self, current_page: Optional[int] = None):
        message = "Pipeline is already translating a document"
        super().__init__(
            message,
            {"current_page": current_page},
            recoverable=True,
            suggestion="Wait for the running document or use a separate pipeline instance"
        )
        self.current_page = current_page
