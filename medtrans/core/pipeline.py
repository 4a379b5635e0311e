"""
Translation pipeline orchestrator for MedTrans.

Drives every page through annotation, the rule cascade and grammar
normalization. Failures are page-local: a page whose processing raises is
translated word for word from the terminology store instead, and every
other page is unaffected.
"""

from __future__ import annotations
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, fields, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import threading
import time

from medtrans.core.exceptions import ConfigurationError, PageProcessingFailed, PipelineBusyError
from medtrans.core.models import DocumentState, DocumentTranslationSummary, PageTranslationResult
from medtrans.grammar.normalizer import GrammarNormalizer
from medtrans.terminology.store import TerminologyStore
from medtrans.translation.annotator import Annotator
from medtrans.translation.engine import TranslationEngine

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


@dataclass
class PipelineConfig:
    """Complete configuration for the translation pipeline."""

    # Terminology sources (None = bundled dictionaries)
    medical_dictionary_path: Optional[str] = None
    general_dictionary_path: Optional[str] = None

    # Page processing
    max_workers: int = 1  # 1 = sequential
    max_cleanup_iterations: int = 100
    max_normalization_passes: int = 5

    # Output document
    enable_glossary: bool = True
    glossary_max_terms: int = 40
    image_dpi: int = 150
    font_size: float = 12
    arabic_font_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def validate(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        if self.max_workers < 1:
            issues.append("max_workers must be at least 1")

        if self.max_cleanup_iterations < 1:
            issues.append("max_cleanup_iterations must be at least 1")

        if self.max_normalization_passes < 1:
            issues.append("max_normalization_passes must be at least 1")

        if self.glossary_max_terms < 0:
            issues.append("glossary_max_terms must be non-negative")

        if self.image_dpi < 36 or self.image_dpi > 600:
            issues.append("image_dpi must be between 36 and 600")

        if self.font_size <= 0:
            issues.append("font_size must be positive")

        if self.log_level.upper() not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            issues.append(f"unknown log_level {self.log_level!r}")

        return issues

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PipelineConfig:
        """
        Build a config from a flat dict, or from one level of named sections
        (``terminology:``, ``pipeline:``, ...) whose keys are field names.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict) and key not in known:
                items = value.items()
            else:
                items = [(key, value)]
            for name, item in items:
                if name in known:
                    values[name] = item
                else:
                    logger.warning(f"Ignoring unknown configuration key: {name}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProgressTracker:
    """Monotonic, failure-proof wrapper around a progress sink."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.last = 0.0
        self._lock = threading.Lock()

    def report(self, percent: float, message: str) -> None:
        with self._lock:
            percent = min(100.0, max(self.last, percent))
            self.last = percent
            if self.callback is None:
                return
            try:
                self.callback(percent, message)
            except Exception as e:
                logger.warning(f"Progress callback raised {type(e).__name__}: {e}")


class TranslationPipeline:
    """
    Per-document orchestrator.

    State machine: IDLE -> RUNNING(current_page) -> SUCCEEDED | DEGRADED -> IDLE.
    ``last_outcome`` keeps the terminal state of the previous document.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        store: Optional[TerminologyStore] = None,
        engine: Optional[TranslationEngine] = None,
        normalizer: Optional[GrammarNormalizer] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self.config = config or PipelineConfig()
        issues = self.config.validate()
        if issues:
            raise ConfigurationError("Invalid pipeline configuration: " + "; ".join(issues))

        self.store = store if store is not None else TerminologyStore.load(
            self.config.medical_dictionary_path,
            self.config.general_dictionary_path
        )
        self.annotator = Annotator(self.store)
        self.engine = engine if engine is not None else TranslationEngine(self.config.max_cleanup_iterations)
        self.normalizer = normalizer if normalizer is not None else GrammarNormalizer(self.config.max_normalization_passes)
        self.progress_callback = progress_callback

        self.state = DocumentState.IDLE
        self.current_page: Optional[int] = None
        self.last_outcome: Optional[DocumentState] = None
        self.last_summary: Optional[DocumentTranslationSummary] = None

        self._state_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._background: Optional[ThreadPoolExecutor] = None
        self._progress = ProgressTracker(None)

        self.stats = {
            "documents": 0,
            "pages_processed": 0,
            "pages_succeeded": 0,
            "pages_fallback": 0,
            "pages_failed": 0,
            "total_time": 0.0
        }

        if self.store.is_degraded:
            logger.warning("Terminology store is degraded; translations use the built-in seed set")

    # ---------- Single page ----------

    def translate_page(
        self,
        page_index: int,
        text: str,
        on_stage: Optional[Callable[[str], None]] = None
    ) -> PageTranslationResult:
        """
        Translate one page. Never raises for processing errors.

        Args:
            page_index: Zero-based page number
            text: Extracted page text
            on_stage: Called with a label as each stage starts

        Returns:
            A succeeded result, or a fallback result carrying the error
        """
        report_stage = on_stage or (lambda label: None)
        stage = "annotation"
        try:
            report_stage("Dictionary lookup")
            annotated = self.annotator.annotate(text)
            stage = "translation"
            report_stage("Translating")
            translated = self.engine.translate(annotated)
            stage = "normalization"
            report_stage("Grammar correction")
            normalized = self.normalizer.normalize(translated)
        except Exception as e:
            failure = PageProcessingFailed(page_index, stage, e)
            logger.warning(f"{failure.message}; using word-for-word fallback")
            return self._fallback_result(page_index, text, failure)

        self._count("pages_succeeded")
        return PageTranslationResult(page_index, normalized, succeeded=True)

    def fallback_translate(self, text: str) -> str:
        """Word-for-word prioritized dictionary lookup, no cascade and no grammar pass."""
        return " ".join(self.store.translate_word(word) for word in text.split())

    def _fallback_result(
        self,
        page_index: int,
        text: str,
        failure: PageProcessingFailed
    ) -> PageTranslationResult:
        try:
            fallback = self.fallback_translate(text)
        except Exception as e:
            logger.error(f"Fallback translation failed for page {page_index + 1}: {e}")
            self._count("pages_failed")
            return PageTranslationResult(
                page_index, text, succeeded=False, used_fallback=False,
                error=f"{failure.message}; fallback failed: {e}"
            )

        self._count("pages_fallback")
        return PageTranslationResult(
            page_index, fallback, succeeded=False, used_fallback=True, error=failure.message
        )

    # ---------- Whole document ----------

    def translate_document(
        self,
        page_texts: Sequence[str],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> List[PageTranslationResult]:
        """
        Translate every page of a document.

        Args:
            page_texts: Ordered page strings
            progress_callback: Receives (percent 0-100, stage label)
            cancel_event: When set, pages not yet started are omitted

        Returns:
            Page results sorted by page index

        Raises:
            PipelineBusyError: if another document is running on this pipeline
        """
        self._begin_document()
        return self._run_document(list(page_texts), progress_callback, cancel_event)

    def translate_document_async(
        self,
        page_texts: Sequence[str],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Future:
        """Run ``translate_document`` on a background worker and return its Future."""
        self._begin_document()
        if self._background is None:
            self._background = ThreadPoolExecutor(max_workers=1, thread_name_prefix="medtrans-document")
        return self._background.submit(
            self._run_document, list(page_texts), progress_callback, cancel_event
        )

    def _begin_document(self) -> None:
        with self._state_lock:
            if self.state is DocumentState.RUNNING:
                raise PipelineBusyError(self.current_page)
            self.state = DocumentState.RUNNING
            self.current_page = None

    def _run_document(
        self,
        page_texts: List[str],
        progress_callback: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event]
    ) -> List[PageTranslationResult]:
        start_time = time.time()
        total = len(page_texts)
        summary = DocumentTranslationSummary(total_pages=total)
        self._progress = ProgressTracker(progress_callback or self.progress_callback)
        results: List[PageTranslationResult] = []

        try:
            self._report_progress(0.0, "Starting translation")

            if self.config.max_workers > 1 and total > 1:
                results = self._translate_pages_parallel(page_texts, cancel_event)
            else:
                results = self._translate_pages_sequential(page_texts, cancel_event)

            results.sort(key=lambda r: r.page_index)
            summary.cancelled = cancel_event is not None and cancel_event.is_set() and len(results) < total
            summary.processed_pages = len(results)
            summary.fallback_pages = [r.page_index for r in results if r.used_fallback]
            summary.failed_pages = [r.page_index for r in results if not r.succeeded]

            if summary.cancelled:
                logger.warning(f"Translation cancelled: {len(results)} of {total} pages processed")
            self._report_progress(100.0, "Translation complete")
        finally:
            summary.duration = time.time() - start_time
            self._finish_document(summary)

        return results

    def _translate_pages_sequential(
        self,
        page_texts: List[str],
        cancel_event: Optional[threading.Event]
    ) -> List[PageTranslationResult]:
        results = []
        total = len(page_texts)
        for index, text in enumerate(page_texts):
            if cancel_event is not None and cancel_event.is_set():
                break
            results.append(self._translate_tracked(index, text, total))
            self._report_progress(
                100.0 * (index + 1) / total, "Translated",
                page_index=index, total_pages=total
            )
        return results

    def _translate_pages_parallel(
        self,
        page_texts: List[str],
        cancel_event: Optional[threading.Event]
    ) -> List[PageTranslationResult]:
        total = len(page_texts)
        workers = min(self.config.max_workers, total)
        logger.info(f"Translating {total} pages with {workers} workers")

        def run(index: int, text: str) -> Optional[PageTranslationResult]:
            if cancel_event is not None and cancel_event.is_set():
                return None
            return self._translate_tracked(index, text, total)

        results = []
        completed = 0
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="medtrans-page") as executor:
            futures = {executor.submit(run, i, t): i for i, t in enumerate(page_texts)}
            for future in as_completed(futures):
                result = future.result()
                completed += 1
                if result is not None:
                    results.append(result)
                self._report_progress(
                    100.0 * completed / total, "Translated",
                    page_index=futures[future], total_pages=total
                )
        return results

    def _translate_tracked(self, index: int, text: str, total: int) -> PageTranslationResult:
        self.current_page = index
        result = self.translate_page(
            index, text, on_stage=lambda label: self._report_stage(label, index, total)
        )
        self._count("pages_processed")
        return result

    def _finish_document(self, summary: DocumentTranslationSummary) -> None:
        outcome = summary.outcome
        with self._stats_lock:
            self.stats["documents"] += 1
            self.stats["total_time"] += summary.duration
        with self._state_lock:
            self.state = outcome
            self.last_outcome = outcome
            self.last_summary = summary
            self.current_page = None
            self.state = DocumentState.IDLE

        log = logger.info if outcome is DocumentState.SUCCEEDED else logger.warning
        log(
            f"Document {outcome.name.lower()}: {summary.processed_pages}/{summary.total_pages} pages, "
            f"{len(summary.fallback_pages)} fallback, {summary.duration:.2f}s"
        )

    # ---------- Reporting ----------

    def _report_progress(
        self,
        progress: float,
        message: str,
        page_index: Optional[int] = None,
        total_pages: Optional[int] = None
    ) -> None:
        """Report progress (0-100) with optional per-page detail."""
        enhanced_message = message
        if page_index is not None and total_pages is not None:
            enhanced_message += f" (Page {page_index + 1}/{total_pages})"

        self._progress.report(progress, enhanced_message)
        logger.info(f"[{progress:.0f}%] {enhanced_message}")

    def _report_stage(self, stage: str, page_index: int, total_pages: int) -> None:
        """Report a stage label without advancing the percentage."""
        message = f"{stage} (Page {page_index + 1}/{total_pages})"
        self._progress.report(self._progress.last, message)
        logger.debug(message)

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    def get_statistics(self) -> Dict[str, Any]:
        """Get pipeline execution statistics."""
        with self._stats_lock:
            stats: Dict[str, Any] = dict(self.stats)
        stats["state"] = self.state.name
        stats["last_outcome"] = self.last_outcome.name if self.last_outcome else None
        stats["last_document"] = self.last_summary.to_dict() if self.last_summary else None
        stats["terminology"] = self.store.get_status()
        if hasattr(self.engine, "get_stats"):
            stats["engine"] = self.engine.get_stats()
        if hasattr(self.normalizer, "get_stats"):
            stats["grammar"] = self.normalizer.get_stats()
        return stats

    def close(self) -> None:
        """Shut down the background worker, waiting for a running document."""
        if self._background is not None:
            self._background.shutdown(wait=True)
            self._background = None

    def __enter__(self) -> TranslationPipeline:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
