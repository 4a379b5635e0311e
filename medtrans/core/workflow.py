"""
End-to-end PDF workflow: extract, translate, reassemble, render.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging
import threading
import time

from medtrans.core.models import OutputDocumentPlan, PageTranslationResult
from medtrans.core.pipeline import PipelineConfig, ProgressCallback, ProgressTracker, TranslationPipeline
from medtrans.core.reassembler import DocumentReassembler, build_glossary_lines
from medtrans.extraction.pdf_parser import PDFTextExtractor
from medtrans.rendering.pdf_renderer import BilingualPDFRenderer, RenderReport

logger = logging.getLogger(__name__)

# Share of overall progress given to each stage
EXTRACTION_END = 10.0
TRANSLATION_END = 85.0
ASSEMBLY_END = 90.0


@dataclass
class WorkflowResult:
    """Everything produced by one translate_pdf run."""
    input_path: str
    output_path: str
    results: List[PageTranslationResult] = field(default_factory=list)
    plan: Optional[OutputDocumentPlan] = None
    render_report: Optional[RenderReport] = None
    duration: float = 0.0

    @property
    def fallback_pages(self) -> List[int]:
        return [r.page_index for r in self.results if r.used_fallback]

    @property
    def success(self) -> bool:
        return (
            all(r.succeeded for r in self.results)
            and self.plan is not None
            and not self.plan.placeholder_pages
            and self.render_report is not None
            and self.render_report.success
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_path": self.input_path,
            "output_path": self.output_path,
            "pages": len(self.results),
            "fallback_pages": self.fallback_pages,
            "placeholder_pages": self.plan.placeholder_pages if self.plan else [],
            "render": self.render_report.to_dict() if self.render_report else None,
            "success": self.success,
            "duration": self.duration
        }


def translate_pdf(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[PipelineConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    pipeline: Optional[TranslationPipeline] = None
) -> WorkflowResult:
    """
    Translate a PDF into a bilingual PDF.

    Args:
        input_path: English source PDF
        output_path: Where to write the bilingual PDF
        config: Pipeline configuration (ignored when ``pipeline`` is given)
        progress_callback: Receives (percent 0-100, stage label)
        cancel_event: Stops translation of pages not yet started
        pipeline: Reuse an existing pipeline and its loaded dictionaries

    Returns:
        WorkflowResult

    Raises:
        ExtractionFailed: if no text can be extracted from the input
    """
    start_time = time.time()
    input_path = Path(input_path)
    output_path = Path(output_path)
    pipeline = pipeline or TranslationPipeline(config)
    config = pipeline.config
    tracker = ProgressTracker(progress_callback)

    tracker.report(0.0, f"Extracting text from {input_path.name}")
    page_texts = PDFTextExtractor().extract_page_texts(input_path)
    tracker.report(EXTRACTION_END, f"Extracted {len(page_texts)} pages")

    def scaled(percent: float, message: str) -> None:
        span = TRANSLATION_END - EXTRACTION_END
        tracker.report(EXTRACTION_END + span * percent / 100.0, message)

    results = pipeline.translate_document(page_texts, scaled, cancel_event)

    glossary_lines = None
    if config.enable_glossary:
        glossary_lines = build_glossary_lines(pipeline.store, page_texts, config.glossary_max_terms)
    plan = DocumentReassembler().assemble(len(page_texts), results, glossary_lines, str(input_path))
    issues = plan.validate()
    if issues:
        logger.error(f"Output plan is inconsistent: {issues}")
    tracker.report(ASSEMBLY_END, f"Assembled {plan.page_count} output pages")

    renderer = BilingualPDFRenderer(
        font_size=config.font_size,
        image_dpi=config.image_dpi,
        arabic_font_path=config.arabic_font_path
    )
    report = renderer.render_plan(plan, input_path, output_path)
    tracker.report(100.0, "Done")

    result = WorkflowResult(
        input_path=str(input_path),
        output_path=str(output_path),
        results=results,
        plan=plan,
        render_report=report,
        duration=time.time() - start_time
    )
    logger.info(
        f"Translated {input_path.name} -> {output_path.name}: {len(results)} pages, "
        f"{len(result.fallback_pages)} fallback, {result.duration:.1f}s"
    )
    return result
