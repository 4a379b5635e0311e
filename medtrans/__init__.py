"""
MedTrans: offline English to Arabic medical document translation.

A deterministic, layered pipeline: dictionary annotation, a rule cascade
(clinical constructs, phrases, function words), Arabic grammar
normalization, and reassembly into a bilingual PDF that alternates original
page images with right-to-left translation pages.

Usage:
    from medtrans import TranslationPipeline, PipelineConfig

    pipeline = TranslationPipeline(PipelineConfig(max_workers=4))
    results = pipeline.translate_document(["The patient has fever."])
"""

__version__ = "1.0.0"
__author__ = "MedTrans Team"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__author__",
    "__license__",
]

# Core models
from medtrans.core.models import (
    TableSelector,
    MarkerKind,
    TermEntry,
    TermMatch,
    AnnotatedToken,
    TranslationRule,
    GrammarRule,
    PageTranslationResult,
    UnitKind,
    PageImageRef,
    PageUnit,
    OutputDocumentPlan,
    DocumentState,
    DocumentTranslationSummary,
)
__all__.extend([
    "TableSelector", "MarkerKind", "TermEntry", "TermMatch", "AnnotatedToken",
    "TranslationRule", "GrammarRule", "PageTranslationResult", "UnitKind",
    "PageImageRef", "PageUnit", "OutputDocumentPlan", "DocumentState",
    "DocumentTranslationSummary",
])

from medtrans.core.exceptions import (
    MedTransError,
    TerminologyLoadDegraded,
    RuleApplicationFailed,
    AnnotationCleanupError,
    PageProcessingFailed,
    ExtractionFailed,
    RenderingFailed,
    ConfigurationError,
    RuleDefinitionError,
    PipelineBusyError,
)
__all__.extend([
    "MedTransError", "TerminologyLoadDegraded", "RuleApplicationFailed",
    "AnnotationCleanupError", "PageProcessingFailed", "ExtractionFailed",
    "RenderingFailed", "ConfigurationError", "RuleDefinitionError", "PipelineBusyError",
])

# Components
from medtrans.terminology.store import TerminologyStore, TermTable
from medtrans.translation.annotator import Annotator
from medtrans.translation.engine import TranslationEngine
from medtrans.grammar.normalizer import GrammarNormalizer
from medtrans.core.pipeline import TranslationPipeline, PipelineConfig
from medtrans.core.reassembler import DocumentReassembler, build_glossary_lines
__all__.extend([
    "TerminologyStore", "TermTable", "Annotator", "TranslationEngine",
    "GrammarNormalizer", "TranslationPipeline", "PipelineConfig",
    "DocumentReassembler", "build_glossary_lines",
])

# PDF collaborators - require PyMuPDF
from medtrans.extraction.pdf_parser import PDFTextExtractor
from medtrans.rendering.pdf_renderer import BilingualPDFRenderer, RenderReport
from medtrans.core.workflow import translate_pdf, WorkflowResult
__all__.extend([
    "PDFTextExtractor", "BilingualPDFRenderer", "RenderReport",
    "translate_pdf", "WorkflowResult",
])
