"""
Document reassembly.

Turns page results into an OutputDocumentPlan: each original page followed
by its translation, plus an optional glossary page. No rendering happens
here; the plan is handed to the rendering collaborator.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from medtrans.core.models import (
    OutputDocumentPlan,
    PageImageRef,
    PageTranslationResult,
    PageUnit,
    TableSelector,
    UnitKind,
)
from medtrans.terminology.store import TerminologyStore

logger = logging.getLogger(__name__)

PLACEHOLDER_TEMPLATE = "[Translation unavailable for page {page}]"
GLOSSARY_SEPARATOR = " — "


def placeholder_text(page_index: int) -> str:
    return PLACEHOLDER_TEMPLATE.format(page=page_index + 1)


def build_glossary_lines(
    store: TerminologyStore,
    page_texts: Iterable[str],
    max_terms: int = 40
) -> List[str]:
    """
    ``english — arabic`` lines for medical terms found in the document.

    Terms keep first-seen order across pages; at most ``max_terms`` lines.
    """
    if max_terms <= 0:
        return []
    seen: Dict[str, str] = {}
    for text in page_texts:
        for entry in store.find_terms_in_text(text, TableSelector.DOMAIN):
            if entry.source_term not in seen:
                seen[entry.source_term] = entry.target_term
            if len(seen) >= max_terms:
                break
        if len(seen) >= max_terms:
            break
    return [f"{en}{GLOSSARY_SEPARATOR}{ar}" for en, ar in seen.items()]


class DocumentReassembler:
    """Builds the alternating original/translated page plan."""

    def assemble(
        self,
        original_page_count: int,
        results: Sequence[PageTranslationResult],
        glossary_lines: Optional[Sequence[str]] = None,
        source_path: Optional[str] = None
    ) -> OutputDocumentPlan:
        """
        Build the output plan.

        Args:
            original_page_count: Number of pages in the source document
            results: Page results in any order, possibly with gaps
            glossary_lines: Optional glossary content; empty means no glossary page
            source_path: Source document, recorded on the original-page references

        Returns:
            Plan with ``2 * original_page_count`` units, plus one glossary unit
        """
        if original_page_count < 0:
            raise ValueError("original_page_count must be non-negative")

        by_index: Dict[int, PageTranslationResult] = {}
        for result in results:
            if result.page_index >= original_page_count:
                logger.warning(
                    f"Ignoring result for page {result.page_index + 1}: "
                    f"document has {original_page_count} pages"
                )
                continue
            if result.page_index in by_index:
                logger.warning(f"Duplicate result for page {result.page_index + 1}; keeping the last one")
            by_index[result.page_index] = result

        units: List[PageUnit] = []
        for index in range(original_page_count):
            units.append(PageUnit(
                kind=UnitKind.ORIGINAL,
                content=PageImageRef(index, source_path),
                source_page_index=index
            ))

            result = by_index.get(index)
            if result is None:
                logger.warning(f"No translation for page {index + 1}; inserting placeholder")
                units.append(PageUnit(
                    kind=UnitKind.TRANSLATED,
                    content=placeholder_text(index),
                    source_page_index=index,
                    direction="rtl",
                    is_placeholder=True
                ))
            else:
                units.append(PageUnit(
                    kind=UnitKind.TRANSLATED,
                    content=result.text,
                    source_page_index=index,
                    direction="rtl"
                ))

        if glossary_lines:
            units.append(PageUnit(
                kind=UnitKind.GLOSSARY,
                content="\n".join(glossary_lines),
                direction="ltr"
            ))

        plan = OutputDocumentPlan(units=units, original_page_count=original_page_count)
        logger.debug(f"Assembled plan: {plan.page_count} units, {len(plan.placeholder_pages)} placeholders")
        return plan
