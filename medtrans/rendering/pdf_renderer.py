# -*- coding: utf-8 -*-
"""Bilingual PDF rendering: original page images alternating with RTL translation pages."""

from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

try:
    import fitz  # PyMuPDF
    HAS_PYMUPDF = True
except ImportError:
    HAS_PYMUPDF = False

from ..core.exceptions import RenderingFailed
from ..core.models import OutputDocumentPlan, PageImageRef, PageUnit, UnitKind

logger = logging.getLogger(__name__)

# A4 in points
A4_WIDTH = 595
A4_HEIGHT = 842


@dataclass
class RenderReport:
    """Outcome of rendering one output document plan."""
    output_path: str
    pages_rendered: int = 0
    failures: List[RenderingFailed] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_path": self.output_path,
            "pages_rendered": self.pages_rendered,
            "failures": [f.to_dict() for f in self.failures]
        }


class BilingualPDFRenderer:
    """
    Execute an OutputDocumentPlan with PyMuPDF.

    Original pages are rasterized and placed as full-page images; translated
    and glossary text is laid out through ``insert_htmlbox`` so Arabic is
    shaped and set right to left.
    """

    def __init__(
        self,
        page_width: float = A4_WIDTH,
        page_height: float = A4_HEIGHT,
        margin: float = 50,
        font_size: float = 12,
        image_dpi: int = 150,
        arabic_font_path: Optional[str] = None
    ):
        if not HAS_PYMUPDF:
            raise ImportError("PyMuPDF not installed. Run: pip install PyMuPDF")

        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.font_size = font_size
        self.image_dpi = image_dpi

        self._archive = None
        self._font_css = ""
        if arabic_font_path:
            font_path = Path(arabic_font_path)
            if font_path.exists():
                self._archive = fitz.Archive(str(font_path.parent))
                self._font_css = f"@font-face {{font-family: arabic; src: url({font_path.name});}}"
                logger.info(f"Using Arabic font: {font_path.name}")
            else:
                logger.warning(f"Arabic font not found: {font_path}, using built-in fonts")

    def render_original_page_as_image(self, doc, page_index: int) -> bytes:
        """Rasterize one source page to PNG bytes."""
        if page_index < 0 or page_index >= len(doc):
            raise IndexError(f"page {page_index} out of range (document has {len(doc)} pages)")
        pix = doc[page_index].get_pixmap(dpi=self.image_dpi)
        return pix.tobytes("png")

    def render_text_page(self, text: str, direction: str = "rtl", title: Optional[str] = None) -> bytes:
        """
        Lay out text on a single page.

        Args:
            text: Page text; newlines start new paragraphs
            direction: "rtl" or "ltr"
            title: Optional heading above the text

        Returns:
            PDF bytes of a one-page document
        """
        doc = fitz.open()
        try:
            page = doc.new_page(width=self.page_width, height=self.page_height)
            rect = fitz.Rect(
                self.margin, self.margin,
                self.page_width - self.margin, self.page_height - self.margin
            )
            page.insert_htmlbox(rect, self._build_html(text, direction, title), css=self._css(direction),
                                archive=self._archive)
            return doc.tobytes()
        finally:
            doc.close()

    def render_plan(
        self,
        plan: OutputDocumentPlan,
        source_pdf: Optional[Union[str, Path]],
        output_path: Union[str, Path]
    ) -> RenderReport:
        """
        Render every unit of the plan, in order, into one PDF.

        A unit that fails to render becomes a placeholder page, so the output
        always has ``plan.page_count`` pages.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        report = RenderReport(output_path=str(output_path))

        source = None
        if source_pdf is not None and plan.original_units:
            try:
                source = fitz.open(str(source_pdf))
            except Exception as e:
                logger.warning(f"Cannot reopen source document {source_pdf}: {e}")

        out = fitz.open()
        try:
            for position, unit in enumerate(plan.units):
                try:
                    self._render_unit(out, unit, source)
                except Exception as e:
                    failure = RenderingFailed(
                        f"Failed to render {unit.kind.name.lower()} unit {position}: {e}",
                        page=unit.source_page_index,
                        unit_kind=unit.kind.name
                    )
                    report.failures.append(failure)
                    logger.warning(failure.message)
                    self._insert_placeholder(out, unit)
                report.pages_rendered += 1

            out.save(str(output_path), garbage=3, deflate=True)
            logger.info(f"Rendered {report.pages_rendered} pages to {output_path}")
        finally:
            out.close()
            if source is not None:
                source.close()

        return report

    def _render_unit(self, out, unit: PageUnit, source) -> None:
        if unit.kind is UnitKind.ORIGINAL:
            if source is None:
                raise RenderingFailed("No source document for original page", unit.source_page_index, "ORIGINAL")
            ref: PageImageRef = unit.content
            src_rect = source[ref.page_index].rect
            png = self.render_original_page_as_image(source, ref.page_index)
            page = out.new_page(width=src_rect.width, height=src_rect.height)
            page.insert_image(page.rect, stream=png)
            return

        title = "Glossary" if unit.kind is UnitKind.GLOSSARY else None
        pdf_bytes = self.render_text_page(str(unit.content), unit.direction, title)
        with fitz.open(stream=pdf_bytes, filetype="pdf") as single:
            out.insert_pdf(single)

    def _insert_placeholder(self, out, unit: PageUnit) -> None:
        page = out.new_page(width=self.page_width, height=self.page_height)
        label = unit.source_page_index + 1 if unit.source_page_index is not None else "?"
        page.insert_text(
            (self.margin, self.margin + self.font_size),
            f"[Rendering failed for {unit.kind.name.lower()} page {label}]",
            fontsize=self.font_size,
            fontname="helv"
        )

    def _css(self, direction: str) -> str:
        family = "arabic, sans-serif" if self._font_css else "sans-serif"
        align = "right" if direction == "rtl" else "left"
        return (
            f"{self._font_css}\n"
            f"* {{font-family: {family}; font-size: {self.font_size}px;}}\n"
            f"div {{text-align: {align};}}\n"
            f"h3 {{text-align: center;}}"
        )

    @staticmethod
    def _build_html(text: str, direction: str, title: Optional[str]) -> str:
        parts = []
        if title:
            parts.append(f"<h3>{escape(title)}</h3>")
        paragraphs = [line.strip() for line in text.split("\n") if line.strip()]
        body = "".join(f"<p>{escape(p)}</p>" for p in paragraphs)
        parts.append(f'<div dir="{escape(direction)}">{body}</div>')
        return "".join(parts)
