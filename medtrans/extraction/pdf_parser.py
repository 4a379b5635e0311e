"""Page text extraction from PDF files using PyMuPDF."""

from pathlib import Path
from typing import List, Optional, Union
import re
import logging

logger = logging.getLogger(__name__)

try:
    import fitz  # PyMuPDF
    HAS_PYMUPDF = True
except ImportError:
    HAS_PYMUPDF = False

from ..core.exceptions import ExtractionFailed

# Zero-width space/joiners, BOM and soft hyphen
_INVISIBLE = re.compile("[\u200b\u200c\u200d\u2060\ufeff\u00ad]")
_HYPHEN_BREAK = re.compile(r"(\w)-\n(\w)")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")


def clean_page_text(text: str) -> str:
    """Remove invisible characters and join words hyphenated across line breaks."""
    text = _INVISIBLE.sub("", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _HYPHEN_BREAK.sub(r"\1\2", text)
    return text.strip()


class PDFTextExtractor:
    """
    Extract one plain-text string per PDF page.

    Scanned pages yield empty strings; there is no OCR.
    """

    def __init__(self, clean: bool = True):
        if not HAS_PYMUPDF:
            raise ImportError("PyMuPDF not installed. Run: pip install PyMuPDF")
        self.clean = clean

    def extract_page_texts(
        self,
        pdf_path: Union[str, Path],
        start_page: int = 0,
        end_page: Optional[int] = None
    ) -> List[str]:
        """
        Extract text from each page in order.

        Args:
            pdf_path: Path to PDF file
            start_page: First page to extract (0-indexed)
            end_page: Last page to extract, inclusive (None = last page)

        Returns:
            Ordered list of page strings

        Raises:
            ExtractionFailed: if the document cannot be opened or has no pages
        """
        pdf_path = Path(pdf_path)
        doc = self._open(pdf_path)
        try:
            total_pages = len(doc)
            if total_pages == 0:
                raise ExtractionFailed(str(pdf_path), ValueError("document has no pages"))

            last = total_pages - 1 if end_page is None else min(end_page, total_pages - 1)
            first = max(0, start_page)
            logger.info(f"Extracting text: {pdf_path.name} (pages {first + 1}-{last + 1} of {total_pages})")

            texts = []
            for page_num in range(first, last + 1):
                try:
                    text = doc[page_num].get_text("text")
                except Exception as e:
                    raise ExtractionFailed(f"{pdf_path} page {page_num + 1}", e) from e
                texts.append(clean_page_text(text) if self.clean else text)

            empty = sum(1 for t in texts if not t.strip())
            if empty:
                logger.warning(f"{empty} of {len(texts)} pages have no extractable text")
            return texts
        finally:
            doc.close()

    def _open(self, pdf_path: Path):
        if not pdf_path.exists():
            raise ExtractionFailed(str(pdf_path), FileNotFoundError("file not found"))
        try:
            doc = fitz.open(str(pdf_path))
        except Exception as e:
            raise ExtractionFailed(str(pdf_path), e) from e
        if doc.needs_pass:
            doc.close()
            raise ExtractionFailed(str(pdf_path), PermissionError("document is encrypted"))
        return doc
