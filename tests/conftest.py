"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from medtrans.terminology.store import TerminologyStore, TermTable

MEDICAL_RECORDS = [
    {"english": "fever", "arabic": "حمى", "category": "symptoms"},
    {"english": "headache", "arabic": "صداع", "category": "symptoms"},
    {"english": "patient", "arabic": "مريض", "category": "medical_staff"},
    {"english": "blood", "arabic": "دم", "category": "anatomy"},
    {"english": "heart", "arabic": "قلب", "category": "anatomy", "definition": "Pumps blood"},
    {"english": "diabetes", "arabic": "السكري", "category": "diseases"},
    {"english": "test", "arabic": "اختبار طبي", "category": "treatment"},
]

GENERAL_RECORDS = [
    {"english": "and", "arabic": "و"},
    {"english": "pressure", "arabic": "ضغط"},
    {"english": "test", "arabic": "فحص"},
    {"english": "water", "arabic": "ماء"},
    {"english": "day", "arabic": "يوم"},
]


@pytest.fixture
def store():
    """Small deterministic terminology store."""
    return TerminologyStore(
        TermTable.from_records("domain", MEDICAL_RECORDS),
        TermTable.from_records("general", GENERAL_RECORDS)
    )


@pytest.fixture
def pipeline(store):
    """Sequential pipeline over the small store."""
    from medtrans.core.pipeline import TranslationPipeline
    return TranslationPipeline(store=store)


@pytest.fixture
def sample_pages():
    """Three pages of clinical English."""
    return [
        "The patient has fever and headache.",
        "Blood pressure is 120/80. Heart rate is 72 bpm.",
        "Medical history includes diabetes. Drink water every day.",
    ]



def _write_pdf(output_path, pages, fontsize=11):
    import fitz  # PyMuPDF

    doc = fitz.open()
    try:
        for text in pages:
            page = doc.new_page(width=595, height=842)
            if text:
                page.insert_textbox(fitz.Rect(50, 50, 545, 792), text, fontsize=fontsize, fontname="helv")
            else:
                page.draw_rect(fitz.Rect(100, 100, 300, 300), color=(0, 0, 0))
        doc.save(str(output_path))
    finally:
        doc.close()
    return Path(output_path)


@pytest.fixture
def pdf_factory(tmp_path):
    """Create a PDF with one page per string; empty strings give text-less pages."""
    def factory(pages, name="doc.pdf"):
        return _write_pdf(tmp_path / name, pages)
    return factory


@pytest.fixture
def sample_pdf(pdf_factory, sample_pages):
    """PDF with one page per sample page."""
    return pdf_factory(sample_pages, "sample.pdf")
