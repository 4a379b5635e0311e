"""
Terminology store for MedTrans.

Two priority-ordered lookup tables back every translation stage: a
domain-specific (medical) table consulted first and a general-vocabulary
table consulted second. Tables are immutable value objects; adding a term
produces a new table version that replaces the store's reference.
"""

from __future__ import annotations
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union
import json
import logging
import re

from medtrans.core.exceptions import TerminologyLoadDegraded
from medtrans.core.models import TableSelector, TermEntry, TermMatch

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_MEDICAL_DICTIONARY = DATA_DIR / "medical_dictionary.json"
DEFAULT_GENERAL_DICTIONARY = DATA_DIR / "general_dictionary.txt"

_NON_ALPHA = re.compile(r"[^a-z]")

# Built-in seed set used when the medical dictionary cannot be loaded.
SEED_TERMS = (
    ("heart", "قلب", "anatomy"),
    ("blood", "دم", "anatomy"),
    ("brain", "دماغ", "anatomy"),
    ("lung", "رئة", "anatomy"),
    ("liver", "كبد", "anatomy"),
    ("kidney", "كلية", "anatomy"),
    ("stomach", "معدة", "anatomy"),
    ("bone", "عظم", "anatomy"),
    ("muscle", "عضلة", "anatomy"),
    ("nerve", "عصب", "anatomy"),
    ("pain", "ألم", "symptoms"),
    ("fever", "حمى", "symptoms"),
    ("headache", "صداع", "symptoms"),
    ("nausea", "غثيان", "symptoms"),
    ("dizziness", "دوخة", "symptoms"),
    ("fatigue", "إرهاق", "symptoms"),
    ("cough", "سعال", "symptoms"),
    ("breathing", "تنفس", "symptoms"),
    ("medicine", "دواء", "treatment"),
    ("surgery", "جراحة", "treatment"),
    ("therapy", "علاج", "treatment"),
    ("injection", "حقنة", "treatment"),
    ("prescription", "وصفة طبية", "treatment"),
    ("treatment", "علاج", "treatment"),
    ("diagnosis", "تشخيص", "treatment"),
    ("examination", "فحص", "treatment"),
    ("doctor", "طبيب", "medical_staff"),
    ("nurse", "ممرض", "medical_staff"),
    ("patient", "مريض", "medical_staff"),
    ("hospital", "مستشفى", "medical_staff"),
    ("clinic", "عيادة", "medical_staff"),
    ("diabetes", "السكري", "diseases"),
    ("hypertension", "ارتفاع ضغط الدم", "diseases"),
    ("cancer", "سرطان", "diseases"),
    ("infection", "عدوى", "diseases"),
    ("inflammation", "التهاب", "diseases"),
    ("allergy", "حساسية", "diseases"),
    ("asthma", "الربو", "diseases"),
)


def normalize_term(term: str) -> str:
    """Lowercase and strip everything that is not an ASCII letter."""
    if not term:
        return ""
    return _NON_ALPHA.sub("", term.lower())


def check_translation(translation: str) -> str:
    """Strip a translation, rejecting empty values and the marker brackets."""
    value = str(translation).strip()
    if not value:
        raise ValueError("Translation must not be empty")
    if "[" in value or "]" in value:
        raise ValueError(f"Translation {value!r} contains a marker bracket")
    return value


class TermTable(Mapping[str, TermEntry]):
    """Immutable mapping of normalized source term to TermEntry."""

    def __init__(self, name: str, entries: Optional[Iterable[TermEntry]] = None):
        self.name = name
        data: Dict[str, TermEntry] = {}
        for entry in entries or ():
            data[entry.source_term] = entry
        self._entries = MappingProxyType(data)

    @classmethod
    def from_records(cls, name: str, records: Iterable[Mapping]) -> TermTable:
        """Build a table from ``{english, arabic, category?, definition?}`` records."""
        entries = []
        for record in records:
            key = normalize_term(record["english"])
            if not key:
                continue
            try:
                translation = check_translation(record["arabic"])
            except ValueError as e:
                logger.warning(f"Skipping {key!r} in {name} table: {e}")
                continue
            entries.append(TermEntry(
                source_term=key,
                target_term=translation,
                category=record.get("category") or None,
                definition=record.get("definition") or None
            ))
        return cls(name, entries)

    def with_entry(
        self,
        term: str,
        translation: str,
        category: Optional[str] = None,
        definition: Optional[str] = None
    ) -> TermTable:
        """Return a new table with the entry added (last write wins)."""
        key = normalize_term(term)
        if not key:
            raise ValueError(f"Term {term!r} has no alphabetic characters")
        entry = TermEntry(key, check_translation(translation), category, definition)
        merged = dict(self._entries)
        merged[key] = entry
        return TermTable(self.name, merged.values())

    def get_entry(self, term: str) -> Optional[TermEntry]:
        key = normalize_term(term)
        if not key:
            return None
        return self._entries.get(key)

    def __getitem__(self, key: str) -> TermEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TermTable({self.name!r}, {len(self)} terms)"


def load_domain_records(path: Path) -> List[Dict]:
    """Read a medical dictionary JSON file (``{"terms": [...]}`` or a bare list)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    records = data.get("terms", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"'terms' must be a list in {path}")
    return records


def load_general_records(path: Path) -> List[Dict]:
    """Read a general dictionary: ``english = arabic`` lines, or the JSON format."""
    if path.suffix.lower() == ".json":
        return load_domain_records(path)

    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split("=", 1)
            if len(parts) == 2 and parts[0].strip() and parts[1].strip():
                records.append({"english": parts[0].strip(), "arabic": parts[1].strip()})
    return records


class TerminologyStore:
    """
    Prioritized two-table terminology store.

    The domain table always wins over the general table. Load failures never
    raise: the domain table falls back to a built-in seed set and the store
    reports itself as degraded.
    """

    def __init__(
        self,
        domain_table: Optional[TermTable] = None,
        general_table: Optional[TermTable] = None
    ):
        self._domain = domain_table if domain_table is not None else TermTable("domain")
        self._general = general_table if general_table is not None else TermTable("general")
        self.load_errors: List[TerminologyLoadDegraded] = []

    @classmethod
    def load(
        cls,
        medical_path: Optional[Union[str, Path]] = None,
        general_path: Optional[Union[str, Path]] = None
    ) -> TerminologyStore:
        """
        Load both tables from disk.

        Args:
            medical_path: Medical dictionary JSON (defaults to the bundled one)
            general_path: General dictionary file (defaults to the bundled one)

        Returns:
            A store, possibly in degraded mode
        """
        store = cls()
        medical_path = Path(medical_path) if medical_path else DEFAULT_MEDICAL_DICTIONARY
        general_path = Path(general_path) if general_path else DEFAULT_GENERAL_DICTIONARY

        try:
            records = load_domain_records(medical_path)
            table = TermTable.from_records("domain", records)
            if not len(table):
                raise ValueError("no usable terms")
            store._domain = table
            logger.info(f"Loaded {len(table)} medical terms from {medical_path}")
        except Exception as e:
            store._record_degraded("domain", medical_path, e)
            store._domain = cls.seed_table()
            logger.warning(f"Using {len(store._domain)} built-in medical terms")

        try:
            store._general = TermTable.from_records("general", load_general_records(general_path))
            logger.info(f"Loaded {len(store._general)} general terms from {general_path}")
        except Exception as e:
            store._record_degraded("general", general_path, e)

        return store

    @staticmethod
    def seed_table() -> TermTable:
        """The built-in medical seed set."""
        return TermTable.from_records(
            "domain",
            ({"english": en, "arabic": ar, "category": cat} for en, ar, cat in SEED_TERMS)
        )

    def _record_degraded(self, table: str, source: Path, error: Exception) -> None:
        degraded = TerminologyLoadDegraded(table, str(source), error)
        self.load_errors.append(degraded)
        logger.warning(degraded.message + f" ({error})")

    # ---------- Lookup ----------

    def table(self, selector: TableSelector) -> TermTable:
        if selector is TableSelector.DOMAIN:
            return self._domain
        return self._general

    def lookup_entry(self, term: str, table: TableSelector) -> Optional[TermEntry]:
        return self.table(table).get_entry(term)

    def lookup(self, term: str, table: TableSelector) -> Optional[str]:
        """Exact, case-insensitive lookup in one table."""
        entry = self.lookup_entry(term, table)
        return entry.target_term if entry else None

    def lookup_prioritized(self, term: str) -> Optional[TermMatch]:
        """Domain table first, then general table."""
        for selector in (TableSelector.DOMAIN, TableSelector.GENERAL):
            entry = self.lookup_entry(term, selector)
            if entry is not None:
                return TermMatch(selector, entry)
        return None

    def translate_word(self, word: str) -> str:
        """Translation of a single word, or the word itself when unknown."""
        match = self.lookup_prioritized(word)
        return match.translation if match else word

    # ---------- Mutation ----------

    def add(
        self,
        term: str,
        translation: str,
        category: Optional[str] = None,
        definition: Optional[str] = None,
        table: TableSelector = TableSelector.DOMAIN
    ) -> TermTable:
        """
        Add or overwrite a term. Single writer only.

        Returns:
            The new version of the affected table
        """
        updated = self.table(table).with_entry(term, translation, category, definition)
        if table is TableSelector.DOMAIN:
            self._domain = updated
        else:
            self._general = updated
        logger.debug(f"Added {normalize_term(term)!r} to {table.value} table")
        return updated

    # ---------- Queries ----------

    @property
    def is_degraded(self) -> bool:
        return bool(self.load_errors)

    def get_status(self) -> Dict[str, object]:
        return {
            "degraded": self.is_degraded,
            "domain_terms": len(self._domain),
            "general_terms": len(self._general),
            "errors": [e.to_dict() for e in self.load_errors]
        }

    def get_terms_by_category(self, category: str) -> List[TermEntry]:
        """Domain entries in a category, sorted by source term."""
        return sorted(
            (e for e in self._domain.values() if e.category == category),
            key=lambda e: e.source_term
        )

    def get_categories(self) -> List[str]:
        return sorted({e.category for e in self._domain.values() if e.category})

    def get_statistics(self) -> Dict[str, int]:
        return {
            "total_words": len(self._domain) + len(self._general),
            "medical_terms": len(self._domain),
            "normal_terms": len(self._general),
            "categories": len(self.get_categories()),
            "degraded": self.is_degraded
        }

    def find_terms_in_text(
        self,
        text: str,
        table: TableSelector = TableSelector.DOMAIN
    ) -> List[TermEntry]:
        """Entries whose key matches a word of ``text``, in first-seen order."""
        found: Dict[str, TermEntry] = {}
        for word in text.split():
            entry = self.lookup_entry(word, table)
            if entry is not None and entry.source_term not in found:
                found[entry.source_term] = entry
        return list(found.values())

    def export_to_file(self, filepath: Path, table: TableSelector = TableSelector.DOMAIN) -> None:
        """Write a table in the medical dictionary JSON format."""
        entries = sorted(self.table(table).values(), key=lambda e: e.source_term)
        data = {
            "table": table.value,
            "total_terms": len(entries),
            "terms": [e.to_record() for e in entries]
        }
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Exported {len(entries)} terms to {filepath}")

    def __len__(self) -> int:
        return len(self._domain) + len(self._general)

    def __contains__(self, term: str) -> bool:
        return self.lookup_prioritized(term) is not None

    def __repr__(self) -> str:
        return (
            f"TerminologyStore(domain={len(self._domain)}, general={len(self._general)}, "
            f"degraded={self.is_degraded})"
        )
