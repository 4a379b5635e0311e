"""
Core data models for MedTrans.

Value objects shared by the terminology store, the translation cascades,
the orchestrator and the reassembler. Everything that crosses a component
boundary is immutable once created.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import Enum, auto
from typing import List, Dict, Optional, Any, Pattern, Tuple, Union


class TableSelector(Enum):
    """Which terminology table to consult."""
    DOMAIN = "domain"
    GENERAL = "general"


class MarkerKind(Enum):
    """Kind of inline annotation attached to a token."""
    NONE = None
    DOMAIN = "MED"
    GENERAL = "NORM"

    @property
    def tag(self) -> Optional[str]:
        return self.value


@dataclass(frozen=True)
class TermEntry:
    """A single terminology entry. ``source_term`` is the normalized key."""
    source_term: str
    target_term: str
    category: Optional[str] = None
    definition: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Convert to the on-disk record format."""
        record = {"english": self.source_term, "arabic": self.target_term}
        if self.category:
            record["category"] = self.category
        if self.definition:
            record["definition"] = self.definition
        return record


@dataclass(frozen=True)
class TermMatch:
    """Result of a prioritized lookup."""
    table: TableSelector
    entry: TermEntry

    @property
    def translation(self) -> str:
        return self.entry.target_term

    @property
    def marker_kind(self) -> MarkerKind:
        if self.table is TableSelector.DOMAIN:
            return MarkerKind.DOMAIN
        return MarkerKind.GENERAL


@dataclass(frozen=True)
class AnnotatedToken:
    """One word plus at most one attached dictionary marker."""
    original: str
    kind: MarkerKind = MarkerKind.NONE
    translation: Optional[str] = None

    def __post_init__(self):
        if self.kind is MarkerKind.NONE and self.translation is not None:
            raise ValueError("Unmarked token cannot carry a translation")
        if self.kind is not MarkerKind.NONE and not self.translation:
            raise ValueError("Marked token requires a translation")

    @property
    def is_marked(self) -> bool:
        return self.kind is not MarkerKind.NONE

    def render(self) -> str:
        """Render as ``original [TAG:translation]`` or the bare token."""
        if not self.is_marked:
            return self.original
        return f"{self.original} [{self.kind.tag}:{self.translation}]"


@dataclass(frozen=True)
class TranslationRule:
    """
    A compiled substitution rule.

    ``replacement`` is a ``re.sub`` template; group references use the
    ``\\g<1>`` form. Rules are ordered by ``priority`` (lower first) and then
    by declaration order within their table.
    """
    matcher: Pattern[str]
    replacement: str
    priority: int
    description: str

    def apply(self, text: str) -> str:
        return self.matcher.sub(self.replacement, text)


@dataclass(frozen=True)
class GrammarRule(TranslationRule):
    """Same shape as TranslationRule, but owned by the normalization cascade."""


@dataclass(frozen=True)
class PageTranslationResult:
    """Outcome of translating one page."""
    page_index: int
    text: str
    succeeded: bool
    used_fallback: bool = False
    error: Optional[str] = None

    def __post_init__(self):
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}")

    @property
    def is_degraded(self) -> bool:
        return not self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UnitKind(Enum):
    """Kinds of output page units."""
    ORIGINAL = auto()
    TRANSLATED = auto()
    GLOSSARY = auto()


@dataclass(frozen=True)
class PageImageRef:
    """Reference to an original page, rendered as an image by the renderer."""
    page_index: int
    source_path: Optional[str] = None


@dataclass(frozen=True)
class PageUnit:
    """One page of the output document plan."""
    kind: UnitKind
    content: Union[str, PageImageRef]
    source_page_index: Optional[int] = None
    direction: str = "ltr"
    is_placeholder: bool = False


@dataclass
class OutputDocumentPlan:
    """
    Ordered sequence of page units for the bilingual output document.

    Invariant: every original page index appears exactly once as an ORIGINAL
    unit, immediately followed by a TRANSLATED unit for the same index, with
    an optional trailing GLOSSARY unit.
    """
    units: List[PageUnit] = field(default_factory=list)
    original_page_count: int = 0

    @property
    def page_count(self) -> int:
        return len(self.units)

    @property
    def original_units(self) -> List[PageUnit]:
        return [u for u in self.units if u.kind is UnitKind.ORIGINAL]

    @property
    def translated_units(self) -> List[PageUnit]:
        return [u for u in self.units if u.kind is UnitKind.TRANSLATED]

    @property
    def glossary_unit(self) -> Optional[PageUnit]:
        if self.units and self.units[-1].kind is UnitKind.GLOSSARY:
            return self.units[-1]
        return None

    @property
    def has_glossary(self) -> bool:
        return self.glossary_unit is not None

    @property
    def placeholder_pages(self) -> List[int]:
        return [u.source_page_index for u in self.translated_units if u.is_placeholder]

    def validate(self) -> List[str]:
        """Check the alternation invariant and return any violations."""
        issues = []
        body = self.units[:-1] if self.has_glossary else self.units

        if len(body) != 2 * self.original_page_count:
            issues.append(
                f"expected {2 * self.original_page_count} page units, found {len(body)}"
            )

        pairs: List[Tuple[PageUnit, PageUnit]] = list(zip(body[0::2], body[1::2]))
        for expected_index, (original, translated) in enumerate(pairs):
            if original.kind is not UnitKind.ORIGINAL or original.source_page_index != expected_index:
                issues.append(f"unit {2 * expected_index} is not ORIGINAL page {expected_index}")
            if translated.kind is not UnitKind.TRANSLATED or translated.source_page_index != expected_index:
                issues.append(f"unit {2 * expected_index + 1} is not TRANSLATED page {expected_index}")

        if any(u.kind is UnitKind.GLOSSARY for u in body):
            issues.append("glossary unit must be the last unit")

        return issues


class DocumentState(Enum):
    """Per-document orchestrator state."""
    IDLE = auto()
    RUNNING = auto()
    SUCCEEDED = auto()
    DEGRADED = auto()


@dataclass
class DocumentTranslationSummary:
    """Statistics for one translate_document run."""
    total_pages: int = 0
    processed_pages: int = 0
    fallback_pages: List[int] = field(default_factory=list)
    failed_pages: List[int] = field(default_factory=list)
    cancelled: bool = False
    duration: float = 0.0

    @property
    def outcome(self) -> DocumentState:
        if self.failed_pages or self.cancelled or self.processed_pages < self.total_pages:
            return DocumentState.DEGRADED
        return DocumentState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["outcome"] = self.outcome.name
        return data
