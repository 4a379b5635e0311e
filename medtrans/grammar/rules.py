"""
Arabic grammar normalization tables.

Applied in this order by the normalizer:
    1. STRUCTURAL_RULES  - article attachment, punctuation, agreement, duplicates
    2. COMMON_MISTAKES   - spelling and redundant-pronoun corrections
    3. CLEANUP_RULES     - whitespace and punctuation layout
"""

from typing import List, Tuple
import re

from medtrans.core.models import GrammarRule
from medtrans.core.rule_table import RuleTable

STRUCTURAL_PRIORITY = 100
MISTAKE_PRIORITY = 200
CLEANUP_PRIORITY = 300

# Marks that take no space before them and one space after.
PUNCTUATION = r".,;:!?،؛؟"

STRUCTURAL_RULES: List[Tuple[str, str, str]] = [
    (r"\bال\s+([أإآ])", r"الـ\1", "Article attachment"),
    (r"\s+([،؛؟!])", r"\1", "Remove space before Arabic punctuation"),
    (r"(\d+)\s*-\s*(\d+)", r"\1-\2", "Number range formatting"),
    (r"\bهاذا\b", "هذا", "Correct demonstrative pronoun"),
    (r"\bهاذه\b", "هذه", "Correct demonstrative pronoun"),
    (r"\bاللذي\b", "الذي", "Correct relative pronoun"),
    (r"\bاللتي\b", "التي", "Correct relative pronoun"),
    (r"\bالمريضة\s+الذكر\b", "المريض الذكر", "Gender agreement"),
    (r"\bالمريض\s+الأنثى\b", "المريضة الأنثى", "Gender agreement"),
    (r"\bيعاني\s+من(?:\s+من)+\b", "يعاني من", "Remove duplicate preposition"),
    (r"\bفي(?:\s+في)+\b", "في", "Remove duplicate preposition"),
    (r"\bعلى(?:\s+على)+\b", "على", "Remove duplicate preposition"),
]

COMMON_MISTAKES: List[Tuple[str, str]] = [
    ("المرض", "المريض"),
    ("الدكتور", "الطبيب"),
    ("المستشفا", "المستشفى"),
    ("الاعراض", "الأعراض"),
    ("الادوية", "الأدوية"),
    ("الاشعة", "الأشعة"),
    ("تحليل دم", "فحص دم"),
    ("صورة اشعة", "صورة أشعة"),
]

# Pronoun and verb pairs; any run of the repeated pronoun collapses at once.
REDUNDANT_PRONOUNS: List[Tuple[str, str]] = [
    ("هو", "يعاني"),
    ("هي", "تعاني"),
    ("هم", "يعانون"),
    ("هن", "يعانين"),
]

CLEANUP_RULES: List[Tuple[str, str, str]] = [
    (r"\s+", " ", "Collapse whitespace"),
    (rf"\s+([{PUNCTUATION}])", r"\1", "Remove space before punctuation"),
    (rf"([{PUNCTUATION}])(?=[^\s\d{PUNCTUATION})\]\"'])", r"\1 ", "Add space after punctuation"),
    (r"\(\s+", "(", "Trim after opening parenthesis"),
    (r"\s+\)", ")", "Trim before closing parenthesis"),
    (r"(?<=[^\s(\[])\(", " (", "Space before opening parenthesis"),
    (r"\)(?=\w)", ") ", "Space after closing parenthesis"),
    (r"\"\s*([^\"]*?)\s*\"", r'"\1"', "Trim inside quotes"),
    (r"^\s+|\s+$", "", "Trim"),
]


def mistake_pattern(mistake: str) -> str:
    """Whole-word pattern for a literal mistake, tolerant of internal spacing."""
    return r"\b" + r"\s+".join(re.escape(w) for w in mistake.split()) + r"\b"


def build_structural_table() -> RuleTable:
    return RuleTable.from_definitions(
        "structural", STRUCTURAL_RULES, STRUCTURAL_PRIORITY, rule_cls=GrammarRule
    )


def build_mistake_table() -> RuleTable:
    definitions = [
        (mistake_pattern(m), c, f"Common mistake: {m}") for m, c in COMMON_MISTAKES
    ]
    definitions += [
        (rf"\b(?:{p}\s+)+{v}\b", v, f"Common mistake: {p} {v}") for p, v in REDUNDANT_PRONOUNS
    ]
    return RuleTable.from_definitions(
        "common-mistakes", definitions, MISTAKE_PRIORITY, rule_cls=GrammarRule
    )


def build_cleanup_table() -> RuleTable:
    return RuleTable.from_definitions(
        "cleanup", CLEANUP_RULES, CLEANUP_PRIORITY, rule_cls=GrammarRule
    )
