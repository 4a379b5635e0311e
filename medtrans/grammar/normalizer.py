"""
Grammar normalization for translated Arabic text.

The normalizer runs structural rules, then the common-mistakes table, then
whitespace and punctuation cleanup, and repeats the whole cascade until the
text stops changing so that ``normalize(normalize(x)) == normalize(x)``.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional
import logging
import re
import threading

from medtrans.core.exceptions import RuleApplicationFailed
from medtrans.core.models import GrammarRule
from medtrans.core.rule_table import RuleTable, apply_cascade, compile_rule
from medtrans.grammar.rules import (
    build_cleanup_table,
    build_mistake_table,
    build_structural_table,
    mistake_pattern,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 5


@dataclass(frozen=True)
class GrammarSuggestion:
    """A place where a rule or mistake correction would fire."""
    start: int
    end: int
    original: str
    suggestion: str
    description: str
    type: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class GrammarNormalizer:
    """Deterministic, idempotent Arabic grammar cleanup."""

    def __init__(self, max_passes: int = DEFAULT_MAX_PASSES):
        if max_passes < 1:
            raise ValueError("max_passes must be at least 1")
        self.max_passes = max_passes
        self.structural_rules = build_structural_table()
        self.mistake_rules = build_mistake_table()
        self.cleanup_rules = build_cleanup_table()

        self._lock = threading.Lock()
        self._rule_failures = 0
        self._unstable_inputs = 0

    @property
    def tables(self) -> List[RuleTable]:
        return [self.structural_rules, self.mistake_rules, self.cleanup_rules]

    def normalize(self, text: str) -> str:
        """
        Normalize text to a fixed point of the grammar cascade.

        Passes that keep or shrink the text continue until nothing changes,
        bounded by the input length. Passes that grow the text count against
        ``max_passes``, which stops runtime rules that expand without end.

        Args:
            text: Translated text

        Returns:
            Normalized text
        """
        current = text
        growing_passes = 0
        for _ in range(self.max_passes + len(text)):
            updated = self._run_once(current)
            if updated == current:
                return updated
            if len(updated) > len(current):
                growing_passes += 1
            current = updated
            if growing_passes >= self.max_passes:
                break

        with self._lock:
            self._unstable_inputs += 1
        logger.warning(f"Grammar normalization did not settle for input of {len(text)} characters")
        return current

    def _run_once(self, text: str) -> str:
        for table in self.tables:
            text = apply_cascade(text, table, self._record_failure)
        return text

    def _record_failure(self, failure: RuleApplicationFailed) -> None:
        with self._lock:
            self._rule_failures += 1

    def add_custom_rule(self, pattern: str, replacement: str, description: Optional[str] = None) -> RuleTable:
        """
        Append a structural rule.

        Raises:
            RuleDefinitionError: if the pattern does not compile
        """
        rule = compile_rule(
            pattern,
            replacement,
            self.structural_rules.next_priority,
            description or pattern,
            rule_cls=GrammarRule
        )
        self.structural_rules = self.structural_rules.with_rule(rule)
        logger.info(f"Added custom grammar rule: {rule.description}")
        return self.structural_rules

    def add_custom_mistake(self, mistake: str, correction: str) -> RuleTable:
        """Append a case-insensitive whole-word mistake correction."""
        if not mistake.strip():
            raise ValueError("mistake must not be empty")
        rule = compile_rule(
            mistake_pattern(mistake),
            correction,
            self.mistake_rules.next_priority,
            f"Common mistake: {mistake}",
            re.IGNORECASE,
            rule_cls=GrammarRule
        )
        self.mistake_rules = self.mistake_rules.with_rule(rule)
        logger.info(f"Added custom mistake: {mistake!r} -> {correction!r}")
        return self.mistake_rules

    def analyze_text(self, text: str) -> List[GrammarSuggestion]:
        """Report where structural rules and mistake corrections match, without changing the text."""
        suggestions = []
        for table, kind in ((self.structural_rules, "grammar"), (self.mistake_rules, "spelling")):
            for rule in table:
                try:
                    for match in rule.matcher.finditer(text):
                        suggestions.append(GrammarSuggestion(
                            start=match.start(),
                            end=match.end(),
                            original=match.group(),
                            suggestion=match.expand(rule.replacement),
                            description=rule.description,
                            type=kind
                        ))
                except re.error as e:
                    logger.warning(f"Skipping rule '{rule.description}' during analysis: {e}")
        return suggestions

    def is_ready(self) -> bool:
        return len(self.structural_rules) > 0 and len(self.mistake_rules) > 0

    def get_stats(self) -> Dict[str, int]:
        return {
            "grammar_rules": len(self.structural_rules),
            "common_mistakes": len(self.mistake_rules),
            "cleanup_rules": len(self.cleanup_rules),
            "rule_failures": self._rule_failures,
            "unstable_inputs": self._unstable_inputs,
        }
