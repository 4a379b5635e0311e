"""
Rule-based translation engine.

Runs the annotated text through a fixed, numbered cascade:

    1. construct rules
    2. phrase table
    3. grammar-word rules
    4. annotation cleanup (to a fixed point)

Each stage consumes the output of the previous one. A failing rule is
skipped; the cascade never aborts because of a single rule.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import logging
import re
import threading

from medtrans.core.exceptions import AnnotationCleanupError, RuleApplicationFailed
from medtrans.core.rule_table import (
    RuleTable,
    apply_cascade,
    compile_rule,
    marker_tolerant,
    phrase_pattern,
)
from medtrans.translation.rules import (
    build_construct_table,
    build_grammar_word_table,
    build_phrase_table,
)

logger = logging.getLogger(__name__)

# One "token [TAG:value]" marker; the token may be empty or carry punctuation and brackets.
ANNOTATION = re.compile(r"(?P<token>\S*?)\s*\[(?:MED|NORM):(?P<value>[^\]]+)\]")
_LEADING = re.compile(r"^[^\w]*")
_TRAILING = re.compile(r"[^\w]*$")

DEFAULT_MAX_CLEANUP_ITERATIONS = 100


def _collapse(match: re.Match) -> str:
    token = match.group("token")
    lead = _LEADING.match(token).group()
    trail = _TRAILING.search(token).group() if token != lead else ""
    return f"{lead}{match.group('value')}{trail}"


class TranslationEngine:
    """
    Deterministic English to Arabic rule engine.

    Rule tables are immutable; ``add_custom_pattern`` and
    ``add_custom_phrase`` swap in new table versions. Additions are single
    writer and must not run while pages are being translated.
    """

    def __init__(self, max_cleanup_iterations: int = DEFAULT_MAX_CLEANUP_ITERATIONS):
        self.max_cleanup_iterations = max_cleanup_iterations
        self.construct_rules = build_construct_table()
        self.phrase_rules = build_phrase_table()
        self.grammar_word_rules = build_grammar_word_table()

        self._lock = threading.Lock()
        self._rule_failures = 0
        self._cleanup_passes = 0

        logger.debug(
            f"Translation engine ready: {len(self.construct_rules)} construct rules, "
            f"{len(self.phrase_rules)} phrases, {len(self.grammar_word_rules)} grammar-word rules"
        )

    @property
    def cascade(self) -> List[Tuple[int, str]]:
        """The numbered stage order."""
        return [
            (1, self.construct_rules.name),
            (2, self.phrase_rules.name),
            (3, self.grammar_word_rules.name),
            (4, "cleanup"),
        ]

    def translate(self, text: str) -> str:
        """
        Translate annotated text.

        Raises:
            AnnotationCleanupError: if marker cleanup does not converge
        """
        for table in (self.construct_rules, self.phrase_rules, self.grammar_word_rules):
            text = apply_cascade(text, table, self._record_failure)
        return self.cleanup_annotations(text)

    def cleanup_annotations(self, text: str) -> str:
        """Collapse every ``token [TAG:value]`` marker to ``value`` until none remain."""
        passes = 0
        while ANNOTATION.search(text):
            if passes >= self.max_cleanup_iterations:
                remaining = len(ANNOTATION.findall(text))
                raise AnnotationCleanupError(passes, remaining)
            text = ANNOTATION.sub(_collapse, text)
            passes += 1

        with self._lock:
            self._cleanup_passes += passes
        return text.strip()

    def _record_failure(self, failure: RuleApplicationFailed) -> None:
        with self._lock:
            self._rule_failures += 1

    # ---------- Runtime additions ----------

    def add_custom_pattern(
        self,
        pattern: str,
        replacement: str,
        description: Optional[str] = None
    ) -> RuleTable:
        """
        Append a case-insensitive construct rule.

        ``{M}`` in the pattern matches an optional dictionary marker.

        Raises:
            RuleDefinitionError: if the pattern does not compile
        """
        rule = compile_rule(
            marker_tolerant(pattern),
            replacement,
            self.construct_rules.next_priority,
            description or pattern,
            re.IGNORECASE
        )
        self.construct_rules = self.construct_rules.with_rule(rule)
        logger.info(f"Added custom pattern: {rule.description}")
        return self.construct_rules

    def add_custom_phrase(self, phrase: str, translation: str) -> RuleTable:
        """Append a whole-word, case-insensitive phrase replacement."""
        if not phrase.strip():
            raise ValueError("phrase must not be empty")
        rule = compile_rule(
            phrase_pattern(phrase),
            translation,
            self.phrase_rules.next_priority,
            phrase.lower(),
            re.IGNORECASE
        )
        self.phrase_rules = self.phrase_rules.with_rule(rule)
        logger.info(f"Added custom phrase: {phrase!r}")
        return self.phrase_rules

    def get_stats(self) -> Dict[str, int]:
        return {
            "construct_rules": len(self.construct_rules),
            "common_phrases": len(self.phrase_rules),
            "grammar_rules": len(self.grammar_word_rules),
            "rule_failures": self._rule_failures,
            "cleanup_passes": self._cleanup_passes,
        }
