"""
Ordered, immutable rule tables and the cascade runner shared by the
translation engine and the grammar normalizer.
"""

from __future__ import annotations
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Type
import logging
import re

from medtrans.core.exceptions import RuleApplicationFailed, RuleDefinitionError
from medtrans.core.models import TranslationRule

logger = logging.getLogger(__name__)

# Optional inline dictionary marker, e.g. " [MED:حمى]"
MARKER = r"\s*\[(?:MED|NORM):[^\]]+\]"
OPT_MARKER = rf"(?:{MARKER})?"


def marker_tolerant(pattern: str) -> str:
    """Expand every ``{M}`` slot in ``pattern`` into an optional marker."""
    return pattern.replace("{M}", OPT_MARKER)


def phrase_pattern(phrase: str) -> str:
    """Whole-word pattern for a phrase, tolerating markers between and after its words."""
    words = [re.escape(w) for w in phrase.split()]
    return r"(?<!\w)" + (OPT_MARKER + r"\s+").join(words) + r"(?!\w)" + OPT_MARKER


def compile_rule(
    pattern: str,
    replacement: str,
    priority: int,
    description: str,
    flags: int = 0,
    rule_cls: Type[TranslationRule] = TranslationRule
) -> TranslationRule:
    """Compile a rule, raising RuleDefinitionError on a bad pattern."""
    try:
        matcher = re.compile(pattern, flags)
    except re.error as e:
        raise RuleDefinitionError(pattern, e) from e
    return rule_cls(matcher, replacement, priority, description)


class RuleTable:
    """
    Immutable, explicitly ordered list of rules.

    Rules run in ascending priority; ties keep declaration order.
    ``with_rule`` returns a new table instead of mutating this one.
    """

    def __init__(self, name: str, rules: Iterable[TranslationRule] = (), base_priority: int = 0):
        self.name = name
        self.base_priority = base_priority
        self._rules: Tuple[TranslationRule, ...] = tuple(
            sorted(rules, key=lambda r: r.priority)
        )

    @classmethod
    def from_definitions(
        cls,
        name: str,
        definitions: Sequence[Tuple[str, str, str]],
        base_priority: int,
        flags: int = 0,
        rule_cls: Type[TranslationRule] = TranslationRule
    ) -> RuleTable:
        """
        Build a table from ``(pattern, replacement, description)`` triples.

        Priorities are assigned from ``base_priority`` in declaration order.
        """
        rules = [
            compile_rule(pattern, replacement, base_priority + i, description, flags, rule_cls)
            for i, (pattern, replacement, description) in enumerate(definitions)
        ]
        return cls(name, rules, base_priority)

    @property
    def next_priority(self) -> int:
        if not self._rules:
            return self.base_priority
        return self._rules[-1].priority + 1

    def with_rule(self, rule: TranslationRule) -> RuleTable:
        return RuleTable(self.name, self._rules + (rule,), self.base_priority)

    @property
    def descriptions(self) -> List[str]:
        return [r.description for r in self._rules]

    def __iter__(self) -> Iterator[TranslationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({self.name!r}, {len(self)} rules)"


def apply_cascade(
    text: str,
    table: RuleTable,
    on_failure: Optional[Callable[[RuleApplicationFailed], None]] = None
) -> str:
    """
    Apply every rule of ``table`` in order, each on the previous output.

    A rule that raises is skipped; the failure is logged and handed to
    ``on_failure``.
    """
    for rule in table:
        try:
            text = rule.apply(text)
        except Exception as e:
            failure = RuleApplicationFailed(rule.description, table.name, e)
            logger.warning(failure.message)
            if on_failure is not None:
                on_failure(failure)
    return text
