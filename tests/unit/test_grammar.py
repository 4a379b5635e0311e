"""Tests for Arabic grammar normalization."""

import random

import pytest

from medtrans.core.exceptions import RuleDefinitionError
from medtrans.grammar.normalizer import GrammarNormalizer


@pytest.fixture
def normalizer():
    return GrammarNormalizer()


FRAGMENTS = [
    "هو ", "هي ", "هم ", "يعاني ", "تعاني ", "يعانون ", "من ", "في ", "على ",
    "المرض ", "المريض ", "هاذا ", "ال ", "أدوية", "حمى", "صداع", "x",
    " ، ", "،", ".", " .", "؟", "!", "( ", " )", "(", ")", "5 - 6", "38.5", "  ", "\n",
]


def generated_texts(count=300, seed=1337):
    rng = random.Random(seed)
    return [
        "".join(rng.choice(FRAGMENTS) for _ in range(rng.randint(1, 14)))
        for _ in range(count)
    ]


class TestNormalize:
    """Test the structural, mistake and cleanup cascades."""

    def test_punctuation_spacing(self, normalizer):
        """Test space removal before and insertion after punctuation."""
        assert normalizer.normalize("text  .extra") == "text. extra"

    def test_arabic_comma(self, normalizer):
        """Test spacing around the Arabic comma."""
        assert normalizer.normalize("ضغط الدم ، مرتفع") == "ضغط الدم، مرتفع"

    def test_decimal_numbers_untouched(self, normalizer):
        """Test that no space is inserted inside a number."""
        assert normalizer.normalize("درجة الحرارة 38.5") == "درجة الحرارة 38.5"

    def test_duplicate_prepositions(self, normalizer):
        """Test collapsing of repeated prepositions."""
        assert normalizer.normalize("في في المستشفى") == "في المستشفى"
        assert normalizer.normalize("المريض يعاني من من حمى") == "المريض يعاني من حمى"

    def test_demonstrative_spelling(self, normalizer):
        """Test structural spelling fixes."""
        assert normalizer.normalize("هاذا الدواء") == "هذا الدواء"

    def test_common_mistakes(self, normalizer):
        """Test whole-word mistake corrections."""
        assert normalizer.normalize("المرض يعاني") == "المريض يعاني"
        assert normalizer.normalize("هو يعاني من حمى") == "يعاني من حمى"

    def test_parentheses(self, normalizer):
        """Test spacing inside and around parentheses."""
        assert normalizer.normalize("الجرعة( 5 ملغ )يومياً") == "الجرعة (5 ملغ) يومياً"

    def test_number_range(self, normalizer):
        """Test number range formatting."""
        assert normalizer.normalize("3 - 5 أيام") == "3-5 أيام"

    @pytest.mark.parametrize("text", [
        "text  .extra",
        "المريض يعاني من من حمى ، و صداع",
        "في في في المستشفى",
        "الجرعة( 5 ملغ )يومياً",
        "هاذا المرض  !",
        "  ",
        "",
    ])
    def test_idempotent(self, normalizer, text):
        """Test that a second pass changes nothing."""
        once = normalizer.normalize(text)

        assert normalizer.normalize(once) == once

    def test_repeated_pronouns_settle(self, normalizer):
        """Test that a long run of redundant pronouns is removed in one call."""
        text = "هو " * 7 + "يعاني من حمى"

        assert normalizer.normalize(text) == "يعاني من حمى"
        assert normalizer.get_stats()["unstable_inputs"] == 0

    def test_idempotent_on_generated_text(self, normalizer):
        """Test idempotence over random mixtures of words, spacing and punctuation."""
        for text in generated_texts():
            once = normalizer.normalize(text)

            assert normalizer.normalize(once) == once, repr(text)

        assert normalizer.get_stats()["unstable_inputs"] == 0


class TestCustomRules:
    """Test runtime additions."""

    def test_custom_mistake(self, normalizer):
        """Test adding a mistake correction."""
        normalizer.add_custom_mistake("دكتورة", "طبيبة")

        assert normalizer.normalize("دكتورة العيادة") == "طبيبة العيادة"

    def test_custom_rule(self, normalizer):
        """Test adding a structural rule."""
        table = normalizer.add_custom_rule(r"ملغم", "ملغ", "Unit spelling")

        assert table is normalizer.structural_rules
        assert normalizer.normalize("5 ملغم") == "5 ملغ"

    def test_invalid_custom_rule(self, normalizer):
        """Test that an uncompilable rule is rejected."""
        with pytest.raises(RuleDefinitionError):
            normalizer.add_custom_rule("[unclosed", "x")

    def test_unstable_rule_is_bounded(self, normalizer):
        """Test that a rule that keeps growing the text stops after max_passes."""
        normalizer.add_custom_rule("x", "xx")

        result = normalizer.normalize("x")

        assert len(result) == 2 ** normalizer.max_passes
        assert normalizer.get_stats()["unstable_inputs"] == 1

    def test_invalid_max_passes(self):
        """Test that max_passes must be positive."""
        with pytest.raises(ValueError):
            GrammarNormalizer(max_passes=0)


class TestAnalysis:
    """Test non-destructive analysis."""

    def test_analyze_text(self, normalizer):
        """Test that suggestions report position and replacement."""
        text = "هاذا المرض"
        suggestions = normalizer.analyze_text(text)

        by_type = {s.type: s for s in suggestions}
        assert by_type["grammar"].original == "هاذا"
        assert by_type["grammar"].suggestion == "هذا"
        assert by_type["spelling"].suggestion == "المريض"
        assert text[by_type["spelling"].start:by_type["spelling"].end] == "المرض"
        assert by_type["spelling"].to_dict()["description"] == "Common mistake: المرض"

    def test_clean_text_has_no_suggestions(self, normalizer):
        """Test that correct text yields nothing."""
        assert normalizer.analyze_text("المريض يعاني من حمى") == []

    def test_ready_and_stats(self, normalizer):
        """Test readiness and rule counts."""
        stats = normalizer.get_stats()

        assert normalizer.is_ready()
        assert stats["grammar_rules"] > 0
        assert stats["common_mistakes"] > 0
        assert stats["cleanup_rules"] > 0
        assert stats["rule_failures"] == 0
