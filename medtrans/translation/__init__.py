"""Dictionary annotation and the rule-based translation engine."""
