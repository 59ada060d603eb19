"""Library business rules: pure functions.

Re-exports the rules engine pattern with the lending rules.
"""

from patterns.rules_engine import (
    RuleResult,
    RuleSetResult,
    check_book_available,
    evaluate_rules,
    overdue_cutoff,
)

__all__ = [
    "RuleResult",
    "RuleSetResult",
    "check_book_available",
    "evaluate_rules",
    "overdue_cutoff",
]
