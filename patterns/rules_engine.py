"""Pure-function rules engine pattern.

Rules are stateless functions: (entity, context) -> RuleResult.
No database, no side effects. This makes them:
- Trivially testable (pure input/output)
- Composable (chain multiple rules)
- Auditable (deterministic, explainable)

Example domain: a lending library deciding whether a book can be loaned
and whether a loan is overdue.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleSetResult:
    """Aggregate outcome of multiple rules."""

    all_passed: bool
    results: list[RuleResult]
    failed: list[RuleResult] = field(default_factory=list)

    def __post_init__(self):
        self.failed = [r for r in self.results if not r.passed]
        self.all_passed = len(self.failed) == 0


# ---------------------------------------------------------------------------
# Lending rules
# ---------------------------------------------------------------------------

def overdue_cutoff(today: date, grace_period_days: int) -> date:
    """Latest loan date that counts as overdue on `today`."""
    if grace_period_days < 0:
        raise ValueError(f"grace_period_days must be >= 0, got {grace_period_days}")
    return today - timedelta(days=grace_period_days)


def check_book_available(isbn: str, has_active_loan: bool) -> RuleResult:
    """A book can be loaned only when no other loan of it is outstanding."""
    return RuleResult(
        passed=not has_active_loan,
        rule_name="book_available",
        message="Book available" if not has_active_loan else "Book already loaned",
        details={"isbn": isbn, "has_active_loan": has_active_loan},
    )


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

def evaluate_rules(*rules: RuleResult) -> RuleSetResult:
    """Compose multiple rule results into a single aggregate.

    Example::

        result = evaluate_rules(
            check_book_available(book.isbn, has_active_loan=False),
        )
        if not result.all_passed:
            raise BookAlreadyLoanedError(result.failed[0].message)
    """
    return RuleSetResult(
        all_passed=all(r.passed for r in rules),
        results=list(rules),
    )
