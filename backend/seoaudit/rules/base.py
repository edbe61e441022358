"""
Common contract for audit rules.

A rule is a stateless object with catalog metadata (id, category, name,
description, weight) and an async check(context) that returns a
RuleCheckResult whose score lies in [0, weight].

Band rules score a plain share of their weight (`partial`: 0.7 of 5 is 3.5).
Coverage rules round that share to whole points (`coverage`).
"""
from typing import Any

from seoaudit.models.audit import (
    AuditRuleContext,
    Issue,
    IssueSeverity,
    RuleCategory,
    RuleCheckResult,
)
from seoaudit.services.scoring import round_half_up


class AuditRule:
    id: str = ""
    category: RuleCategory
    name: str = ""
    description: str = ""
    weight: int = 0

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        raise NotImplementedError

    def issue(
        self,
        severity: IssueSeverity,
        message: str,
        recommendation: str,
        **metadata: Any,
    ) -> Issue:
        return Issue(
            rule_id=self.id,
            severity=severity,
            message=message,
            recommendation=recommendation,
            metadata=metadata,
        )

    def share(self, fraction: float) -> float:
        """Unrounded share of this rule's weight, kept in [0, weight]."""
        return max(0.0, min(float(self.weight), self.weight * fraction))

    def points(self, fraction: float) -> int:
        """Share of this rule's weight, rounded half-up to whole points."""
        return max(0, min(self.weight, round_half_up(self.weight * fraction)))

    def passed(self, *issues: Issue) -> RuleCheckResult:
        return RuleCheckResult(passed=True, score=self.weight, issues=list(issues))

    def failed(self, *issues: Issue) -> RuleCheckResult:
        return RuleCheckResult(passed=False, score=0, issues=list(issues))

    def partial(self, fraction: float, passed: bool, *issues: Issue) -> RuleCheckResult:
        return RuleCheckResult(passed=passed, score=self.share(fraction), issues=list(issues))

    def coverage(self, fraction: float, passed: bool, *issues: Issue) -> RuleCheckResult:
        return RuleCheckResult(passed=passed, score=self.points(fraction), issues=list(issues))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} ({self.category.value}, {self.weight})>"
