"""
Rule Engine

Runs every registered rule against one shared, read-only context built from
a crawl. A rule that raises or returns a malformed result never takes other
rules down with it: its entry becomes a zero-score critical result, so the
output always holds one entry per registered rule.
"""
import logging
import math
from collections import defaultdict
from typing import Iterable

from seoaudit.core.exceptions import CrawlFailedError, DuplicateRuleError
from seoaudit.models.audit import (
    AuditRuleContext,
    PerformanceMetrics,
    RuleCategory,
    RuleCheckResult,
)
from seoaudit.models.crawl import CrawlResult
from seoaudit.rules import AuditRule, default_rules

logger = logging.getLogger(__name__)


class RuleEngine:
    """Ordered, read-only registry of audit rules keyed by rule id."""

    def __init__(self, rules: Iterable[AuditRule] | None = None):
        self._rules: dict[str, AuditRule] = {}
        for rule in default_rules() if rules is None else rules:
            if rule.id in self._rules:
                raise DuplicateRuleError(rule.id)
            self._rules[rule.id] = rule

    def __len__(self) -> int:
        return len(self._rules)

    async def run_audit(
        self,
        pages: list[CrawlResult],
        project_domain: str,
        performance: PerformanceMetrics | None = None,
    ) -> dict[str, RuleCheckResult]:
        """
        Run all rules against the crawl.

        The first page is the primary page; all pages are available to rules
        that look across the site.

        Raises:
            CrawlFailedError: `pages` is empty
        """
        if not pages:
            raise CrawlFailedError(project_domain)

        context = AuditRuleContext(
            page=pages[0],
            all_pages=list(pages),
            project_domain=project_domain,
            performance=performance,
        )

        logger.info(f"Running {len(self._rules)} rules on {context.page.url} ({len(pages)} pages)")

        results: dict[str, RuleCheckResult] = {}
        for rule_id, rule in self._rules.items():
            logger.debug(f"Running rule: {rule.name}")
            try:
                result = self._clamp(rule, await rule.check(context))
            except Exception as e:
                logger.error(f"Error running rule {rule_id}: {e}")
                result = RuleCheckResult.execution_failed(rule_id, str(e) or type(e).__name__)
            results[rule_id] = result

        failed = sum(1 for r in results.values() if not r.passed)
        logger.info(f"Audit complete: {len(results)} rules, {failed} not passed")
        return results

    def _clamp(self, rule: AuditRule, result: RuleCheckResult) -> RuleCheckResult:
        """Validate a rule outcome and pull its score into [0, weight]."""
        if not isinstance(result, RuleCheckResult):
            raise TypeError(f"check() returned {type(result).__name__}, not RuleCheckResult")
        if isinstance(result.score, bool) or not isinstance(result.score, (int, float)):
            raise TypeError(f"score must be a number, got {type(result.score).__name__}")
        if not math.isfinite(result.score):
            raise ValueError(f"score must be finite, got {result.score}")
        if 0 <= result.score <= rule.weight:
            return result
        clamped = max(0, min(rule.weight, result.score))
        logger.warning(f"Rule {rule.id} returned score {result.score} outside [0, {rule.weight}], clamping to {clamped}")
        return RuleCheckResult(
            passed=result.passed,
            score=clamped,
            issues=result.issues,
            error=result.error,
        )

    def get_rule(self, rule_id: str) -> AuditRule | None:
        return self._rules.get(rule_id)

    def get_all_rules(self) -> list[AuditRule]:
        return list(self._rules.values())

    def get_rules_by_category(self, category: RuleCategory | str) -> list[AuditRule]:
        category = RuleCategory(category)
        return [rule for rule in self._rules.values() if rule.category == category]

    def rule_categories(self) -> dict[str, str]:
        """rule id -> category value, the lookup the score aggregator needs."""
        return {rule_id: rule.category.value for rule_id, rule in self._rules.items()}

    def category_weight_totals(self) -> dict[str, int]:
        totals: dict[str, int] = defaultdict(int)
        for rule in self._rules.values():
            totals[rule.category.value] += rule.weight
        return dict(totals)
