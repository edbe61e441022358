"""
Score Aggregation

Turns per-rule results into 0-100 category scores and a weighted overall
score. Each category has a fixed point budget; the budgets sum to 100.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from seoaudit.models.audit import RuleCategory, RuleCheckResult

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS: dict[str, int] = {
    RuleCategory.TECHNICAL.value: 35,
    RuleCategory.ONPAGE.value: 25,
    RuleCategory.STRUCTURED_DATA.value: 20,
    RuleCategory.PERFORMANCE.value: 15,
    RuleCategory.LOCAL_SEO.value: 5,
}

GRADE_THRESHOLDS = [
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _category_key(category) -> str:
    return category.value if isinstance(category, RuleCategory) else str(category)


@dataclass
class AuditScores:
    overall: int
    per_category: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"overall": self.overall, "per_category": dict(self.per_category)}


class ScoreAggregator:
    """Weighted category and overall scores for one audit run."""

    def __init__(self, category_weights: Mapping[str, int] | None = None):
        self.category_weights = dict(category_weights or CATEGORY_WEIGHTS)

    def compute_scores(
        self,
        results: Mapping[str, RuleCheckResult],
        rule_categories: Mapping[str, str],
        category_weights: Mapping[str, int] | None = None,
    ) -> AuditScores:
        """
        Compute per-category and overall scores.

        Category score = round(100 * sum(rule scores) / budget), clamped to
        [0, 100]; 0 for a zero budget. Overall is the budget-weighted mean of
        the category scores. Results whose rule id has no category are ignored.
        """
        weights = {_category_key(k): v for k, v in (category_weights or self.category_weights).items()}

        points = {category: 0 for category in weights}
        for rule_id, result in results.items():
            category = rule_categories.get(rule_id)
            if category is None:
                logger.debug(f"No category for rule {rule_id}, skipping")
                continue
            category = _category_key(category)
            if category not in points:
                continue
            points[category] += result.score

        per_category: dict[str, int] = {}
        for category, budget in weights.items():
            if budget <= 0:
                per_category[category] = 0
                continue
            raw = round_half_up(100 * points[category] / budget)
            per_category[category] = max(0, min(100, raw))

        total_weight = sum(w for w in weights.values() if w > 0)
        if total_weight == 0:
            overall = 0
        else:
            weighted = sum(per_category[c] * w for c, w in weights.items() if w > 0)
            overall = max(0, min(100, round_half_up(weighted / total_weight)))

        return AuditScores(overall=overall, per_category=per_category)


def compute_scores(
    results: Mapping[str, RuleCheckResult],
    rule_categories: Mapping[str, str],
    category_weights: Mapping[str, int] | None = None,
) -> AuditScores:
    return ScoreAggregator().compute_scores(results, rule_categories, category_weights)


def calculate_total_score(results: Mapping[str, RuleCheckResult] | Iterable[RuleCheckResult]) -> int:
    """Sum of rule scores, capped at 100 and rounded half-up."""
    values = results.values() if isinstance(results, Mapping) else results
    return round_half_up(min(100, sum(r.score for r in values)))


def score_grade(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def verify_category_budgets(
    weight_totals: Mapping[str, int],
    category_weights: Mapping[str, int] | None = None,
) -> list[str]:
    """
    Compare catalog weight sums against the category budgets.

    Returns a list of human-readable mismatches; empty when they agree.
    """
    budgets = {_category_key(k): v for k, v in (category_weights or CATEGORY_WEIGHTS).items()}
    totals = {_category_key(k): v for k, v in weight_totals.items()}

    problems = []
    for category in sorted(set(budgets) | set(totals)):
        expected = budgets.get(category, 0)
        actual = totals.get(category, 0)
        if expected != actual:
            problems.append(f"{category}: rules sum to {actual}, budget is {expected}")
    return problems
