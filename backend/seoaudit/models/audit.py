"""
Audit data model: rule categories, issues, rule results and the shared
context every rule is evaluated against.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum as PyEnum
from functools import cached_property
from typing import Any, TYPE_CHECKING

from seoaudit.models.crawl import CrawlResult

if TYPE_CHECKING:
    from bs4 import BeautifulSoup


class RuleCategory(str, PyEnum):
    TECHNICAL = "technical"
    ONPAGE = "onpage"
    STRUCTURED_DATA = "structured-data"
    PERFORMANCE = "performance"
    LOCAL_SEO = "local-seo"


class IssueSeverity(str, PyEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Issue:
    rule_id: str
    severity: IssueSeverity
    message: str
    recommendation: str
    metadata: dict[str, Any] = field(default_factory=dict)
    # Assigned by the persistence layer once pages are stored
    page_id: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class RuleCheckResult:
    passed: bool
    score: float
    issues: list[Issue] = field(default_factory=list)
    error: str | None = None

    @property
    def failed_to_execute(self) -> bool:
        return self.error is not None

    @classmethod
    def execution_failed(cls, rule_id: str, reason: str) -> "RuleCheckResult":
        """Outcome recorded for a rule that raised instead of returning."""
        return cls(
            passed=False,
            score=0,
            issues=[
                Issue(
                    rule_id=rule_id,
                    severity=IssueSeverity.CRITICAL,
                    message=f"Rule execution failed: {reason}",
                    recommendation="Please contact support if this issue persists.",
                ),
            ],
            error=reason,
        )

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "error": self.error,
        }


@dataclass(frozen=True)
class PerformanceMetrics:
    """Lab metrics from the external PageSpeed Insights service."""
    url: str
    strategy: str = "mobile"
    performance_score: int | None = None  # 0-100
    lcp_ms: int | None = None
    cls: float | None = None
    inp_ms: int | None = None
    fcp_ms: int | None = None
    tbt_ms: int | None = None
    ttfb_ms: int | None = None
    speed_index_ms: int | None = None
    opportunities: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class AuditRuleContext:
    """Shared, read-only input for one audit run."""
    page: CrawlResult
    all_pages: list[CrawlResult]
    project_domain: str
    performance: PerformanceMetrics | None = None

    @cached_property
    def soup(self) -> "BeautifulSoup":
        """Parsed DOM of the primary page. Rules must not mutate it."""
        from seoaudit.services.extractor import parse_html

        return parse_html(self.page.html)
