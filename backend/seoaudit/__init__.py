"""
seoaudit - crawl a website and score it against a catalog of SEO rules.
"""
from seoaudit.config import settings
from seoaudit.core.exceptions import (
    SEOAuditError,
    InvalidURLError,
    PageFetchError,
    CrawlFailedError,
    DuplicateRuleError,
)
from seoaudit.core.logging import configure_logging
from seoaudit.models import (
    AuditRuleContext,
    CrawlResult,
    Issue,
    IssueSeverity,
    PerformanceMetrics,
    ResourceInfo,
    ResourceType,
    RuleCategory,
    RuleCheckResult,
)
from seoaudit.services.crawler import CrawlConfig, SiteCrawler
from seoaudit.services.rule_engine import RuleEngine
from seoaudit.services.scoring import (
    CATEGORY_WEIGHTS,
    AuditScores,
    ScoreAggregator,
    calculate_total_score,
    compute_scores,
    score_grade,
    verify_category_budgets,
)
from seoaudit.services.audit_runner import AuditReport, run_site_audit

__version__ = settings.VERSION

__all__ = [
    "settings",
    "SEOAuditError",
    "InvalidURLError",
    "PageFetchError",
    "CrawlFailedError",
    "DuplicateRuleError",
    "configure_logging",
    "AuditRuleContext",
    "CrawlResult",
    "Issue",
    "IssueSeverity",
    "PerformanceMetrics",
    "ResourceInfo",
    "ResourceType",
    "RuleCategory",
    "RuleCheckResult",
    "CrawlConfig",
    "SiteCrawler",
    "RuleEngine",
    "CATEGORY_WEIGHTS",
    "AuditScores",
    "ScoreAggregator",
    "calculate_total_score",
    "compute_scores",
    "score_grade",
    "verify_category_budgets",
    "AuditReport",
    "run_site_audit",
]
