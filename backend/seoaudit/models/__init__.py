from seoaudit.models.crawl import CrawlResult, ResourceInfo, ResourceType
from seoaudit.models.audit import (
    AuditRuleContext,
    Issue,
    IssueSeverity,
    PerformanceMetrics,
    RuleCategory,
    RuleCheckResult,
)

__all__ = [
    "CrawlResult",
    "ResourceInfo",
    "ResourceType",
    "AuditRuleContext",
    "Issue",
    "IssueSeverity",
    "PerformanceMetrics",
    "RuleCategory",
    "RuleCheckResult",
]
