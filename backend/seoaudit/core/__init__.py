"""
Core utilities for the audit core.
"""
from seoaudit.core.exceptions import (
    SEOAuditError,
    InvalidURLError,
    PageFetchError,
    CrawlFailedError,
    DuplicateRuleError,
)
from seoaudit.core.logging import configure_logging

__all__ = [
    "SEOAuditError",
    "InvalidURLError",
    "PageFetchError",
    "CrawlFailedError",
    "DuplicateRuleError",
    "configure_logging",
]
