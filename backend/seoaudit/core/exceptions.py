"""
Exceptions raised by the crawl-and-audit core.
"""


class SEOAuditError(Exception):
    """Base class for all audit core errors."""


class InvalidURLError(SEOAuditError, ValueError):
    """A URL could not be parsed or normalized."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class PageFetchError(SEOAuditError):
    """A single page could not be fetched (navigation error or timeout)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to crawl {url}: {reason}")


class CrawlFailedError(SEOAuditError):
    """Nothing could be crawled, so nothing can be audited."""

    def __init__(self, url: str, detail: str = "No pages could be crawled"):
        self.url = url
        self.detail = detail
        super().__init__(f"{detail}: {url}")


class DuplicateRuleError(SEOAuditError):
    """Two catalog entries were registered under the same rule id."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule id registered twice: {rule_id}")
