"""
Audit Runner

End-to-end pipeline for one site: crawl, optionally fetch PageSpeed
metrics for the primary page, run the rule catalog and score the results.
Persistence, progress reporting and notifications belong to the job layer
that calls this.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from seoaudit.config import settings
from seoaudit.core.exceptions import CrawlFailedError
from seoaudit.integrations.pagespeed import PageSpeedClient
from seoaudit.models.audit import Issue, PerformanceMetrics, RuleCheckResult
from seoaudit.models.crawl import CrawlResult
from seoaudit.services.crawler import CrawlConfig, SiteCrawler
from seoaudit.services.rule_engine import RuleEngine
from seoaudit.services.scoring import (
    ScoreAggregator,
    calculate_total_score,
    score_grade,
)
from seoaudit.utils.url_utils import extract_domain, normalize_url

logger = logging.getLogger(__name__)


@dataclass
class AuditReport:
    url: str
    domain: str
    pages: list[CrawlResult]
    results: dict[str, RuleCheckResult]
    category_scores: dict[str, int]
    overall_score: int
    total_score: int
    grade: str
    performance: PerformanceMetrics | None = None
    started_at: str = ""
    completed_at: str = ""
    issues: list[Issue] = field(default_factory=list)

    @property
    def pages_crawled(self) -> int:
        return len(self.pages)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "domain": self.domain,
            "pages_crawled": self.pages_crawled,
            "pages": [p.to_dict() for p in self.pages],
            "results": {rule_id: r.to_dict() for rule_id, r in self.results.items()},
            "category_scores": dict(self.category_scores),
            "overall_score": self.overall_score,
            "total_score": self.total_score,
            "grade": self.grade,
            "performance": asdict(self.performance) if self.performance else None,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "issues": [i.to_dict() for i in self.issues],
        }


async def run_site_audit(
    url: str,
    max_pages: int | None = None,
    crawl_config: CrawlConfig | None = None,
    engine: RuleEngine | None = None,
    pagespeed_client: PageSpeedClient | None = None,
    fetch_performance: bool | None = None,
) -> AuditReport:
    """
    Crawl `url` and audit the result.

    Args:
        url: Site to audit; https:// is assumed when no scheme is given
        max_pages: Page budget (defaults to CRAWL_MAX_PAGES)
        crawl_config: Overrides for the crawler
        engine: Rule engine to use (defaults to the full catalog)
        pagespeed_client: Client for PageSpeed metrics
        fetch_performance: Fetch PageSpeed metrics (defaults to PAGESPEED_ENABLED)

    Raises:
        InvalidURLError: `url` cannot be normalized
        CrawlFailedError: no page could be fetched
    """
    start_url = normalize_url(url)
    domain = extract_domain(start_url)
    engine = engine or RuleEngine()
    if fetch_performance is None:
        fetch_performance = settings.PAGESPEED_ENABLED
    started_at = datetime.now(timezone.utc).isoformat()

    logger.info(f"Starting audit of {start_url}")

    async with SiteCrawler(crawl_config) as crawler:
        pages = await crawler.crawl_website(start_url, max_pages)

    if not pages:
        raise CrawlFailedError(start_url)

    performance = None
    if fetch_performance:
        client = pagespeed_client or PageSpeedClient()
        performance = await client.analyze(pages[0].final_url)

    results = await engine.run_audit(pages, domain, performance=performance)
    scores = ScoreAggregator().compute_scores(results, engine.rule_categories())
    total_score = calculate_total_score(results)

    report = AuditReport(
        url=start_url,
        domain=domain,
        pages=pages,
        results=results,
        category_scores=scores.per_category,
        overall_score=scores.overall,
        total_score=total_score,
        grade=score_grade(scores.overall),
        performance=performance,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc).isoformat(),
        issues=[issue for r in results.values() for issue in r.issues],
    )

    logger.info(
        f"Audit of {start_url} finished: {len(pages)} pages, "
        f"score {report.overall_score} ({report.grade}), {len(report.issues)} issues"
    )
    return report
