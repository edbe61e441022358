"""
Technical rules (35 points): status, transport security, indexability
signals and mobile readiness.
"""
import logging
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx

from seoaudit.config import settings
from seoaudit.core.exceptions import InvalidURLError
from seoaudit.integrations.pagespeed import rate_metric
from seoaudit.models.audit import AuditRuleContext, IssueSeverity, RuleCategory, RuleCheckResult
from seoaudit.rules.base import AuditRule
from seoaudit.utils.url_utils import normalize_url, origin

logger = logging.getLogger(__name__)

STRICT_TRANSPORT_SECURITY = "strict-transport-security"

SECURITY_HEADERS = {
    STRICT_TRANSPORT_SECURITY: "HSTS",
    "content-security-policy": "CSP",
    "x-frame-options": "X-Frame-Options",
    "x-content-type-options": "X-Content-Type-Options",
    "referrer-policy": "Referrer-Policy",
}

SECURITY_HEADER_RECOMMENDATIONS = {
    "HSTS": 'Add Strict-Transport-Security header: "Strict-Transport-Security: max-age=31536000; includeSubDomains"',
    "CSP": "Add Content-Security-Policy header to prevent XSS attacks. Start with: \"Content-Security-Policy: default-src 'self'\"",
    "X-Frame-Options": 'Add X-Frame-Options header to prevent clickjacking: "X-Frame-Options: SAMEORIGIN"',
    "X-Content-Type-Options": 'Add X-Content-Type-Options header: "X-Content-Type-Options: nosniff"',
    "Referrer-Policy": 'Add Referrer-Policy header: "Referrer-Policy: strict-origin-when-cross-origin"',
}

VIEWPORT_EXAMPLE = '<meta name="viewport" content="width=device-width, initial-scale=1">'

SITEMAP_PATHS = ["/sitemap.xml", "/sitemap_index.xml", "/sitemap"]


class _HttpCheckRule(AuditRule):
    """Base for rules that issue their own GET against the audited site."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.HTTP_CHECK_TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": settings.USER_AGENT},
            transport=self._transport,
        )


class HttpStatusRule(AuditRule):
    id = "tech-http-status"
    category = RuleCategory.TECHNICAL
    name = "HTTP Status Check"
    description = "Verify that the page returns a successful HTTP status code (200)"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        status_code = context.page.status_code
        if status_code == 200:
            return self.passed()

        if status_code >= 500:
            recommendation = "Server error detected. Check your server logs and fix any configuration issues."
        elif status_code == 404:
            recommendation = "Page not found. Ensure the URL is correct or implement a 301 redirect to the correct page."
        elif status_code >= 400:
            recommendation = "Client error detected. Verify the URL and ensure the page is accessible."
        elif status_code >= 300:
            recommendation = "Redirect detected. Ensure redirects are properly configured and use 301 for permanent moves."
        else:
            recommendation = "Make sure the page responds with 200 OK and serves its full content."

        severity = IssueSeverity.CRITICAL if status_code >= 400 else IssueSeverity.WARNING
        return self.failed(
            self.issue(
                severity,
                f"Page returned HTTP status {status_code}",
                recommendation,
                status_code=status_code,
            )
        )


class HttpsRule(AuditRule):
    id = "tech-https"
    category = RuleCategory.TECHNICAL
    name = "HTTPS Enforcement"
    description = "Ensure the website uses HTTPS for secure connections"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        page = context.page
        if urlparse(page.final_url).scheme != "https":
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    "Website does not use HTTPS",
                    "Enable HTTPS by obtaining an SSL/TLS certificate. You can get a free certificate "
                    "from Let's Encrypt. Configure your server to redirect all HTTP traffic to HTTPS.",
                    final_url=page.final_url,
                )
            )

        if not page.headers.get(STRICT_TRANSPORT_SECURITY):
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "HTTPS is enabled but HSTS header is missing",
                    'Add the Strict-Transport-Security header to enforce HTTPS: '
                    '"Strict-Transport-Security: max-age=31536000; includeSubDomains"',
                )
            )

        return self.passed()


class CanonicalRule(AuditRule):
    id = "tech-canonical"
    category = RuleCategory.TECHNICAL
    name = "Canonical Tag"
    description = "Check for proper canonical tag implementation to prevent duplicate content"
    weight = 4

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        tag = context.soup.find("link", rel="canonical", href=True)
        canonical = tag["href"].strip() if tag else ""

        if not canonical:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    "No canonical tag found",
                    'Add a canonical tag to specify the preferred version of this page: '
                    '<link rel="canonical" href="https://example.com/page" />. '
                    "This helps prevent duplicate content issues.",
                )
            )

        if not canonical.lower().startswith(("http://", "https://")):
            return self.partial(
                0.5,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    "Canonical tag uses relative URL",
                    "Use an absolute URL in the canonical tag to avoid ambiguity. "
                    "Change from relative path to full URL (e.g., https://example.com/page).",
                    canonical=canonical,
                ),
            )

        if not _same_url(canonical, context.page.final_url):
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "Canonical tag points to a different URL",
                    "The canonical tag points to a different URL. Ensure this is intentional "
                    "if this is a duplicate or variant page.",
                    canonical=canonical,
                    current_url=context.page.final_url,
                )
            )

        return self.passed()


def _same_url(a: str, b: str) -> bool:
    try:
        return normalize_url(a) == normalize_url(b)
    except InvalidURLError:
        return a == b


class RobotsTxtRule(_HttpCheckRule):
    id = "tech-robots-txt"
    category = RuleCategory.TECHNICAL
    name = "Robots.txt"
    description = "Verify robots.txt file exists and is properly configured"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        robots_url = f"{origin(context.page.final_url)}/robots.txt"

        try:
            async with self._client() as client:
                response = await client.get(robots_url)
        except httpx.HTTPError as e:
            logger.warning(f"Could not fetch {robots_url}: {e}")
            return self._unreachable(robots_url, str(e))

        if response.status_code == 404:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    "robots.txt file not found",
                    "Create a robots.txt file in your website root to control search engine crawling. "
                    'At minimum, include your sitemap: "Sitemap: https://example.com/sitemap.xml"',
                    robots_url=robots_url,
                )
            )

        if response.status_code >= 400:
            logger.warning(f"robots.txt returned {response.status_code}: {robots_url}")
            return self._unreachable(robots_url, f"HTTP {response.status_code}")

        robots_parser = RobotFileParser()
        robots_parser.parse(response.text.splitlines())

        if not robots_parser.can_fetch("*", "/"):
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    "robots.txt blocks all crawlers",
                    "Your robots.txt file blocks all search engines from crawling your site. "
                    'Remove or modify "Disallow: /" to allow crawling.',
                    robots_url=robots_url,
                )
            )

        if not robots_parser.site_maps():
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "robots.txt found but no sitemap reference",
                    'Add a sitemap reference to your robots.txt file: "Sitemap: https://example.com/sitemap.xml"',
                    robots_url=robots_url,
                )
            )

        return self.passed()

    def _unreachable(self, robots_url: str, error: str) -> RuleCheckResult:
        return self.failed(
            self.issue(
                IssueSeverity.WARNING,
                "Could not access robots.txt",
                "Ensure your robots.txt file is accessible. Check server configuration and permissions.",
                robots_url=robots_url,
                error=error,
            )
        )


class SitemapRule(_HttpCheckRule):
    id = "tech-sitemap"
    category = RuleCategory.TECHNICAL
    name = "XML Sitemap"
    description = "Check for XML sitemap presence and accessibility"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        base = origin(context.page.final_url)
        sitemap_urls = [f"{base}{path}" for path in SITEMAP_PATHS]

        async with self._client() as client:
            for sitemap_url in sitemap_urls:
                try:
                    response = await client.get(sitemap_url)
                except httpx.HTTPError as e:
                    logger.debug(f"Sitemap check failed for {sitemap_url}: {e}")
                    continue

                if response.status_code == 200 and "<?xml" in response.text:
                    return self.passed()

        return self.failed(
            self.issue(
                IssueSeverity.WARNING,
                "XML sitemap not found",
                "Create an XML sitemap to help search engines discover and index your pages. "
                "Place it at /sitemap.xml and reference it in robots.txt. "
                "Use tools like Yoast SEO (WordPress) or online generators.",
                checked_urls=sitemap_urls,
            )
        )


class SecurityHeadersRule(AuditRule):
    id = "tech-security-headers"
    category = RuleCategory.TECHNICAL
    name = "Security Headers"
    description = "Verify presence of security headers (HSTS, CSP, X-Frame-Options)"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        headers = context.page.headers
        present = [label for header, label in SECURITY_HEADERS.items() if headers.get(header)]
        missing = [label for header, label in SECURITY_HEADERS.items() if not headers.get(header)]

        if not missing:
            return self.passed()

        return self.coverage(
            len(present) / len(SECURITY_HEADERS),
            len(present) > 0,
            self.issue(
                IssueSeverity.CRITICAL if len(missing) > 3 else IssueSeverity.WARNING,
                f"Missing security headers: {', '.join(missing)}",
                " | ".join(SECURITY_HEADER_RECOMMENDATIONS[label] for label in missing),
                present=present,
                missing=missing,
            ),
        )


class MobileFriendlyRule(AuditRule):
    id = "tech-mobile-friendly"
    category = RuleCategory.TECHNICAL
    name = "Mobile Friendliness"
    description = "Check viewport meta tag and mobile responsiveness"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        tag = context.soup.find("meta", attrs={"name": "viewport"})
        viewport = (tag.get("content") or "").strip() if tag else ""

        if not viewport:
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    "No viewport meta tag found",
                    f"Add a viewport meta tag to make your site mobile-friendly: {VIEWPORT_EXAMPLE}",
                )
            )

        compact = viewport.replace(" ", "").lower()
        if "width=device-width" not in compact or "initial-scale" not in compact:
            return self.partial(
                0.5,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    "Viewport meta tag is not properly configured",
                    f"Update your viewport meta tag to: {VIEWPORT_EXAMPLE}",
                    viewport=viewport,
                ),
            )

        return self.passed()


class CoreWebVitalsRule(AuditRule):
    id = "tech-core-web-vitals"
    category = RuleCategory.TECHNICAL
    name = "Core Web Vitals"
    description = "Check LCP, CLS and INP against Google's Core Web Vitals thresholds"
    weight = 5

    RATING_POINTS = {"good": 1.0, "needs_improvement": 0.5, "poor": 0.0}

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        metrics = context.performance
        ratings: dict[str, str] = {}
        if metrics is not None:
            candidates = {
                "lcp": rate_metric("lcp", metrics.lcp_ms),
                "cls": rate_metric("cls", metrics.cls),
            }
            if metrics.inp_ms is not None:
                candidates["inp"] = rate_metric("inp", metrics.inp_ms)
            else:
                candidates["tbt"] = rate_metric("tbt", metrics.tbt_ms)
            ratings = {name: rating for name, rating in candidates.items() if rating is not None}

        if not ratings:
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "Core Web Vitals were not measured",
                    "Run a PageSpeed Insights analysis to measure LCP, CLS and INP for this page.",
                )
            )

        fraction = sum(self.RATING_POINTS[r] for r in ratings.values()) / len(ratings)
        poor = [name.upper() for name, r in ratings.items() if r == "poor"]
        slow = [name.upper() for name, r in ratings.items() if r == "needs_improvement"]
        values = {
            "lcp_ms": metrics.lcp_ms,
            "cls": metrics.cls,
            "inp_ms": metrics.inp_ms,
            "tbt_ms": metrics.tbt_ms,
        }

        if poor:
            return self.coverage(
                fraction,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Poor Core Web Vitals: {', '.join(poor)}",
                    "Improve the failing metrics: optimize the largest image or text block for LCP, "
                    "reserve space for images and embeds for CLS, and break up long JavaScript tasks for INP.",
                    ratings=ratings,
                    **values,
                ),
            )

        if slow:
            return self.coverage(
                fraction,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"Core Web Vitals need improvement: {', '.join(slow)}",
                    "Get every metric into the 'good' range: LCP under 2.5s, CLS under 0.1, INP under 200ms.",
                    ratings=ratings,
                    **values,
                ),
            )

        return self.passed()
