"""
Performance rules (15 points): load time, page weight, request count and
the Lighthouse performance score.
"""
from seoaudit.models.audit import AuditRuleContext, IssueSeverity, RuleCategory, RuleCheckResult
from seoaudit.rules.base import AuditRule

MB = 1024 * 1024


class LoadTimeRule(AuditRule):
    id = "perf-load-time"
    category = RuleCategory.PERFORMANCE
    name = "Page Load Time"
    description = "Verify page loads in under 3 seconds"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        seconds = context.page.load_time / 1000

        if seconds <= 2:
            return self.passed()

        if seconds <= 3:
            return self.partial(
                0.8,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"Page load time is acceptable ({seconds:.2f}s)",
                    "Consider optimizing to get under 2 seconds for better user experience.",
                    load_time=seconds,
                ),
            )

        if seconds <= 5:
            return self.partial(
                0.5,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Page loads slowly ({seconds:.2f}s)",
                    "Optimize page load time. Compress images, minify CSS/JS, enable caching, and use a CDN.",
                    load_time=seconds,
                ),
            )

        return self.failed(
            self.issue(
                IssueSeverity.CRITICAL,
                f"Page loads very slowly ({seconds:.2f}s)",
                "Urgent: Reduce page load time. Check server response time, optimize images, "
                "minimize HTTP requests, and enable compression.",
                load_time=seconds,
            )
        )


class PageSizeRule(AuditRule):
    id = "perf-page-size"
    category = RuleCategory.PERFORMANCE
    name = "Page Size"
    description = "Check that page size is under 2MB"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        page = context.page
        total_size = sum(r.size for r in page.resources) + page.page_size
        size_mb = total_size / MB

        if size_mb <= 1:
            return self.passed()

        if size_mb <= 2:
            return self.partial(
                0.7,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"Page size is acceptable ({size_mb:.2f}MB)",
                    "Consider reducing page size to under 1MB for faster loading on slower connections.",
                    size_mb=size_mb,
                ),
            )

        if size_mb <= 3:
            return self.partial(
                0.3,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Page size is large ({size_mb:.2f}MB)",
                    "Reduce page size. Compress and optimize images, remove unused CSS/JS, and enable Gzip compression.",
                    size_mb=size_mb,
                ),
            )

        return self.failed(
            self.issue(
                IssueSeverity.CRITICAL,
                f"Page size is too large ({size_mb:.2f}MB)",
                "Urgent: Significantly reduce page size. Optimize all images, lazy-load resources, "
                "and remove unnecessary assets.",
                size_mb=size_mb,
            )
        )


class RequestCountRule(AuditRule):
    id = "perf-requests"
    category = RuleCategory.PERFORMANCE
    name = "Request Count"
    description = "Ensure fewer than 50 HTTP requests"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        request_count = len(context.page.resources)

        if request_count <= 30:
            return self.passed()

        if request_count <= 50:
            return self.partial(
                0.7,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"Moderate number of HTTP requests ({request_count})",
                    "Consider reducing requests by combining files, using CSS sprites, or implementing lazy loading.",
                    request_count=request_count,
                ),
            )

        if request_count <= 100:
            return self.partial(
                0.3,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"High number of HTTP requests ({request_count})",
                    "Reduce HTTP requests. Combine CSS/JS files, use sprite sheets, lazy-load images, "
                    "and remove unused resources.",
                    request_count=request_count,
                ),
            )

        return self.failed(
            self.issue(
                IssueSeverity.CRITICAL,
                f"Excessive HTTP requests ({request_count})",
                "Urgent: Too many requests are slowing down your page. Audit and remove unnecessary resources, "
                "combine files, and implement aggressive caching.",
                request_count=request_count,
            )
        )


class PageSpeedScoreRule(AuditRule):
    id = "perf-psi-metrics"
    category = RuleCategory.PERFORMANCE
    name = "PageSpeed Performance Score"
    description = "Check the Lighthouse performance score reported by PageSpeed Insights"
    weight = 4

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        metrics = context.performance
        if metrics is None or metrics.performance_score is None:
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "PageSpeed performance score was not measured",
                    "Run a PageSpeed Insights analysis to get a Lighthouse performance score for this page.",
                )
            )

        score = max(0, min(100, metrics.performance_score))
        if score >= 90:
            return self.coverage(score / 100, True)

        top_opportunities = [o.get("title", o.get("id")) for o in metrics.opportunities[:3]]
        recommendation = "Work through the PageSpeed Insights opportunities"
        if top_opportunities:
            recommendation += f", starting with: {', '.join(top_opportunities)}"

        return self.coverage(
            score / 100,
            False,
            self.issue(
                IssueSeverity.WARNING if score >= 50 else IssueSeverity.CRITICAL,
                f"PageSpeed performance score is {score}/100 ({metrics.strategy})",
                recommendation + ".",
                performance_score=score,
                strategy=metrics.strategy,
                opportunities=metrics.opportunities[:3],
            ),
        )
